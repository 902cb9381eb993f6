"""Runtime configuration model for Runvault.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_PARAM_SAFETY, DEFAULT_STORE_PATH
from core.errors import RunVaultConfigError

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class RunVaultConfig:
    """Validated runtime configuration.

    Attributes:
        store_path: Container file holding system params, runs and instances.
        param_safety: Default system-param drift policy for batch saves.
        max_workers: Worker pool size for batch computations.
    """

    store_path: Path
    param_safety: bool
    max_workers: int

    @classmethod
    def from_env(cls) -> "RunVaultConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            RunVaultConfigError: If environment values are invalid.
        """
        store_path_value = os.getenv("RUNVAULT_STORE_PATH", str(DEFAULT_STORE_PATH))
        param_safety_value = os.getenv("RUNVAULT_PARAM_SAFETY")
        max_workers_value = os.getenv("RUNVAULT_MAX_WORKERS")
        return cls(
            store_path=Path(store_path_value).expanduser().resolve(),
            param_safety=_parse_param_safety(param_safety_value),
            max_workers=_parse_max_workers(max_workers_value),
        )


def _parse_param_safety(raw_value: str | None) -> bool:
    """Parse the param safety environment value.

    Args:
        raw_value: Raw string from environment, if set.

    Returns:
        Parsed boolean flag.

    Raises:
        RunVaultConfigError: If value is not a recognized boolean.
    """
    if raw_value is None:
        return DEFAULT_PARAM_SAFETY
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise RunVaultConfigError(
        "Invalid RUNVAULT_PARAM_SAFETY value: "
        f"expected a boolean, got '{raw_value}'. "
        "Set RUNVAULT_PARAM_SAFETY to true or false."
    )


def _parse_max_workers(raw_value: str | None) -> int:
    """Parse the worker pool size environment value.

    Args:
        raw_value: Raw string from environment, if set.

    Returns:
        Positive worker count, CPU count when unset.

    Raises:
        RunVaultConfigError: If value is not a positive integer.
    """
    if raw_value is None:
        return os.cpu_count() or 1
    try:
        max_workers = int(raw_value)
    except ValueError as error:
        raise RunVaultConfigError(
            "Invalid RUNVAULT_MAX_WORKERS value: "
            f"expected integer, got '{raw_value}'. "
            "Set RUNVAULT_MAX_WORKERS to a positive number."
        ) from error
    if max_workers < 1:
        raise RunVaultConfigError(
            f"Invalid RUNVAULT_MAX_WORKERS value: expected at least 1, got {max_workers}. "
            "Set RUNVAULT_MAX_WORKERS to a positive number."
        )
    return max_workers
