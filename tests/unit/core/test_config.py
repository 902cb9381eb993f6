"""Unit tests for core config parsing."""

from __future__ import annotations

import os

import pytest

from core.config import RunVaultConfig
from core.errors import RunVaultConfigError


def test_from_env_reads_store_path(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve the store path from environment."""
    monkeypatch.setenv("RUNVAULT_STORE_PATH", "./.tmp-runvault/runs.h5")

    config = RunVaultConfig.from_env()

    assert config.store_path.name == "runs.h5" and config.store_path.is_absolute()


def test_from_env_defaults_param_safety_on(monkeypatch: pytest.MonkeyPatch) -> None:
    """Param safety should be enabled unless explicitly disabled."""
    monkeypatch.delenv("RUNVAULT_PARAM_SAFETY", raising=False)

    config = RunVaultConfig.from_env()

    assert config.param_safety is True


def test_from_env_parses_disabled_param_safety(monkeypatch: pytest.MonkeyPatch) -> None:
    """Falsy spellings should disable param safety."""
    monkeypatch.setenv("RUNVAULT_PARAM_SAFETY", "Off")

    config = RunVaultConfig.from_env()

    assert config.param_safety is False


def test_from_env_raises_for_invalid_param_safety(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for unrecognized boolean spellings."""
    monkeypatch.setenv("RUNVAULT_PARAM_SAFETY", "maybe")

    with pytest.raises(RunVaultConfigError):
        RunVaultConfig.from_env()

    assert os.getenv("RUNVAULT_PARAM_SAFETY") == "maybe"


def test_from_env_reads_max_workers(monkeypatch: pytest.MonkeyPatch) -> None:
    """Worker count should be parsed from environment."""
    monkeypatch.setenv("RUNVAULT_MAX_WORKERS", "3")

    config = RunVaultConfig.from_env()

    assert config.max_workers == 3


@pytest.mark.parametrize("raw_value", ["zero", "0", "-2"])
def test_from_env_raises_for_invalid_max_workers(
    monkeypatch: pytest.MonkeyPatch, raw_value: str
) -> None:
    """Config should fail for non-numeric or non-positive worker counts."""
    monkeypatch.setenv("RUNVAULT_MAX_WORKERS", raw_value)

    with pytest.raises(RunVaultConfigError):
        RunVaultConfig.from_env()
