"""Shared typed models.

This module defines immutable run resolution and result models
used by the store, compute, and CLI layers to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

RunAction = Literal["reuse", "create"]


@dataclass(frozen=True)
class RunResolution:
    """Outcome of matching requested run params against stored runs.

    Attributes:
        run_id: Run to append the next instance to.
        action: ``reuse`` for an existing run, ``create`` for a new slot.
    """

    run_id: str
    action: RunAction

    @property
    def created(self) -> bool:
        """Whether the resolution requires a new run group."""
        return self.action == "create"


@dataclass(frozen=True)
class StoredInstance:
    """One persisted instance returned by ``load_all``.

    Attributes:
        run_id: Owning run identifier.
        instance_id: Instance identifier within the run.
        artifact: Deserialized artifact.
        run_params: Decoded run parameter mapping.
        timestamp: Capture-time string, None when absent.
    """

    run_id: str
    instance_id: str
    artifact: Any
    run_params: dict[str, Any]
    timestamp: str | None


@dataclass(frozen=True)
class RunSummary:
    """Artifact-free description of one stored run.

    Attributes:
        run_id: Run identifier.
        run_params: Decoded run params, None when the group is absent.
        instance_ids: Ordered instance ids, empty when absent.
        compatible: Whether the run has both params and instances groups.
    """

    run_id: str
    run_params: dict[str, Any] | None
    instance_ids: tuple[str, ...]
    compatible: bool
