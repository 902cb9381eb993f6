"""Public SDK surface for Runvault.

This module provides a stable import path for store users.
It re-exports the store facade, batch coordinator, and typed models.
"""

from __future__ import annotations

from compute.batch_runner import run_batch, run_batch_from_config
from compute.computation import BatchResult, Computation, ComputationCache, ComputeTask
from compute.sweep import build_sweep_tasks
from core.config import RunVaultConfig
from core.diagnostics import Diagnostic, DiagnosticKind, DiagnosticLog
from core.errors import (
    ArtifactReadError,
    ArtifactWriteError,
    InvalidNameError,
    ParamSafetyViolation,
    RunVaultError,
    StructuralError,
)
from core.logging_config import configure_logging
from core.types import RunSummary, StoredInstance
from store.artifact_store import ArtifactStore

__all__ = [
    "ArtifactReadError",
    "ArtifactStore",
    "ArtifactWriteError",
    "BatchResult",
    "Computation",
    "ComputationCache",
    "ComputeTask",
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticLog",
    "InvalidNameError",
    "ParamSafetyViolation",
    "RunSummary",
    "RunVaultConfig",
    "RunVaultError",
    "StoredInstance",
    "StructuralError",
    "build_sweep_tasks",
    "configure_logging",
    "run_batch",
    "run_batch_from_config",
]
