"""Runvault exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class RunVaultError(Exception):
    """Base exception for all Runvault failures."""


class RunVaultConfigError(RunVaultError):
    """Raised for invalid runtime configuration."""


class RunVaultStoreError(RunVaultError):
    """Raised for artifact store persistence failures."""


class StructuralError(RunVaultStoreError):
    """Raised when a required group or field is absent from a store file."""


class ParamSafetyViolation(RunVaultStoreError):
    """Raised when supplied system params drift from the stored ones."""


class ArtifactWriteError(RunVaultStoreError):
    """Raised when an artifact cannot be serialized into an instance slot."""


class ArtifactReadError(RunVaultStoreError):
    """Raised when a stored artifact cannot be deserialized."""


class InvalidNameError(RunVaultStoreError):
    """Raised for parameter keys or run ids that cannot name a container child."""


class RunVaultComputeError(RunVaultError):
    """Raised for invalid batch computation requests."""
