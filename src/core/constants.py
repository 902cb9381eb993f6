"""Core constants used across Runvault modules.

This module centralizes container layout names and defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_STORE_PATH = Path("data") / "runs.h5"
DEFAULT_PARAM_SAFETY = True
SYSTEM_PARAMS_GROUP_NAME = "system_params"
RUNS_GROUP_NAME = "runs"
RUN_PARAMS_GROUP_NAME = "params"
INSTANCES_GROUP_NAME = "instances"
ARTIFACT_FIELD_NAME = "artifact"
TIMESTAMP_FIELD_NAME = "timestamp"
FIRST_AUTO_ID = 1
EXPLICIT_ID_SEPARATOR = "_"
RESERVED_NAMES = (".",)
