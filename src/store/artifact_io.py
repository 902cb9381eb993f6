"""Artifact writer and reader for instance slots.

Artifacts are opaque to the store: they are pickled into a single opaque
HDF5 field next to a capture-time timestamp. Read failures are enriched
with a raw description of what is actually stored before surfacing.
"""

from __future__ import annotations

from datetime import datetime, timezone
import pickle
from typing import Any

import h5py
import numpy as np

from core.constants import ARTIFACT_FIELD_NAME, INSTANCES_GROUP_NAME, TIMESTAMP_FIELD_NAME
from core.diagnostics import DiagnosticKind, DiagnosticLog
from core.errors import ArtifactReadError, ArtifactWriteError
from store.container import (
    create_group,
    delete_child,
    list_children,
    read_field,
    require_group,
    write_field,
)
from store.id_allocation import next_auto_id


def write_instance(
    run_group: h5py.Group,
    run_id: str,
    artifact: Any,
    diagnostics: DiagnosticLog,
) -> str:
    """Append one instance holding the artifact to a run.

    The instance group is created before the artifact is serialized, so a
    failed artifact write leaves an empty instance group behind.

    Args:
        run_group: Target run group.
        run_id: Run identifier, for error messages.
        artifact: Opaque artifact to persist.
        diagnostics: Sink for timestamp write failures.

    Returns:
        Allocated instance id.

    Raises:
        ArtifactWriteError: If the artifact cannot be serialized or written.
    """
    instances_group = require_group(run_group, INSTANCES_GROUP_NAME)
    instance_id = next_auto_id(list_children(instances_group))
    instance_group = create_group(instances_group, instance_id)
    try:
        payload = pickle.dumps(artifact, protocol=pickle.HIGHEST_PROTOCOL)
        write_field(instance_group, ARTIFACT_FIELD_NAME, np.void(payload))
    except (pickle.PicklingError, AttributeError, TypeError, ValueError, OSError) as error:
        raise ArtifactWriteError(
            f"Failed to write artifact of type {type(artifact).__name__} "
            f"to run '{run_id}' instance '{instance_id}': {error}. "
            "Artifacts must be picklable."
        ) from error
    try:
        write_field(instance_group, TIMESTAMP_FIELD_NAME, _utc_now_iso())
    except (TypeError, ValueError, OSError) as error:
        delete_child(instance_group, TIMESTAMP_FIELD_NAME)
        diagnostics.record(
            DiagnosticKind.TIMESTAMP_WRITE_FAILED,
            f"Timestamp not written for run '{run_id}' instance '{instance_id}': {error}.",
            run_id=run_id,
            instance_id=instance_id,
        )
    return instance_id


def read_artifact(
    instance_group: h5py.Group,
    run_id: str,
    instance_id: str,
    diagnostics: DiagnosticLog,
) -> Any:
    """Deserialize the artifact stored in one instance slot.

    Args:
        instance_group: Source instance group.
        run_id: Run identifier, for error messages.
        instance_id: Instance identifier, for error messages.
        diagnostics: Sink for the raw diagnostic read.

    Returns:
        The unpickled artifact.

    Raises:
        ArtifactReadError: If the stored field is absent or cannot be unpickled.
    """
    try:
        raw = read_field(instance_group, ARTIFACT_FIELD_NAME)
        return _deserialize(raw)
    except Exception as error:
        stored = describe_stored_field(instance_group, ARTIFACT_FIELD_NAME)
        diagnostics.record(
            DiagnosticKind.ARTIFACT_READ_FAILED,
            f"Artifact read failed for run '{run_id}' instance '{instance_id}'.",
            run_id=run_id,
            instance_id=instance_id,
            stored=stored,
        )
        raise ArtifactReadError(
            f"Failed to read artifact for run '{run_id}' instance '{instance_id}': "
            f"{type(error).__name__}: {error}. Stored field: {stored}."
        ) from error


def read_timestamp(instance_group: h5py.Group) -> str | None:
    """Read an instance timestamp, None when absent."""
    node = instance_group.get(TIMESTAMP_FIELD_NAME)
    if not isinstance(node, h5py.Dataset):
        return None
    if h5py.check_string_dtype(node.dtype) is not None:
        return str(node.asstr()[()])
    return str(node[()])


def describe_stored_field(group: h5py.Group, name: str) -> str:
    """Describe what is actually stored under a name, for diagnostics only."""
    node = group.get(name)
    if node is None:
        return f"missing (instance holds {sorted(group.keys())})"
    if isinstance(node, h5py.Group):
        return f"group with keys {sorted(node.keys())}"
    return f"dataset dtype={node.dtype} shape={node.shape}"


def _deserialize(raw: Any) -> Any:
    if not isinstance(raw, np.void):
        raise TypeError(f"expected opaque bytes, found {type(raw).__name__}")
    return pickle.loads(raw.tobytes())


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
