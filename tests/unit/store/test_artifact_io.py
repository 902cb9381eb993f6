"""Unit tests for the artifact writer and reader."""

from __future__ import annotations

from pathlib import Path
import threading

import h5py
import numpy as np
import pytest

from core.diagnostics import DiagnosticKind, DiagnosticLog
from core.errors import ArtifactReadError, ArtifactWriteError
from store.artifact_io import (
    describe_stored_field,
    read_artifact,
    read_timestamp,
    write_instance,
)


def test_write_instance_allocates_sequential_ids(tmp_path: Path) -> None:
    """Instances should be numbered 1, 2, ... within a run."""
    with h5py.File(tmp_path / "artifacts.h5", "w") as handle:
        run_group = handle.create_group("run")
        first = write_instance(run_group, "run", {"energy": -1.5}, DiagnosticLog())
        second = write_instance(run_group, "run", {"energy": -1.6}, DiagnosticLog())

    assert (first, second) == ("1", "2")


def test_written_artifact_reads_back_with_timestamp(tmp_path: Path) -> None:
    """A written artifact should deserialize to an equal object."""
    artifact = {"tensors": [np.eye(2), np.ones(3)], "bond_dim": 12}
    with h5py.File(tmp_path / "artifacts.h5", "w") as handle:
        run_group = handle.create_group("run")
        write_instance(run_group, "run", artifact, DiagnosticLog())
        instance_group = run_group["instances"]["1"]
        loaded = read_artifact(instance_group, "run", "1", DiagnosticLog())
        timestamp = read_timestamp(instance_group)

    assert (
        loaded["bond_dim"] == 12
        and np.array_equal(loaded["tensors"][0], np.eye(2))
        and timestamp is not None
    )


def test_unpicklable_artifact_raises_and_leaves_instance_group(tmp_path: Path) -> None:
    """Serialization failures are fatal and leave the empty slot behind."""
    with h5py.File(tmp_path / "artifacts.h5", "w") as handle:
        run_group = handle.create_group("run")
        with pytest.raises(ArtifactWriteError):
            write_instance(run_group, "run", threading.Lock(), DiagnosticLog())
        leftover = sorted(run_group["instances"].keys())

    assert leftover == ["1"]


def test_corrupt_artifact_raises_with_raw_description(tmp_path: Path) -> None:
    """Unreadable blobs should raise with the stored type in the message."""
    diagnostics = DiagnosticLog(log_events=False)
    with h5py.File(tmp_path / "artifacts.h5", "w") as handle:
        instance_group = handle.create_group("1")
        instance_group.create_dataset("artifact", data=np.void(b"not a pickle"))
        with pytest.raises(ArtifactReadError) as excinfo:
            read_artifact(instance_group, "run", "1", diagnostics)

    assert (
        "dtype=|V12" in str(excinfo.value)
        and excinfo.value.__cause__ is not None
        and diagnostics.of_kind(DiagnosticKind.ARTIFACT_READ_FAILED)
    )


def test_non_opaque_artifact_field_raises(tmp_path: Path) -> None:
    """A typed numeric field is not a serialized artifact."""
    with h5py.File(tmp_path / "artifacts.h5", "w") as handle:
        instance_group = handle.create_group("1")
        instance_group.create_dataset("artifact", data=np.arange(4))
        with pytest.raises(ArtifactReadError) as excinfo:
            read_artifact(instance_group, "run", "1", DiagnosticLog(log_events=False))

    assert isinstance(excinfo.value.__cause__, TypeError)


def test_missing_artifact_field_raises(tmp_path: Path) -> None:
    """An instance without an artifact field should fail to read."""
    with h5py.File(tmp_path / "artifacts.h5", "w") as handle:
        instance_group = handle.create_group("1")
        with pytest.raises(ArtifactReadError) as excinfo:
            read_artifact(instance_group, "run", "1", DiagnosticLog(log_events=False))

    assert "missing" in str(excinfo.value)


def test_describe_stored_field_reports_group_keys(tmp_path: Path) -> None:
    """Mapping-like stored artifacts should be described by their keys."""
    with h5py.File(tmp_path / "artifacts.h5", "w") as handle:
        instance_group = handle.create_group("1")
        legacy = instance_group.create_group("artifact")
        legacy.create_dataset("length", data=4)
        legacy.create_dataset("MPS[1]", data=np.zeros(2))
        description = describe_stored_field(instance_group, "artifact")

    assert description == "group with keys ['MPS[1]', 'length']"


def test_read_timestamp_returns_none_when_absent(tmp_path: Path) -> None:
    """Missing timestamps are legal and read as None."""
    with h5py.File(tmp_path / "artifacts.h5", "w") as handle:
        instance_group = handle.create_group("1")
        timestamp = read_timestamp(instance_group)

    assert timestamp is None


def test_timestamp_write_failure_keeps_instance(tmp_path: Path, monkeypatch) -> None:
    """A timestamp that cannot be stored is dropped with a diagnostic."""
    monkeypatch.setattr("store.artifact_io._utc_now_iso", lambda: object())
    diagnostics = DiagnosticLog(log_events=False)
    with h5py.File(tmp_path / "artifacts.h5", "w") as handle:
        run_group = handle.create_group("run")
        instance_id = write_instance(run_group, "run", {"energy": -1.5}, diagnostics)
        instance_group = run_group["instances"][instance_id]
        loaded = read_artifact(instance_group, "run", instance_id, diagnostics)
        timestamp = read_timestamp(instance_group)

    assert (
        instance_id == "1"
        and loaded == {"energy": -1.5}
        and timestamp is None
        and len(diagnostics.of_kind(DiagnosticKind.TIMESTAMP_WRITE_FAILED)) == 1
    )
