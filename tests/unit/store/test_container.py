"""Unit tests for the HDF5 container adapter."""

from __future__ import annotations

from pathlib import Path

import h5py
import pytest

from core.errors import StructuralError
from store.container import delete_child, has_child, is_group, open_container


def test_has_child_sees_groups_and_fields(tmp_path: Path) -> None:
    """Both groups and datasets count as children."""
    with h5py.File(tmp_path / "container.h5", "w") as handle:
        handle.create_group("runs")
        handle.create_dataset("timestamp", data="2026-01-01")
        present = (has_child(handle, "runs"), has_child(handle, "timestamp"))
        absent = has_child(handle, "artifact")

    assert present == (True, True) and not absent


def test_is_group_rejects_fields(tmp_path: Path) -> None:
    """A dataset child should not be reported as a group."""
    with h5py.File(tmp_path / "container.h5", "w") as handle:
        handle.create_dataset("runs", data=1)
        result = is_group(handle, "runs")

    assert not result


def test_delete_child_ignores_missing_names(tmp_path: Path) -> None:
    """Deleting an absent child should be a no-op."""
    with h5py.File(tmp_path / "container.h5", "w") as handle:
        handle.create_group("runs")
        delete_child(handle, "absent")
        delete_child(handle, "runs")
        remaining = sorted(handle.keys())

    assert remaining == []


def test_open_container_for_reading_requires_file(tmp_path: Path) -> None:
    """Reading a missing container should fail with a structural error."""
    with pytest.raises(StructuralError):
        with open_container(tmp_path / "absent.h5", "read"):
            pass


def test_open_container_for_reading_rejects_non_hdf5(tmp_path: Path) -> None:
    """Reading a file that is not HDF5 should fail with a structural error."""
    path = tmp_path / "runs.h5"
    path.write_text("not a container")

    with pytest.raises(StructuralError):
        with open_container(path, "read"):
            pass


def test_open_container_for_writing_creates_parents(tmp_path: Path) -> None:
    """Write sessions should create the file and missing parent directories."""
    path = tmp_path / "nested" / "runs.h5"

    with open_container(path, "write") as handle:
        handle.create_group("runs")

    assert path.is_file()
