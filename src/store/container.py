"""HDF5 container adapter.

This module isolates h5py file sessions and group/field primitives so
the codec, resolver, and facade layers never touch file modes directly.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Literal

import h5py

from core.errors import StructuralError

ContainerMode = Literal["read", "write"]
_H5PY_MODES: dict[ContainerMode, str] = {"read": "r", "write": "a"}


@contextmanager
def open_container(path: Path, mode: ContainerMode) -> Iterator[h5py.File]:
    """Open one scoped container session.

    Args:
        path: Container file path.
        mode: ``read`` for read-only, ``write`` for read-write-create.

    Yields:
        Open h5py file handle, closed on every exit path.

    Raises:
        StructuralError: If a file opened for reading is missing or unreadable.
    """
    if mode == "read":
        if not path.is_file():
            raise StructuralError(
                f"Store file not found at {path}. Save at least one run before loading."
            )
        try:
            handle = h5py.File(path, _H5PY_MODES[mode])
        except OSError as error:
            raise StructuralError(
                f"Failed to open store file {path} for reading: {error}. "
                "Check that it is a valid HDF5 container."
            ) from error
    else:
        path.parent.mkdir(parents=True, exist_ok=True)
        handle = h5py.File(path, _H5PY_MODES[mode])
    try:
        yield handle
    finally:
        handle.close()


def has_child(group: h5py.Group, name: str) -> bool:
    """Return whether a direct child of any kind exists."""
    return name in group


def is_group(group: h5py.Group, name: str) -> bool:
    """Return whether a direct child exists and is itself a group."""
    return has_child(group, name) and isinstance(group[name], h5py.Group)


def create_group(parent: h5py.Group, name: str) -> h5py.Group:
    """Create a new child group; fails if the name is taken."""
    return parent.create_group(name)


def require_group(parent: h5py.Group, name: str) -> h5py.Group:
    """Return an existing child group or create it."""
    return parent.require_group(name)


def list_children(group: h5py.Group) -> set[str]:
    """Return the names of all direct children."""
    return set(group.keys())


def read_field(group: h5py.Group, name: str) -> Any:
    """Read the full value of a dataset child."""
    return group[name][()]


def write_field(group: h5py.Group, name: str, value: Any) -> h5py.Dataset:
    """Write a value as a new dataset child."""
    return group.create_dataset(name, data=value)


def delete_child(group: h5py.Group, name: str) -> None:
    """Unlink a child if present."""
    if has_child(group, name):
        del group[name]
