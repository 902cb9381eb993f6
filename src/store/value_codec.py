"""Parameter value and parameter group codecs.

This module converts dynamically-typed parameter values into typed HDF5
datasets and back. Values outside the supported set degrade to their
string form and emit an encoding-fallback diagnostic instead of failing.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping
from uuid import uuid4

import h5py
import numpy as np

from core.constants import RESERVED_NAMES
from core.diagnostics import DiagnosticKind, DiagnosticLog
from core.errors import InvalidNameError
from store.container import create_group, delete_child, list_children, write_field

_NUMERIC_KINDS = frozenset("biufc")
_WRITE_ERRORS = (TypeError, ValueError, OverflowError)
_READ_ERRORS = (OSError, TypeError, ValueError, KeyError)


class ParamKind(str, Enum):
    """Closed set of parameter value variants."""

    INTEGER = "integer"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"
    NUMERIC_ARRAY = "numeric_array"
    OTHER = "other"


def classify_value(value: Any) -> ParamKind:
    """Map a Python or numpy value onto its parameter variant.

    Args:
        value: Candidate parameter value.

    Returns:
        Matching parameter kind, ``OTHER`` when unsupported.
    """
    if isinstance(value, (bool, np.bool_)):
        return ParamKind.BOOL
    if isinstance(value, (int, np.integer)):
        return ParamKind.INTEGER
    if isinstance(value, (float, np.floating)):
        return ParamKind.FLOAT
    if isinstance(value, str):
        return ParamKind.STRING
    if isinstance(value, (np.ndarray, list, tuple)):
        array = _as_numeric_array(value)
        if array is not None:
            return ParamKind.NUMERIC_ARRAY
    return ParamKind.OTHER


def validate_name(name: object, what: str) -> str:
    """Validate that a key or id can name one container child.

    Args:
        name: Candidate name.
        what: Description used in error messages.

    Returns:
        The validated name.

    Raises:
        InvalidNameError: If the name is empty, nested, or reserved.
    """
    if not isinstance(name, str) or not name:
        raise InvalidNameError(f"Invalid {what} {name!r}: expected a non-empty string.")
    if "/" in name or name in RESERVED_NAMES:
        raise InvalidNameError(
            f"Invalid {what} {name!r}: names must not contain '/' or be '.'. "
            "Rename the entry before saving."
        )
    try:
        name.encode("utf-8")
    except UnicodeEncodeError as error:
        raise InvalidNameError(
            f"Invalid {what} {name!r}: names must be valid UTF-8 text."
        ) from error
    return name


def encode_value(
    group: h5py.Group,
    key: str,
    value: Any,
    diagnostics: DiagnosticLog,
) -> ParamKind:
    """Write one parameter value as a typed dataset.

    Args:
        group: Destination parameter group.
        key: Parameter name.
        value: Parameter value.
        diagnostics: Sink for encoding-fallback events.

    Returns:
        Kind actually written, ``STRING`` after a fallback.
    """
    kind = classify_value(value)
    if kind is ParamKind.OTHER:
        _write_fallback(group, key, value, diagnostics, reason="unsupported type")
        return ParamKind.STRING
    native = _native_form(kind, value)
    try:
        write_field(group, key, native)
    except _WRITE_ERRORS as error:
        delete_child(group, key)
        _write_fallback(group, key, value, diagnostics, reason=str(error))
        return ParamKind.STRING
    return kind


def decode_value(group: h5py.Group, key: str, diagnostics: DiagnosticLog) -> Any:
    """Read one parameter dataset back into a Python value.

    Args:
        group: Source parameter group.
        key: Parameter name.
        diagnostics: Sink for encoding-fallback events.

    Returns:
        Python scalar, numpy array, or string form after a fallback.
    """
    node = group.get(key)
    if not isinstance(node, h5py.Dataset):
        children = sorted(node.keys()) if isinstance(node, h5py.Group) else []
        return _read_fallback(key, str(children), diagnostics, reason="not a dataset")
    try:
        if h5py.check_string_dtype(node.dtype) is not None:
            if node.shape == ():
                return node.asstr()[()]
            return _read_fallback(key, _raw_string(node), diagnostics, reason="string array")
        raw = node[()]
    except _READ_ERRORS as error:
        return _read_fallback(key, _raw_string(node), diagnostics, reason=str(error))
    if isinstance(raw, np.ndarray) and raw.dtype.kind in _NUMERIC_KINDS:
        return raw
    if isinstance(raw, np.bool_):
        return bool(raw)
    if isinstance(raw, np.integer):
        return int(raw)
    if isinstance(raw, np.floating):
        return float(raw)
    return _read_fallback(key, str(raw), diagnostics, reason=f"unsupported dtype {node.dtype}")


def encode_group(
    parent: h5py.Group,
    name: str,
    params: Mapping[str, Any],
    diagnostics: DiagnosticLog,
) -> h5py.Group:
    """Create a parameter group and encode every key into it.

    Args:
        parent: Group receiving the new child.
        name: Child group name.
        params: Parameter mapping.
        diagnostics: Sink for encoding-fallback events.

    Returns:
        The populated group.
    """
    group = create_group(parent, name)
    for key, value in params.items():
        encode_value(group, validate_name(key, "parameter key"), value, diagnostics)
    return group


def decode_group(group: h5py.Group, diagnostics: DiagnosticLog) -> dict[str, Any]:
    """Decode every key present in a parameter group."""
    return {key: decode_value(group, key, diagnostics) for key in sorted(list_children(group))}


def canonicalize_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Round-trip a mapping through the group codec in memory.

    The result is what a write followed by a read would produce, so it
    compares against stored parameter groups exactly.

    Args:
        params: Requested parameter mapping.

    Returns:
        Decoded mapping after an in-memory encode/decode cycle.
    """
    scratch_log = DiagnosticLog(log_events=False)
    scratch_name = f"runvault-canonical-{uuid4().hex}.h5"
    with h5py.File(scratch_name, "w", driver="core", backing_store=False) as scratch:
        group = encode_group(scratch, "params", params, scratch_log)
        return decode_group(group, scratch_log)


def values_equal(left: Any, right: Any) -> bool:
    """Compare two decoded values under their variant's equality."""
    left_kind = classify_value(left)
    if left_kind is not classify_value(right):
        return False
    if left_kind is ParamKind.NUMERIC_ARRAY:
        left_array = np.asarray(left)
        right_array = np.asarray(right)
        return left_array.shape == right_array.shape and bool(
            np.array_equal(left_array, right_array)
        )
    return bool(left == right)


def params_equal(left: Mapping[str, Any], right: Mapping[str, Any]) -> bool:
    """Compare two decoded mappings key-for-key and value-for-value."""
    if set(left) != set(right):
        return False
    return all(values_equal(left[key], right[key]) for key in left)


def _as_numeric_array(value: Any) -> np.ndarray | None:
    try:
        array = np.asarray(value)
    except (TypeError, ValueError):
        return None
    if array.ndim == 0 or array.dtype.kind not in _NUMERIC_KINDS:
        return None
    return array


def _native_form(kind: ParamKind, value: Any) -> Any:
    if kind is ParamKind.BOOL:
        return np.bool_(value)
    if kind is ParamKind.FLOAT:
        return np.float64(value)
    if kind is ParamKind.NUMERIC_ARRAY:
        return np.asarray(value)
    return value


def _write_fallback(
    group: h5py.Group,
    key: str,
    value: Any,
    diagnostics: DiagnosticLog,
    reason: str,
) -> None:
    write_field(group, key, _encodable_text(value))
    diagnostics.record(
        DiagnosticKind.ENCODING_FALLBACK,
        f"Parameter '{key}' stored as string: {reason}.",
        key=key,
        value_type=type(value).__name__,
        direction="write",
    )


def _read_fallback(key: str, text: str, diagnostics: DiagnosticLog, reason: str) -> str:
    diagnostics.record(
        DiagnosticKind.ENCODING_FALLBACK,
        f"Parameter '{key}' decoded as string: {reason}.",
        key=key,
        direction="read",
    )
    return text


def _encodable_text(value: Any) -> str:
    # HDF5 strings are UTF-8; lone surrogates are escaped
    return str(value).encode("utf-8", "backslashreplace").decode("utf-8")


def _raw_string(dataset: h5py.Dataset) -> str:
    try:
        return str(dataset[()])
    except _READ_ERRORS:
        return repr(dataset)
