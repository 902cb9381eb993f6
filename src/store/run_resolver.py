"""Run identity resolution.

This module decides whether a save appends to an existing run or opens a
new run slot. Without an explicit id, the first stored run whose decoded
params equal the requested params is reused. An explicit id always opens
a fresh slot, suffixed on collision, even when params match.
"""

from __future__ import annotations

from typing import Any, Mapping

import h5py

from core.constants import RUN_PARAMS_GROUP_NAME
from core.diagnostics import DiagnosticLog
from core.types import RunResolution
from store.container import is_group, list_children
from store.id_allocation import next_auto_id, resolve_explicit_id
from store.value_codec import canonicalize_params, decode_group, params_equal


def resolve_run(
    runs_group: h5py.Group,
    requested_params: Mapping[str, Any],
    diagnostics: DiagnosticLog,
    explicit_id: str | None = None,
) -> RunResolution:
    """Resolve the run that the next instance belongs to.

    Args:
        runs_group: The store's ``runs`` group.
        requested_params: Run params supplied by the caller.
        diagnostics: Sink for decode fallbacks on stored params.
        explicit_id: Optional caller-chosen run id.

    Returns:
        ``reuse`` with an existing run id, or ``create`` with a free id.
    """
    existing_names = list_children(runs_group)
    if explicit_id is not None:
        return RunResolution(
            run_id=resolve_explicit_id(existing_names, explicit_id),
            action="create",
        )
    matched = find_matching_run(runs_group, requested_params, diagnostics)
    if matched is not None:
        return RunResolution(run_id=matched, action="reuse")
    return RunResolution(run_id=next_auto_id(existing_names), action="create")


def find_matching_run(
    runs_group: h5py.Group,
    requested_params: Mapping[str, Any],
    diagnostics: DiagnosticLog,
) -> str | None:
    """Return the first run whose stored params equal the requested ones.

    Runs are scanned in the container's own key order. Runs without a
    params group cannot match and are passed over.
    """
    canonical = canonicalize_params(requested_params)
    for run_id in runs_group.keys():
        run_group = runs_group[run_id]
        if not isinstance(run_group, h5py.Group):
            continue
        if not is_group(run_group, RUN_PARAMS_GROUP_NAME):
            continue
        stored = decode_group(run_group[RUN_PARAMS_GROUP_NAME], diagnostics)
        if params_equal(stored, canonical):
            return run_id
    return None
