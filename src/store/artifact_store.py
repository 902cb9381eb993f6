"""Parameter-indexed artifact store facade.

This module is the public surface of the store: save, load, load-all,
run description, and system-param lookup. Every call runs inside one
scoped container session that is closed on every exit path.

File layout::

    /system_params                                   key -> typed field
    /runs/<run_id>/params                            key -> typed field
    /runs/<run_id>/instances/<instance_id>/artifact  opaque pickled blob
    /runs/<run_id>/instances/<instance_id>/timestamp string, optional
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import h5py

from core.config import RunVaultConfig
from core.constants import (
    INSTANCES_GROUP_NAME,
    RUN_PARAMS_GROUP_NAME,
    RUNS_GROUP_NAME,
    SYSTEM_PARAMS_GROUP_NAME,
)
from core.diagnostics import DiagnosticKind, DiagnosticLog
from core.errors import ParamSafetyViolation, StructuralError
from core.logging_config import get_logger
from core.types import RunSummary, StoredInstance
from store.artifact_io import read_artifact, read_timestamp, write_instance
from store.container import (
    create_group,
    is_group,
    list_children,
    open_container,
    require_group,
)
from store.id_allocation import latest_name, ordered_names
from store.run_resolver import resolve_run
from store.value_codec import decode_group, encode_group, validate_name

_LOGGER = get_logger(__name__)


class ArtifactStore:
    """Versioned, parameter-indexed artifact store backed by one HDF5 file.

    Saves with equal run params (and no explicit run id) append instances
    to the same run. The store assumes a single writer per file; callers
    that compute in parallel should funnel saves through one coordinator.
    """

    def __init__(self, store_path: Path, diagnostics: DiagnosticLog | None = None) -> None:
        """Initialize the store facade.

        Args:
            store_path: Container file path; created on first save.
            diagnostics: Optional diagnostic sink shared with the caller.
        """
        self._store_path = Path(store_path).expanduser()
        self._diagnostics = diagnostics or DiagnosticLog()

    @classmethod
    def from_config(cls, config: RunVaultConfig) -> "ArtifactStore":
        """Build a store from runtime configuration."""
        return cls(config.store_path)

    @property
    def store_path(self) -> Path:
        """Container file backing this store."""
        return self._store_path

    @property
    def diagnostics(self) -> DiagnosticLog:
        """Non-fatal events recorded by this store."""
        return self._diagnostics

    def save(
        self,
        artifact: Any,
        system_params: Mapping[str, Any],
        run_params: Mapping[str, Any],
        run_id: str | None = None,
        param_safety: bool = True,
    ) -> str:
        """Persist one artifact as a new instance of a run.

        Args:
            artifact: Opaque picklable computation result.
            system_params: Store-wide params; written on the first save only.
            run_params: Params identifying the logical run.
            run_id: Optional explicit run id; always opens a fresh run slot.
            param_safety: Abort when system params carry keys the store lacks.

        Returns:
            Run id the instance was written to.

        Raises:
            InvalidNameError: If a key or the run id cannot name a child.
            ParamSafetyViolation: If system params drifted and safety is on.
            ArtifactWriteError: If the artifact cannot be serialized.
        """
        _validate_keys(system_params, "system param key")
        _validate_keys(run_params, "run param key")
        if run_id is not None:
            validate_name(run_id, "run id")
        with open_container(self._store_path, "write") as handle:
            self._apply_system_params_policy(handle, system_params, param_safety)
            runs_group = require_group(handle, RUNS_GROUP_NAME)
            resolution = resolve_run(runs_group, run_params, self._diagnostics, explicit_id=run_id)
            if resolution.created:
                run_group = create_group(runs_group, resolution.run_id)
                encode_group(run_group, RUN_PARAMS_GROUP_NAME, run_params, self._diagnostics)
                _LOGGER.info("run_created", store_path=str(self._store_path), run_id=resolution.run_id)
            else:
                run_group = runs_group[resolution.run_id]
            instance_id = write_instance(
                run_group, resolution.run_id, artifact, self._diagnostics
            )
        _LOGGER.info(
            "instance_saved",
            store_path=str(self._store_path),
            run_id=resolution.run_id,
            instance_id=instance_id,
            action=resolution.action,
        )
        return resolution.run_id

    def load(self, run_id: str | None = None) -> tuple[Any, dict[str, Any], dict[str, Any]]:
        """Load the latest instance of one run.

        Args:
            run_id: Optional run id; the most recent run when omitted.

        Returns:
            Triple of artifact, system params, and run params.

        Raises:
            StructuralError: If the layout is incomplete or the run is unknown.
            ArtifactReadError: If the artifact cannot be deserialized.
        """
        with open_container(self._store_path, "read") as handle:
            system_group, runs_group = _require_store_groups(handle, self._store_path)
            run_names = list_children(runs_group)
            if not run_names:
                raise StructuralError(
                    f"Store {self._store_path} has no runs. Save a run before loading."
                )
            target_id = run_id if run_id is not None else latest_name(run_names)
            if target_id is None or target_id not in run_names:
                raise StructuralError(
                    f"Run '{target_id}' not found in {self._store_path}. "
                    f"Available runs: {', '.join(ordered_names(run_names))}."
                )
            params_group, instances_group = _require_fresh_layout(runs_group, target_id)
            instance_names = list_children(instances_group)
            instance_id = latest_name(instance_names)
            if instance_id is None:
                raise StructuralError(
                    f"Run '{target_id}' in {self._store_path} has no instances. "
                    "The run may be incomplete."
                )
            instance_group = _require_instance_group(instances_group, target_id, instance_id)
            artifact = read_artifact(instance_group, target_id, instance_id, self._diagnostics)
            system_params = decode_group(system_group, self._diagnostics)
            run_params = decode_group(params_group, self._diagnostics)
        _LOGGER.info(
            "store_loaded",
            store_path=str(self._store_path),
            run_id=target_id,
            instance_id=instance_id,
        )
        return artifact, system_params, run_params

    def load_all(self) -> tuple[dict[str, Any], tuple[StoredInstance, ...]]:
        """Load every instance of every compatible run in ascending order.

        Runs missing their params or instances group are skipped with a
        diagnostic; a failing artifact read still aborts the enumeration.

        Returns:
            Pair of system params and ordered stored instances.

        Raises:
            StructuralError: If the store root groups are missing.
            ArtifactReadError: If any artifact cannot be deserialized.
        """
        stored: list[StoredInstance] = []
        with open_container(self._store_path, "read") as handle:
            system_group, runs_group = _require_store_groups(handle, self._store_path)
            system_params = decode_group(system_group, self._diagnostics)
            for run_id in ordered_names(list_children(runs_group)):
                if not _has_fresh_layout(runs_group, run_id):
                    self._diagnostics.record(
                        DiagnosticKind.INCOMPATIBLE_RUN_SKIPPED,
                        f"Run '{run_id}' lacks '{RUN_PARAMS_GROUP_NAME}' or "
                        f"'{INSTANCES_GROUP_NAME}' and was skipped.",
                        run_id=run_id,
                    )
                    continue
                run_group = runs_group[run_id]
                run_params = decode_group(run_group[RUN_PARAMS_GROUP_NAME], self._diagnostics)
                instances_group = run_group[INSTANCES_GROUP_NAME]
                for instance_id in ordered_names(list_children(instances_group)):
                    instance_group = _require_instance_group(instances_group, run_id, instance_id)
                    stored.append(
                        StoredInstance(
                            run_id=run_id,
                            instance_id=instance_id,
                            artifact=read_artifact(
                                instance_group, run_id, instance_id, self._diagnostics
                            ),
                            run_params=dict(run_params),
                            timestamp=read_timestamp(instance_group),
                        )
                    )
        _LOGGER.info(
            "store_enumerated",
            store_path=str(self._store_path),
            instance_count=len(stored),
        )
        return system_params, tuple(stored)

    def describe_runs(self) -> tuple[RunSummary, ...]:
        """Describe every run without deserializing artifacts.

        Returns:
            Run summaries in enumeration order, incompatible runs included.

        Raises:
            StructuralError: If the store file or its runs group is missing.
        """
        with open_container(self._store_path, "read") as handle:
            if not is_group(handle, RUNS_GROUP_NAME):
                raise StructuralError(
                    f"Store {self._store_path} has no '{RUNS_GROUP_NAME}' group. "
                    "Save a run before listing."
                )
            runs_group = handle[RUNS_GROUP_NAME]
            return tuple(
                _summarize_run(runs_group, run_id, self._diagnostics)
                for run_id in ordered_names(list_children(runs_group))
            )

    def get_system_params(self) -> dict[str, Any] | None:
        """Return stored system params, None with a diagnostic when absent."""
        if not self._store_path.is_file():
            self._record_missing_system_params("store file does not exist")
            return None
        with open_container(self._store_path, "read") as handle:
            if not is_group(handle, SYSTEM_PARAMS_GROUP_NAME):
                self._record_missing_system_params("system params group is absent")
                return None
            return decode_group(handle[SYSTEM_PARAMS_GROUP_NAME], self._diagnostics)

    def _apply_system_params_policy(
        self,
        handle: h5py.File,
        system_params: Mapping[str, Any],
        param_safety: bool,
    ) -> None:
        if not is_group(handle, SYSTEM_PARAMS_GROUP_NAME):
            encode_group(handle, SYSTEM_PARAMS_GROUP_NAME, system_params, self._diagnostics)
            _LOGGER.info(
                "system_params_written",
                store_path=str(self._store_path),
                keys=sorted(system_params),
            )
            return
        stored_keys = list_children(handle[SYSTEM_PARAMS_GROUP_NAME])
        drifted = [key for key in system_params if key not in stored_keys]
        for key in drifted:
            self._diagnostics.record(
                DiagnosticKind.SYSTEM_PARAM_DRIFT,
                f"System param '{key}' is not present in the stored system params.",
                key=key,
                param_safety=param_safety,
            )
        if drifted and param_safety:
            raise ParamSafetyViolation(
                f"System params for {self._store_path} carry keys absent from the store: "
                f"{', '.join(drifted)}. Stored system params are immutable; use a new store "
                "file or pass param_safety=False to save anyway."
            )

    def _record_missing_system_params(self, reason: str) -> None:
        self._diagnostics.record(
            DiagnosticKind.SYSTEM_PARAMS_MISSING,
            f"No system params in {self._store_path}: {reason}.",
            store_path=str(self._store_path),
        )


def _validate_keys(params: Mapping[str, Any], what: str) -> None:
    for key in params:
        validate_name(key, what)


def _require_store_groups(handle: h5py.File, store_path: Path) -> tuple[h5py.Group, h5py.Group]:
    for name in (SYSTEM_PARAMS_GROUP_NAME, RUNS_GROUP_NAME):
        if not is_group(handle, name):
            raise StructuralError(
                f"Store {store_path} is missing the '{name}' group. "
                "The file was not written by this store or is incomplete."
            )
    return handle[SYSTEM_PARAMS_GROUP_NAME], handle[RUNS_GROUP_NAME]


def _has_fresh_layout(runs_group: h5py.Group, run_id: str) -> bool:
    if not is_group(runs_group, run_id):
        return False
    run_group = runs_group[run_id]
    return is_group(run_group, RUN_PARAMS_GROUP_NAME) and is_group(run_group, INSTANCES_GROUP_NAME)


def _require_fresh_layout(runs_group: h5py.Group, run_id: str) -> tuple[h5py.Group, h5py.Group]:
    if not _has_fresh_layout(runs_group, run_id):
        raise StructuralError(
            f"Run '{run_id}' lacks '{RUN_PARAMS_GROUP_NAME}' or '{INSTANCES_GROUP_NAME}'. "
            "It uses a legacy or incompatible layout and cannot be loaded."
        )
    run_group = runs_group[run_id]
    return run_group[RUN_PARAMS_GROUP_NAME], run_group[INSTANCES_GROUP_NAME]


def _require_instance_group(
    instances_group: h5py.Group,
    run_id: str,
    instance_id: str,
) -> h5py.Group:
    if not is_group(instances_group, instance_id):
        raise StructuralError(
            f"Instance '{instance_id}' of run '{run_id}' is not a group. "
            "The store file is corrupt."
        )
    return instances_group[instance_id]


def _summarize_run(runs_group: h5py.Group, run_id: str, diagnostics: DiagnosticLog) -> RunSummary:
    run_node = runs_group[run_id]
    if not isinstance(run_node, h5py.Group):
        return RunSummary(run_id=run_id, run_params=None, instance_ids=(), compatible=False)
    run_params = None
    if is_group(run_node, RUN_PARAMS_GROUP_NAME):
        run_params = decode_group(run_node[RUN_PARAMS_GROUP_NAME], diagnostics)
    instance_ids: tuple[str, ...] = ()
    if is_group(run_node, INSTANCES_GROUP_NAME):
        instance_ids = tuple(ordered_names(list_children(run_node[INSTANCES_GROUP_NAME])))
    return RunSummary(
        run_id=run_id,
        run_params=run_params,
        instance_ids=instance_ids,
        compatible=_has_fresh_layout(runs_group, run_id),
    )
