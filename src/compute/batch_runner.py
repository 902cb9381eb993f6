"""Parallel computation with a single sequential store writer.

Workers only compute; they never touch the store. Once every artifact is
collected, the coordinator saves them one by one in task order, so the
store's single-writer assumption holds without any locking.
"""

from __future__ import annotations

from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
import time
from typing import Any, Mapping, Sequence

from compute.computation import BatchResult, Computation, ComputationCache, ComputeTask
from core.config import RunVaultConfig
from core.errors import RunVaultComputeError
from core.logging_config import get_logger
from store.artifact_store import ArtifactStore

_LOGGER = get_logger(__name__)


def run_batch(
    store: ArtifactStore,
    computation: Computation,
    tasks: Sequence[ComputeTask],
    system_params: Mapping[str, Any],
    max_workers: int,
    use_processes: bool = False,
    param_safety: bool = True,
    cache: ComputationCache | None = None,
) -> tuple[BatchResult, ...]:
    """Compute every task in parallel, then save results sequentially.

    Args:
        store: Destination store; only this coordinator writes to it.
        computation: Artifact-producing callable; must be picklable for processes.
        tasks: Ordered tasks to compute.
        system_params: Store-wide params passed to every computation and save.
        max_workers: Worker pool size.
        use_processes: Use a process pool instead of a thread pool.
        param_safety: System-param drift policy for the saves.
        cache: Optional caller-owned cache handed to each computation.

    Returns:
        One result per task, in task order.

    Raises:
        RunVaultComputeError: If the worker count is invalid.
    """
    if max_workers < 1:
        raise RunVaultComputeError(
            f"Batch needs at least one worker, got max_workers={max_workers}."
        )
    if not tasks:
        return ()
    shared_cache = cache if cache is not None else ComputationCache()
    _LOGGER.info(
        "batch_started",
        task_count=len(tasks),
        max_workers=max_workers,
        use_processes=use_processes,
    )
    started = time.perf_counter()
    with _build_executor(max_workers, use_processes) as executor:
        futures = [
            executor.submit(computation, task.run_params, system_params, shared_cache)
            for task in tasks
        ]
        artifacts = [future.result() for future in futures]
    _LOGGER.info(
        "batch_computed",
        task_count=len(tasks),
        elapsed_seconds=round(time.perf_counter() - started, 3),
    )
    results: list[BatchResult] = []
    for task, artifact in zip(tasks, artifacts):
        run_id = store.save(
            artifact,
            system_params,
            task.run_params,
            run_id=task.run_id,
            param_safety=param_safety,
        )
        results.append(BatchResult(run_id=run_id, run_params=task.run_params))
    _LOGGER.info("batch_saved", task_count=len(results), store_path=str(store.store_path))
    return tuple(results)


def run_batch_from_config(
    config: RunVaultConfig,
    computation: Computation,
    tasks: Sequence[ComputeTask],
    system_params: Mapping[str, Any],
    use_processes: bool = False,
    cache: ComputationCache | None = None,
) -> tuple[BatchResult, ...]:
    """Run a batch against the configured store with configured defaults."""
    return run_batch(
        ArtifactStore.from_config(config),
        computation,
        tasks,
        system_params,
        max_workers=config.max_workers,
        use_processes=use_processes,
        param_safety=config.param_safety,
        cache=cache,
    )


def _build_executor(max_workers: int, use_processes: bool) -> Executor:
    if use_processes:
        return ProcessPoolExecutor(max_workers=max_workers)
    return ThreadPoolExecutor(max_workers=max_workers)
