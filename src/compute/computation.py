"""Computation collaborator interface and explicit cache.

Computations receive their cache as an argument; no memoized state lives
at module level, so cache lifetime is owned by whoever builds the batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
from typing import Any, Callable, Hashable, Mapping, Protocol


class Computation(Protocol):
    """Callable producing one artifact from run and system params.

    Failures raised by a computation reach the caller unmodified.
    """

    def __call__(
        self,
        run_params: Mapping[str, Any],
        system_params: Mapping[str, Any],
        cache: "ComputationCache",
    ) -> Any: ...


class ComputationCache:
    """Caller-owned memo shared by computations of one batch.

    Thread-safe for thread pools. When pickled for process workers the
    entries travel with it and the lock is rebuilt on the other side.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, Any] = {}
        self._lock = threading.Lock()

    def get_or_create(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        """Return the cached value for a key, building it once when missing."""
        with self._lock:
            if key not in self._entries:
                self._entries[key] = factory()
            return self._entries[key]

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            self._entries.clear()

    def __getstate__(self) -> dict[str, Any]:
        with self._lock:
            return {"entries": dict(self._entries)}

    def __setstate__(self, state: dict[str, Any]) -> None:
        self._entries = dict(state["entries"])
        self._lock = threading.Lock()


@dataclass(frozen=True)
class ComputeTask:
    """One unit of batch work.

    Attributes:
        run_params: Params passed to the computation and used as run identity.
        run_id: Optional explicit run id for the save.
    """

    run_params: Mapping[str, Any] = field(default_factory=dict)
    run_id: str | None = None


@dataclass(frozen=True)
class BatchResult:
    """Where one task's artifact was saved.

    Attributes:
        run_id: Run the artifact was appended to.
        run_params: Params of the task.
    """

    run_id: str
    run_params: Mapping[str, Any]
