"""Parameter sweep task construction."""

from __future__ import annotations

from itertools import product
from typing import Any, Mapping, Sequence

from compute.computation import ComputeTask
from core.errors import RunVaultComputeError


def build_sweep_tasks(grid: Mapping[str, Sequence[Any]]) -> tuple[ComputeTask, ...]:
    """Expand a parameter grid into one task per combination.

    The first key varies slowest, matching nested loops written in key order.

    Args:
        grid: Parameter name mapped to its candidate values.

    Returns:
        Ordered compute tasks.

    Raises:
        RunVaultComputeError: If the grid is empty or a key has no values.
    """
    if not grid:
        raise RunVaultComputeError("Sweep grid is empty. Provide at least one parameter.")
    for key, values in grid.items():
        if isinstance(values, (str, bytes)) or len(values) == 0:
            raise RunVaultComputeError(
                f"Sweep parameter '{key}' needs a non-empty sequence of values."
            )
    keys = list(grid)
    return tuple(
        ComputeTask(run_params=dict(zip(keys, combination)))
        for combination in product(*(grid[key] for key in keys))
    )
