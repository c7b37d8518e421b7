"""Backtracking of optimal breakpoints from the DP backpointers."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

__all__ = [
    "backtrack_intervals",
    "interval_to_position",
    "reconstruct_breakpoints",
]


def backtrack_intervals(B: np.ndarray, n_changepoints: int) -> Tuple[int, ...]:
    """Interval indices ending the first ``n_changepoints`` segments.

    Starts from the last column of ``B`` and follows ``B[t, idx[t+1]]`` down
    to row 0.
    """
    if not (1 <= n_changepoints <= B.shape[0]):
        raise IndexError(
            f"n_changepoints must lie in [1, {B.shape[0]}], got {n_changepoints}"
        )
    k = B.shape[1]
    indices = [0] * n_changepoints
    column = k - 1
    for t in range(n_changepoints - 1, -1, -1):
        idx = int(B[t, column])
        if idx < 0:
            raise RuntimeError(
                f"Undefined backpointer at row {t}, column {column}"
            )
        if idx >= column:
            raise RuntimeError("Backpointer chain is not strictly decreasing")
        indices[t] = idx
        column = idx
    return tuple(indices)


def interval_to_position(
    indices: Sequence[int], bounds: np.ndarray
) -> Tuple[int, ...]:
    """Map interval indices to the last signal position they cover."""
    return tuple(int(bounds[i + 1]) for i in indices)


def reconstruct_breakpoints(
    B: np.ndarray, bounds: np.ndarray, K: int
) -> Tuple[Tuple[int, ...], ...]:
    """Optimal breakpoint positions for every number of change points 1..K."""
    if B.shape[1] != bounds.size - 1:
        raise ValueError("Backpointer table does not match the interval bounds")
    return tuple(
        interval_to_position(backtrack_intervals(B, c), bounds)
        for c in range(1, K + 1)
    )
