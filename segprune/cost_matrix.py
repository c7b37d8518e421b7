# segprune/cost_matrix.py
"""
Interval-merge cost matrix J.

``J[i, j]`` (``i <= j``) is the RSE of fitting one constant per-dimension
mean to intervals ``i..j``; the strict lower triangle is zero. Two builders
are provided and agree on complete data:

* :func:`cost_matrix_nan_tolerant` sums a per-dimension primitive, mapping
  undefined (all-missing) entries to zero cost.
* :func:`cost_matrix_cumsum` uses prefix sums of values and squares.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from segprune.errors import InvalidInput
from segprune.univariate import UnivariateCost, interval_bounds, univariate_merge_costs

__all__ = [
    "cost_matrix_nan_tolerant",
    "cost_matrix_cumsum",
    "build_cost_matrix",
]


def cost_matrix_nan_tolerant(
    Y: np.ndarray,
    candidates: Sequence[int],
    *,
    univariate_cost: UnivariateCost = univariate_merge_costs,
) -> np.ndarray:
    p = Y.shape[1]
    k = len(candidates) + 1
    J = np.zeros((k, k))
    cand = np.asarray(candidates, dtype=np.int64)
    for col in range(p):
        Jp = np.asarray(univariate_cost(Y[:, col], cand), dtype=float)
        if Jp.shape != (k, k):
            raise ValueError(
                f"univariate cost returned shape {Jp.shape}, expected {(k, k)}"
            )
        # all values missing between two candidates: no cost, no gain
        J += np.where(np.isnan(Jp), 0.0, Jp)
    return np.triu(J)


def cost_matrix_cumsum(
    Y: np.ndarray,
    candidates: Sequence[int],
    *,
    center: bool = False,
) -> np.ndarray:
    """Closed-form costs ``sum(y^2) - sum_p (sum y_p)^2 / len`` per span.

    ``center=True`` removes the column means first, which leaves every cost
    unchanged in exact arithmetic and limits cancellation on large values.
    """
    if np.isnan(Y).any():
        raise InvalidInput(
            "Missing values in 'Y' require the NaN-tolerant cost (allow_na=True)"
        )
    if center:
        Y = Y - Y.mean(axis=0)

    n, p = Y.shape
    b = interval_bounds(candidates, n)
    s = np.vstack([np.zeros((1, p)), np.cumsum(Y, axis=0)])[b]
    v = np.concatenate(([0.0], np.cumsum(np.sum(Y * Y, axis=1))))[b]

    # span (i, j) starts at b[i] and ends (exclusive) at b[j + 1]
    length = (b[1:][None, :] - b[:-1][:, None]).astype(float)
    sumsq = v[1:][None, :] - v[:-1][:, None]
    diff = s[1:][None, :, :] - s[:-1][:, None, :]
    with np.errstate(divide="ignore", invalid="ignore"):
        J = sumsq - np.sum(diff * diff, axis=2) / length
    J = np.where(length > 0, J, 0.0)
    return np.triu(J)


def build_cost_matrix(
    Y: np.ndarray,
    candidates: Sequence[int],
    *,
    allow_na: bool = True,
    univariate_cost: Optional[UnivariateCost] = None,
    center: bool = False,
) -> np.ndarray:
    """Dispatch to the NaN-tolerant or the complete-data builder."""
    if allow_na:
        return cost_matrix_nan_tolerant(
            Y,
            candidates,
            univariate_cost=univariate_cost or univariate_merge_costs,
        )
    return cost_matrix_cumsum(Y, candidates, center=center)
