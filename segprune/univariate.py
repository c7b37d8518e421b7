"""NaN-tolerant interval-merge costs for a single signal dimension.

Given a 1-D series ``y`` (possibly with missing values) and sorted candidate
positions, the ``k`` atomic intervals are ``[b[i], b[i+1])`` with
``b = [0, *candidates, n]``. Entry ``[i, j]`` of the returned matrix is the
residual squared error of the *observed* values of intervals ``i..j`` around
their mean. Unions without any observed value are NaN; callers decide what
that means.

The costs are assembled from per-interval moments (count, mean, centred sum
of squares) pooled across interval ranges, all expressed about the global
observed mean::

    RSE(i..j) = sum_t M2_t + sum_t n_t d_t**2 - (sum_t n_t d_t)**2 / sum_t n_t

with ``d_t`` the interval mean minus the global mean.
"""

from __future__ import annotations

from typing import Callable, Sequence

import numpy as np

__all__ = ["UnivariateCost", "interval_bounds", "univariate_merge_costs"]

UnivariateCost = Callable[[np.ndarray, np.ndarray], np.ndarray]


def interval_bounds(candidates: Sequence[int], n: int) -> np.ndarray:
    """Return ``[0, *candidates, n]`` as an int array."""
    cand = np.asarray(candidates, dtype=np.int64).ravel()
    return np.concatenate(([0], cand, [n])).astype(np.int64)


def _interval_moments(y: np.ndarray, bounds: np.ndarray):
    k = bounds.size - 1
    counts = np.zeros(k)
    offsets = np.zeros(k)
    m2 = np.zeros(k)
    for t in range(k):
        seg = y[bounds[t] : bounds[t + 1]]
        seg = seg[~np.isnan(seg)]
        if seg.size == 0:
            continue
        mean = seg.mean()
        counts[t] = seg.size
        offsets[t] = mean
        m2[t] = float(np.sum((seg - mean) ** 2))
    return counts, offsets, m2


def univariate_merge_costs(y: np.ndarray, candidates: Sequence[int]) -> np.ndarray:
    """Return the ``(k, k)`` upper-triangular merge-cost matrix of ``y``."""
    y = np.asarray(y, dtype=float).ravel()
    n = y.size
    bounds = interval_bounds(candidates, n)
    k = bounds.size - 1

    observed = ~np.isnan(y)
    upper = np.triu(np.ones((k, k), dtype=bool))
    if not observed.any():
        return np.where(upper, np.nan, 0.0)

    centre = y[observed].mean()
    counts, means, m2 = _interval_moments(y - centre, bounds)
    shifts = counts * means

    def _pref(values: np.ndarray) -> np.ndarray:
        return np.concatenate(([0.0], np.cumsum(values)))

    N, T, W, M = (_pref(v) for v in (counts, shifts, shifts * means, m2))
    lo = np.arange(k)[:, None]
    hi = np.arange(k)[None, :] + 1

    n_obs = N[hi] - N[lo]
    total = T[hi] - T[lo]
    with np.errstate(divide="ignore", invalid="ignore"):
        cost = (M[hi] - M[lo]) + (W[hi] - W[lo]) - total * total / n_obs
    cost = np.where(n_obs > 0, cost, np.nan)
    return np.where(upper, cost, 0.0)
