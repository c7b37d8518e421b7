# segprune/dp.py
"""
Exact dynamic programming over the interval-merge cost matrix.

    V[0, j] = J[0, j]
    V[m, j] = min_{m-1 <= i <= j-1}  V[m-1, i] + J[i+1, j]        (m <= j)

``B[m-1, j]`` keeps the smallest ``i`` whose score is within a relative
``TIE_TOL`` of the minimum, so rounding noise never decides a tie. Entries
with ``j < m`` cannot hold exactly ``m`` change points; they repeat
``V[m-1, j]`` so each column of ``V`` reads "best RSE with at most m change
points".
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np

from segprune.common.constants import TIE_TOL
from segprune.utils import log

__all__ = ["solve_dp"]


def _validate_cost_matrix(J: np.ndarray, K: int) -> np.ndarray:
    J = np.asarray(J, dtype=float)
    if J.ndim != 2 or J.shape[0] != J.shape[1] or J.shape[0] == 0:
        raise ValueError(f"cost matrix must be square and non-empty, got {J.shape}")
    k = J.shape[0]
    if not (0 <= K <= k - 1):
        raise ValueError(f"K must lie in [0, {k - 1}] for {k} intervals, got {K}")
    if not np.all(np.isfinite(J[np.triu_indices(k)])):
        raise ValueError("cost matrix has non-finite entries on its upper triangle")
    return J


def solve_dp(
    J: np.ndarray,
    K: int,
    *,
    debug: Optional[Dict[str, Any]] = None,
    verbose: bool = False,
    tol: float = TIE_TOL,
) -> Tuple[np.ndarray, np.ndarray]:
    """Fill the ``(K+1, k)`` cost table and the ``(K, k)`` backpointers.

    For every ``(m, j)`` the admissible split indices are laid out in
    increasing ``i``. The first one scoring at most
    ``min + tol * max(1, |min|)`` wins, so splits that tie in exact
    arithmetic resolve to the lowest index whichever cost builder produced
    ``J``.
    """
    J = _validate_cost_matrix(J, K)
    k = J.shape[0]

    V = np.zeros((K + 1, k))
    B = np.full((K, k), -1, dtype=np.int64)
    V[0, :] = J[0, :]

    rows = np.arange(k - 1)[:, None]
    cols = np.arange(k)[None, :]
    before = rows < cols
    transitions = 0

    for m in range(1, K + 1):
        admissible = before & (rows >= m - 1)
        # scores[i, j] = V[m-1, i] + J[i+1, j]
        scores = np.where(admissible, V[m - 1, :-1, None] + J[1:, :], np.inf)
        low = scores.min(axis=0)
        with np.errstate(invalid="ignore"):
            tied = scores <= low + tol * np.maximum(1.0, np.abs(low))
        # first True per column; inf rows never match a finite minimum
        best = np.argmax(tied, axis=0)

        targets = np.arange(m, k)
        V[m, targets] = scores[best[targets], targets]
        B[m - 1, targets] = best[targets]
        V[m, :m] = V[m - 1, :m]

        transitions += int(admissible.sum())
        log(f"V[{m}, {k - 1}] = {V[m, -1]:.6g}", verbose=verbose)

    if debug is not None:
        debug.clear()
        debug.update(
            {
                "interval_count": k,
                "max_changepoints": K,
                "transitions_total": transitions,
                "table_size": int(V.size),
            }
        )
    return V, B
