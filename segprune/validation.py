"""Normalisation and checks for the signal, candidate set and K."""

from __future__ import annotations

import warnings
from typing import Any, Optional, Tuple

import numpy as np

from segprune.common.constants import WORK_WARNING_THRESHOLD
from segprune.errors import (
    ExpensiveComputationWarning,
    InvalidCandidateRange,
    InvalidInput,
)
from segprune.utils import log

__all__ = [
    "as_signal_matrix",
    "as_candidates",
    "resolve_max_changepoints",
    "check_problem_size",
    "validate_inputs",
]


def as_signal_matrix(Y: Any, *, verbose: bool = False) -> np.ndarray:
    """Coerce ``Y`` to a finite-or-NaN float matrix of shape ``(n, p)``.

    Vectors become a single column. Anything :func:`numpy.asarray` cannot turn
    into a numeric array of dimension 1 or 2 raises :class:`InvalidInput`.
    """
    try:
        arr = np.asarray(Y, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(
            "Argument 'Y' should be a matrix, vector or table of numbers"
        ) from exc

    if arr.ndim == 1:
        log("Coercing 'Y' to a matrix", verbose=verbose)
        arr = arr.reshape(-1, 1)
    elif arr.ndim != 2:
        raise InvalidInput(
            f"Argument 'Y' should be a matrix, vector or table, got {arr.ndim}-D data"
        )

    n, p = arr.shape
    if n == 0 or p == 0:
        raise InvalidInput(f"Argument 'Y' must be non-empty, got shape {arr.shape}")
    if np.isinf(arr).any():
        raise InvalidInput("Argument 'Y' contains infinite values")
    return arr


def as_candidates(candidates: Any, n: int) -> np.ndarray:
    """Return the sorted, de-duplicated candidate positions as ints.

    ``None`` selects every interior position ``1..n-1``.
    """
    if candidates is None:
        return np.arange(1, n, dtype=np.int64)
    if isinstance(candidates, (set, frozenset)):
        candidates = sorted(candidates)

    try:
        raw = np.asarray(candidates, dtype=float).ravel()
    except (TypeError, ValueError) as exc:
        raise InvalidInput("Candidate change points must be integer positions") from exc
    if raw.size == 0:
        return np.zeros(0, dtype=np.int64)

    if not np.all(np.isfinite(raw)) or not np.all(raw == np.round(raw)):
        raise InvalidInput("Candidate change points must be integer positions")

    lo, hi = raw.min(), raw.max()
    if lo < 1 or hi > n:
        raise InvalidCandidateRange(
            f"Candidate change points span [{int(lo)}, {int(hi)}], outside [1, {n}]"
        )
    return np.unique(raw.astype(np.int64))


def resolve_max_changepoints(K: Optional[int], n_candidates: int) -> int:
    """Default and range-check ``K``.

    ``n_candidates`` is the count after sorting and de-duplication, so
    ``K=3`` with candidates ``[2, 2, 4]`` is rejected.
    """
    if K is None:
        return n_candidates
    if isinstance(K, bool) or not isinstance(K, (int, np.integer)):
        raise InvalidInput(f"K must be an integer, got {K!r}")
    if not (0 <= K <= n_candidates):
        raise InvalidInput(
            f"K must lie in [0, {n_candidates}] (number of distinct candidates), "
            f"got {K}"
        )
    return int(K)


def check_problem_size(
    K: int,
    n_candidates: int,
    threshold: Optional[float] = None,
    *,
    stacklevel: int = 2,
) -> bool:
    """Warn when the DP is going to be expensive. Returns True if it warned.

    ``stacklevel`` is handed to :func:`warnings.warn` as is; wrappers raise it
    by one per frame so the warning points at user code.
    """
    limit = WORK_WARNING_THRESHOLD if threshold is None else threshold
    if K * n_candidates ** 2 > limit:
        warnings.warn(
            "pruning is intended to be run on a not too large set of *candidate* "
            "change points; running it on too many candidates can be long, as the "
            "algorithm is quadratic in the number of candidates",
            ExpensiveComputationWarning,
            stacklevel=stacklevel,
        )
        return True
    return False


def validate_inputs(
    Y: Any,
    candidates: Any = None,
    K: Optional[int] = None,
    *,
    verbose: bool = False,
    stacklevel: int = 2,
) -> Tuple[np.ndarray, np.ndarray, int]:
    """Run every check in order and return ``(Y, candidates, K)``."""
    arr = as_signal_matrix(Y, verbose=verbose)
    n = arr.shape[0]
    cand = as_candidates(candidates, n)
    k_max = resolve_max_changepoints(K, cand.size)
    check_problem_size(k_max, cand.size, stacklevel=stacklevel + 1)
    return arr, cand, k_max
