"""Exception and warning types raised by the pruning pipeline."""

from __future__ import annotations

__all__ = [
    "SegPruneError",
    "InvalidInput",
    "InvalidCandidateRange",
    "ExpensiveComputationWarning",
]


class SegPruneError(Exception):
    """Base class for all segprune errors."""


class InvalidInput(SegPruneError, ValueError):
    """The signal, candidate set or K cannot be interpreted."""


class InvalidCandidateRange(SegPruneError, ValueError):
    """A candidate change point lies outside ``[1, n]``."""


class ExpensiveComputationWarning(UserWarning):
    """K * |candidates|^2 is large enough for the DP to be slow."""
