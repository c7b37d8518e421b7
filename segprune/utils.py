# segprune/utils.py
"""
Light-weight helpers shared by all pipeline stages.
"""

from __future__ import annotations

# Global debug switch
VERBOSE: bool = False


def log(*args, verbose: bool = False, **kwargs) -> None:    # pragma: no cover
    if verbose or VERBOSE:
        print(*args, **kwargs)
