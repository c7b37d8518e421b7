from __future__ import annotations

import os
import random
from typing import Dict

import numpy as np

TOL_NUM: float = 1e-6
# Relative slack under which two DP scores count as tied.
TIE_TOL: float = 1e-9
DEFAULT_SEED: int = 1337

RNG_SEEDS: Dict[str, int] = {
    "tests": DEFAULT_SEED,
    "bench": 4242,
}

# K * |candidates|^2 above this prints an expensive-computation advisory.
WORK_WARNING_THRESHOLD: float = 1e9


def seed_everywhere(seed: int) -> None:
    """Seed all supported RNG backends deterministically."""
    random.seed(seed)
    os.environ["PYTHONHASHSEED"] = str(seed)
    np.random.seed(seed)


__all__ = [
    "TOL_NUM",
    "TIE_TOL",
    "DEFAULT_SEED",
    "RNG_SEEDS",
    "WORK_WARNING_THRESHOLD",
    "seed_everywhere",
]
