# Public entry point
from .prune import PruneResult, assemble_result, prune_by_dp

# Pipeline stages
from .validation import validate_inputs
from .cost_matrix import (
    build_cost_matrix,
    cost_matrix_cumsum,
    cost_matrix_nan_tolerant,
)
from .univariate import interval_bounds, univariate_merge_costs
from .dp import solve_dp
from .reconstruct import reconstruct_breakpoints

# Errors, constants & diagnostics
from .errors import (
    ExpensiveComputationWarning,
    InvalidCandidateRange,
    InvalidInput,
    SegPruneError,
)
from .common.constants import (
    DEFAULT_SEED,
    RNG_SEEDS,
    TIE_TOL,
    TOL_NUM,
    WORK_WARNING_THRESHOLD,
    seed_everywhere,
)
from .utils import VERBOSE

__all__ = [
    # entry point
    "prune_by_dp",
    "PruneResult",
    "assemble_result",
    # stages
    "validate_inputs",
    "interval_bounds",
    "build_cost_matrix",
    "cost_matrix_cumsum",
    "cost_matrix_nan_tolerant",
    "univariate_merge_costs",
    "solve_dp",
    "reconstruct_breakpoints",
    # errors
    "SegPruneError",
    "InvalidInput",
    "InvalidCandidateRange",
    "ExpensiveComputationWarning",
    # constants
    "TOL_NUM",
    "TIE_TOL",
    "DEFAULT_SEED",
    "RNG_SEEDS",
    "WORK_WARNING_THRESHOLD",
    "seed_everywhere",
    "VERBOSE",
]
