from __future__ import annotations

import math

import numpy as np
import pytest
from hypothesis import example, given, settings, strategies as st
from hypothesis.strategies import composite

from segprune import PruneResult, prune_by_dp
from segprune.errors import InvalidCandidateRange, InvalidInput
from tests.test_utils import (
    check_breakpoints_valid,
    gen_breakpoints,
    oracle_best_segmentation,
    random_profile,
    rng,
    segment_rse,
    segmentation_rse,
)


# ---------------------------------------------------------------------------
#  Unit tests
# ---------------------------------------------------------------------------
def test_single_step_found_exactly(tol: float) -> None:
    y = np.concatenate([np.zeros(5), np.full(5, 4.0)])
    res = prune_by_dp(y, K=2)
    assert isinstance(res, PruneResult)
    assert res.breakpoints(1) == (5,)
    assert res.rse[1] == pytest.approx(0.0, abs=tol)
    assert res.rse[0] == pytest.approx(segment_rse(y), abs=tol)


def test_output_shapes() -> None:
    Y = rng(1).normal(size=(30, 2))
    cand = [3, 8, 15, 21, 27]
    res = prune_by_dp(Y, cand, K=3)
    assert len(res.bkp_list) == 3
    assert res.rse.shape == (4,)
    assert res.V.shape == (4, 6)
    np.testing.assert_array_equal(res.rse, res.V[:, -1])


def test_defaults_use_every_candidate() -> None:
    Y = rng(2).normal(size=(8, 1))
    res = prune_by_dp(Y)
    assert res.max_changepoints == 7
    assert res.breakpoints(7) == (1, 2, 3, 4, 5, 6, 7)
    assert res.rse[-1] == pytest.approx(0.0, abs=1e-9)


def test_breakpoint_zero_and_out_of_range() -> None:
    res = prune_by_dp(np.arange(6.0), [2, 4])
    assert res.breakpoints(0) == ()
    with pytest.raises(IndexError):
        res.breakpoints(3)


def test_list_of_rows_accepted() -> None:
    rows = [[0.0, 1.0], [0.1, 1.1], [5.0, -3.0], [5.1, -3.1]]
    res = prune_by_dp(rows, [1, 2, 3], K=1)
    assert res.breakpoints(1) == (2,)


def test_candidate_order_and_duplicates_do_not_matter() -> None:
    Y = rng(3).normal(size=(40, 2))
    a = prune_by_dp(Y, [30, 10, 20, 10])
    b = prune_by_dp(Y, [10, 20, 30])
    assert a.bkp_list == b.bkp_list
    np.testing.assert_array_equal(a.V, b.V)


def test_errors_propagate() -> None:
    with pytest.raises(InvalidInput):
        prune_by_dp(np.zeros((3, 3, 3)))
    with pytest.raises(InvalidCandidateRange):
        prune_by_dp(np.zeros(5), [0, 2])
    with pytest.raises(InvalidInput):
        prune_by_dp(np.zeros(5), [1, 2], K=3)


def test_verbose_has_no_effect_on_results(capsys: pytest.CaptureFixture) -> None:
    Y = rng(4).normal(size=(25, 2))
    quiet = prune_by_dp(Y, [5, 10, 15, 20])
    loud = prune_by_dp(Y, [5, 10, 15, 20], verbose=True)
    assert capsys.readouterr().out
    assert quiet.bkp_list == loud.bkp_list
    np.testing.assert_array_equal(quiet.V, loud.V)


def test_debug_report() -> None:
    debug: dict = {}
    prune_by_dp(rng(5).normal(size=(20, 3)), [4, 9, 14], K=2, allow_na=False, debug=debug)
    assert debug["n"] == 20
    assert debug["p"] == 3
    assert debug["candidate_count"] == 3
    assert debug["interval_count"] == 4
    assert debug["max_changepoints"] == 2
    assert debug["cost_mode"] == "cumsum"


# ---------------------------------------------------------------------------
#  Degenerate case
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("allow_na", [True, False])
def test_empty_candidate_set(allow_na: bool, tol: float) -> None:
    Y = rng(6).normal(size=(50, 2))
    res = prune_by_dp(Y, [], allow_na=allow_na)
    assert res.bkp_list == ()
    assert res.max_changepoints == 0
    assert res.rse.shape == (1,)
    assert res.V.shape == (1, 1)
    assert res.rse[0] == pytest.approx(segment_rse(Y), abs=tol)


def test_single_row_signal() -> None:
    res = prune_by_dp([3.0])
    assert res.bkp_list == ()
    assert res.rse[0] == 0.0


@pytest.mark.parametrize("allow_na", [True, False])
def test_candidate_at_signal_end_can_be_reported(allow_na: bool) -> None:
    # position n closes an empty interval, so it adds a breakpoint at no cost
    y = [0.0, 0.0, 5.0, 5.0, 5.0]
    res = prune_by_dp(y, [2, 5], allow_na=allow_na)
    assert res.bkp_list == ((2,), (2, 5))
    assert res.rse[1] == pytest.approx(0.0, abs=1e-12)
    assert res.rse[2] == pytest.approx(res.rse[1], abs=1e-12)


# ---------------------------------------------------------------------------
#  Exhaustive-search agreement
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("seed", [0, 1, 2])
@pytest.mark.parametrize("allow_na", [True, False])
def test_matches_bruteforce_on_small_signal(seed: int, allow_na: bool) -> None:
    n = 10
    Y = random_profile(rng(seed), n, [3, 7], p=2, noise=0.8)
    cand = list(range(1, n))
    res = prune_by_dp(Y, cand, K=n - 1, allow_na=allow_na)
    check_breakpoints_valid(res.bkp_list, cand, n)
    assert res.rse[0] == pytest.approx(segment_rse(Y), abs=1e-8)
    for k in range(1, n):
        oracle_cost, _ = oracle_best_segmentation(Y, cand, k)
        assert res.rse[k] == pytest.approx(oracle_cost, abs=1e-8)
        assert segmentation_rse(Y, res.breakpoints(k)) == pytest.approx(oracle_cost, abs=1e-8)


def test_matches_bruteforce_on_sparse_candidates() -> None:
    n = 30
    Y = random_profile(rng(7), n, [6, 14, 23], p=3, noise=1.0)
    cand = [2, 6, 9, 14, 17, 20, 23, 27]
    res = prune_by_dp(Y, cand)
    for k in range(1, len(cand) + 1):
        oracle_cost, _ = oracle_best_segmentation(Y, cand, k)
        assert res.rse[k] == pytest.approx(oracle_cost, abs=1e-8)


# ---------------------------------------------------------------------------
#  Tie-break determinism
# ---------------------------------------------------------------------------
@settings(max_examples=80)
@given(
    a=st.floats(min_value=-100.0, max_value=100.0),
    b=st.floats(min_value=-100.0, max_value=100.0),
)
@example(a=1.2573, b=-1.3210)
@example(a=13.04, b=9.47)
@example(a=-6.23, b=0.41)
@example(a=0.0, b=1.0)
def test_equal_cost_splits_pick_lowest_position(a: float, b: float) -> None:
    # [a, b, b, a]: splitting after position 1 or 3 leaves the same RSE
    y = [a, b, b, a]
    tolerant = prune_by_dp(y, K=1, allow_na=True)
    exact = prune_by_dp(y, K=1, allow_na=False)
    assert tolerant.breakpoints(1) == (1,)
    assert exact.breakpoints(1) == (1,)


def test_symmetric_two_step_tie() -> None:
    # any single split among the flat run is equally good
    y = [0.0, 0.0, 0.0, 0.0]
    res = prune_by_dp(y, allow_na=False)
    assert res.breakpoints(1) == (1,)
    assert res.breakpoints(2) == (1, 2)


# ---------------------------------------------------------------------------
#  Missing values
# ---------------------------------------------------------------------------
def test_all_missing_column_contributes_nothing() -> None:
    Y = random_profile(rng(8), 40, [12, 25], p=1, noise=0.3)
    with_nan = np.hstack([Y, np.full((40, 1), np.nan)])
    cand = [5, 12, 18, 25, 33]
    a = prune_by_dp(with_nan, cand)
    b = prune_by_dp(Y, cand)
    assert a.bkp_list == b.bkp_list
    np.testing.assert_allclose(a.rse, b.rse, atol=1e-9)


def test_sparse_missing_values_do_not_reach_table() -> None:
    Y = random_profile(rng(9), 60, [20, 40], p=2, noise=0.3)
    Y[rng(10).random(Y.shape) < 0.2] = np.nan
    Y[20:30, 1] = np.nan
    res = prune_by_dp(Y, [10, 20, 25, 30, 40, 50])
    assert np.all(np.isfinite(res.V))
    assert res.breakpoints(2) == (20, 40)


def test_missing_values_rejected_without_allow_na() -> None:
    Y = np.array([1.0, np.nan, 2.0, 3.0])
    with pytest.raises(InvalidInput):
        prune_by_dp(Y, allow_na=False)


# ---------------------------------------------------------------------------
#  Hypothesis properties
# ---------------------------------------------------------------------------
@composite
def pruning_instances(draw):
    n = draw(st.integers(min_value=2, max_value=30))
    p = draw(st.integers(min_value=1, max_value=3))
    seed = draw(st.integers(min_value=0, max_value=99999))
    Y = rng(seed).normal(scale=draw(st.floats(min_value=0.1, max_value=10.0)), size=(n, p))
    cand = draw(
        st.lists(st.integers(min_value=1, max_value=n - 1), unique=True, max_size=n - 1)
    )
    K = draw(st.integers(min_value=0, max_value=len(cand)))
    return Y, sorted(cand), K


@settings(max_examples=50)
@given(pruning_instances())
def test_cost_curve_is_non_increasing(data) -> None:
    Y, cand, K = data
    res = prune_by_dp(Y, cand, K)
    slack = 1e-9 * max(1.0, float(res.rse[0]))
    assert np.all(np.diff(res.rse) <= slack)
    assert np.all(np.diff(res.V, axis=0) <= slack)


@settings(max_examples=50)
@given(pruning_instances())
def test_breakpoints_are_valid(data) -> None:
    Y, cand, K = data
    res = prune_by_dp(Y, cand, K)
    assert len(res.bkp_list) == K
    check_breakpoints_valid(res.bkp_list, cand, Y.shape[0])
    for k in range(1, K + 1):
        assert segmentation_rse(Y, res.breakpoints(k)) == pytest.approx(
            res.rse[k], abs=1e-7
        )


@settings(max_examples=40)
@given(pruning_instances())
def test_cost_modes_give_same_curve(data) -> None:
    Y, cand, K = data
    a = prune_by_dp(Y, cand, K, allow_na=True)
    b = prune_by_dp(Y, cand, K, allow_na=False)
    np.testing.assert_allclose(a.rse, b.rse, rtol=1e-9, atol=1e-9)


# ---------------------------------------------------------------------------
#  End-to-end scenario
# ---------------------------------------------------------------------------
@pytest.mark.slow
def test_recovers_true_breakpoints_from_candidates() -> None:
    rnd = rng(2013)
    n, p, true_k = 1000, 2, 10
    truth = gen_breakpoints(rnd, n, true_k, min_gap=60)
    Y = random_profile(rnd, n, truth, p=p, min_jump=1.5, max_jump=3.0, noise=0.3)

    decoys = set()
    while len(decoys) < true_k:
        c = int(rnd.integers(1, n))
        if min(abs(c - t) for t in truth) > 10:
            decoys.add(c)
    cand = sorted(set(truth) | decoys)
    assert len(cand) == 2 * true_k

    res = prune_by_dp(Y, cand, K=2 * true_k)
    found = res.breakpoints(true_k)
    assert len(found) == true_k
    assert all(abs(f - t) <= 5 for f, t in zip(found, truth))
    assert res.rse[true_k] < 0.2 * res.rse[0]
    assert math.isclose(res.rse[true_k], segmentation_rse(Y, found), rel_tol=1e-9)

    # both cost strategies agree on complete data
    exact = prune_by_dp(Y, cand, K=2 * true_k, allow_na=False)
    np.testing.assert_allclose(exact.rse, res.rse, rtol=1e-8)
    assert exact.bkp_list[true_k - 1] == found
