"""Benchmark harness for DP pruning of candidate change points."""

from __future__ import annotations

import argparse
import math
import statistics
import time
from typing import List, Sequence, Tuple

import sys
from pathlib import Path

import numpy as np

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))

from segprune import prune_by_dp
from segprune.common.constants import DEFAULT_SEED, RNG_SEEDS

BENCH_SEED = RNG_SEEDS.get("bench", DEFAULT_SEED)


def percentile(sorted_values: Sequence[float], pct: float) -> float:
    if not sorted_values:
        return float("nan")
    if pct <= 0:
        return sorted_values[0]
    if pct >= 1:
        return sorted_values[-1]
    idx = (len(sorted_values) - 1) * pct
    lo = math.floor(idx)
    hi = math.ceil(idx)
    if lo == hi:
        return sorted_values[int(idx)]
    weight = idx - lo
    return sorted_values[lo] * (1.0 - weight) + sorted_values[hi] * weight


def generate_instance(
    rng: np.random.Generator,
    *,
    n: int,
    p: int,
    true_k: int,
    n_candidates: int,
    noise: float,
    na_rate: float,
) -> Tuple[np.ndarray, List[int]]:
    truth = np.sort(rng.choice(np.arange(1, n), size=true_k, replace=False))
    edges = np.concatenate(([0], truth, [n]))
    Y = np.empty((n, p))
    for a, b in zip(edges[:-1], edges[1:]):
        Y[a:b] = rng.normal(0.0, 2.0, size=p)
    Y += rng.normal(0.0, noise, size=(n, p))
    if na_rate > 0:
        Y[rng.random(Y.shape) < na_rate] = np.nan

    pool = np.setdiff1d(np.arange(1, n), truth)
    extra = max(0, min(n_candidates - true_k, pool.size))
    decoys = rng.choice(pool, size=extra, replace=False)
    candidates = sorted(int(c) for c in np.concatenate((truth, decoys)))
    return Y, candidates


def run_benchmark(args: argparse.Namespace) -> None:
    rng = np.random.default_rng(args.seed)
    durations: List[float] = []
    hits: List[float] = []
    failures = 0

    total_runs = args.warmup + args.runs
    for iteration in range(total_runs):
        Y, candidates = generate_instance(
            rng,
            n=args.n,
            p=args.p,
            true_k=args.true_k,
            n_candidates=args.candidates,
            noise=args.noise,
            na_rate=args.na_rate,
        )
        try:
            start = time.perf_counter()
            res = prune_by_dp(Y, candidates, allow_na=not args.cumsum)
            elapsed = time.perf_counter() - start
        except ValueError:
            failures += 1
            continue

        if iteration >= args.warmup:
            durations.append(elapsed)
            if res.max_changepoints >= args.true_k:
                ratio = res.rse[args.true_k] / max(res.rse[0], 1e-12)
                hits.append(float(ratio))

    durations.sort()
    total_time = sum(durations)
    mean = statistics.fmean(durations) if durations else float("nan")
    median = statistics.median(durations) if durations else float("nan")
    p90 = percentile(durations, 0.9)
    p99 = percentile(durations, 0.99)
    min_v = durations[0] if durations else float("nan")
    max_v = durations[-1] if durations else float("nan")

    summary = (
        f"total_time={total_time:.6f},mean={mean:.6f},median={median:.6f},"
        f"p90={p90:.6f},p99={p99:.6f},min={min_v:.6f},max={max_v:.6f},"
        f"failures={failures}"
    )
    print(summary)

    if hits:
        print(
            f"rse_ratio_mean={statistics.fmean(hits):.6f},"
            f"rse_ratio_p90={percentile(sorted(hits), 0.9):.6f}"
        )


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark exact DP pruning.")
    parser.add_argument("--runs", type=int, default=50, help="Number of timed iterations.")
    parser.add_argument("--warmup", type=int, default=3, help="Number of warmup iterations.")
    parser.add_argument("--seed", type=int, default=BENCH_SEED, help="Deterministic RNG seed.")
    parser.add_argument("--n", type=int, default=10000, help="Signal length.")
    parser.add_argument("--p", type=int, default=2, help="Signal dimension.")
    parser.add_argument("--true_k", type=int, default=10, help="True number of change points.")
    parser.add_argument(
        "--candidates", type=int, default=100, help="Size of the candidate set."
    )
    parser.add_argument("--noise", type=float, default=1.0, help="Noise standard deviation.")
    parser.add_argument(
        "--na_rate", type=float, default=0.0, help="Fraction of entries set missing."
    )
    parser.add_argument(
        "--cumsum",
        action="store_true",
        help="Use the complete-data cumulative-sum cost instead of the NaN-tolerant one.",
    )
    args = parser.parse_args()
    if args.cumsum and args.na_rate > 0:
        parser.error("--cumsum requires --na_rate 0")
    run_benchmark(args)


if __name__ == "__main__":
    main()
