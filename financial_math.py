from decimal import Decimal, ROUND_HALF_UP
from typing import Mapping

import numpy as np
import pandas as pd

from taxonomy import DIMENSIONS, FACTORS, resolve_dimension

# ============================================================
# CONFIG / CONSTANTS
# ============================================================
FRAME_COLUMNS = ["name", "weight", *DIMENSIONS.keys(), *FACTORS]


def round_half_up(value: float, places: int = 2) -> float:
    """
    Round half away from zero on the float's exact binary value.

    Python's round() is half-to-even; aggregates are reported the way the
    dashboards have always shown them (1.005 -> 1.0, 0.125 -> 0.13).
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = float(Decimal(float(value)).quantize(quantum, rounding=ROUND_HALF_UP))
    return rounded + 0.0  # -0.0 -> 0.0


# ------------------------------------------------------------
# Holdings -> DataFrame
# ------------------------------------------------------------

def holdings_frame(holdings) -> pd.DataFrame:
    """
    One row per holding; categorical columns hold the enumeration's string
    value so groupby keys line up with the distribution keys.
    """
    rows = []
    for h in holdings:
        row = {"name": h.name, "weight": h.weight}
        for dim in DIMENSIONS:
            row[dim] = getattr(h, dim).value
        for factor in FACTORS:
            row[factor] = getattr(h, factor)
        rows.append(row)
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def total_weight(holdings) -> float:
    """Raw (unrounded) sum of holding weights."""
    return float(sum(h.weight for h in holdings))


# ------------------------------------------------------------
# Aggregation
# ------------------------------------------------------------

def aggregate_by_dimension(holdings, dimension: str, options=None) -> dict:
    """
    Sum holding weights per category of `dimension`.

    Every option appears in the result (0.0 when nothing matches), in
    enumeration order. Rounding happens once, after the sums are taken.
    """
    dimension = resolve_dimension(dimension)
    if options is None:
        options = DIMENSIONS[dimension].options()

    df = holdings_frame(holdings)
    if df.empty:
        return {option: 0.0 for option in options}

    sums = df.groupby(dimension)["weight"].sum()
    return {
        option: round_half_up(sums.get(option, 0.0))
        for option in options
    }


def get_allocations(holdings) -> dict:
    """All four category distributions, keyed by dimension."""
    return {dim: aggregate_by_dimension(holdings, dim) for dim in DIMENSIONS}


# ------------------------------------------------------------
# Factor exposure
# ------------------------------------------------------------

def get_factor_exposure(holdings) -> dict:
    """
    Weight-weighted average factor score:

        exposure_f = Σ (w_i / W) * f_i

    W is the total weight; a zero-weight (or empty) portfolio divides by 1
    and therefore reports zero exposure.
    """
    df = holdings_frame(holdings)
    weights = df["weight"].to_numpy(dtype=float)
    divisor = weights.sum() or 1.0

    exposure = {}
    for factor in FACTORS:
        scores = df[factor].to_numpy(dtype=float)
        exposure[factor] = round_half_up(np.sum(weights / divisor * scores))
    return exposure


# ------------------------------------------------------------
# Benchmark comparison
# ------------------------------------------------------------

def max_abs_deviation(actual: Mapping[str, float], benchmark: Mapping[str, float]) -> float:
    """
    Largest |actual - target| over the benchmark's keys.

    Categories missing from `actual` count as 0; categories the benchmark
    does not list are ignored.
    """
    deviation = 0.0
    for key, target in benchmark.items():
        deviation = max(deviation, abs(float(actual.get(key, 0.0) or 0.0) - float(target or 0.0)))
    return deviation


def signed_deviations(actual: Mapping[str, float], benchmark: Mapping[str, float]) -> dict:
    """actual - benchmark for every key of `actual`; missing targets are 0."""
    return {
        key: float(value or 0.0) - float(benchmark.get(key, 0.0) or 0.0)
        for key, value in actual.items()
    }


def compare_distribution(actual: Mapping[str, float], benchmark: Mapping[str, float]) -> list:
    """Display rows (key, actual, benchmark, delta) in the actual's key order."""
    deltas = signed_deviations(actual, benchmark)
    return [
        {
            "key": key,
            "actual": float(actual[key] or 0.0),
            "benchmark": float(benchmark.get(key, 0.0) or 0.0),
            "delta": deltas[key],
        }
        for key in actual
    ]


def compare_factors(exposure: Mapping[str, float], *benchmarks) -> list:
    """One row per factor with the portfolio exposure and each benchmark's delta."""
    rows = []
    for factor in FACTORS:
        portfolio = float(exposure.get(factor, 0.0) or 0.0)
        row = {"factor": factor, "portfolio": portfolio}
        for bm in benchmarks:
            target = float(bm.factors.get(factor, 0.0) or 0.0)
            row[bm.key] = target
            row[f"delta_{bm.key}"] = portfolio - target
        rows.append(row)
    return rows
