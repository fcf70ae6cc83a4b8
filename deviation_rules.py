from dataclasses import dataclass
from enum import Enum

import config
from benchmarks import MODEL_PORTFOLIO
from financial_math import (
    aggregate_by_dimension,
    get_factor_exposure,
    total_weight,
)
from report_formatting import fmt_fixed, fmt_signed
from taxonomy import FACTORS

ALIGNED_MESSAGE = "No material deviations detected. Portfolio is aligned with targets."


# ============================================================
# TYPES
# ============================================================

class FlagCategory(str, Enum):
    TOTAL_WEIGHT = "total-weight"
    ALLOCATION = "allocation"
    FACTOR = "factor"
    ALIGNED = "aligned"


@dataclass(frozen=True)
class DeviationFlag:
    category: FlagCategory
    message: str

    def __str__(self):
        return self.message

    def to_dict(self) -> dict:
        return {"category": self.category.value, "message": self.message}


@dataclass(frozen=True)
class DeviationThresholds:
    total_weight: float = config.TOTAL_WEIGHT_TOLERANCE
    asset_class: float = config.ASSET_CLASS_TOLERANCE
    factor: float = config.FACTOR_TOLERANCE


class StatusBand(str, Enum):
    ALIGNED = "Aligned"
    WATCH = "Watch"
    OFF_TARGET = "Off target"


# ============================================================
# RULES
# ============================================================

def status_band(value: float, low: float, high: float) -> StatusBand:
    """Aligned up to `low`, Watch up to `high`, Off target above."""
    if value <= low:
        return StatusBand.ALIGNED
    if value <= high:
        return StatusBand.WATCH
    return StatusBand.OFF_TARGET


def evaluate_flags(holdings, model=MODEL_PORTFOLIO, thresholds=None) -> list:
    """
    Apply the deviation rules in order:

      1. total weight away from 100%
      2. asset classes away from the model's targets
      3. factor exposures away from the model's targets
      4. nothing fired -> a single "aligned" flag

    An empty collection has nothing to rebalance and only gets the
    "aligned" flag. The list is rebuilt on every call and is never empty.
    """
    if not holdings:
        return [DeviationFlag(FlagCategory.ALIGNED, ALIGNED_MESSAGE)]

    thresholds = thresholds or DeviationThresholds()
    flags = []

    total = total_weight(holdings)
    if abs(total - 100) > thresholds.total_weight:
        flags.append(DeviationFlag(
            FlagCategory.TOTAL_WEIGHT,
            f"Portfolio weights total {fmt_fixed(total, 1)}%. Rebalance toward 100%.",
        ))

    asset_class = aggregate_by_dimension(holdings, "asset_class")
    for key, target in model.target("asset_class").items():
        delta = float(asset_class.get(key, 0.0)) - float(target)
        if abs(delta) > thresholds.asset_class:
            flags.append(DeviationFlag(
                FlagCategory.ALLOCATION,
                f"{key} allocation deviates by {fmt_signed(delta, 1)}% from model target.",
            ))

    exposure = get_factor_exposure(holdings)
    for factor in FACTORS:
        delta = abs(exposure[factor] - float(model.factors.get(factor, 0.0)))
        if delta > thresholds.factor:
            flags.append(DeviationFlag(
                FlagCategory.FACTOR,
                f"{factor} factor is {fmt_fixed(delta, 2)} away from model exposure. "
                "Consider sleeve adjustments.",
            ))

    if not flags:
        flags.append(DeviationFlag(FlagCategory.ALIGNED, ALIGNED_MESSAGE))

    return flags


def evaluate(holdings, model=MODEL_PORTFOLIO, thresholds=None) -> list:
    """Alert messages only, in rule order."""
    return [flag.message for flag in evaluate_flags(holdings, model, thresholds)]
