import logging
import math
from dataclasses import dataclass, field, asdict

import config
from benchmarks import MODEL_PORTFOLIO, MSCI_WORLD
from deviation_rules import evaluate_flags, status_band
from financial_math import (
    get_allocations,
    get_factor_exposure,
    max_abs_deviation,
    total_weight,
)
from taxonomy import (
    AssetClass,
    Currency,
    DIMENSIONS,
    DIMENSION_RECORD_KEYS,
    FACTOR_RANGE,
    FACTORS,
    Region,
    Sector,
    WEIGHT_RANGE,
)

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Unnamed holding"

NEW_HOLDING_TEMPLATE = {
    "name": "New Holding",
    "weight": 0,
    "currency": "USD",
    "region": "North America",
    "sector": "Technology",
    "assetClass": "Equity",
    "value": 0,
    "quality": 0,
    "momentum": 0,
    "size": 0,
    "volatility": 0,
}


# ============================================================
# HOLDING
# ============================================================

@dataclass
class Holding:
    name: str = DEFAULT_NAME
    weight: float = 0.0
    currency: Currency = Currency.OTHER
    region: Region = Region.OTHER
    sector: Sector = Sector.OTHER
    asset_class: AssetClass = AssetClass.ALTERNATIVES
    value: float = 0.0
    quality: float = 0.0
    momentum: float = 0.0
    size: float = 0.0
    volatility: float = 0.0

    def to_record(self) -> dict:
        """Plain record using the store's key names ("assetClass")."""
        record = {"name": self.name, "weight": self.weight}
        for dim, key in DIMENSION_RECORD_KEYS.items():
            record[key] = getattr(self, dim).value
        for factor in FACTORS:
            record[factor] = getattr(self, factor)
        return record


# ------------------------------------------------------------
# Normalization
# ------------------------------------------------------------

def _to_number(raw) -> float:
    """Best-effort numeric coercion; anything unusable becomes 0."""
    if raw is None:
        return 0.0
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return 0.0
    try:
        number = float(raw)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) else number


def clamp(raw, low: float, high: float) -> float:
    return max(low, min(high, _to_number(raw)))


def _normalize_name(raw) -> str:
    if raw is None:
        return DEFAULT_NAME
    name = str(raw)
    return name if name.strip() else DEFAULT_NAME


def _field_attr(field_name: str) -> str:
    """Map a record key ("assetClass") to the Holding attribute."""
    for attr, key in DIMENSION_RECORD_KEYS.items():
        if field_name == key:
            return attr
    return field_name


def normalize_field(field_name: str, raw):
    """
    Canonical value for one holding field.

    Returns (attribute_name, value). Raises KeyError for fields a Holding
    does not have.
    """
    attr = _field_attr(field_name)
    if attr == "name":
        return attr, _normalize_name(raw)
    if attr == "weight":
        return attr, clamp(raw, *WEIGHT_RANGE)
    if attr in FACTORS:
        return attr, clamp(raw, *FACTOR_RANGE)
    if attr in DIMENSIONS:
        return attr, DIMENSIONS[attr].parse(raw)
    raise KeyError(f"Unknown holding field: {field_name}")


def normalize_holding(raw) -> Holding:
    """
    Build a canonical Holding from an untrusted record.

    Never raises: missing or malformed values are clamped or replaced by
    their fallbacks. Accepts both "assetClass" and "asset_class".
    """
    if not isinstance(raw, dict):
        raw = {}

    values = {}
    for attr in ("name", "weight", *FACTORS):
        values[attr] = normalize_field(attr, raw.get(attr))[1]
    for attr, key in DIMENSION_RECORD_KEYS.items():
        source = raw.get(key, raw.get(attr))
        values[attr] = DIMENSIONS[attr].parse(source)
    return Holding(**values)


# ============================================================
# ENGINE OUTPUT
# ============================================================

@dataclass(frozen=True)
class HealthMetric:
    key: str
    title: str
    value: float
    band: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class EngineResult:
    total_weight: float
    allocations: dict
    factor_exposure: dict
    flags: list
    health: list = field(default_factory=list)

    @property
    def messages(self) -> list:
        return [flag.message for flag in self.flags]

    def to_dict(self) -> dict:
        return {
            "total_weight": self.total_weight,
            "allocations": {dim: dict(dist) for dim, dist in self.allocations.items()},
            "factor_exposure": dict(self.factor_exposure),
            "flags": [flag.to_dict() for flag in self.flags],
            "health": [metric.to_dict() for metric in self.health],
        }


def get_health_summary(total: float, allocations: dict) -> list:
    """Summary cards: total weight, asset-class drift vs model, region drift vs MSCI World."""
    weight_gap = abs(total - 100)
    asset_dev = max_abs_deviation(allocations["asset_class"], MODEL_PORTFOLIO.target("asset_class"))
    region_dev = max_abs_deviation(allocations["region"], MSCI_WORLD.target("region"))

    return [
        HealthMetric(
            "total_weight", "Total portfolio weight", total,
            status_band(weight_gap, *config.TOTAL_WEIGHT_BANDS).value,
        ),
        HealthMetric(
            "asset_class_deviation", "Max asset-class deviation vs model", asset_dev,
            status_band(asset_dev, *config.ASSET_CLASS_BANDS).value,
        ),
        HealthMetric(
            "region_deviation", "Max regional deviation vs MSCI World", region_dev,
            status_band(region_dev, *config.REGION_BANDS).value,
        ),
    ]


def run_engine(holdings, thresholds=None) -> EngineResult:
    """
    Derive the full output state from a holdings collection.

    Pure: the same holdings always produce an equal result.
    """
    total = total_weight(holdings)
    allocations = get_allocations(holdings)
    result = EngineResult(
        total_weight=total,
        allocations=allocations,
        factor_exposure=get_factor_exposure(holdings),
        flags=evaluate_flags(holdings, MODEL_PORTFOLIO, thresholds),
        health=get_health_summary(total, allocations),
    )
    logger.debug("Engine evaluated %d holdings, %d flags", len(holdings), len(result.flags))
    return result


# ============================================================
# SESSION
# ============================================================

def _as_records(raw) -> list:
    """Anything other than a list of records is treated as no holdings."""
    return list(raw) if isinstance(raw, (list, tuple)) else []


class PortfolioSession:
    """
    One analyst's working copy of a portfolio.

    Holds the canonical holdings plus identity metadata. Loading replaces
    the collection wholesale; edits go through update_field so every value
    is revalidated.
    """

    def __init__(self, holdings=None, portfolio_id=None, name=None, as_of=None):
        self.holdings = list(holdings or [])
        self.portfolio_id = portfolio_id
        self.name = name
        self.as_of = as_of

    @classmethod
    def from_records(cls, records, meta=None):
        meta = meta or {}
        return cls(
            holdings=[normalize_holding(r) for r in _as_records(records)],
            portfolio_id=meta.get("id"),
            name=meta.get("name"),
            as_of=meta.get("asOf"),
        )

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    def load(self, portfolio: dict) -> EngineResult:
        """
        Replace the session with a fetched portfolio record.

        Everything is normalized before any attribute is touched, so a record
        that fails half-way leaves the session as it was.
        """
        if not isinstance(portfolio, dict):
            portfolio = {}
        holdings = [normalize_holding(r) for r in _as_records(portfolio.get("holdings"))]

        self.holdings = holdings
        self.portfolio_id = portfolio.get("id")
        self.name = portfolio.get("name")
        self.as_of = portfolio.get("asOf")
        logger.info("Loaded portfolio %s with %d holdings", self.portfolio_id, len(holdings))
        return self.evaluate()

    def clear(self) -> EngineResult:
        self.holdings = []
        self.portfolio_id = None
        self.name = None
        self.as_of = None
        return self.evaluate()

    # ------------------------------------------------------------
    # Holding commands
    # ------------------------------------------------------------

    def add_holding(self, raw=None) -> Holding:
        record = dict(NEW_HOLDING_TEMPLATE)
        record.update(raw or {})
        holding = normalize_holding(record)
        self.holdings.append(holding)
        return holding

    def _check_index(self, index: int):
        if not 0 <= index < len(self.holdings):
            raise IndexError(f"No holding at index {index}")

    def remove_holding(self, index: int) -> Holding:
        self._check_index(index)
        return self.holdings.pop(index)

    def update_field(self, index: int, field_name: str, value) -> EngineResult:
        """Set one field (revalidated) and return the re-derived state."""
        self._check_index(index)
        holding = self.holdings[index]
        attr, canonical = normalize_field(field_name, value)
        setattr(holding, attr, canonical)
        return self.evaluate()

    # ------------------------------------------------------------
    # Output
    # ------------------------------------------------------------

    def evaluate(self, thresholds=None) -> EngineResult:
        return run_engine(self.holdings, thresholds)

    @property
    def meta(self) -> dict:
        return {"id": self.portfolio_id, "name": self.name, "asOf": self.as_of}

    def to_records(self) -> list:
        return [h.to_record() for h in self.holdings]
