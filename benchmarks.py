from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


def _frozen(mapping):
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class Benchmark:
    """
    Static reference targets.

    allocations: { dimension: { category: target_pct } }; dimensions a
                 benchmark does not cover are simply absent.
    factors:     { factor: target_score }
    """
    key: str
    name: str
    description: str
    allocations: Mapping[str, Mapping[str, float]] = field(default_factory=dict)
    factors: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(
            self,
            "allocations",
            _frozen({dim: _frozen(targets) for dim, targets in self.allocations.items()}),
        )
        object.__setattr__(self, "factors", _frozen(self.factors))

    def covers(self, dimension: str) -> bool:
        return dimension in self.allocations

    def target(self, dimension: str) -> Mapping[str, float]:
        """Targets for a dimension, empty when the benchmark has no coverage."""
        return self.allocations.get(dimension, _frozen({}))

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "description": self.description,
            "allocations": {dim: dict(t) for dim, t in self.allocations.items()},
            "factors": dict(self.factors),
        }


# ============================================================
# BENCHMARK TABLES
# ============================================================
MODEL_PORTFOLIO = Benchmark(
    key="model",
    name="Model portfolio",
    description="Asset class + factor targets",
    allocations={
        "currency": {"USD": 55, "EUR": 30, "GBP": 5, "JPY": 5, "Other": 5},
        "region": {
            "North America": 50, "Europe": 25, "Asia Pacific": 10,
            "Emerging Markets": 10, "Other": 5,
        },
        "sector": {
            "Technology": 24, "Financials": 16, "Healthcare": 14, "Industrials": 12,
            "Consumer": 14, "Energy": 8, "Other": 12,
        },
        "asset_class": {
            "Equity": 65, "Fixed Income": 25, "Real Assets": 5, "Cash": 3,
            "Alternatives": 2,
        },
    },
    factors={"value": 0.2, "quality": 0.3, "momentum": 0.2, "size": 0.1, "volatility": -0.2},
)

# Market-cap index: no currency or asset-class targets
MSCI_WORLD = Benchmark(
    key="msci_world",
    name="MSCI World",
    description="Region + sector + factor baseline",
    allocations={
        "region": {
            "North America": 71, "Europe": 18, "Asia Pacific": 9,
            "Emerging Markets": 0, "Other": 2,
        },
        "sector": {
            "Technology": 23, "Financials": 15, "Healthcare": 11, "Industrials": 11,
            "Consumer": 12, "Energy": 5, "Other": 23,
        },
    },
    factors={"value": 0.0, "quality": 0.15, "momentum": 0.1, "size": 0.2, "volatility": 0.0},
)

BENCHMARKS = [MODEL_PORTFOLIO, MSCI_WORLD]

# Which benchmark each allocation card is compared against
ALLOCATION_BENCHMARKS = {
    "currency": MODEL_PORTFOLIO,
    "region": MSCI_WORLD,
    "sector": MSCI_WORLD,
    "asset_class": MODEL_PORTFOLIO,
}
