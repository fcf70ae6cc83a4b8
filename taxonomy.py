from enum import Enum

# ============================================================
# CATEGORICAL DIMENSIONS
# ============================================================
# Member order is the order distributions are reported in.


class Category(str, Enum):
    """Closed enumeration with an explicit fallback member."""

    @classmethod
    def fallback(cls):
        return cls("Other")

    @classmethod
    def parse(cls, raw):
        """Return the member whose value equals `raw`, else the fallback."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(raw)
        except (TypeError, ValueError):
            return cls.fallback()

    @classmethod
    def options(cls):
        return [member.value for member in cls]


class Currency(Category):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    OTHER = "Other"


class Region(Category):
    NORTH_AMERICA = "North America"
    EUROPE = "Europe"
    ASIA_PACIFIC = "Asia Pacific"
    EMERGING_MARKETS = "Emerging Markets"
    OTHER = "Other"


class Sector(Category):
    TECHNOLOGY = "Technology"
    FINANCIALS = "Financials"
    HEALTHCARE = "Healthcare"
    INDUSTRIALS = "Industrials"
    CONSUMER = "Consumer"
    ENERGY = "Energy"
    OTHER = "Other"


class AssetClass(Category):
    EQUITY = "Equity"
    FIXED_INCOME = "Fixed Income"
    REAL_ASSETS = "Real Assets"
    CASH = "Cash"
    ALTERNATIVES = "Alternatives"

    @classmethod
    def fallback(cls):
        return cls.ALTERNATIVES


# Holding attribute -> enumeration
DIMENSIONS = {
    "currency": Currency,
    "region": Region,
    "sector": Sector,
    "asset_class": AssetClass,
}

# Record keys as they arrive from the portfolio store / grid
DIMENSION_RECORD_KEYS = {
    "currency": "currency",
    "region": "region",
    "sector": "sector",
    "asset_class": "assetClass",
}

DIMENSION_LABELS = {
    "currency": "Currency",
    "region": "Region",
    "sector": "Sector",
    "asset_class": "Asset class",
}

# ============================================================
# STYLE FACTORS
# ============================================================
FACTORS = ["value", "quality", "momentum", "size", "volatility"]

WEIGHT_RANGE = (0.0, 100.0)
FACTOR_RANGE = (-1.5, 1.5)


def resolve_dimension(name: str) -> str:
    """Accept either the attribute name or the record key ("assetClass")."""
    if name in DIMENSIONS:
        return name
    for attr, record_key in DIMENSION_RECORD_KEYS.items():
        if record_key == name:
            return attr
    raise KeyError(f"Unknown dimension: {name}")
