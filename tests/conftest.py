import pytest

import config
from portfolio_engine import normalize_holding

# ── Single all-equity US tech position (100% weight, neutral factors) ──
US_TECH = {
    "name": "US Tech ETF", "weight": 100, "currency": "USD", "region": "North America",
    "sector": "Technology", "assetClass": "Equity",
    "value": 0, "quality": 0, "momentum": 0, "size": 0, "volatility": 0,
}

# ── A portfolio sitting exactly on the model portfolio's asset-class targets ──
# Equity 65 / Fixed Income 25 / Real Assets 5 / Cash 3 / Alternatives 2 = 100
# Every holding carries the model factor targets, so exposure == model.
MODEL_FACTORS = {"value": 0.2, "quality": 0.3, "momentum": 0.2, "size": 0.1, "volatility": -0.2}
ON_MODEL = [
    {"name": "Equity sleeve", "weight": 65, "assetClass": "Equity", **MODEL_FACTORS},
    {"name": "Bond sleeve", "weight": 25, "assetClass": "Fixed Income", **MODEL_FACTORS},
    {"name": "Real assets", "weight": 5, "assetClass": "Real Assets", **MODEL_FACTORS},
    {"name": "Cash", "weight": 3, "assetClass": "Cash", **MODEL_FACTORS},
    {"name": "Hedge funds", "weight": 2, "assetClass": "Alternatives", **MODEL_FACTORS},
]


def make_holding(**overrides):
    """Raw record based on US_TECH with field overrides."""
    record = dict(US_TECH)
    record.update(overrides)
    return record


@pytest.fixture
def us_tech_holdings():
    return [normalize_holding(US_TECH)]


@pytest.fixture
def on_model_holdings():
    return [normalize_holding(r) for r in ON_MODEL]


@pytest.fixture
def fallback_store(monkeypatch):
    """Azure disabled: the store serves the built-in sample portfolio."""
    monkeypatch.setattr(config, "AZURE_STORAGE_ACCOUNT", None)
    monkeypatch.setattr(config, "AZURE_STORAGE_SAS_TOKEN", None)
    monkeypatch.setattr(config, "AZURE_DATALAKE_FILESYSTEM", None)
    monkeypatch.setattr(config, "AZURE_DATALAKE_DIRECTORY", "portfolios")


@pytest.fixture
def azure_store(monkeypatch):
    monkeypatch.setattr(config, "AZURE_STORAGE_ACCOUNT", "acct")
    monkeypatch.setattr(config, "AZURE_STORAGE_SAS_TOKEN", "?sv=2024&sig=abc")
    monkeypatch.setattr(config, "AZURE_DATALAKE_FILESYSTEM", "data")
    monkeypatch.setattr(config, "AZURE_DATALAKE_DIRECTORY", "portfolios")


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self._payload = payload
        self.status_code = status_code
        self.text = text if text is not None else ""

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


@pytest.fixture
def fake_requests(monkeypatch):
    """
    Routes requests.get by URL substring. Register with
    fake_requests.routes["substring"] = FakeResponse(...).
    Records every URL in fake_requests.calls.
    """
    import data_loader

    class Router:
        def __init__(self):
            self.routes = {}
            self.calls = []

        def get(self, url, timeout=None):
            self.calls.append(url)
            for fragment, response in self.routes.items():
                if fragment in url:
                    if isinstance(response, Exception):
                        raise response
                    return response
            return FakeResponse(status_code=404, text="BlobNotFound")

    router = Router()
    monkeypatch.setattr(data_loader.requests, "get", router.get)
    return router
