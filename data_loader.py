import copy
import logging
import posixpath
import re
from urllib.parse import quote

import requests

import config

logger = logging.getLogger(__name__)

# ============================================================
# CONFIG
# ============================================================
SOURCE_AZURE = "azure-datalake"
SOURCE_FALLBACK = "fallback-local"

ERROR_BODY_PREVIEW = 300

FALLBACK_PORTFOLIOS = [
    {
        "id": "growth-model",
        "name": "Growth Model",
        "asOf": "2026-01-31",
        "holdings": [
            {"name": "US Tech ETF", "weight": 30, "currency": "USD", "region": "North America",
             "sector": "Technology", "assetClass": "Equity",
             "value": -0.2, "quality": 0.6, "momentum": 0.8, "size": 0.7, "volatility": 0.4},
            {"name": "Europe Financials", "weight": 15, "currency": "EUR", "region": "Europe",
             "sector": "Financials", "assetClass": "Equity",
             "value": 0.6, "quality": 0.2, "momentum": 0.1, "size": -0.2, "volatility": 0.0},
            {"name": "EM Equity", "weight": 20, "currency": "USD", "region": "Emerging Markets",
             "sector": "Industrials", "assetClass": "Equity",
             "value": 0.4, "quality": -0.2, "momentum": 0.3, "size": -0.4, "volatility": 0.5},
            {"name": "Global Bonds", "weight": 25, "currency": "USD", "region": "Other",
             "sector": "Other", "assetClass": "Fixed Income",
             "value": 0.2, "quality": 0.3, "momentum": -0.3, "size": 0.0, "volatility": -0.7},
            {"name": "Cash", "weight": 10, "currency": "EUR", "region": "Europe",
             "sector": "Other", "assetClass": "Cash",
             "value": 0, "quality": 0, "momentum": 0, "size": 0, "volatility": -0.2},
        ],
    }
]


class PortfolioStoreError(RuntimeError):
    """A portfolio listing or fetch could not be completed."""


class PortfolioNotFoundError(PortfolioStoreError):
    pass


# ------------------------------------------------------------
# Azure settings
# ------------------------------------------------------------

def normalize_sas_token(raw) -> str:
    if not raw:
        return ""
    return raw[1:] if raw.startswith("?") else raw


def get_azure_settings() -> dict:
    """Read at call time so tests (and a reloaded .env) see current values."""
    return {
        "account": config.AZURE_STORAGE_ACCOUNT,
        "sas_token": normalize_sas_token(config.AZURE_STORAGE_SAS_TOKEN),
        "file_system": config.AZURE_DATALAKE_FILESYSTEM,
        "directory": config.AZURE_DATALAKE_DIRECTORY or "portfolios",
    }


def use_azure() -> bool:
    return bool(
        config.AZURE_STORAGE_ACCOUNT
        and config.AZURE_STORAGE_SAS_TOKEN
        and config.AZURE_DATALAKE_FILESYSTEM
    )


def get_source_status() -> dict:
    if use_azure():
        settings = get_azure_settings()
        return {
            "source": SOURCE_AZURE,
            "details": {
                "account": settings["account"],
                "filesystem": settings["file_system"],
                "directory": settings["directory"],
            },
        }
    return {
        "source": SOURCE_FALLBACK,
        "details": {"message": "Azure environment variables missing. Serving fallback sample portfolio."},
    }


# ------------------------------------------------------------
# Azure Data Lake (DFS REST endpoint)
# ------------------------------------------------------------

def _azure_base_url(settings) -> str:
    return f"https://{settings['account']}.dfs.core.windows.net/{quote(settings['file_system'], safe='')}"


def _fetch_json(url: str):
    try:
        resp = requests.get(url, timeout=config.AZURE_REQUEST_TIMEOUT)
    except requests.RequestException as e:
        logger.warning("Azure request error: %s", type(e).__name__)
        # The exception text carries the request URL, SAS token included
        raise PortfolioStoreError(f"Azure request failed: {type(e).__name__}") from e

    if not resp.ok:
        logger.warning("Azure request failed with HTTP %s", resp.status_code)
        raise PortfolioStoreError(
            f"Azure request failed ({resp.status_code}): {resp.text[:ERROR_BODY_PREVIEW]}"
        )
    try:
        return resp.json()
    except ValueError as e:
        raise PortfolioStoreError(f"Azure returned invalid JSON: {e}") from e


def list_portfolio_files(settings=None) -> list:
    """Names of the .json files directly inside the configured directory."""
    settings = settings or get_azure_settings()
    url = (
        f"{_azure_base_url(settings)}?resource=filesystem"
        f"&directory={quote(settings['directory'], safe='')}"
        f"&recursive=false&{settings['sas_token']}"
    )
    body = _fetch_json(url)
    if not isinstance(body, dict):
        body = {}

    paths = body.get("paths")
    if not isinstance(paths, list):
        paths = []

    files = []
    for item in paths:
        if not isinstance(item, dict):
            continue
        name = str(item.get("name", ""))
        if str(item.get("isDirectory")) == "true" or not name.endswith(".json"):
            continue
        files.append(posixpath.basename(name))
    return files


def read_portfolio_file(file_name: str, settings=None) -> dict:
    settings = settings or get_azure_settings()
    url = (
        f"{_azure_base_url(settings)}/{quote(settings['directory'], safe='')}"
        f"/{quote(file_name, safe='')}?{settings['sas_token']}"
    )
    return _fetch_json(url)


# ============================================================
# PUBLIC STORE API
# ============================================================

def _summary(portfolio: dict) -> dict:
    return {"id": portfolio["id"], "name": portfolio["name"], "asOf": portfolio["asOf"]}


def list_portfolios() -> list:
    """[{id, name, asOf}] from Azure when configured, else the fallback list."""
    if not use_azure():
        return [_summary(p) for p in FALLBACK_PORTFOLIOS]

    settings = get_azure_settings()
    metadata = []
    for file_name in list_portfolio_files(settings):
        body = read_portfolio_file(file_name, settings)
        if not isinstance(body, dict):
            body = {}
        metadata.append({
            "id": body.get("id") or re.sub(r"\.json$", "", file_name, flags=re.IGNORECASE),
            "name": body.get("name") or file_name,
            "asOf": body.get("asOf") or "unknown",
        })
    logger.info("Listed %d portfolios from Azure Data Lake", len(metadata))
    return metadata


def fetch_portfolio(portfolio_id: str) -> dict:
    """
    Raw portfolio record {id, name, asOf, holdings}.

    The record is untrusted; callers normalize the holdings before use.
    """
    if not use_azure():
        for portfolio in FALLBACK_PORTFOLIOS:
            if portfolio["id"] == portfolio_id:
                return copy.deepcopy(portfolio)
        raise PortfolioNotFoundError(f"Fallback portfolio '{portfolio_id}' not found.")

    return read_portfolio_file(f"{portfolio_id}.json")
