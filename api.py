import logging

from flask import jsonify, request

import data_loader
from data_loader import PortfolioNotFoundError, PortfolioStoreError
from portfolio_engine import PortfolioSession

logger = logging.getLogger(__name__)


def _error(status, message, details=None):
    payload = {"error": message}
    if details is not None:
        payload["details"] = details
    return jsonify(payload), status


def register_api(server):
    """Attach the /api/* JSON routes to the Flask server behind the Dash app."""

    @server.before_request
    def _api_get_only():
        if request.path.startswith("/api/") and request.method not in ("GET", "HEAD"):
            return _error(405, "Method not allowed.")
        return None

    @server.route("/api/source")
    def api_source():
        return jsonify(data_loader.get_source_status())

    @server.route("/api/portfolios")
    def api_portfolios():
        try:
            return jsonify(data_loader.list_portfolios())
        except PortfolioStoreError as e:
            logger.warning("Portfolio listing failed: %s", e)
            return _error(500, "Failed to load portfolio list from Azure Data Lake.", str(e))

    @server.route("/api/portfolios/<portfolio_id>")
    def api_portfolio(portfolio_id):
        try:
            return jsonify(data_loader.fetch_portfolio(portfolio_id))
        except PortfolioNotFoundError as e:
            return _error(404, str(e))
        except PortfolioStoreError as e:
            logger.warning("Portfolio fetch failed for %s: %s", portfolio_id, e)
            return _error(500, f"Failed to load portfolio '{portfolio_id}' from Azure Data Lake.", str(e))

    @server.route("/api/portfolios/<portfolio_id>/insights")
    def api_portfolio_insights(portfolio_id):
        try:
            record = data_loader.fetch_portfolio(portfolio_id)
        except PortfolioNotFoundError as e:
            return _error(404, str(e))
        except PortfolioStoreError as e:
            logger.warning("Portfolio fetch failed for %s: %s", portfolio_id, e)
            return _error(500, f"Failed to load portfolio '{portfolio_id}' from Azure Data Lake.", str(e))

        session = PortfolioSession()
        result = session.load(record if isinstance(record, dict) else {})
        return jsonify({
            "portfolio": session.meta,
            "holdings": session.to_records(),
            "insights": result.to_dict(),
        })

    @server.route("/api/", defaults={"unknown": ""})
    @server.route("/api/<path:unknown>")
    def api_not_found(unknown):
        return _error(404, "API endpoint not found.")

    return server
