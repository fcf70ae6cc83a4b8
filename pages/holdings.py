import logging
from datetime import datetime

from dash import ctx, dcc, html, callback, Input, Output, State, no_update
import dash_bootstrap_components as dbc
import dash_ag_grid as dag

import dash_wrappers as dw
import data_loader
from data_loader import PortfolioStoreError
from report_formatting import fmt_pct_clean
from taxonomy import DIMENSIONS, DIMENSION_LABELS, DIMENSION_RECORD_KEYS, FACTORS

logger = logging.getLogger(__name__)


def _holding_column_defs():
    column_defs = [
        {"field": "row", "hide": True},
        {"field": "name", "headerName": "Name", "editable": True, "minWidth": 180,
         "checkboxSelection": True, "headerCheckboxSelection": True},
        {"field": "weight", "headerName": "Weight %", "editable": True,
         "cellEditor": "agNumberCellEditor",
         "cellEditorParams": {"min": 0, "max": 100, "precision": 1}},
    ]
    for dim, enum in DIMENSIONS.items():
        column_defs.append({
            "field": DIMENSION_RECORD_KEYS[dim],
            "headerName": DIMENSION_LABELS[dim],
            "editable": True,
            "cellEditor": "agSelectCellEditor",
            "cellEditorParams": {"values": enum.options()},
        })
    for factor in FACTORS:
        column_defs.append({
            "field": factor,
            "headerName": factor.capitalize(),
            "editable": True,
            "cellEditor": "agNumberCellEditor",
            "cellEditorParams": {"min": -1.5, "max": 1.5, "precision": 2},
        })
    return column_defs


layout = html.Div([
    dcc.Store(id="portfolio-autoload"),

    dbc.Row([
        dbc.Col(dbc.Card([
            html.H5("Portfolio", className="card-title p-2"),
            html.Div([
                dcc.Dropdown(id="portfolio-select", placeholder="Select a portfolio",
                             className="mb-2 text-dark"),
                dbc.Button("Refresh list", id="refresh-portfolios-btn", color="secondary",
                           size="sm", className="me-2"),
                dbc.Button("Load portfolio", id="load-portfolio-btn", color="primary", size="sm"),
                html.Div(id="portfolio-list-status", className="text-muted small mt-2"),
            ], className="p-2")
        ]), width=12, className="mb-4"),
    ]),

    dbc.Row([
        dbc.Col(dbc.Card([
            html.Div([
                html.H5("Current Holdings", className="card-title p-2", style={"display": "inline-block"}),
                html.Span(id="holdings-total", className="text-muted ms-2"),
            ]),
            html.Div([
                dbc.Button("Add holding", id="add-holding-btn", color="success", size="sm", className="me-2"),
                dbc.Button("Remove selected", id="remove-holding-btn", color="danger", size="sm"),
            ], className="px-2 mb-2"),
            html.Div(
                dag.AgGrid(
                    id="holdings-grid",
                    rowData=[],
                    columnDefs=_holding_column_defs(),
                    defaultColDef={"minWidth": 100, "resizable": True},
                    columnSize="autoSize",
                    className="ag-theme-alpine-dark",
                    dashGridOptions={
                        "domLayout": "autoHeight",
                        "rowSelection": "multiple",
                        "suppressRowClickSelection": True,
                        "stopEditingWhenCellsLoseFocus": True,
                    }
                ), style={'overflowX': 'auto'}
            ),
            html.Div(id="holdings-status", className="text-muted small p-2"),
        ]), width=12, className="mb-4"),
    ]),
])


@callback(
    [Output("portfolio-select", "options"),
     Output("portfolio-select", "value"),
     Output("portfolio-autoload", "data"),
     Output("portfolio-list-status", "children")],
    [Input("refresh-portfolios-btn", "n_clicks")],
    [State("holdings-store", "data"),
     State("portfolio-meta-store", "data")]
)
def refresh_portfolios(n_clicks, records, meta):
    try:
        portfolios = data_loader.list_portfolios()
    except PortfolioStoreError as e:
        logger.warning("Could not refresh portfolio list: %s", e)
        return [], None, no_update, f"Could not load portfolio list: {e}"

    options = [{"label": f"{p['name']} ({p['asOf']})", "value": p["id"]} for p in portfolios]
    ids = [p["id"] for p in portfolios]

    # Coming back to the page keeps the working copy instead of reloading it
    if not n_clicks and records is not None:
        loaded_id = (meta or {}).get("id")
        return options, loaded_id if loaded_id in ids else None, no_update, ""

    selected = ids[0] if ids else None
    return options, selected, {"id": selected, "requested_at": datetime.now().isoformat()}, ""


def _apply_cell_changes(session, changes):
    # dash-ag-grid sends a list of change events (a single dict on older releases)
    if isinstance(changes, dict):
        changes = [changes]
    for change in changes or []:
        data = change.get("data") or {}
        index = data.get("row", change.get("rowIndex"))
        field = change.get("colId")
        try:
            session.update_field(int(index), field, change.get("value"))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning("Ignoring edit of %s at row %s: %s", field, index, e)


@callback(
    [Output("holdings-store", "data"),
     Output("portfolio-meta-store", "data"),
     Output("holdings-status", "children")],
    [Input("load-portfolio-btn", "n_clicks"),
     Input("portfolio-autoload", "data"),
     Input("add-holding-btn", "n_clicks"),
     Input("remove-holding-btn", "n_clicks"),
     Input("holdings-grid", "cellValueChanged")],
    [State("portfolio-select", "value"),
     State("holdings-grid", "selectedRows"),
     State("holdings-store", "data"),
     State("portfolio-meta-store", "data")],
    prevent_initial_call=True
)
def update_holdings(_load, autoload, _add, _remove, cell_changes,
                    selected_id, selected_rows, records, meta):
    trigger = ctx.triggered_id
    session = dw.session_from_store(records, meta)

    if trigger in ("load-portfolio-btn", "portfolio-autoload"):
        portfolio_id = selected_id if trigger == "load-portfolio-btn" else (autoload or {}).get("id")
        if not portfolio_id:
            session.clear()
            holdings, meta = dw.session_to_store(session)
            return holdings, meta, "No portfolio selected."
        try:
            record = data_loader.fetch_portfolio(portfolio_id)
        except PortfolioStoreError as e:
            # Keep the previous holdings untouched
            logger.warning("Could not load portfolio %s: %s", portfolio_id, e)
            return no_update, no_update, f"Could not load selected portfolio: {e}"
        session.load(record if isinstance(record, dict) else {})
        holdings, meta = dw.session_to_store(session)
        return holdings, meta, f"Loaded {len(holdings)} holdings."

    if trigger == "add-holding-btn":
        session.add_holding()
    elif trigger == "remove-holding-btn":
        for index in sorted({r["row"] for r in selected_rows or [] if "row" in r}, reverse=True):
            session.remove_holding(index)
    elif trigger == "holdings-grid":
        _apply_cell_changes(session, cell_changes)
    else:
        return no_update, no_update, no_update

    holdings, meta = dw.session_to_store(session)
    return holdings, meta, ""


@callback(
    [Output("holdings-grid", "rowData"),
     Output("holdings-total", "children")],
    [Input("holdings-store", "data"),
     Input("portfolio-meta-store", "data")]
)
def render_holdings(records, meta):
    session = dw.session_from_store(records, meta)
    total = session.evaluate().total_weight
    return dw.get_holdings_grid_rows(session), f"Total weight: {fmt_pct_clean(total)}"
