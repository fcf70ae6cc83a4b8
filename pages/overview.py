from dash import dcc, html, callback, Input, Output
import dash_bootstrap_components as dbc
import dash_wrappers as dw
from components.data_source_badge import create_data_source_badge
from data_loader import get_source_status

FLAG_COLORS = {
    "total-weight": "danger",
    "allocation": "warning",
    "factor": "info",
    "aligned": "success",
}


def create_kpi_card(title, value, band=None, color=None):
    """
    KPI card with a status tag underneath the value.
    """
    border = {
        "success": "#28a745",
        "warning": "#ffc107",
        "danger": "#dc3545",
    }.get(color, "#4C6A92")

    card_content = [
        html.Div(title, className="text-muted small mb-1", style={'fontSize': '0.75rem', 'fontWeight': '500'}),
        html.H4(value, className="mb-1", style={'fontWeight': '600', 'fontSize': '1.4rem'}),
    ]
    if band:
        card_content.append(dbc.Badge(band, color=color or "secondary", pill=True))

    return dbc.Card(
        dbc.CardBody(card_content, className="p-2"),
        className="shadow-sm",
        style={'borderLeft': f'4px solid {border}', 'height': '100%'}
    )


layout = html.Div([
    # Source Row
    dbc.Row([
        dbc.Col(html.Div([
            html.H4(id="overview-portfolio-title", style={"display": "inline-block"}),
            html.Div(id="overview-source-container", style={"display": "inline-block"}),
        ]), width=12, className="mb-3"),
    ]),

    # Health Summary Row
    dbc.Row(id="health-summary-row", className="mb-4 g-2"),

    # Benchmarks & Flags Row
    dbc.Row([
        dbc.Col(dbc.Card([
            html.H5("Benchmarks", className="card-title p-2"),
            html.Div(id="benchmark-grid", className="p-2")
        ]), width=4),
        dbc.Col(dbc.Card([
            html.H5("Deviation Flags", className="card-title p-2"),
            dcc.Loading(html.Div(id="deviation-flags", className="p-2"))
        ]), width=8),
    ], className="mb-4"),
])


@callback(
    [Output("overview-portfolio-title", "children"),
     Output("overview-source-container", "children"),
     Output("health-summary-row", "children"),
     Output("benchmark-grid", "children"),
     Output("deviation-flags", "children")],
    [Input("holdings-store", "data"),
     Input("portfolio-meta-store", "data")]
)
def update_overview(records, meta):
    session = dw.session_from_store(records, meta)
    view = dw.build_view_model(session.evaluate())

    title = session.name or "No portfolio loaded"
    if session.as_of:
        title = f"{title} ({session.as_of})"

    health_cols = [
        dbc.Col(create_kpi_card(card["title"], card["value"], card["band"], card["color"]), width=4)
        for card in view["health"]
    ]

    benchmark_cards = [
        dbc.Card(dbc.CardBody([
            html.H6(card["title"], className="mb-1"),
            html.P(card["text"], className="text-muted small mb-0"),
        ], className="p-2"), className="mb-2 shadow-sm")
        for card in view["benchmarks"]
    ]

    flags = html.Ul([
        html.Li(
            dbc.Alert(flag["message"], color=FLAG_COLORS.get(flag["category"], "secondary"), className="py-2 mb-2"),
            style={"listStyle": "none"}
        )
        for flag in view["flags"]
    ], className="ps-0 mb-0")

    badge = create_data_source_badge(get_source_status())

    return title, badge, health_cols, benchmark_cards, flags
