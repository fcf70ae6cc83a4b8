import logging

import dash
from dash import dcc, html, Input, Output, State
import dash_bootstrap_components as dbc

import config
from api import register_api

# Import Pages
from pages import overview, holdings, allocations, factors

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize App
app = dash.Dash(
    __name__,
    external_stylesheets=[dbc.themes.CYBORG],
    suppress_callback_exceptions=True,
    title="Portfolio Insight Studio"
)
server = app.server
register_api(server)

# Sidebar Component
sidebar = html.Div(
    [
        html.H3("INSIGHT", className="display-6"),
        html.P("Portfolio Insight Studio", className="lead"),
        html.Hr(),

        dbc.Nav(
            [
                dbc.NavLink("Overview", href="/", active="exact"),
                dbc.NavLink("Holdings", href="/holdings", active="exact"),
                dbc.NavLink("Allocations", href="/allocations", active="exact"),
                dbc.NavLink("Factors", href="/factors", active="exact"),
            ],
            vertical=True,
            pills=True,
        ),

        html.Hr(),

        # Controls
        html.Div([
            dbc.Label("Theme"),
            dbc.Switch(id="theme-switch", label="Dark Mode", value=True, className="mb-2"),
        ]),
    ],
    id="sidebar",
    className="sidebar",
)

# Content Container
content = html.Div(id="page-content", className="content")

# Main Layout
app.layout = html.Div(
    [
        dcc.Location(id="url"),

        # Per-browser working copy of the portfolio (records + id/name/asOf)
        dcc.Store(id="holdings-store", storage_type="session"),
        dcc.Store(id="portfolio-meta-store", storage_type="session"),
        dcc.Store(id="theme-store", data="dark"),

        # Toggle Button
        html.Button(
            "☰",
            id="btn-sidebar-toggle",
            className="btn btn-secondary",
            style={
                "position": "fixed",
                "top": "10px",
                "left": "10px",
                "zIndex": 1100,
                "borderRadius": "50%",
                "width": "40px",
                "height": "40px",
                "display": "flex",
                "alignItems": "center",
                "justifyContent": "center",
                "fontSize": "1.2rem",
                "paddingBottom": "4px"
            }
        ),

        sidebar,
        content,
    ],
    id="main-container",
    **{"data-theme": "dark"}
)

# Validation Layout (Required for multi-page apps with global callbacks)
app.validation_layout = html.Div([
    app.layout,
    overview.layout,
    holdings.layout,
    allocations.layout,
    factors.layout,
])

# ============================================================
# CALLBACKS
# ============================================================

PAGES = {
    "/": overview.layout,
    "/holdings": holdings.layout,
    "/allocations": allocations.layout,
    "/factors": factors.layout,
}


# 1. Router
@app.callback(Output("page-content", "children"), [Input("url", "pathname")])
def render_page_content(pathname):
    if pathname in PAGES:
        return PAGES[pathname]
    return dbc.Container(
        [
            html.H1("404: Not found", className="text-danger"),
            html.Hr(),
            html.P(f"The pathname {pathname} was not recognised..."),
        ],
        className="py-3"
    )


# 2. Theme
@app.callback(
    [Output("theme-store", "data"),
     Output("main-container", "data-theme")],
    [Input("theme-switch", "value")]
)
def update_theme(is_dark):
    theme = "dark" if is_dark else "light"
    return theme, theme


# 3. Sidebar Toggle Logic
@app.callback(
    [Output("sidebar", "className"),
     Output("page-content", "className")],
    [Input("btn-sidebar-toggle", "n_clicks")],
    [State("sidebar", "className"),
     State("page-content", "className")]
)
def toggle_sidebar(n, sidebar_class, content_class):
    if n:
        if "hidden" in sidebar_class:
            return sidebar_class.replace(" hidden", ""), content_class.replace(" expanded", "")
        else:
            return sidebar_class + " hidden", content_class + " expanded"
    return sidebar_class, content_class


def main():
    logger.info("Portfolio Insight Studio running on http://localhost:%s", config.PORT)
    app.run(debug=config.DEBUG, port=config.PORT)


if __name__ == "__main__":
    main()
