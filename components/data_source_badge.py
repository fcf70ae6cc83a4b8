import dash_bootstrap_components as dbc
from dash import html

from data_loader import SOURCE_AZURE


def create_data_source_badge(source_status, error=None):
    """
    Badge indicating where portfolios are read from.
    source_status: {
        'source': 'azure-datalake' | 'fallback-local',
        'details': { 'account', 'filesystem', 'directory' } or { 'message' }
    }
    """
    if not source_status and not error:
        return html.Div()

    details = (source_status or {}).get("details", {})

    if error:
        label = "Store Error"
        color = "danger"
        header = f"Unable to load data: {error}"
    elif source_status.get("source") == SOURCE_AZURE:
        label = "Azure Data Lake"
        color = "success"
        header = (
            f"Data source: Azure Data Lake "
            f"({details.get('account')}/{details.get('filesystem')}/{details.get('directory')})"
        )
    else:
        label = "Sample Data"
        color = "warning"
        header = "Data source: fallback sample (set Azure env vars to use Data Lake)."

    badge = dbc.Badge(
        label,
        color=color,
        pill=True,
        id="data-source-badge",
        style={"cursor": "pointer", "fontSize": "0.8rem"}
    )

    return html.Div([
        badge,
        dbc.Tooltip(
            html.P(header, className="mb-0"),
            target="data-source-badge",
            placement="bottom",
            className="source-tooltip"
        )
    ], style={"display": "inline-block", "marginLeft": "10px"})
