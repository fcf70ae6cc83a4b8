from dash import dcc, html, callback, Input, Output
import dash_bootstrap_components as dbc
import dash_ag_grid as dag
import dash_wrappers as dw
from taxonomy import DIMENSIONS

DISPLAY_COLUMNS = ["Category", "Actual %", "Benchmark %", "Delta %"]


def _allocation_card(dim):
    return dbc.Card([
        html.H5(dw.ALLOCATION_TITLES[dim], className="card-title p-2"),
        dcc.Graph(id=f"alloc-chart-{dim}", style={'height': '320px'}),
        html.Div(id=f"alloc-table-{dim}", className="p-2"),
    ])


layout = html.Div([
    dbc.Row([
        dbc.Col(_allocation_card("currency"), width=6),
        dbc.Col(_allocation_card("region"), width=6),
    ], className="mb-4"),
    dbc.Row([
        dbc.Col(_allocation_card("sector"), width=6),
        dbc.Col(_allocation_card("asset_class"), width=6),
    ], className="mb-4"),
])


def _allocation_grid(dim, df):
    column_defs = []
    for col in DISPLAY_COLUMNS:
        col_def = {"field": col, "headerName": col}
        if col == "Delta %":
            col_def["cellStyle"] = {
                "styleConditions": [
                    {"condition": "params.value && params.value.startsWith('-')", "style": {"color": "#dc3545"}},
                    {"condition": "params.value && params.value.startsWith('+')", "style": {"color": "#28a745"}}
                ]
            }
        column_defs.append(col_def)

    return html.Div([
        dag.AgGrid(
            id=f"alloc-grid-{dim}",
            rowData=df[DISPLAY_COLUMNS].to_dict('records'),
            columnDefs=column_defs,
            defaultColDef={"flex": 1, "minWidth": 90, "sortable": True, "resizable": True},
            className="ag-theme-alpine-dark",
            dashGridOptions={"domLayout": "autoHeight"}
        ),
        html.P("Delta % = actual allocation minus benchmark allocation", style={
            'fontSize': '9pt',
            'fontStyle': 'italic',
            'color': 'gray',
            'marginTop': '10px',
            'marginBottom': '0px'
        })
    ])


@callback(
    [Output(f"alloc-chart-{dim}", "figure") for dim in DIMENSIONS]
    + [Output(f"alloc-table-{dim}", "children") for dim in DIMENSIONS],
    [Input("holdings-store", "data"),
     Input("theme-store", "data")]
)
def update_allocations(records, theme):
    result = dw.session_from_store(records).evaluate()

    charts = [dw.get_allocation_chart(result, dim, theme) for dim in DIMENSIONS]
    tables = [_allocation_grid(dim, dw.get_allocation_table(result, dim)) for dim in DIMENSIONS]
    return charts + tables
