from dash import dcc, html, callback, Input, Output
import dash_bootstrap_components as dbc
import dash_ag_grid as dag
import dash_wrappers as dw

layout = html.Div([
    dbc.Row([
        dbc.Col(dbc.Card([
            html.H5("Factor Exposure", className="card-title p-2"),
            dcc.Loading(html.Div(id="factor-table-container", className="p-2"))
        ]), width=12, className="mb-4"),
    ]),
    dbc.Row([
        dbc.Col(dbc.Card([
            html.H5("Portfolio vs Benchmarks", className="card-title p-2"),
            dcc.Graph(id="factor-chart")
        ]), width=12, className="mb-4"),
    ]),
])


@callback(
    [Output("factor-table-container", "children"),
     Output("factor-chart", "figure")],
    [Input("holdings-store", "data"),
     Input("theme-store", "data")]
)
def update_factors(records, theme):
    result = dw.session_from_store(records).evaluate()
    df = dw.get_factor_table(result)

    column_defs = []
    for col in df.columns:
        col_def = {"field": col, "headerName": col}
        if col.startswith("Δ"):
            col_def["cellStyle"] = {
                "styleConditions": [
                    {"condition": "params.value && params.value.startsWith('-')", "style": {"color": "#dc3545"}},
                    {"condition": "params.value && params.value.startsWith('+')", "style": {"color": "#28a745"}}
                ]
            }
        column_defs.append(col_def)

    table = dag.AgGrid(
        id="factor-grid",
        rowData=df.to_dict('records'),
        columnDefs=column_defs,
        defaultColDef={"flex": 1, "minWidth": 100, "sortable": True, "resizable": True},
        className="ag-theme-alpine-dark",
        dashGridOptions={"domLayout": "autoHeight"}
    )

    return table, dw.get_factor_chart(result, theme)
