import pandas as pd
import plotly.graph_objects as go

from benchmarks import ALLOCATION_BENCHMARKS, BENCHMARKS, MODEL_PORTFOLIO, MSCI_WORLD
from financial_math import compare_distribution, compare_factors
from portfolio_engine import PortfolioSession
from report_formatting import fmt_delta_pct, fmt_pct_clean, fmt_score, fmt_signed
from taxonomy import DIMENSIONS, FACTORS
from config import GLOBAL_PALETTE

ALLOCATION_TITLES = {
    "currency": "Currency allocation",
    "region": "Region allocation",
    "sector": "Sector allocation",
    "asset_class": "Asset-class allocation",
}

BAND_COLORS = {
    "Aligned": "success",
    "Watch": "warning",
    "Off target": "danger",
}


# ============================================================
# SESSION <-> STORE
# ============================================================
# Each browser session keeps its holdings as plain records in a dcc.Store.
# Callbacks rebuild a PortfolioSession from them; nothing is shared
# server-side.

def session_from_store(records, meta=None) -> PortfolioSession:
    return PortfolioSession.from_records(records, meta)


def session_to_store(session: PortfolioSession):
    return session.to_records(), session.meta


def get_holdings_grid_rows(session: PortfolioSession) -> list:
    """Grid rows carry their position so edits and removals map back to an index."""
    rows = []
    for i, record in enumerate(session.to_records()):
        rows.append({"row": i, **record})
    return rows


# ============================================================
# VIEW MODEL (pure)
# ============================================================

def _theme_template(theme):
    return "plotly_white" if theme == "light" else "plotly_dark"


def get_health_cards(result) -> list:
    cards = []
    for metric in result.health:
        cards.append({
            "key": metric.key,
            "title": metric.title,
            "value": fmt_pct_clean(metric.value),
            "band": metric.band,
            "color": BAND_COLORS.get(metric.band, "secondary"),
        })
    return cards


def get_allocation_table(result, dimension) -> pd.DataFrame:
    """
    Actual vs benchmark for one dimension.

    Rows follow the portfolio distribution's keys; a benchmark that does not
    cover a category shows 0 for it.
    """
    benchmark = ALLOCATION_BENCHMARKS[dimension]
    rows = compare_distribution(result.allocations[dimension], benchmark.target(dimension))
    return pd.DataFrame(
        [
            {
                "Category": r["key"],
                "Actual %": fmt_pct_clean(r["actual"]),
                "Benchmark %": fmt_pct_clean(r["benchmark"]),
                "Delta %": fmt_delta_pct(r["delta"]),
                "actual": r["actual"],
                "benchmark": r["benchmark"],
                "delta": r["delta"],
            }
            for r in rows
        ],
        columns=["Category", "Actual %", "Benchmark %", "Delta %", "actual", "benchmark", "delta"],
    )


def get_factor_table(result) -> pd.DataFrame:
    rows = compare_factors(result.factor_exposure, MODEL_PORTFOLIO, MSCI_WORLD)
    return pd.DataFrame([
        {
            "Factor": r["factor"].capitalize(),
            "Portfolio": fmt_score(r["portfolio"]),
            "Model": fmt_score(r[MODEL_PORTFOLIO.key]),
            "MSCI World": fmt_score(r[MSCI_WORLD.key]),
            "Δ vs model": fmt_signed(r[f"delta_{MODEL_PORTFOLIO.key}"], 2),
            "Δ vs MSCI": fmt_signed(r[f"delta_{MSCI_WORLD.key}"], 2),
        }
        for r in rows
    ])


def get_benchmark_cards() -> list:
    return [{"title": bm.name, "text": bm.description} for bm in BENCHMARKS]


def build_view_model(result) -> dict:
    """Everything the pages render, derived from one EngineResult."""
    allocations = {}
    for dim in DIMENSIONS:
        table = get_allocation_table(result, dim)
        allocations[dim] = {
            "title": ALLOCATION_TITLES[dim],
            "benchmark": ALLOCATION_BENCHMARKS[dim].name,
            "rows": table.to_dict("records"),
        }

    return {
        "total_weight": fmt_pct_clean(result.total_weight),
        "health": get_health_cards(result),
        "benchmarks": get_benchmark_cards(),
        "allocations": allocations,
        "factors": get_factor_table(result).to_dict("records"),
        "flags": [flag.to_dict() for flag in result.flags],
    }


# ============================================================
# CHARTS
# ============================================================

def get_allocation_chart(result, dimension, theme="dark"):
    """Grouped bars: actual % vs benchmark % per category."""
    df = get_allocation_table(result, dimension)
    benchmark = ALLOCATION_BENCHMARKS[dimension]

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=df["Category"],
        y=df["actual"],
        name="Actual %",
        marker_color=GLOBAL_PALETTE[0],
        hovertemplate="<b>Actual</b>: %{y:.1f}%<extra></extra>"
    ))
    fig.add_trace(go.Bar(
        x=df["Category"],
        y=df["benchmark"],
        name=f"{benchmark.name} %",
        marker_color=GLOBAL_PALETTE[1],
        hovertemplate="<b>Benchmark</b>: %{y:.1f}%<extra></extra>"
    ))
    fig.update_layout(
        barmode="group",
        yaxis_title="Percentage (%)",
        template=_theme_template(theme),
        margin=dict(l=40, r=20, t=40, b=40),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    return fig


def get_factor_chart(result, theme="dark"):
    """Portfolio factor exposure next to both benchmarks' targets."""
    labels = [f.capitalize() for f in FACTORS]

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=labels,
        y=[result.factor_exposure[f] for f in FACTORS],
        name="Portfolio",
        marker_color=GLOBAL_PALETTE[0],
    ))
    for i, bm in enumerate((MODEL_PORTFOLIO, MSCI_WORLD), start=1):
        fig.add_trace(go.Bar(
            x=labels,
            y=[bm.factors.get(f, 0.0) for f in FACTORS],
            name=bm.name,
            marker_color=GLOBAL_PALETTE[i * 2],
        ))
    fig.update_layout(
        barmode="group",
        yaxis=dict(title="Exposure (score)", range=[-1.5, 1.5]),
        template=_theme_template(theme),
        margin=dict(l=40, r=20, t=40, b=40),
    )
    return fig
