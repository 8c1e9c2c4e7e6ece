from typing import Iterable, Optional, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from kakeibo.categories import color_for, icon_for
from kakeibo.domain import Expense, MonthlySummary
from kakeibo.formatters import format_currency, format_currency_for_chart
from kakeibo.series import Row, category_slices

TEMPLATE = "plotly_dark"

EXPENSE_COLUMNS = ["id", "date", "category", "icon", "description", "amount"]


def yen_ticks(top: float, count: int = 5) -> list[int]:
    """Round tick values from 0 up to at least ``top``."""
    if top <= 0:
        return [0]
    raw = top / count
    magnitude = 10 ** (len(str(int(raw))) - 1)
    step = next(m * magnitude for m in (1, 2, 5, 10) if m * magnitude >= raw)
    return list(range(0, int(top) + step, step))


def expenses_frame(expenses: Iterable[Expense]) -> pd.DataFrame:
    rows = [
        {
            "id": e.id,
            "date": e.date,
            "category": e.category,
            "icon": icon_for(e.category).value,
            "description": e.description,
            "amount": e.amount,
        }
        for e in expenses
    ]
    df = pd.DataFrame(rows, columns=EXPENSE_COLUMNS)
    if not df.empty:
        df["date"] = pd.to_datetime(df["date"], errors="coerce")
        df = df.sort_values("date", ascending=False).reset_index(drop=True)
    return df


def category_pie(summary: Optional[MonthlySummary]) -> go.Figure:
    slices = category_slices(summary)
    fig = go.Figure(
        go.Pie(
            labels=[s["name"] for s in slices],
            values=[s["value"] for s in slices],
            marker=dict(colors=[s["color"] for s in slices]),
            hole=0.45,
            sort=False,
            text=[format_currency(s["value"]) for s in slices],
            hovertemplate="%{label}: %{text}<extra></extra>",
        )
    )
    fig.update_layout(template=TEMPLATE, margin=dict(t=30, b=10, l=10, r=10))
    return fig


def trend_bar(rows: Sequence[Row], categories: Sequence[str]) -> go.Figure:
    """Stacked monthly bars, one color per category."""
    df = pd.DataFrame(list(rows), columns=["month", *categories])
    long_df = df.melt(id_vars="month", var_name="category", value_name="amount")
    colors = {c: color_for(c, i) for i, c in enumerate(categories)}
    fig = px.bar(
        long_df,
        x="month",
        y="amount",
        color="category",
        color_discrete_map=colors,
        category_orders={"month": list(df["month"]), "category": list(categories)},
        labels={"month": "月", "amount": "金額 (円)", "category": "カテゴリー"},
        template=TEMPLATE,
    )
    ticks = yen_ticks(df[list(categories)].sum(axis=1).max() if len(df) and categories else 0)
    fig.update_yaxes(tickvals=ticks, ticktext=[format_currency_for_chart(t) for t in ticks])
    fig.update_layout(barmode="stack", margin=dict(t=30, b=10, l=10, r=10))
    return fig
