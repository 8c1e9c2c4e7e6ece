"""Chart datasets built from expenses or from monthly summaries."""
from typing import Iterable, Optional, Sequence, Union

from kakeibo.aggregate import group_by_month
from kakeibo.categories import color_for
from kakeibo.domain import Expense, MonthlySummary
from kakeibo.months import format_month_for_chart

Row = dict[str, Union[str, int]]


def observed_categories(records: Iterable[Expense]) -> list[str]:
    seen: dict[str, None] = {}
    for e in records:
        seen.setdefault(e.category, None)
    return list(seen)


def categories_in(summaries: Iterable[MonthlySummary]) -> list[str]:
    seen: dict[str, None] = {}
    for summary in summaries:
        for item in summary.by_category:
            seen.setdefault(item.category, None)
    return list(seen)


def build_series(
    records: Sequence[Expense],
    month_window: Sequence[str],
    categories: Optional[Sequence[str]] = None,
) -> list[Row]:
    """Dense month x category matrix, one row per month of ``month_window``.

    Every month in the window appears once and in window order, with zero for
    categories that have no spending that month.
    """
    if categories is None:
        categories = observed_categories(records)
    by_month = group_by_month(records)

    rows: list[Row] = []
    for month in month_window:
        totals: dict[str, int] = {}
        for e in by_month.get(month, ()):
            totals[e.category] = totals.get(e.category, 0) + e.amount
        row: Row = {"month": format_month_for_chart(month)}
        for category in categories:
            row[category] = totals.get(category, 0)
        rows.append(row)
    return rows


def series_from_summaries(
    summaries: Sequence[MonthlySummary],
    month_window: Sequence[str],
    categories: Sequence[str],
) -> list[Row]:
    """Same row shape as build_series, from summaries listed in window order.

    Summaries beyond the window are ignored; months without a summary get zeros.
    """
    by_month = dict(zip(month_window, summaries))
    rows: list[Row] = []
    for month in month_window:
        summary = by_month.get(month, MonthlySummary.empty())
        amounts = {item.category: item.amount for item in summary.by_category}
        row: Row = {"month": format_month_for_chart(month)}
        for category in categories:
            row[category] = amounts.get(category, 0)
        rows.append(row)
    return rows


def category_slices(summary: Optional[MonthlySummary]) -> list[dict]:
    if summary is None:
        return []
    return [
        {"name": item.category, "value": item.amount, "color": color_for(item.category, i)}
        for i, item in enumerate(summary.by_category)
    ]
