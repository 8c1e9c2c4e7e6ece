from kakeibo.aggregate import aggregate
from kakeibo.categories import FALLBACK_PALETTE
from kakeibo.domain import CategoryAmount, Expense, MonthlySummary
from kakeibo.series import (
    build_series,
    categories_in,
    category_slices,
    observed_categories,
    series_from_summaries,
)


def make_expense(id, amount, category, date):
    return Expense(id=id, amount=amount, category=category, description="", date=date)


def records():
    return [
        make_expense("e1", 3500, "食費", "2024-01-05"),
        make_expense("e2", 2000, "交通費", "2024-01-20"),
        make_expense("e3", 1000, "食費", "2024-03-01"),
        make_expense("e4", 800, "娯楽費", "2024-05-01"),
    ]


def test_build_series_dense_rows_in_window_order():
    window = ["2024-01", "2024-02", "2024-03"]
    rows = build_series(records(), window)
    assert [r["month"] for r in rows] == ["2024/01", "2024/02", "2024/03"]
    assert rows[1] == {"month": "2024/02", "食費": 0, "交通費": 0, "娯楽費": 0}
    assert rows[0]["食費"] == 3500


def test_row_sums_match_aggregate():
    window = ["2024-01", "2024-02", "2024-03"]
    cats = observed_categories(records())
    for month, row in zip(window, build_series(records(), window, cats)):
        assert sum(row[c] for c in cats) == aggregate(records(), month).total


def test_months_outside_window_are_ignored():
    rows = build_series(records(), ["2024-01"], ["食費"])
    assert rows == [{"month": "2024/01", "食費": 3500}]


def test_observed_categories_first_seen_order():
    assert observed_categories(records()) == ["食費", "交通費", "娯楽費"]


def test_series_from_summaries_fills_missing_months():
    summaries = [
        MonthlySummary(5500, 2, (CategoryAmount("食費", 3500), CategoryAmount("交通費", 2000))),
        MonthlySummary.empty(),
    ]
    window = ["2024-01", "2024-02", "2024-03"]
    cats = categories_in(summaries)
    assert cats == ["食費", "交通費"]
    rows = series_from_summaries(summaries, window, cats)
    assert len(rows) == 3
    assert rows[0] == {"month": "2024/01", "食費": 3500, "交通費": 2000}
    assert rows[2] == {"month": "2024/03", "食費": 0, "交通費": 0}


def test_category_slices_colors():
    summary = MonthlySummary(1500, 2, (CategoryAmount("食費", 1000), CategoryAmount("ペット", 500)))
    slices = category_slices(summary)
    assert slices[0] == {"name": "食費", "value": 1000, "color": "#FF6B35"}
    assert slices[1]["color"] == FALLBACK_PALETTE[1]
    assert category_slices(None) == []
