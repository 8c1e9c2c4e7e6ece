from kakeibo.domain import Expense
from kakeibo.months import month_key


def by_month(month: str):
    def _filter(e: Expense) -> bool:
        return month_key(e.date) == month

    return _filter


def by_category(category: str):
    def _filter(e: Expense) -> bool:
        return e.category == category

    return _filter


def by_text(query: str):
    needle = query.strip().lower()

    def _filter(e: Expense) -> bool:
        return needle in e.description.lower() or needle in e.category.lower()

    return _filter
