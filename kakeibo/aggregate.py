import asyncio
from collections import defaultdict
from functools import lru_cache
from typing import Iterable, Iterator, Sequence

from kakeibo.categories import category_rank
from kakeibo.domain import CategoryAmount, Expense, MonthlySummary
from kakeibo.filters import by_month
from kakeibo.months import month_key


def _sort_key(item: tuple[str, int]) -> tuple[int, int, str]:
    category, amount = item
    return -amount, category_rank(category), category


def category_totals(records: Iterable[Expense]) -> tuple[CategoryAmount, ...]:
    totals: dict[str, int] = defaultdict(int)
    for e in records:
        totals[e.category] += e.amount
    return tuple(CategoryAmount(c, a) for c, a in sorted(totals.items(), key=_sort_key))


def aggregate(records: Iterable[Expense], target_month: str) -> MonthlySummary:
    """Summarize the records that fall in ``target_month``.

    ``by_category`` is sorted by amount, largest first. Equal amounts follow
    the canonical category order, then the label.
    """
    in_month = list(filter(by_month(target_month), records))
    if not in_month:
        return MonthlySummary.empty()

    return MonthlySummary(
        total=sum(e.amount for e in in_month),
        count=len(in_month),
        by_category=category_totals(in_month),
    )


@lru_cache(maxsize=256)
def summarize(records: tuple[Expense, ...], month: str) -> MonthlySummary:
    return aggregate(records, month)


def group_by_month(records: Iterable[Expense]) -> dict[str, list[Expense]]:
    grouped: dict[str, list[Expense]] = defaultdict(list)
    for e in records:
        grouped[month_key(e.date)].append(e)
    return dict(grouped)


def available_months(records: Iterable[Expense]) -> list[str]:
    return sorted({month_key(e.date) for e in records if e.date}, reverse=True)


async def summaries_for_window(records: Sequence[Expense], window: Sequence[str]) -> list[MonthlySummary]:
    """Compute one summary per month of ``window`` concurrently, in window order."""
    async def month_summary(month: str) -> MonthlySummary:
        summary = aggregate(records, month)
        await asyncio.sleep(0)
        return summary

    return list(await asyncio.gather(*(month_summary(m) for m in window)))


def top_categories(records: Iterable[Expense], k: int) -> Iterator[CategoryAmount]:
    for item in category_totals(records)[: max(0, k)]:
        yield item
