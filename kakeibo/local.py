"""In-memory stand-in for the expense backend, seeded from a JSON file.

Used when no backend URL is configured. It answers every query with the
local aggregator, so the dashboard shows the same numbers the backend would.
"""
import asyncio
from datetime import date, datetime
from itertools import count
from typing import Callable, Optional, Sequence

from kakeibo.aggregate import available_months, summaries_for_window, summarize, top_categories
from kakeibo.domain import ChatMessage, Expense, ExpenseForm, MonthlyReport, MonthlySummary
from kakeibo.errors import ApiError
from kakeibo.filters import by_month
from kakeibo.formatters import format_currency
from kakeibo.logging_setup import get_logger
from kakeibo.months import format_month, month_key, months_between, previous_month
from kakeibo.store import add_expense, find_expense, load_seed, remove_expense, replace_expense

logger = get_logger(__name__)


class LocalExpenseApi:
    def __init__(self, expenses: Sequence[Expense] = (), today: Callable[[], date] = date.today):
        self.expenses: tuple[Expense, ...] = tuple(expenses)
        self.today = today
        self._reports: dict[str, MonthlyReport] = {}
        self._chat: list[ChatMessage] = []
        next_id = max((int(e.id) for e in self.expenses if e.id.isdigit()), default=0) + 1
        self._ids = count(next_id)

    @classmethod
    def from_seed(cls, path: str, **kwargs) -> "LocalExpenseApi":
        expenses = load_seed(path)
        logger.info("loaded %d expenses from %s", len(expenses), path)
        return cls(expenses, **kwargs)

    async def list_expenses(self, month: Optional[str] = None) -> tuple[Expense, ...]:
        if month is None:
            return self.expenses
        return tuple(filter(by_month(month), self.expenses))

    async def monthly_summary(self, month: str) -> MonthlySummary:
        return summarize(self.expenses, month)

    async def monthly_summary_range(self, start_month: str, end_month: str) -> list[MonthlySummary]:
        return await summaries_for_window(self.expenses, months_between(start_month, end_month))

    async def available_months(self) -> list[str]:
        return available_months(self.expenses)

    def _build(self, expense_id: str, form: ExpenseForm) -> Expense:
        return Expense(
            id=expense_id,
            amount=abs(int(form.amount)),
            category=form.category,
            description=form.description,
            date=form.date,
        )

    async def create_expense(self, form: ExpenseForm) -> Expense:
        e = self._build(str(next(self._ids)), form)
        self.expenses = add_expense(self.expenses, e)
        self._reports.pop(month_key(e.date), None)
        return e

    async def create_expenses(self, forms: Sequence[ExpenseForm]) -> list[Expense]:
        return list(await asyncio.gather(*(self.create_expense(f) for f in forms)))

    async def update_expense(self, expense_id: str, form: ExpenseForm) -> Expense:
        old = find_expense(self.expenses, expense_id)
        if old is None:
            raise ApiError(f"expense {expense_id} not found", status=404)
        e = self._build(expense_id, form)
        self.expenses = replace_expense(self.expenses, e)
        self._reports.pop(month_key(old.date), None)
        self._reports.pop(month_key(e.date), None)
        return e

    async def delete_expense(self, expense_id: str) -> None:
        old = find_expense(self.expenses, expense_id)
        if old is None:
            raise ApiError(f"expense {expense_id} not found", status=404)
        self.expenses = remove_expense(self.expenses, expense_id)
        self._reports.pop(month_key(old.date), None)

    async def monthly_report(self, month: str, generate: bool = False) -> Optional[MonthlyReport]:
        if not generate:
            return self._reports.get(month)
        report = self._write_report(month)
        self._reports[month] = report
        return report

    def _write_report(self, month: str) -> MonthlyReport:
        summary = summarize(self.expenses, month)
        prev = summarize(self.expenses, previous_month(month))
        label = format_month(month)
        if summary.count == 0:
            text = f"{label}の支出はまだ記録されていません。"
            suggestions: tuple[str, ...] = ("支出を記録して、月ごとの傾向を確認しましょう。",)
        else:
            top = summary.by_category[0]
            share = round(top.amount * 100 / summary.total) if summary.total else 0
            text = (
                f"{label}の支出は{summary.count}件、合計{format_currency(summary.total)}でした。"
                f"最も多いのは{top.category}（{format_currency(top.amount)}、{share}%）です。"
            )
            suggestions = (f"{top.category}の支出を見直すと効果が大きいでしょう。",)
            if prev.total > 0 and summary.total > prev.total:
                suggestions += (f"前月より{format_currency(summary.total - prev.total)}増えています。",)
        return MonthlyReport(
            month=month,
            summary=text,
            suggestions=suggestions,
            generated_at=datetime.now().isoformat(timespec="seconds"),
        )

    async def chat_history(self) -> list[ChatMessage]:
        return list(self._chat)

    async def send_chat_message(self, message: str) -> ChatMessage:
        now = datetime.now().isoformat(timespec="seconds")
        self._chat.append(ChatMessage(role="user", content=message, created_at=now))
        reply = ChatMessage(role="assistant", content=self._advice(), created_at=now)
        self._chat.append(reply)
        return reply

    def _advice(self) -> str:
        month = month_key(self.today())
        in_month = tuple(filter(by_month(month), self.expenses))
        top = list(top_categories(in_month, 2))
        if not top:
            return "今月の支出はまだありません。まずは日々の支出を記録してみましょう。"
        names = "、".join(item.category for item in top)
        return f"今月は{names}の支出が多めです。予算を決めて週ごとに振り返ると管理しやすくなります。"

    async def predict_category(self, description: str) -> str:
        # Reuse the category of the most recent expense with the same description.
        needle = description.strip()
        for e in reversed(self.expenses):
            if needle and e.description == needle:
                return e.category
        return "その他"
