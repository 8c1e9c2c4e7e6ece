"""Stateful view-models that fetch expense data and derive display values.

Each model moves UNINITIALIZED -> LOADING -> READY. ``watch(*inputs)``
fetches on first use and whenever a tracked input changes; ``refetch()``
fetches again with the current inputs. Every fetch is numbered and only the
newest one may touch the model, so a slow earlier response never overwrites
a later one. A failed fetch settles to READY with empty data and is announced
on the event bus. It is never raised to the caller and there is no retry.
"""
import asyncio
from datetime import date, datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from kakeibo.categories import EXPENSE_CATEGORIES, OTHER_CATEGORY
from kakeibo.domain import ChatMessage, Expense, ExpenseForm, ExpenseSummary, MonthlyReport, MonthlySummary
from kakeibo.errors import ApiError
from kakeibo.events import (
    EXPENSE_ADDED,
    EXPENSE_DELETED,
    EXPENSE_UPDATED,
    EventBus,
    event_bus,
    notify,
    notify_error,
    notify_success,
)
from kakeibo.logging_setup import get_logger
from kakeibo.months import (
    current_month,
    generate_month_keys,
    month_key,
    month_range,
    parse_month,
    previous_month_of_today,
    shift_month,
)
from kakeibo.series import categories_in, series_from_summaries
from kakeibo.store import add_expense, remove_expense, replace_expense
from kakeibo.validation import validate_expense

logger = get_logger(__name__)


def _log_failure(what: str, e: Exception) -> None:
    if isinstance(e, ApiError):
        logger.warning("%s failed: %s", what, e)
    else:
        logger.exception("%s failed", what)


T = TypeVar("T")


class LoadState(Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class ViewModel(Generic[T]):
    error_message = "データの取得に失敗しました"

    def __init__(self, api: Any, bus: EventBus = event_bus):
        self.api = api
        self.bus = bus
        self.state = LoadState.UNINITIALIZED
        self.data: T = self.empty()
        self.inputs: Optional[tuple] = None
        self._seq = 0

    def empty(self) -> T:
        raise NotImplementedError

    async def load(self, *inputs) -> T:
        raise NotImplementedError

    def skip(self, *inputs) -> bool:
        # Blank inputs (e.g. no month selected yet) settle without a request.
        return not all(inputs)

    @property
    def is_loaded(self) -> bool:
        return self.state is LoadState.READY

    def needs_fetch(self, *inputs) -> bool:
        return self.state is LoadState.UNINITIALIZED or inputs != self.inputs

    async def watch(self, *inputs) -> T:
        if self.needs_fetch(*inputs):
            self.inputs = inputs
            await self.refetch()
        return self.data

    async def refetch(self) -> T:
        inputs = self.inputs or ()
        self._seq += 1
        seq = self._seq
        self.state = LoadState.LOADING
        name = type(self).__name__

        try:
            if self.skip(*inputs):
                result = self.empty()
            else:
                logger.debug("%s fetch #%d %r", name, seq, inputs)
                result = await self.load(*inputs)
        except Exception as e:
            if seq != self._seq:
                logger.debug("%s dropped stale failure #%d", name, seq)
                return self.data
            _log_failure(f"{name} fetch #{seq}", e)
            self.data = self.empty()
            self.state = LoadState.READY
            notify_error(e, self.error_message, self.bus)
            return self.data

        if seq != self._seq:
            logger.debug("%s dropped stale response #%d", name, seq)
            return self.data
        self.data = result
        self.state = LoadState.READY
        return self.data


class MonthlySummaryModel(ViewModel[MonthlySummary]):
    error_message = "月別サマリーの取得に失敗しました"

    def empty(self) -> MonthlySummary:
        return MonthlySummary.empty()

    async def load(self, month: str) -> MonthlySummary:
        return await self.api.monthly_summary(month)


class MonthlySummaryRangeModel(ViewModel[list]):
    error_message = "月別サマリーの取得に失敗しました"

    def empty(self) -> list:
        return []

    async def load(self, start_month: str, end_month: str) -> list:
        return list(await self.api.monthly_summary_range(start_month, end_month))


class MonthlyExpensesModel(ViewModel[tuple]):
    error_message = "支出データの取得に失敗しました"

    def empty(self) -> tuple:
        return ()

    async def load(self, month: str) -> tuple:
        return tuple(await self.api.list_expenses(month))

    @property
    def month(self) -> Optional[str]:
        return self.inputs[0] if self.inputs else None


class AvailableMonthsModel(ViewModel[list]):
    error_message = "利用可能な月の取得に失敗しました"

    def empty(self) -> list:
        return []

    async def load(self) -> list:
        return list(await self.api.available_months())


def month_over_month(current: Optional[MonthlySummary], previous: Optional[MonthlySummary]) -> Optional[float]:
    """Percent change from ``previous`` to ``current``, one decimal place.

    ``None`` when either side is missing or the previous month spent nothing.
    """
    if current is None or previous is None or previous.total <= 0:
        return None
    return round((current.total - previous.total) / previous.total * 100, 1)


class ExpenseSummaryModel:
    """This month's totals compared with last month's."""

    def __init__(self, api: Any, bus: EventBus = event_bus, today: Callable[[], date] = date.today):
        self.today = today
        self.current = MonthlySummaryModel(api, bus)
        self.previous = MonthlySummaryModel(api, bus)

    async def watch(self) -> ExpenseSummary:
        day = self.today()
        await asyncio.gather(
            self.current.watch(current_month(day)),
            self.previous.watch(previous_month_of_today(day)),
        )
        return self.summary

    async def refetch(self) -> ExpenseSummary:
        await asyncio.gather(self.current.refetch(), self.previous.refetch())
        return self.summary

    @property
    def is_loaded(self) -> bool:
        return self.current.is_loaded and self.previous.is_loaded

    @property
    def summary(self) -> ExpenseSummary:
        current = self.current.data if self.current.is_loaded else None
        previous = self.previous.data if self.previous.is_loaded else None
        total = current.total if current else 0
        days = self.today().day
        return ExpenseSummary(
            monthly_total=total,
            transaction_count=current.count if current else 0,
            daily_average=round(total / days) if days > 0 else 0,
            monthly_change=month_over_month(current, previous),
        )


class TrendModel:
    def __init__(
        self,
        api: Any,
        months_to_show: int = 6,
        bus: EventBus = event_bus,
        today: Callable[[], date] = date.today,
    ):
        self.months_to_show = months_to_show
        self.today = today
        self.range = MonthlySummaryRangeModel(api, bus)

    @property
    def window(self) -> list[str]:
        return generate_month_keys(self.months_to_show, self.today())

    async def watch(self, months_to_show: Optional[int] = None) -> list[dict]:
        if months_to_show is not None:
            self.months_to_show = months_to_show
        await self.range.watch(*month_range(self.months_to_show, self.today()))
        return self.rows

    async def refetch(self) -> list[dict]:
        await self.range.refetch()
        return self.rows

    @property
    def is_loaded(self) -> bool:
        return self.range.is_loaded

    @property
    def categories(self) -> list[str]:
        return categories_in(self.range.data)

    @property
    def rows(self) -> list[dict]:
        return series_from_summaries(self.range.data, self.window, self.categories)


class RefreshTrigger:
    """A counter that tells dependents to refetch after a mutation."""

    def __init__(self):
        self.value = 0
        self._seen: dict[str, int] = {}

    def bump(self) -> int:
        self.value += 1
        return self.value

    async def apply(self, key: str, *refetchers: Callable[[], Awaitable[Any]]) -> bool:
        if self.value <= 0 or self._seen.get(key) == self.value:
            return False
        self._seen[key] = self.value
        await asyncio.gather(*(refetch() for refetch in refetchers))
        return True


class ExpensesModel(MonthlyExpensesModel):
    """Owns the expense snapshot for one month.

    Mutations go to the backend first; the snapshot changes only once the
    backend has confirmed, and each confirmed change bumps ``trigger``.
    """

    def __init__(
        self,
        api: Any,
        bus: EventBus = event_bus,
        trigger: Optional[RefreshTrigger] = None,
        today: Callable[[], date] = date.today,
    ):
        super().__init__(api, bus)
        self.trigger = trigger or RefreshTrigger()
        self.today = today

    @property
    def expenses(self) -> tuple[Expense, ...]:
        return self.data

    def _invalid(self, form: ExpenseForm) -> Optional[str]:
        result = validate_expense(form, self.today())
        if result.is_left():
            return result.get_error()["message"]
        return None

    def _in_view(self, e: Expense) -> bool:
        return self.month is not None and month_key(e.date) == self.month

    async def suggest_category(self, description: str) -> str:
        """Category the backend predicts for ``description``, or その他."""
        if not description.strip():
            return OTHER_CATEGORY
        try:
            category = await self.api.predict_category(description)
        except Exception as e:
            _log_failure("category prediction", e)
            return OTHER_CATEGORY
        return category if category in EXPENSE_CATEGORIES else OTHER_CATEGORY

    async def add(self, form: ExpenseForm) -> Optional[Expense]:
        problem = self._invalid(form)
        if problem:
            notify(problem, "error", self.bus)
            return None
        try:
            created = await self.api.create_expense(form)
        except Exception as e:
            _log_failure("expense mutation", e)
            notify_error(e, "支出の追加に失敗しました", self.bus)
            return None

        if self._in_view(created):
            self.data = add_expense(self.data, created)
        self.bus.publish(EXPENSE_ADDED, {"id": created.id, "month": month_key(created.date)})
        notify_success("支出を追加しました", self.bus)
        self.trigger.bump()
        return created

    async def add_many(self, forms: Sequence[ExpenseForm]) -> list[Expense]:
        for form in forms:
            problem = self._invalid(form)
            if problem:
                notify(problem, "error", self.bus)
                return []
        try:
            created = await self.api.create_expenses(list(forms))
        except Exception as e:
            _log_failure("expense mutation", e)
            notify_error(e, "支出の一括追加に失敗しました", self.bus)
            return []

        for e in created:
            if self._in_view(e):
                self.data = add_expense(self.data, e)
            self.bus.publish(EXPENSE_ADDED, {"id": e.id, "month": month_key(e.date)})
        notify_success(f"{len(created)}件の支出を追加しました", self.bus)
        self.trigger.bump()
        return created

    async def update(self, expense_id: str, form: ExpenseForm) -> Optional[Expense]:
        problem = self._invalid(form)
        if problem:
            notify(problem, "error", self.bus)
            return None
        try:
            updated = await self.api.update_expense(expense_id, form)
        except Exception as e:
            _log_failure("expense mutation", e)
            notify_error(e, "支出の更新に失敗しました", self.bus)
            return None

        if self._in_view(updated):
            if any(x.id == updated.id for x in self.data):
                self.data = replace_expense(self.data, updated)
            else:
                self.data = add_expense(self.data, updated)
        else:
            # moved to another month
            self.data = remove_expense(self.data, updated.id)
        self.bus.publish(EXPENSE_UPDATED, {"id": updated.id, "month": month_key(updated.date)})
        notify_success("支出を更新しました", self.bus)
        self.trigger.bump()
        return updated

    async def delete(self, expense_id: str) -> bool:
        try:
            await self.api.delete_expense(expense_id)
        except Exception as e:
            _log_failure("expense mutation", e)
            notify_error(e, "支出の削除に失敗しました", self.bus)
            return False

        self.data = remove_expense(self.data, expense_id)
        self.bus.publish(EXPENSE_DELETED, {"id": expense_id})
        notify_success("支出を削除しました", self.bus)
        self.trigger.bump()
        return True


class DateNavigation:
    def __init__(self, initial: Optional[date] = None, today: Callable[[], date] = date.today):
        self.today = today
        self.selected = (initial or today()).replace(day=1)

    @property
    def selected_month(self) -> str:
        return month_key(self.selected)

    @property
    def is_current_month(self) -> bool:
        return self.selected_month == current_month(self.today())

    def _go(self, key: str) -> str:
        year, month = parse_month(key)
        self.selected = date(year, month, 1)
        return key

    def go_to_previous_month(self) -> str:
        return self._go(shift_month(self.selected_month, -1))

    def go_to_next_month(self) -> str:
        return self._go(shift_month(self.selected_month, 1))

    def go_to_current_month(self) -> str:
        return self._go(current_month(self.today()))


class MonthlyReportModel:
    """AI monthly report. Failures are kept in ``error`` for inline display."""

    FETCH_ERROR = "レポートの取得に失敗しました。しばらく経ってから再度お試しください。"
    REGENERATE_ERROR = "レポートの再生成に失敗しました。しばらく経ってから再度お試しください。"

    def __init__(self, api: Any):
        self.api = api
        self.report: Optional[MonthlyReport] = None
        self.is_loading = False
        self.error: Optional[str] = None
        self._seq = 0

    async def _run(self, month: str, steps: Sequence[bool], error: Optional[str]) -> Optional[MonthlyReport]:
        self._seq += 1
        seq = self._seq
        self.error = None
        self.is_loading = error is not None
        try:
            report = None
            for generate in steps:
                report = await self.api.monthly_report(month, generate)
                if report is not None:
                    break
        except Exception as e:
            _log_failure(f"monthly report for {month}", e)
            if seq == self._seq:
                if error is None:
                    self.report = None
                self.error = error
            return None
        finally:
            if seq == self._seq:
                self.is_loading = False

        if seq == self._seq:
            self.report = report
        return report

    async def fetch(self, month: str) -> Optional[MonthlyReport]:
        """Use the stored report if there is one, otherwise generate it."""
        return await self._run(month, (False, True), self.FETCH_ERROR)

    async def regenerate(self, month: str) -> Optional[MonthlyReport]:
        return await self._run(month, (True,), self.REGENERATE_ERROR)

    async def load_cached(self, month: str) -> Optional[MonthlyReport]:
        return await self._run(month, (False,), None)

    def clear(self) -> None:
        self.report = None
        self.error = None


class ChatModel(ViewModel[list]):
    error_message = "チャット履歴の取得に失敗しました"
    SEND_ERROR = "メッセージの送信に失敗しました"

    def __init__(self, api: Any, bus: EventBus = event_bus):
        super().__init__(api, bus)
        self.sending = False

    def empty(self) -> list:
        return []

    async def load(self) -> list:
        return list(await self.api.chat_history())

    async def send(self, message: str) -> Optional[ChatMessage]:
        text = message.strip()
        if not text:
            return None
        now = datetime.now().isoformat(timespec="seconds")
        self.data = self.data + [ChatMessage(role="user", content=text, created_at=now)]
        self.sending = True
        try:
            reply = await self.api.send_chat_message(text)
        except Exception as e:
            _log_failure("chat message", e)
            notify_error(e, self.SEND_ERROR, self.bus)
            return None
        finally:
            self.sending = False
        self.data = self.data + [reply]
        return reply
