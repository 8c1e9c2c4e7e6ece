"""HTTP client for the expense backend.

Every public method is a coroutine. The blocking ``requests`` call runs in a
worker thread so several fetches can be in flight at once. Any non-2xx
response or transport failure surfaces as ``ApiError``.
"""
import asyncio
from typing import Any, Optional, Sequence

import requests

from kakeibo.domain import ChatMessage, Expense, ExpenseForm, MonthlyReport, MonthlySummary
from kakeibo.errors import ApiError
from kakeibo.logging_setup import get_logger
from kakeibo.mappers import (
    to_chat_message,
    to_expense,
    to_expense_request,
    to_monthly_report,
    to_monthly_summary,
)

logger = get_logger(__name__)


class ExpenseApi:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> dict:
        h = {"Accept": "application/json", "User-Agent": "kakeibo"}
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        return h

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            r = self.session.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiError(f"{method} {path} failed: {e}") from e

        if not r.ok:
            logger.warning("%s %s -> %s", method, path, r.status_code)
            raise ApiError(f"{method} {path} returned {r.status_code}", status=r.status_code)
        if r.status_code == 204 or not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise ApiError(f"{method} {path} returned invalid JSON", status=r.status_code) from e

    async def _call(self, method: str, path: str, **kwargs) -> Any:
        return await asyncio.to_thread(self._request, method, path, **kwargs)

    async def list_expenses(self, month: Optional[str] = None) -> tuple[Expense, ...]:
        params = {"month": month} if month else None
        data = await self._call("GET", "/api/expenses", params=params)
        return tuple(to_expense(d) for d in data or [])

    async def monthly_summary(self, month: str) -> MonthlySummary:
        data = await self._call("GET", "/api/expenses/summary", params={"month": month})
        return to_monthly_summary(data)

    async def monthly_summary_range(self, start_month: str, end_month: str) -> list[MonthlySummary]:
        data = await self._call(
            "GET", "/api/expenses/summary/range",
            params={"startMonth": start_month, "endMonth": end_month},
        )
        return [to_monthly_summary(d) for d in data or []]

    async def available_months(self) -> list[str]:
        data = await self._call("GET", "/api/expenses/months")
        return [str(m) for m in data or []]

    async def create_expense(self, form: ExpenseForm) -> Expense:
        data = await self._call("POST", "/api/expenses", json=to_expense_request(form))
        return to_expense(data or {})

    async def create_expenses(self, forms: Sequence[ExpenseForm]) -> list[Expense]:
        # Issued concurrently; the first failure fails the whole batch.
        return list(await asyncio.gather(*(self.create_expense(f) for f in forms)))

    async def update_expense(self, expense_id: str, form: ExpenseForm) -> Expense:
        data = await self._call("PUT", f"/api/expenses/{expense_id}", json=to_expense_request(form))
        return to_expense(data or {})

    async def delete_expense(self, expense_id: str) -> None:
        await self._call("DELETE", f"/api/expenses/{expense_id}")

    async def monthly_report(self, month: str, generate: bool = False) -> Optional[MonthlyReport]:
        data = await self._call(
            "GET", "/api/expenses/report",
            params={"month": month, "generate": str(generate).lower()},
        )
        if data is None:
            return None
        return to_monthly_report(data, month)

    async def chat_history(self) -> list[ChatMessage]:
        data = await self._call("GET", "/api/chat")
        messages = (data or {}).get("messages") or []
        return [to_chat_message(m) for m in messages]

    async def send_chat_message(self, message: str) -> ChatMessage:
        data = await self._call("POST", "/api/chat", json={"message": message})
        return to_chat_message(data or {})

    async def predict_category(self, description: str) -> str:
        data = await self._call("POST", "/api/ai/category", json={"description": description})
        return str((data or {}).get("category") or "")
