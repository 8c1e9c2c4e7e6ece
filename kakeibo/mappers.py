"""Backend payload <-> domain mapping.

Every backend field is optional on the wire. The defaulting rules live here
and nowhere else: numbers default to 0, strings to "", lists to empty, ids
are always strings and amounts are never negative.
"""
from typing import Any, Mapping, Optional

from kakeibo.domain import (
    CategoryAmount,
    ChatMessage,
    Expense,
    ExpenseForm,
    MonthlyReport,
    MonthlySummary,
)


def _int(value: Any) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(round(float(value)))
    except (TypeError, ValueError):
        return 0


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def to_expense(dto: Mapping[str, Any]) -> Expense:
    return Expense(
        id=_str(dto.get("id")),
        amount=abs(_int(dto.get("amount"))),
        category=_str(dto.get("category")),
        description=_str(dto.get("description")),
        date=_str(dto.get("date"))[:10],
    )


def to_expense_request(form: ExpenseForm) -> dict:
    return {
        "date": form.date,
        "category": form.category,
        "amount": form.amount,
        "description": form.description,
    }


def to_monthly_summary(dto: Optional[Mapping[str, Any]]) -> MonthlySummary:
    if not dto:
        return MonthlySummary.empty()
    by_category = tuple(
        CategoryAmount(_str(item.get("category")), abs(_int(item.get("amount"))))
        for item in (dto.get("byCategory") or [])
    )
    return MonthlySummary(
        total=abs(_int(dto.get("total"))),
        count=_int(dto.get("count")),
        by_category=by_category,
    )


def to_monthly_report(dto: Mapping[str, Any], month: str) -> MonthlyReport:
    return MonthlyReport(
        month=_str(dto.get("month")) or month,
        summary=_str(dto.get("summary")),
        suggestions=tuple(_str(s) for s in (dto.get("suggestions") or [])),
        generated_at=dto.get("generatedAt"),
    )


def to_chat_message(dto: Mapping[str, Any]) -> ChatMessage:
    role = _str(dto.get("role")).lower() or "assistant"
    return ChatMessage(
        role=role,
        content=_str(dto.get("content") or dto.get("message")),
        created_at=dto.get("createdAt"),
    )
