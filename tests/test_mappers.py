from kakeibo.domain import CategoryAmount, ExpenseForm, MonthlySummary
from kakeibo.mappers import (
    to_chat_message,
    to_expense,
    to_expense_request,
    to_monthly_report,
    to_monthly_summary,
)


def test_to_expense_defaults_missing_fields():
    e = to_expense({"id": 12, "amount": "-3500", "date": "2024-01-15T10:00:00Z"})
    assert e.id == "12"
    assert e.amount == 3500
    assert e.category == ""
    assert e.description == ""
    assert e.date == "2024-01-15"


def test_to_expense_bad_amount_is_zero():
    assert to_expense({"amount": "abc"}).amount == 0
    assert to_expense({"amount": None}).amount == 0


def test_to_expense_request():
    form = ExpenseForm(date="2024-01-15", category="食費", amount=1200, description="ランチ")
    assert to_expense_request(form) == {
        "date": "2024-01-15", "category": "食費", "amount": 1200, "description": "ランチ",
    }


def test_to_monthly_summary():
    dto = {"total": 5500, "count": 2, "byCategory": [
        {"category": "食費", "amount": 3500}, {"category": "交通費", "amount": 2000},
    ]}
    s = to_monthly_summary(dto)
    assert s == MonthlySummary(5500, 2, (CategoryAmount("食費", 3500), CategoryAmount("交通費", 2000)))
    assert to_monthly_summary(None) == MonthlySummary.empty()
    assert to_monthly_summary({"total": 10}).by_category == ()


def test_to_monthly_report_falls_back_to_requested_month():
    r = to_monthly_report({"summary": "まとめ", "suggestions": ["節約"]}, "2024-01")
    assert r.month == "2024-01"
    assert r.suggestions == ("節約",)
    assert r.generated_at is None


def test_to_chat_message():
    m = to_chat_message({"message": "こんにちは"})
    assert m.role == "assistant"
    assert m.content == "こんにちは"
    u = to_chat_message({"role": "USER", "content": "質問", "createdAt": "2024-01-01T00:00:00"})
    assert u.role == "user"
    assert u.created_at == "2024-01-01T00:00:00"
