from datetime import date

import pytest

from kakeibo.domain import Expense, ExpenseForm
from kakeibo.errors import ApiError
from kakeibo.local import LocalExpenseApi


def make_expense(id, amount, category, date, description=""):
    return Expense(id=id, amount=amount, category=category, description=description, date=date)


def make_api():
    return LocalExpenseApi(
        [
            make_expense("1", 3500, "食費", "2024-01-05", "スーパー"),
            make_expense("2", 2000, "交通費", "2024-01-20", "電車"),
            make_expense("3", 1000, "食費", "2024-02-01", "パン"),
        ],
        today=lambda: date(2024, 2, 10),
    )


@pytest.mark.asyncio
async def test_queries_use_local_aggregation():
    api = make_api()
    assert [e.id for e in await api.list_expenses("2024-01")] == ["1", "2"]
    assert (await api.monthly_summary("2024-01")).total == 5500
    assert [s.total for s in await api.monthly_summary_range("2023-12", "2024-02")] == [0, 5500, 1000]
    assert await api.available_months() == ["2024-02", "2024-01"]


@pytest.mark.asyncio
async def test_create_assigns_new_ids():
    api = make_api()
    a = await api.create_expense(ExpenseForm(date="2024-02-02", category="食費", amount=300))
    b, c = await api.create_expenses([
        ExpenseForm(date="2024-02-03", category="食費", amount=100),
        ExpenseForm(date="2024-02-04", category="日用品", amount=200),
    ])
    assert (a.id, b.id, c.id) == ("4", "5", "6")
    assert (await api.monthly_summary("2024-02")).total == 1600


@pytest.mark.asyncio
async def test_update_and_delete_unknown_id_is_404():
    api = make_api()
    form = ExpenseForm(date="2024-01-05", category="食費", amount=1)
    with pytest.raises(ApiError) as exc:
        await api.update_expense("99", form)
    assert exc.value.status == 404
    with pytest.raises(ApiError):
        await api.delete_expense("99")


@pytest.mark.asyncio
async def test_report_cached_until_data_changes():
    api = make_api()
    assert await api.monthly_report("2024-01") is None
    report = await api.monthly_report("2024-01", generate=True)
    assert "食費" in report.summary
    assert await api.monthly_report("2024-01") == report

    await api.delete_expense("2")
    assert await api.monthly_report("2024-01") is None


@pytest.mark.asyncio
async def test_chat_and_category_prediction():
    api = make_api()
    reply = await api.send_chat_message("節約のコツは？")
    assert reply.role == "assistant"
    assert "食費" in reply.content
    assert len(await api.chat_history()) == 2
    assert await api.predict_category("電車") == "交通費"
    assert await api.predict_category("なにか") == "その他"
