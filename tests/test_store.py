import json
import os

from kakeibo.domain import Expense
from kakeibo.filters import by_category, by_month, by_text
from kakeibo.store import add_expense, find_expense, load_seed, remove_expense, replace_expense

SEED_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data", "seed.json")


def make_expense(id, amount, category, date, description=""):
    return Expense(id=id, amount=amount, category=category, description=description, date=date)


def test_load_seed(tmp_path):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps({"expenses": [
        {"id": 1, "amount": 500, "category": "食費", "description": "パン", "date": "2024-01-02"},
    ]}, ensure_ascii=False), encoding="utf-8")
    expenses = load_seed(str(path))
    assert expenses == (make_expense("1", 500, "食費", "2024-01-02", "パン"),)


def test_bundled_seed_loads():
    expenses = load_seed(SEED_PATH)
    assert expenses
    assert all(e.amount > 0 for e in expenses)


def test_snapshot_operations_do_not_mutate():
    base = (make_expense("1", 500, "食費", "2024-01-02"),)
    added = add_expense(base, make_expense("2", 900, "交通費", "2024-01-03"))
    assert len(base) == 1
    assert len(added) == 2

    changed = replace_expense(added, make_expense("2", 1000, "交通費", "2024-01-03"))
    assert find_expense(changed, "2").amount == 1000
    assert find_expense(added, "2").amount == 900

    removed = remove_expense(changed, "1")
    assert [e.id for e in removed] == ["2"]
    assert find_expense(removed, "1") is None


def test_filters():
    records = [
        make_expense("1", 500, "食費", "2024-01-02", "パン"),
        make_expense("2", 9000, "交通費", "2024-02-10", "新幹線"),
    ]
    assert [e.id for e in filter(by_month("2024-02"), records)] == ["2"]
    assert [e.id for e in filter(by_category("食費"), records)] == ["1"]
    assert [e.id for e in filter(by_text(" 新幹線 "), records)] == ["2"]
