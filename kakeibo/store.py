import json
from typing import Tuple

from kakeibo.domain import Expense
from kakeibo.mappers import to_expense


def load_seed(path: str) -> Tuple[Expense, ...]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return tuple(to_expense(e) for e in data["expenses"])


def add_expense(
    expenses: Tuple[Expense, ...], e: Expense
) -> Tuple[Expense, ...]:
    return expenses + (e,)


def replace_expense(
    expenses: Tuple[Expense, ...], e: Expense
) -> Tuple[Expense, ...]:
    return tuple(e if x.id == e.id else x for x in expenses)


def remove_expense(
    expenses: Tuple[Expense, ...], expense_id: str
) -> Tuple[Expense, ...]:
    return tuple(filter(lambda x: x.id != expense_id, expenses))


def find_expense(expenses: Tuple[Expense, ...], expense_id: str):
    return next((x for x in expenses if x.id == expense_id), None)
