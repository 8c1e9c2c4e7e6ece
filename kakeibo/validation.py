from abc import ABC, abstractmethod
from datetime import date
from typing import Callable, Generic, Optional, TypeVar

from kakeibo.categories import EXPENSE_CATEGORIES
from kakeibo.domain import ExpenseForm

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')

MIN_AMOUNT = 1


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def is_left(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def is_left(self) -> bool:
        return False

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Left(self._error)

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def is_left(self) -> bool:
        return True

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def check_amount(form: ExpenseForm) -> Either[dict, ExpenseForm]:
    if form.amount < MIN_AMOUNT:
        return Left({
            "error": "invalid_amount",
            "message": f"金額は{MIN_AMOUNT}円以上で入力してください",
            "amount": form.amount,
        })
    return Right(form)


def check_category(form: ExpenseForm) -> Either[dict, ExpenseForm]:
    if form.category not in EXPENSE_CATEGORIES:
        return Left({
            "error": "unknown_category",
            "message": f"カテゴリー「{form.category}」は存在しません",
            "category": form.category,
        })
    return Right(form)


def check_date(form: ExpenseForm, today: date) -> Either[dict, ExpenseForm]:
    try:
        parsed = date.fromisoformat(form.date)
    except (TypeError, ValueError):
        return Left({
            "error": "invalid_date",
            "message": f"日付の形式が正しくありません: {form.date}",
            "date": form.date,
        })
    if parsed > today:
        return Left({
            "error": "future_date",
            "message": "日付は今日以前でなければなりません",
            "date": form.date,
        })
    return Right(form)


def validate_expense(form: ExpenseForm, today: Optional[date] = None) -> Either[dict, ExpenseForm]:
    """Run the form checks in order and stop at the first failure."""
    today = today or date.today()
    return (
        check_amount(form)
        .bind(check_category)
        .bind(lambda f: check_date(f, today))
    )
