from dataclasses import dataclass, field
from typing import NamedTuple, Optional


@dataclass(frozen=True)
class Expense:
    id: str
    amount: int        # yen, never negative
    category: str
    description: str
    date: str          # ISO date, e.g. "2024-01-15"


# What the user types in; the backend assigns the id
@dataclass(frozen=True)
class ExpenseForm:
    date: str
    category: str
    amount: int
    description: str = ""


class CategoryAmount(NamedTuple):
    category: str
    amount: int


@dataclass(frozen=True)
class MonthlySummary:
    total: int
    count: int
    by_category: tuple[CategoryAmount, ...] = ()

    @classmethod
    def empty(cls) -> "MonthlySummary":
        return cls(total=0, count=0, by_category=())


@dataclass(frozen=True)
class ExpenseSummary:
    monthly_total: int
    transaction_count: int
    daily_average: int
    monthly_change: Optional[float] = None  # percent vs previous month


@dataclass(frozen=True)
class MonthlyReport:
    month: str
    summary: str
    suggestions: tuple[str, ...] = field(default_factory=tuple)
    generated_at: Optional[str] = None


@dataclass(frozen=True)
class ChatMessage:
    role: str        # "user" or "assistant"
    content: str
    created_at: Optional[str] = None
