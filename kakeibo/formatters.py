from typing import Optional


def format_currency(amount: int) -> str:
    return f"¥{amount:,}"


def format_currency_for_chart(value: float) -> str:
    if value == 0:
        return "¥0"
    if value < 1000:
        return f"¥{round(value)}"
    if value < 10000:
        return f"¥{value / 1000:.1f}k"
    return f"¥{round(value / 1000)}k"


def format_percent_change(change: Optional[float]) -> str:
    if change is None:
        return "-"
    sign = "+" if change > 0 else ""
    return f"{sign}{change:.1f}%"
