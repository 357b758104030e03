"""Pluggable cell value formatters."""

from datetime import date, datetime
from typing import Any, Callable

Formatter = Callable[[Any], str]


def default_formatter(value: Any) -> str:
    """Render a value with ``str``; missing values render empty."""
    if value is None:
        return ""
    return str(value)


def money_formatter(
    symbol: str = "$",
    precision: int = 2,
    thousand: str = ",",
    decimal: str = ".",
) -> Formatter:
    """
    Build a currency formatter.

    Args:
        symbol: Currency symbol placed before the amount
        precision: Number of decimal places
        thousand: Thousands separator
        decimal: Decimal separator

    Returns:
        Formatter rendering e.g. 1299 as '$1,299.00'
    """

    def format_money(value: Any) -> str:
        if value is None:
            return ""
        amount = f"{abs(float(value)):,.{precision}f}"
        amount = amount.replace(",", "\0").replace(".", decimal).replace("\0", thousand)
        sign = "-" if float(value) < 0 else ""
        return f"{sign}{symbol}{amount}"

    return format_money


def date_formatter(pattern: str = "%b %d, %Y") -> Formatter:
    """
    Build a date formatter using ``strftime`` patterns.

    The default renders dates like 'Oct 16, 2026'. ISO strings are parsed
    before formatting.
    """

    def format_date(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        if isinstance(value, (date, datetime)):
            return value.strftime(pattern)
        return str(value)

    return format_date
