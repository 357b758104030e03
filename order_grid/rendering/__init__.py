"""Display helpers handed to the presentation layer."""

from .formatters import date_formatter, default_formatter, money_formatter

__all__ = ["money_formatter", "date_formatter", "default_formatter"]
