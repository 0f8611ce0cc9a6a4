from __future__ import annotations

import pytest

from finance_tracker.formatting import escape_dollar_for_markdown, format_currency, format_percentage, month_label


@pytest.mark.parametrize(
    "locale, expected",
    [("pt_BR", "Fev/24"), ("en_US", "Feb/24"), ("pt-BR", "Fev/24"), ("xx_XX", "Feb/24")],
)
def test_month_label(locale, expected) -> None:
    assert month_label(2024, 2, locale) == expected


def test_month_label_pads_year() -> None:
    assert month_label(2005, 12, "pt_BR") == "Dez/05"


def test_format_currency() -> None:
    assert format_currency(1234.56, "BRL") == "R$ 1.234,56"
    assert format_currency(1234.56, "USD") == "$1,234.56"
    assert format_currency(-1234.5, "USD") == "-$1,234.50"
    assert format_currency(1234.56, "EUR", include_sign=False) == "1.234,56"


def test_format_percentage() -> None:
    assert format_percentage(125) == "125.0%"


def test_escape_dollar_for_markdown() -> None:
    assert escape_dollar_for_markdown("$5") == "\\$5"
