"""Formatting utilities for currency, percentages and period labels."""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from . import config

MONTH_ABBREVIATIONS: Dict[str, List[str]] = {
    'pt_BR': ['Jan', 'Fev', 'Mar', 'Abr', 'Mai', 'Jun',
              'Jul', 'Ago', 'Set', 'Out', 'Nov', 'Dez'],
    'en_US': ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
              'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec'],
}

# symbol, thousands separator, decimal separator
CURRENCY_FORMATS = {
    'BRL': ('R$ ', '.', ','),
    'USD': ('$', ',', '.'),
    'EUR': ('€', '.', ','),
}


def _resolve_locale(locale: Optional[str]) -> str:
    locale = (locale or config.DEFAULT_LOCALE).replace('-', '_')
    return locale if locale in MONTH_ABBREVIATIONS else 'en_US'


def month_label(year: int, month: int, locale: Optional[str] = None) -> str:
    """Build the short month label used on chart axes.

    Example:
        >>> month_label(2024, 2, 'pt_BR')
        'Fev/24'
        >>> month_label(2024, 2, 'en_US')
        'Feb/24'
    """
    names = MONTH_ABBREVIATIONS[_resolve_locale(locale)]
    return f"{names[int(month) - 1]}/{int(year) % 100:02d}"


def format_currency(
    amount: Union[float, int],
    currency: Optional[str] = None,
    include_sign: bool = True,
) -> str:
    """Format a currency amount with the separators of its currency.

    Args:
        amount: The amount to format
        currency: ISO code; defaults to the configured currency
        include_sign: Whether to include the currency symbol

    Returns:
        Formatted currency string

    Example:
        >>> format_currency(1234.56, 'BRL')
        'R$ 1.234,56'
        >>> format_currency(1234.56, 'USD')
        '$1,234.56'
        >>> format_currency(1234.56, 'USD', include_sign=False)
        '1,234.56'
    """
    code = (currency or config.DEFAULT_CURRENCY).upper()
    symbol, thousands, decimal = CURRENCY_FORMATS.get(code, (f"{code} ", ',', '.'))
    formatted = f"{abs(amount):,.2f}"
    if thousands != ',' or decimal != '.':
        formatted = formatted.replace(',', '\0').replace('.', decimal).replace('\0', thousands)
    sign = '-' if amount < 0 else ''
    return f"{sign}{symbol}{formatted}" if include_sign else f"{sign}{formatted}"


def format_percentage(value: float) -> str:
    """Render a percentage with one decimal place (``125.0%``)."""
    return f"{value:.1f}%"


def escape_dollar_for_markdown(text: str) -> str:
    """Escape dollar signs so Streamlit markdown does not treat them as LaTeX."""
    return text.replace("$", "\\$")
