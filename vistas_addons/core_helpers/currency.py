# vistas_addons/core_helpers/currency.py

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from vistas.core.config import ViewSettings

Number = Union[int, float, Decimal]


def number_format(number: Number, decimals: int, decimal_separator: str, thousands_separator: str) -> str:
    """Formats like PHP's number_format: rounds half up and groups thousands."""
    quantum = Decimal(1).scaleb(-decimals)
    value = Decimal(str(number)).quantize(quantum, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    integer_part, _, fraction = f"{abs(value):f}".partition(".")

    groups = []
    while len(integer_part) > 3:
        groups.insert(0, integer_part[-3:])
        integer_part = integer_part[:-3]
    groups.insert(0, integer_part)

    text = thousands_separator.join(groups)
    if decimals > 0:
        text += decimal_separator + fraction.ljust(decimals, "0")
    return sign + text


class CurrencyFormatter:
    def __init__(self, settings: ViewSettings):
        self.settings = settings

    def exists(self, code: str) -> bool:
        return code in self.settings.currencies

    def symbol(self, code: Optional[str] = None) -> str:
        code = code or self.settings.currency
        return self.settings.currencies.get(code, code)

    def format(self, number: Number, currency: str = "", decimals: Optional[int] = None) -> str:
        """Unknown or empty currency codes fall back to the default currency."""
        code = currency if currency and self.exists(currency) else self.settings.currency
        digits = self.settings.decimals if decimals is None else decimals
        text = number_format(number, digits, self.settings.decimal_separator, self.settings.thousands_separator)
        symbol = self.symbol(code)
        if self.settings.currency_position == "right":
            return f"{text} {symbol}"
        return f"{symbol}{text}"
