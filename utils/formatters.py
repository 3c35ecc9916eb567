from decimal import Decimal
from typing import Union

from config.constants import Frequency

Number = Union[int, float, Decimal]


def fmt_amount(value: Number) -> str:
    """Plain amount with thousands separators: 1234567.8 -> 1,234,567.80"""
    return f"{Decimal(str(value)):,.2f}"


def fmt_periods(count: int, frequency: Union[str, Frequency]) -> str:
    """Period count with its unit: (12, weekly) -> 12 weeks"""
    return f"{count} {Frequency(frequency).unit}"


def fmt_date(d) -> str:
    return d.strftime("%Y-%m-%d") if d is not None else ""
