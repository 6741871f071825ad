"""Display formatting for amounts shown in reports."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def _round(n: float, digits: int) -> Decimal:
    return Decimal(n).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)


def _group_indian(integer_part: str) -> str:
    """Group digits lakh/crore style: 12345678 -> 1,23,45,678."""
    if len(integer_part) <= 3:
        return integer_part
    head, tail = integer_part[:-3], integer_part[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_currency_eur(n: float) -> str:
    """Format as euros with two decimals, e.g. ``€4,398.15``."""
    value = _round(n, 2)
    sign = "-" if value < 0 else ""
    return f"{sign}€{abs(value):,.2f}"


def format_currency_inr(n: float) -> str:
    """Format as rupees with no decimals and Indian grouping, e.g. ``₹3,95,834``."""
    value = _round(n, 0)
    sign = "-" if value < 0 else ""
    return f"{sign}₹{_group_indian(str(int(abs(value))))}"


def sig(n: float, digits: int = 2) -> str:
    """Grouped number with at most ``digits`` decimals, trailing zeros dropped."""
    value = _round(n, digits)
    text = f"{value:,.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_percent(n: float, digits: int = 2) -> str:
    """Signed percentage, e.g. ``+30.57%``."""
    return f"{n:+.{digits}f}%"
