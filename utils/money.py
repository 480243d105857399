"""Утилиты форматирования денежных сумм."""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any

_TWO_PLACES = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def _group_indian(digits: str) -> str:
    """``1234567`` → ``12,34,567``."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_inr(value: Any, *, decimals: bool = False, symbol: str = "₹") -> str:
    """Отформатировать сумму в рупиях с индийской группировкой разрядов."""

    amount = to_decimal(value)
    quant = _TWO_PLACES if decimals else Decimal("1")
    amount = amount.quantize(quant, rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    text = f"{abs(amount):f}"
    whole, _, frac = text.partition(".")
    formatted = _group_indian(whole)
    if decimals:
        formatted = f"{formatted}.{frac or '00'}"
    return f"{sign}{symbol}{formatted}"
