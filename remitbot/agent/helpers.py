"""
Shared formatting helpers for replies.
"""

from typing import Any, Optional
from decimal import Decimal, InvalidOperation
import re


def format_amount(value: Any) -> Optional[str]:
    """Return 50 -> "50", 12.5 -> "12.50", or None if not a number."""
    if value is None:
        return None
    try:
        if isinstance(value, str):
            num = Decimal(re.sub(r"[^\d.\-]", "", value))
        else:
            num = Decimal(str(value))
    except InvalidOperation:
        return None

    if num == num.to_integral():
        return f"{num:.0f}"
    return f"{num.quantize(Decimal('0.01'))}"


def format_money(amount: Any, currency: Optional[str], default_currency: str = "USD") -> Optional[str]:
    """Return "50 EUR" style text, or None when there is no usable amount."""
    text = format_amount(amount)
    if text is None:
        return None
    return f"{text} {currency or default_currency}"
