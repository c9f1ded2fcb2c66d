"""Display helpers for influencer cards (en-IN conventions)"""
from datetime import date, datetime
from typing import Any, Optional, Union

STATUS_COLORS = {
    "active": "bg-green-100 text-green-800",
    "inactive": "bg-yellow-100 text-yellow-800",
    "suspended": "bg-red-100 text-red-800",
}
DEFAULT_STATUS_COLOR = "bg-gray-100 text-gray-800"


def status_color(status: Optional[str]) -> str:
    return STATUS_COLORS.get(status or "", DEFAULT_STATUS_COLOR)


def _group_indian(digits: str) -> str:
    # 1234567 -> 12,34,567: last three digits, then pairs
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_currency(amount: Any) -> str:
    """Rupee amount with lakh/crore grouping, e.g. ₹1,23,456.50"""
    try:
        value = float(amount or 0)
    except (TypeError, ValueError):
        value = 0.0
    sign = "-" if value < 0 else ""
    whole, fraction = f"{abs(value):.2f}".split(".")
    return f"{sign}₹{_group_indian(whole)}.{fraction}"


def format_number(value: Any) -> str:
    """30.0 -> "30", 12.5 -> "12.5" """
    if value is None:
        return "0"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:.2f}".rstrip("0").rstrip(".")


def format_date(value: Union[str, date, datetime, None]) -> str:
    """Join date as "18 Oct 2026" """
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return f"{value.day} {value.strftime('%b')} {value.year}"
