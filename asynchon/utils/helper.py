"""Small conversion helpers shared by parameters, commands and attributes."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

Number = Union[int, float]


def str_to_float(value: Union[str, int, float]) -> Number:
    """Return *value* as ``int`` when integral, else ``float``.

    Accepts a comma as decimal separator (``"2,5"`` → ``2.5``).

    Raises
    ------
    ValueError
        If *value* is not numeric.
    """
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to float")
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        return float(text.replace(",", "."))


def to_decimal(value: Number) -> Decimal:
    """Exact decimal form of *value* (via ``str`` to avoid binary noise)."""
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Cannot convert {value!r} to decimal") from exc


def from_decimal(value: Decimal) -> Number:
    """Inverse of :func:`to_decimal` preferring ``int`` for integral values."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def clean_category_name(category: str) -> str:
    """Reduce ``PROGRAMS.WM_WD.COTTONS`` style names to ``cottons``.

    Names without the ``PROGRAM`` token are returned unchanged.
    """
    if "PROGRAM" in category:
        return category.split(".")[-1].lower()
    return category
