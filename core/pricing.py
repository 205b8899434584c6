"""Price helpers working in integer cents (Rappen).

Listing prices are entered as decimal strings in CHF. All comparisons happen
on integer cents so that values such as ``"1.49"`` are never mistaken for a
multiple of 0.50 through float rounding.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Final

MIN_PRICE_CENTS: Final[int] = 50
MAX_PRICE_CENTS: Final[int] = 5000
PRICE_STEP_CENTS: Final[int] = 50

_HALF: Final[Decimal] = Decimal("0.5")


def parse_price(raw: str | None) -> Decimal | None:
    """Return ``raw`` as a finite :class:`Decimal` or ``None`` when unparseable."""

    if raw is None:
        return None
    candidate = str(raw).strip()
    if not candidate:
        return None
    try:
        value = Decimal(candidate)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def price_to_cents(value: Decimal) -> Decimal:
    """Return ``value`` expressed in cents; fractional cents are preserved."""

    return value * 100


def is_whole_cents(cents: Decimal) -> bool:
    return cents == cents.to_integral_value()


def is_price_step_multiple(value: Decimal) -> bool:
    """Return ``True`` when ``value`` is an exact multiple of CHF 0.50."""

    cents = price_to_cents(value)
    if not is_whole_cents(cents):
        return False
    return int(cents) % PRICE_STEP_CENTS == 0


def round_to_nearest_half_franc(value: float | Decimal) -> float:
    """Round ``value`` to the nearest 0.50 with a floor of 0.50 for positive input."""

    amount = Decimal(str(value))
    if amount <= 0:
        return 0.0
    doubled = (amount * 2).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    rounded = max(doubled / 2, _HALF)
    return float(rounded)


def format_price(
    cents: int,
    *,
    free_label: str = "Gratis",
    include_prefix: bool = True,
    show_free_label: bool = True,
) -> str:
    """Format ``cents`` as a CHF display string such as ``"CHF 12.99"``."""

    if cents == 0 and show_free_label:
        return free_label
    amount = (Decimal(cents) / 100).quantize(Decimal("0.01"))
    text = f"{amount:.2f}"
    return f"CHF {text}" if include_prefix else text


def format_price_admin(cents: int) -> str:
    """Format ``cents`` for back-office tables (no prefix, no free label)."""

    return format_price(cents, include_prefix=False, show_free_label=False)


__all__ = [
    "MAX_PRICE_CENTS",
    "MIN_PRICE_CENTS",
    "PRICE_STEP_CENTS",
    "format_price",
    "format_price_admin",
    "is_price_step_multiple",
    "parse_price",
    "price_to_cents",
    "round_to_nearest_half_franc",
]
