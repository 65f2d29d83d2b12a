"""Tax calculation over order lines.

Amounts are accumulated as ``Decimal`` and rounded to cents (half away from
zero) only when the summary is produced, so the same lines and rate always
yield the same figures. Cancelled lines contribute nothing.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from protean.exceptions import ValidationError

from storefront.utils.config import setting

_CENTS = Decimal("0.01")
_CANCELLED = "Cancelled"


def _decimal(value) -> Decimal:
    return Decimal(str(value or 0))


def round_money(value) -> float:
    return float(_decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP))


def _status_of(line) -> str:
    status = getattr(line, "status", None)
    return getattr(status, "value", status)


@dataclass(frozen=True)
class LineTax:
    item_id: str | None
    total_price: float
    total_tax: float
    price_with_tax: float


@dataclass(frozen=True)
class TaxSummary:
    subtotal: float
    tax_base: float
    tax_amount: float
    total_with_tax: float
    lines: tuple[LineTax, ...] = ()


def calculate_tax(lines, tax_rate=None) -> TaxSummary:
    """Compute per-line and order tax figures.

    ``lines`` is any iterable of objects exposing ``quantity``, ``unit_price``,
    ``taxable`` and ``status``. ``tax_rate`` is a fraction (0.05 for 5%); it
    defaults to the domain's configured ``tax_rate``.
    """
    if tax_rate is None:
        tax_rate = setting("tax_rate")
    rate = _decimal(tax_rate)
    if rate < 0:
        raise ValidationError({"tax_rate": ["Tax rate cannot be negative"]})

    subtotal = Decimal("0")
    tax_base = Decimal("0")
    tax_amount = Decimal("0")
    breakdown = []

    for line in lines:
        item_id = getattr(line, "id", None)
        item_id = str(item_id) if item_id is not None else None

        if _status_of(line) == _CANCELLED:
            breakdown.append(LineTax(item_id, 0.0, 0.0, 0.0))
            continue

        line_total = _decimal(line.unit_price) * int(line.quantity)
        line_tax = line_total * rate if line.taxable else Decimal("0")

        subtotal += line_total
        tax_amount += line_tax
        if line.taxable:
            tax_base += line_total

        breakdown.append(
            LineTax(
                item_id=item_id,
                total_price=round_money(line_total),
                total_tax=round_money(line_tax),
                price_with_tax=round_money(line_total + line_tax),
            )
        )

    return TaxSummary(
        subtotal=round_money(subtotal),
        tax_base=round_money(tax_base),
        tax_amount=round_money(tax_amount),
        total_with_tax=round_money(subtotal + tax_amount),
        lines=tuple(breakdown),
    )
