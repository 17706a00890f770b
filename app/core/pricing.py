"""Job pricing arithmetic.

Single source of truth for how a job's total is derived from its pricing
inputs. Amounts are computed in Decimal and rounded to cents so that adding
and later removing the same parts line restores the exact previous value.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_money(value: float | int | str | Decimal | None) -> Decimal:
    """Normalize a numeric input to a cent-rounded Decimal (None → 0)."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def money_float(value: Decimal) -> float:
    return float(value.quantize(CENT, rounding=ROUND_HALF_UP))


def labor_total(labor_minutes: float | None, labor_rate: float | None) -> float:
    minutes = Decimal(str(labor_minutes or 0))
    rate = Decimal(str(labor_rate or 0))
    return money_float(minutes / Decimal(60) * rate)


def calc_job_total(
    labor_minutes: float | None,
    labor_rate: float | None,
    parts_total: float | None,
    tax_rate: float | None,
    discount_amount: float | None,
) -> float:
    """total = subtotal + subtotal * tax_rate / 100 - discount_amount, where
    subtotal = labor_minutes / 60 * labor_rate + parts_total.

    The discount comes off the taxed amount: 120 min at 85/h with 150 in
    parts and 8% tax is 345.60, or 315.60 with a 30 discount.
    """
    minutes = Decimal(str(labor_minutes or 0))
    rate = Decimal(str(labor_rate or 0))
    subtotal = minutes / Decimal(60) * rate + to_money(parts_total)
    tax = subtotal * (Decimal(str(tax_rate or 0)) / Decimal(100))
    return money_float(subtotal + tax - to_money(discount_amount))


def add_money(a: float | None, b: float | None) -> float:
    return money_float(to_money(a) + to_money(b))


def sub_money(a: float | None, b: float | None) -> float:
    return money_float(to_money(a) - to_money(b))


def line_subtotal(unit_price: float | None, quantity: int) -> float:
    return money_float(to_money(unit_price) * quantity)
