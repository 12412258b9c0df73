from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, int, float, str]

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Number) -> Decimal:
    """Convert to Decimal rounded half-up to cents. None counts as zero."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        # str() keeps floats like 0.1 from dragging binary noise along
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def subtotal(quantity: int, unit_price: Number) -> Decimal:
    return to_money(Decimal(quantity) * to_money(unit_price))


def sale_total(quantity: int, unit_price: Number, discount: Number = None) -> Decimal:
    """quantity x unit_price - discount, in cents."""
    return to_money(subtotal(quantity, unit_price) - to_money(discount))


def profit_margin(total_profit: Number, total_revenue: Number) -> str:
    """Profit as a percentage of revenue with two decimals, "0.00" without revenue."""
    revenue = to_money(total_revenue)
    if revenue == 0:
        return "0.00"
    margin = Decimal(str(total_profit)) / revenue * 100
    return str(margin.quantize(CENTS, rounding=ROUND_HALF_UP))
