"""
Monetary arithmetic shared by products and orders.

All amounts are ``Decimal`` rounded half-up to two places. Floats are
converted through ``str`` so ``99.99`` stays ``99.99`` instead of picking up
binary noise. Negative inputs are not rejected here; serializers do that.
"""
from collections import namedtuple
from decimal import Decimal, ROUND_HALF_UP

TWO_PLACES = Decimal('0.01')
HUNDRED = Decimal('100')
ZERO = Decimal('0.00')
# Largest amount a 12-digit, 2-place money column stores
MAX_AMOUNT = Decimal('9999999999.99')

LinePrice = namedtuple('LinePrice', ['sub_total', 'discount_amount', 'tax_amount', 'total'])

OrderTotals = namedtuple('OrderTotals', ['items_total', 'discount_total', 'items_tax_total', 'shipping', 'grand_total'])


def to_decimal(value):
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value):
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def discount_amount(base, pct):
    return round2(to_decimal(base) * to_decimal(pct) / HUNDRED)


def tax_amount(discounted_base, pct):
    """Tax is charged on the already-discounted base."""
    return round2(to_decimal(discounted_base) * to_decimal(pct) / HUNDRED)


def line_total(base, discount, tax):
    return round2(to_decimal(base) - to_decimal(discount) + to_decimal(tax))


def price_line(unit_price, quantity, discount_pct=0, tax_pct=0):
    """
    Price one line: ``unit_price * quantity`` less the discount, plus tax.

    >>> price_line('99.99', 1, 15, '7.5')
    LinePrice(sub_total=Decimal('99.99'), discount_amount=Decimal('15.00'), tax_amount=Decimal('6.37'), total=Decimal('91.36'))
    """
    base = round2(to_decimal(unit_price) * to_decimal(quantity))
    discount = discount_amount(base, discount_pct)
    tax = tax_amount(base - discount, tax_pct)
    return LinePrice(base, discount, tax, line_total(base, discount, tax))


def order_totals(lines, shipping=0):
    """
    Aggregate priced lines into order-level totals.

    ``lines`` may be ``LinePrice`` tuples or order items; anything exposing
    ``sub_total``, ``discount_amount`` and ``tax_amount`` works.
    """
    items_total = ZERO
    discount_total = ZERO
    items_tax_total = ZERO
    for line in lines:
        items_total += to_decimal(line.sub_total)
        discount_total += to_decimal(line.discount_amount)
        items_tax_total += to_decimal(line.tax_amount)

    shipping = round2(shipping)
    grand_total = round2(items_total - discount_total + items_tax_total + shipping)
    return OrderTotals(round2(items_total), round2(discount_total), round2(items_tax_total), shipping, grand_total)


def format_currency(amount, currency='BDT'):
    """Human-readable amount for audit descriptions, e.g. ``BDT 1,250.00``"""
    return f"{currency} {round2(amount):,.2f}"
