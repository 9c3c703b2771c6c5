# stitchbook/utils/money.py

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

Money = Decimal

ZERO = Decimal("0.00")

# largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")


def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))


def round_money(x: Money) -> Money:
    return D(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_money(value, default=None, signed=False):
    """Coerce a client-supplied amount to Money.

    Returns ``default`` for None, booleans, blank or non-numeric strings,
    NaN/Infinity, amounts beyond MAX_AMOUNT and, unless ``signed``, negative
    numbers.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal, str)):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        amount = D(value)
        if not amount.is_finite():
            return default
        amount = round_money(amount)
    except (InvalidOperation, ValueError, TypeError):
        return default
    if abs(amount) > MAX_AMOUNT:
        return default
    if amount < 0 and not signed:
        return default
    return amount


def to_float(x) -> float:
    return float(round_money(x or 0))
