"""
FILE: rebalancer/core/valuation.py
"""

from contextlib import contextmanager
from decimal import MAX_EMAX, MAX_PREC, MIN_EMIN, Context, Decimal, localcontext
from typing import Iterator, Mapping

# Only add, subtract, multiply and integer division may run under this context.
# Non-terminating division would try to expand to MAX_PREC digits.
UNROUNDED = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN)

ONE_HUNDRED = Decimal("100")
PERCENT = Decimal("0.01")


@contextmanager
def unrounded_context() -> Iterator[Context]:
    with localcontext(UNROUNDED) as ctx:
        yield ctx


def exact_sum(values) -> Decimal:
    with unrounded_context():
        return sum(values, Decimal("0"))


def market_value(units_by_id: Mapping[str, int], prices_by_id: Mapping[str, Decimal]) -> Decimal:
    """
    Value of a unit map at the given prices.
    Identifiers missing from prices_by_id raise KeyError.
    """
    with unrounded_context():
        return sum(
            (prices_by_id[identifier] * units for identifier, units in units_by_id.items()),
            Decimal("0"),
        )


def whole_units(amount: Decimal, price: Decimal) -> int:
    """Largest integer n with n * price <= amount, for amount >= 0 and price > 0."""
    with unrounded_context():
        return int(amount // price)


# Input bounds. Exact arithmetic on unbounded exponents expands to millions of
# digits, and str(int) refuses more than 4300.
MAX_DECIMAL_DIGITS = 50
MAX_DECIMAL_PLACES = 34
MAX_UNITS = 10**18


def within_decimal_bounds(value: Decimal) -> bool:
    """At most MAX_DECIMAL_PLACES after the point and MAX_DECIMAL_DIGITS in total."""
    if not value.is_finite():
        return False
    _, digits, exponent = value.as_tuple()
    if exponent < 0:
        places = -exponent
        total_digits = max(len(digits), places)
    else:
        places = 0
        total_digits = len(digits) + exponent
    return places <= MAX_DECIMAL_PLACES and total_digits <= MAX_DECIMAL_DIGITS
