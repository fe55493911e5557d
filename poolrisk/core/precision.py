"""
Fixed-point arithmetic primitives (deterministic, integer-only).

Scales:
- `UsdAmount` values are quote-currency amounts scaled by `USD_SCALE` (1e30).
- `Factor` values are ratios scaled by `FACTOR_SCALE` (1e30 == 100%).
- `TokenAmount` values are integers in the token's smallest unit.
- `PriceValue` values are USD per smallest token unit, scaled so that
  `token_amount * price` is a `UsdAmount`. A token with 18 decimals priced at
  $2000 has `PriceValue == 2000 * 10**30 // 10**18`.

The scaled types are `NewType`s: at runtime they are plain ints, but a type
checker rejects passing a `Factor` where a `UsdAmount` is expected. Combine
the two only through `apply_factor`.

Python ints are unbounded, so there is no intermediate overflow in `mul_div`.
`to_signed`/`to_unsigned` still enforce the 256-bit domain at the boundaries
where values are exchanged with external state.
"""

from __future__ import annotations

from enum import Enum, unique
from typing import NewType

from .errors import CalcOverflowError


UsdAmount = NewType("UsdAmount", int)
Factor = NewType("Factor", int)
TokenAmount = NewType("TokenAmount", int)
PriceValue = NewType("PriceValue", int)

USD_SCALE: int = 10**30
FACTOR_SCALE: int = 10**30

MAX_UINT256: int = 2**256 - 1
MAX_INT256: int = 2**255 - 1
MIN_INT256: int = -(2**255)


@unique
class Rounding(Enum):
    """Rounding applied to the magnitude of a quotient (decimal-module naming)."""

    DOWN = "down"  # toward zero
    UP = "up"  # away from zero
    HALF_UP = "half_up"  # nearest, ties away from zero


def _require_int(name: str, v: object) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise TypeError(f"{name} must be an int")
    return v


def _divide_magnitude(n: int, d: int, rounding: Rounding) -> int:
    # n >= 0, d > 0
    q, r = divmod(n, d)
    if r == 0:
        return q
    if rounding is Rounding.UP:
        return q + 1
    if rounding is Rounding.HALF_UP and 2 * r >= d:
        return q + 1
    return q


def mul_div(value: int, numerator: int, denominator: int, rounding: Rounding = Rounding.DOWN) -> int:
    """
    Exact `value * numerator / denominator` rounded per `rounding`.

    Signed operands are allowed; the rounding mode acts on the magnitude of
    the result, so `Rounding.UP` makes a negative result more negative.
    """
    _require_int("value", value)
    _require_int("numerator", numerator)
    _require_int("denominator", denominator)
    if not isinstance(rounding, Rounding):
        raise TypeError("rounding must be a Rounding")
    if denominator == 0:
        raise ZeroDivisionError("mul_div denominator is zero")

    product = value * numerator
    negative = (product < 0) != (denominator < 0)
    magnitude = _divide_magnitude(abs(product), abs(denominator), rounding)
    return -magnitude if negative else magnitude


def div_toward_zero(a: int, b: int) -> int:
    """Signed division truncating toward zero (Python's `//` floors)."""
    return mul_div(a, 1, b, Rounding.DOWN)


def round_up_division(a: int, b: int) -> int:
    """`ceil(a / b)` for `a >= 0`, `b > 0`."""
    _require_int("a", a)
    _require_int("b", b)
    if a < 0:
        raise ValueError(f"a must be non-negative: {a}")
    if b <= 0:
        raise ValueError(f"b must be positive: {b}")
    return (a + b - 1) // b


def round_up_magnitude_division(a: int, b: int) -> int:
    """Signed `a / b` (with `b > 0`) rounded away from zero."""
    _require_int("a", a)
    _require_int("b", b)
    if b <= 0:
        raise ValueError(f"b must be positive: {b}")
    if a < 0:
        return -((-a + b - 1) // b)
    return (a + b - 1) // b


def apply_factor(value: int, factor: int, rounding: Rounding = Rounding.DOWN) -> int:
    """`value * factor / FACTOR_SCALE`."""
    return mul_div(value, factor, FACTOR_SCALE, rounding)


def to_signed(value: int) -> int:
    _require_int("value", value)
    if value > MAX_INT256 or value < MIN_INT256:
        raise CalcOverflowError(f"value out of int256 range: {value}")
    return value


def to_unsigned(value: int) -> int:
    _require_int("value", value)
    if value < 0 or value > MAX_UINT256:
        raise CalcOverflowError(f"value out of uint256 range: {value}")
    return value


def usd(amount: int) -> UsdAmount:
    """Whole-dollar amount to `UsdAmount` (`usd(5) == 5 * USD_SCALE`)."""
    return UsdAmount(_require_int("amount", amount) * USD_SCALE)


def factor_from_bps(bps: int) -> Factor:
    """Basis points (1/10_000) to `Factor`."""
    return Factor(_require_int("bps", bps) * FACTOR_SCALE // 10_000)


def price_from_usd(usd_per_token: int, token_decimals: int) -> PriceValue:
    """Whole-dollar price per whole token to `PriceValue` for a token with `token_decimals`."""
    _require_int("usd_per_token", usd_per_token)
    _require_int("token_decimals", token_decimals)
    if token_decimals < 0 or token_decimals > 30:
        raise ValueError(f"token_decimals must be in [0, 30]: {token_decimals}")
    return PriceValue(usd_per_token * 10 ** (30 - token_decimals))
