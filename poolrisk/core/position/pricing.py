"""Reference pricing collaborators.

- `OrderPricing`: fill price from a notional/token delta plus acceptable-price
  enforcement (implements `OrderPricer`).
- `ImbalancePriceImpactModel`: price impact from the change in long/short open
  interest imbalance (implements `PriceImpactModel`).

Both are plain integer math; callers may substitute their own implementations.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import (
    EmptySizeDeltaInTokensError,
    NegativeExecutionPriceError,
    OrderNotFulfillableAtAcceptablePriceError,
    PriceImpactLargerThanOrderSizeError,
)
from ..precision import USD_SCALE, apply_factor, div_toward_zero, mul_div
from .services import MarketStateReader
from .types import Market, Price


class OrderPricing:
    """Stateless `OrderPricer`."""

    def execution_price_for_increase(
        self,
        size_delta_usd: int,
        size_delta_in_tokens: int,
        acceptable_price: int,
        is_long: bool,
    ) -> int:
        if size_delta_in_tokens == 0:
            raise EmptySizeDeltaInTokensError()

        execution_price = size_delta_usd // size_delta_in_tokens

        # Long increases buy: lower is better. Short increases sell: higher is better.
        if (is_long and execution_price <= acceptable_price) or (
            not is_long and execution_price >= acceptable_price
        ):
            return execution_price
        raise OrderNotFulfillableAtAcceptablePriceError(execution_price, acceptable_price)

    def execution_price_for_decrease(
        self,
        index_token_price: Price,
        position_size_in_usd: int,
        position_size_in_tokens: int,
        size_delta_usd: int,
        price_impact_usd: int,
        acceptable_price: int,
        is_long: bool,
    ) -> int:
        price = index_token_price.pick(not is_long)
        execution_price = price

        if size_delta_usd > 0 and position_size_in_tokens > 0:
            adjusted_price_impact_usd = price_impact_usd if is_long else -price_impact_usd
            if adjusted_price_impact_usd < 0 and -adjusted_price_impact_usd > size_delta_usd:
                raise PriceImpactLargerThanOrderSizeError(adjusted_price_impact_usd, size_delta_usd)

            adjustment = div_toward_zero(
                mul_div(position_size_in_usd, adjusted_price_impact_usd, position_size_in_tokens),
                size_delta_usd,
            )
            execution_price = price + adjustment
            if execution_price < 0:
                raise NegativeExecutionPriceError(
                    execution_price, price, position_size_in_usd, adjusted_price_impact_usd, size_delta_usd
                )

        # Long decreases sell: higher is better. Short decreases buy: lower is better.
        if (is_long and execution_price >= acceptable_price) or (
            not is_long and execution_price <= acceptable_price
        ):
            return execution_price
        raise OrderNotFulfillableAtAcceptablePriceError(execution_price, acceptable_price)


def apply_exponent(value: int, exponent: int) -> int:
    """`(value / USD_SCALE) ** exponent * USD_SCALE`, floored; values below $1 map to 0."""
    if exponent < 1:
        raise ValueError(f"exponent must be >= 1: {exponent}")
    if value < USD_SCALE:
        return 0
    if exponent == 1:
        return value
    return value**exponent // USD_SCALE ** (exponent - 1)


def apply_impact_factor(diff_usd: int, impact_factor: int, exponent: int) -> int:
    return apply_factor(apply_exponent(diff_usd, exponent), impact_factor)


@dataclass(frozen=True)
class ImbalancePriceImpactModel:
    """Impact proportional to `diff ** exponent`, where `diff = |long OI - short OI|`.

    Moves that shrink the imbalance earn positive impact, moves that grow it
    pay negative impact. A move that flips the imbalance to the other side is
    split: positive impact for closing the initial imbalance, negative for the
    new one.
    """

    market_state: MarketStateReader
    positive_impact_factor: int
    negative_impact_factor: int
    impact_exponent: int = 2

    def __post_init__(self) -> None:
        for name in ("positive_impact_factor", "negative_impact_factor", "impact_exponent"):
            val = getattr(self, name)
            if not isinstance(val, int) or isinstance(val, bool):
                raise TypeError(f"{name} must be an int")
            if val < 0:
                raise ValueError(f"{name} must be non-negative: {val}")
        if self.impact_exponent < 1:
            raise ValueError(f"impact_exponent must be >= 1: {self.impact_exponent}")

    def get_price_impact_usd(self, market: Market, usd_delta: int, is_long: bool) -> int:
        long_open_interest = self.market_state.get_open_interest(market, True)
        short_open_interest = self.market_state.get_open_interest(market, False)

        next_long_open_interest = long_open_interest + usd_delta if is_long else long_open_interest
        next_short_open_interest = short_open_interest if is_long else short_open_interest + usd_delta
        if next_long_open_interest < 0 or next_short_open_interest < 0:
            raise ValueError(f"usd_delta {usd_delta} exceeds open interest")

        initial_diff_usd = abs(long_open_interest - short_open_interest)
        next_diff_usd = abs(next_long_open_interest - next_short_open_interest)

        is_same_side_rebalance = (long_open_interest <= short_open_interest) == (
            next_long_open_interest <= next_short_open_interest
        )
        if is_same_side_rebalance:
            has_positive_impact = next_diff_usd < initial_diff_usd
            impact_factor = self.positive_impact_factor if has_positive_impact else self.negative_impact_factor
            delta_diff_usd = abs(
                apply_impact_factor(initial_diff_usd, impact_factor, self.impact_exponent)
                - apply_impact_factor(next_diff_usd, impact_factor, self.impact_exponent)
            )
            return delta_diff_usd if has_positive_impact else -delta_diff_usd

        positive_impact_usd = apply_impact_factor(initial_diff_usd, self.positive_impact_factor, self.impact_exponent)
        negative_impact_usd = apply_impact_factor(next_diff_usd, self.negative_impact_factor, self.impact_exponent)
        return positive_impact_usd - negative_impact_usd
