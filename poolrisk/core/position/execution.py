"""Execution price for increasing and decreasing a position.

Both directions:
1. ask the price impact model for the impact of the signed notional delta,
2. cap positive impact by what the position impact pool can pay,
3. hand the (capped) impact to the order pricer for the final, bounded fill price.

Increase additionally converts impact to tokens, rounding against the trader:
positive impact is divided by the max price and floored, negative impact by
the min price and rounded away from zero. Decrease additionally caps negative
impact at `max_position_impact_factor(negative)` of the order size and reports
the capped-away part as `price_impact_diff_usd`, claimable by the user.
"""

from __future__ import annotations

import structlog

from ..errors import PriceImpactLargerThanOrderSizeError
from ..precision import apply_factor, round_up_division, round_up_magnitude_division, to_signed
from .guards import validate_non_empty_position, validate_position_size_values
from .services import RiskContext
from .types import DecreaseExecution, DecreaseOrder, IncreaseExecution, IncreaseOrder, Market, Position, Price

logger = structlog.get_logger("poolrisk.execution")


def get_capped_position_impact_usd(
    ctx: RiskContext,
    market: Market,
    index_token_price: Price,
    price_impact_usd: int,
    size_delta_usd: int,
) -> int:
    """Cap positive impact by the impact pool balance and the positive impact factor."""
    if price_impact_usd < 0:
        return price_impact_usd

    impact_pool_amount = ctx.market_state.get_position_impact_pool_amount(market)
    # index_token_price.min maximizes the pool reduction per USD paid out.
    max_price_impact_usd_based_on_impact_pool = to_signed(impact_pool_amount * index_token_price.min)
    capped = min(price_impact_usd, max_price_impact_usd_based_on_impact_pool)

    max_price_impact_usd_based_on_factor = apply_factor(
        size_delta_usd, ctx.config.max_position_impact_factor(True)
    )
    capped = min(capped, max_price_impact_usd_based_on_factor)

    if capped != price_impact_usd:
        logger.debug(
            "execution.positive_impact_capped",
            market=market.market_token,
            price_impact_usd=price_impact_usd,
            capped_price_impact_usd=capped,
            impact_pool_amount=impact_pool_amount,
        )
    return capped


def get_execution_price_for_increase(
    ctx: RiskContext,
    market: Market,
    position: Position,
    order: IncreaseOrder,
    index_token_price: Price,
) -> IncreaseExecution:
    """Impact, impact in tokens, token delta and fill price of an increase order.

    Raises:
        InvalidPositionSizeValuesError: Exactly one of the position's size fields is zero.
        PriceImpactLargerThanOrderSizeError: The negative impact in tokens exceeds the order's tokens.
    """
    validate_position_size_values(position)
    is_long = position.is_long
    size_delta_usd = order.size_delta_usd

    if size_delta_usd == 0:
        # Nothing to fill; acceptable-price validation is left to the caller.
        return IncreaseExecution(
            price_impact_usd=0,
            price_impact_amount=0,
            size_delta_in_tokens=0,
            execution_price=index_token_price.pick(is_long),
        )

    price_impact_usd = ctx.price_impact.get_price_impact_usd(market, to_signed(size_delta_usd), is_long)
    price_impact_usd = get_capped_position_impact_usd(
        ctx, market, index_token_price, price_impact_usd, size_delta_usd
    )

    if price_impact_usd >= 0:
        price_impact_amount = price_impact_usd // index_token_price.max
    else:
        price_impact_amount = round_up_magnitude_division(price_impact_usd, index_token_price.min)

    if is_long:
        base_size_delta_in_tokens = size_delta_usd // index_token_price.max
        size_delta_in_tokens = base_size_delta_in_tokens + price_impact_amount
    else:
        base_size_delta_in_tokens = round_up_division(size_delta_usd, index_token_price.min)
        size_delta_in_tokens = base_size_delta_in_tokens - price_impact_amount

    if size_delta_in_tokens < 0:
        raise PriceImpactLargerThanOrderSizeError(price_impact_usd, size_delta_usd)

    execution_price = ctx.order_pricer.execution_price_for_increase(
        size_delta_usd, size_delta_in_tokens, order.acceptable_price, is_long
    )
    return IncreaseExecution(
        price_impact_usd=price_impact_usd,
        price_impact_amount=price_impact_amount,
        size_delta_in_tokens=size_delta_in_tokens,
        execution_price=execution_price,
    )


def get_execution_price_for_decrease(
    ctx: RiskContext,
    market: Market,
    position: Position,
    order: DecreaseOrder,
    index_token_price: Price,
) -> DecreaseExecution:
    """Capped impact, claimable impact difference and fill price of a decrease order."""
    validate_non_empty_position(position)
    is_long = position.is_long
    size_delta_usd = order.size_delta_usd

    if size_delta_usd == 0:
        return DecreaseExecution(
            price_impact_usd=0,
            price_impact_diff_usd=0,
            execution_price=index_token_price.pick(not is_long),
        )

    price_impact_usd = ctx.price_impact.get_price_impact_usd(market, -to_signed(size_delta_usd), is_long)
    price_impact_usd = get_capped_position_impact_usd(
        ctx, market, index_token_price, price_impact_usd, size_delta_usd
    )

    price_impact_diff_usd = 0
    if price_impact_usd < 0:
        min_price_impact_usd = -apply_factor(size_delta_usd, ctx.config.max_position_impact_factor(False))
        if price_impact_usd < min_price_impact_usd:
            price_impact_diff_usd = min_price_impact_usd - price_impact_usd
            price_impact_usd = min_price_impact_usd
            logger.debug(
                "execution.negative_impact_capped",
                market=market.market_token,
                position_key=position.key,
                price_impact_usd=price_impact_usd,
                price_impact_diff_usd=price_impact_diff_usd,
            )

    # The fill price reflects the capped impact; the user receives the
    # capped-away difference as a claimable amount instead.
    execution_price = ctx.order_pricer.execution_price_for_decrease(
        index_token_price,
        position.size_in_usd,
        position.size_in_tokens,
        size_delta_usd,
        price_impact_usd,
        order.acceptable_price,
        is_long,
    )
    return DecreaseExecution(
        price_impact_usd=price_impact_usd,
        price_impact_diff_usd=price_impact_diff_usd,
        execution_price=execution_price,
    )
