"""Position PnL.

Rounding here always favors the pool:
- the index price is marked on the conservative side for the position's direction,
- a trader's positive PnL is scaled down when the pool-wide PnL is capped,
- partial-close token deltas round up for longs and down for shorts.
"""

from __future__ import annotations

from ..precision import Rounding, apply_factor, mul_div, round_up_division, to_signed
from .guards import validate_non_empty_position
from .services import RiskContext
from .types import Market, MarketPrices, Position, PositionPnl


def get_capped_pnl(pnl: int, pool_usd: int, max_pnl_factor: int) -> int:
    """Cap positive pool PnL at `max_pnl_factor` of the pool's USD value."""
    if pnl < 0:
        return pnl
    max_pnl = apply_factor(pool_usd, max_pnl_factor)
    return max_pnl if pnl > max_pnl else pnl


def get_pool_usd_for_pnl(prices: MarketPrices, pool_amount: int, is_long: bool) -> int:
    # Pool tokens are valued at their min price so the cap is never overstated.
    token_price = prices.long_token_price if is_long else prices.short_token_price
    return pool_amount * token_price.min


def get_position_pnl_usd(
    ctx: RiskContext,
    market: Market,
    prices: MarketPrices,
    position: Position,
    size_delta_usd: int,
) -> PositionPnl:
    """PnL of closing `size_delta_usd` of `position`, capped and uncapped."""
    validate_non_empty_position(position)
    if size_delta_usd < 0 or size_delta_usd > position.size_in_usd:
        raise ValueError(f"size_delta_usd must be in [0, size_in_usd]: {size_delta_usd}")

    is_long = position.is_long
    mark_price = prices.index_token_price.pick_for_pnl(is_long, maximize=False)

    position_value = to_signed(position.size_in_tokens * mark_price)
    size_in_usd = to_signed(position.size_in_usd)
    total_pnl = position_value - size_in_usd if is_long else size_in_usd - position_value
    uncapped_total_pnl = total_pnl

    if total_pnl > 0:
        pnl_token = market.long_token if is_long else market.short_token
        pool_amount = ctx.market_state.get_pool_amount(market, pnl_token)
        pool_usd = get_pool_usd_for_pnl(prices, pool_amount, is_long)
        pool_pnl = ctx.market_state.get_pnl(market, prices.index_token_price, is_long, True)
        capped_pool_pnl = get_capped_pnl(pool_pnl, pool_usd, ctx.config.max_pnl_factor_for_traders(is_long))
        if capped_pool_pnl != pool_pnl and capped_pool_pnl > 0 and pool_pnl > 0:
            total_pnl = mul_div(total_pnl, capped_pool_pnl, pool_pnl)

    if position.size_in_usd == size_delta_usd:
        size_delta_in_tokens = position.size_in_tokens
    elif is_long:
        size_delta_in_tokens = round_up_division(position.size_in_tokens * size_delta_usd, position.size_in_usd)
    else:
        size_delta_in_tokens = position.size_in_tokens * size_delta_usd // position.size_in_usd

    pnl_usd = mul_div(total_pnl, size_delta_in_tokens, position.size_in_tokens, Rounding.DOWN)
    uncapped_pnl_usd = mul_div(uncapped_total_pnl, size_delta_in_tokens, position.size_in_tokens, Rounding.DOWN)
    return PositionPnl(
        pnl_usd=pnl_usd,
        uncapped_pnl_usd=uncapped_pnl_usd,
        size_delta_in_tokens=size_delta_in_tokens,
    )
