"""Collateral sufficiency pre-check.

Used before admitting new or increased exposure. Fees and price impact are
deliberately ignored: the check exists to stop high-leverage positions that
are opened expecting to pay less price impact than they should. Positive
realized PnL is never credited, since a trader could move the price to inflate
it.
"""

from __future__ import annotations

from ..errors import CalcOverflowError
from ..precision import apply_factor, to_signed
from .services import RiskContext
from .types import CollateralCheck, CollateralValues, Market, MarketPrices


def get_min_collateral_factor_for_open_interest(
    ctx: RiskContext,
    market: Market,
    open_interest_delta: int,
    is_long: bool,
) -> int:
    """Min collateral factor implied by the side's open interest after `open_interest_delta`."""
    open_interest = ctx.market_state.get_open_interest(market, is_long) + open_interest_delta
    if open_interest < 0:
        raise CalcOverflowError(f"open interest would be negative: {open_interest}")
    multiplier = ctx.config.min_collateral_factor_for_open_interest_multiplier(is_long)
    return apply_factor(open_interest, multiplier)


def will_position_collateral_be_sufficient(
    ctx: RiskContext,
    market: Market,
    prices: MarketPrices,
    collateral_token: str,
    is_long: bool,
    values: CollateralValues,
) -> CollateralCheck:
    collateral_token_price = market.token_price(collateral_token, prices)
    remaining_collateral_usd = to_signed(values.collateral_amount * collateral_token_price.min)

    if values.realized_pnl_usd < 0:
        remaining_collateral_usd += values.realized_pnl_usd

    if remaining_collateral_usd < 0:
        return CollateralCheck(is_sufficient=False, remaining_collateral_usd=remaining_collateral_usd)

    # The floor rises with the open interest this action would create.
    min_collateral_factor = max(
        get_min_collateral_factor_for_open_interest(ctx, market, values.open_interest_delta, is_long),
        ctx.config.min_collateral_factor,
    )
    min_collateral_usd_for_leverage = apply_factor(values.size_in_usd, min_collateral_factor)
    return CollateralCheck(
        is_sufficient=remaining_collateral_usd >= min_collateral_usd_for_leverage,
        remaining_collateral_usd=remaining_collateral_usd,
    )
