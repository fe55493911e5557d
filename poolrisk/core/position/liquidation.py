"""Liquidation checks and position validation.

`is_position_liquidatable()` values a hypothetical full close:

    remaining = collateral_usd + pnl_usd + capped_negative_impact_usd - fee_cost_usd

and compares it, in a fixed order, against the absolute collateral floor (only
when requested), zero, and the leverage floor `size_in_usd * min_collateral_factor`.
The first failing check decides the reason.

Decrease flows pass `should_validate_min_collateral_usd=False`: their sizes are
pre-estimated and snapped to avoid dust positions, so the absolute floor is
left to the caller there.
"""

from __future__ import annotations

import structlog

from ..errors import (
    DisabledMarketError,
    InvalidCollateralTokenForMarketError,
    InvalidPositionSizeValuesError,
    LiquidatablePositionError,
    MinPositionSizeError,
    PositionError,
)
from ..precision import apply_factor, to_signed, to_unsigned
from .guards import validate_non_empty_position
from .pnl import get_position_pnl_usd
from .services import RiskContext
from .types import (
    LiquidationCheck,
    LiquidationInfo,
    LiquidationReason,
    Market,
    MarketPrices,
    Position,
    ValidationResult,
)

logger = structlog.get_logger("poolrisk.liquidation")


def get_liquidation_price_impact_usd(ctx: RiskContext, market: Market, position: Position) -> int:
    """Impact of fully closing `position`, never positive and bounded below."""
    price_impact_usd = ctx.price_impact.get_price_impact_usd(
        market, -to_signed(position.size_in_usd), position.is_long
    )
    # A favorable impact estimate must not make a position look safer.
    if price_impact_usd >= 0:
        return 0
    min_price_impact_usd = -apply_factor(
        position.size_in_usd, ctx.config.max_position_impact_factor_for_liquidations
    )
    if price_impact_usd < min_price_impact_usd:
        return min_price_impact_usd
    return price_impact_usd


def is_position_liquidatable(
    ctx: RiskContext,
    market: Market,
    prices: MarketPrices,
    position: Position,
    should_validate_min_collateral_usd: bool,
) -> LiquidationCheck:
    """Decide whether `position` must be liquidated. Pure: same inputs, same result."""
    validate_non_empty_position(position)
    pnl = get_position_pnl_usd(ctx, market, prices, position, position.size_in_usd)

    collateral_token_price = market.token_price(position.collateral_token, prices)
    collateral_usd = to_unsigned(position.collateral_amount * collateral_token_price.min)

    price_impact_usd = get_liquidation_price_impact_usd(ctx, market, position)

    fees = ctx.fees.get_position_fees(
        position,
        collateral_token_price,
        price_impact_usd > 0,
        position.size_in_usd,
        True,
    )
    # total_cost_amount was derived from collateral_token_price.min; keep the same basis.
    collateral_cost_usd = fees.total_cost_amount * collateral_token_price.min

    remaining_collateral_usd = (
        to_signed(collateral_usd) + pnl.pnl_usd + price_impact_usd - to_signed(collateral_cost_usd)
    )
    min_collateral_usd = ctx.config.min_collateral_usd
    min_collateral_usd_for_leverage = apply_factor(position.size_in_usd, ctx.config.min_collateral_factor)

    info = LiquidationInfo(
        remaining_collateral_usd=remaining_collateral_usd,
        min_collateral_usd=min_collateral_usd,
        min_collateral_usd_for_leverage=min_collateral_usd_for_leverage,
    )

    reason: LiquidationReason | None = None
    if should_validate_min_collateral_usd and remaining_collateral_usd < min_collateral_usd:
        reason = LiquidationReason.MIN_COLLATERAL
    elif remaining_collateral_usd <= 0:
        reason = LiquidationReason.BELOW_ZERO
    elif remaining_collateral_usd < min_collateral_usd_for_leverage:
        reason = LiquidationReason.MIN_COLLATERAL_FOR_LEVERAGE

    if reason is None:
        return LiquidationCheck(is_liquidatable=False, reason=None, info=info)

    logger.debug(
        "position.liquidatable",
        position_key=position.key,
        reason=reason.value,
        remaining_collateral_usd=remaining_collateral_usd,
        min_collateral_usd=min_collateral_usd,
        min_collateral_usd_for_leverage=min_collateral_usd_for_leverage,
    )
    return LiquidationCheck(is_liquidatable=True, reason=reason, info=info)


def validate_position(
    ctx: RiskContext,
    market: Market,
    prices: MarketPrices,
    position: Position,
    should_validate_min_position_size: bool,
    should_validate_min_collateral_usd: bool,
) -> None:
    """Raise a `PositionError` unless `position` is a valid, non-liquidatable position.

    Raises:
        InvalidPositionSizeValuesError: A size field is zero.
        DisabledMarketError: The market is disabled.
        InvalidCollateralTokenForMarketError: Collateral is neither of the market's pool tokens.
        MinPositionSizeError: Size below the configured minimum (when requested).
        LiquidatablePositionError: The liquidation check failed.
    """
    if position.size_in_usd == 0 or position.size_in_tokens == 0:
        raise InvalidPositionSizeValuesError(position.size_in_usd, position.size_in_tokens)

    if ctx.config.market_disabled:
        raise DisabledMarketError(market.market_token)
    if not market.accepts_collateral(position.collateral_token):
        raise InvalidCollateralTokenForMarketError(market.market_token, position.collateral_token)

    if should_validate_min_position_size and position.size_in_usd < ctx.config.min_position_size_usd:
        raise MinPositionSizeError(position.size_in_usd, ctx.config.min_position_size_usd)

    check = is_position_liquidatable(ctx, market, prices, position, should_validate_min_collateral_usd)
    if check.is_liquidatable and check.reason is not None:
        raise LiquidatablePositionError(
            check.reason.value,
            check.info.remaining_collateral_usd,
            check.info.min_collateral_usd,
            check.info.min_collateral_usd_for_leverage,
        )


def check_position(
    ctx: RiskContext,
    market: Market,
    prices: MarketPrices,
    position: Position,
    should_validate_min_position_size: bool,
    should_validate_min_collateral_usd: bool,
) -> ValidationResult:
    """Like ``validate_position()`` but returns the error instead of raising it."""
    try:
        validate_position(
            ctx,
            market,
            prices,
            position,
            should_validate_min_position_size,
            should_validate_min_collateral_usd,
        )
    except PositionError as exc:
        return ValidationResult(ok=False, error=exc)
    return ValidationResult(ok=True)
