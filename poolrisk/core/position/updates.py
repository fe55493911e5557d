"""Aggregate-state increments made on behalf of a position.

These are thin forwarders to the market-state collaborator. The surrounding
environment commits or aborts the whole operation, so there is no partial
update to reconcile here.
"""

from __future__ import annotations

import structlog

from .services import RiskContext
from .types import Event, Market, Position, PositionFees

logger = structlog.get_logger("poolrisk.updates")


def update_open_interest(
    ctx: RiskContext,
    market: Market,
    position: Position,
    size_delta_usd: int,
    size_delta_in_tokens: int,
) -> None:
    """Apply a signed size change to the side's open interest (USD and tokens)."""
    if size_delta_usd == 0:
        return

    open_interest = ctx.market_state.apply_delta_to_open_interest(
        market, position.collateral_token, position.is_long, size_delta_usd
    )
    ctx.events.emit(
        Event.OPEN_INTEREST_UPDATED.value,
        market=market.market_token,
        collateral_token=position.collateral_token,
        is_long=position.is_long,
        delta=size_delta_usd,
        next_value=open_interest,
    )

    open_interest_in_tokens = ctx.market_state.apply_delta_to_open_interest_in_tokens(
        market, position.collateral_token, position.is_long, size_delta_in_tokens
    )
    ctx.events.emit(
        Event.OPEN_INTEREST_IN_TOKENS_UPDATED.value,
        market=market.market_token,
        collateral_token=position.collateral_token,
        is_long=position.is_long,
        delta=size_delta_in_tokens,
        next_value=open_interest_in_tokens,
    )

    logger.info(
        "open_interest.updated",
        market=market.market_token,
        is_long=position.is_long,
        size_delta_usd=size_delta_usd,
        size_delta_in_tokens=size_delta_in_tokens,
        open_interest=open_interest,
    )


def increment_claimable_funding_amount(
    ctx: RiskContext,
    market: Market,
    account: str,
    fees: PositionFees,
) -> None:
    """Credit funding the position earned as claimable, per pool token."""
    for token, amount in (
        (market.long_token, fees.funding.claimable_long_token_amount),
        (market.short_token, fees.funding.claimable_short_token_amount),
    ):
        if amount <= 0:
            continue
        next_value = ctx.market_state.increment_claimable_funding_amount(market, token, account, amount)
        ctx.events.emit(
            Event.CLAIMABLE_FUNDING_UPDATED.value,
            market=market.market_token,
            token=token,
            account=account,
            delta=amount,
            next_value=next_value,
        )
        logger.info(
            "funding.claimable_incremented",
            market=market.market_token,
            token=token,
            account=account,
            amount=amount,
        )
