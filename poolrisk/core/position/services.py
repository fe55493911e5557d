"""Collaborator interfaces for the position risk engine.

The engine is pure: everything it needs beyond the caller's snapshots comes
through these interfaces, bundled per evaluation in `RiskContext`. Concrete
in-memory implementations live in `poolrisk.state.market_state`; reference
pricing implementations live in `poolrisk.core.position.pricing`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from .config import RiskConfig
from .types import Market, Position, PositionFees, Price


class MarketStateReader(Protocol):
    """Read-only aggregate pool state."""

    def get_pool_amount(self, market: Market, token: str) -> int: ...

    def get_pnl(self, market: Market, index_token_price: Price, is_long: bool, maximize: bool) -> int: ...

    def get_open_interest(self, market: Market, is_long: bool) -> int: ...

    def get_position_impact_pool_amount(self, market: Market) -> int: ...


class MarketStateWriter(MarketStateReader, Protocol):
    """Aggregate pool state with the increment entry points."""

    def apply_delta_to_open_interest(
        self, market: Market, collateral_token: str, is_long: bool, delta: int
    ) -> int: ...

    def apply_delta_to_open_interest_in_tokens(
        self, market: Market, collateral_token: str, is_long: bool, delta: int
    ) -> int: ...

    def increment_claimable_funding_amount(
        self, market: Market, token: str, account: str, delta: int
    ) -> int: ...


class PriceImpactModel(Protocol):
    """Signed USD price impact of a notional delta; negative is a cost to the trader."""

    def get_price_impact_usd(self, market: Market, usd_delta: int, is_long: bool) -> int: ...


class FeeCalculator(Protocol):
    def get_position_fees(
        self,
        position: Position,
        collateral_token_price: Price,
        for_positive_impact: bool,
        size_delta_usd: int,
        is_liquidation: bool,
    ) -> PositionFees: ...


class OrderPricer(Protocol):
    """Final fill price plus acceptable-price enforcement."""

    def execution_price_for_increase(
        self, size_delta_usd: int, size_delta_in_tokens: int, acceptable_price: int, is_long: bool
    ) -> int: ...

    def execution_price_for_decrease(
        self,
        index_token_price: Price,
        position_size_in_usd: int,
        position_size_in_tokens: int,
        size_delta_usd: int,
        price_impact_usd: int,
        acceptable_price: int,
        is_long: bool,
    ) -> int: ...


class EventSink(Protocol):
    """Fire-and-forget event emission; never consulted for decisions."""

    def emit(self, name: str, **fields: Any) -> None: ...


@dataclass(frozen=True)
class RiskContext:
    """Everything one evaluation reads besides the position/market/price snapshots."""

    config: RiskConfig
    market_state: MarketStateWriter
    price_impact: PriceImpactModel
    fees: FeeCalculator
    order_pricer: OrderPricer
    events: EventSink
