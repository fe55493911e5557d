"""Data types for the position risk engine.

All types are frozen dataclasses (immutable). A single evaluation works on one
snapshot of these values; nothing here is refreshed mid-computation.

Units/conventions (see `poolrisk.core.precision`):
- `*_usd` values are `UsdAmount` (1e30-scaled quote currency).
- `*_factor` values are `Factor` (1e30 == 100%).
- `*_amount` / `*_in_tokens` values are token amounts in smallest units.
- prices are USD per smallest token unit, 1e30-scaled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique

from ..errors import PositionError, UnknownTokenPriceError
from .keys import position_key


def _check_int(name: str, v: object, *, signed: bool = False) -> None:
    if not isinstance(v, int) or isinstance(v, bool):
        raise TypeError(f"{name} must be an int")
    if not signed and v < 0:
        raise ValueError(f"{name} must be non-negative: {v}")


def _check_str(name: str, v: object) -> None:
    if not isinstance(v, str) or not v:
        raise TypeError(f"{name} must be a non-empty string")


@unique
class Event(Enum):
    """Names of events emitted on aggregate-state mutation."""
    OPEN_INTEREST_UPDATED = "OpenInterestUpdated"
    OPEN_INTEREST_IN_TOKENS_UPDATED = "OpenInterestInTokensUpdated"
    CLAIMABLE_FUNDING_UPDATED = "ClaimableFundingUpdated"


@unique
class LiquidationReason(Enum):
    """Why a position is liquidatable. Checked in declaration order."""
    MIN_COLLATERAL = "min collateral"
    BELOW_ZERO = "below zero"
    MIN_COLLATERAL_FOR_LEVERAGE = "min collateral for leverage"


@dataclass(frozen=True)
class Price:
    """Oracle bid/ask pair for one token."""

    min: int
    max: int

    def __post_init__(self) -> None:
        _check_int("min", self.min)
        _check_int("max", self.max)
        if self.min > self.max:
            raise ValueError(f"price min {self.min} above max {self.max}")

    def pick(self, maximize: bool) -> int:
        return self.max if maximize else self.min

    def pick_for_pnl(self, is_long: bool, maximize: bool) -> int:
        # Long PnL grows with price, short PnL shrinks with it.
        if is_long:
            return self.max if maximize else self.min
        return self.min if maximize else self.max


@dataclass(frozen=True)
class MarketPrices:
    index_token_price: Price
    long_token_price: Price
    short_token_price: Price


@dataclass(frozen=True)
class Market:
    """Pool descriptor: pool token plus the index/long/short tokens it trades."""

    market_token: str
    index_token: str
    long_token: str
    short_token: str

    def __post_init__(self) -> None:
        for name in ("market_token", "index_token", "long_token", "short_token"):
            _check_str(name, getattr(self, name))

    def accepts_collateral(self, token: str) -> bool:
        return token == self.long_token or token == self.short_token

    def token_price(self, token: str, prices: MarketPrices) -> Price:
        """Cached price of one of this market's tokens."""
        if token == self.long_token:
            return prices.long_token_price
        if token == self.short_token:
            return prices.short_token_price
        if token == self.index_token:
            return prices.index_token_price
        raise UnknownTokenPriceError(token, self.market_token)


@dataclass(frozen=True)
class Position:
    """Leveraged position snapshot.

    Either both size fields are zero (closed) or both are positive; use
    `validate_non_empty_position()` before any pricing math.
    """

    account: str
    market: str
    collateral_token: str
    is_long: bool
    size_in_usd: int
    size_in_tokens: int
    collateral_amount: int
    borrowing_factor: int = 0
    funding_fee_amount_per_size: int = 0
    long_token_claimable_funding_amount_per_size: int = 0
    short_token_claimable_funding_amount_per_size: int = 0

    def __post_init__(self) -> None:
        _check_str("account", self.account)
        _check_str("market", self.market)
        _check_str("collateral_token", self.collateral_token)
        if not isinstance(self.is_long, bool):
            raise TypeError("is_long must be a bool")
        for name in (
            "size_in_usd",
            "size_in_tokens",
            "collateral_amount",
            "borrowing_factor",
            "funding_fee_amount_per_size",
            "long_token_claimable_funding_amount_per_size",
            "short_token_claimable_funding_amount_per_size",
        ):
            _check_int(name, getattr(self, name))

    @property
    def is_empty(self) -> bool:
        return self.size_in_usd == 0 and self.size_in_tokens == 0 and self.collateral_amount == 0

    @property
    def key(self) -> str:
        return position_key(self.account, self.market, self.collateral_token, self.is_long)


@dataclass(frozen=True)
class PositionFundingFees:
    funding_fee_amount: int = 0
    claimable_long_token_amount: int = 0
    claimable_short_token_amount: int = 0

    def __post_init__(self) -> None:
        _check_int("funding_fee_amount", self.funding_fee_amount)
        _check_int("claimable_long_token_amount", self.claimable_long_token_amount)
        _check_int("claimable_short_token_amount", self.claimable_short_token_amount)


@dataclass(frozen=True)
class PositionFees:
    """Externally computed fee breakdown; `total_cost_amount` is in collateral-token units."""

    funding: PositionFundingFees = field(default_factory=PositionFundingFees)
    total_cost_amount: int = 0

    def __post_init__(self) -> None:
        _check_int("total_cost_amount", self.total_cost_amount)


@dataclass(frozen=True)
class IncreaseOrder:
    size_delta_usd: int
    acceptable_price: int

    def __post_init__(self) -> None:
        _check_int("size_delta_usd", self.size_delta_usd)
        _check_int("acceptable_price", self.acceptable_price)


@dataclass(frozen=True)
class DecreaseOrder:
    size_delta_usd: int
    acceptable_price: int

    def __post_init__(self) -> None:
        _check_int("size_delta_usd", self.size_delta_usd)
        _check_int("acceptable_price", self.acceptable_price)


@dataclass(frozen=True)
class CollateralValues:
    """Prospective position values for `will_position_collateral_be_sufficient()`."""

    size_in_usd: int
    collateral_amount: int
    realized_pnl_usd: int
    open_interest_delta: int

    def __post_init__(self) -> None:
        _check_int("size_in_usd", self.size_in_usd)
        _check_int("collateral_amount", self.collateral_amount)
        _check_int("realized_pnl_usd", self.realized_pnl_usd, signed=True)
        _check_int("open_interest_delta", self.open_interest_delta, signed=True)


# -- Results -----------------------------------------------------------------

@dataclass(frozen=True)
class PositionPnl:
    pnl_usd: int
    uncapped_pnl_usd: int
    size_delta_in_tokens: int


@dataclass(frozen=True)
class LiquidationInfo:
    remaining_collateral_usd: int = 0
    min_collateral_usd: int = 0
    min_collateral_usd_for_leverage: int = 0


@dataclass(frozen=True)
class LiquidationCheck:
    is_liquidatable: bool
    reason: LiquidationReason | None
    info: LiquidationInfo


@dataclass(frozen=True)
class CollateralCheck:
    is_sufficient: bool
    remaining_collateral_usd: int


@dataclass(frozen=True)
class IncreaseExecution:
    price_impact_usd: int
    price_impact_amount: int
    size_delta_in_tokens: int
    execution_price: int


@dataclass(frozen=True)
class DecreaseExecution:
    price_impact_usd: int
    price_impact_diff_usd: int
    execution_price: int


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    error: PositionError | None = None
