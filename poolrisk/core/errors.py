"""Exception types for the position risk engine.

Every error is fatal to the evaluation that raised it. Each class carries a
stable ``code`` so callers can match on it (``check_position()`` returns the
error instead of raising).
"""

from __future__ import annotations


class PositionError(Exception):
    """Base class for all position risk engine failures."""

    code: str = "position_error"


class CalcOverflowError(PositionError):
    """Raised when a value leaves the 256-bit signed/unsigned domain."""

    code = "calc_overflow"


class EmptyPositionError(PositionError):
    """Raised when a non-empty position was required but all size fields are zero."""

    code = "empty_position"

    def __init__(self) -> None:
        super().__init__("position is empty")


class InvalidPositionSizeValuesError(PositionError):
    code = "invalid_position_size_values"

    def __init__(self, size_in_usd: int, size_in_tokens: int) -> None:
        self.size_in_usd = size_in_usd
        self.size_in_tokens = size_in_tokens
        super().__init__(
            f"invalid position size values: size_in_usd={size_in_usd}, size_in_tokens={size_in_tokens}"
        )


class MinPositionSizeError(PositionError):
    code = "min_position_size"

    def __init__(self, size_in_usd: int, min_position_size_usd: int) -> None:
        self.size_in_usd = size_in_usd
        self.min_position_size_usd = min_position_size_usd
        super().__init__(f"position size {size_in_usd} below minimum {min_position_size_usd}")


class LiquidatablePositionError(PositionError):
    """Raised by ``validate_position()``; carries the liquidation diagnostics."""

    code = "liquidatable_position"

    def __init__(
        self,
        reason: str,
        remaining_collateral_usd: int,
        min_collateral_usd: int,
        min_collateral_usd_for_leverage: int,
    ) -> None:
        self.reason = reason
        self.remaining_collateral_usd = remaining_collateral_usd
        self.min_collateral_usd = min_collateral_usd
        self.min_collateral_usd_for_leverage = min_collateral_usd_for_leverage
        super().__init__(
            f"liquidatable position ({reason}): remaining_collateral_usd={remaining_collateral_usd}, "
            f"min_collateral_usd={min_collateral_usd}, "
            f"min_collateral_usd_for_leverage={min_collateral_usd_for_leverage}"
        )


class PriceImpactLargerThanOrderSizeError(PositionError):
    code = "price_impact_larger_than_order_size"

    def __init__(self, price_impact_usd: int, size_delta_usd: int) -> None:
        self.price_impact_usd = price_impact_usd
        self.size_delta_usd = size_delta_usd
        super().__init__(
            f"price impact {price_impact_usd} larger than order size {size_delta_usd}"
        )


class DisabledMarketError(PositionError):
    code = "disabled_market"

    def __init__(self, market_token: str) -> None:
        self.market_token = market_token
        super().__init__(f"market is disabled: {market_token}")


class InvalidCollateralTokenForMarketError(PositionError):
    code = "invalid_collateral_token_for_market"

    def __init__(self, market_token: str, collateral_token: str) -> None:
        self.market_token = market_token
        self.collateral_token = collateral_token
        super().__init__(f"collateral token {collateral_token} not accepted by market {market_token}")


class UnknownTokenPriceError(PositionError):
    code = "unknown_token_price"

    def __init__(self, token: str, market_token: str) -> None:
        self.token = token
        self.market_token = market_token
        super().__init__(f"no cached price for token {token} in market {market_token}")


class EmptySizeDeltaInTokensError(PositionError):
    code = "empty_size_delta_in_tokens"

    def __init__(self) -> None:
        super().__init__("size_delta_in_tokens is zero")


class NegativeExecutionPriceError(PositionError):
    code = "negative_execution_price"

    def __init__(self, execution_price: int, price: int, size_in_usd: int, price_impact_usd: int, size_delta_usd: int) -> None:
        self.execution_price = execution_price
        self.price = price
        self.size_in_usd = size_in_usd
        self.price_impact_usd = price_impact_usd
        self.size_delta_usd = size_delta_usd
        super().__init__(f"negative execution price {execution_price} (index price {price})")


class OrderNotFulfillableAtAcceptablePriceError(PositionError):
    code = "order_not_fulfillable_at_acceptable_price"

    def __init__(self, execution_price: int, acceptable_price: int) -> None:
        self.execution_price = execution_price
        self.acceptable_price = acceptable_price
        super().__init__(
            f"execution price {execution_price} outside acceptable price {acceptable_price}"
        )
