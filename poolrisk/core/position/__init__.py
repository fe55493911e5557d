"""`position`: pure risk and execution-pricing engine for pool-backed leveraged positions.

- deterministic, integer-only fixed-point math (`poolrisk.core.precision`),
- immutable inputs (frozen dataclasses) and a per-evaluation `RiskContext`,
- fail-closed: every failure raises a `PositionError` subclass.

Public API:
- `get_position_pnl_usd(ctx, market, prices, position, size_delta_usd) -> PositionPnl`
- `is_position_liquidatable(ctx, market, prices, position, validate_min_collateral) -> LiquidationCheck`
- `validate_position(...)` (raises) / `check_position(...) -> ValidationResult`
- `will_position_collateral_be_sufficient(...) -> CollateralCheck`
- `get_execution_price_for_increase(...) -> IncreaseExecution`
- `get_execution_price_for_decrease(...) -> DecreaseExecution`
- `update_open_interest(...)`, `increment_claimable_funding_amount(...)`
"""

from ..errors import (
    CalcOverflowError,
    DisabledMarketError,
    EmptyPositionError,
    EmptySizeDeltaInTokensError,
    InvalidCollateralTokenForMarketError,
    InvalidPositionSizeValuesError,
    LiquidatablePositionError,
    MinPositionSizeError,
    NegativeExecutionPriceError,
    OrderNotFulfillableAtAcceptablePriceError,
    PositionError,
    PriceImpactLargerThanOrderSizeError,
    UnknownTokenPriceError,
)
from .collateral import get_min_collateral_factor_for_open_interest, will_position_collateral_be_sufficient
from .config import ConfigStore, RiskConfig, load_risk_config_yaml
from .execution import (
    get_capped_position_impact_usd,
    get_execution_price_for_decrease,
    get_execution_price_for_increase,
)
from .guards import validate_non_empty_position, validate_position_size_values
from .keys import position_key
from .liquidation import check_position, is_position_liquidatable, validate_position
from .pnl import get_capped_pnl, get_position_pnl_usd
from .pricing import ImbalancePriceImpactModel, OrderPricing
from .services import (
    EventSink,
    FeeCalculator,
    MarketStateReader,
    MarketStateWriter,
    OrderPricer,
    PriceImpactModel,
    RiskContext,
)
from .types import (
    CollateralCheck,
    CollateralValues,
    DecreaseExecution,
    DecreaseOrder,
    Event,
    IncreaseExecution,
    IncreaseOrder,
    LiquidationCheck,
    LiquidationInfo,
    LiquidationReason,
    Market,
    MarketPrices,
    Position,
    PositionFees,
    PositionFundingFees,
    PositionPnl,
    Price,
    ValidationResult,
)
from .updates import increment_claimable_funding_amount, update_open_interest

__all__ = [
    "get_position_pnl_usd",
    "get_capped_pnl",
    "is_position_liquidatable",
    "validate_position",
    "validate_non_empty_position",
    "validate_position_size_values",
    "position_key",
    "check_position",
    "will_position_collateral_be_sufficient",
    "get_min_collateral_factor_for_open_interest",
    "get_capped_position_impact_usd",
    "get_execution_price_for_increase",
    "get_execution_price_for_decrease",
    "update_open_interest",
    "increment_claimable_funding_amount",
    "ConfigStore",
    "RiskConfig",
    "load_risk_config_yaml",
    "EventSink",
    "FeeCalculator",
    "MarketStateReader",
    "MarketStateWriter",
    "OrderPricer",
    "PriceImpactModel",
    "RiskContext",
    "ImbalancePriceImpactModel",
    "OrderPricing",
    "CollateralCheck",
    "CollateralValues",
    "DecreaseExecution",
    "DecreaseOrder",
    "Event",
    "IncreaseExecution",
    "IncreaseOrder",
    "LiquidationCheck",
    "LiquidationInfo",
    "LiquidationReason",
    "Market",
    "MarketPrices",
    "Position",
    "PositionFees",
    "PositionFundingFees",
    "PositionPnl",
    "Price",
    "ValidationResult",
    "PositionError",
    "CalcOverflowError",
    "DisabledMarketError",
    "EmptyPositionError",
    "EmptySizeDeltaInTokensError",
    "InvalidCollateralTokenForMarketError",
    "InvalidPositionSizeValuesError",
    "LiquidatablePositionError",
    "MinPositionSizeError",
    "NegativeExecutionPriceError",
    "OrderNotFulfillableAtAcceptablePriceError",
    "PriceImpactLargerThanOrderSizeError",
    "UnknownTokenPriceError",
]
