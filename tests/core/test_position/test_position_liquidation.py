"""Tests for poolrisk/core/position/liquidation.py — liquidation check + validation."""

from __future__ import annotations

from dataclasses import replace

import pytest

from poolrisk.core.position import (
    DisabledMarketError,
    EmptyPositionError,
    InvalidCollateralTokenForMarketError,
    InvalidPositionSizeValuesError,
    LiquidatablePositionError,
    LiquidationReason,
    MinPositionSizeError,
    PositionFees,
    Price,
    RiskConfig,
    check_position,
    is_position_liquidatable,
    validate_non_empty_position,
    validate_position,
)
from poolrisk.core.precision import factor_from_bps, usd
from tests.position_fixtures import MARKET, USDC, eth_price, make_ctx, make_position, make_prices


def _config(**overrides) -> RiskConfig:
    base = dict(min_collateral_factor=factor_from_bps(500))
    base.update(overrides)
    return RiskConfig(**base)


# ---------------------------------------------------------------------------
# Reason order
# ---------------------------------------------------------------------------

class TestLiquidationReasons:
    def test_healthy(self):
        ctx = make_ctx(_config())
        r = is_position_liquidatable(ctx, MARKET, make_prices(), make_position(), True)
        assert r.is_liquidatable is False
        assert r.reason is None
        assert r.info.remaining_collateral_usd == usd(100)
        assert r.info.min_collateral_usd_for_leverage == usd(50)

    def test_min_collateral_for_leverage(self):
        # $100 collateral, 0.5 ETH at $1880: pnl -$60, remaining $40 < 5% of $1000.
        ctx = make_ctx(_config())
        r = is_position_liquidatable(ctx, MARKET, make_prices(eth_price(1880)), make_position(), True)
        assert r.is_liquidatable is True
        assert r.reason is LiquidationReason.MIN_COLLATERAL_FOR_LEVERAGE
        assert r.info.remaining_collateral_usd == usd(40)

    def test_min_collateral_checked_first(self):
        ctx = make_ctx(_config(min_collateral_usd=usd(45)))
        r = is_position_liquidatable(ctx, MARKET, make_prices(eth_price(1880)), make_position(), True)
        assert r.reason is LiquidationReason.MIN_COLLATERAL
        assert r.info.min_collateral_usd == usd(45)

    def test_min_collateral_skipped_without_flag(self):
        ctx = make_ctx(_config(min_collateral_usd=usd(45)))
        r = is_position_liquidatable(ctx, MARKET, make_prices(eth_price(1880)), make_position(), False)
        assert r.reason is LiquidationReason.MIN_COLLATERAL_FOR_LEVERAGE

    def test_below_zero_includes_zero(self):
        ctx = make_ctx(_config())
        r = is_position_liquidatable(ctx, MARKET, make_prices(eth_price(1800)), make_position(), False)
        assert r.info.remaining_collateral_usd == 0
        assert r.reason is LiquidationReason.BELOW_ZERO

    def test_exactly_at_leverage_floor_is_safe(self):
        ctx = make_ctx(_config())
        r = is_position_liquidatable(ctx, MARKET, make_prices(eth_price(1900)), make_position(), True)
        assert r.info.remaining_collateral_usd == usd(50)
        assert r.is_liquidatable is False

    def test_reason_values(self):
        assert LiquidationReason.MIN_COLLATERAL.value == "min collateral"
        assert LiquidationReason.BELOW_ZERO.value == "below zero"
        assert LiquidationReason.MIN_COLLATERAL_FOR_LEVERAGE.value == "min collateral for leverage"


# ---------------------------------------------------------------------------
# Price impact and fees
# ---------------------------------------------------------------------------

class TestLiquidationImpact:
    def test_negative_impact_bounded_by_liquidation_factor(self):
        ctx = make_ctx(
            _config(max_position_impact_factor_for_liquidations=factor_from_bps(100)),
            impact_usd=-usd(30),
        )
        r = is_position_liquidatable(ctx, MARKET, make_prices(), make_position(), True)
        assert r.info.remaining_collateral_usd == usd(90)

    def test_negative_impact_within_bound(self):
        ctx = make_ctx(
            _config(max_position_impact_factor_for_liquidations=factor_from_bps(500)),
            impact_usd=-usd(30),
        )
        r = is_position_liquidatable(ctx, MARKET, make_prices(), make_position(), True)
        assert r.info.remaining_collateral_usd == usd(70)

    def test_positive_impact_ignored(self):
        ctx = make_ctx(_config(), impact_usd=usd(30))
        r = is_position_liquidatable(ctx, MARKET, make_prices(), make_position(), True)
        assert r.info.remaining_collateral_usd == usd(100)
        assert ctx.fees.calls[0]["for_positive_impact"] is False

    def test_impact_requested_for_full_close(self):
        ctx = make_ctx(_config())
        position = make_position(is_long=False)
        is_position_liquidatable(ctx, MARKET, make_prices(), position, True)
        assert ctx.price_impact.calls == [(-usd(1000), False)]

    def test_fees_requested_as_liquidation(self):
        ctx = make_ctx(_config())
        position = make_position()
        is_position_liquidatable(ctx, MARKET, make_prices(), position, True)
        [call] = ctx.fees.calls
        assert call["position"] == position
        assert call["size_delta_usd"] == position.size_in_usd
        assert call["is_liquidation"] is True

    def test_collateral_and_fees_valued_at_min_price(self):
        usdc = Price(min=99 * 10**22, max=10**24)
        ctx = make_ctx(_config(), fees=PositionFees(total_cost_amount=5 * USDC))
        r = is_position_liquidatable(ctx, MARKET, make_prices(usdc=usdc), make_position(), True)
        # $99 collateral - $4.95 fees
        assert r.info.remaining_collateral_usd == 9405 * 10**28
        assert ctx.fees.calls[0]["collateral_token_price"] == usdc

    def test_long_token_collateral(self):
        ctx = make_ctx(_config())
        position = replace(make_position(collateral_token="ETH"), collateral_amount=10**17)
        r = is_position_liquidatable(ctx, MARKET, make_prices(eth_price(2000)), position, True)
        assert r.info.remaining_collateral_usd == usd(200)

    def test_is_pure(self):
        ctx = make_ctx(_config(min_collateral_usd=usd(45)))
        prices = make_prices(eth_price(1880))
        position = make_position()
        first = is_position_liquidatable(ctx, MARKET, prices, position, True)
        second = is_position_liquidatable(ctx, MARKET, prices, position, True)
        assert first == second
        assert ctx.events.events == []


# ---------------------------------------------------------------------------
# validate_position / check_position
# ---------------------------------------------------------------------------

class TestValidatePosition:
    def test_valid(self):
        ctx = make_ctx(_config())
        validate_position(ctx, MARKET, make_prices(), make_position(), True, True)

    def test_zero_size_first(self):
        ctx = make_ctx(_config(market_disabled=True))
        with pytest.raises(InvalidPositionSizeValuesError):
            validate_position(ctx, MARKET, make_prices(), make_position(size_in_tokens=0), True, True)

    def test_disabled_market(self):
        ctx = make_ctx(_config(market_disabled=True))
        with pytest.raises(DisabledMarketError) as exc:
            validate_position(ctx, MARKET, make_prices(), make_position(), True, True)
        assert exc.value.market_token == MARKET.market_token

    def test_invalid_collateral_token(self):
        ctx = make_ctx(_config())
        with pytest.raises(InvalidCollateralTokenForMarketError) as exc:
            validate_position(ctx, MARKET, make_prices(), make_position(collateral_token="WBTC"), True, True)
        assert exc.value.collateral_token == "WBTC"

    def test_min_position_size(self):
        ctx = make_ctx(_config(min_position_size_usd=usd(2000)))
        with pytest.raises(MinPositionSizeError) as exc:
            validate_position(ctx, MARKET, make_prices(), make_position(), True, True)
        assert exc.value.min_position_size_usd == usd(2000)

    def test_min_position_size_skipped(self):
        ctx = make_ctx(_config(min_position_size_usd=usd(2000)))
        validate_position(ctx, MARKET, make_prices(), make_position(), False, True)

    def test_liquidatable(self):
        ctx = make_ctx(_config())
        with pytest.raises(LiquidatablePositionError) as exc:
            validate_position(ctx, MARKET, make_prices(eth_price(1880)), make_position(), True, True)
        assert exc.value.reason == "min collateral for leverage"
        assert exc.value.remaining_collateral_usd == usd(40)
        assert exc.value.min_collateral_usd_for_leverage == usd(50)

    def test_check_position_ok(self):
        ctx = make_ctx(_config())
        r = check_position(ctx, MARKET, make_prices(), make_position(), True, True)
        assert r.ok is True
        assert r.error is None

    def test_check_position_returns_error(self):
        ctx = make_ctx(_config(market_disabled=True))
        r = check_position(ctx, MARKET, make_prices(), make_position(), True, True)
        assert r.ok is False
        assert isinstance(r.error, DisabledMarketError)
        assert r.error.code == "disabled_market"


class TestValidateNonEmptyPosition:
    def test_empty(self):
        with pytest.raises(EmptyPositionError):
            validate_non_empty_position(make_position(size_usd=0, size_in_tokens=0, collateral_usdc=0))

    def test_half_empty(self):
        with pytest.raises(InvalidPositionSizeValuesError):
            validate_non_empty_position(make_position(size_usd=0))

    def test_collateral_only(self):
        with pytest.raises(InvalidPositionSizeValuesError):
            validate_non_empty_position(make_position(size_usd=0, size_in_tokens=0))

    def test_ok(self):
        validate_non_empty_position(make_position())
