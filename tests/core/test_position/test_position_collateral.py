"""Tests for poolrisk/core/position/collateral.py."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from poolrisk.core.position import (
    CalcOverflowError,
    CollateralValues,
    RiskConfig,
    UnknownTokenPriceError,
    get_min_collateral_factor_for_open_interest,
    will_position_collateral_be_sufficient,
)
from poolrisk.core.precision import factor_from_bps, usd
from poolrisk.state import InMemoryMarketState
from tests.position_fixtures import MARKET, USDC, make_ctx, make_prices

FIVE_PERCENT = factor_from_bps(500)


def _values(*, size_usd: int = 1000, collateral_usdc: int = 100, realized_pnl_usd: int = 0, oi_delta: int = 0):
    return CollateralValues(
        size_in_usd=usd(size_usd),
        collateral_amount=collateral_usdc * USDC,
        realized_pnl_usd=realized_pnl_usd,
        open_interest_delta=oi_delta,
    )


def _check(ctx, values, is_long: bool = True):
    return will_position_collateral_be_sufficient(ctx, MARKET, make_prices(), "USDC", is_long, values)


class TestCollateralSufficiency:
    def test_sufficient(self):
        r = _check(make_ctx(RiskConfig(min_collateral_factor=FIVE_PERCENT)), _values())
        assert r.is_sufficient is True
        assert r.remaining_collateral_usd == usd(100)

    def test_realized_loss_deducted(self):
        r = _check(make_ctx(RiskConfig(min_collateral_factor=FIVE_PERCENT)), _values(realized_pnl_usd=-usd(60)))
        assert r.is_sufficient is False
        assert r.remaining_collateral_usd == usd(40)

    def test_realized_profit_not_credited(self):
        r = _check(make_ctx(RiskConfig(min_collateral_factor=FIVE_PERCENT)), _values(realized_pnl_usd=usd(500)))
        assert r.remaining_collateral_usd == usd(100)

    def test_negative_remaining_short_circuits(self):
        ctx = make_ctx(RiskConfig(min_collateral_factor=FIVE_PERCENT))
        r = _check(ctx, _values(realized_pnl_usd=-usd(150), oi_delta=-usd(1)))
        assert r.is_sufficient is False
        assert r.remaining_collateral_usd == -usd(50)

    def test_exactly_at_floor(self):
        r = _check(make_ctx(RiskConfig(min_collateral_factor=FIVE_PERCENT)), _values(collateral_usdc=50))
        assert r.is_sufficient is True

    def test_unknown_collateral_token(self):
        ctx = make_ctx()
        with pytest.raises(UnknownTokenPriceError) as exc:
            will_position_collateral_be_sufficient(ctx, MARKET, make_prices(), "WBTC", True, _values())
        assert exc.value.token == "WBTC"

    @given(
        realized=st.integers(min_value=1, max_value=10**40),
        collateral_usdc=st.integers(min_value=0, max_value=10**6),
    )
    def test_positive_realized_pnl_never_helps(self, realized, collateral_usdc):
        ctx = make_ctx(RiskConfig(min_collateral_factor=FIVE_PERCENT))
        with_profit = _check(ctx, _values(collateral_usdc=collateral_usdc, realized_pnl_usd=realized))
        without = _check(ctx, _values(collateral_usdc=collateral_usdc))
        assert with_profit == without


class TestOpenInterestFloor:
    def _ctx(self, oi_usd: int):
        state = InMemoryMarketState()
        state.apply_delta_to_open_interest(MARKET, "USDC", True, usd(oi_usd))
        config = RiskConfig(
            min_collateral_factor=FIVE_PERCENT,
            min_collateral_factor_for_open_interest_multiplier_long=10**23,
        )
        return make_ctx(config, market_state=state)

    def test_factor_from_open_interest(self):
        ctx = self._ctx(500_000)
        assert get_min_collateral_factor_for_open_interest(ctx, MARKET, usd(500_000), True) == factor_from_bps(1000)

    def test_other_side_uses_its_own_multiplier(self):
        ctx = self._ctx(500_000)
        assert get_min_collateral_factor_for_open_interest(ctx, MARKET, usd(500_000), False) == 0

    def test_open_interest_floor_dominates(self):
        ctx = self._ctx(500_000)
        # 10% of $1000 = $100
        assert _check(ctx, _values(oi_delta=usd(500_000))).is_sufficient is True
        assert _check(ctx, _values(collateral_usdc=99, oi_delta=usd(500_000))).is_sufficient is False

    def test_market_floor_dominates_small_open_interest(self):
        ctx = self._ctx(1_000)
        assert _check(ctx, _values(collateral_usdc=49)).is_sufficient is False

    def test_negative_open_interest(self):
        ctx = self._ctx(0)
        with pytest.raises(CalcOverflowError):
            get_min_collateral_factor_for_open_interest(ctx, MARKET, -usd(1), True)
