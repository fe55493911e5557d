"""Property tests: rounding always favors the pool."""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from poolrisk.core.position import (
    IncreaseOrder,
    RiskConfig,
    get_execution_price_for_increase,
    is_position_liquidatable,
)
from poolrisk.core.precision import factor_from_bps, usd
from tests.position_fixtures import MARKET, eth_price, make_ctx, make_position, make_prices

prices_usd = st.integers(min_value=1, max_value=100_000)


@settings(max_examples=200)
@given(low=prices_usd, high=prices_usd)
def test_long_remaining_collateral_monotonic_in_price(low, high):
    low, high = min(low, high), max(low, high)
    ctx = make_ctx(RiskConfig(min_collateral_factor=factor_from_bps(500)))
    position = make_position()
    at_low = is_position_liquidatable(ctx, MARKET, make_prices(eth_price(low)), position, False)
    at_high = is_position_liquidatable(ctx, MARKET, make_prices(eth_price(high)), position, False)
    assert at_low.info.remaining_collateral_usd <= at_high.info.remaining_collateral_usd
    if not at_low.is_liquidatable:
        assert not at_high.is_liquidatable


@given(
    size_usd=st.integers(min_value=1, max_value=10**9),
    price_min=prices_usd,
    spread=st.integers(min_value=0, max_value=100),
    is_long=st.booleans(),
)
def test_increase_without_impact_never_overfills(size_usd, price_min, spread, is_long):
    price = eth_price(price_min, price_min + spread)
    ctx = make_ctx()
    order = IncreaseOrder(usd(size_usd), 10**60 if is_long else 0)
    r = get_execution_price_for_increase(ctx, MARKET, make_position(is_long=is_long), order, price)
    if is_long:
        assert r.size_delta_in_tokens * price.max <= usd(size_usd)
    else:
        assert r.size_delta_in_tokens * price.min >= usd(size_usd)
