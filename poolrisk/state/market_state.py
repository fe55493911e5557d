"""
In-memory collaborators for the position risk engine.

- `InMemoryConfigStore`: flat key -> uint/bool table (`ConfigStore`).
- `InMemoryMarketState`: pool amounts, open interest, impact pool and
  claimable funding (`MarketStateWriter`).
- `RecordingEventSink`: keeps emitted events in order (`EventSink`).

Note: tables are plain dicts keyed by tuples. Nothing here relies on dict
iteration order for results.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Tuple

if TYPE_CHECKING:
    from ..core.position.types import Market, Price


class InMemoryConfigStore:
    """Key-value threshold store. Missing keys read as 0 / False."""

    def __init__(self) -> None:
        self._uints: Dict[str, int] = {}
        self._bools: Dict[str, bool] = {}

    def get_uint(self, key: str) -> int:
        return self._uints.get(key, 0)

    def get_bool(self, key: str) -> bool:
        return self._bools.get(key, False)

    def set_uint(self, key: str, value: int) -> None:
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"{key} must be an int")
        if value < 0:
            raise ValueError(f"{key} must be non-negative: {value}")
        self._uints[key] = value

    def set_bool(self, key: str, value: bool) -> None:
        if not isinstance(value, bool):
            raise TypeError(f"{key} must be a bool")
        self._bools[key] = value


def _add_non_negative(table: Dict[Any, int], key: Any, delta: int) -> int:
    current = table.get(key, 0)
    new_value = current + delta
    if new_value < 0:
        raise ValueError(f"{key}: {current} + {delta} = {new_value} < 0")
    table[key] = new_value
    return new_value


class InMemoryMarketState:
    """
    Aggregate pool state for any number of markets.

    Open interest is tracked per (market, collateral token, side); the side
    totals sum over the market's distinct pool tokens. Pool PnL is derived from
    open interest: `oi_in_tokens * price - oi` for longs, the reverse for shorts.
    """

    def __init__(self) -> None:
        self._pool_amounts: Dict[Tuple[str, str], int] = {}
        self._open_interest: Dict[Tuple[str, str, bool], int] = {}
        self._open_interest_in_tokens: Dict[Tuple[str, str, bool], int] = {}
        self._impact_pool_amounts: Dict[str, int] = {}
        self._claimable_funding: Dict[Tuple[str, str, str], int] = {}

    # -- Setup ------------------------------------------------------------------

    def set_pool_amount(self, market: Market, token: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"pool amount cannot be negative: {amount}")
        self._pool_amounts[(market.market_token, token)] = amount

    def set_position_impact_pool_amount(self, market: Market, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"impact pool amount cannot be negative: {amount}")
        self._impact_pool_amounts[market.market_token] = amount

    # -- Reader -------------------------------------------------------------------

    def get_pool_amount(self, market: Market, token: str) -> int:
        return self._pool_amounts.get((market.market_token, token), 0)

    def _side_total(self, table: Dict[Tuple[str, str, bool], int], market: Market, is_long: bool) -> int:
        tokens = {market.long_token, market.short_token}
        return sum(table.get((market.market_token, token, is_long), 0) for token in sorted(tokens))

    def get_open_interest(self, market: Market, is_long: bool) -> int:
        return self._side_total(self._open_interest, market, is_long)

    def get_open_interest_in_tokens(self, market: Market, is_long: bool) -> int:
        return self._side_total(self._open_interest_in_tokens, market, is_long)

    def get_pnl(self, market: Market, index_token_price: Price, is_long: bool, maximize: bool) -> int:
        open_interest = self.get_open_interest(market, is_long)
        open_interest_in_tokens = self.get_open_interest_in_tokens(market, is_long)
        if open_interest == 0 or open_interest_in_tokens == 0:
            return 0
        price = index_token_price.pick_for_pnl(is_long, maximize)
        open_interest_value = open_interest_in_tokens * price
        return open_interest_value - open_interest if is_long else open_interest - open_interest_value

    def get_position_impact_pool_amount(self, market: Market) -> int:
        return self._impact_pool_amounts.get(market.market_token, 0)

    def get_claimable_funding_amount(self, market: Market, token: str, account: str) -> int:
        return self._claimable_funding.get((market.market_token, token, account), 0)

    # -- Writer -------------------------------------------------------------------

    def apply_delta_to_open_interest(self, market: Market, collateral_token: str, is_long: bool, delta: int) -> int:
        return _add_non_negative(self._open_interest, (market.market_token, collateral_token, is_long), delta)

    def apply_delta_to_open_interest_in_tokens(
        self, market: Market, collateral_token: str, is_long: bool, delta: int
    ) -> int:
        return _add_non_negative(
            self._open_interest_in_tokens, (market.market_token, collateral_token, is_long), delta
        )

    def increment_claimable_funding_amount(self, market: Market, token: str, account: str, delta: int) -> int:
        if delta < 0:
            raise ValueError(f"claimable funding increment must be non-negative: {delta}")
        return _add_non_negative(self._claimable_funding, (market.market_token, token, account), delta)


class RecordingEventSink:
    """Event sink that records `(name, fields)` pairs in emission order."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def emit(self, name: str, **fields: Any) -> None:
        self.events.append((name, dict(fields)))

    def names(self) -> List[str]:
        return [name for name, _ in self.events]
