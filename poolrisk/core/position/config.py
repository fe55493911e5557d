"""Risk threshold configuration.

`RiskConfig` is a typed snapshot of every threshold one evaluation consumes.
Build it once per evaluation (`RiskConfig.load()` from a key-value store, or
`load_risk_config_yaml()` from a file) and pass it explicitly; no evaluation
step reads the store directly, so all steps see the same values.

Key layout mirrors a flat key-value store: global keys are bare names,
per-market keys are `NAME:<market_token>[:<side>]`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Protocol

import yaml

from ..precision import FACTOR_SCALE


class ConfigStore(Protocol):
    """Read-only key-value store. Missing keys read as 0 / False."""

    def get_uint(self, key: str) -> int: ...

    def get_bool(self, key: str) -> bool: ...


# -- Keys ---------------------------------------------------------------------

MIN_POSITION_SIZE_USD = "MIN_POSITION_SIZE_USD"
MIN_COLLATERAL_USD = "MIN_COLLATERAL_USD"
MIN_COLLATERAL_FACTOR = "MIN_COLLATERAL_FACTOR"
MIN_COLLATERAL_FACTOR_FOR_OPEN_INTEREST_MULTIPLIER = "MIN_COLLATERAL_FACTOR_FOR_OPEN_INTEREST_MULTIPLIER"
MAX_POSITION_IMPACT_FACTOR = "MAX_POSITION_IMPACT_FACTOR"
MAX_POSITION_IMPACT_FACTOR_FOR_LIQUIDATIONS = "MAX_POSITION_IMPACT_FACTOR_FOR_LIQUIDATIONS"
MAX_PNL_FACTOR_FOR_TRADERS = "MAX_PNL_FACTOR_FOR_TRADERS"
IS_MARKET_DISABLED = "IS_MARKET_DISABLED"


def _side(is_long: bool) -> str:
    return "long" if is_long else "short"


def min_collateral_factor_key(market_token: str) -> str:
    return f"{MIN_COLLATERAL_FACTOR}:{market_token}"


def min_collateral_factor_for_open_interest_multiplier_key(market_token: str, is_long: bool) -> str:
    return f"{MIN_COLLATERAL_FACTOR_FOR_OPEN_INTEREST_MULTIPLIER}:{market_token}:{_side(is_long)}"


def max_position_impact_factor_key(market_token: str, is_positive: bool) -> str:
    return f"{MAX_POSITION_IMPACT_FACTOR}:{market_token}:{'positive' if is_positive else 'negative'}"


def max_position_impact_factor_for_liquidations_key(market_token: str) -> str:
    return f"{MAX_POSITION_IMPACT_FACTOR_FOR_LIQUIDATIONS}:{market_token}"


def max_pnl_factor_for_traders_key(market_token: str, is_long: bool) -> str:
    return f"{MAX_PNL_FACTOR_FOR_TRADERS}:{market_token}:{_side(is_long)}"


def is_market_disabled_key(market_token: str) -> str:
    return f"{IS_MARKET_DISABLED}:{market_token}"


# -- Snapshot -------------------------------------------------------------------

_FACTOR_FIELDS = (
    "min_collateral_factor",
    "min_collateral_factor_for_open_interest_multiplier_long",
    "min_collateral_factor_for_open_interest_multiplier_short",
    "max_position_impact_factor_positive",
    "max_position_impact_factor_negative",
    "max_position_impact_factor_for_liquidations",
    "max_pnl_factor_for_traders_long",
    "max_pnl_factor_for_traders_short",
)


@dataclass(frozen=True)
class RiskConfig:
    """Thresholds for one market. Factors are 1e30-scaled, USD values 1e30-scaled."""

    min_position_size_usd: int = 0
    min_collateral_usd: int = 0
    min_collateral_factor: int = 0
    min_collateral_factor_for_open_interest_multiplier_long: int = 0
    min_collateral_factor_for_open_interest_multiplier_short: int = 0
    max_position_impact_factor_positive: int = 0
    max_position_impact_factor_negative: int = 0
    max_position_impact_factor_for_liquidations: int = 0
    max_pnl_factor_for_traders_long: int = 0
    max_pnl_factor_for_traders_short: int = 0
    market_disabled: bool = False

    def __post_init__(self) -> None:
        for f in fields(self):
            val = getattr(self, f.name)
            if f.name == "market_disabled":
                if not isinstance(val, bool):
                    raise TypeError("market_disabled must be a bool")
                continue
            if not isinstance(val, int) or isinstance(val, bool):
                raise TypeError(f"{f.name} must be an int")
            if val < 0:
                raise ValueError(f"{f.name} must be non-negative: {val}")
        for name in _FACTOR_FIELDS:
            # The open-interest multiplier scales with open interest, not a ratio of size.
            if name.startswith("min_collateral_factor_for_open_interest"):
                continue
            if getattr(self, name) > FACTOR_SCALE:
                raise ValueError(f"{name} must be <= FACTOR_SCALE: {getattr(self, name)}")

    def min_collateral_factor_for_open_interest_multiplier(self, is_long: bool) -> int:
        if is_long:
            return self.min_collateral_factor_for_open_interest_multiplier_long
        return self.min_collateral_factor_for_open_interest_multiplier_short

    def max_position_impact_factor(self, is_positive: bool) -> int:
        if is_positive:
            return self.max_position_impact_factor_positive
        return self.max_position_impact_factor_negative

    def max_pnl_factor_for_traders(self, is_long: bool) -> int:
        if is_long:
            return self.max_pnl_factor_for_traders_long
        return self.max_pnl_factor_for_traders_short

    @classmethod
    def load(cls, store: ConfigStore, market_token: str) -> "RiskConfig":
        """Read every threshold for `market_token` from `store` once."""
        return cls(
            min_position_size_usd=store.get_uint(MIN_POSITION_SIZE_USD),
            min_collateral_usd=store.get_uint(MIN_COLLATERAL_USD),
            min_collateral_factor=store.get_uint(min_collateral_factor_key(market_token)),
            min_collateral_factor_for_open_interest_multiplier_long=store.get_uint(
                min_collateral_factor_for_open_interest_multiplier_key(market_token, True)
            ),
            min_collateral_factor_for_open_interest_multiplier_short=store.get_uint(
                min_collateral_factor_for_open_interest_multiplier_key(market_token, False)
            ),
            max_position_impact_factor_positive=store.get_uint(max_position_impact_factor_key(market_token, True)),
            max_position_impact_factor_negative=store.get_uint(max_position_impact_factor_key(market_token, False)),
            max_position_impact_factor_for_liquidations=store.get_uint(
                max_position_impact_factor_for_liquidations_key(market_token)
            ),
            max_pnl_factor_for_traders_long=store.get_uint(max_pnl_factor_for_traders_key(market_token, True)),
            max_pnl_factor_for_traders_short=store.get_uint(max_pnl_factor_for_traders_key(market_token, False)),
            market_disabled=store.get_bool(is_market_disabled_key(market_token)),
        )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "RiskConfig":
        """Build from a plain mapping of field names. Unknown keys are rejected."""
        if not isinstance(mapping, Mapping):
            raise TypeError("risk config must be a mapping")
        known = {f.name for f in fields(cls)}
        extra = set(mapping) - known
        if extra:
            raise ValueError(f"risk config has unknown keys: {sorted(extra)[:8]}")
        return cls(**dict(mapping))


def load_risk_config_yaml(path: Path | str, market_token: str) -> RiskConfig:
    """
    Load the `RiskConfig` for `market_token` from a YAML file.

    Layout::

        defaults:
          min_collateral_usd: 1000000000000000000000000000000
        markets:
          <market_token>:
            min_collateral_factor: 10000000000000000000000000000

    Market entries override defaults field by field.
    """
    path = Path(path)
    obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    if obj is None:
        obj = {}
    if not isinstance(obj, Mapping):
        raise TypeError("risk config YAML must be a mapping")
    extra = set(obj) - {"defaults", "markets"}
    if extra:
        raise ValueError(f"risk config YAML has unknown sections: {sorted(extra)}")

    defaults = obj.get("defaults") or {}
    markets = obj.get("markets") or {}
    if not isinstance(defaults, Mapping):
        raise TypeError("defaults must be a mapping")
    if not isinstance(markets, Mapping):
        raise TypeError("markets must be a mapping")
    overrides = markets.get(market_token) or {}
    if not isinstance(overrides, Mapping):
        raise TypeError(f"markets[{market_token!r}] must be a mapping")
    return RiskConfig.from_mapping({**dict(defaults), **dict(overrides)})
