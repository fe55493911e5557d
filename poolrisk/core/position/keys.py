"""Position identity keys.

`position_key()` hashes `(account, market, collateral_token, is_long)`. Each
string field is length-prefixed, so no two distinct tuples share an encoding.
"""

from __future__ import annotations

import hashlib

POSITION_KEY_DOMAIN = b"poolrisk:position_key:v1\x00"


def _encode_field(name: str, value: object) -> bytes:
    if not isinstance(value, str) or not value:
        raise TypeError(f"{name} must be a non-empty str")
    raw = value.encode("utf-8")
    return len(raw).to_bytes(4, "big") + raw


def position_key(account: str, market: str, collateral_token: str, is_long: bool) -> str:
    """`0x`-prefixed sha256 hex of the position's identity tuple."""
    if not isinstance(is_long, bool):
        raise TypeError("is_long must be a bool")
    payload = (
        _encode_field("account", account)
        + _encode_field("market", market)
        + _encode_field("collateral_token", collateral_token)
        + (b"\x01" if is_long else b"\x00")
    )
    return "0x" + hashlib.sha256(POSITION_KEY_DOMAIN + payload).hexdigest()
