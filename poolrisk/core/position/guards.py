"""Position shape guards.

A position is either empty (both size fields zero) or has both size fields
positive. Every pricing entry point runs one of these before touching prices.
"""

from __future__ import annotations

from ..errors import EmptyPositionError, InvalidPositionSizeValuesError
from .types import Position


def validate_position_size_values(position: Position) -> None:
    """Reject a position with exactly one zero size field. An empty position passes."""
    if (position.size_in_usd == 0) != (position.size_in_tokens == 0):
        raise InvalidPositionSizeValuesError(position.size_in_usd, position.size_in_tokens)


def validate_non_empty_position(position: Position) -> None:
    if position.is_empty:
        raise EmptyPositionError()
    if position.size_in_usd == 0 or position.size_in_tokens == 0:
        raise InvalidPositionSizeValuesError(position.size_in_usd, position.size_in_tokens)
