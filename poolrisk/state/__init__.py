"""
State helpers: in-memory collaborators
"""

from .market_state import InMemoryConfigStore, InMemoryMarketState, RecordingEventSink

__all__ = [
    "InMemoryConfigStore",
    "InMemoryMarketState",
    "RecordingEventSink",
]
