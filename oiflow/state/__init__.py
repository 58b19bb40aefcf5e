"""
In-memory per-instrument snapshot state (current/previous pair + volatility buffer).
"""

from .snapshot import MarketSnapshot, OptionStrike
from .instrument_state import InstrumentState
from .snapshot_store import SnapshotStateStore

__all__ = [
    "MarketSnapshot",
    "OptionStrike",
    "InstrumentState",
    "SnapshotStateStore",
]
