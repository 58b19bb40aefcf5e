"""Mutable per-instrument state: the two latest snapshots and a volatility buffer."""
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Dict, Optional

from oiflow.analysis.volatility import VolatilityEngine
from .snapshot import MarketSnapshot


@dataclass
class InstrumentState:
    """
    State owned by one instrument.

    Callers must hold ``lock`` while reading or replacing snapshots; the
    volatility engine is never handed out beyond this object.
    """

    instrument: str
    current: Optional[MarketSnapshot] = None
    previous: Optional[MarketSnapshot] = None
    volatility_engine: VolatilityEngine = field(default_factory=VolatilityEngine)
    last_timestamp: str = ""
    refresh_count: int = 0
    lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def shift(self, snapshot: MarketSnapshot) -> None:
        self.previous = self.current
        self.current = snapshot
        self.last_timestamp = snapshot.timestamp
        self.refresh_count += 1

    def clear(self) -> None:
        self.current = None
        self.previous = None
        self.volatility_engine.reset()
        self.last_timestamp = ""
        self.refresh_count = 0

    def status(self) -> Dict[str, Any]:
        return {
            "instrument": self.instrument,
            "refresh_count": self.refresh_count,
            "last_timestamp": self.last_timestamp or None,
            "has_previous": self.previous is not None,
            "volatility_samples": self.volatility_engine.size(),
            "volatility_buffer_max": self.volatility_engine.maxlen,
        }
