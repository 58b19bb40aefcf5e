"""In-memory store of per-instrument snapshot state."""
from threading import Lock
from typing import Dict, List
import logging

from .instrument_state import InstrumentState
from .snapshot import MarketSnapshot

logger = logging.getLogger(__name__)


class SnapshotStateStore:
    """Holds exactly one InstrumentState per instrument, created lazily."""

    def __init__(self):
        self._states: Dict[str, InstrumentState] = {}
        self._lock = Lock()

    def get_state(self, instrument: str) -> InstrumentState:
        key = instrument.upper()
        with self._lock:
            state = self._states.get(key)
            if state is None:
                state = InstrumentState(instrument=key)
                self._states[key] = state
                logger.debug("Created state for %s", key)
            return state

    def accept_snapshot(self, instrument: str, snapshot: MarketSnapshot) -> bool:
        """Accept a snapshot unless its timestamp matches the current one."""
        state = self.get_state(instrument)
        with state.lock:
            return self.accept_locked(state, snapshot)

    def accept_locked(self, state: InstrumentState, snapshot: MarketSnapshot) -> bool:
        """Shift current to previous; caller must hold ``state.lock``."""
        if state.current is not None and state.current.timestamp == snapshot.timestamp:
            logger.info("Timestamp unchanged for %s (%s); skipping", state.instrument, snapshot.timestamp)
            return False

        state.shift(snapshot)
        logger.info(
            "Snapshot %s #%d: spot=%.2f ts=%s strikes=%d",
            state.instrument,
            state.refresh_count,
            snapshot.spot_price,
            snapshot.timestamp,
            len(snapshot.option_chain),
        )
        return True

    def reset_instrument(self, instrument: str) -> None:
        """Clear snapshots, volatility buffer and counter for one instrument."""
        state = self.get_state(instrument)
        with state.lock:
            state.clear()
        logger.info("Reset state for %s", state.instrument)

    def reset_all(self) -> None:
        """Discard every instrument's state."""
        with self._lock:
            self._states.clear()
        logger.info("Reset all instrument state")

    def instruments(self) -> List[str]:
        with self._lock:
            return sorted(self._states)
