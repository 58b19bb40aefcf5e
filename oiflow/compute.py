"""
Per-cycle orchestrator.

``compute_all`` is the single entry point: it hands the new snapshot to the
state store, filters the chain around ATM and runs every engine against the
filtered strikes, returning one fully assembled ``AnalysisResponse`` or
``None`` when nothing can be analysed this cycle.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

import pandas as pd

from oiflow.analysis.buyer_seller import BuyerSellerSignal, compute_buyer_seller_activity
from oiflow.analysis.pressure import compute_market_pressure
from oiflow.analysis.strike_analysis import StrikeAnalysis, compute_strike_analysis
from oiflow.analysis.strike_filter import filter_strikes
from oiflow.analysis.support_resistance import compute_support_resistance
from oiflow.analysis.volatility import VolatilityRegime, adjust_confidence
from oiflow.config import DEFAULT_ELAPSED_SECONDS, MAX_ELAPSED_SECONDS, get_tick_size
from oiflow.state.snapshot import MarketSnapshot, OptionStrike
from oiflow.state.snapshot_store import SnapshotStateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResponse:
    timestamp: str
    spot: float
    instrument: str
    expiry_date: str

    support: float
    resistance: float
    support_confidence: float
    resistance_confidence: float
    support_strength: float
    resistance_strength: float

    volatility_per_sec: float
    volatility_ma: float
    volatility_ratio: float
    regime: VolatilityRegime

    market_pressure: float
    pressure_label: str

    buyer_seller_signals: BuyerSellerSignal
    strike_specific_data: Optional[StrikeAnalysis]
    option_chain: List[OptionStrike]

    refresh_count: int
    price_change: float
    # False when the snapshot repeated the previous timestamp
    is_fresh: bool = True
    volatility_history: List[float] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-friendly dict."""
        return {
            "timestamp": self.timestamp,
            "spot": self.spot,
            "instrument": self.instrument,
            "expiry_date": self.expiry_date,
            "support": self.support,
            "resistance": self.resistance,
            "support_confidence": self.support_confidence,
            "resistance_confidence": self.resistance_confidence,
            "support_strength": self.support_strength,
            "resistance_strength": self.resistance_strength,
            "volatility_per_sec": self.volatility_per_sec,
            "volatility_ma": self.volatility_ma,
            "volatility_ratio": self.volatility_ratio,
            "volatility_history": list(self.volatility_history),
            "regime": self.regime.value,
            "market_pressure": self.market_pressure,
            "pressure_label": self.pressure_label,
            "buyer_seller_signals": self.buyer_seller_signals.to_dict(),
            "strike_specific_data": (
                self.strike_specific_data.to_dict() if self.strike_specific_data is not None else None
            ),
            "option_chain": [s.to_dict() for s in self.option_chain],
            "refresh_count": self.refresh_count,
            "price_change": self.price_change,
            "is_fresh": self.is_fresh,
        }


def elapsed_seconds(previous: Optional[MarketSnapshot], current: MarketSnapshot) -> float:
    """Wall-clock gap between snapshots, or the default when unusable."""
    if previous is None:
        return DEFAULT_ELAPSED_SECONDS

    try:
        diff = (pd.to_datetime(current.timestamp) - pd.to_datetime(previous.timestamp)).total_seconds()
    except (ValueError, TypeError, OverflowError) as exc:
        logger.warning(
            "Unparsable snapshot timestamps prev=%s curr=%s (%s); using %.1fs",
            previous.timestamp,
            current.timestamp,
            exc,
            DEFAULT_ELAPSED_SECONDS,
        )
        return DEFAULT_ELAPSED_SECONDS

    if not (0 < diff <= MAX_ELAPSED_SECONDS):
        logger.warning(
            "Snapshot gap %.1fs outside (0, %.0f]; using %.1fs",
            diff,
            MAX_ELAPSED_SECONDS,
            DEFAULT_ELAPSED_SECONDS,
        )
        return DEFAULT_ELAPSED_SECONDS
    return float(diff)


def compute_all(
    store: SnapshotStateStore,
    new_snapshot: MarketSnapshot,
    instrument: str,
    strike_range: int,
    selected_strike: Optional[float] = None,
) -> Optional[AnalysisResponse]:
    """
    Run one polling cycle for ``instrument``.

    Returns None if no snapshot is held yet or no strike falls inside the
    ATM window. A duplicate timestamp is not an error: the held snapshot is
    re-analysed and the response is marked ``is_fresh=False``.
    """
    tick_size = get_tick_size(instrument)
    state = store.get_state(instrument)

    with state.lock:
        accepted = store.accept_locked(state, new_snapshot)

        current = state.current
        if current is None:
            return None
        previous = state.previous
        spot = current.spot_price

        filtered = filter_strikes(current.option_chain, spot, strike_range, tick_size)
        if not filtered:
            logger.warning("No strikes in ATM±%d range for %s (spot=%.2f)", strike_range, state.instrument, spot)
            return None

        sr = compute_support_resistance(filtered, spot)

        previous_spot = previous.spot_price if previous is not None else 0.0
        volatility = state.volatility_engine.compute(
            spot,
            previous_spot,
            elapsed_seconds(previous, current),
            record=accepted,
        )

        sr = sr.with_confidence(
            adjust_confidence(sr.support_strength, volatility.regime),
            adjust_confidence(sr.resistance_strength, volatility.regime),
        )

        pressure = compute_market_pressure(filtered, spot)

        price_change = spot - previous_spot if previous_spot > 0 else 0.0
        buyer_seller = compute_buyer_seller_activity(filtered, price_change)

        strike_data = None
        if selected_strike is not None:
            strike_data = compute_strike_analysis(selected_strike, filtered)

        response = AnalysisResponse(
            timestamp=current.timestamp,
            spot=spot,
            instrument=state.instrument,
            expiry_date=current.expiry_date,
            support=sr.support,
            resistance=sr.resistance,
            support_confidence=sr.support_confidence,
            resistance_confidence=sr.resistance_confidence,
            support_strength=sr.support_strength,
            resistance_strength=sr.resistance_strength,
            volatility_per_sec=volatility.volatility_per_sec,
            volatility_ma=volatility.volatility_ma,
            volatility_ratio=volatility.volatility_ratio,
            regime=volatility.regime,
            market_pressure=pressure.pressure,
            pressure_label=pressure.label,
            buyer_seller_signals=buyer_seller,
            strike_specific_data=strike_data,
            option_chain=list(filtered),
            refresh_count=state.refresh_count,
            price_change=price_change,
            is_fresh=accepted,
            volatility_history=volatility.history,
        )

    logger.info(
        "%s spot=%.1f S=%.1f R=%.1f regime=%s pressure=%s fresh=%s",
        response.instrument,
        response.spot,
        response.support,
        response.resistance,
        response.regime.value,
        response.pressure_label,
        response.is_fresh,
    )
    return response
