"""Micro support/resistance around a single selected strike."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Sequence

from oiflow.state.snapshot import OptionStrike

NEIGHBOR_SPAN = 3
DEFAULT_TICK_SIZE = 50.0
TICK_SCALE = 0.01


@dataclass(frozen=True)
class StrikeAnalysis:
    strike: float
    local_support: float
    local_resistance: float
    confidence: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def _oi_activity(s: OptionStrike) -> float:
    return abs(s.call_oi_change) + abs(s.put_oi_change)


def compute_strike_analysis(selected_strike: float, strikes: Sequence[OptionStrike]) -> StrikeAnalysis:
    """
    Local OI gradient over up to three neighbours either side.

    A strike that is not in the set yields a degenerate result pinned to the
    strike itself with zero confidence.
    """
    ordered = sorted(strikes, key=lambda s: s.strike_price)
    idx = next((i for i, s in enumerate(ordered) if s.strike_price == selected_strike), None)

    if idx is None:
        return StrikeAnalysis(
            strike=selected_strike,
            local_support=selected_strike,
            local_resistance=selected_strike,
            confidence=0.0,
        )

    put_bias = call_bias = total_weight = 0.0
    start = max(0, idx - NEIGHBOR_SPAN)
    end = min(len(ordered) - 1, idx + NEIGHBOR_SPAN)

    for s in ordered[start:end + 1]:
        weight = 1.0 / (1.0 + abs(s.strike_price - selected_strike))
        put_bias += s.put_oi_change * weight
        call_bias += s.call_oi_change * weight
        total_weight += weight

    if total_weight > 0:
        put_bias /= total_weight
        call_bias /= total_weight

    # Strike spacing stands in for the tick size
    if len(ordered) > 1:
        tick_size = abs(ordered[1].strike_price - ordered[0].strike_price)
    else:
        tick_size = DEFAULT_TICK_SIZE

    max_activity = max(_oi_activity(s) for s in ordered)
    confidence = min(1.0, _oi_activity(ordered[idx]) / max_activity) if max_activity > 0 else 0.0

    return StrikeAnalysis(
        strike=selected_strike,
        local_support=selected_strike - abs(put_bias) * tick_size * TICK_SCALE,
        local_resistance=selected_strike + abs(call_bias) * tick_size * TICK_SCALE,
        confidence=confidence,
    )
