"""
Support and resistance from proximity-weighted open-interest centroids.

    proximity_weight = 1 / (1 + |strike - spot|)
    support          = sum(strike * put_oi_change * w) / sum(put_oi_change * w)
    resistance       = sum(strike * call_oi_change * w) / sum(call_oi_change * w)
    strength         = weighted denominator / weighted positive OI change of that side

Only strikes strictly below (support) or above (resistance) spot with a
positive OI build-up qualify. Levels keep full precision and are never
snapped to the strike grid.

The strength total is proximity weighted like the numerator, so strength is
the weighted share of a side's build-up sitting on the qualifying side of
spot. A plain unweighted total would cap strength at the largest proximity
weight and a single qualifying strike could never reach 1.0.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from oiflow.state.snapshot import OptionStrike


@dataclass(frozen=True)
class SupportResistanceResult:
    support: float
    resistance: float
    support_strength: float
    resistance_strength: float
    support_confidence: float
    resistance_confidence: float

    def with_confidence(self, support_confidence: float, resistance_confidence: float) -> "SupportResistanceResult":
        return replace(
            self,
            support_confidence=support_confidence,
            resistance_confidence=resistance_confidence,
        )


def proximity_weight(strike_price: float, spot_price: float) -> float:
    return 1.0 / (1.0 + abs(strike_price - spot_price))


def compute_support_resistance(strikes: Sequence[OptionStrike], spot_price: float) -> SupportResistanceResult:
    support_num = support_den = 0.0
    resistance_num = resistance_den = 0.0
    total_put = total_call = 0.0

    for s in strikes:
        w = proximity_weight(s.strike_price, spot_price)

        if s.strike_price < spot_price and s.put_oi_change > 0:
            support_num += s.strike_price * s.put_oi_change * w
            support_den += s.put_oi_change * w

        if s.strike_price > spot_price and s.call_oi_change > 0:
            resistance_num += s.strike_price * s.call_oi_change * w
            resistance_den += s.call_oi_change * w

        if s.put_oi_change > 0:
            total_put += s.put_oi_change * w
        if s.call_oi_change > 0:
            total_call += s.call_oi_change * w

    support = support_num / support_den if support_den > 0 else spot_price
    resistance = resistance_num / resistance_den if resistance_den > 0 else spot_price

    support_strength = min(1.0, support_den / total_put) if total_put > 0 else 0.0
    resistance_strength = min(1.0, resistance_den / total_call) if total_call > 0 else 0.0

    return SupportResistanceResult(
        support=support,
        resistance=resistance,
        support_strength=support_strength,
        resistance_strength=resistance_strength,
        # Pre-volatility confidence; the orchestrator replaces it
        support_confidence=support_strength,
        resistance_confidence=resistance_strength,
    )
