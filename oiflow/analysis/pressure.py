"""Directional market pressure from proximity and volume weighted OI build-up."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from oiflow.config import PRESSURE_LABEL_THRESHOLD
from oiflow.state.snapshot import OptionStrike
from .support_resistance import proximity_weight


@dataclass(frozen=True)
class MarketPressureResult:
    weighted_put: float
    weighted_call: float
    pressure: float
    label: str


def pressure_label(pressure: float) -> str:
    if pressure > PRESSURE_LABEL_THRESHOLD:
        return "Bullish"
    if pressure < -PRESSURE_LABEL_THRESHOLD:
        return "Bearish"
    return "Neutral"


def compute_market_pressure(strikes: Sequence[OptionStrike], spot_price: float) -> MarketPressureResult:
    """
    Net put-minus-call OI build-up, normalised to [-1, 1].

    Positive pressure means put writing dominates near spot, read as bullish.
    """
    weighted_put = 0.0
    weighted_call = 0.0

    for s in strikes:
        w = proximity_weight(s.strike_price, spot_price)
        volume_weight = float(np.log1p(s.call_volume + s.put_volume))

        if s.put_oi_change > 0:
            weighted_put += s.put_oi_change * w * volume_weight
        if s.call_oi_change > 0:
            weighted_call += s.call_oi_change * w * volume_weight

    max_mag = max(abs(weighted_put), abs(weighted_call), 1.0)
    pressure = max(-1.0, min(1.0, (weighted_put - weighted_call) / max_mag))

    return MarketPressureResult(
        weighted_put=weighted_put,
        weighted_call=weighted_call,
        pressure=pressure,
        label=pressure_label(pressure),
    )
