"""Per-second price velocity tracking and volatility regime classification."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import List
import logging

import numpy as np

from oiflow.config import VOLATILITY_BUFFER_SIZE

logger = logging.getLogger(__name__)

# Thresholds (tunable constants, deterministic)
HIGH_MOMENTUM_RATIO = 1.5
COMPRESSION_RATIO = 0.8
COMPRESSION_MIN_SAMPLES = 3
HIGH_MOMENTUM_FACTOR = 0.7
COMPRESSION_FACTOR = 1.2


class VolatilityRegime(str, Enum):
    HIGH_MOMENTUM = "HIGH_MOMENTUM"
    COMPRESSION = "COMPRESSION"
    NORMAL = "NORMAL"


@dataclass(frozen=True)
class VolatilityResult:
    volatility_per_sec: float
    volatility_ma: float
    volatility_ratio: float
    regime: VolatilityRegime
    history: List[float] = field(default_factory=list)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def classify_regime(ratio: float, sample_count: int) -> VolatilityRegime:
    """
    Map a velocity/moving-average ratio to a regime.

    Both thresholds are strict. Compression additionally needs a warm buffer
    of at least ``COMPRESSION_MIN_SAMPLES`` samples.
    """
    if ratio > HIGH_MOMENTUM_RATIO:
        return VolatilityRegime.HIGH_MOMENTUM
    if ratio < COMPRESSION_RATIO and sample_count >= COMPRESSION_MIN_SAMPLES:
        return VolatilityRegime.COMPRESSION
    return VolatilityRegime.NORMAL


def adjust_confidence(confidence: float, regime: VolatilityRegime) -> float:
    """Scale a confidence by regime and clamp to [0, 1]. Levels are never moved."""
    adjusted = float(confidence)
    if regime == VolatilityRegime.HIGH_MOMENTUM:
        adjusted *= HIGH_MOMENTUM_FACTOR
    elif regime == VolatilityRegime.COMPRESSION:
        adjusted *= COMPRESSION_FACTOR
    return _clamp01(adjusted)


class VolatilityEngine:
    """Rolling FIFO of per-second velocity samples for a single instrument."""

    def __init__(self, maxlen: int = VOLATILITY_BUFFER_SIZE):
        self._buffer: deque[float] = deque(maxlen=maxlen)
        self._maxlen = maxlen

    def compute(
        self,
        current_spot: float,
        previous_spot: float,
        seconds_elapsed: float,
        record: bool = True,
    ) -> VolatilityResult:
        """
        Compute velocity against the previous spot and classify the regime.

        With ``record=False`` the sample is evaluated against the buffer
        without being pushed, which is how repeated snapshots are scored.
        """
        if seconds_elapsed <= 0 or previous_spot <= 0:
            return VolatilityResult(
                volatility_per_sec=0.0,
                volatility_ma=0.0,
                volatility_ratio=0.0,
                regime=VolatilityRegime.NORMAL,
                history=self.history(),
            )

        velocity = abs(current_spot - previous_spot) / seconds_elapsed
        if record:
            self._buffer.append(velocity)

        moving_average = float(np.mean(self._buffer)) if self._buffer else 0.0
        ratio = velocity / moving_average if moving_average > 0 else 0.0
        regime = classify_regime(ratio, len(self._buffer))

        logger.debug(
            "Volatility velocity=%.4f ma=%.4f ratio=%.3f regime=%s samples=%d",
            velocity,
            moving_average,
            ratio,
            regime.value,
            len(self._buffer),
        )

        return VolatilityResult(
            volatility_per_sec=velocity,
            volatility_ma=moving_average,
            volatility_ratio=ratio,
            regime=regime,
            history=self.history(),
        )

    def reset(self) -> None:
        """Remove all buffered samples."""
        self._buffer.clear()

    def history(self) -> List[float]:
        """Copy of buffered samples, oldest first."""
        return list(self._buffer)

    def size(self) -> int:
        return len(self._buffer)

    @property
    def maxlen(self) -> int:
        return self._maxlen
