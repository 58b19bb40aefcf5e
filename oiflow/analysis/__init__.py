"""Stateless option-chain analysis engines plus the stateful volatility tracker."""

from .volatility import (
    VolatilityEngine,
    VolatilityRegime,
    VolatilityResult,
    adjust_confidence,
    classify_regime,
)
from .strike_filter import atm_strike, filter_strikes
from .support_resistance import SupportResistanceResult, compute_support_resistance
from .pressure import MarketPressureResult, compute_market_pressure
from .buyer_seller import BuyerSellerSignal, DominantActivity, compute_buyer_seller_activity
from .strike_analysis import StrikeAnalysis, compute_strike_analysis

__all__ = [
    "VolatilityEngine",
    "VolatilityRegime",
    "VolatilityResult",
    "adjust_confidence",
    "classify_regime",
    "atm_strike",
    "filter_strikes",
    "SupportResistanceResult",
    "compute_support_resistance",
    "MarketPressureResult",
    "compute_market_pressure",
    "BuyerSellerSignal",
    "DominantActivity",
    "compute_buyer_seller_activity",
    "StrikeAnalysis",
    "compute_strike_analysis",
]
