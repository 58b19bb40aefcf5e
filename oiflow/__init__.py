"""
OIFLOW: Open-Interest Flow analytics

A deterministic per-cycle pipeline that turns an options-chain snapshot into
support/resistance levels, a volatility regime, market pressure, buyer/seller
dominance and strike-level micro structure. State is held in memory per
instrument and only the two most recent snapshots are ever compared.
"""

__version__ = '0.1.0'

# Make key imports available at package level
from oiflow.config import (
    INSTRUMENTS,
    INSTRUMENT_CONFIG,
    STRIKE_RANGES,
    REFRESH_INTERVALS,
)

__all__ = [
    '__version__',
    'INSTRUMENTS',
    'INSTRUMENT_CONFIG',
    'STRIKE_RANGES',
    'REFRESH_INTERVALS',
]
