"""ATM-centred strike window filter."""
import math
from typing import List, Sequence

from oiflow.state.snapshot import OptionStrike


def atm_strike(spot_price: float, tick_size: float) -> float:
    """Nearest strike to spot on the tick grid (halves round up)."""
    return math.floor(spot_price / tick_size + 0.5) * tick_size


def filter_strikes(
    chain: Sequence[OptionStrike],
    spot_price: float,
    strike_range: int,
    tick_size: float,
) -> List[OptionStrike]:
    """Keep strikes within ``strike_range`` ticks either side of ATM (inclusive)."""
    atm = atm_strike(spot_price, tick_size)
    lower = atm - strike_range * tick_size
    upper = atm + strike_range * tick_size
    return [s for s in chain if lower <= s.strike_price <= upper]
