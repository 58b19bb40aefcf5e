"""Buyer/seller classification of aggregate OI flow against price direction."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Sequence

from oiflow.config import DOMINANCE_THRESHOLD_PCT
from oiflow.state.snapshot import OptionStrike


class DominantActivity(str, Enum):
    CALL_BUYER = "CALL_BUYER"
    CALL_SELLER = "CALL_SELLER"
    PUT_BUYER = "PUT_BUYER"
    PUT_SELLER = "PUT_SELLER"
    NONE = "NONE"


@dataclass(frozen=True)
class BuyerSellerSignal:
    call_buyer: float
    call_seller: float
    put_buyer: float
    put_seller: float
    dominant: DominantActivity
    dominance_percent: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "call_buyer": self.call_buyer,
            "call_seller": self.call_seller,
            "put_buyer": self.put_buyer,
            "put_seller": self.put_seller,
            "dominant": self.dominant.value,
            "dominance_percent": self.dominance_percent,
        }


def resolve_dominance(
    call_buyer: float,
    call_seller: float,
    put_buyer: float,
    put_seller: float,
) -> BuyerSellerSignal:
    """
    Pick the dominant category.

    ``dominance_percent`` always reports the top share; ``dominant`` is only
    set when that share is strictly above the threshold.
    """
    total = call_buyer + call_seller + put_buyer + put_seller
    dominant = DominantActivity.NONE
    dominance_percent = 0.0

    if total > 0:
        # Ties resolve in declaration order
        ranked = sorted(
            [
                (DominantActivity.CALL_BUYER, call_buyer),
                (DominantActivity.CALL_SELLER, call_seller),
                (DominantActivity.PUT_BUYER, put_buyer),
                (DominantActivity.PUT_SELLER, put_seller),
            ],
            key=lambda item: item[1],
            reverse=True,
        )
        top, value = ranked[0]
        dominance_percent = value * 100.0 / total
        if dominance_percent > DOMINANCE_THRESHOLD_PCT:
            dominant = top

    return BuyerSellerSignal(
        call_buyer=call_buyer,
        call_seller=call_seller,
        put_buyer=put_buyer,
        put_seller=put_seller,
        dominant=dominant,
        dominance_percent=dominance_percent,
    )


def compute_buyer_seller_activity(strikes: Sequence[OptionStrike], price_change: float) -> BuyerSellerSignal:
    call_buyer = call_seller = put_buyer = put_seller = 0.0

    for s in strikes:
        if s.call_oi_change > 0:
            if price_change > 0:
                call_buyer += s.call_oi_change
            elif price_change < 0:
                call_seller += s.call_oi_change
        if s.put_oi_change > 0:
            if price_change > 0:
                put_seller += s.put_oi_change
            elif price_change < 0:
                put_buyer += s.put_oi_change

    return resolve_dominance(call_buyer, call_seller, put_buyer, put_seller)
