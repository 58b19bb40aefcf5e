"""Immutable option-chain snapshot types supplied by the broker collaborator."""
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Tuple


def _num(raw: Mapping[str, Any], key: str, alt: str, default: float = 0.0) -> float:
    value = raw.get(key, raw.get(alt, default))
    number = float(value if value is not None else default)
    if not math.isfinite(number):
        raise ValueError(f"Non-finite value for {key}: {value!r}")
    return number


@dataclass(frozen=True)
class OptionStrike:
    """One strike's call/put quote within a snapshot."""

    strike_price: float
    call_oi: float = 0.0
    put_oi: float = 0.0
    call_oi_change: float = 0.0
    put_oi_change: float = 0.0
    call_volume: float = 0.0
    put_volume: float = 0.0
    call_ltp: float = 0.0
    put_ltp: float = 0.0
    call_iv: float = 0.0
    put_iv: float = 0.0

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "OptionStrike":
        """Build from snake_case or broker camelCase keys."""
        if not isinstance(raw, Mapping):
            raise ValueError(f"Strike payload must be a mapping, got {type(raw).__name__}")
        if raw.get("strike_price", raw.get("strikePrice")) is None:
            raise ValueError(f"Strike payload missing strike price: {raw}")
        return cls(
            strike_price=_num(raw, "strike_price", "strikePrice"),
            call_oi=_num(raw, "call_oi", "callOI"),
            put_oi=_num(raw, "put_oi", "putOI"),
            call_oi_change=_num(raw, "call_oi_change", "callOIChange"),
            put_oi_change=_num(raw, "put_oi_change", "putOIChange"),
            call_volume=_num(raw, "call_volume", "callVolume"),
            put_volume=_num(raw, "put_volume", "putVolume"),
            call_ltp=_num(raw, "call_ltp", "callLTP"),
            put_ltp=_num(raw, "put_ltp", "putLTP"),
            call_iv=_num(raw, "call_iv", "callIV"),
            put_iv=_num(raw, "put_iv", "putIV"),
        )

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class MarketSnapshot:
    """
    One atomic broker read.

    The option chain is kept as a tuple ordered by strike price. Snapshots are
    validated upstream; ``from_dict`` enforces the same contract for payloads
    arriving over the API adapter.
    """

    timestamp: str
    spot_price: float
    option_chain: Tuple[OptionStrike, ...]
    expiry_date: str
    instrument: str

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.option_chain, key=lambda s: s.strike_price))
        object.__setattr__(self, "option_chain", ordered)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], instrument: str = "") -> "MarketSnapshot":
        timestamp = raw.get("timestamp")
        if not timestamp:
            raise ValueError("Snapshot missing timestamp")

        spot = _num(raw, "spot_price", "spotPrice")
        if spot <= 0:
            raise ValueError(f"Snapshot spot price must be positive, got {spot}")

        chain_raw = raw.get("option_chain", raw.get("optionChain")) or []
        if not isinstance(chain_raw, (list, tuple)):
            raise ValueError("Snapshot option chain must be a list")
        if not chain_raw:
            raise ValueError("Snapshot option chain is empty")

        return cls(
            timestamp=str(timestamp),
            spot_price=spot,
            option_chain=tuple(OptionStrike.from_dict(s) for s in chain_raw),
            expiry_date=str(raw.get("expiry_date", raw.get("expiryDate", "")) or ""),
            instrument=str(raw.get("instrument", raw.get("index", instrument)) or instrument).upper(),
        )
