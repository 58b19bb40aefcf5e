"""FastAPI adapter around the per-cycle orchestrator."""
from typing import Any, Dict, Optional
import logging

try:
    from fastapi import APIRouter, Body, HTTPException, Query, Request
except ImportError as exc:  # pragma: no cover - optional dependency
    raise ImportError(
        "FastAPI is required for oiflow.state.analysis_api; install fastapi to use these endpoints"
    ) from exc

from oiflow.compute import compute_all
from oiflow.config import (
    DEFAULT_STRIKE_RANGE,
    INSTRUMENTS,
    INSTRUMENT_CONFIG,
    REFRESH_INTERVALS,
    STRIKE_RANGES,
    validate_strike_range,
)
from .snapshot import MarketSnapshot
from .snapshot_store import SnapshotStateStore

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store(request: Request) -> SnapshotStateStore:
    """Return the store bound to the running app."""
    return request.app.state.snapshot_store


def _check_instrument(instrument: str) -> str:
    key = instrument.upper()
    if key not in INSTRUMENTS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid instrument. Use {', '.join(INSTRUMENTS)}.",
        )
    return key


@router.get("/instruments")
def list_instruments():
    return {
        "instruments": {key: INSTRUMENT_CONFIG[key] for key in INSTRUMENTS},
        "strike_ranges": STRIKE_RANGES,
        "default_strike_range": DEFAULT_STRIKE_RANGE,
        "refresh_intervals": REFRESH_INTERVALS,
    }


@router.post("/analysis/reset")
def reset_all(request: Request):
    get_store(request).reset_all()
    return {"reset": True}


@router.post("/analysis/{instrument}")
def analyze_snapshot(
    instrument: str,
    request: Request,
    payload: Dict[str, Any] = Body(..., description="Option-chain snapshot"),
    strike_range: int = Query(DEFAULT_STRIKE_RANGE, alias="range"),
    selected_strike: Optional[float] = Query(None),
):
    key = _check_instrument(instrument)
    try:
        validate_strike_range(strike_range)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        snapshot = MarketSnapshot.from_dict(payload, instrument=key)
    except (ValueError, TypeError) as exc:
        logger.warning("Invalid snapshot payload for %s: %s", key, exc)
        raise HTTPException(
            status_code=502,
            detail={"error": "Invalid data received from broker", "code": "INVALID_DATA"},
        ) from exc

    result = compute_all(get_store(request), snapshot, key, strike_range, selected_strike)
    if result is None:
        raise HTTPException(
            status_code=422,
            detail={"error": "Computation failed: no strikes in range", "code": "NO_DATA"},
        )
    return result.to_dict()


@router.get("/analysis/{instrument}/status")
def get_instrument_status(instrument: str, request: Request):
    key = _check_instrument(instrument)
    store = get_store(request)
    if key not in store.instruments():
        raise HTTPException(status_code=404, detail="No state for instrument")
    state = store.get_state(key)
    with state.lock:
        return state.status()


@router.post("/analysis/{instrument}/reset")
def reset_instrument(instrument: str, request: Request):
    key = _check_instrument(instrument)
    get_store(request).reset_instrument(key)
    return {"instrument": key, "reset": True}


def attach_to_app(app, store: SnapshotStateStore) -> None:
    """Bind a store and include analysis routes on an existing FastAPI app."""
    app.state.snapshot_store = store
    app.include_router(router)
