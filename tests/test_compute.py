import threading
from datetime import datetime, timedelta

import pytest

from oiflow.analysis.buyer_seller import DominantActivity
from oiflow.analysis.volatility import VolatilityRegime
from oiflow.compute import compute_all, elapsed_seconds
from oiflow.state.snapshot import MarketSnapshot, OptionStrike
from oiflow.state.snapshot_store import SnapshotStateStore

BASE = datetime(2026, 2, 27, 14, 30, 0)


def ts(seconds):
    return (BASE + timedelta(seconds=seconds)).strftime("%Y-%m-%d %H:%M:%S")


def make_snapshot(timestamp, spot, strikes=None):
    if strikes is None:
        strikes = [OptionStrike(strike_price=float(p)) for p in range(23900, 24501, 50)]
    return MarketSnapshot(
        timestamp=timestamp,
        spot_price=spot,
        option_chain=tuple(strikes),
        expiry_date="27-FEB-2026",
        instrument="NIFTY",
    )


def scenario_strikes():
    return [
        OptionStrike(strike_price=24350.0, put_oi_change=500, put_volume=1200),
        OptionStrike(strike_price=24400.0, call_oi_change=300, call_volume=900),
    ]


def test_end_to_end_first_cycle():
    store = SnapshotStateStore()
    result = compute_all(store, make_snapshot(ts(0), 24380.0, scenario_strikes()), "NIFTY", 5)

    assert result is not None
    assert result.is_fresh is True
    assert result.refresh_count == 1
    assert result.instrument == "NIFTY"
    assert result.expiry_date == "27-FEB-2026"
    assert result.timestamp == ts(0)

    assert result.support == pytest.approx(24350.0)
    assert result.resistance == pytest.approx(24400.0)
    assert result.support_strength == pytest.approx(1.0)
    assert result.resistance_strength == pytest.approx(1.0)
    # No previous snapshot: zeroed volatility, NORMAL regime, confidence untouched
    assert result.regime == VolatilityRegime.NORMAL
    assert result.volatility_per_sec == 0.0
    assert result.support_confidence == pytest.approx(1.0)

    assert result.price_change == 0.0
    assert result.buyer_seller_signals.dominant == DominantActivity.NONE
    assert result.strike_specific_data is None
    assert len(result.option_chain) == 2


def test_returns_none_when_no_strikes_in_window():
    store = SnapshotStateStore()
    far = [OptionStrike(strike_price=20000.0, put_oi_change=10)]
    assert compute_all(store, make_snapshot(ts(0), 24380.0, far), "NIFTY", 5) is None
    # The snapshot was still accepted
    assert store.get_state("NIFTY").refresh_count == 1


def test_second_cycle_uses_elapsed_time_and_price_change():
    store = SnapshotStateStore()
    compute_all(store, make_snapshot(ts(0), 24200.0), "NIFTY", 10)
    result = compute_all(store, make_snapshot(ts(10), 24230.0), "NIFTY", 10)

    assert result.refresh_count == 2
    assert result.price_change == pytest.approx(30.0)
    assert result.volatility_per_sec == pytest.approx(3.0)
    assert result.volatility_ma == pytest.approx(3.0)
    assert result.volatility_history == [pytest.approx(3.0)]


def test_buyer_seller_uses_price_direction():
    store = SnapshotStateStore()
    strikes = [OptionStrike(strike_price=24200.0, call_oi_change=80, put_oi_change=20)]
    compute_all(store, make_snapshot(ts(0), 24200.0, strikes), "NIFTY", 10)
    result = compute_all(store, make_snapshot(ts(5), 24190.0, strikes), "NIFTY", 10)

    signals = result.buyer_seller_signals
    assert signals.call_seller == 80
    assert signals.put_buyer == 20
    assert signals.dominant == DominantActivity.CALL_SELLER
    assert signals.dominance_percent == pytest.approx(80.0)


def test_duplicate_timestamp_returns_stale_repeat():
    store = SnapshotStateStore()
    compute_all(store, make_snapshot(ts(0), 24200.0), "NIFTY", 10)
    fresh = compute_all(store, make_snapshot(ts(5), 24210.0), "NIFTY", 10)
    repeat = compute_all(store, make_snapshot(ts(5), 24999.0), "NIFTY", 10)

    assert repeat is not None
    assert repeat.is_fresh is False
    assert repeat.refresh_count == fresh.refresh_count == 2
    assert repeat.spot == 24210.0
    assert repeat.price_change == fresh.price_change
    assert repeat.volatility_per_sec == fresh.volatility_per_sec
    assert store.get_state("NIFTY").volatility_engine.size() == 1


def test_rolling_buffer_after_many_cycles():
    store = SnapshotStateStore()
    spot = 24000.0
    for k in range(12):
        spot += k  # step k gives velocity k over one second
        compute_all(store, make_snapshot(ts(k), spot), "NIFTY", 10)

    history = store.get_state("NIFTY").volatility_engine.history()
    assert history == pytest.approx([float(k) for k in range(2, 12)])


def test_high_momentum_discounts_confidence():
    store = SnapshotStateStore()
    strikes = scenario_strikes()
    spots = [24380.0, 24381.0, 24382.0, 24383.0, 24393.0]
    result = None
    for i, spot in enumerate(spots):
        result = compute_all(store, make_snapshot(ts(i), spot, strikes), "NIFTY", 5)

    assert result.regime == VolatilityRegime.HIGH_MOMENTUM
    assert result.support_confidence == pytest.approx(result.support_strength * 0.7)
    # Levels themselves are never moved by the regime
    assert result.support == pytest.approx(24350.0)


def test_selected_strike_analysis():
    store = SnapshotStateStore()
    result = compute_all(store, make_snapshot(ts(0), 24380.0, scenario_strikes()), "NIFTY", 5, 24400.0)

    data = result.strike_specific_data
    assert data is not None
    assert data.strike == 24400.0
    assert data.confidence == pytest.approx(300.0 / 500.0)


def test_selected_strike_outside_window_is_degenerate():
    store = SnapshotStateStore()
    result = compute_all(store, make_snapshot(ts(0), 24380.0, scenario_strikes()), "NIFTY", 5, 25000.0)

    assert result.strike_specific_data.confidence == 0.0
    assert result.strike_specific_data.local_support == 25000.0


def test_reset_between_cycles_starts_cold():
    store = SnapshotStateStore()
    compute_all(store, make_snapshot(ts(0), 24200.0), "NIFTY", 10)
    compute_all(store, make_snapshot(ts(5), 24210.0), "NIFTY", 10)
    store.reset_instrument("NIFTY")

    result = compute_all(store, make_snapshot(ts(10), 24220.0), "NIFTY", 10)
    assert result.refresh_count == 1
    assert result.price_change == 0.0
    assert result.volatility_history == []


def test_unknown_instrument_raises_before_touching_state():
    store = SnapshotStateStore()
    with pytest.raises(KeyError):
        compute_all(store, make_snapshot(ts(0), 24200.0), "FINNIFTY", 10)
    assert store.instruments() == []


def test_to_dict_is_json_friendly():
    store = SnapshotStateStore()
    data = compute_all(store, make_snapshot(ts(0), 24380.0, scenario_strikes()), "NIFTY", 5, 24350.0).to_dict()

    assert data["regime"] == "NORMAL"
    assert data["buyer_seller_signals"]["dominant"] == "NONE"
    assert data["strike_specific_data"]["strike"] == 24350.0
    assert data["option_chain"][0]["strike_price"] == 24350.0
    assert data["is_fresh"] is True


@pytest.mark.parametrize(
    "prev_ts,curr_ts,expected",
    [
        ("2026-02-27 14:30:00", "2026-02-27 14:30:07", 7.0),
        ("2026-02-27 14:30:00", "2026-02-27 15:30:00", 3600.0),
        ("2026-02-27 14:30:00", "2026-02-27 15:30:01", 5.0),
        ("2026-02-27 14:30:07", "2026-02-27 14:30:00", 5.0),
        ("not-a-time", "2026-02-27 14:30:00", 5.0),
        ("2026-02-27T14:30:00+05:30", "2026-02-27T14:30:02.500+05:30", 2.5),
    ],
)
def test_elapsed_seconds(prev_ts, curr_ts, expected):
    prev = make_snapshot(prev_ts, 24200.0)
    curr = make_snapshot(curr_ts, 24200.0)
    assert elapsed_seconds(prev, curr) == pytest.approx(expected)


def test_elapsed_seconds_without_previous():
    assert elapsed_seconds(None, make_snapshot(ts(0), 24200.0)) == 5.0


def test_concurrent_cycles_on_one_instrument_serialize():
    store = SnapshotStateStore()
    threads, cycles = 8, 50

    def worker(offset):
        for i in range(cycles):
            seconds = offset * cycles + i
            compute_all(store, make_snapshot(ts(seconds), 24200.0 + (seconds % 7)), "NIFTY", 10)

    pool = [threading.Thread(target=worker, args=(n,)) for n in range(threads)]
    for t in pool:
        t.start()
    for t in pool:
        t.join()

    total = threads * cycles
    state = store.get_state("NIFTY")
    assert state.refresh_count == total
    assert state.volatility_engine.size() == min(total - 1, 10)
    assert state.previous is not None
    assert state.previous.timestamp != state.current.timestamp
