import pytest

from oiflow.analysis.strike_filter import atm_strike, filter_strikes
from oiflow.analysis.support_resistance import compute_support_resistance, proximity_weight
from oiflow.state.snapshot import OptionStrike


def strike(price, **kwargs):
    return OptionStrike(strike_price=float(price), **kwargs)


def test_single_qualifying_strikes_give_exact_levels():
    strikes = [
        strike(24350, put_oi_change=500),
        strike(24400, call_oi_change=300),
    ]
    sr = compute_support_resistance(strikes, 24380.0)

    assert sr.support == pytest.approx(24350.0)
    assert sr.resistance == pytest.approx(24400.0)
    assert sr.support_strength == pytest.approx(1.0)
    assert sr.resistance_strength == pytest.approx(1.0)
    assert sr.support_confidence == sr.support_strength
    assert sr.resistance_confidence == sr.resistance_strength


def test_support_falls_back_to_spot():
    strikes = [
        strike(24350, put_oi_change=-200),
        strike(24300, put_oi_change=0),
        strike(24400, call_oi_change=300),
    ]
    sr = compute_support_resistance(strikes, 24380.0)

    assert sr.support == 24380.0
    assert sr.support_strength == 0.0
    assert sr.resistance == pytest.approx(24400.0)


def test_no_build_up_at_all():
    sr = compute_support_resistance([strike(100), strike(110)], 105.0)
    assert sr.support == 105.0
    assert sr.resistance == 105.0
    assert sr.support_strength == 0.0
    assert sr.resistance_strength == 0.0


def test_centroid_is_proximity_weighted_and_not_snapped():
    spot = 102.0
    strikes = [
        strike(100, put_oi_change=100),  # distance 2
        strike(90, put_oi_change=100),   # distance 12
    ]
    sr = compute_support_resistance(strikes, spot)

    w_near = 1.0 / 3.0
    w_far = 1.0 / 13.0
    expected = (100 * 100 * w_near + 90 * 100 * w_far) / (100 * w_near + 100 * w_far)
    assert sr.support == pytest.approx(expected)
    assert 90.0 < sr.support < 100.0
    assert sr.support != round(sr.support)


def test_put_build_up_above_spot_dilutes_support_strength():
    spot = 100.0
    strikes = [
        strike(99, put_oi_change=100),   # below spot, weight 1/2
        strike(101, put_oi_change=100),  # above spot, weight 1/2
    ]
    sr = compute_support_resistance(strikes, spot)
    assert sr.support == pytest.approx(99.0)
    assert sr.support_strength == pytest.approx(0.5)


def test_strike_at_spot_never_qualifies():
    sr = compute_support_resistance([strike(100, put_oi_change=50, call_oi_change=50)], 100.0)
    assert sr.support == 100.0
    assert sr.resistance == 100.0
    assert sr.support_strength == 0.0


def test_proximity_weight():
    assert proximity_weight(100.0, 100.0) == 1.0
    assert proximity_weight(24350.0, 24380.0) == pytest.approx(1.0 / 31.0)


def test_atm_strike_rounds_to_tick():
    assert atm_strike(24380.0, 50) == 24400.0
    assert atm_strike(24324.0, 50) == 24300.0
    assert atm_strike(24325.0, 50) == 24350.0
    assert atm_strike(51249.0, 100) == 51200.0


def test_filter_is_inclusive_window_around_atm():
    chain = [strike(p) for p in range(24000, 24801, 50)]
    filtered = filter_strikes(chain, 24380.0, 5, 50)

    prices = [s.strike_price for s in filtered]
    assert prices[0] == 24150.0
    assert prices[-1] == 24650.0
    assert len(prices) == 11


def test_filter_returns_empty_when_chain_is_far_away():
    chain = [strike(p) for p in (20000, 20050, 20100)]
    assert filter_strikes(chain, 24380.0, 10, 50) == []
