"""Property test: accounting and exit invariants of the ladder simulator."""

import math
from datetime import datetime, timedelta

from hypothesis import given, settings, strategies as st

from ladder_backtest.backtester.ladder import simulate_ladder
from ladder_backtest.core.enums import ExitReason
from ladder_backtest.core.models import LadderVariant, PriceSample, SimulationParams

_T0 = datetime(2024, 1, 1)

prices = st.floats(min_value=1e-9, max_value=1e3, allow_nan=False, allow_infinity=False)
step_pcts = st.lists(st.integers(min_value=1, max_value=80), min_size=1, max_size=5)
param_sets = st.builds(
    SimulationParams,
    base_profit_target_bps=st.floats(min_value=10, max_value=5000),
    hard_stop_bps=st.floats(min_value=-9000, max_value=-10),
    profit_step_bps=st.floats(min_value=0, max_value=200),
    drawdown_trigger_pct=st.lists(
        st.floats(min_value=0, max_value=50), min_size=1, max_size=4
    ).map(tuple),
)


def _series(values: list[float]) -> list[PriceSample]:
    return [PriceSample(timestamp=_T0 + timedelta(seconds=i), price=p) for i, p in enumerate(values)]


@given(path=st.lists(prices, min_size=1, max_size=50), pcts=step_pcts, params=param_sets)
@settings(max_examples=300)
def test_result_invariants(path, pcts, params):
    variant = LadderVariant.from_percentages(pcts)
    r = simulate_ladder(_series(path), variant, params)

    assert 1 <= r.steps_used <= variant.step_count
    assert 0 <= r.exit_index < len(path)
    assert r.exit_price == path[r.exit_index]
    assert r.total_spent <= params.total_capital * sum(variant.fractions) * (1 + 1e-9)
    assert r.pnl_sol == r.total_tokens * r.exit_price - r.total_spent
    assert r.target_bps == params.target_bps(r.steps_used)

    if r.exit_reason == ExitReason.MARK_TO_MARKET:
        assert r.exit_index == len(path) - 1
    else:
        assert r.exit_index >= 1
    if r.exit_reason == ExitReason.TAKE_PROFIT:
        assert r.pnl_bps >= r.target_bps
    if r.exit_reason == ExitReason.HARD_STOP:
        assert r.pnl_bps <= params.hard_stop_bps
        assert r.pnl_bps < r.target_bps


@given(
    start=st.floats(min_value=1e-9, max_value=1e3),
    moves=st.lists(st.floats(min_value=1e-4, max_value=0.05), min_size=1, max_size=30),
)
@settings(max_examples=200)
def test_rising_path_takes_profit_at_first_crossing(start, moves):
    path = [start]
    for m in moves:
        path.append(path[-1] * (1 + m))
    params = SimulationParams()
    r = simulate_ladder(_series(path), LadderVariant.from_percentages([15, 25, 60]), params)

    # No drawdown on a rising path, so the first step is the only one
    assert r.steps_used == 1
    avg = r.total_spent / r.total_tokens
    crossings = [i for i in range(1, len(path)) if (path[i] - avg) / avg * 10_000 >= 200]
    if crossings:
        assert r.exit_reason == ExitReason.TAKE_PROFIT
        assert r.exit_index == crossings[0]
    else:
        assert r.exit_reason == ExitReason.MARK_TO_MARKET


@given(price=prices, n=st.integers(min_value=1, max_value=30))
@settings(max_examples=100)
def test_flat_path_closes_flat(price, n):
    r = simulate_ladder(_series([price] * n), LadderVariant.from_percentages([10, 30, 60]), SimulationParams())
    assert r.exit_reason == ExitReason.MARK_TO_MARKET
    assert r.steps_used == 1
    assert math.isclose(r.pnl_sol, 0.0, abs_tol=1e-9)
