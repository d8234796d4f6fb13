"""Property test: trade reconstruction over arbitrary event streams.

Whatever order BUY / SELL markers and status rows arrive in, completed
trades never overlap, always exit after they enter and always carry
both balances.
"""

from datetime import datetime, timedelta

from hypothesis import given, settings, strategies as st

from ladder_backtest.core.enums import ReconstructorState
from ladder_backtest.core.models import BuyMarker, MetricSample, SellMarker
from ladder_backtest.journal.reconstructor import TradeReconstructor

_T0 = datetime(2024, 1, 1)

balances = st.one_of(st.none(), st.floats(min_value=0, max_value=100))
steps = st.sampled_from(["-", "1/3", "2/3", "3/3", "4/4", "x"])
event_kinds = st.lists(
    st.one_of(
        st.tuples(st.just("metric"), balances, steps),
        st.tuples(st.just("buy"), st.none(), st.none()),
        st.tuples(st.just("sell"), st.none(), st.none()),
    ),
    max_size=60,
)


def _events(kinds, same_second: bool = False):
    events = []
    for i, (kind, balance, step) in enumerate(kinds):
        ts = _T0 + timedelta(seconds=0 if same_second else i)
        if kind == "metric":
            events.append(MetricSample(timestamp=ts, step=step, sol_balance=balance))
        elif kind == "buy":
            events.append(BuyMarker(timestamp=ts))
        else:
            events.append(SellMarker(timestamp=ts))
    return events


@given(kinds=event_kinds)
@settings(max_examples=300)
def test_trades_are_well_formed_and_disjoint(kinds):
    events = _events(kinds)
    rec = TradeReconstructor()
    trades = rec.feed_all(events)

    buys = sum(1 for e in events if isinstance(e, BuyMarker))
    assert len(trades) + rec.dropped <= buys
    for t in trades:
        assert t.exit_timestamp > t.entry_timestamp
        assert t.max_step >= 1
    for earlier, later in zip(trades, trades[1:]):
        assert earlier.exit_timestamp < later.entry_timestamp


@given(kinds=event_kinds)
@settings(max_examples=300)
def test_max_step_never_decreases_within_a_trade(kinds):
    rec = TradeReconstructor()
    previous = None
    for event in _events(kinds):
        rec.feed(event)
        current = rec.current_max_step
        if rec.state == ReconstructorState.IDLE:
            previous = None
            continue
        if previous is not None:
            assert current >= previous
        previous = current


@given(kinds=event_kinds)
@settings(max_examples=100)
def test_identical_timestamps_never_produce_trades(kinds):
    assert TradeReconstructor().feed_all(_events(kinds, same_second=True)) == []
