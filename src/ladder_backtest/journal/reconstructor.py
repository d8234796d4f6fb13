"""Trade reconstruction state machine.

Folds the ordered log event stream into completed trades::

    IDLE -> OPEN             on BUY (only once a metric row has been seen)
    OPEN -> AWAITING_EXIT    on SELL
    AWAITING_EXIT -> IDLE    on the next metric row carrying a SOL balance

At most one trade is open at a time; BUY markers are ignored while a
trade is open or pending exit. Trades still open when the stream ends
are dropped, never reported as partial.

Entry balance comes from the last metric row before the BUY marker, the
entry time is the marker's own time. Exit time and balance come from the
first balance-bearing row after the SELL marker, because the bot only
refreshes its wallet balance on the next status tick.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.enums import ReconstructorState
from ..core.models import (
    BuyMarker,
    LogEvent,
    MetricSample,
    ReconstructedTrade,
    SellMarker,
)

logger = logging.getLogger(__name__)


@dataclass
class _OpenTrade:
    entry_timestamp: datetime
    entry_sol_balance: float | None
    max_step: int = 1


@dataclass(frozen=True)
class _PendingExit:
    trade: _OpenTrade
    sell_timestamp: datetime


class TradeReconstructor:
    """Incremental trade reconstruction over typed log events.

    Parameters
    ----------
    step_mode : str | None
        When set, only metric rows with this mode tag advance a trade's
        ``max_step``. ``None`` counts every row.
    """

    def __init__(self, *, step_mode: str | None = None) -> None:
        self._step_mode = step_mode
        self._state = ReconstructorState.IDLE
        self._last_metric: MetricSample | None = None
        self._open: _OpenTrade | None = None
        self._pending: _PendingExit | None = None
        self._completed: list[ReconstructedTrade] = []
        self._dropped = 0

    # ------------------------------------------------------------------ #
    # Properties                                                           #
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> ReconstructorState:
        return self._state

    @property
    def trades(self) -> list[ReconstructedTrade]:
        """Trades finalized so far, in exit order."""
        return list(self._completed)

    @property
    def dropped(self) -> int:
        """Trades that closed but could not be reported."""
        return self._dropped

    @property
    def current_max_step(self) -> int | None:
        return self._open.max_step if self._open else None

    # ------------------------------------------------------------------ #
    # Event handling                                                       #
    # ------------------------------------------------------------------ #

    def feed(self, event: LogEvent) -> ReconstructedTrade | None:
        """Apply one event; return the trade it finalized, if any."""
        if isinstance(event, MetricSample):
            return self._on_metric(event)
        if isinstance(event, BuyMarker):
            self._on_buy(event)
        elif isinstance(event, SellMarker):
            self._on_sell(event)
        return None

    def feed_all(self, events: Iterable[LogEvent]) -> list[ReconstructedTrade]:
        for event in events:
            self.feed(event)
        return self.trades

    def _on_metric(self, sample: MetricSample) -> ReconstructedTrade | None:
        self._last_metric = sample

        if self._state == ReconstructorState.OPEN and self._open is not None:
            self._track_step(self._open, sample)
            return None

        if self._state == ReconstructorState.AWAITING_EXIT and self._pending is not None:
            if sample.sol_balance is None:
                return None
            pending = self._pending
            self._pending = None
            self._open = None
            self._state = ReconstructorState.IDLE
            return self._finalize(pending, sample.timestamp, sample.sol_balance)

        return None

    def _on_buy(self, marker: BuyMarker) -> None:
        if self._state != ReconstructorState.IDLE:
            logger.debug("BUY at %s ignored in state %s", marker.timestamp, self._state.value)
            return
        if self._last_metric is None:
            logger.debug("BUY at %s ignored: no metric row seen yet", marker.timestamp)
            return
        self._open = _OpenTrade(
            entry_timestamp=marker.timestamp,
            entry_sol_balance=self._last_metric.sol_balance,
        )
        self._state = ReconstructorState.OPEN

    def _on_sell(self, marker: SellMarker) -> None:
        if self._state != ReconstructorState.OPEN or self._open is None:
            return
        # Snapshot: rows after the SELL no longer move max_step
        snapshot = _OpenTrade(
            entry_timestamp=self._open.entry_timestamp,
            entry_sol_balance=self._open.entry_sol_balance,
            max_step=self._open.max_step,
        )
        self._pending = _PendingExit(trade=snapshot, sell_timestamp=marker.timestamp)
        self._state = ReconstructorState.AWAITING_EXIT

    def _track_step(self, trade: _OpenTrade, sample: MetricSample) -> None:
        if self._step_mode is not None and sample.mode != self._step_mode:
            return
        step = sample.step_number
        if step is not None and step > trade.max_step:
            trade.max_step = step

    def _finalize(
        self, pending: _PendingExit, exit_ts: datetime, exit_balance: float
    ) -> ReconstructedTrade | None:
        trade = pending.trade

        if trade.entry_sol_balance is None:
            logger.debug(
                "Dropping trade opened at %s: no entry balance",
                trade.entry_timestamp,
            )
            self._dropped += 1
            return None
        if exit_ts <= trade.entry_timestamp:
            logger.debug(
                "Dropping trade opened at %s: exit %s is not after entry",
                trade.entry_timestamp, exit_ts,
            )
            self._dropped += 1
            return None

        completed = ReconstructedTrade(
            entry_timestamp=trade.entry_timestamp,
            entry_sol_balance=trade.entry_sol_balance,
            exit_timestamp=exit_ts,
            exit_sol_balance=exit_balance,
            max_step=trade.max_step,
        )
        self._completed.append(completed)
        return completed


def reconstruct_trades(
    events: Iterable[LogEvent], *, step_mode: str | None = None
) -> list[ReconstructedTrade]:
    """Reconstruct every completed trade in ``events``."""
    reconstructor = TradeReconstructor(step_mode=step_mode)
    trades = reconstructor.feed_all(events)
    if reconstructor.state != ReconstructorState.IDLE:
        logger.debug("Stream ended with a trade in state %s", reconstructor.state.value)
    return trades


def filter_window(
    trades: Iterable[ReconstructedTrade],
    now: datetime,
    window_seconds: float,
) -> list[ReconstructedTrade]:
    """Trades that opened within the window and closed by ``now``."""
    start = now - timedelta(seconds=window_seconds)
    return [t for t in trades if t.entry_timestamp >= start and t.exit_timestamp <= now]
