"""Ladder strategy simulator.

Replays a laddered entry with tiered exits against a recorded price path:

1. Buy the first ladder step at the first sample.
2. For each later sample, in order:
   a. take profit once PnL reaches the target, which grows by
      ``profit_step_bps`` for every step beyond the first;
   b. otherwise stop out once PnL falls to ``hard_stop_bps``;
   c. otherwise buy the next step if drawdown from the average cost has
      reached that step's trigger.
3. With no exit by the end, close at the last price (mark-to-market).

Take profit is checked before the hard stop, so it wins when both hold
on the same sample. Every call builds its own position; nothing is
shared between variants or trades.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..core.enums import ExitReason
from ..core.errors import EmptySeriesError, NonPositivePriceError
from ..core.models import LadderVariant, PriceSample, SimulationParams, SimulationResult

logger = logging.getLogger(__name__)

BPS = 10_000


@dataclass
class _LadderPosition:
    """Running accumulator for one simulation."""

    capital: float
    fractions: Sequence[float]
    total_spent: float = 0.0
    total_tokens: float = 0.0
    steps_used: int = 0

    @property
    def has_unfilled_steps(self) -> bool:
        return self.steps_used < len(self.fractions)

    @property
    def avg_cost(self) -> float:
        return self.total_spent / self.total_tokens

    def buy_next(self, price: float) -> None:
        spend = self.fractions[self.steps_used] * self.capital
        self.total_spent += spend
        self.total_tokens += spend / price
        self.steps_used += 1

    def pnl_bps(self, price: float) -> float:
        avg = self.avg_cost
        return (price - avg) / avg * BPS

    def drawdown_bps(self, price: float) -> float:
        avg = self.avg_cost
        return (avg - price) / avg * BPS


def _check_prices(series: Sequence[PriceSample]) -> None:
    if not series:
        raise EmptySeriesError("cannot simulate an empty price series")
    for i, sample in enumerate(series):
        if not math.isfinite(sample.price) or sample.price <= 0:
            raise NonPositivePriceError(i, sample.price)


def simulate_ladder(
    series: Sequence[PriceSample],
    variant: LadderVariant,
    params: SimulationParams,
) -> SimulationResult:
    """Run one ladder variant over ``series``.

    Raises:
        EmptySeriesError: ``series`` is empty.
        NonPositivePriceError: a price is zero, negative, or not finite.
    """
    _check_prices(series)

    pos = _LadderPosition(capital=params.total_capital, fractions=variant.fractions)
    pos.buy_next(series[0].price)

    def close(index: int, reason: ExitReason, pnl_bps: float) -> SimulationResult:
        price = series[index].price
        realized = pos.total_tokens * price
        return SimulationResult(
            variant_name=variant.name,
            exit_index=index,
            exit_reason=reason,
            exit_price=price,
            pnl_sol=realized - pos.total_spent,
            pnl_bps=pnl_bps,
            steps_used=pos.steps_used,
            target_bps=params.target_bps(pos.steps_used),
            total_spent=pos.total_spent,
            total_tokens=pos.total_tokens,
        )

    for i in range(1, len(series)):
        if pos.total_tokens <= 0:
            break
        price = series[i].price
        pnl_bps = pos.pnl_bps(price)

        if pnl_bps >= params.target_bps(pos.steps_used):
            return close(i, ExitReason.TAKE_PROFIT, pnl_bps)

        if pnl_bps <= params.hard_stop_bps:
            return close(i, ExitReason.HARD_STOP, pnl_bps)

        if pos.has_unfilled_steps and pos.drawdown_bps(price) >= params.drawdown_trigger_bps(pos.steps_used):
            pos.buy_next(price)

    last = len(series) - 1
    return close(last, ExitReason.MARK_TO_MARKET, pos.pnl_bps(series[last].price))


def simulate_variants(
    series: Sequence[PriceSample],
    variants: Iterable[LadderVariant],
    params: SimulationParams,
) -> list[SimulationResult]:
    """Run every variant independently over the same path."""
    results = [simulate_ladder(series, v, params) for v in variants]
    for r in results:
        logger.debug(
            "%s: exit=%s idx=%d steps=%d pnl=%.6f",
            r.variant_name, r.exit_reason.value, r.exit_index, r.steps_used, r.pnl_sol,
        )
    return results
