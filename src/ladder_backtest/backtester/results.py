"""Per-variant aggregate metrics across a run's trades."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any

import numpy as np

from ..core.enums import ExitReason
from ..core.models import TradeEvaluation


@dataclass
class VariantBreakdown:
    """How one ladder variant would have done on the run's trades."""

    variant_name: str = ""
    trades_simulated: int = 0
    winning_trades: int = 0
    win_rate: float = 0.0
    total_sim_pnl: float = 0.0
    avg_sim_pnl: float = 0.0
    avg_sim_pnl_bps: float = 0.0
    total_real_pnl: float = 0.0  # Bot PnL over the same trades
    sim_minus_real: float = 0.0
    avg_steps_used: float = 0.0
    take_profit_exits: int = 0
    hard_stop_exits: int = 0
    mark_to_market_exits: int = 0

    def summary(self) -> dict[str, Any]:
        """Return summary dict for logging."""
        return {
            "variant": self.variant_name,
            "trades": self.trades_simulated,
            "win_rate": f"{self.win_rate:.1%}",
            "sim_pnl": f"{self.total_sim_pnl:.6f}",
            "real_pnl": f"{self.total_real_pnl:.6f}",
            "edge": f"{self.sim_minus_real:+.6f}",
        }


def compute_variant_breakdown(
    evaluations: list[TradeEvaluation],
) -> list[VariantBreakdown]:
    """Aggregate simulation results per variant, in first-seen order."""
    sim_pnl: dict[str, list[float]] = defaultdict(list)
    sim_bps: dict[str, list[float]] = defaultdict(list)
    real_pnl: dict[str, list[float]] = defaultdict(list)
    steps: dict[str, list[int]] = defaultdict(list)
    exits: dict[str, list[str]] = defaultdict(list)

    for ev in evaluations:
        for r in ev.results:
            sim_pnl[r.variant_name].append(r.pnl_sol)
            sim_bps[r.variant_name].append(r.pnl_bps)
            real_pnl[r.variant_name].append(ev.trade.realized_pnl)
            steps[r.variant_name].append(r.steps_used)
            exits[r.variant_name].append(r.exit_reason.value)

    breakdowns: list[VariantBreakdown] = []
    for name, pnls in sim_pnl.items():
        pnl_arr = np.array(pnls)
        real_arr = np.array(real_pnl[name])
        reasons = exits[name]
        wins = int(np.sum(pnl_arr > 0))
        breakdowns.append(VariantBreakdown(
            variant_name=name,
            trades_simulated=len(pnls),
            winning_trades=wins,
            win_rate=wins / len(pnls),
            total_sim_pnl=float(np.sum(pnl_arr)),
            avg_sim_pnl=float(np.mean(pnl_arr)),
            avg_sim_pnl_bps=float(np.mean(sim_bps[name])),
            total_real_pnl=float(np.sum(real_arr)),
            sim_minus_real=float(np.sum(pnl_arr) - np.sum(real_arr)),
            avg_steps_used=float(np.mean(steps[name])),
            take_profit_exits=reasons.count(ExitReason.TAKE_PROFIT.value),
            hard_stop_exits=reasons.count(ExitReason.HARD_STOP.value),
            mark_to_market_exits=reasons.count(ExitReason.MARK_TO_MARKET.value),
        ))
    return breakdowns
