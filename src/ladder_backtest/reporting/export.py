"""Report export: CSV/JSON output of a run's comparison data.

Usage::

    exporter = ReportExporter()
    csv_str = exporter.to_csv(evaluations)
    json_str = exporter.to_json(evaluations, breakdown)
"""

from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import asdict
from typing import Any

from ..backtester.results import VariantBreakdown
from ..core.models import SimulationResult, TradeEvaluation

logger = logging.getLogger(__name__)

# Default CSV columns
_CSV_COLUMNS = [
    "trade",
    "entry_ts",
    "exit_ts",
    "duration_s",
    "steps",
    "real_pnl_sol",
    "sim_variant",
    "sim_pnl_sol",
    "sim_pnl_pct",
    "sim_steps",
    "exit_reason",
    "exit_index",
    "exit_price",
]


class ReportExporter:
    """Export per-(trade, variant) rows to CSV and full runs to JSON.

    Parameters
    ----------
    decimal_places : int
        Rounding precision for SOL amounts.  Default 8.
    """

    def __init__(self, *, decimal_places: int = 8) -> None:
        self._dp = decimal_places

    # ------------------------------------------------------------------ #
    # CSV Export                                                           #
    # ------------------------------------------------------------------ #

    def to_csv(
        self,
        evaluations: list[TradeEvaluation],
        *,
        columns: list[str] | None = None,
    ) -> str:
        """One row per simulated (trade, variant) pair, with header."""
        cols = columns or _CSV_COLUMNS
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()

        for ev in evaluations:
            for result in ev.results:
                row = self._result_to_row(ev, result)
                writer.writerow({c: row.get(c, "") for c in cols})

        return buf.getvalue()

    # ------------------------------------------------------------------ #
    # JSON Export                                                          #
    # ------------------------------------------------------------------ #

    def to_json(
        self,
        evaluations: list[TradeEvaluation],
        breakdown: list[VariantBreakdown] | None = None,
        *,
        indent: int = 2,
    ) -> str:
        """Trades with levels and results, plus the variant breakdown."""
        payload = {
            "trades": [self._evaluation_to_dict(ev) for ev in evaluations],
            "variants": [asdict(b) for b in breakdown or []],
        }
        return json.dumps(payload, indent=indent, default=str)

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _result_to_row(
        self, ev: TradeEvaluation, result: SimulationResult
    ) -> dict[str, Any]:
        dp = self._dp
        trade = ev.trade
        return {
            "trade": ev.index,
            "entry_ts": trade.entry_timestamp.isoformat(sep=" "),
            "exit_ts": trade.exit_timestamp.isoformat(sep=" "),
            "duration_s": round(trade.duration_seconds, 1),
            "steps": trade.max_step,
            "real_pnl_sol": round(trade.realized_pnl, dp),
            "sim_variant": result.variant_name,
            "sim_pnl_sol": round(result.pnl_sol, dp),
            "sim_pnl_pct": round(result.pnl_bps / 100, 4),
            "sim_steps": result.steps_used,
            "exit_reason": result.exit_reason.value,
            "exit_index": result.exit_index,
            "exit_price": result.exit_price,
        }

    def _evaluation_to_dict(self, ev: TradeEvaluation) -> dict[str, Any]:
        trade = ev.trade
        return {
            "trade": ev.index,
            "entry_ts": trade.entry_timestamp.isoformat(sep=" "),
            "exit_ts": trade.exit_timestamp.isoformat(sep=" "),
            "entry_sol_balance": trade.entry_sol_balance,
            "exit_sol_balance": trade.exit_sol_balance,
            "real_pnl_sol": round(trade.realized_pnl, self._dp),
            "duration_s": trade.duration_seconds,
            "max_step": trade.max_step,
            "samples": len(ev.series),
            "levels": ev.levels.model_dump() if ev.levels else None,
            "skip_reason": ev.skip_reason,
            "results": [r.model_dump(mode="json") for r in ev.results],
        }
