"""Fixed-layout text report comparing real and simulated PnL.

Layout::

    TA BACKTEST SUMMARY
    window_sec: 3600
    ...parameters...

    trade_1: steps_used=2 real_pnl=0.050000 SOL duration=7.0s
      levels: min=0.00000090 mid=0.00000105 max=0.00000125 range=33.33%

    trade | entry_ts           | exit_ts            | dur_s | ...
    1     | 2024-05-01 12:00:01 | 2024-05-01 12:00:08 |    7.0 | ...

    legend: ...

All table rows come after all trade summaries. Output depends only on
its inputs.
"""

from __future__ import annotations

from datetime import datetime

from ..core.models import SimulationParams, TradeEvaluation

TITLE = "TA BACKTEST SUMMARY"
TABLE_HEADER = (
    "trade | entry_ts           | exit_ts            | dur_s | steps "
    "| real_pnl_sol | sim_variant | sim_pnl_sol | sim_pnl_%"
)
MISSING = "--"
_TS_FMT = "%Y-%m-%d %H:%M:%S"


def _num(value: float | None, decimals: int) -> str:
    if value is None:
        return MISSING
    return f"{value:.{decimals}f}"


def _ts(value: datetime) -> str:
    return value.strftime(_TS_FMT)


def format_pct(bps: float | None) -> str:
    if bps is None:
        return MISSING
    return f"{bps / 100:.2f}%"


def format_sol(value: float | None) -> str:
    return f"{_num(value, 6)} SOL"


def _header_lines(params: SimulationParams, window_seconds: float) -> list[str]:
    return [
        f"window_sec: {window_seconds:g}",
        f"profit_target_bps: {params.base_profit_target_bps:g}",
        f"hard_stop_bps: {params.hard_stop_bps:g}",
        f"profit_step_bps: {params.profit_step_bps:g}",
        "step_drawdown_pct: " + ",".join(f"{p:g}" for p in params.drawdown_trigger_pct),
        "",
    ]


def _trade_lines(ev: TradeEvaluation) -> list[str]:
    trade = ev.trade
    line = (
        f"trade_{ev.index}: steps_used={trade.max_step} "
        f"real_pnl={format_sol(trade.realized_pnl)} "
        f"duration={_num(trade.duration_seconds, 1)}s"
    )
    if ev.skip_reason:
        line += f" sim=skipped ({ev.skip_reason})"
    lines = [line]
    if ev.levels is not None:
        lv = ev.levels
        lines.append(
            f"  levels: min={_num(lv.min_price, 8)} mid={_num(lv.mid_price, 8)} "
            f"max={_num(lv.max_price, 8)} range={_num(lv.range_pct, 2)}%"
        )
    lines.append("")
    return lines


def format_table_rows(ev: TradeEvaluation) -> list[str]:
    """One fixed-width row per simulated variant of ``ev``."""
    trade = ev.trade
    rows = []
    for r in ev.results:
        rows.append(" | ".join([
            str(ev.index).ljust(5),
            _ts(trade.entry_timestamp),
            _ts(trade.exit_timestamp),
            _num(trade.duration_seconds, 1).rjust(6),
            str(trade.max_step).rjust(5),
            _num(trade.realized_pnl, 6).rjust(12),
            r.variant_name.rjust(11),
            _num(r.pnl_sol, 6).rjust(11),
            format_pct(r.pnl_bps).rjust(9),
        ]))
    return rows


def legend_line(params: SimulationParams) -> str:
    return (
        "legend: sim_pnl_% uses ladder + profit step rule "
        f"({params.profit_step_bps / 100:g}% per step)."
    )


def format_report(
    evaluations: list[TradeEvaluation],
    params: SimulationParams,
    window_seconds: float,
) -> str:
    """Render the full report text."""
    summary = _header_lines(params, window_seconds)
    table = [TABLE_HEADER]
    for ev in evaluations:
        summary.extend(_trade_lines(ev))
        table.extend(format_table_rows(ev))

    return "\n".join([
        TITLE,
        "\n".join(summary),
        "",
        "\n".join(table),
        "",
        legend_line(params),
    ])
