"""Run pipeline: log snapshot -> trades -> simulations -> report.

``run_once`` is a pure recomputation from the current log contents;
``run_forever`` re-invokes it on a fixed interval and treats a failed
tick as "try again next tick", leaving the previous report in place.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .backtester.ladder import simulate_variants
from .backtester.results import VariantBreakdown, compute_variant_breakdown
from .backtester.series import build_price_series, compute_levels
from .core.clock import IClock, WallClock
from .core.config import Settings
from .core.errors import NonPositivePriceError
from .core.file_io import read_log_lines, write_text_atomic
from .core.models import (
    LadderVariant,
    MetricSample,
    ReconstructedTrade,
    SimulationParams,
    TradeEvaluation,
)
from .journal.reconstructor import filter_window, reconstruct_trades
from .observability.logger import get_logger, new_run_id
from .parsing.classifier import classify_lines
from .reporting.export import ReportExporter
from .reporting.formatter import format_report

logger = logging.getLogger(__name__)
slog = get_logger(__name__)


@dataclass
class RunOutcome:
    """Everything one run produced."""

    run_id: str
    report: str
    evaluations: list[TradeEvaluation] = field(default_factory=list)
    breakdown: list[VariantBreakdown] = field(default_factory=list)
    trades_reconstructed: int = 0


def evaluate_trades(
    trades: Sequence[ReconstructedTrade],
    samples: Sequence[MetricSample],
    variants: Sequence[LadderVariant],
    params: SimulationParams,
) -> list[TradeEvaluation]:
    """Attach price path, levels and variant results to each trade.

    Trades with no priced samples keep no levels and no results. A path
    containing a non-positive price is not simulated; the trade is kept
    with ``skip_reason`` set.
    """
    evaluations: list[TradeEvaluation] = []
    for idx, trade in enumerate(trades, start=1):
        series = build_price_series(samples, trade.entry_timestamp, trade.exit_timestamp)
        ev = TradeEvaluation(index=idx, trade=trade, series=series, levels=compute_levels(series))
        if series:
            try:
                ev.results = simulate_variants(series, variants, params)
            except NonPositivePriceError as exc:
                logger.warning(
                    "Trade %d (%s): simulation skipped: %s",
                    idx, trade.entry_timestamp, exc,
                )
                ev.skip_reason = "non-positive price"
        evaluations.append(ev)
    return evaluations


def run_once(
    settings: Settings,
    *,
    clock: IClock | None = None,
    csv_path: str | Path | None = None,
    json_path: str | Path | None = None,
) -> RunOutcome:
    """Recompute the report from the log and overwrite the output file.

    Raises:
        LogFileMissingError: the log does not exist. Nothing is written.
    """
    run_id = new_run_id()
    clock = clock or WallClock()
    params = settings.simulation_params()
    variants = settings.ladder_variants()

    lines = read_log_lines(settings.log_path)
    events = classify_lines(lines)
    samples = [e for e in events if isinstance(e, MetricSample)]

    all_trades = reconstruct_trades(events, step_mode=settings.step_mode)
    trades = filter_window(all_trades, clock.now(), settings.window_seconds)

    evaluations = evaluate_trades(trades, samples, variants, params)
    breakdown = compute_variant_breakdown(evaluations)
    report = format_report(evaluations, params, settings.window_seconds)

    write_text_atomic(settings.output_path, report)

    exporter = ReportExporter()
    if csv_path:
        write_text_atomic(csv_path, exporter.to_csv(evaluations))
    if json_path:
        write_text_atomic(json_path, exporter.to_json(evaluations, breakdown))

    slog.info(
        "report_written",
        path=str(settings.output_path),
        lines=len(lines),
        events=len(events),
        trades_total=len(all_trades),
        trades_in_window=len(trades),
    )
    for b in breakdown:
        slog.info("variant_summary", **b.summary())

    return RunOutcome(
        run_id=run_id,
        report=report,
        evaluations=evaluations,
        breakdown=breakdown,
        trades_reconstructed=len(all_trades),
    )


def run_forever(
    settings: Settings,
    *,
    clock: IClock | None = None,
    csv_path: str | Path | None = None,
    json_path: str | Path | None = None,
    max_ticks: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Run every ``settings.interval_seconds`` until interrupted.

    A failing tick is logged and retried from scratch on the next one.
    Returns the number of failed ticks (useful with ``max_ticks``).
    """
    failures = 0
    tick = 0
    while max_ticks is None or tick < max_ticks:
        tick += 1
        try:
            run_once(settings, clock=clock, csv_path=csv_path, json_path=json_path)
        except Exception:
            failures += 1
            logger.exception("Backtest run failed; keeping previous report")
        if max_ticks is not None and tick >= max_ticks:
            break
        sleep(settings.interval_seconds)
    return failures
