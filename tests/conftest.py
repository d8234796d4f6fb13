"""Shared fixtures for the ladder-backtest test suite."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from ladder_backtest.core.models import (
    BuyMarker,
    MetricSample,
    PriceSample,
    ReconstructedTrade,
    SellMarker,
    SimulationParams,
)

TS_FMT = "%Y-%m-%d %H:%M:%S"

# Settings read these; keep the developer's shell out of the tests
_ENV_VARS = [
    "LADDER_LOG_PATH", "BOT_LOG_PATH", "LADDER_OUTPUT_PATH", "BT_OUTPUT",
    "LADDER_WINDOW_SECONDS", "BT_WINDOW_SEC", "LADDER_INTERVAL_SECONDS", "BT_INTERVAL_MS",
    "LADDER_PROFIT_TARGET_BPS", "PROFIT_TARGET_BPS", "LADDER_HARD_STOP_BPS",
    "HARD_STOP_BPS", "LADDER_PROFIT_STEP_BPS", "LADDER_STEP_DRAWDOWN_PCT",
    "STEP_DRAWDOWN_PCT", "LADDER_STEP_MODE", "LADDER_VARIANTS",
    "LADDER_OBSERVABILITY__LOG_LEVEL", "LADDER_OBSERVABILITY__LOG_FORMAT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _fmt(value):
    return "-" if value is None else f"{value}"


def metric_line(
    ts: datetime,
    *,
    mode: str = "POS",
    step: str = "1/3",
    avg=None,
    price=None,
    move=None,
    pos=None,
    trade_pnl=None,
    wallet_pnl=None,
    sol=None,
) -> str:
    """One pipe-delimited status row as the bot writes it."""
    fields = [
        ts.strftime(TS_FMT), mode, step, _fmt(avg), _fmt(price), _fmt(move),
        _fmt(pos), _fmt(trade_pnl), _fmt(wallet_pnl), _fmt(sol),
    ]
    return " | ".join(fields)


def buy_line(ts: datetime) -> str:
    return f"{ts.strftime(TS_FMT)} | INFO | BUY confirmed sig=4hXq"


def sell_line(ts: datetime) -> str:
    return f"{ts.strftime(TS_FMT)} | INFO | SELL confirmed sig=9pLm"


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------

@pytest.fixture
def base_time() -> datetime:
    return datetime(2024, 5, 1, 12, 0, 0)


@pytest.fixture
def at(base_time):
    """``at(n)`` -> base_time + n seconds."""
    def _at(seconds: float) -> datetime:
        return base_time + timedelta(seconds=seconds)
    return _at


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@pytest.fixture
def make_metric(at):
    def _make(seconds: float, **fields) -> MetricSample:
        return MetricSample(timestamp=at(seconds), **fields)
    return _make


@pytest.fixture
def make_buy(at):
    return lambda seconds: BuyMarker(timestamp=at(seconds))


@pytest.fixture
def make_sell(at):
    return lambda seconds: SellMarker(timestamp=at(seconds))


@pytest.fixture
def make_series(at):
    """``make_series([p0, p1, ...])`` -> one PriceSample per second."""
    def _make(prices: list[float]) -> list[PriceSample]:
        return [PriceSample(timestamp=at(i), price=p) for i, p in enumerate(prices)]
    return _make


# ---------------------------------------------------------------------------
# Scenario: one trade, five priced rows, 10.0 -> 10.05 SOL
# ---------------------------------------------------------------------------

SCENARIO_PRICES = [1e-8, 1.05e-8, 1.1e-8, 0.9e-8, 1.25e-8]


@pytest.fixture
def scenario_lines(at) -> list[str]:
    lines = [
        "time | mode | step | avg | px | move | pos_sol | trade_pnl | wallet_pnl | sol_bal",
        metric_line(at(0), mode="IDLE", step="-", sol=10.0),
        buy_line(at(1)),
    ]
    for i, price in enumerate(SCENARIO_PRICES):
        lines.append(metric_line(
            at(2 + i), step=f"{1 if i < 3 else 2}/3", avg=1e-8, price=price,
            pos=0.15, sol=9.85,
        ))
    lines.append(sell_line(at(7)))
    lines.append(metric_line(at(8), mode="IDLE", step="-", sol=10.05))
    return lines


@pytest.fixture
def scenario_log(tmp_path, scenario_lines):
    path = tmp_path / "bot.log"
    path.write_text("\n".join(scenario_lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def sample_trade(at) -> ReconstructedTrade:
    return ReconstructedTrade(
        entry_timestamp=at(1),
        entry_sol_balance=10.0,
        exit_timestamp=at(8),
        exit_sol_balance=10.05,
        max_step=2,
    )


@pytest.fixture
def default_params() -> SimulationParams:
    return SimulationParams()


@pytest.fixture
def log_lines():
    """Line builders: ``log_lines.metric(ts, ...)``, ``.buy(ts)``, ``.sell(ts)``."""
    from types import SimpleNamespace

    return SimpleNamespace(metric=metric_line, buy=buy_line, sell=sell_line)


@pytest.fixture
def scenario_prices() -> list[float]:
    return list(SCENARIO_PRICES)
