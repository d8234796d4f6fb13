"""Core domain models for the ladder backtester.

Log events are the typed output of the line classifier; everything
downstream (reconstruction, simulation, reporting) consumes these models
and never sees raw log text.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from .enums import EventType, ExitReason

_LEADING_INT = re.compile(r"^(\d+)")


# ---------------------------------------------------------------------------
# Log events
# ---------------------------------------------------------------------------

class LogEvent(BaseModel):
    """Base for all classified log lines."""

    model_config = {"frozen": True}

    event_type: EventType
    timestamp: datetime


class MetricSample(LogEvent):
    """One pipe-delimited status row written by the bot.

    Numeric fields are ``None`` when the bot wrote something that does
    not parse as a finite number.
    """

    event_type: Literal[EventType.METRIC] = EventType.METRIC
    mode: str = ""
    step: str = ""  # "2/3", "1", "-" ...
    avg_cost: float | None = None
    price: float | None = None
    move_pct: float | None = None
    position_sol: float | None = None
    trade_pnl: float | None = None
    wallet_pnl: float | None = None
    sol_balance: float | None = None

    @property
    def step_number(self) -> int | None:
        """Leading integer of the step label, if any."""
        match = _LEADING_INT.match(self.step)
        return int(match.group(1)) if match else None


class BuyMarker(LogEvent):
    event_type: Literal[EventType.BUY] = EventType.BUY


class SellMarker(LogEvent):
    event_type: Literal[EventType.SELL] = EventType.SELL


# ---------------------------------------------------------------------------
# Reconstructed trades and price paths
# ---------------------------------------------------------------------------

class ReconstructedTrade(BaseModel):
    """A completed bot trade bounded by wallet balance snapshots."""

    model_config = {"frozen": True}

    entry_timestamp: datetime
    entry_sol_balance: float
    exit_timestamp: datetime
    exit_sol_balance: float
    max_step: int = 1

    @model_validator(mode="after")
    def _exit_after_entry(self) -> ReconstructedTrade:
        if self.exit_timestamp <= self.entry_timestamp:
            raise ValueError(
                f"exit {self.exit_timestamp} is not after entry "
                f"{self.entry_timestamp}"
            )
        return self

    @property
    def realized_pnl(self) -> float:
        return self.exit_sol_balance - self.entry_sol_balance

    @property
    def duration_seconds(self) -> float:
        delta = (self.exit_timestamp - self.entry_timestamp).total_seconds()
        return max(0.0, delta)


class PriceSample(BaseModel):
    model_config = {"frozen": True}

    timestamp: datetime
    price: float


class Levels(BaseModel):
    """Summary statistics of a trade's price path."""

    model_config = {"frozen": True}

    min_price: float
    mid_price: float  # sorted[len // 2]
    max_price: float
    range_pct: float


# ---------------------------------------------------------------------------
# Strategy definition and simulation
# ---------------------------------------------------------------------------

class LadderVariant(BaseModel):
    """Named ladder: ordered fractions of total capital, one per step."""

    model_config = {"frozen": True}

    name: str
    fractions: tuple[float, ...]

    @field_validator("fractions")
    @classmethod
    def _check_fractions(cls, v: tuple[float, ...]) -> tuple[float, ...]:
        if not v:
            raise ValueError("ladder needs at least one step")
        for f in v:
            if not math.isfinite(f) or f <= 0:
                raise ValueError(f"step fraction must be positive, got {f}")
        return v

    @classmethod
    def from_percentages(cls, percentages: list[float], name: str | None = None) -> LadderVariant:
        """Build from whole percentages, e.g. ``[15, 25, 60]``."""
        label = name or "/".join(f"{p:g}" for p in percentages)
        return cls(name=label, fractions=tuple(p / 100 for p in percentages))

    @property
    def step_count(self) -> int:
        return len(self.fractions)


DEFAULT_VARIANTS: tuple[LadderVariant, ...] = (
    LadderVariant.from_percentages([15, 25, 60]),
    LadderVariant.from_percentages([10, 30, 60]),
    LadderVariant.from_percentages([20, 20, 60]),
    LadderVariant.from_percentages([10, 15, 15, 60]),
)


class SimulationParams(BaseModel):
    """Global exit and ladder rules shared by every variant in a run."""

    model_config = {"frozen": True}

    base_profit_target_bps: float = 200.0
    hard_stop_bps: float = -5000.0
    profit_step_bps: float = 25.0  # Added to the target per extra step
    drawdown_trigger_pct: tuple[float, ...] = (0.0, 5.0, 10.0)
    total_capital: float = 1.0

    @field_validator("hard_stop_bps")
    @classmethod
    def _stop_is_negative(cls, v: float) -> float:
        if v >= 0:
            raise ValueError(f"hard stop must be negative bps, got {v}")
        return v

    @field_validator("drawdown_trigger_pct")
    @classmethod
    def _table_not_empty(cls, v: tuple[float, ...]) -> tuple[float, ...]:
        if not v:
            raise ValueError("drawdown trigger table is empty")
        return v

    @field_validator("total_capital")
    @classmethod
    def _capital_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"total capital must be positive, got {v}")
        return v

    def target_bps(self, steps_used: int) -> float:
        """Take-profit target after ``steps_used`` executed steps."""
        return self.base_profit_target_bps + self.profit_step_bps * max(steps_used - 1, 0)

    def drawdown_trigger_bps(self, steps_used: int) -> float:
        """Drawdown needed to fire the next step; last entry repeats."""
        idx = min(steps_used, len(self.drawdown_trigger_pct) - 1)
        return self.drawdown_trigger_pct[idx] * 100


class SimulationResult(BaseModel):
    model_config = {"frozen": True}

    variant_name: str
    exit_index: int
    exit_reason: ExitReason
    exit_price: float
    pnl_sol: float
    pnl_bps: float
    steps_used: int
    target_bps: float
    total_spent: float
    total_tokens: float


class TradeEvaluation(BaseModel):
    """One reconstructed trade with its price path and variant results."""

    index: int  # 1-based position in the report
    trade: ReconstructedTrade
    series: list[PriceSample] = Field(default_factory=list)
    levels: Levels | None = None
    results: list[SimulationResult] = Field(default_factory=list)
    skip_reason: str | None = None
