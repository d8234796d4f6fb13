"""Configuration management.

Loads from an optional TOML config file + environment variables.
Uses pydantic-settings for validation and env var parsing. Values from
the TOML file and CLI overrides take precedence over the environment,
and ``LADDER_*`` variables over the bot's own names.

The bot's own variable names (``BOT_LOG_PATH``, ``PROFIT_TARGET_BPS``,
``STEP_DRAWDOWN_PCT`` ...) are accepted alongside the ``LADDER_`` ones so
the backtester can share the bot's ``.env``.
"""

from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings

from .enums import LogFormat
from .errors import ConfigError
from .models import DEFAULT_VARIANTS, LadderVariant, SimulationParams

# Variables the bot itself reads; used when the LADDER_ one is unset
_BOT_ENV_NAMES: dict[str, str] = {
    "log_path": "BOT_LOG_PATH",
    "output_path": "BT_OUTPUT",
    "window_seconds": "BT_WINDOW_SEC",
    "profit_target_bps": "PROFIT_TARGET_BPS",
    "hard_stop_bps": "HARD_STOP_BPS",
    "step_drawdown_pct": "STEP_DRAWDOWN_PCT",
}


def parse_pct_list(raw: str) -> tuple[float, ...]:
    """Parse ``"0,5,10"`` into floats, dropping entries that don't parse."""
    values: list[float] = []
    for part in raw.split(","):
        try:
            value = float(part.strip())
        except ValueError:
            continue
        if math.isfinite(value):
            values.append(value)
    return tuple(values)


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class VariantConfig(BaseModel):
    """Ladder variant as written in config: whole percentages per step."""

    name: str | None = None
    steps: list[float]

    def to_variant(self) -> LadderVariant:
        return LadderVariant.from_percentages(self.steps, name=self.name)


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: LogFormat = LogFormat.CONSOLE


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level backtester settings."""

    # Paths
    log_path: str = "bot.log"
    output_path: str = "ta_backtest.txt"

    # Scheduling
    window_seconds: float = 3600.0
    interval_seconds: float = 5.0

    # Exit rules
    profit_target_bps: float = 200.0
    hard_stop_bps: float = -5000.0
    profit_step_bps: float = 25.0  # Added to the target per extra step
    # Comma list of drawdown % needed for each ladder step
    step_drawdown_pct: str = "0,5,10"
    # Only samples with this mode tag advance a trade's step count
    step_mode: str | None = None

    variants: list[VariantConfig] = Field(
        default_factory=lambda: [
            VariantConfig(name=v.name, steps=[f * 100 for f in v.fractions])
            for v in DEFAULT_VARIANTS
        ]
    )
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {
        "env_prefix": "LADDER_",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }

    @model_validator(mode="before")
    @classmethod
    def _bot_env_fallbacks(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for field_name, env_name in _BOT_ENV_NAMES.items():
            if field_name not in data and env_name in os.environ:
                data[field_name] = os.environ[env_name]
        if "interval_seconds" not in data and "BT_INTERVAL_MS" in os.environ:
            data["interval_seconds"] = float(os.environ["BT_INTERVAL_MS"]) / 1000
        return data

    @field_validator("step_drawdown_pct", mode="before")
    @classmethod
    def _join_list(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return ",".join(str(x) for x in v)
        return v

    @field_validator("step_mode", mode="before")
    @classmethod
    def _blank_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def _check_rules(self) -> Settings:
        # Surface bad exit rules or ladders at load time, not mid-run
        self.simulation_params()
        self.ladder_variants()
        return self

    @property
    def drawdown_table(self) -> tuple[float, ...]:
        return parse_pct_list(self.step_drawdown_pct)

    def simulation_params(self) -> SimulationParams:
        """Explicit rule set handed to every simulator call."""
        return SimulationParams(
            base_profit_target_bps=self.profit_target_bps,
            hard_stop_bps=self.hard_stop_bps,
            profit_step_bps=self.profit_step_bps,
            drawdown_trigger_pct=self.drawdown_table,
        )

    def ladder_variants(self) -> tuple[LadderVariant, ...]:
        if not self.variants:
            raise ValueError("at least one ladder variant is required")
        return tuple(v.to_variant() for v in self.variants)


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.

    Raises:
        ConfigError: the file is missing or the values don't validate.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        import tomli

        with open(path, "rb") as f:
            try:
                data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
