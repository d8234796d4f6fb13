"""CLI entry point for the ladder backtester."""

from __future__ import annotations

import sys
from typing import Any

import click

from .core.config import Settings, load_settings
from .core.errors import BacktestError, ConfigError


def _common_options(f):
    options = [
        click.option("--config", default=None, help="TOML config file path"),
        click.option("--log", "log_path", default=None, help="Bot log to replay"),
        click.option("--output", "output_path", default=None, help="Report file to overwrite"),
        click.option("--window", "window_seconds", type=float, default=None, help="Trade window (seconds)"),
        click.option("--csv", "csv_path", default=None, help="Also write per-variant rows as CSV"),
        click.option("--json", "json_path", default=None, help="Also write the full run as JSON"),
        click.option("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR"),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def _load(config: str | None, log_level: str | None, **overrides: Any) -> Settings:
    from .observability.logger import setup_logging

    try:
        settings = load_settings(config_path=config, overrides=overrides)
    except ConfigError as exc:
        click.echo(f"Config error: {exc}", err=True)
        sys.exit(2)

    setup_logging(
        level=log_level or settings.observability.log_level,
        format=settings.observability.log_format,
    )
    return settings


@click.group()
def main() -> None:
    """Replay bot logs and compare ladder strategies against real trades."""


@main.command()
@_common_options
def run(
    config: str | None,
    log_path: str | None,
    output_path: str | None,
    window_seconds: float | None,
    csv_path: str | None,
    json_path: str | None,
    log_level: str | None,
) -> None:
    """Build the report once."""
    from .main import run_once

    settings = _load(
        config, log_level,
        log_path=log_path, output_path=output_path, window_seconds=window_seconds,
    )
    try:
        run_once(settings, csv_path=csv_path, json_path=json_path)
    except BacktestError as exc:
        click.echo(f"[backtest] failed: {exc}", err=True)
        sys.exit(1)
    click.echo(f"[backtest] wrote {settings.output_path}")


@main.command()
@_common_options
@click.option("--interval", "interval_seconds", type=float, default=None, help="Seconds between runs")
def watch(
    config: str | None,
    log_path: str | None,
    output_path: str | None,
    window_seconds: float | None,
    csv_path: str | None,
    json_path: str | None,
    log_level: str | None,
    interval_seconds: float | None,
) -> None:
    """Rebuild the report on a fixed interval until interrupted."""
    from .main import run_forever

    settings = _load(
        config, log_level,
        log_path=log_path, output_path=output_path,
        window_seconds=window_seconds, interval_seconds=interval_seconds,
    )
    try:
        run_forever(settings, csv_path=csv_path, json_path=json_path)
    except KeyboardInterrupt:
        click.echo("[backtest] stopped")


if __name__ == "__main__":
    main()
