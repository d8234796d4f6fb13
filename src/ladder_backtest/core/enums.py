"""Enumerations used across the ladder backtester."""

from enum import Enum


class EventType(str, Enum):
    METRIC = "metric"
    BUY = "buy"
    SELL = "sell"


class ReconstructorState(str, Enum):
    IDLE = "idle"
    OPEN = "open"
    AWAITING_EXIT = "awaiting_exit"


class ExitReason(str, Enum):
    TAKE_PROFIT = "take_profit"
    HARD_STOP = "hard_stop"
    MARK_TO_MARKET = "mark_to_market"  # Forced close at last sample


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"
