"""Custom exception hierarchy for the ladder backtester."""


class BacktestError(Exception):
    """Base exception for all ladder backtester errors."""


# --- Configuration ---
class ConfigError(BacktestError):
    """Invalid or missing configuration."""


# --- Data ---
class DataError(BacktestError):
    """Log ingestion error."""


class LogFileMissingError(DataError):
    """The bot log does not exist at the configured path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Missing log file: {path}")


# --- Simulation ---
class SimulationError(BacktestError):
    """Ladder simulation refused its input."""


class EmptySeriesError(SimulationError):
    """Simulation was given no price samples."""


class NonPositivePriceError(SimulationError):
    """A price in the series is zero, negative, or not finite."""

    def __init__(self, index: int, price: float):
        self.index = index
        self.price = price
        super().__init__(
            f"Non-positive price {price!r} at sample {index}"
        )
