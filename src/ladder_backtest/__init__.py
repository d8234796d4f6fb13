"""Ladder strategy backtester over reconstructed bot trades."""

__version__ = "0.1.0"
