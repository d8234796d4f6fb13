"""Ladder backtesting over reconstructed trade price paths."""

from .ladder import simulate_ladder, simulate_variants
from .results import VariantBreakdown, compute_variant_breakdown
from .series import build_price_series, compute_levels

__all__ = [
    "simulate_ladder",
    "simulate_variants",
    "VariantBreakdown",
    "compute_variant_breakdown",
    "build_price_series",
    "compute_levels",
]
