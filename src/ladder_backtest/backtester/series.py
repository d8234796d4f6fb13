"""Price path extraction and summary levels for a reconstructed trade."""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import datetime

from ..core.models import Levels, MetricSample, PriceSample


def build_price_series(
    samples: Iterable[MetricSample],
    start: datetime,
    end: datetime,
) -> list[PriceSample]:
    """Samples with a finite price inside ``[start, end]``, in log order."""
    return [
        PriceSample(timestamp=s.timestamp, price=s.price)
        for s in samples
        if start <= s.timestamp <= end
        and s.price is not None
        and math.isfinite(s.price)
    ]


def compute_levels(series: list[PriceSample]) -> Levels | None:
    """Min / mid / max of the path, or None for an empty path.

    ``mid`` is the sorted element at index ``len // 2``, not an averaged
    median. A zero ``mid`` reports a zero range.
    """
    if not series:
        return None
    values = sorted(p.price for p in series)
    low = values[0]
    high = values[-1]
    mid = values[len(values) // 2]
    range_pct = (high - low) / mid * 100 if mid else 0.0
    return Levels(min_price=low, mid_price=mid, max_price=high, range_pct=range_pct)
