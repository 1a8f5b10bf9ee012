"""Per-pattern duration statistics."""

from __future__ import annotations

import random
from collections.abc import Mapping
from typing import Iterable, Optional

from ..utils.logger import get_logger
from .models import PatternStats, PerformanceReport, PerformanceSample
from .normalize import normalize_dynamic_path

logger = get_logger(__name__)

RESERVOIR_SEED = 0


class _PatternBucket:
    """Exact count/min/max/sum plus a bounded reservoir for order statistics."""

    __slots__ = ("count", "total", "minimum", "maximum", "reservoir", "capacity")

    def __init__(self, capacity: int):
        self.count = 0
        self.total = 0.0
        self.minimum = None
        self.maximum = None
        self.reservoir: list[float] = []
        self.capacity = capacity

    def add(self, duration: float, rng: random.Random) -> None:
        self.count += 1
        self.total += duration
        self.minimum = duration if self.minimum is None else min(self.minimum, duration)
        self.maximum = duration if self.maximum is None else max(self.maximum, duration)

        if len(self.reservoir) < self.capacity:
            self.reservoir.append(duration)
        else:
            slot = rng.randrange(self.count)
            if slot < self.capacity:
                self.reservoir[slot] = duration

    def stats(self) -> PatternStats:
        ordered = sorted(self.reservoir)
        return PatternStats(
            count=self.count,
            min=self.minimum,
            max=self.maximum,
            avg=self.total / self.count,
            median=median(ordered),
            p95=percentile(ordered, 95),
            p99=percentile(ordered, 99),
        )


def median(ordered: list[float]) -> float:
    """Median of sorted values; even counts average the two middle values."""
    n = len(ordered)
    middle = n // 2
    if n % 2 == 0:
        return (ordered[middle - 1] + ordered[middle]) / 2
    return ordered[middle]


def percentile(ordered: list[float], p: float) -> float:
    """Percentile of sorted values by p*n/100 rank with linear interpolation.

    For [100, 200, ..., 1000]: p95 -> 950, p99 -> 990.
    """
    n = len(ordered)
    scaled = p * n
    k = int(scaled // 100)
    if k < 1:
        return ordered[0]
    if k >= n:
        return ordered[-1]
    lower, upper = ordered[k - 1], ordered[k]
    return lower + (upper - lower) * (scaled - k * 100) / 100


def _coerce_sample(sample) -> Optional[tuple[str, float]]:
    if isinstance(sample, PerformanceSample):
        path, duration = sample.path, sample.duration_ms
    elif isinstance(sample, Mapping):
        path, duration = sample.get("path"), sample.get("duration_ms")
    elif isinstance(sample, (tuple, list)) and len(sample) == 2:
        path, duration = sample
    else:
        return None

    if not isinstance(path, str):
        return None
    if not isinstance(duration, (int, float)) or isinstance(duration, bool):
        return None
    if duration < 0:
        return None
    return path, float(duration)


def analyze_path_performance(
    samples: Iterable,
    *,
    slow_threshold_ms: float = 1000,
    min_samples: int = 1,
    max_slowest: int = 10,
    max_samples_per_pattern: int = 10000,
    **normalize_options,
) -> PerformanceReport:
    """Group duration samples by route pattern and compute statistics.

    Samples are PerformanceSample objects, mappings with ``path`` and
    ``duration_ms``, or ``(path, duration_ms)`` pairs. Invalid or negative
    samples are skipped. Count, min, max and mean are exact; median and
    percentiles come from a deterministic reservoir of at most
    ``max_samples_per_pattern`` durations per pattern.

    A pattern is reported once it has ``min_samples`` samples, and is slow
    when its mean exceeds ``slow_threshold_ms``.
    """
    rng = random.Random(RESERVOIR_SEED)
    capacity = max(int(max_samples_per_pattern), 1)
    buckets: dict[str, _PatternBucket] = {}

    for sample in samples:
        coerced = _coerce_sample(sample)
        if coerced is None:
            logger.debug("invalid performance sample skipped", sample=repr(sample))
            continue
        path, duration = coerced
        pattern = normalize_dynamic_path(path, **normalize_options)
        bucket = buckets.get(pattern)
        if bucket is None:
            bucket = buckets[pattern] = _PatternBucket(capacity)
        bucket.add(duration, rng)

    groups = {
        pattern: bucket.stats()
        for pattern, bucket in buckets.items()
        if bucket.count >= min_samples
    }

    slow = [(pattern, stats) for pattern, stats in groups.items() if stats.avg > slow_threshold_ms]
    slow.sort(key=lambda item: item[1].avg, reverse=True)

    return PerformanceReport(
        total_patterns=len(groups),
        performance_groups=groups,
        slow_patterns=len(slow),
        slowest_routes=slow[:max(max_slowest, 0)],
    )
