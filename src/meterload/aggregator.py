import logging
from collections import defaultdict
from collections.abc import Sequence

from .metrics import mean, standard_deviation
from .models import AggregatedSeries, DurationStatistics, Measurement

logger = logging.getLogger(__name__)


class EmptyMeasurementsError(ValueError):
    """Raised when statistics are requested over zero measurements."""


def build_series(measurements: Sequence[Measurement]) -> AggregatedSeries:
    counts: dict[int, int] = defaultdict(int)
    for m in measurements:
        counts[int(m.timestamp)] += 1
    # Writers rely on ascending key order
    return {second: counts[second] for second in sorted(counts)}


def compute_duration_stats(durations: Sequence[float]) -> DurationStatistics:
    if not durations:
        raise EmptyMeasurementsError("no durations to summarize")

    lo = min(durations)
    hi = max(durations)
    # float rounding can push the mean just outside [lo, hi]
    mu = min(max(mean(durations), lo), hi)
    std = standard_deviation(durations, mu)

    return DurationStatistics(count=len(durations), min=lo, max=hi, mean=mu, std=std)


def aggregate(
    measurements: Sequence[Measurement],
) -> tuple[AggregatedSeries, DurationStatistics]:
    if not measurements:
        raise EmptyMeasurementsError("no measurements were collected")

    series = build_series(measurements)
    stats = compute_duration_stats([m.duration for m in measurements])

    logger.debug(
        f"Aggregated {stats.count} measurements over {len(series)} seconds: "
        f"min={stats.min:.4f}s max={stats.max:.4f}s mean={stats.mean:.4f}s std={stats.std:.4f}s"
    )
    return series, stats
