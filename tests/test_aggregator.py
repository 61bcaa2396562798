import math
import random

import pytest

from meterload.aggregator import (
    EmptyMeasurementsError,
    aggregate,
    build_series,
    compute_duration_stats,
)
from meterload.models import Measurement


def test_single_second_bucket():
    measurements = [
        Measurement(1000.05, 0.1),
        Measurement(1000.40, 0.2),
        Measurement(1000.99, 0.3),
    ]
    series, stats = aggregate(measurements)

    assert series == {1000: 3}
    assert stats.count == 3
    assert stats.min == 0.1
    assert stats.max == 0.3
    assert stats.mean == pytest.approx(0.2)
    assert stats.std == pytest.approx(math.sqrt((0.1**2 + 0 + 0.1**2) / 3))
    assert stats.std == pytest.approx(0.0816, abs=1e-4)


def test_distinct_seconds_are_sorted():
    # two workers, two iterations each, handed over out of order
    worker_1 = [Measurement(2002.3, 0.5), Measurement(2003.1, 0.5)]
    worker_2 = [Measurement(2000.7, 0.25), Measurement(2001.2, 0.25)]
    series, _ = aggregate(worker_1 + worker_2)

    assert list(series.items()) == [(2000, 1), (2001, 1), (2002, 1), (2003, 1)]


def test_empty_input_signals_instead_of_nan():
    with pytest.raises(EmptyMeasurementsError):
        aggregate([])
    with pytest.raises(EmptyMeasurementsError):
        compute_duration_stats([])


def test_series_is_sparse():
    series = build_series([Measurement(10.0, 1.0), Measurement(15.5, 1.0)])
    assert series == {10: 1, 15: 1}
    assert 0 not in series.values()


def test_counts_sum_to_measurement_total():
    rng = random.Random(7)
    workers, iterations = 4, 25
    measurements = [
        Measurement(1_700_000_000 + rng.uniform(0, 30), rng.uniform(0.001, 2.0))
        for _ in range(workers * iterations)
    ]
    series, stats = aggregate(measurements)

    assert sum(series.values()) == workers * iterations
    assert stats.count == workers * iterations
    keys = list(series)
    assert keys == sorted(set(keys))


def test_statistics_invariants():
    rng = random.Random(11)
    for _ in range(50):
        durations = [rng.uniform(0.0, 5.0) for _ in range(rng.randint(1, 40))]
        stats = compute_duration_stats(durations)
        assert stats.min <= stats.mean <= stats.max
        assert stats.std >= 0


def test_identical_durations_have_zero_spread():
    assert compute_duration_stats([0.1, 0.1, 0.1]).std == 0.0
    stats = compute_duration_stats([0.1] * 7)
    assert stats.min == stats.mean == stats.max == 0.1


def test_population_not_sample_deviation():
    stats = compute_duration_stats([1.0, 3.0])
    assert stats.std == 1.0


def test_aggregation_is_deterministic():
    rng = random.Random(3)
    measurements = [Measurement(rng.uniform(0, 100), rng.uniform(0, 1)) for _ in range(200)]
    assert aggregate(measurements) == aggregate(list(measurements))
