import math
from collections.abc import Sequence


def total(values: Sequence[float]) -> float:
    return sum(values, 0.0)


def mean(values: Sequence[float]) -> float:
    if not values:
        raise ValueError("mean requires at least one value")
    return total(values) / len(values)


def population_variance(values: Sequence[float], mu: float | None = None) -> float:
    """
    Variance over the whole population: squared deviations divided by N.
    Pass ``mu`` to reuse an already computed mean.
    """
    if not values:
        raise ValueError("variance requires at least one value")
    if mu is None:
        mu = mean(values)
    return sum((x - mu) ** 2 for x in values) / len(values)


def standard_deviation(values: Sequence[float], mu: float | None = None) -> float:
    return math.sqrt(population_variance(values, mu))
