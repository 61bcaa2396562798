__all__ = [
    "LoadHarness",
    "RunConfig",
    "ConnectionMode",
    "Measurement",
    "DurationStatistics",
    "EmptyMeasurementsError",
    "aggregate",
]


from .aggregator import EmptyMeasurementsError, aggregate
from .core import LoadHarness
from .models import ConnectionMode, DurationStatistics, Measurement, RunConfig
