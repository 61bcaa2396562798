from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ConnectionMode(str, Enum):
    REUSE = "REUSE"
    PER_REQUEST = "PER_REQUEST"

    @classmethod
    def parse(cls, value: str | None) -> "ConnectionMode":
        """Accept both our names and the REUSE_SESSION/NO_REUSE_SESSION spellings."""
        if value is None:
            return cls.PER_REQUEST
        normalized = value.strip().upper()
        if normalized in ("REUSE", "REUSE_SESSION"):
            return cls.REUSE
        return cls.PER_REQUEST


class RunConfig(BaseModel):
    """Parameters of one load run, shared read-only by every worker."""

    model_config = ConfigDict(frozen=True)

    workers: int = Field(gt=0)
    iterations: int = Field(gt=0)
    host: str = Field(min_length=1)
    port: int = Field(gt=0, lt=65536)
    connection_mode: ConnectionMode = ConnectionMode.PER_REQUEST
    output_dir: str = Field(min_length=1)

    @property
    def fresh_connection(self) -> bool:
        return self.connection_mode is ConnectionMode.PER_REQUEST


@dataclass(frozen=True)
class Measurement:
    timestamp: float
    duration: float


@dataclass(frozen=True)
class DurationStatistics:
    count: int
    min: float
    max: float
    mean: float
    std: float


@dataclass(frozen=True)
class RequestOutcome:
    # status is None when no response was received at all
    status: int | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# Truncated epoch second -> number of requests started in that second
AggregatedSeries = dict[int, int]
