import asyncio
import logging
from multiprocessing.connection import Connection

from .client import HttpRequestClient
from .logging_config import setup_logging
from .models import Measurement, RunConfig
from .utils import now

logger = logging.getLogger(__name__)

MODULO_SOURCE = 200
METER_PATH_PREFIX = "/1.0/kb/meter"
CATEGORY = "visit"

REQUEST_HEADERS = {
    "Content-Type": "application/json",
    "Authorization": "Basic Ym9iOmxhemFy",
    "X-Killbill-CreatedBy": "meter_load_test",
}


def build_load_path(identity: int) -> str:
    """Stable per-worker path; the source key spreads workers over MODULO_SOURCE buckets."""
    source = f"{identity}_{identity % MODULO_SOURCE}"
    return f"{METER_PATH_PREFIX}/{source}/{CATEGORY}/load_{identity}?withCategoryAggregate=true"


class Worker:
    def __init__(
        self,
        identity: int,
        config: RunConfig,
        client: HttpRequestClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.identity = identity
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.client = client or HttpRequestClient(config.host, config.port, logger=self.logger)
        self.path = build_load_path(identity)
        self.measurements: list[Measurement] = []
        self.logger.debug(f"Starting worker {identity} with iterations = {config.iterations}")

    async def do_work(self) -> list[Measurement]:
        try:
            for _ in range(self.config.iterations):
                self.measurements.append(await self._do_one_iteration())
        finally:
            await self.client.close()
        return self.measurements

    async def _do_one_iteration(self) -> Measurement:
        before = now()
        await self.client.post(
            self.path,
            None,
            REQUEST_HEADERS,
            fresh_connection=self.config.fresh_connection,
        )
        after = now()
        call_time = after - before
        self.logger.debug(f"[W{self.identity}] request at {before:.6f} took {call_time:.4f}s")
        return Measurement(timestamp=before, duration=call_time)


def run_worker_process(
    identity: int,
    config: RunConfig,
    conn: Connection,
    log_level: int | str | None = None,
    log_file: str | None = None,
) -> None:
    """
    Entry point of a worker process: run the iterations on a private event
    loop and ship the measurements back over the write end of the pipe.
    """
    if log_level is not None:
        setup_logging(level=log_level, log_file=log_file)

    worker = Worker(identity, config)
    try:
        asyncio.run(worker.do_work())
    except Exception:
        logger.exception(
            f"[W{identity}] Worker failed after {len(worker.measurements)} of "
            f"{config.iterations} iterations; reporting partial results"
        )
    try:
        conn.send(worker.measurements)
    finally:
        conn.close()
