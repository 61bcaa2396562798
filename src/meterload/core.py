import itertools
import logging
import multiprocessing
from collections.abc import Callable
from multiprocessing.connection import Connection
from multiprocessing.process import BaseProcess

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .aggregator import EmptyMeasurementsError, aggregate
from .models import AggregatedSeries, DurationStatistics, Measurement, RunConfig
from .persistence import ResultWriter
from .rendering import render_arrival_series, render_rate_distribution
from .worker import run_worker_process

# (identity, config, write_end, log_level: int, log_file) -> None, run in the child process
WorkerEntry = Callable[..., None]


class LoadHarness:
    """
    Runs one load test: starts ``config.workers`` worker processes, harvests
    their measurements, aggregates them and writes the ``.csv``/``.stat`` pair.
    """

    def __init__(
        self,
        config: RunConfig,
        logger: logging.Logger | None = None,
        writer: ResultWriter | None = None,
        collect_timeout_s: float | None = None,
        start_method: str | None = None,
        use_progress_bar: bool = False,
        render_summary: bool = False,
        log_file: str | None = None,
        worker_entry: WorkerEntry = run_worker_process,
    ) -> None:
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.writer = writer or ResultWriter(logger=self.logger)
        self.collect_timeout_s = collect_timeout_s
        self.use_progress_bar = use_progress_bar
        self.render_summary = render_summary
        self.log_file = log_file
        self.worker_entry = worker_entry

        self._ctx = multiprocessing.get_context(start_method)
        self._processes: list[BaseProcess] = []
        self._pipes: list[Connection] = []
        self._results: list[list[Measurement]] = []
        self.measurements: list[Measurement] = []

    # ────────────────────────────────
    # Main Runner
    # ────────────────────────────────

    def run(self) -> tuple[AggregatedSeries, DurationStatistics | None]:
        self.logger.info(
            f"Starting load run: workers={self.config.workers}, "
            f"iterations={self.config.iterations}, "
            f"target={self.config.host}:{self.config.port}, "
            f"connection_mode={self.config.connection_mode.value}"
        )
        try:
            self._spawn_and_collect()
        except (KeyboardInterrupt, SystemExit) as e:
            self.logger.error(f"Got {type(e).__name__} {e}; finalizing with results collected so far")
        except Exception as e:
            self.logger.exception(f"Got Exception {e}; finalizing with results collected so far")
        finally:
            for conn in self._pipes:
                if not conn.closed:
                    conn.close()

        self.measurements = list(itertools.chain.from_iterable(self._results))
        self.logger.info(
            f"Collected {len(self.measurements)} measurements from "
            f"{len(self._results)}/{self.config.workers} workers"
        )

        try:
            series, stats = aggregate(self.measurements)
        except EmptyMeasurementsError as e:
            self.logger.warning(f"{e}; writing empty outputs")
            series, stats = {}, None

        try:
            self.writer.write(
                self.config.output_dir,
                series,
                stats,
                self.config.workers,
                self.config.iterations,
            )
        except OSError as e:
            self.logger.exception(f"Failed to write results to {self.config.output_dir}: {e}")

        if stats is not None:
            self.logger.info(
                f"durations min = {stats.min} max = {stats.max} "
                f"avg = {stats.mean} std = {stats.std}"
            )

        if self.render_summary:
            print("\n" + "=" * 60)
            print(render_arrival_series(series))
            print()
            print(render_rate_distribution(series))
            print("=" * 60)

        return series, stats

    # ────────────────────────────────
    # Worker Lifecycle
    # ────────────────────────────────

    def _spawn_and_collect(self) -> None:
        for identity in range(1, self.config.workers + 1):
            self.logger.debug(f"Starting worker {identity}")
            self._start_worker(identity)

        progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            disable=not self.use_progress_bar,
        )
        with progress:
            task_id = progress.add_task("[cyan]Collecting worker results...", total=len(self._processes))
            # Spawn order, not completion order
            for identity, (process, conn) in enumerate(zip(self._processes, self._pipes), start=1):
                self._results.append(self._harvest(identity, process, conn))
                progress.advance(task_id)

    def _start_worker(self, identity: int) -> None:
        # The pipe must exist before the child does
        read_end, write_end = self._ctx.Pipe(duplex=False)
        process = self._ctx.Process(
            target=self.worker_entry,
            args=(identity, self.config, write_end, self.logger.getEffectiveLevel(), self.log_file),
            name=f"meterload-worker-{identity}",
        )
        try:
            process.start()
        except BaseException:
            read_end.close()
            write_end.close()
            raise
        # Only the child holds the write end now, so its exit means EOF for us
        write_end.close()

        self._processes.append(process)
        self._pipes.append(read_end)

    def _harvest(self, identity: int, process: BaseProcess, conn: Connection) -> list[Measurement]:
        results: list[Measurement] = []
        try:
            if self.collect_timeout_s is not None and not conn.poll(self.collect_timeout_s):
                self.logger.error(
                    f"Worker {identity} (pid {process.pid}) sent no results within "
                    f"{self.collect_timeout_s}s; terminating it"
                )
                process.terminate()
            else:
                results = conn.recv()
        except EOFError:
            self.logger.error(f"Worker {identity} (pid {process.pid}) exited without reporting results")
        finally:
            conn.close()

        self.logger.debug(f"Waiting for worker {identity} (pid {process.pid})")
        process.join()
        self.logger.debug(
            f"Worker {identity} returned {len(results)} measurements (exit code {process.exitcode})"
        )
        return results
