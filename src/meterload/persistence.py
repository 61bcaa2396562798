import logging
import os

from .models import AggregatedSeries, DurationStatistics

SEP = ","


def output_file_stem(workers: int, iterations: int) -> str:
    return f"test_{workers}_{iterations}"


class ResultWriter:
    """Persists a run as ``test_<workers>_<iterations>.csv`` and ``.stat``."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)

    def write(
        self,
        output_dir: str,
        series: AggregatedSeries,
        stats: DurationStatistics | None,
        workers: int,
        iterations: int,
    ) -> tuple[str, str]:
        output_dir = output_dir or os.curdir
        os.makedirs(output_dir, exist_ok=True)
        stem = os.path.join(output_dir, output_file_stem(workers, iterations))
        csv_path = stem + ".csv"
        stat_path = stem + ".stat"

        with open(csv_path, "w", encoding="utf-8") as out:
            self.write_series(out, series)
        self.logger.info(f"Arrival series ({len(series)} seconds) written to {csv_path}")

        with open(stat_path, "w", encoding="utf-8") as out:
            self.write_stats(out, stats)
        self.logger.info(f"Duration statistics written to {stat_path}")

        return csv_path, stat_path

    @staticmethod
    def write_series(out, series: AggregatedSeries) -> None:
        for second in sorted(series):
            out.write(f"{second}{SEP}{series[second]}\n")
            out.flush()

    @staticmethod
    def write_stats(out, stats: DurationStatistics | None) -> None:
        if stats is None:
            values = ("", "", "", "")
        else:
            values = (stats.min, stats.max, stats.mean, stats.std)
        for label, value in zip(("min", "max", "avg", "std"), values):
            out.write(f"{label} = {value}\n")
        out.flush()
