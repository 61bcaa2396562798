"""
Quick sanity run: a few workers against a meter server on localhost.
Run: uv run examples/run_local_load.py
"""
import os

from meterload import ConnectionMode, LoadHarness, RunConfig
from meterload.logging_config import setup_logging


def main():
    setup_logging(level=os.getenv("LOG_LEVEL", "INFO"))
    config = RunConfig(
        workers=4,
        iterations=25,
        host=os.getenv("METER_HOST", "127.0.0.1"),
        port=int(os.getenv("METER_PORT", "8080")),
        connection_mode=ConnectionMode.REUSE,
        output_dir="./results",
    )
    series, stats = LoadHarness(config, use_progress_bar=True, render_summary=True).run()
    print("\nStats:", stats)
    print("Seconds covered:", len(series))


if __name__ == "__main__":
    main()
