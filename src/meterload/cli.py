#!/usr/bin/env python3
# cli.py: command line entry point for meterload

import argparse
import logging
import sys

from pydantic import ValidationError

from meterload.core import LoadHarness
from meterload.logging_config import setup_logging
from meterload.models import ConnectionMode, RunConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meterload",
        description="Parallel load generator for the meter usage API",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Load shape
    parser.add_argument(
        "-N",
        "--nb-children",
        "--nb-childreen",
        dest="workers",
        type=int,
        required=True,
        help="Number of worker processes to run",
    )
    parser.add_argument(
        "-M",
        "--nb-iterations",
        dest="iterations",
        type=int,
        required=True,
        help="Number of sequential requests for each worker",
    )
    parser.add_argument(
        "-C",
        "--connection-mode",
        default="NO_REUSE_SESSION",
        choices=["REUSE_SESSION", "NO_REUSE_SESSION", "REUSE", "PER_REQUEST"],
        help="Reuse one connection per worker, or open one per request",
    )

    # Target
    parser.add_argument("-S", "--server-ip", dest="host", required=True, help="Meter server IP or host name")
    parser.add_argument("-P", "--server-port", dest="port", type=int, required=True, help="Meter server port")

    # Output
    parser.add_argument(
        "-D",
        "--output-directory",
        dest="output_dir",
        required=True,
        help="Directory receiving test_<N>_<M>.csv and .stat",
    )
    parser.add_argument(
        "--collect-timeout",
        type=float,
        default=None,
        help="Seconds to wait for each worker's results before giving up on it",
    )
    parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    parser.add_argument("--no-summary", action="store_true", help="Do not print the console summary")

    # Logging
    parser.add_argument(
        "-L",
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARN", "ERR"],
        help="Log level",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional file to write logs to (e.g., meterload.log)",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def build_config(args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        workers=args.workers,
        iterations=args.iterations,
        host=args.host,
        port=args.port,
        connection_mode=ConnectionMode.parse(args.connection_mode),
        output_dir=args.output_dir,
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)

    try:
        config = build_config(args)
    except ValidationError as e:
        logging.error(f"Invalid configuration: {e}")
        return 2

    logging.info(
        f"Start with server_ip = {config.host}, server_port = {config.port}, "
        f"nb_children = {config.workers}, nb_iterations = {config.iterations}, "
        f"connection_mode = {config.connection_mode.value}, "
        f"output_directory = {config.output_dir}, log_level = {args.log_level}"
    )

    harness = LoadHarness(
        config,
        collect_timeout_s=args.collect_timeout,
        use_progress_bar=not args.no_progress,
        render_summary=not args.no_summary,
        log_file=args.log_file,
    )
    series, stats = harness.run()

    if stats is not None:
        logging.info(
            f"Run completed: {stats.count} requests over {len(series)} seconds | "
            f"Mean latency: {stats.mean:.3f}s | Std: {stats.std:.3f}s"
        )
    else:
        logging.warning("Run completed without any measurements")
    return 0


if __name__ == "__main__":
    sys.exit(main())
