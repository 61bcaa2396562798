# meterload/logging_config.py
import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"

# Level names accepted on the command line, mapped to logging names
LEVEL_ALIASES = {
    "DEBUG": "DEBUG",
    "INFO": "INFO",
    "WARN": "WARNING",
    "WARNING": "WARNING",
    "ERR": "ERROR",
    "ERROR": "ERROR",
}


def normalize_level(level: str | int) -> str | int:
    """Map a command line level name to a logging level; numeric levels pass through."""
    if isinstance(level, int):
        return level
    try:
        return LEVEL_ALIASES[level.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level!r}") from None


def setup_logging(level: str | int = "INFO", log_file: str | None = None) -> logging.Logger:
    """
    Configure logging to print to stdout by default.
    If log_file is provided, also log to that file.
    """
    logger = logging.getLogger()
    logger.setLevel(normalize_level(level))

    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info(f"Logging to file: {log_file}")

    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.error("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))

    sys.excepthook = handle_exception

    return logger
