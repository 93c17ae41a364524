# src/config/logging_config.py

"""Per-run logging for pricecompare commands.

Every CLI invocation writes a DEBUG-level file ``logs/run_<ts>.log``
shared by all ``pricecompare.*`` loggers, and echoes warnings (or the
level named by ``PRICE_COMPARE_LOG_LEVEL``) to stderr so stdout stays
reserved for command output.  Only the newest ``Settings.LOG_KEEP_RUNS``
run logs are kept.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

ROOT_LOGGER_NAME = "pricecompare"

logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.logging")

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    if isinstance(level, int):
        return level
    return logging.WARNING


def _file_handler(log_file: Path) -> logging.Handler:
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    return handler


def prune_run_logs(logs_dir: Path, keep: int) -> list[Path]:
    """Delete all but the newest *keep* run logs and return the removed paths.

    Run log names embed their start time, so name order is age order.
    """
    runs = sorted(logs_dir.glob("run_*.log"))
    removed: list[Path] = []
    for path in runs[:-max(keep, 1)]:
        try:
            path.unlink()
        except OSError as exc:
            logger.warning("Could not remove old run log %s: %s", path, exc)
            continue
        removed.append(path)
    return removed


def setup_logging(console_level: int | None = None) -> Path:
    """Attach the run-log and stderr handlers to the ``pricecompare`` logger.

    *console_level* overrides ``Settings.LOG_CONSOLE_LEVEL``.  Calling
    again in the same process keeps the existing handlers and returns
    the log file already in use.

    Returns:
        The :class:`~pathlib.Path` of this run's log file.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)

    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)

    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"run_{stamp}.log"

    level = (
        console_level
        if console_level is not None
        else _level_from_name(Settings.LOG_CONSOLE_LEVEL)
    )
    root_logger.addHandler(_file_handler(log_file))
    root_logger.addHandler(_console_handler(level))

    removed = prune_run_logs(logs_dir, Settings.LOG_KEEP_RUNS)
    root_logger.debug(
        "Run log %s opened (console level %s, pruned %d old logs)",
        log_file.name,
        logging.getLevelName(level),
        len(removed),
    )
    return log_file
