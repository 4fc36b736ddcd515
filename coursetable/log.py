"""
Logging setup.

Log lines go to one file per day:

    <log_dir>/2024-09-02.log

with the format

    [2024-09-02 08:15:00.123] [INFO] message

Writing a log line must never break the caller: failures while writing are
passed to logging's standard handleError() and otherwise ignored.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from pathlib import Path

LOGGER_NAME = "coursetable"


class _UTCFormatter(logging.Formatter):
    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return dt.strftime("%Y-%m-%d %H:%M:%S.") + f"{int(record.msecs):03d}"


class DailyFileHandler(logging.Handler):
    """
    Append records to <log_dir>/<UTC date>.log, switching files at midnight UTC.
    """

    def __init__(self, log_dir: str | Path, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.log_dir = Path(log_dir)
        self.setFormatter(_UTCFormatter("[%(asctime)s] [%(levelname)s] %(message)s"))

    def path_for(self, created: float) -> Path:
        day = time.strftime("%Y-%m-%d", time.gmtime(created))
        return self.log_dir / f"{day}.log"

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record)
            path = self.path_for(record.created)
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        except Exception:
            self.handleError(record)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Return the package logger, or one of its children ("coursetable.<name>").
    """
    if not name:
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def init_logger(log_dir: str | Path, level: int = logging.INFO) -> logging.Logger:
    """
    Attach a DailyFileHandler for log_dir to the package logger.

    Calling it again with the same directory does not add a second handler.
    """
    logger = get_logger()
    logger.setLevel(level)

    target = Path(log_dir)
    for h in logger.handlers:
        if isinstance(h, DailyFileHandler) and h.log_dir == target:
            return logger

    logger.addHandler(DailyFileHandler(target))
    return logger
