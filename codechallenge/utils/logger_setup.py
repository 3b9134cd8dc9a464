from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path

CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(filename)s:%(lineno)d] %(message)s"

# third-party loggers and the level they are capped at
THIRD_PARTY_LEVELS = {
    "discord": logging.WARNING,
    "discord.gateway": logging.ERROR,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}


class _ColorFormatter(logging.Formatter):
    COLORS = {
        logging.DEBUG: "\033[90m",
        logging.INFO: "\033[94m",
        logging.WARNING: "\033[93m",
        logging.ERROR: "\033[91m",
        logging.CRITICAL: "\033[95m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # copy so the file handler still sees the plain level name
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelno, self.RESET)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        record.name = record.name.removeprefix("codechallenge.")
        return super().format(record)


class _DropGatewayNoise(logging.Filter):
    DROP_SUBSTRINGS = (
        "logging in using static token",
        "has connected to Gateway",
        "has successfully RESUMED",
    )

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        return not any(s in msg for s in self.DROP_SUBSTRINGS)


def _level(name: str, default: int) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else default


def _console_handler(level: int) -> logging.Handler:
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(_ColorFormatter(fmt=CONSOLE_FORMAT))
    ch.addFilter(_DropGatewayNoise())
    return ch


def _file_handler(path: Path, level: int) -> logging.Handler:
    fh = logging.handlers.RotatingFileHandler(
        filename=str(path),
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return fh


def setup_logging(
    *,
    log_dir: str = "logs",
    log_file: str = "codechallenge.log",
    console_level: str = "INFO",
    file_level: str = "DEBUG",
) -> Path:
    """
    Console (colored) + rotating file logging on the root logger.

    Safe to call twice: existing root handlers are replaced.
    Returns the log file path.
    """
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    log_path = Path(log_dir) / log_file

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    root.addHandler(_console_handler(_level(console_level, logging.INFO)))
    root.addHandler(_file_handler(log_path, _level(file_level, logging.DEBUG)))

    for name, level in THIRD_PARTY_LEVELS.items():
        logging.getLogger(name).setLevel(level)

    root.debug("Logging initialized. log_path=%s", log_path.resolve())
    return log_path
