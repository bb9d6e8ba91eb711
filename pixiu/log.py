"""Application and access logging with console-style lines and file rotation."""

from __future__ import annotations

import gzip
import logging
import os
import shutil
import sys
import time
from dataclasses import dataclass
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
_DEFAULT_MAX_SIZE_MB = 100
_MEGABYTE = 1024 * 1024

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "dpanic": logging.CRITICAL,
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
}

logger: logging.Logger = logging.getLogger("pixiu")
access_log: logging.Logger = logging.getLogger("pixiu.access")


@dataclass
class LogConfig:
    """How and where a logger writes."""

    log_type: str = "stdout"
    log_file: str = ""
    log_level: str = "info"
    rotate_max_size: int = 500  # megabytes
    rotate_max_age: int = 7  # days
    rotate_max_backups: int = 3
    compress: bool = False


def _level_name(levelno: int) -> str:
    if levelno >= logging.CRITICAL:
        return "fatal"
    if levelno >= logging.ERROR:
        return "error"
    if levelno >= logging.WARNING:
        return "warn"
    if levelno >= logging.INFO:
        return "info"
    return "debug"


class ConsoleFormatter(logging.Formatter):
    """Formats records as tab-separated time, level, caller and message."""

    def format(self, record: logging.LogRecord) -> str:
        when = datetime.fromtimestamp(record.created).strftime(TIME_FORMAT)
        path = Path(record.pathname)
        caller = f"{path.parent.name}/{path.name}:{record.lineno}"
        line = "\t".join((when, _level_name(record.levelno), caller, record.getMessage()))
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class _RotatingHandler(RotatingFileHandler):
    """Size-based rotation with optional gzip and age-based pruning of backups."""

    def __init__(self, config: LogConfig) -> None:
        max_size = config.rotate_max_size or _DEFAULT_MAX_SIZE_MB
        Path(config.log_file).parent.mkdir(parents=True, exist_ok=True)
        super().__init__(
            config.log_file,
            maxBytes=max_size * _MEGABYTE,
            backupCount=config.rotate_max_backups,
            encoding="utf-8",
            delay=True,
        )
        self.max_age = config.rotate_max_age
        if config.compress:
            self.namer = lambda name: name + ".gz"
            self.rotator = _gzip_rotate

    def doRollover(self) -> None:
        super().doRollover()
        if self.max_age <= 0:
            return
        base = Path(self.baseFilename)
        cutoff = time.time() - self.max_age * 86400
        for backup in base.parent.glob(base.name + ".*"):
            try:
                if backup.stat().st_mtime < cutoff:
                    backup.unlink()
            except OSError:
                continue


def _gzip_rotate(source: str, dest: str) -> None:
    with open(source, "rb") as src, gzip.open(dest, "wb") as dst:
        shutil.copyfileobj(src, dst)
    os.remove(source)


def _parse_level(name: str) -> int:
    lowered = name.lower()
    if lowered not in _LEVELS or name not in (lowered, name.upper()):
        raise ValueError(f"unrecognized level: {name!r}")
    return _LEVELS[lowered]


def new_logger(config: LogConfig) -> logging.Logger:
    """Build a logger writing to stdout, stderr or a rotating file."""
    level = _parse_level(config.log_level)
    kind = config.log_type.lower()
    if kind == "stderr":
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
    elif kind == "file":
        handler = _RotatingHandler(config)
    else:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ConsoleFormatter())

    result = logging.Logger("pixiu")
    result.setLevel(level)
    result.propagate = False
    result.addHandler(handler)
    return result


def register(log_type: str, log_dir: str, log_level: str) -> None:
    """Set up the module-wide application and access loggers."""
    global logger, access_log

    level = "info"
    if log_level.lower() == "error":
        level = "error"
    elif log_level.lower() == "warn":
        level = "warn"

    access_log = new_logger(
        LogConfig(
            log_type=log_type,
            log_file=os.path.join(log_dir, "access.log"),
            log_level="info",
            rotate_max_size=500,
            rotate_max_age=7,
            rotate_max_backups=3,
        )
    )
    logger = new_logger(
        LogConfig(
            log_type=log_type,
            log_file=os.path.join(log_dir, "pixiu.log"),
            log_level=level,
            rotate_max_size=500,
            rotate_max_age=7,
            rotate_max_backups=3,
        )
    )