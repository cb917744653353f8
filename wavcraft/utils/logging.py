"""
Logging setup for WavCraft.

Terminal output is plain or colored text by default; log files are
always one JSON object per line. Batch workflows attach a context dict
(operation, output directory) that the JSON formatter carries through.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional, Tuple

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# ANSI SGR color per level
LEVEL_COLORS: Dict[str, int] = {
    "DEBUG": 36,
    "INFO": 32,
    "WARNING": 33,
    "ERROR": 31,
    "CRITICAL": 35,
}


class JSONFormatter(logging.Formatter):
    """
    Renders each record as a single-line JSON object.

    Keys: timestamp (UTC, ``Z`` suffix), level, logger, message and
    source location; ``exception`` and ``context`` appear when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        context = getattr(record, "context", None)
        if context:
            payload["context"] = context

        return json.dumps(payload, default=str)


class ColoredFormatter(logging.Formatter):
    """Text formatter that wraps the level name in an ANSI color."""

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        code = LEVEL_COLORS.get(levelname)
        if code is not None:
            record.levelname = f"\033[{code}m{levelname}\033[0m"
        try:
            return super().format(record)
        finally:
            # Other handlers see the same record
            record.levelname = levelname


def _console_formatter(log_format: str, colored: bool) -> logging.Formatter:
    if log_format == "json":
        return JSONFormatter()
    if colored:
        return ColoredFormatter(TEXT_FORMAT, DATE_FORMAT)
    return logging.Formatter(TEXT_FORMAT, DATE_FORMAT)


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,
    backup_count: int = 5,
    console_enabled: bool = True,
    colored: bool = True,
) -> None:
    """
    Replace the root logger's handlers.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Console format, "json" or "text"
        log_file: Optional path of a rotating JSON log file
        max_bytes: Rotation threshold for the log file
        backup_count: Rotated files to keep
        console_enabled: Emit to stderr
        colored: Color level names in text console output
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    root.handlers = []

    # stdout carries command output
    if console_enabled:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(_console_formatter(log_format, colored))
        root.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
        rotating.setFormatter(JSONFormatter())
        root.addHandler(rotating)


def configure_from_section(section: Mapping[str, Any], verbose: bool = False) -> None:
    """Apply the ``logging`` config section; *verbose* forces DEBUG."""
    setup_logging(
        level="DEBUG" if verbose else section.get("level", "INFO"),
        log_format=section.get("format", "text"),
        log_file=section.get("file"),
        max_bytes=section.get("max_bytes", 10485760),
        backup_count=section.get("backup_count", 5),
    )


def get_logger(name: str) -> logging.Logger:
    """Module logger; pass ``__name__``."""
    return logging.getLogger(name)


class ContextAdapter(logging.LoggerAdapter):
    """
    Adds a fixed context dict to every record as ``record.context``.

    A per-call ``extra={"context": {...}}`` is merged over the fixed one.
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> Tuple[str, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        context = dict(self.extra or {})
        context.update(extra.pop("context", {}))
        extra["context"] = context
        kwargs["extra"] = extra
        return msg, kwargs


def create_logger_with_context(name: str, context: Dict[str, Any]) -> ContextAdapter:
    """
    Logger whose records all carry *context*.

    Example:
        log = create_logger_with_context(
            "wavcraft.core.batch_processor", {"operation": "batch_process"}
        )
        log.info("Processing 12 files")
    """
    return ContextAdapter(get_logger(name), context)
