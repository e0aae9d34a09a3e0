from __future__ import annotations
import logging
import sys
import json
from typing import Any, Dict, Optional, TextIO, TYPE_CHECKING
from datetime import datetime, timezone
from pathlib import Path

if TYPE_CHECKING:
    from config.settings import Settings

# Attributes every LogRecord carries; anything else was passed through ``extra=``
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

# Third-party loggers that are noisy at INFO
QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "fastapi", "aiohttp", "trafilatura", "htmldate")

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
CONSOLE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


class JSONFormatter(logging.Formatter):
    """One JSON object per line; ``extra=`` fields are merged in at the top level."""

    def __init__(self, service_name: str = "orgdocs"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_entry = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        log_entry.update(_extra_fields(record))

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Human-readable console lines, colored by level when attached to a terminal."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(fmt=CONSOLE_FORMAT, datefmt=CONSOLE_DATE_FORMAT)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = self.COLORS.get(record.levelname) if self.use_colors else None
        if color is None:
            return message

        # Only the first line is colored; tracebacks stay plain
        first, sep, rest = message.partition("\n")
        return f"{color}{first}{self.RESET}{sep}{rest}"


def setup_logging(
    level: str = "INFO",
    service_name: str = "orgdocs",
    log_file: Optional[str] = None,
    use_json: bool = False,
    use_colors: bool = True,
    stream: Optional[TextIO] = None
) -> None:
    """Replace the root logger's handlers.

    Args:
        level: Log level name; unknown names fall back to INFO
        service_name: ``service`` field of JSON lines
        log_file: Optional path; file output is always JSON
        use_json: JSON on the console instead of colored text
        use_colors: Color console lines (ignored with ``use_json``)
        stream: Console stream, stdout by default. The MCP stdio server
                must pass stderr since stdout carries the protocol.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setFormatter(JSONFormatter(service_name) if use_json else ColoredFormatter(use_colors))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(JSONFormatter(service_name))
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def configure_logging(settings: "Settings", stream: Optional[TextIO] = None,
                      level: Optional[str] = None) -> None:
    """``setup_logging`` driven by the ORGDOCS_LOG_* settings."""
    console = stream or sys.stderr
    setup_logging(
        level=level or settings.log_level,
        log_file=settings.log_file,
        use_json=settings.log_json,
        use_colors=console.isatty(),
        stream=console
    )
