"""
Logging configuration for decimath.

decimath modules only ever call ``structlog.get_logger(__name__)`` and log at
debug level (rejected inputs, detected locales, singular matrices). Nothing is
configured on import: an embedding application (or the test runner) calls
configure_logging() once.

Output routing:
- Console: human-readable lines, or JSON when ``json_console=True``
- File (optional): one JSON object per line in logs/decimath.log,
  rotated weekly, 52 weeks kept, rotated files gzip-compressed

Both handlers share one structlog processor chain and differ only in the final
renderer (structlog.stdlib.ProcessorFormatter), so records coming from plain
``logging`` calls are rendered the same way as structlog events.
"""
import gzip
import logging
import logging.handlers
import shutil
import sys
from pathlib import Path
from typing import Any, List, Optional

import structlog
from structlog.types import EventDict, Processor

from decimath.config import PROJECT_ROOT, get_settings

LOG_FILE_NAME = "decimath.log"
_ROTATION_WEEKS = 52


def get_log_directory(base_dir: Optional[Path] = None) -> Path:
    """Get or create ``<base_dir>/logs`` (default base: project root)."""
    log_dir = (base_dir or PROJECT_ROOT) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def add_log_level(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Store the upper-case level name under "level" ("warn" is reported as WARNING)."""
    if method_name == "warn":
        method_name = "warning"
    event_dict["level"] = method_name.upper()
    return event_dict


def _get_rotated_filename(default_name: str) -> str:
    """
    Namer for rotated files.

    Example: decimath.log.2025-11-28 -> decimath.log.2025-11-28.gz
    """
    return default_name + ".gz"


def _compress_rotated_file(source: str, dest: str) -> None:
    """Rotator: gzip `source` into `dest`, then delete `source`."""
    with open(source, 'rb') as f_in:
        with gzip.open(dest, 'wb') as f_out:
            shutil.copyfileobj(f_in, f_out)
    Path(source).unlink()


def _shared_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        ]


def _formatter(renderer: Processor, shared: List[Processor]) -> structlog.stdlib.ProcessorFormatter:
    final: List[Processor] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if isinstance(renderer, structlog.processors.JSONRenderer):
        final += [structlog.processors.format_exc_info, structlog.processors.UnicodeDecoder()]
    final.append(renderer)
    return structlog.stdlib.ProcessorFormatter(foreign_pre_chain=shared, processors=final)


def _file_handler(log_dir: Optional[Path], level: int) -> logging.Handler:
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(get_log_directory(log_dir) / LOG_FILE_NAME),
        when="W0",  # Monday, midnight UTC
        interval=1,
        backupCount=_ROTATION_WEEKS,
        encoding="utf-8",
        utc=True
        )
    handler.setLevel(level)
    handler.rotator = _compress_rotated_file
    handler.namer = _get_rotated_filename
    return handler


def configure_logging(
    log_level: Optional[str] = None,
    enable_file_logging: bool = False,
    log_dir: Optional[Path] = None,
    json_console: bool = False,
    ) -> None:
    """
    Configure structlog + stdlib logging for an application embedding decimath.

    Replaces every handler already attached to the root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: DECIMATH_LOG_LEVEL)
        enable_file_logging: Also write JSON lines to logs/decimath.log
        log_dir: Base directory of the logs/ folder (default: project root)
        json_console: Render console output as JSON instead of key=value lines
    """
    level_name = (log_level or get_settings().LOG_LEVEL).upper()
    numeric_level = getattr(logging, level_name, logging.INFO)
    shared = _shared_processors()

    console_renderer = (
        structlog.processors.JSONRenderer()
        if json_console
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
        )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(_formatter(console_renderer, shared))
    handlers = [console_handler]

    if enable_file_logging:
        file_handler = _file_handler(log_dir, numeric_level)
        file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer(), shared))
        handlers.append(file_handler)

    logging.basicConfig(handlers=handlers, level=numeric_level, force=True)

    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
        )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger.

    Usage:
        logger = get_logger(__name__)
        logger.debug("matrix inverted", size=3)
    """
    return structlog.get_logger(name)
