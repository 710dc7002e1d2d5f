"""
Logging configuration for tillprint.

structlog on top of the standard library: one stdout handler, an optional
file handler, JSON lines in production and colored console output at debug.
"""
import logging
import os
import sys
from pathlib import Path
from typing import Any, Iterable, Optional
import structlog

MASK = "***MASKED***"

DEFAULT_SENSITIVE_FIELDS = frozenset({"password", "token", "secret", "credential"})

_FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_PRE_RENDER = (
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
)


def setup_logging(log_level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure stdlib logging and structlog for the process.

    Args:
        log_level: debug, info, warning, error or critical; falls back to
            TILLPRINT_LOG_LEVEL, then info
        log_file: Also append plain-text records to this file
    """
    level_name = (log_level or os.getenv("TILLPRINT_LOG_LEVEL", "info")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    root = logging.getLogger()
    root.setLevel(level)

    if log_file:
        _attach_file_handler(root, Path(log_file), level)

    if level_name == "DEBUG":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[*_PRE_RENDER, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def _attach_file_handler(root: logging.Logger, path: Path, level: int) -> None:
    target = str(path.resolve())
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            handler.setLevel(level)
            return

    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    root.addHandler(handler)


def mask_sensitive_data(data: Any, sensitive_fields: Optional[Iterable[str]] = None) -> Any:
    """
    Copy of ``data`` with the values of sensitive keys replaced, at any depth.

    A key is sensitive when it contains one of ``sensitive_fields``
    (case-insensitive), so ``api_token`` is caught by ``token``.

    Example:
        >>> mask_sensitive_data({'name': 'Till 1', 'api_token': 'secret123'})
        {'name': 'Till 1', 'api_token': '***MASKED***'}
    """
    fields = [f.lower() for f in (DEFAULT_SENSITIVE_FIELDS if sensitive_fields is None else sensitive_fields)]

    if isinstance(data, dict):
        return {
            key: MASK if any(f in str(key).lower() for f in fields) else mask_sensitive_data(value, fields)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, fields) for item in data)
    return data
