import logging
import sys
from logging.handlers import WatchedFileHandler
from pathlib import Path
from typing import Any, Optional

import structlog

# entropy values are logged with this many decimals
FLOAT_PRECISION = 6


def _format_message(value: Any, root: Path) -> Any:
    if isinstance(value, Path):
        if value.is_relative_to(root):
            value = value.relative_to(root)
        return value.as_posix().encode("utf-8", errors="surrogateescape")

    if isinstance(value, float):
        return round(value, FLOAT_PRECISION)

    if isinstance(value, str):
        try:
            value.encode()
        except UnicodeEncodeError:
            return value.encode("utf-8", errors="surrogateescape")

    return value


def pretty_print_types(root: Path):
    def convert_type(_logger, _method_name: str, event_dict: structlog.types.EventDict):
        for key, value in event_dict.items():
            event_dict[key] = _format_message(value, root)

        return event_dict

    return convert_type


def filter_debug_logs(verbosity_level: int):
    """Drop debug events whose ``_verbosity`` (1 by default) is above the level."""

    def filter_(_logger, _method_name: str, event_dict: structlog.types.EventDict):
        if event_dict["level"] != "debug":
            return event_dict

        if event_dict.pop("_verbosity", 1) > verbosity_level:
            raise structlog.DropEvent

        return event_dict

    return filter_


def _renderer(shared_processors: list, colors: bool) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(
                colors=colors, exception_formatter=structlog.dev.plain_traceback
            ),
        ],
    )


def configure_logger(
    verbosity_level: int, log_path: Path, root: Optional[Path] = None
):
    """Send structlog and stdlib log records to stdout and ``log_path``.

    Stdout only shows records when ``verbosity_level`` is set, the log file
    always gets the debug messages. Paths in log messages are shown relative
    to ``root`` (the current directory by default).
    """
    root = root or Path.cwd()
    log_path.unlink(missing_ok=True)

    shared_processors = [
        structlog.stdlib.add_log_level,
        filter_debug_logs(verbosity_level or 2),
        structlog.processors.TimeStamper(
            key="timestamp", fmt="%Y-%m-%d %H:%M.%S", utc=True
        ),
        pretty_print_types(root),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        _renderer(shared_processors, colors=sys.stdout.isatty())
    )
    console_handler.setLevel(logging.DEBUG if verbosity_level else logging.CRITICAL)

    file_handler = WatchedFileHandler(log_path.as_posix())
    file_handler.setFormatter(_renderer(shared_processors, colors=False))
    file_handler.setLevel(logging.DEBUG)

    root_logger = logging.getLogger()
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)
    root_logger.setLevel(logging.DEBUG)
    structlog.get_logger().debug(
        "Logging configured",
        verbosity_level=verbosity_level,
        log_path=log_path.expanduser().resolve(),
    )
