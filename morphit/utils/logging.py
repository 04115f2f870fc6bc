"""Logging configuration using structlog."""

import logging
import sys
import uuid
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from structlog.typing import EventDict, WrappedLogger

import structlog


class SafeStreamHandler(logging.StreamHandler):
    """A StreamHandler that survives consoles unable to encode tool output.

    Captured stderr from external tools may contain bytes decoded with
    replacement characters or glyphs the console codec cannot print.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            stream = self.stream
            try:
                stream.write(msg + self.terminator)
            except UnicodeEncodeError:
                encoding = stream.encoding or "utf-8"
                stream.write(
                    msg.encode(encoding, errors="replace").decode(encoding, errors="replace")
                    + self.terminator
                )
            self.flush()
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


# Third-party loggers kept at WARNING unless debugging
_NOISY_LOGGERS = [
    "PIL",
    "asyncio",
    "fitz",
    "RapidOCR",
    "rapidocr",
]

# Tool stderr can run to megabytes (ffmpeg progress lines)
_MAX_VALUE_LENGTH = 500


def _filter_event_dict(
    _logger: "WrappedLogger", _method_name: str, event_dict: "EventDict"
) -> "EventDict":
    """Truncate long values such as captured tool stderr."""
    for key, value in list(event_dict.items()):
        if isinstance(value, str) and len(value) > _MAX_VALUE_LENGTH:
            # Tools print the actual error last
            event_dict[key] = f"...{value[-_MAX_VALUE_LENGTH:]} [{len(value)} chars total]"
        elif isinstance(value, (bytes, bytearray)) and len(value) > _MAX_VALUE_LENGTH:
            event_dict[key] = f"[BINARY DATA: {len(value)} bytes]"
        elif isinstance(value, (list, tuple)) and key == "args":
            event_dict[key] = " ".join(str(part) for part in value)
    return event_dict


_INTERNAL_KEYS = {"event", "level", "timestamp", "_record", "_from_structlog"}


def _add_separator(
    _logger: "WrappedLogger", _method_name: str, event_dict: "EventDict"
) -> "EventDict":
    """Add a visual separator between event message and context variables."""
    has_context = any(k not in _INTERNAL_KEYS for k in event_dict)
    if has_context and "event" in event_dict:
        event_dict["event"] = f"{event_dict['event']} |"
    return event_dict


def _console_renderer(colors: bool) -> structlog.types.Processor:
    return structlog.dev.ConsoleRenderer(
        colors=colors,
        exception_formatter=structlog.dev.plain_traceback,
        pad_event_to=0,
        pad_level=False,
    )


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    json_format: bool = False,
    console_level: str | None = None,
    file_level: str | None = None,
) -> None:
    """Configure structlog for the application.

    Args:
        level: Root log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path; rotated daily, 7 days kept
        json_format: If True, render JSON instead of console lines
        console_level: Optional override for console handler level
        file_level: Optional override for file handler level
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(max(log_level, logging.WARNING))

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _filter_event_dict,
        _add_separator,
    ]

    if json_format:
        final_processor: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        final_processor = _console_renderer(colors=True)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            final_processor,
        ],
    )

    console_handler = SafeStreamHandler(sys.stderr)
    c_level = getattr(logging, console_level.upper(), log_level) if console_level else log_level
    console_handler.setLevel(c_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        file_renderer = (
            structlog.processors.JSONRenderer() if json_format else _console_renderer(colors=False)
        )
        file_formatter = structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                file_renderer,
            ],
        )

        file_handler = TimedRotatingFileHandler(
            log_file,
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
        file_handler.suffix = "%Y-%m-%d"
        f_level = getattr(logging, file_level.upper(), log_level) if file_level else log_level
        file_handler.setLevel(f_level)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    Args:
        name: Optional logger name

    Returns:
        A structlog bound logger
    """
    return structlog.get_logger(name)


def create_task_log_path(log_dir: str | Path, prefix: str = "task") -> tuple[str, Path]:
    """Create a unique log file path for one CLI run.

    Args:
        log_dir: Directory to store log files
        prefix: Prefix for the log file name (e.g., "convert")

    Returns:
        Tuple of (task_id, log_file_path), e.g.
        ``.logs/convert_20260109_143052_a1b2c3d4.log``
    """
    log_dir_path = Path(log_dir)
    log_dir_path.mkdir(parents=True, exist_ok=True)

    task_id = str(uuid.uuid4())[:8]
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return task_id, log_dir_path / f"{prefix}_{timestamp}_{task_id}.log"


def setup_task_logging(
    log_dir: str | Path,
    prefix: str = "task",
    verbose: bool = False,
) -> tuple[str, Path]:
    """Set up logging for one run.

    The console only shows WARNING and above unless ``verbose`` is set, so
    progress bars stay readable. The file always records DEBUG.

    Args:
        log_dir: Directory to store log files
        prefix: Prefix for the log file name
        verbose: Enable verbose console output

    Returns:
        Tuple of (task_id, log_file_path)
    """
    task_id, log_path = create_task_log_path(log_dir, prefix)

    setup_logging(
        level="DEBUG",
        log_file=str(log_path),
        console_level="DEBUG" if verbose else "WARNING",
        file_level="DEBUG",
    )

    return task_id, log_path
