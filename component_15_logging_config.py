"""
component_15_logging_config.py

Central logging system for StackPlan.

Every module gets its logger through get_logger(__name__). Log lines look like

    [2026-03-02 10:15:02] [INFO    ] [component_8_block_planner] Plan found | length=3 | expansions=4

Search timings go to the separate "stackplan.performance" logger. It writes
to its own file when a log file is configured and otherwise only lets
warnings through.

Usage:
    from component_15_logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Search started", extra={"columns": 4, "timeout": 10.0})

    search_logger = get_logger(__name__, heuristic="admissible")
    search_logger.debug("Expanded node")  # carries heuristic=admissible
"""

import logging
import logging.handlers
import sys
import time
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, MutableMapping, Optional, Tuple, Type, Union

CONSOLE_LOG_LEVEL: int = logging.INFO
FILE_LOG_LEVEL: int = logging.DEBUG

PERFORMANCE_LOGGER_NAME: str = "stackplan.performance"

LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024
PERFORMANCE_FILE_MAX_BYTES: int = 5 * 1024 * 1024


class StackPlanLogFormatter(logging.Formatter):
    """
    Formats records as "[time] [LEVEL] [logger] message | key=value ...".

    Console output can be coloured by level.
    """

    LEVEL_COLORS: Dict[int, str] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET: str = "\033[0m"

    def __init__(self, use_colors: bool = False, include_extra: bool = True) -> None:
        super().__init__(
            fmt="[%(asctime)s] [%(levelname)-8s] [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_colors = use_colors
        self.include_extra = include_extra

    @staticmethod
    def render_extra(extra_info: Dict[str, Any]) -> str:
        return " | ".join(f"{key}={value}" for key, value in extra_info.items())

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)

        extra_info = getattr(record, "extra_info", None)
        if self.include_extra and extra_info:
            line = f"{line} | {self.render_extra(extra_info)}"

        if not self.use_colors:
            return line
        color = self.LEVEL_COLORS.get(record.levelno)
        return f"{color}{line}{self.RESET}" if color else line


class PerformanceLogger:
    """
    Context manager that times an operation.

    Fields passed to record() while the operation runs (e.g. the number of
    expanded nodes) are added to the timing line.

    Usage:
        with PerformanceLogger(logger.logger, "A* search", timeout=10.0) as perf:
            ...
            perf.record(expansions=42)
    """

    def __init__(self, logger: logging.Logger, operation_name: str, **context: Any) -> None:
        self.logger = logger
        self.operation_name = operation_name
        self.context: Dict[str, Any] = dict(context)
        self.duration_ms: Optional[float] = None
        self._started: Optional[float] = None

    def record(self, **fields: Any) -> None:
        self.context.update(fields)

    def __enter__(self) -> "PerformanceLogger":
        self._started = time.perf_counter()
        self.logger.debug(
            f"START: {self.operation_name}", extra={"extra_info": dict(self.context)}
        )
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> bool:
        if self._started is None:
            raise RuntimeError("PerformanceLogger exited without being entered")
        self.duration_ms = (time.perf_counter() - self._started) * 1000
        fields = {**self.context, "duration_ms": round(self.duration_ms, 2)}

        if exc_type is not None:
            # Unreachable goals and timeouts are expected outcomes, not crashes
            fields["error"] = exc_type.__name__
            self.logger.debug(
                f"FAILED: {self.operation_name} after {self.duration_ms:.2f}ms",
                extra={"extra_info": fields},
            )
            return False

        self.logger.debug(
            f"END: {self.operation_name} after {self.duration_ms:.2f}ms",
            extra={"extra_info": fields},
        )
        logging.getLogger(PERFORMANCE_LOGGER_NAME).info(
            self.operation_name, extra={"extra_info": fields}
        )
        return False


class StructuredLogger(logging.LoggerAdapter):
    """
    Logger adapter that carries key=value context.

    Context bound through get_logger(name, **context) is merged with the
    per-call extra={...} dict; per-call values win.
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> Tuple[str, MutableMapping[str, Any]]:
        fields = {**(self.extra or {}), **kwargs.get("extra", {})}
        if fields:
            kwargs["extra"] = {"extra_info": fields}
        else:
            kwargs.pop("extra", None)
        return msg, kwargs

    def log_exception(self, exc: BaseException, message: str = "", **context: Any) -> None:
        """Log an exception at ERROR level with its traceback."""
        text = f"{message}: {type(exc).__name__}: {exc}" if message else repr(exc)
        self.error(text, exc_info=exc, extra=context)


def _rotating_handler(
    path: Path, level: int, max_bytes: int, backup_count: int
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(StackPlanLogFormatter(use_colors=False))
    return handler


def setup_logging(
    console_level: int = CONSOLE_LOG_LEVEL,
    file_level: int = FILE_LOG_LEVEL,
    log_file: Optional[Union[str, Path]] = None,
    enable_performance_logging: bool = True,
) -> None:
    """
    (Re)configure logging for the whole process.

    Args:
        console_level: Minimum level written to stdout
        file_level: Minimum level written to log_file
        log_file: Main log file; no file logging when None
        enable_performance_logging: Write search timings to
            "<log_file stem>_performance<suffix>" next to log_file
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(console_level)
    console.setFormatter(StackPlanLogFormatter(use_colors=sys.stdout.isatty()))
    root.addHandler(console)

    perf_logger = logging.getLogger(PERFORMANCE_LOGGER_NAME)
    perf_logger.handlers.clear()
    perf_logger.setLevel(logging.WARNING)
    perf_logger.propagate = True

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        root.addHandler(_rotating_handler(log_path, file_level, LOG_FILE_MAX_BYTES, 5))

        if enable_performance_logging:
            perf_path = log_path.with_name(f"{log_path.stem}_performance{log_path.suffix}")
            perf_logger.setLevel(logging.INFO)
            perf_logger.propagate = False
            perf_logger.addHandler(
                _rotating_handler(perf_path, logging.INFO, PERFORMANCE_FILE_MAX_BYTES, 3)
            )

    get_logger("stackplan.logging_config").debug(
        "Logging configured",
        extra={
            "console_level": logging.getLevelName(console_level),
            "file_level": logging.getLevelName(file_level),
            "log_file": log_file,
            "performance_logging": enable_performance_logging,
        },
    )


def get_logger(name: str, **context: Any) -> StructuredLogger:
    """
    Structured logger for a module.

    Args:
        name: Logger name (usually __name__)
        **context: Fields attached to every record of this logger
    """
    return StructuredLogger(logging.getLogger(name), context)


# Console logging works out of the box; an explicit setup_logging() call
# replaces this configuration.
if not logging.getLogger().handlers:
    setup_logging()
