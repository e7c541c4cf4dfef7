"""
Plugin Manager structured logging.

Provides structured output for plugin registration, flag binding
and bulk initialization. Handlers are attached to the "plugin_manager"
logger only, so host applications keep control of the root logger.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, WrappedLogger

if TYPE_CHECKING:
    from plugin_manager.core.config import LoggingConfig

LOGGER_NAME = "plugin_manager"
LOG_FILE_NAME = "plugin_manager.log"

_configured = False


def add_component(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Name the subsystem that emitted the event, e.g. "plugins.manager"."""
    name = event_dict.get("logger") or LOGGER_NAME
    prefix = LOGGER_NAME + "."
    event_dict["component"] = name[len(prefix) :] if name.startswith(prefix) else name
    return event_dict


def _build_handlers(config: LoggingConfig) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []

    if config.console_enabled:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(config.level)
        handlers.append(console)

    if config.file_enabled:
        config.log_directory.mkdir(parents=True, exist_ok=True)
        # the file keeps debug events regardless of the console level
        file_handler = logging.FileHandler(config.log_directory / LOG_FILE_NAME, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    return handlers or [logging.NullHandler()]


def setup_logging(config: LoggingConfig, force: bool = False) -> None:
    """
    Configure structured logging for the plugin manager.

    Runs once per process unless force is set; a forced call replaces the
    handlers installed by the previous one.
    """
    global _configured

    if _configured and not force:
        return

    package_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter("%(message)s")
    for handler in _build_handlers(config):
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)
    package_logger.propagate = False

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        add_component,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if config.json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger below the "plugin_manager" logger."""
    return structlog.get_logger(name or LOGGER_NAME)


class OperationLogger:
    """
    Context manager timing one plugin manager operation.

    Logs "<operation> started" at debug level, then "<operation> finished"
    or "<operation> failed" with the elapsed time. Exceptions propagate.
    """

    def __init__(
        self,
        operation: str,
        logger: structlog.stdlib.BoundLogger | None = None,
        **context: Any,
    ):
        self.operation = operation
        self.logger = logger if logger is not None else get_logger()
        self.context = context
        self._started: float | None = None

    @property
    def elapsed(self) -> float:
        """Seconds since the operation started."""
        if self._started is None:
            return 0.0
        return time.monotonic() - self._started

    def __enter__(self) -> OperationLogger:
        self._started = time.monotonic()
        self.logger.debug(f"{self.operation} started", **self.context)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        context = {**self.context, "duration_seconds": round(self.elapsed, 6)}

        if exc_type is None:
            self.logger.info(f"{self.operation} finished", **context)
        else:
            self.logger.error(
                f"{self.operation} failed",
                error_type=exc_type.__name__,
                error=str(exc_val),
                **context,
            )

    def update(self, **additional_context: Any) -> None:
        """Attach more fields to the completion event."""
        self.context.update(additional_context)
