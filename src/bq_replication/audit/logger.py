"""
Structured logger for replication operations.

Wraps structlog over the standard logging module so run output can be
rendered as JSON lines for log shipping or as plain text on a terminal.
"""

import logging
import sys
from typing import Any, Dict, Optional

import structlog

from bq_replication.config.models import LoggingConfig


class ReplicationLogger:
    """Logger used by managers and collaborators throughout a run."""

    def __init__(self, name: str = "bq_replication", **context: Any):
        """
        Initialize the logger.

        Args:
            name: Logger name
            context: Fields bound to every event (e.g. run_id)
        """
        self.name = name
        self.context = context
        self._logger = structlog.get_logger(name).bind(**context)

    def setup_logging(self, config: LoggingConfig) -> None:
        """
        Configure handlers and rendering from the logging configuration.

        Args:
            config: Logging configuration
        """
        handlers = [logging.StreamHandler(sys.stderr)]
        if config.log_to_file and config.log_file_path:
            handlers.append(logging.FileHandler(config.log_file_path))

        logging.basicConfig(
            format="%(message)s",
            level=getattr(logging, config.level),
            handlers=handlers,
            force=True,
        )

        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
        ]
        if config.format == "json":
            processors += [
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ]
        else:
            processors.append(structlog.dev.ConsoleRenderer(colors=False))

        structlog.configure(
            processors=processors,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )
        self._logger = structlog.get_logger(self.name).bind(**self.context)

    def bind(self, **context: Any) -> "ReplicationLogger":
        """Return a logger carrying additional context fields."""
        bound = ReplicationLogger(self.name, **{**self.context, **context})
        bound._logger = self._logger.bind(**context)
        return bound

    def _log(
        self,
        level: str,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ) -> None:
        fields = dict(extra or {})
        if exc_info:
            fields["exc_info"] = True
        getattr(self._logger, level)(message, **fields)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log("debug", message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log("info", message, extra)

    def warning(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ) -> None:
        self._log("warning", message, extra, exc_info)

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ) -> None:
        self._log("error", message, extra, exc_info)
