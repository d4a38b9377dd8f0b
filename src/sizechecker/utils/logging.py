"""Logging infrastructure with syslog integration and correlation ID tracking.

Every run of the checker gets one correlation ID, stored in a ContextVar and
stamped on each log record, so that the lines written by overlapping cron
invocations can be told apart in a shared syslog. Webhook tokens and push
credentials are redacted from every record before it is emitted.
"""

import contextvars
import logging
import logging.handlers
import sys
from collections.abc import Iterable, Mapping
from typing import Final

from typing_extensions import override

from sizechecker.utils.sanitization import sanitize_args, sanitize_value

correlation_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id",
    default=None,
)

DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] - %(message)s"

SYSLOG_LOG_FORMAT: Final[str] = (
    "sizechecker[%(process)d]: %(levelname)s - [%(correlation_id)s] - %(name)s - %(message)s"
)

DEFAULT_SYSLOG_ADDRESS: Final[str] = "/dev/log"

# LogRecord attributes that are never treated as user-supplied context
_STANDARD_RECORD_ATTRS: Final[frozenset[str]] = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
        "correlation_id",
    }
)


class CorrelationIDFilter(logging.Filter):
    """Logging filter that adds the current correlation ID to log records."""

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = correlation_id_var.get()
        record.correlation_id = correlation_id if correlation_id is not None else "N/A"
        return True


class SecretRedactingFilter(logging.Filter):
    """Logging filter that redacts secrets from log records.

    Sanitizes the message text, the ``%`` formatting arguments, and any
    context passed through ``extra={...}``. Records are never dropped.

    Args:
        secrets: Literal credential values redacted wherever they appear,
            in addition to the URL-shaped tokens sanitization always finds
    """

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        super().__init__()
        self._secrets: frozenset[str] = frozenset(secret for secret in secrets if secret)

    @property
    def secrets(self) -> frozenset[str]:
        return self._secrets

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            sanitized_msg = sanitize_value(record.msg, secrets=self._secrets)
            if isinstance(sanitized_msg, str):
                record.msg = sanitized_msg

        if isinstance(record.args, tuple) and record.args:
            record.args = sanitize_args(record.args, secrets=self._secrets)

        for attr_name in list(record.__dict__.keys()):
            if attr_name not in _STANDARD_RECORD_ATTRS and not attr_name.startswith("_"):
                attr_value: object = getattr(record, attr_name)  # pyright: ignore[reportAny]
                setattr(
                    record,
                    attr_name,
                    sanitize_value(attr_value, field_name=attr_name, secrets=self._secrets),
                )

        return True


def configure_logging(
    *,
    log_level: str = "INFO",
    enable_syslog: bool = False,
    syslog_address: str = DEFAULT_SYSLOG_ADDRESS,
    secrets: Iterable[str] = (),
) -> None:
    """Configure application logging.

    Sets up the root logger with an optional syslog handler and a console
    handler on stdout. Both handlers carry the correlation ID filter and the
    secret redacting filter. Existing root handlers are replaced, so calling
    this twice does not duplicate output.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_syslog: Also send records to the local syslog socket
        syslog_address: Syslog socket address
        secrets: Literal credential values to redact from every record

    Example:
        >>> configure_logging(log_level="DEBUG")
        >>> logging.getLogger(__name__).debug("probe started")
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.handlers.clear()

    correlation_filter = CorrelationIDFilter()
    secret_filter = SecretRedactingFilter(secrets=secrets)

    if enable_syslog:
        try:
            syslog_handler = logging.handlers.SysLogHandler(
                address=syslog_address,
                facility=logging.handlers.SysLogHandler.LOG_DAEMON,
            )
            syslog_handler.setFormatter(logging.Formatter(SYSLOG_LOG_FORMAT))
            syslog_handler.addFilter(correlation_filter)
            syslog_handler.addFilter(secret_filter)
            root_logger.addHandler(syslog_handler)
        except OSError as exc:
            # Syslog socket missing (containers, macOS dev boxes): console only
            print(
                f"Warning: Could not connect to syslog at {syslog_address}: {exc}",
                file=sys.stderr,
            )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
    console_handler.addFilter(correlation_filter)
    console_handler.addFilter(secret_filter)
    root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the specified module."""
    return logging.getLogger(name)


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context."""
    _ = correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID from the current context."""
    _ = correlation_id_var.set(None)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    *,
    extra: Mapping[str, object] | None = None,
) -> None:
    """Log a message with additional structured context fields.

    Args:
        logger: Logger instance to use
        level: Logging level (e.g., logging.INFO)
        message: Log message
        extra: Additional context fields attached to the record

    Example:
        >>> log_with_context(
        ...     get_logger(__name__),
        ...     logging.INFO,
        ...     "Notification skipped",
        ...     extra={"provider": "chat", "remaining": "42s"},
        ... )
    """
    logger.log(level, message, extra=dict(extra) if extra else None)
