"""Structured logging: bound fields, request correlation, masking and timed spans."""

import logging
import time
import re
import hashlib
from contextvars import ContextVar
from contextlib import contextmanager
from typing import Any, Optional
from ulid import ULID

from src.utils.logging_config import LoggingConfig, get_logger


_correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

_EMAIL = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
# Bot tokens are "<bot id>:<secret>" and show up inside api.telegram.org URLs
_BOT_TOKEN = re.compile(r"(?<!\d)\d{6,}:[A-Za-z0-9_-]{30,}")
_URL_TOKEN = re.compile(r"([?&]token=)[^&\s]+")
_KEY_VALUE_SECRET = re.compile(r"(?i)(api[_-]?key|service[_-]?role[_-]?key|secret|password)[\s:=]+([A-Za-z0-9._-]{20,})")


def generate_correlation_id() -> str:
    return f"req_{ULID()}"


def get_correlation_id() -> Optional[str]:
    return _correlation_id_var.get()


@contextmanager
def correlation_context(correlation_id: Optional[str] = None):
    """Tag every record logged inside the block with one request id."""
    token = _correlation_id_var.set(correlation_id or generate_correlation_id())
    try:
        yield _correlation_id_var.get()
    finally:
        _correlation_id_var.reset(token)


def mask_sensitive_data(text: str) -> str:
    """Redact emails, bot tokens, signed-URL tokens and key=value secrets."""
    if not text or not LoggingConfig.LOG_MASK_SENSITIVE:
        return text

    text = _EMAIL.sub("[REDACTED_EMAIL]", text)
    text = _BOT_TOKEN.sub("[REDACTED_BOT_TOKEN]", text)
    text = _URL_TOKEN.sub(r"\1[REDACTED]", text)
    text = _KEY_VALUE_SECRET.sub(r"\1=[REDACTED]", text)
    return text


def mask_chat_id(chat_id: Optional[str]) -> Optional[str]:
    """First three digits plus a short hash, so one chat stays traceable across records."""
    if not LoggingConfig.LOG_MASK_SENSITIVE or not chat_id:
        return chat_id

    chat_id = str(chat_id)
    hashed = hashlib.sha256(chat_id.encode()).hexdigest()[:8]
    return f"{chat_id[:3]}...{hashed}"


def sanitize_message_text(text: str, max_length: int = 500) -> Optional[str]:
    """Message text as it may appear in logs, or None when content logging is off."""
    if not LoggingConfig.LOG_MESSAGE_CONTENT or not text:
        return None

    if len(text) > max_length:
        text = text[:max_length] + "..."
    return mask_sensitive_data(text)


class StructuredLogger:
    """
    Logger wrapper that turns keyword arguments into structured fields.

    bind() returns a child carrying fixed fields, e.g. the run id of one
    report run, merged under the per-call fields.
    """

    def __init__(self, logger: logging.Logger, **bound: Any):
        self.logger = logger
        self.bound = bound

    def bind(self, **fields: Any) -> "StructuredLogger":
        return StructuredLogger(self.logger, **{**self.bound, **fields})

    def _log(self, level: int, message: str, exc_info: bool = False, **fields: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return
        extra = dict(self.bound)
        correlation_id = get_correlation_id()
        if correlation_id:
            extra["correlation_id"] = correlation_id
        extra.update(fields)
        self.logger.log(level, message, extra=extra, exc_info=exc_info)

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, exc_info: bool = False, **fields: Any) -> None:
        self._log(logging.ERROR, message, exc_info=exc_info, **fields)


def get_structured_logger(name: str) -> StructuredLogger:
    return StructuredLogger(get_logger(name))


@contextmanager
def log_timing(operation_name: str, logger: Optional[StructuredLogger] = None, **context: Any):
    """
    Time a pipeline step.

    Logs completion with processing_time_ms, or a warning naming the
    exception type when the step raises (the exception still propagates).
    Steps slower than LOG_SLOW_OPERATION_THRESHOLD_MS get an extra warning.
    """
    logger = logger or get_structured_logger(__name__)
    started = time.perf_counter()
    try:
        yield
    except Exception as e:
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.warning(
            f"Failed {operation_name}",
            operation=operation_name,
            processing_time_ms=elapsed_ms,
            error_type=type(e).__name__,
            **context
        )
        raise

    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    logger.info(
        f"Completed {operation_name}",
        operation=operation_name,
        processing_time_ms=elapsed_ms,
        **context
    )
    if elapsed_ms > LoggingConfig.LOG_SLOW_OPERATION_THRESHOLD_MS:
        logger.warning(
            f"Slow operation: {operation_name}",
            operation=operation_name,
            processing_time_ms=elapsed_ms,
            threshold_ms=LoggingConfig.LOG_SLOW_OPERATION_THRESHOLD_MS,
            **context
        )
