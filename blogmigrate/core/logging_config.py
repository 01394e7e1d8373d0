"""
Logging helpers used across services.

Keyword arguments passed to the helpers are attached to the record as
``extra`` context so handlers can render or ship them.
"""
import logging
from typing import Any, Optional

LOGGER_NAME = "blogmigrate"

logger = logging.getLogger(LOGGER_NAME)


_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _context(kwargs: dict[str, Any]) -> dict[str, Any]:
    # LogRecord refuses extras that shadow its own attributes
    return {key if key not in _RESERVED else f"ctx_{key}": value for key, value in kwargs.items()}


def _format(message: str, context: dict[str, Any]) -> str:
    if not context:
        return message
    details = ", ".join(f"{key}={value}" for key, value in context.items())
    return f"{message} ({details})"


def log_info(message: str, **kwargs: Any) -> None:
    logger.info(_format(message, kwargs), extra=_context(kwargs))


def log_warning(message: str, **kwargs: Any) -> None:
    logger.warning(_format(message, kwargs), extra=_context(kwargs))


def log_debug(message: str, **kwargs: Any) -> None:
    logger.debug(_format(message, kwargs), extra=_context(kwargs))


def log_error(error: BaseException | str, message: Optional[str] = None, **kwargs: Any) -> None:
    """
    Log an error with context.

    Args:
        error: Exception (logged with traceback) or plain message
        message: Optional summary; defaults to the exception text
    """
    if isinstance(error, BaseException):
        summary = message or f"{type(error).__name__}: {error}"
        logger.error(_format(summary, kwargs), exc_info=error, extra=_context(kwargs))
    else:
        logger.error(_format(message or error, kwargs), extra=_context(kwargs))
