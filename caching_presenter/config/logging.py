import structlog
import logging.config
from typing import Any, Dict, Optional

from ..constants import LOGGER_NAME
from .settings import get_settings


def configure_logging(log_level: Optional[str] = None) -> None:
    """
    Route presenter events to the "caching_presenter" logger as JSON lines.

    Only that logger gets a handler; the root logger and other libraries
    are left as the host application configured them.
    """
    log_level = (log_level or get_settings().log_level).upper()

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processor": structlog.processors.JSONRenderer(),
            },
        },
        "handlers": {
            "presenter": {
                "level": log_level,
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "loggers": {
            LOGGER_NAME: {
                "handlers": ["presenter"],
                "level": log_level,
                "propagate": False,
            },
        }
    })

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def log_error(logger: Any, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """Standardized error logging."""
    error_details = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        **(context or {})
    }
    logger.debug("operation_failed", **error_details)
