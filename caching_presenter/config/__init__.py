"""Settings and logging configuration."""

from .logging import configure_logging, log_error
from .settings import PresenterSettings, get_settings, reset_settings

__all__ = [
    'PresenterSettings',
    'configure_logging',
    'get_settings',
    'log_error',
    'reset_settings',
]
