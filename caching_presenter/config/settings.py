"""Runtime settings for caching presenters."""
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import DEFAULT_CALLBACK_KEYWORD, ENV_PREFIX


class PresenterSettings(BaseSettings):
    """Settings read from CACHING_PRESENTER_* environment variables."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    # Keyword argument treated as the callback ("block") of a call
    callback_keyword: str = Field(default=DEFAULT_CALLBACK_KEYWORD, min_length=1)

    # Guard each presenter's store with an RLock
    thread_safe: bool = Field(default=False)

    # Store generator results as lists so they can be replayed
    materialize_generators: bool = Field(default=True)

    log_level: str = Field(default="INFO")


_settings: Optional[PresenterSettings] = None


def get_settings() -> PresenterSettings:
    """Get the process-wide settings instance."""
    global _settings
    if _settings is None:
        _settings = PresenterSettings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the environment is read again."""
    global _settings
    _settings = None
