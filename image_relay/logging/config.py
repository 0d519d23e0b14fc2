"""Environment-driven logging settings."""

from enum import StrEnum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(StrEnum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(StrEnum):
    JSON = "json"
    HUMAN = "human"


class LoggingConfig(BaseSettings):
    """How relay log records are rendered.

    Deployed functions emit JSON lines; ``LOG_FORMAT=human`` suits a terminal.
    Loggers named in ``quiet_loggers`` are held at WARNING so that HTTP and
    codec internals do not drown out the relay's own records.
    """

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    log_level: LogLevel = LogLevel.INFO
    log_format: LogFormat = LogFormat.JSON
    service_name: str = "image-relay"
    include_timestamp: bool = True
    include_location: bool = False
    quiet_loggers: tuple[str, ...] = ("urllib3", "requests", "PIL")


@lru_cache
def get_logging_config() -> LoggingConfig:
    return LoggingConfig()
