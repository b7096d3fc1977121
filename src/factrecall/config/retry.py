"""Write retry settings for contended stores."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_int
from .errors import ConfigurationError

DEFAULT_WRITE_MAX_ATTEMPTS = 5
DEFAULT_WRITE_BACKOFF = 0.05
DEFAULT_WRITE_MAX_BACKOFF = 2.0
DEFAULT_WRITE_JITTER = 0.5


@dataclass(frozen=True, slots=True)
class WriteRetryConfig:
    max_attempts: int = DEFAULT_WRITE_MAX_ATTEMPTS
    backoff_factor: float = DEFAULT_WRITE_BACKOFF
    max_backoff_wait: float = DEFAULT_WRITE_MAX_BACKOFF
    backoff_jitter: float = DEFAULT_WRITE_JITTER


def get_write_retry_config() -> WriteRetryConfig:
    config = WriteRetryConfig(
        max_attempts=env_int("FACTRECALL_WRITE_MAX_ATTEMPTS", DEFAULT_WRITE_MAX_ATTEMPTS),
        backoff_factor=env_float("FACTRECALL_WRITE_BACKOFF", DEFAULT_WRITE_BACKOFF),
        max_backoff_wait=env_float("FACTRECALL_WRITE_MAX_BACKOFF", DEFAULT_WRITE_MAX_BACKOFF),
    )
    if config.max_attempts < 1:
        raise ConfigurationError(
            "FACTRECALL_WRITE_MAX_ATTEMPTS must be at least 1",
            variable="FACTRECALL_WRITE_MAX_ATTEMPTS",
        )
    if config.backoff_factor < 0 or config.max_backoff_wait < 0:
        raise ConfigurationError("Write backoff values must be non-negative")
    return config
