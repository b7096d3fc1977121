"""Bounded retry of store transactions that hit a locked or busy database."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from factrecall.domain.errors import ContentionError

if TYPE_CHECKING:
    from collections.abc import Callable

    from factrecall.config import WriteRetryConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Exponential backoff with jitter.

    ``sleep`` and ``rng`` are injectable so tests can run without waiting and
    with deterministic jitter.
    """

    max_attempts: int = 5
    backoff_factor: float = 0.05
    max_backoff_wait: float = 2.0
    backoff_jitter: float = 0.5
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    rng: Callable[[], float] = field(default=random.random, repr=False)

    @classmethod
    def from_config(cls, config: WriteRetryConfig) -> RetryPolicy:
        return cls(
            max_attempts=config.max_attempts,
            backoff_factor=config.backoff_factor,
            max_backoff_wait=config.max_backoff_wait,
            backoff_jitter=config.backoff_jitter,
        )

    def delay_for(self, attempt: int) -> float:
        """Wait before retry number ``attempt`` (1-based), capped at ``max_backoff_wait``."""

        base = self.backoff_factor * (2 ** (attempt - 1))
        jitter = base * self.backoff_jitter * self.rng()
        return min(base + jitter, self.max_backoff_wait)

    def run[T](self, operation: Callable[[], T], *, context: str | None = None) -> T:
        attempt = 1
        while True:
            try:
                return operation()
            except ContentionError as exc:
                if attempt >= self.max_attempts:
                    raise ContentionError(
                        f"Store still contended after {attempt} attempts",
                        context=context or exc.context,
                    ) from exc
                delay = self.delay_for(attempt)
                log.warning(
                    "Store contended (attempt %d/%d), retrying in %.3fs: %s",
                    attempt,
                    self.max_attempts,
                    delay,
                    context or exc,
                )
                self.sleep(delay)
                attempt += 1


NO_RETRY = RetryPolicy(max_attempts=1)
