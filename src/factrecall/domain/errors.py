"""Domain error definitions."""

from __future__ import annotations


class ValidationError(ValueError):
    """Raised when a request is rejected before touching any store."""


class ContentionError(RuntimeError):
    """Raised when a store could not be written because it is locked or busy."""

    def __init__(self, message: str, *, context: str | None = None) -> None:
        super().__init__(f"{message} ({context})" if context else message)
        self.context = context
