"""Errors surfaced to callers of the segmentation engine."""
from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when a payload carries no HTML, text or parsed document."""

    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code
