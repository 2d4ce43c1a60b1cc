"""Runtime settings read from ``SEGMENTER_*`` environment variables."""
from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 12000
MAX_CHARS_CEILING = 60000


def _int_from_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        LOGGER.warning("Invalid integer for %s: %s; using default %s", name, value, default)
        return default


def _bool_from_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


@dataclass(slots=True)
class SegmenterSettings:
    default_max_chars: int = DEFAULT_MAX_CHARS
    max_chars_ceiling: int = MAX_CHARS_CEILING
    strict_page_bound: bool = False
    bank_names_file: Optional[str] = None
    log_level: str = "INFO"
    log_dir: str = "logs"

    @classmethod
    def from_env(cls) -> "SegmenterSettings":
        return cls(
            default_max_chars=_int_from_env("SEGMENTER_DEFAULT_MAX_CHARS", DEFAULT_MAX_CHARS),
            max_chars_ceiling=_int_from_env("SEGMENTER_MAX_CHARS_CEILING", MAX_CHARS_CEILING),
            strict_page_bound=_bool_from_env("SEGMENTER_STRICT_PAGE_BOUND", False),
            bank_names_file=os.getenv("SEGMENTER_BANK_NAMES_FILE") or None,
            log_level=os.getenv("SEGMENTER_LOG_LEVEL", "INFO").strip().upper() or "INFO",
            log_dir=os.getenv("SEGMENTER_LOG_DIR", "logs"),
        )

    def sanitize_max_chars(self, value: Any) -> int:
        return sanitize_max_chars(value, default=self.default_max_chars, ceiling=self.max_chars_ceiling)


def sanitize_max_chars(value: Any, default: int = DEFAULT_MAX_CHARS, ceiling: int = MAX_CHARS_CEILING) -> int:
    """Coerce a requested chunk size into ``1..ceiling``; invalid values give ``default``."""

    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number <= 0:
        return default
    return max(1, int(min(number, ceiling)))


@lru_cache(maxsize=1)
def get_settings() -> SegmenterSettings:
    return SegmenterSettings.from_env()
