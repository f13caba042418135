"""Utilities shared by cost data providers."""

from __future__ import annotations

import re
import threading
import time
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional


DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.5",
}


def to_decimal(price_text: str | float | int | None) -> Optional[Decimal]:
    """Best effort conversion from English-formatted price strings to Decimal."""
    if price_text is None:
        return None
    if isinstance(price_text, (int, float)):
        return Decimal(str(price_text))

    cleaned = re.sub(r"[^\d,\.]", "", price_text)
    if not cleaned:
        return None

    comma_count = cleaned.count(",")
    dot_count = cleaned.count(".")

    if comma_count and dot_count:
        # Comma groups thousands, dot separates decimals.
        normalized = cleaned.replace(",", "")
    elif comma_count:
        last_comma_pos = cleaned.rfind(",")
        decimals_len = len(cleaned) - last_comma_pos - 1
        if comma_count == 1 and decimals_len != 3:
            normalized = cleaned.replace(",", ".")
        else:
            normalized = cleaned.replace(",", "")
    else:
        normalized = cleaned
    try:
        return Decimal(normalized)
    except (InvalidOperation, ValueError):
        return None


def normalize_whitespace(value: str) -> str:
    """Collapse repeated spaces and newlines."""
    return re.sub(r"\s+", " ", value).strip()


def normalize_location(value: str) -> str:
    """Case-fold and trim a city or country name for lookups."""
    return normalize_whitespace(value).casefold()


def cache_key(city: str, country: str) -> str:
    """Cache key for a (city, country) pair: ``city|country`` normalized."""
    return f"{normalize_location(city)}|{normalize_location(country)}"


def slugify(value: str) -> str:
    """Build a URL slug such as ``mexico-city`` from a city name."""
    slug = re.sub(r"\s+", "-", value.strip().lower())
    return re.sub(r"[^\w-]", "", slug)


class RateLimiter:
    """Enforce a minimum spacing between consecutive calls.

    Callers are serialized: the lock is held while sleeping so two threads
    cannot both observe an expired gap.
    """

    def __init__(
        self,
        min_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval_seconds = min_interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_call: Optional[float] = None

    def wait(self) -> float:
        """Block until the next call is allowed; return the time slept."""
        with self._lock:
            slept = 0.0
            now = self._clock()
            if self._last_call is not None:
                elapsed = now - self._last_call
                if elapsed < self.min_interval_seconds:
                    slept = self.min_interval_seconds - elapsed
                    self._sleep(slept)
            self._last_call = self._clock()
            return slept
