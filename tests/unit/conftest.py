"""Shared fixtures: a controllable clock, an in-process Redis and stub providers."""

import fnmatch
import threading
import time
from decimal import Decimal
from typing import Dict, Optional

import pytest

from cost_engine.models.cost_models import Category
from cost_engine.services.cost_data.models import ProviderId, ProviderResult
from cost_engine.services.cost_data.providers.base import BaseCostProvider


class FakeClock:
    """Epoch-seconds clock that only moves when told to."""

    def __init__(self, start: float = 1_760_000_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class FakeRedis:
    """Subset of the redis-py client used by the cache store.

    Honours ``SET ... EX`` against the injected clock.
    """

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.data: Dict[str, str] = {}
        self.expiry: Dict[str, float] = {}
        self.closed = False

    def _evict_if_expired(self, name: str) -> None:
        expires_at = self.expiry.get(name)
        if expires_at is not None and self.clock() >= expires_at:
            self.data.pop(name, None)
            self.expiry.pop(name, None)

    def set(self, name: str, value: str, ex: Optional[int] = None) -> bool:
        self.data[name] = value
        if ex is None:
            self.expiry.pop(name, None)
        else:
            self.expiry[name] = self.clock() + ex
        return True

    def get(self, name: str) -> Optional[str]:
        self._evict_if_expired(name)
        return self.data.get(name)

    def delete(self, *names: str) -> int:
        removed = 0
        for name in names:
            if self.data.pop(name, None) is not None:
                removed += 1
            self.expiry.pop(name, None)
        return removed

    def scan_iter(self, match: str = "*"):
        for name in list(self.data):
            self._evict_if_expired(name)
        return iter([name for name in self.data if fnmatch.fnmatchcase(name, match)])

    def close(self) -> None:
        self.closed = True


class StubProvider(BaseCostProvider):
    """Provider returning canned amounts, optionally slow or failing."""

    uses_network = False

    def __init__(
        self,
        provider_id: ProviderId,
        amounts: Optional[Dict[Category, float]] = None,
        confidence: float = 0.9,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        **extra,
    ) -> None:
        self.provider_id = provider_id
        super().__init__()
        self.amounts = amounts or {}
        self.confidence = confidence
        self.error = error
        self.delay = delay
        self.extra = extra
        self.calls = 0
        self._calls_lock = threading.Lock()

    def _fetch_impl(self, city: str, country: str) -> ProviderResult:
        with self._calls_lock:
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self._result(
            {
                category: self._cost(Decimal(str(amount)), self.confidence)
                for category, amount in self.amounts.items()
            },
            **self.extra,
        )


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def fake_redis(fake_clock) -> FakeRedis:
    return FakeRedis(fake_clock)


@pytest.fixture()
def make_provider():
    """Factory fixture building ``StubProvider`` instances."""
    return StubProvider
