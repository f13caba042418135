"""Base classes for cost data providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional

import requests

from cost_engine.models.cost_models import Category, CategoryCost

from ..models import (
    CostProviderError,
    ProviderId,
    ProviderResult,
    ProviderStatus,
    priority_of,
)
from ..utils import RateLimiter

logger = logging.getLogger("cost_data.provider")


class BaseCostProvider(ABC):
    """Common behaviour for cost data providers.

    ``fetch`` never raises: "city unknown" is an empty result and any failure
    becomes a result carrying ``error``. Network providers are spaced by their
    own rate limiter, so callers need no throttling of their own.
    """

    provider_id: ProviderId
    uses_network: bool = True
    min_interval_seconds: float = 0.0

    def __init__(self, min_interval_seconds: Optional[float] = None) -> None:
        if min_interval_seconds is not None:
            self.min_interval_seconds = min_interval_seconds
        self._rate_limiter = RateLimiter(self.min_interval_seconds)
        self._last_called_at: Optional[datetime] = None
        self._last_error: Optional[str] = None

    @property
    def name(self) -> str:
        return self.provider_id.value

    def fetch(self, city: str, country: str) -> ProviderResult:
        """Public lookup entry point with error handling."""
        if self.uses_network:
            self._rate_limiter.wait()
        self._last_called_at = datetime.now(timezone.utc)
        try:
            result = self._fetch_impl(city, country)
        except CostProviderError as exc:
            logger.warning("Provider %s failed: %s", self.name, exc.message)
            self._last_error = exc.message
            return ProviderResult.failure(self.provider_id, exc.message)
        except requests.RequestException as exc:
            message = f"Request to {self.name} failed: {exc}"
            logger.warning(message)
            self._last_error = message
            return ProviderResult.failure(self.provider_id, message)
        except Exception:
            logger.exception("Unexpected error fetching costs from %s", self.name)
            self._last_error = f"Unexpected error in {self.name}."
            return ProviderResult.failure(self.provider_id, self._last_error)

        self._last_error = None
        if not result.costs:
            logger.info("%s has no data for %s, %s.", self.name, city, country)
        return result

    def status(self) -> ProviderStatus:
        return ProviderStatus(
            provider=self.provider_id,
            priority=priority_of(self.provider_id),
            uses_network=self.uses_network,
            min_interval_seconds=self.min_interval_seconds,
            last_called_at=self._last_called_at,
            last_error=self._last_error,
        )

    def _result(self, costs: Dict[Category, CategoryCost], **extra) -> ProviderResult:
        return ProviderResult(provider=self.provider_id, costs=costs, **extra)

    def _cost(self, amount, confidence: float) -> CategoryCost:
        return CategoryCost(
            monthly_amount=amount, source=self.name, confidence=confidence
        )

    @abstractmethod
    def _fetch_impl(self, city: str, country: str) -> ProviderResult:
        """Return the provider's partial breakdown for the location."""
        raise NotImplementedError
