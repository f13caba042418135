"""Numbeo metered pricing API provider."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

import requests

from cost_engine.configs import settings
from cost_engine.models.cost_models import Category

from ..models import CostProviderError, ProviderId, ProviderResult
from ..utils import DEFAULT_HEADERS, to_decimal
from .base import BaseCostProvider

logger = logging.getLogger("cost_data.numbeo")

RENT_ITEM = "Apartment (1 bedroom) in City Centre"
MEAL_ITEM = "Meal, Inexpensive Restaurant"
TICKET_ITEM = "One-way Ticket (Local Transport)"

MEALS_PER_DAY = 3
TRIPS_PER_DAY = 2
DAYS_PER_MONTH = 30


class NumbeoCostProvider(BaseCostProvider):
    """Query the Numbeo ``city_prices`` endpoint.

    The API is keyed and rate limited. Without a key the provider reports no
    data instead of failing. Numbeo has no coworking prices.
    """

    provider_id = ProviderId.NUMBEO

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        min_interval_seconds: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__(
            settings.NUMBEO_MIN_INTERVAL_SECONDS
            if min_interval_seconds is None
            else min_interval_seconds
        )
        self.api_key = api_key if api_key is not None else settings.NUMBEO_API_KEY
        self.api_url = api_url or settings.NUMBEO_API_URL
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    def _fetch_impl(self, city: str, country: str) -> ProviderResult:
        if not self.api_key:
            logger.debug("Numbeo API key not configured, skipping lookup.")
            return self._result({})

        response = requests.get(
            self.api_url,
            params={"api_key": self.api_key, "query": f"{city}, {country}"},
            headers={**DEFAULT_HEADERS, "Accept": "application/json"},
            timeout=self.timeout,
        )
        if response.status_code == 429:
            raise CostProviderError(self.provider_id, "Numbeo rate limit reached.")
        if response.status_code == 404:
            return self._result({})
        if not 200 <= response.status_code < 300:
            raise CostProviderError(
                self.provider_id, f"HTTP {response.status_code} from Numbeo."
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise CostProviderError(
                self.provider_id, "Malformed JSON from Numbeo."
            ) from exc

        if not isinstance(payload, dict):
            raise CostProviderError(self.provider_id, "Unexpected Numbeo payload.")
        if payload.get("error"):
            raise CostProviderError(
                self.provider_id, f"Numbeo rejected the query: {payload['error']}"
            )

        prices = self._index_prices(payload.get("prices") or [])
        costs = {}
        rent = prices.get(RENT_ITEM)
        if rent:
            costs[Category.ACCOMMODATION] = self._cost(rent, 0.8)
        meal = prices.get(MEAL_ITEM)
        if meal:
            costs[Category.FOOD] = self._cost(
                meal * MEALS_PER_DAY * DAYS_PER_MONTH, 0.7
            )
        ticket = prices.get(TICKET_ITEM)
        if ticket:
            costs[Category.TRANSPORT] = self._cost(
                ticket * TRIPS_PER_DAY * DAYS_PER_MONTH, 0.6
            )
        return self._result(costs)

    @staticmethod
    def _index_prices(items: Iterable[Dict[str, Any]]) -> Dict[str, Decimal]:
        """Map item names to their average USD price, skipping unusable rows."""
        prices: Dict[str, Decimal] = {}
        for item in items:
            if not isinstance(item, dict):
                continue
            name = item.get("item_name")
            value = to_decimal(item.get("average_price"))
            if name and value is not None and value > 0:
                prices[name] = value
        return prices
