"""Exchange-rate based estimator, the fallback of last resort."""

from __future__ import annotations

import logging
import threading
import time
from decimal import Decimal
from typing import Dict, Optional

import requests

from cost_engine.configs import settings
from cost_engine.data.benchmarks import COUNTRY_COST_MULTIPLIERS, COUNTRY_CURRENCIES
from cost_engine.models.cost_models import Category

from ..models import DEFAULT_MONTHLY_AMOUNTS, ProviderId, ProviderResult
from ..utils import DEFAULT_HEADERS, normalize_location, to_decimal
from .base import BaseCostProvider

logger = logging.getLogger("cost_data.exchange")

BASE_MONTHLY_COSTS = DEFAULT_MONTHLY_AMOUNTS
ESTIMATE_CONFIDENCE: Dict[Category, float] = {
    Category.ACCOMMODATION: 0.4,
    Category.FOOD: 0.4,
    Category.TRANSPORT: 0.4,
    Category.COWORKING: 0.5,
}
RATES_MAX_AGE_SECONDS = 12 * 60 * 60
RATES_RETRY_SECONDS = 5 * 60


class ExchangeRateEstimator(BaseCostProvider):
    """Scale a base USD budget by the country's price level.

    The estimate is always produced and needs no network. The public USD rate
    table only adds the local currency rate; when it cannot be fetched the
    estimate comes back without it. Only the rate download is rate limited,
    and a failed download is not retried for a few minutes.
    """

    provider_id = ProviderId.EXCHANGE
    uses_network = False
    min_interval_seconds = 1.0

    def __init__(
        self,
        rates_url: Optional[str] = None,
        timeout: Optional[float] = None,
        min_interval_seconds: Optional[float] = None,
    ) -> None:
        super().__init__(min_interval_seconds)
        self.rates_url = rates_url or settings.EXCHANGE_RATE_API_URL
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._multipliers = {
            normalize_location(country): Decimal(str(value))
            for country, value in COUNTRY_COST_MULTIPLIERS.items()
        }
        self._currencies = {
            normalize_location(country): code
            for country, code in COUNTRY_CURRENCIES.items()
        }
        self._rates: Dict[str, Decimal] = {}
        self._rates_fetched_at: Optional[float] = None
        self._rates_failed_at: Optional[float] = None
        self._rates_lock = threading.Lock()

    def _fetch_impl(self, city: str, country: str) -> ProviderResult:
        key = normalize_location(country)
        multiplier = self._multipliers.get(key, Decimal("1.0"))
        costs = {
            category: self._cost(
                BASE_MONTHLY_COSTS[category] * multiplier,
                ESTIMATE_CONFIDENCE[category],
            )
            for category in Category
        }

        currency = self._currencies.get(key)
        rate = self._local_rate(currency) if currency else None
        return self._result(
            costs,
            local_currency=currency if rate is not None else None,
            exchange_rate=rate,
        )

    def _local_rate(self, currency: str) -> Optional[Decimal]:
        with self._rates_lock:
            if self._rates_due(time.monotonic()):
                self._rate_limiter.wait()
                try:
                    self._rates = self._download_rates()
                    self._rates_fetched_at = time.monotonic()
                    self._rates_failed_at = None
                except (requests.RequestException, ValueError) as exc:
                    logger.warning("Exchange rates unavailable: %s", exc)
                    self._rates_failed_at = time.monotonic()
            return self._rates.get(currency)

    def _rates_due(self, now: float) -> bool:
        if (
            self._rates_failed_at is not None
            and now - self._rates_failed_at < RATES_RETRY_SECONDS
        ):
            return False
        return (
            self._rates_fetched_at is None
            or now - self._rates_fetched_at >= RATES_MAX_AGE_SECONDS
        )

    def _download_rates(self) -> Dict[str, Decimal]:
        response = requests.get(
            self.rates_url,
            headers={**DEFAULT_HEADERS, "Accept": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict):
            raise ValueError("Exchange rate payload has no 'rates' table.")
        parsed: Dict[str, Decimal] = {}
        for code, value in rates.items():
            rate = to_decimal(value)
            if rate is not None and rate > 0:
                parsed[code.upper()] = rate
        return parsed
