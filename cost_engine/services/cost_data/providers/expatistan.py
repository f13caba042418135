"""Expatistan community pricing provider."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Optional, Tuple

import requests
from bs4 import BeautifulSoup

from cost_engine.configs import settings
from cost_engine.models.cost_models import Category

from ..models import CostProviderError, ProviderId, ProviderResult
from ..utils import DEFAULT_HEADERS, normalize_whitespace, slugify, to_decimal
from .base import BaseCostProvider

logger = logging.getLogger("cost_data.expatistan")

MEALS_PER_DAY = 2
DAYS_PER_MONTH = 30

# (category, keywords that must all appear in the row label, confidence)
ROW_MATCHERS: Tuple[Tuple[Category, Tuple[str, ...], float], ...] = (
    (Category.ACCOMMODATION, ("monthly rent", "normal area"), 0.8),
    (Category.ACCOMMODATION, ("monthly rent",), 0.8),
    (Category.FOOD, ("lunchtime menu",), 0.7),
    (Category.TRANSPORT, ("monthly ticket", "public transport"), 0.6),
)


class ExpatistanCostProvider(BaseCostProvider):
    """Scrape the Expatistan cost-of-living page for a city.

    Requests are spaced at least two seconds apart to respect the site.
    """

    provider_id = ProviderId.EXPATISTAN

    def __init__(
        self,
        base_url: Optional[str] = None,
        min_interval_seconds: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> None:
        interval = (
            settings.EXPATISTAN_MIN_INTERVAL_SECONDS
            if min_interval_seconds is None
            else min_interval_seconds
        )
        super().__init__(interval)
        self.base_url = (base_url or settings.EXPATISTAN_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    def page_url(self, city: str) -> str:
        return f"{self.base_url}/{slugify(city)}?currency=USD"

    def _fetch_impl(self, city: str, country: str) -> ProviderResult:
        url = self.page_url(city)
        headers = {
            **DEFAULT_HEADERS,
            "Accept": (
                "text/html,application/xhtml+xml,application/xml;q=0.9,"
                "image/webp,*/*;q=0.8"
            ),
            "Connection": "keep-alive",
        }
        response = requests.get(url, headers=headers, timeout=self.timeout)

        if response.status_code == 404:
            return self._result({})
        if response.status_code != 200:
            raise CostProviderError(
                self.provider_id, f"HTTP {response.status_code} from Expatistan."
            )

        soup = BeautifulSoup(response.text, "html.parser")
        rows = list(self._iter_price_rows(soup))
        if not rows:
            logger.info("No price table found on %s.", url)
            return self._result({})

        costs = {}
        for category, keywords, confidence in ROW_MATCHERS:
            if category in costs:
                continue
            price = self._find_price(rows, keywords)
            if price is None:
                continue
            if category is Category.FOOD:
                price = price * MEALS_PER_DAY * DAYS_PER_MONTH
            costs[category] = self._cost(price, confidence)
        return self._result(costs)

    @staticmethod
    def _iter_price_rows(soup: BeautifulSoup) -> Iterable[Tuple[str, Decimal]]:
        """Yield (lower-cased label, price) pairs from the page's price tables."""
        for row in soup.select("table tr"):
            cells = row.find_all("td")
            if len(cells) < 2:
                continue
            label_cell = row.select_one("td.item-name") or cells[0]
            price_cell = row.select_one("td.price") or cells[-1]
            label = normalize_whitespace(label_cell.get_text(" ", strip=True)).lower()
            price = to_decimal(price_cell.get_text(strip=True))
            if label and price is not None and price > 0:
                yield label, price

    @staticmethod
    def _find_price(
        rows: Iterable[Tuple[str, Decimal]], keywords: Tuple[str, ...]
    ) -> Optional[Decimal]:
        for label, price in rows:
            if all(keyword in label for keyword in keywords):
                return price
        return None
