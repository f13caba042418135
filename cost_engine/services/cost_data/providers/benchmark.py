"""Static benchmark table provider."""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Mapping, Optional, Tuple

from cost_engine.data.benchmarks import CITY_BENCHMARKS
from cost_engine.models.cost_models import Category

from ..models import ProviderId, ProviderResult
from ..utils import normalize_location
from .base import BaseCostProvider

BENCHMARK_CONFIDENCE: Dict[Category, float] = {
    Category.ACCOMMODATION: 0.6,
    Category.FOOD: 0.6,
    Category.TRANSPORT: 0.6,
    Category.COWORKING: 0.7,
}


class BenchmarkCostProvider(BaseCostProvider):
    """Look the city up in a researched benchmark table. No network."""

    provider_id = ProviderId.BENCHMARK
    uses_network = False

    def __init__(
        self,
        table: Optional[Mapping[str, Mapping[str, Tuple[int, int, int, int]]]] = None,
    ) -> None:
        super().__init__()
        source = CITY_BENCHMARKS if table is None else table
        self._index: Dict[Tuple[str, str], Tuple[int, int, int, int]] = {
            (normalize_location(city), normalize_location(country)): amounts
            for country, cities in source.items()
            for city, amounts in cities.items()
        }

    def _fetch_impl(self, city: str, country: str) -> ProviderResult:
        amounts = self._index.get((normalize_location(city), normalize_location(country)))
        if amounts is None:
            return self._result({})
        return self._result(
            {
                category: self._cost(Decimal(amount), BENCHMARK_CONFIDENCE[category])
                for category, amount in zip(Category, amounts)
            }
        )
