"""Fan-out/fan-in aggregation of provider results into one breakdown."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence

from cost_engine.configs import settings
from cost_engine.models.cost_models import Category, CategoryCost, CostBreakdown

from .models import (
    PROVIDER_PRIORITY,
    ProviderId,
    ProviderResult,
    ProviderStatus,
    default_cost,
    priority_of,
)
from .providers import BaseCostProvider, default_providers

logger = logging.getLogger("cost_data.aggregator")


def merge_results(
    city: str,
    country: str,
    results: Mapping[ProviderId, ProviderResult],
    now: Optional[datetime] = None,
) -> CostBreakdown:
    """Merge provider results category by category.

    For each category the first provider in ``PROVIDER_PRIORITY`` holding a
    positive amount wins; failed providers are skipped. Categories nobody
    covered get the default cost.
    """
    costs: Dict[Category, CategoryCost] = {}
    for category in Category:
        for provider in PROVIDER_PRIORITY:
            result = results.get(provider)
            cost = result.value_for(category) if result is not None else None
            if cost is not None:
                costs[category] = cost
                break
        else:
            costs[category] = default_cost(category)

    local_currency = None
    exchange_rate = None
    for provider in PROVIDER_PRIORITY:
        result = results.get(provider)
        if result is not None and result.ok and result.exchange_rate is not None:
            local_currency = result.local_currency
            exchange_rate = result.exchange_rate
            break

    return CostBreakdown.from_categories(
        city=city,
        country=country,
        costs=costs,
        last_updated=now or datetime.now(timezone.utc),
        local_currency=local_currency,
        exchange_rate=exchange_rate,
    )


class CostAggregator:
    """Query every provider concurrently and merge what comes back.

    The engine owns a worker pool; call ``close`` on shutdown. A provider that
    has not settled within ``timeout`` seconds is recorded as failed and is not
    awaited further.
    """

    def __init__(
        self,
        providers: Optional[Sequence[BaseCostProvider]] = None,
        timeout: Optional[float] = None,
        max_workers: Optional[int] = None,
    ) -> None:
        providers = list(providers) if providers is not None else default_providers()
        seen = set()
        for provider in providers:
            if provider.provider_id in seen:
                raise ValueError(f"Duplicate provider {provider.provider_id.value}.")
            seen.add(provider.provider_id)

        self.providers = sorted(providers, key=lambda p: priority_of(p.provider_id))
        self.timeout = timeout or settings.PROVIDER_TIMEOUT_SECONDS
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers or max(4, 4 * len(self.providers)),
            thread_name_prefix="cost-fetch",
        )

    def collect(self, city: str, country: str) -> Dict[ProviderId, ProviderResult]:
        """Run all providers and wait until each succeeded, failed or timed out."""
        futures: Dict[ProviderId, Future[ProviderResult]] = {
            provider.provider_id: self._pool.submit(provider.fetch, city, country)
            for provider in self.providers
        }
        _, pending = wait(futures.values(), timeout=self.timeout)

        results: Dict[ProviderId, ProviderResult] = {}
        for provider_id, future in futures.items():
            if future in pending:
                future.cancel()
                logger.warning(
                    "Provider %s timed out after %.1fs for %s, %s.",
                    provider_id.value,
                    self.timeout,
                    city,
                    country,
                )
                results[provider_id] = ProviderResult.failure(
                    provider_id, f"Timed out after {self.timeout:.1f}s."
                )
                continue
            try:
                results[provider_id] = future.result()
            except Exception as exc:  # pragma: no cover - fetch() handles its own errors
                logger.exception("Provider %s crashed.", provider_id.value)
                results[provider_id] = ProviderResult.failure(provider_id, str(exc))
        return results

    def aggregate(self, city: str, country: str) -> CostBreakdown:
        """Build a complete breakdown for the location."""
        results = self.collect(city, country)
        failed = [pid.value for pid, result in results.items() if not result.ok]
        if failed:
            logger.info(
                "Aggregating %s, %s without: %s", city, country, ", ".join(failed)
            )
        return merge_results(city, country, results)

    def provider_statuses(self) -> List[ProviderStatus]:
        return [provider.status() for provider in self.providers]

    def close(self) -> None:
        self._pool.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "CostAggregator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
