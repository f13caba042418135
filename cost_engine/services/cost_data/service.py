"""Cache-aside entry point for cost-of-living lookups."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from cost_engine.configs import Settings, settings as default_settings
from cost_engine.data.benchmarks import POPULAR_CITIES
from cost_engine.logger_config import get_logger
from cost_engine.models.cost_models import CostBreakdown, QualityReport
from cost_engine.repositories.cache.base import (
    DEFAULT_SOURCE_TAG,
    CacheBackendError,
    CacheStats,
    CacheStore,
)
from cost_engine.repositories.cache.factory import create_cache_store

from .aggregator import CostAggregator
from .models import InvalidLocationError, WarmupSummary
from .providers import default_providers
from .quality import score_breakdown
from .utils import cache_key, normalize_whitespace

logger = get_logger(__name__)

DEFAULT_WARMUP_LIMIT = 20


class CostDataService:
    """Answer "what does it cost to live here" for a (city, country) pair.

    Reads go to the cache first. On a miss the aggregator runs, the result is
    graded and written back with a long TTL. The cache is an optimization
    only: backend failures are logged and the lookup still succeeds.
    Concurrent misses on the same key share one aggregation.
    """

    def __init__(
        self,
        cache_store: CacheStore,
        aggregator: Optional[CostAggregator] = None,
        ttl_seconds: Optional[float] = None,
        scorer: Callable[[CostBreakdown], QualityReport] = score_breakdown,
    ) -> None:
        self.cache_store = cache_store
        self.aggregator = aggregator or CostAggregator()
        self.ttl_seconds = ttl_seconds or default_settings.CACHE_TTL_SECONDS
        self.scorer = scorer
        self._in_flight: Dict[str, Future] = {}
        self._in_flight_lock = threading.Lock()

    def get_cost_data(
        self, city: str, country: str, force_refresh: bool = False
    ) -> CostBreakdown:
        """Return the breakdown for the location, aggregating on a cache miss.

        Args:
            city (str): City name; surrounding whitespace is ignored.
            country (str): Country name.
            force_refresh (bool): Skip the cache read; the result is still cached.

        Raises:
            InvalidLocationError: If city or country is empty.
        """
        city, country = self._validate(city, country)
        key = cache_key(city, country)
        if not force_refresh:
            cached = self._read_cache(key)
            if cached is not None:
                logger.debug("Cache hit for %s", key)
                return cached
        logger.info("Cache miss for %s, aggregating providers.", key)
        return self._load_once(key, city, country)

    def invalidate(self, city: str, country: str) -> None:
        """Drop the cached breakdown for the location."""
        city, country = self._validate(city, country)
        key = cache_key(city, country)
        try:
            self.cache_store.delete(key)
        except CacheBackendError as exc:
            logger.warning("Could not invalidate %s: %s", key, exc.message)

    def warm_cache(
        self,
        locations: Optional[Iterable[Tuple[str, str]]] = None,
        force: bool = False,
        max_cities: int = DEFAULT_WARMUP_LIMIT,
    ) -> WarmupSummary:
        """Pre-populate the cache, one city at a time.

        Cities already cached are skipped unless ``force`` is set.
        """
        targets = list(POPULAR_CITIES if locations is None else locations)[:max_cities]
        summary = WarmupSummary(total=len(targets))
        logger.info("Warming cost cache for %d cities (force=%s).", len(targets), force)

        for city, country in targets:
            detail: Dict[str, Any] = {"city": city, "country": country}
            try:
                if not force and self._read_cache(cache_key(city, country)) is not None:
                    summary.skipped += 1
                    detail["status"] = "skipped"
                else:
                    breakdown = self.get_cost_data(city, country, force_refresh=True)
                    summary.success += 1
                    detail["status"] = "success"
                    detail["quality"] = breakdown.quality.overall if breakdown.quality else None
            except Exception as exc:
                logger.error("Warm-up failed for %s, %s: %s", city, country, exc)
                summary.failed += 1
                detail["status"] = "failed"
                detail["error"] = str(exc)
            summary.details.append(detail)

        logger.info(
            "Warm-up finished: %d ok, %d skipped, %d failed.",
            summary.success,
            summary.skipped,
            summary.failed,
        )
        return summary

    def purge_expired(self) -> int:
        removed = self.cache_store.purge_expired()
        logger.info("Purged %d expired cost entries.", removed)
        return removed

    def cache_stats(self) -> CacheStats:
        return self.cache_store.stats()

    def data_source_status(self) -> List[Dict[str, Any]]:
        return [status.as_dict() for status in self.aggregator.provider_statuses()]

    def close(self) -> None:
        self.aggregator.close()
        self.cache_store.close()

    @staticmethod
    def _validate(city: str, country: str) -> Tuple[str, str]:
        city = normalize_whitespace(city or "")
        country = normalize_whitespace(country or "")
        if not city or not country:
            raise InvalidLocationError("City and country are required.")
        return city, country

    def _read_cache(self, key: str) -> Optional[CostBreakdown]:
        try:
            payload = self.cache_store.get(key)
        except CacheBackendError as exc:
            logger.warning("Cache read failed for %s: %s", key, exc.message)
            return None
        if payload is None:
            return None
        try:
            return CostBreakdown.model_validate(payload)
        except ValidationError:
            logger.warning("Cached entry %s is unreadable, recomputing.", key)
            return None

    def _load_once(self, key: str, city: str, country: str) -> CostBreakdown:
        with self._in_flight_lock:
            future = self._in_flight.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._in_flight[key] = future

        if not leader:
            logger.debug("Waiting for in-flight aggregation of %s", key)
            return future.result()

        try:
            breakdown = self._aggregate_and_store(key, city, country)
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(breakdown)
            return breakdown
        finally:
            with self._in_flight_lock:
                self._in_flight.pop(key, None)

    def _aggregate_and_store(self, key: str, city: str, country: str) -> CostBreakdown:
        breakdown = self.aggregator.aggregate(city, country)
        breakdown = breakdown.model_copy(update={"quality": self.scorer(breakdown)})
        try:
            self.cache_store.set(
                key,
                breakdown.model_dump(mode="json"),
                self.ttl_seconds,
                source_tag=DEFAULT_SOURCE_TAG,
            )
        except CacheBackendError as exc:
            logger.warning("Cache write failed for %s: %s", key, exc.message)
        return breakdown


def create_cost_data_service(config: Optional[Settings] = None) -> CostDataService:
    """Build a service wired from configuration."""
    config = config or default_settings
    aggregator = CostAggregator(
        providers=default_providers(config),
        timeout=config.PROVIDER_TIMEOUT_SECONDS,
    )
    return CostDataService(
        cache_store=create_cache_store(config),
        aggregator=aggregator,
        ttl_seconds=config.CACHE_TTL_SECONDS,
    )
