"""Test the cache-aside cost data service."""

import threading
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from cost_engine.configs import Settings
from cost_engine.models.cost_models import Category
from cost_engine.repositories.cache.base import CacheBackendError
from cost_engine.repositories.cache.file_store import FileCacheStore
from cost_engine.repositories.cache.memory_store import MemoryCacheStore
from cost_engine.repositories.cache.redis_store import RedisCacheStore
from cost_engine.services.cost_data.aggregator import CostAggregator
from cost_engine.services.cost_data.models import (
    PROVIDER_PRIORITY,
    CostProviderError,
    InvalidLocationError,
    ProviderId,
)
from cost_engine.services.cost_data.providers import BenchmarkCostProvider
from cost_engine.services.cost_data.service import (
    CostDataService,
    create_cost_data_service,
)
from cost_engine.services.cost_data.utils import cache_key

TTL = 1000
ALL_CATEGORIES = {
    Category.ACCOMMODATION: 900,
    Category.FOOD: 400,
    Category.TRANSPORT: 60,
    Category.COWORKING: 180,
}


@pytest.fixture()
def numbeo(make_provider):
    return make_provider(ProviderId.NUMBEO, ALL_CATEGORIES, confidence=0.8)


@pytest.fixture()
def store(fake_clock):
    return MemoryCacheStore(clock=fake_clock)


@pytest.fixture(params=["memory", "file", "redis"])
def any_store(request, fake_clock, fake_redis, tmp_path):
    if request.param == "memory":
        return MemoryCacheStore(clock=fake_clock)
    if request.param == "file":
        return FileCacheStore(tmp_path / "cache", clock=fake_clock)
    return RedisCacheStore(client=fake_redis, clock=fake_clock)


@pytest.fixture()
def service_factory(store):
    created = []

    def build(*providers, cache_store=None):
        service = CostDataService(
            cache_store=cache_store or store,
            aggregator=CostAggregator(providers=list(providers), timeout=2.0),
            ttl_seconds=TTL,
        )
        created.append(service)
        return service

    yield build
    for service in created:
        service.aggregator.close()


class TestGetCostData:
    """Cache-aside reads."""

    def test_second_call_is_served_from_cache(
        self, service_factory, numbeo, any_store
    ) -> None:
        service = service_factory(numbeo, cache_store=any_store)

        first = service.get_cost_data("Lisbon", "Portugal")
        second = service.get_cost_data("Lisbon", "Portugal")
        third = service.get_cost_data("Lisbon", "Portugal")

        assert numbeo.calls == 1
        assert first.model_dump(mode="json") == second.model_dump(mode="json")
        assert second == third

    def test_location_is_normalized(self, service_factory, numbeo, store) -> None:
        service = service_factory(numbeo)

        service.get_cost_data("Lisbon", "Portugal")
        service.get_cost_data("  lisbon ", "PORTUGAL")

        assert numbeo.calls == 1
        assert store.get(cache_key("Lisbon", "Portugal")) is not None

    def test_result_carries_quality(self, service_factory, numbeo) -> None:
        breakdown = service_factory(numbeo).get_cost_data("Lisbon", "Portugal")

        assert breakdown.quality is not None
        assert breakdown.quality.overall == "high"
        assert breakdown.quality.data_sources == ["Numbeo"]
        assert breakdown.total.monthly_amount == Decimal("1540.00")

    def test_force_refresh_bypasses_cache(self, service_factory, numbeo) -> None:
        service = service_factory(numbeo)

        service.get_cost_data("Lisbon", "Portugal")
        service.get_cost_data("Lisbon", "Portugal", force_refresh=True)
        service.get_cost_data("Lisbon", "Portugal")

        assert numbeo.calls == 2

    def test_expired_entry_is_recomputed(
        self, service_factory, numbeo, any_store, fake_clock
    ) -> None:
        service = service_factory(numbeo, cache_store=any_store)

        service.get_cost_data("Lisbon", "Portugal")
        fake_clock.advance(TTL - 1)
        service.get_cost_data("Lisbon", "Portugal")
        assert numbeo.calls == 1

        fake_clock.advance(1)
        service.get_cost_data("Lisbon", "Portugal")
        assert numbeo.calls == 2

    def test_undecodable_cache_file_is_recomputed(
        self, service_factory, numbeo, fake_clock, tmp_path
    ) -> None:
        file_store = FileCacheStore(tmp_path, clock=fake_clock)
        path = file_store.path_for(cache_key("Lisbon", "Portugal"))
        path.write_bytes(b"\xff\xfe\x00garbage")
        service = service_factory(numbeo, cache_store=file_store)

        breakdown = service.get_cost_data("Lisbon", "Portugal")

        assert breakdown.accommodation.source == "Numbeo"
        assert numbeo.calls == 1
        assert file_store.get(cache_key("Lisbon", "Portugal")) is not None

    @pytest.mark.parametrize("city,country", [("", "Portugal"), ("Lisbon", "   "), (None, "Portugal")])
    def test_invalid_location(self, service_factory, numbeo, city, country) -> None:
        service = service_factory(numbeo)

        with pytest.raises(InvalidLocationError):
            service.get_cost_data(city, country)

        assert numbeo.calls == 0

    def test_cache_failures_do_not_fail_lookup(self, service_factory, numbeo) -> None:
        broken = MagicMock()
        broken.get.side_effect = CacheBackendError("redis", "GET failed")
        broken.set.side_effect = CacheBackendError("redis", "SET failed")
        service = service_factory(numbeo, cache_store=broken)

        breakdown = service.get_cost_data("Lisbon", "Portugal")

        assert breakdown.accommodation.source == "Numbeo"
        broken.set.assert_called_once()

    def test_writes_with_configured_ttl(self, service_factory, numbeo) -> None:
        recorder = MagicMock()
        recorder.get.return_value = None
        service = service_factory(numbeo, cache_store=recorder)

        service.get_cost_data("Lisbon", "Portugal")

        args, kwargs = recorder.set.call_args
        assert args[0] == "lisbon|portugal"
        assert args[1]["city"] == "Lisbon"
        assert args[2] == TTL
        assert kwargs == {"source_tag": "cost-aggregator"}

    def test_unreadable_cached_payload_is_recomputed(self, service_factory, numbeo, store) -> None:
        store.set("lisbon|portugal", {"unexpected": "shape"}, ttl=TTL)
        service = service_factory(numbeo)

        breakdown = service.get_cost_data("Lisbon", "Portugal")

        assert numbeo.calls == 1
        assert breakdown.city == "Lisbon"

    def test_concurrent_misses_share_one_aggregation(self, service_factory, make_provider) -> None:
        slow = make_provider(ProviderId.NUMBEO, ALL_CATEGORIES, confidence=0.8, delay=0.3)
        service = service_factory(slow)
        barrier = threading.Barrier(5)
        results = []

        def lookup():
            barrier.wait()
            results.append(service.get_cost_data("Lisbon", "Portugal"))

        threads = [threading.Thread(target=lookup) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert slow.calls == 1
        assert len(results) == 5
        assert all(result.total == results[0].total for result in results)

    def test_redis_backed_results_are_identical(self, service_factory, numbeo, fake_redis, fake_clock) -> None:
        service = service_factory(
            numbeo, cache_store=RedisCacheStore(client=fake_redis, clock=fake_clock)
        )

        first = service.get_cost_data("Lisbon", "Portugal")
        second = service.get_cost_data("Lisbon", "Portugal")

        assert numbeo.calls == 1
        assert first.model_dump(mode="json") == second.model_dump(mode="json")
        assert list(fake_redis.data) == ["cost-data:lisbon|portugal"]


class TestFallbackScenarios:
    """End-to-end merges through the service."""

    def test_benchmark_city_with_failing_live_sources(self, service_factory, make_provider) -> None:
        service = service_factory(
            make_provider(
                ProviderId.NUMBEO, error=CostProviderError(ProviderId.NUMBEO, "rate limited")
            ),
            make_provider(ProviderId.EXPATISTAN),
            BenchmarkCostProvider(),
            make_provider(ProviderId.EXCHANGE, ALL_CATEGORIES, confidence=0.4),
        )

        breakdown = service.get_cost_data("Bangkok", "Thailand")

        assert breakdown.accommodation.monthly_amount == Decimal("600.00")
        assert breakdown.food.monthly_amount == Decimal("300.00")
        assert breakdown.transport.monthly_amount == Decimal("80.00")
        assert breakdown.coworking.monthly_amount == Decimal("150.00")
        assert breakdown.total.monthly_amount == Decimal("1130.00")
        assert breakdown.total.confidence == 0.625
        assert breakdown.quality.overall == "medium"
        assert breakdown.quality.data_sources == ["Benchmark"]

    def test_every_provider_failing(self, service_factory, make_provider) -> None:
        service = service_factory(
            make_provider(ProviderId.NUMBEO, error=RuntimeError("down")),
            make_provider(ProviderId.EXCHANGE, error=RuntimeError("down")),
        )

        breakdown = service.get_cost_data("Atlantis", "Nowhere")

        assert breakdown.total.monthly_amount == Decimal("1430.00")
        assert breakdown.quality.overall == "low"
        assert breakdown.quality.data_sources == []


class TestMaintenance:
    """Warm-up, invalidation and diagnostics."""

    def test_warm_cache_skips_cached_cities(self, service_factory, numbeo) -> None:
        service = service_factory(numbeo)
        service.get_cost_data("Lisbon", "Portugal")

        summary = service.warm_cache(
            [("Lisbon", "Portugal"), ("Porto", "Portugal"), ("Berlin", "Germany")]
        )

        assert (summary.total, summary.success, summary.skipped, summary.failed) == (3, 2, 1, 0)
        assert [detail["status"] for detail in summary.details] == [
            "skipped",
            "success",
            "success",
        ]
        assert numbeo.calls == 3

    def test_warm_cache_force_and_limit(self, service_factory, numbeo) -> None:
        service = service_factory(numbeo)
        service.get_cost_data("Lisbon", "Portugal")

        summary = service.warm_cache(
            [("Lisbon", "Portugal"), ("Porto", "Portugal"), ("Berlin", "Germany")],
            force=True,
            max_cities=2,
        )

        assert summary.total == 2
        assert summary.success == 2
        assert summary.details[0]["quality"] == "high"
        assert numbeo.calls == 3

    def test_warm_cache_defaults_to_popular_cities(self, service_factory, numbeo) -> None:
        summary = service_factory(numbeo).warm_cache(max_cities=3)

        assert [(d["city"], d["country"]) for d in summary.details] == [
            ("Bangkok", "Thailand"),
            ("Lisbon", "Portugal"),
            ("Berlin", "Germany"),
        ]

    def test_invalid_warm_entry_is_counted_as_failed(self, service_factory, numbeo) -> None:
        summary = service_factory(numbeo).warm_cache([("", "Portugal"), ("Porto", "Portugal")])

        assert summary.failed == 1
        assert summary.success == 1
        assert summary.details[0]["status"] == "failed"

    def test_invalidate(self, service_factory, numbeo) -> None:
        service = service_factory(numbeo)
        service.get_cost_data("Lisbon", "Portugal")

        service.invalidate("LISBON", "portugal")
        service.get_cost_data("Lisbon", "Portugal")

        assert numbeo.calls == 2

    def test_stats_and_purge(self, service_factory, numbeo, fake_clock) -> None:
        service = service_factory(numbeo)
        service.get_cost_data("Lisbon", "Portugal")
        service.get_cost_data("Porto", "Portugal")

        assert service.cache_stats().entry_count == 2
        assert service.cache_stats().backend_kind == "memory"

        fake_clock.advance(TTL)
        assert service.purge_expired() == 2
        assert service.cache_stats().entry_count == 0

    def test_data_source_status(self, service_factory, make_provider) -> None:
        service = service_factory(
            BenchmarkCostProvider(), make_provider(ProviderId.NUMBEO)
        )

        status = service.data_source_status()

        assert [entry["provider"] for entry in status] == ["Numbeo", "Benchmark"]
        assert status[1]["uses_network"] is False


def test_create_cost_data_service_wires_configuration():
    service = create_cost_data_service(
        Settings(CACHE_BACKEND="memory", CACHE_MAX_ENTRIES=7, CACHE_TTL_SECONDS=3600)
    )
    try:
        assert isinstance(service.cache_store, MemoryCacheStore)
        assert service.cache_store.max_entries == 7
        assert service.ttl_seconds == 3600
        assert [p.provider_id for p in service.aggregator.providers] == list(PROVIDER_PRIORITY)
    finally:
        service.close()
