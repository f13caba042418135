"""Cost-of-living aggregation and caching engine."""

from cost_engine.models.cost_models import (
    Category,
    CategoryCost,
    CostBreakdown,
    CostTotal,
    QualityReport,
)
from cost_engine.repositories.cache.base import CacheBackendError, CacheStats, CacheStore
from cost_engine.repositories.cache.factory import create_cache_store
from cost_engine.services.cost_data.models import (
    CostProviderError,
    InvalidLocationError,
    ProviderId,
    WarmupSummary,
)
from cost_engine.services.cost_data.service import (
    CostDataService,
    create_cost_data_service,
)

__all__ = [
    "CacheBackendError",
    "CacheStats",
    "CacheStore",
    "Category",
    "CategoryCost",
    "CostBreakdown",
    "CostDataService",
    "CostProviderError",
    "CostTotal",
    "InvalidLocationError",
    "ProviderId",
    "QualityReport",
    "WarmupSummary",
    "create_cache_store",
    "create_cost_data_service",
]
