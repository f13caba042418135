"""Domain models for cost data providers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from cost_engine.models.cost_models import Category, CategoryCost


class ProviderId(str, Enum):
    """Closed set of data providers known to the engine."""

    NUMBEO = "Numbeo"
    EXPATISTAN = "Expatistan"
    BENCHMARK = "Benchmark"
    EXCHANGE = "Exchange-based"


# Merge order: the first provider with a value wins each category.
PROVIDER_PRIORITY: Tuple[ProviderId, ...] = (
    ProviderId.NUMBEO,
    ProviderId.EXPATISTAN,
    ProviderId.BENCHMARK,
    ProviderId.EXCHANGE,
)

DEFAULT_SOURCE = "default"
DEFAULT_CONFIDENCE = 0.2
DEFAULT_MONTHLY_AMOUNTS: Dict[Category, Decimal] = {
    Category.ACCOMMODATION: Decimal("800"),
    Category.FOOD: Decimal("400"),
    Category.TRANSPORT: Decimal("80"),
    Category.COWORKING: Decimal("150"),
}


def priority_of(provider: ProviderId) -> int:
    """Return the merge rank of a provider (0 is highest)."""
    return PROVIDER_PRIORITY.index(provider)


def default_cost(category: Category) -> CategoryCost:
    """Fallback used when no provider produced a value for a category."""
    return CategoryCost(
        monthly_amount=DEFAULT_MONTHLY_AMOUNTS[category],
        source=DEFAULT_SOURCE,
        confidence=DEFAULT_CONFIDENCE,
    )


@dataclass(slots=True)
class ProviderResult:
    """Partial breakdown returned by one provider, or a failure marker."""

    provider: ProviderId
    costs: Dict[Category, CategoryCost] = field(default_factory=dict)
    error: Optional[str] = None
    local_currency: Optional[str] = None
    exchange_rate: Optional[Decimal] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_for(self, category: Category) -> Optional[CategoryCost]:
        """Return a usable (positive) amount for the category, if any."""
        if not self.ok:
            return None
        cost = self.costs.get(category)
        if cost is None or cost.monthly_amount <= 0:
            return None
        return cost

    @classmethod
    def failure(cls, provider: ProviderId, reason: str) -> "ProviderResult":
        return cls(provider=provider, error=reason)


@dataclass(slots=True)
class ProviderStatus:
    """Diagnostic snapshot of a provider."""

    provider: ProviderId
    priority: int
    uses_network: bool
    min_interval_seconds: float
    last_called_at: Optional[datetime] = None
    last_error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider.value,
            "priority": self.priority,
            "uses_network": self.uses_network,
            "min_interval_seconds": self.min_interval_seconds,
            "last_called_at": (
                self.last_called_at.isoformat() if self.last_called_at else None
            ),
            "last_error": self.last_error,
        }


@dataclass(slots=True)
class WarmupSummary:
    """Outcome of pre-populating the cache for a list of cities."""

    total: int = 0
    success: int = 0
    failed: int = 0
    skipped: int = 0
    details: List[Dict[str, Any]] = field(default_factory=list)


class CostProviderError(RuntimeError):
    """Raised when a provider cannot complete a lookup."""

    def __init__(self, provider: ProviderId, message: str) -> None:
        super().__init__(message)
        self.provider = provider
        self.message = message


class InvalidLocationError(ValueError):
    """Raised when the caller supplies an empty city or country."""
