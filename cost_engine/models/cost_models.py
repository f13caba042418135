"""Canonical cost-of-living models shared by the engine and its callers."""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

ONE_CENT = Decimal("0.01")
DAYS_PER_MONTH = Decimal("30")


def quantize_money(value: Decimal) -> Decimal:
    """Round a monetary amount to cents."""
    return value.quantize(ONE_CENT, rounding=ROUND_HALF_UP)


class Category(str, Enum):
    """Cost dimensions tracked for every city."""

    ACCOMMODATION = "accommodation"
    FOOD = "food"
    TRANSPORT = "transport"
    COWORKING = "coworking"


class CategoryCost(BaseModel):
    """Monthly amount for one category, the provider it came from and its confidence."""

    model_config = ConfigDict(frozen=True)

    monthly_amount: Decimal = Field(..., ge=0, description="Monthly cost in USD.")
    source: str = Field(..., description="Provider that supplied the amount.")
    confidence: float = Field(..., ge=0.0, le=1.0)

    @field_validator("monthly_amount")
    @classmethod
    def _round_to_cents(cls, value: Decimal) -> Decimal:
        return quantize_money(value)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def daily_amount(self) -> Decimal:
        return quantize_money(self.monthly_amount / DAYS_PER_MONTH)


class CostTotal(BaseModel):
    """Sum of the four categories with the mean of their confidences."""

    model_config = ConfigDict(frozen=True)

    monthly_amount: Decimal = Field(..., ge=0)
    confidence: float = Field(..., ge=0.0, le=1.0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def daily_amount(self) -> Decimal:
        return quantize_money(self.monthly_amount / DAYS_PER_MONTH)


class QualityReport(BaseModel):
    """Coarse trust grade derived from a breakdown."""

    model_config = ConfigDict(frozen=True)

    overall: Literal["high", "medium", "low"]
    confidence: float = Field(..., ge=0.0, le=1.0)
    category_confidence: Dict[str, float] = Field(default_factory=dict)
    data_sources: List[str] = Field(
        default_factory=list,
        description="Providers that won at least one category, in order of first contribution.",
    )


class CostBreakdown(BaseModel):
    """Cost of living for a (city, country) pair.

    Every category is always populated. Instances are immutable; a refreshed
    aggregation produces a new breakdown rather than updating this one.
    """

    model_config = ConfigDict(frozen=True)

    city: str
    country: str
    accommodation: CategoryCost
    food: CategoryCost
    transport: CategoryCost
    coworking: CategoryCost
    total: CostTotal
    currency: str = "USD"
    local_currency: Optional[str] = None
    exchange_rate: Optional[Decimal] = Field(
        default=None, description="Units of local_currency per USD."
    )
    last_updated: datetime
    quality: Optional[QualityReport] = None

    def category(self, category: Category) -> CategoryCost:
        """Return the cost for the given category."""
        return getattr(self, category.value)

    def categories(self) -> Dict[Category, CategoryCost]:
        """Return all categories in their canonical order."""
        return {category: self.category(category) for category in Category}

    @classmethod
    def from_categories(
        cls,
        city: str,
        country: str,
        costs: Mapping[Category, CategoryCost],
        last_updated: datetime,
        local_currency: Optional[str] = None,
        exchange_rate: Optional[Decimal] = None,
    ) -> "CostBreakdown":
        """Build a breakdown and derive its total.

        The total confidence is the unweighted mean of the four category
        confidences, rounded to four places so threshold comparisons are
        stable.
        """
        missing = [category.value for category in Category if category not in costs]
        if missing:
            raise ValueError(f"Missing categories: {', '.join(missing)}")

        monthly = sum(
            (costs[category].monthly_amount for category in Category), Decimal("0")
        )
        confidence = sum(costs[category].confidence for category in Category) / len(
            Category
        )
        return cls(
            city=city,
            country=country,
            accommodation=costs[Category.ACCOMMODATION],
            food=costs[Category.FOOD],
            transport=costs[Category.TRANSPORT],
            coworking=costs[Category.COWORKING],
            total=CostTotal(monthly_amount=monthly, confidence=round(confidence, 4)),
            local_currency=local_currency,
            exchange_rate=exchange_rate,
            last_updated=last_updated,
        )
