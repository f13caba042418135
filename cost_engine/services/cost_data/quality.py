"""Data quality grading for cost breakdowns."""

from __future__ import annotations

from typing import List

from cost_engine.models.cost_models import Category, CostBreakdown, QualityReport

from .models import DEFAULT_SOURCE

HIGH_QUALITY_THRESHOLD = 0.7
MEDIUM_QUALITY_THRESHOLD = 0.5


def grade(confidence: float) -> str:
    """Map a confidence to a grade. Lower bounds are inclusive."""
    if confidence >= HIGH_QUALITY_THRESHOLD:
        return "high"
    if confidence >= MEDIUM_QUALITY_THRESHOLD:
        return "medium"
    return "low"


def score_breakdown(breakdown: CostBreakdown) -> QualityReport:
    """Derive the quality report of a breakdown. Pure and deterministic."""
    data_sources: List[str] = []
    for category in Category:
        source = breakdown.category(category).source
        if source != DEFAULT_SOURCE and source not in data_sources:
            data_sources.append(source)

    return QualityReport(
        overall=grade(breakdown.total.confidence),
        confidence=breakdown.total.confidence,
        category_confidence={
            category.value: breakdown.category(category).confidence
            for category in Category
        },
        data_sources=data_sources,
    )
