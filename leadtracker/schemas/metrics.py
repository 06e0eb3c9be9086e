"""
Dashboard metrics schemas.
"""
from typing import List

from leadtracker.schemas.common import CamelModel


class MetricsSummary(CamelModel):
    total: int
    new: int
    qualified: int
    in_progress: int
    converted: int
    conversion_rate: str  # one decimal place, e.g. "25.0"
    total_budget: float


class StatusShare(CamelModel):
    status: str
    count: int
    percentage: int


class SourceShare(CamelModel):
    source: str
    count: int
    percentage: int


class MetricsResponse(CamelModel):
    metrics: MetricsSummary
    status_distribution: List[StatusShare]
    source_distribution: List[SourceShare]
