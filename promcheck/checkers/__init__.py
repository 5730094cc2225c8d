"""
Checkers evaluated against scraped metric families
"""

from promcheck.checkers.base import MetricFamiliesChecker
from promcheck.checkers.builder import MetricFamiliesCheckerBuilder
from promcheck.checkers.metrics import (
    DisallowCertainMetricsChecker,
    DisallowEmptyMetricsChecker,
    MetricLabelChecker,
    MetricLabelDisallowChecker,
    SingleMetricExistsChecker,
    SingleMetricTypeChecker,
)
from promcheck.checkers.samples import (
    MetricSampleChecker,
    MetricSampleValueChecker,
    SampleMatch,
    is_metric_match,
)

__all__ = [
    "MetricFamiliesChecker",
    "MetricFamiliesCheckerBuilder",
    "DisallowCertainMetricsChecker",
    "DisallowEmptyMetricsChecker",
    "SingleMetricExistsChecker",
    "SingleMetricTypeChecker",
    "MetricLabelChecker",
    "MetricLabelDisallowChecker",
    "MetricSampleChecker",
    "MetricSampleValueChecker",
    "SampleMatch",
    "is_metric_match",
]
