"""
Checker Builder
Accumulates global and per-metric rules into one ordered checker list
"""

from typing import Dict, List, Mapping, Optional, Sequence

from promcheck.checkers.base import MetricFamiliesChecker
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
)


class MetricFamiliesCheckerBuilder:
    """
    Append-only builder for checkers

    Global checkers come first in insertion order, followed by each metric's
    checkers grouped under the metric in the order it was first mentioned.
    """

    def __init__(self):
        self._global_checkers: List[MetricFamiliesChecker] = []
        self._metric_checkers: Dict[str, List[MetricFamiliesChecker]] = {}

    def global_checkers(self, *checkers: MetricFamiliesChecker) -> "MetricFamiliesCheckerBuilder":
        self._global_checkers.extend(checkers)
        return self

    def metric_checkers(
        self, metric: str, *checkers: MetricFamiliesChecker
    ) -> "MetricFamiliesCheckerBuilder":
        self._metric_checkers.setdefault(metric, []).extend(checkers)
        return self

    def disallowed_metrics(self, metrics: Sequence[str]) -> "MetricFamiliesCheckerBuilder":
        return self.global_checkers(DisallowCertainMetricsChecker(tuple(metrics)))

    def disallow_empty(self) -> "MetricFamiliesCheckerBuilder":
        return self.global_checkers(DisallowEmptyMetricsChecker())

    def metric_exists(self, metric: str) -> "MetricFamiliesCheckerBuilder":
        return self.metric_checkers(metric, SingleMetricExistsChecker(metric))

    def metric_type(self, metric: str, metric_type: str) -> "MetricFamiliesCheckerBuilder":
        return self.metric_checkers(metric, SingleMetricTypeChecker(metric, metric_type))

    def metric_labels(self, metric: str, labels: Sequence[str]) -> "MetricFamiliesCheckerBuilder":
        return self.metric_checkers(metric, MetricLabelChecker(metric, tuple(labels)))

    def metric_disallowed_labels(
        self, metric: str, labels: Sequence[str]
    ) -> "MetricFamiliesCheckerBuilder":
        return self.metric_checkers(metric, MetricLabelDisallowChecker(metric, tuple(labels)))

    def metric_sample(
        self,
        metric: str,
        labels: Mapping[str, str],
        value: Optional[float] = None,
        match: SampleMatch = SampleMatch.STRICT,
    ) -> "MetricFamiliesCheckerBuilder":
        """
        Add a sample assertion

        Without a value only the presence of a matching instance is checked.

        Args:
            metric: Metric family name
            labels: Label filter
            value: Expected scalar of a matching instance
            match: Label matching mode
        """
        if value is None:
            checker: MetricFamiliesChecker = MetricSampleChecker(metric, dict(labels), match)
        else:
            checker = MetricSampleValueChecker(metric, value, dict(labels), match)
        return self.metric_checkers(metric, checker)

    def build(self) -> List[MetricFamiliesChecker]:
        """
        Flatten all rules into a single list

        Returns:
            Global checkers followed by per-metric checkers
        """
        checkers = list(self._global_checkers)
        for metric_checkers in self._metric_checkers.values():
            checkers.extend(metric_checkers)
        return checkers
