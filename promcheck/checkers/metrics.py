"""
Family-level Checkers
Existence, type and label-name assertions, plus the map-wide disallow rules
"""

from dataclasses import dataclass
from typing import Tuple

from promcheck.checkers.base import MetricFamiliesChecker, format_names, missing_metric
from promcheck.models.metric_family import MetricFamilies


@dataclass(frozen=True)
class DisallowCertainMetricsChecker(MetricFamiliesChecker):
    """Fails if any block-listed metric name is present"""

    disallowed_metrics: Tuple[str, ...]

    def __str__(self) -> str:
        return f"disallow-metrics({format_names(self.disallowed_metrics)})"

    def check(self, metric_families: MetricFamilies) -> Tuple[bool, str]:
        for metric in self.disallowed_metrics:
            if metric in metric_families:
                return False, f"metric {metric} is disallowed but was found"
        return True, ""


@dataclass(frozen=True)
class DisallowEmptyMetricsChecker(MetricFamiliesChecker):
    """Fails if the scrape produced no families at all"""

    def __str__(self) -> str:
        return "disallow-empty"

    def check(self, metric_families: MetricFamilies) -> Tuple[bool, str]:
        if len(metric_families) == 0:
            return False, "metric families should not be empty"
        return True, ""


@dataclass(frozen=True)
class SingleMetricExistsChecker(MetricFamiliesChecker):
    expected_metric: str

    def __str__(self) -> str:
        return f"exists({self.expected_metric})"

    def check(self, metric_families: MetricFamilies) -> Tuple[bool, str]:
        if self.expected_metric not in metric_families:
            return missing_metric(self.expected_metric)
        return True, ""


@dataclass(frozen=True)
class SingleMetricTypeChecker(MetricFamiliesChecker):
    """Compares the declared family type with the expected one, ignoring case"""

    expected_metric: str
    expected_type: str

    def __str__(self) -> str:
        return f"type({self.expected_metric}, {self.expected_type})"

    def check(self, metric_families: MetricFamilies) -> Tuple[bool, str]:
        family = metric_families.get(self.expected_metric)
        if family is None:
            return missing_metric(self.expected_metric)

        if family.type.value.upper() != self.expected_type.upper():
            return False, (
                f"expected metric {self.expected_metric} should be of type "
                f"{self.expected_type} but was {family.type.value}"
            )
        return True, ""


@dataclass(frozen=True)
class MetricLabelChecker(MetricFamiliesChecker):
    """Every instance of the family must carry every expected label name"""

    expected_metric: str
    expected_labels: Tuple[str, ...]

    def __str__(self) -> str:
        return f"labels({self.expected_metric}, {format_names(self.expected_labels)})"

    def check(self, metric_families: MetricFamilies) -> Tuple[bool, str]:
        family = metric_families.get(self.expected_metric)
        if family is None:
            return missing_metric(self.expected_metric)

        for metric in family.metrics:
            label_names = set(metric.label_names())
            for label in self.expected_labels:
                if label not in label_names:
                    return False, (
                        f"expected label {label} is missing in metric {self.expected_metric}"
                    )
        return True, ""


@dataclass(frozen=True)
class MetricLabelDisallowChecker(MetricFamiliesChecker):
    """No instance of the family may carry a disallowed label name"""

    expected_metric: str
    disallowed_labels: Tuple[str, ...]

    def __str__(self) -> str:
        return (
            f"disallowed-labels({self.expected_metric}, "
            f"{format_names(self.disallowed_labels)})"
        )

    def check(self, metric_families: MetricFamilies) -> Tuple[bool, str]:
        family = metric_families.get(self.expected_metric)
        if family is None:
            return missing_metric(self.expected_metric)

        for metric in family.metrics:
            label_names = set(metric.label_names())
            for label in self.disallowed_labels:
                if label in label_names:
                    return False, (
                        f"disallowed label {label} is present in metric {self.expected_metric}"
                    )
        return True, ""
