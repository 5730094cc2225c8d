"""
Sample Checkers
Assertions on individual instances selected by a label filter
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple

from promcheck.checkers.base import MetricFamiliesChecker, format_labels
from promcheck.models.metric_family import Metric, MetricFamilies


class SampleMatch(str, Enum):
    """
    How a label filter selects instances

    STRICT: labels named in the filter must have the filter's value, other
    labels are tolerated, and the instance must carry exactly as many labels
    as the filter has entries. A filter naming a subset of an instance's
    labels therefore never matches it.

    SUBSET: every filter entry must be present with an equal value; extra
    labels on the instance are ignored.
    """

    STRICT = "strict"
    SUBSET = "subset"


def is_metric_match(labels: Dict[str, str], metric: Metric, match: SampleMatch) -> bool:
    """
    Check whether an instance is selected by a label filter

    Args:
        labels: Label filter (name to required value)
        metric: Instance to test
        match: Matching mode

    Returns:
        True if the instance matches
    """
    if match is SampleMatch.SUBSET:
        return all(metric.labels.get(name) == value for name, value in labels.items())

    matched_labels = 0
    for name, value in metric.labels.items():
        if name in labels and labels[name] != value:
            return False
        matched_labels += 1

    return matched_labels == len(labels)


@dataclass(frozen=True)
class MetricSampleChecker(MetricFamiliesChecker):
    """At least one instance of the family must match the label filter"""

    name: str
    labels: Dict[str, str] = field(default_factory=dict, hash=False)
    match: SampleMatch = SampleMatch.STRICT

    def __str__(self) -> str:
        suffix = "" if self.match is SampleMatch.STRICT else f", match={self.match.value}"
        return f"sample({self.name}, {format_labels(self.labels)}{suffix})"

    def check(self, metric_families: MetricFamilies) -> Tuple[bool, str]:
        family = metric_families.get(self.name)
        if family is not None:
            for metric in family.metrics:
                if is_metric_match(self.labels, metric, self.match):
                    return True, ""

        return False, f"expected sample {format_labels(self.labels)} not found in metric {self.name}"


@dataclass(frozen=True)
class MetricSampleValueChecker(MetricFamiliesChecker):
    """
    A matching instance must hold exactly the expected value

    The compared scalar is the gauge value, counter value, summary sum,
    histogram sum or untyped value, whichever is populated first.
    """

    name: str
    value: float
    labels: Dict[str, str] = field(default_factory=dict, hash=False)
    match: SampleMatch = SampleMatch.STRICT

    def __str__(self) -> str:
        suffix = "" if self.match is SampleMatch.STRICT else f", match={self.match.value}"
        return (
            f"sample-value({self.name}, {format_labels(self.labels)}, {self.value!r}{suffix})"
        )

    def check(self, metric_families: MetricFamilies) -> Tuple[bool, str]:
        family = metric_families.get(self.name)
        if family is not None:
            for metric in family.metrics:
                if not is_metric_match(self.labels, metric, self.match):
                    continue

                value = metric.scalar_value()
                if value is None:
                    return False, (
                        f"expected value {self.value!r}, but sample "
                        f"{format_labels(metric.labels)} of metric {self.name} has no value"
                    )

                if value == self.value:
                    return True, ""

        return False, f"expected value {self.value!r} not found in metric {self.name}"
