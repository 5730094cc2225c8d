"""
Base Checker Interface
Abstract base class for all metric family assertions
"""

from abc import ABC, abstractmethod
from typing import Iterable, Mapping, Tuple

from promcheck.models.metric_family import MetricFamilies


class MetricFamiliesChecker(ABC):
    """
    One atomic assertion over a scraped family map

    Checkers are immutable and hold no state between calls, so a single
    instance can be evaluated against any number of scrapes. ``str()`` gives
    the stable description used as the report key.
    """

    @abstractmethod
    def check(self, metric_families: MetricFamilies) -> Tuple[bool, str]:
        """
        Evaluate the assertion

        Args:
            metric_families: Scraped families keyed by name

        Returns:
            Tuple of (passed, message); message is empty when passed
        """
        pass

    @abstractmethod
    def __str__(self) -> str:
        pass


def format_names(names: Iterable[str]) -> str:
    return "[" + ", ".join(names) + "]"


def format_labels(labels: Mapping[str, str]) -> str:
    return "{" + ", ".join(f'{k}="{v}"' for k, v in labels.items()) + "}"


def missing_metric(name: str) -> Tuple[bool, str]:
    return False, f"expected metric {name} is missing"
