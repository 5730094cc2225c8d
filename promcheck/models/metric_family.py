"""
Metric Family Data Model - parsed Prometheus exposition data
One family per metric name, one Metric per labelled instance
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class MetricType(str, Enum):
    """Declared type of a metric family"""

    COUNTER = "counter"
    GAUGE = "gauge"
    SUMMARY = "summary"
    HISTOGRAM = "histogram"
    UNTYPED = "untyped"

    @classmethod
    def from_exposition(cls, typ: str) -> "MetricType":
        """
        Map a parser type name onto MetricType

        prometheus_client reports untyped families as "unknown".

        Args:
            typ: Type name as reported by the parser

        Returns:
            Matching MetricType (UNTYPED for anything unrecognised)
        """
        try:
            return cls(typ.lower())
        except ValueError:
            return cls.UNTYPED


@dataclass
class SummaryValue:
    """Summary instance: count, sum and quantiles"""

    sample_count: float = 0.0
    sample_sum: float = 0.0
    quantiles: Dict[float, float] = field(default_factory=dict)


@dataclass
class HistogramValue:
    """Histogram instance: count, sum and cumulative buckets keyed by upper bound"""

    sample_count: float = 0.0
    sample_sum: float = 0.0
    buckets: Dict[float, float] = field(default_factory=dict)


@dataclass
class Metric:
    """
    One labelled instance within a metric family

    Exactly one of the value fields is populated, matching the family type.
    Structural labels (``le``, ``quantile``) are not part of ``labels``.

    Attributes:
        labels: Label name to label value, in exposition order
        gauge: Gauge value
        counter: Counter value
        summary: Summary count/sum/quantiles
        histogram: Histogram count/sum/buckets
        untyped: Untyped value
    """

    labels: Dict[str, str] = field(default_factory=dict)
    gauge: Optional[float] = None
    counter: Optional[float] = None
    summary: Optional[SummaryValue] = None
    histogram: Optional[HistogramValue] = None
    untyped: Optional[float] = None

    def label_names(self) -> List[str]:
        """Get the label names of this instance"""
        return list(self.labels)

    def scalar_value(self) -> Optional[float]:
        """
        Extract a single scalar from whichever value field is populated

        Priority: gauge, counter, summary sum, histogram sum, untyped.

        Returns:
            The scalar, or None when no value is populated
        """
        if self.gauge is not None:
            return self.gauge
        if self.counter is not None:
            return self.counter
        if self.summary is not None:
            return self.summary.sample_sum
        if self.histogram is not None:
            return self.histogram.sample_sum
        if self.untyped is not None:
            return self.untyped
        return None

    def to_dict(self) -> dict:
        """
        Convert to dictionary

        Returns:
            Dict with labels and the populated value field
        """
        data: dict = {"labels": dict(self.labels)}
        if self.gauge is not None:
            data["gauge"] = self.gauge
        if self.counter is not None:
            data["counter"] = self.counter
        if self.summary is not None:
            data["summary"] = {
                "sample_count": self.summary.sample_count,
                "sample_sum": self.summary.sample_sum,
                "quantiles": {str(q): v for q, v in self.summary.quantiles.items()},
            }
        if self.histogram is not None:
            data["histogram"] = {
                "sample_count": self.histogram.sample_count,
                "sample_sum": self.histogram.sample_sum,
                "buckets": {str(b): v for b, v in self.histogram.buckets.items()},
            }
        if self.untyped is not None:
            data["untyped"] = self.untyped
        return data


@dataclass
class MetricFamily:
    """
    All instances of one named metric

    Attributes:
        name: Metric family name as declared in the exposition
        type: Declared type
        documentation: HELP text
        metrics: Instances in exposition order
    """

    name: str
    type: MetricType = MetricType.UNTYPED
    documentation: str = ""
    metrics: List[Metric] = field(default_factory=list)

    def to_dict(self) -> dict:
        """
        Convert to dictionary

        Returns:
            Dict representation
        """
        return {
            "type": self.type.value,
            "help": self.documentation,
            "metrics": [metric.to_dict() for metric in self.metrics],
        }


MetricFamilies = Dict[str, MetricFamily]
