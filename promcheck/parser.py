"""
Exposition Parser - Prometheus text format to MetricFamily map
Wraps prometheus_client's text parser and regroups its flat samples into instances
"""

import re
from typing import Dict, Iterable, Set, Tuple

import structlog
from prometheus_client.parser import text_string_to_metric_families

from promcheck.errors import MetricsParseError
from promcheck.models.metric_family import (
    HistogramValue,
    Metric,
    MetricFamilies,
    MetricFamily,
    MetricType,
    SummaryValue,
)

logger = structlog.get_logger(__name__)

# Labels that describe a sample's position inside a histogram or summary, not the instance
STRUCTURAL_LABELS = {
    MetricType.HISTOGRAM: "le",
    MetricType.SUMMARY: "quantile",
}

_TYPE_LINE = re.compile(r"^#[ \t]*TYPE[ \t]+(\S+)[ \t]+counter[ \t]*$", re.MULTILINE)


def _declared_counters(text: str) -> Set[str]:
    """Names declared as counters by ``# TYPE`` lines"""
    return set(_TYPE_LINE.findall(text))


def _family_key(name: str, metric_type: MetricType, declared_counters: Set[str]) -> str:
    """
    Resolve the name a family was declared with

    prometheus_client strips ``_total`` from counter family names; the
    exposition name is what users write in their configuration.
    """
    if metric_type is MetricType.COUNTER and f"{name}_total" in declared_counters:
        return f"{name}_total"
    return name


def _instance_key(labels: Dict[str, str], metric_type: MetricType) -> Tuple[Tuple[str, str], ...]:
    structural = STRUCTURAL_LABELS.get(metric_type)
    return tuple((k, v) for k, v in labels.items() if k != structural)


def _apply_sample(
    metric: Metric,
    metric_type: MetricType,
    base_name: str,
    sample_name: str,
    labels: Dict[str, str],
    value: float,
) -> None:
    """Fold one flat sample into the typed value of its instance"""
    if metric_type is MetricType.GAUGE:
        metric.gauge = value
    elif metric_type is MetricType.COUNTER:
        if not sample_name.endswith("_created"):
            metric.counter = value
    elif metric_type is MetricType.SUMMARY:
        if metric.summary is None:
            metric.summary = SummaryValue()
        if sample_name == f"{base_name}_sum":
            metric.summary.sample_sum = value
        elif sample_name == f"{base_name}_count":
            metric.summary.sample_count = value
        elif "quantile" in labels:
            metric.summary.quantiles[float(labels["quantile"])] = value
    elif metric_type is MetricType.HISTOGRAM:
        if metric.histogram is None:
            metric.histogram = HistogramValue()
        if sample_name == f"{base_name}_sum":
            metric.histogram.sample_sum = value
        elif sample_name == f"{base_name}_count":
            metric.histogram.sample_count = value
        elif sample_name == f"{base_name}_bucket" and "le" in labels:
            metric.histogram.buckets[float(labels["le"])] = value
    else:
        metric.untyped = value


def _build_family(parsed, declared_counters: Set[str]) -> MetricFamily:
    metric_type = MetricType.from_exposition(parsed.type)
    family = MetricFamily(
        name=_family_key(parsed.name, metric_type, declared_counters),
        type=metric_type,
        documentation=parsed.documentation,
    )

    instances: Dict[Tuple[Tuple[str, str], ...], Metric] = {}
    for sample in parsed.samples:
        labels = dict(sample.labels)
        key = _instance_key(labels, metric_type)
        metric = instances.get(key)
        if metric is None:
            metric = Metric(labels=dict(key))
            instances[key] = metric
            family.metrics.append(metric)

        _apply_sample(metric, metric_type, parsed.name, sample.name, labels, sample.value)

    return family


def parse_metric_families(text: str) -> MetricFamilies:
    """
    Parse Prometheus text exposition format into a family map

    Args:
        text: Response body of a metrics endpoint

    Returns:
        Mapping from metric family name to MetricFamily

    Raises:
        MetricsParseError: If the text is not valid exposition format
    """
    declared_counters = _declared_counters(text)
    families: MetricFamilies = {}

    try:
        parsed_families: Iterable = text_string_to_metric_families(text)
        for parsed in parsed_families:
            family = _build_family(parsed, declared_counters)
            existing = families.get(family.name)
            if existing is None:
                families[family.name] = family
            else:
                existing.metrics.extend(family.metrics)
    except (ValueError, IndexError, KeyError) as e:
        raise MetricsParseError(f"failed to parse metrics: {e}") from e

    logger.debug("Parsed metric families", count=len(families))
    return families
