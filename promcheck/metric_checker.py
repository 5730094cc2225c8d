"""
Metric Checker
Runs the pipeline and evaluates the configured checkers against the scrape
"""

from typing import List, Optional, Sequence

import httpx
import structlog

from promcheck.checkers.base import MetricFamiliesChecker
from promcheck.checkers.builder import MetricFamiliesCheckerBuilder
from promcheck.config.settings import MetricsConfig
from promcheck.errors import CheckFailedError
from promcheck.exporters.base import Exporter
from promcheck.fixtures.base import Fixture
from promcheck.models.metric_family import MetricFamilies
from promcheck.models.report import CheckReport
from promcheck.observability.logging import log_check_result
from promcheck.runner import Runner

logger = structlog.get_logger(__name__)


class MetricChecker(Runner):
    """
    Runner whose callback evaluates declarative metric rules

    Checkers are rebuilt from the rules on every check.
    """

    def __init__(
        self,
        exporter: Exporter,
        fixtures: Sequence[Fixture],
        metrics_path: str = "/metrics",
        disallowed_metrics: Sequence[str] = (),
        allow_empty: bool = False,
        metrics: Sequence[MetricsConfig] = (),
        wait: float = 0.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(
            exporter=exporter,
            fixtures=fixtures,
            metrics_path=metrics_path,
            wait=wait,
            http_client=http_client,
        )
        self.disallowed_metrics = list(disallowed_metrics)
        self.allow_empty = allow_empty
        self.metrics = list(metrics)

    def build_checkers(self) -> List[MetricFamiliesChecker]:
        """
        Turn the configured rules into an ordered checker list

        Returns:
            Global checkers followed by per-metric checkers
        """
        builder = MetricFamiliesCheckerBuilder()

        if self.disallowed_metrics:
            builder.disallowed_metrics(self.disallowed_metrics)

        if not self.allow_empty:
            builder.disallow_empty()

        for metric in self.metrics:
            builder.metric_exists(metric.name)

            if metric.type:
                builder.metric_type(metric.name, metric.type)

            if metric.value is not None:
                builder.metric_sample(metric.name, {}, metric.value)

            if metric.labels:
                builder.metric_labels(metric.name, metric.labels)

            if metric.disallowed_labels:
                builder.metric_disallowed_labels(metric.name, metric.disallowed_labels)

            for sample in metric.samples:
                builder.metric_sample(metric.name, sample.labels, sample.value, sample.match)

        return builder.build()

    async def check_metrics(self, metric_families: MetricFamilies) -> CheckReport:
        """
        Evaluate every checker against one scrape

        Args:
            metric_families: Scraped families keyed by name

        Returns:
            Report of a fully passing check

        Raises:
            CheckFailedError: If any checker failed; carries the full report
        """
        report = CheckReport(metric_families=metric_families)

        for checker in self.build_checkers():
            description = str(checker)
            passed, message = checker.check(metric_families)
            log_check_result(logger, description, passed, message)
            report.record(description, passed, message)

        if not report.success:
            raise CheckFailedError(report)

        return report

    async def check(self) -> CheckReport:
        """
        Run the full pipeline and evaluate the rules

        Returns:
            Report of a fully passing check

        Raises:
            CheckFailedError: If assertions failed
            PromCheckError: For infrastructure failures
        """
        return await self.run(self.check_metrics)
