"""
Check Runner
Orchestrates fixture setup, exporter start, scrape, evaluation and teardown
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

import httpx
import structlog

from promcheck.errors import (
    ExporterStartError,
    FixtureSetupError,
    FixtureTeardownError,
    MetricsFetchError,
    PromCheckError,
)
from promcheck.exporters.base import Exporter
from promcheck.fixtures.base import Fixture
from promcheck.models.metric_family import MetricFamilies
from promcheck.parser import parse_metric_families

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def join_url(base_url: str, path: str) -> str:
    """
    Join a base URL and a path with exactly one slash between them

    Args:
        base_url: Exporter base URL, optionally with a path prefix
        path: Metrics path

    Returns:
        Full URL
    """
    return base_url.rstrip("/") + "/" + path.lstrip("/")


class Runner:
    """
    Sequential check pipeline

    setup fixtures -> start exporter -> warm-up wait -> fetch + parse ->
    callback -> teardown. A failure before the callback skips the remaining
    stages except teardown, which always runs for the fixtures whose setup
    completed, in reverse order.
    """

    def __init__(
        self,
        exporter: Exporter,
        fixtures: Sequence[Fixture],
        metrics_path: str = "/metrics",
        wait: float = 0.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize runner

        Args:
            exporter: Exporter providing the base URL
            fixtures: Fixtures in setup order
            metrics_path: Path of the metrics endpoint
            wait: Warm-up sleep in seconds after the exporter started
            http_client: Client used for the scrape (a new redirect-following one per fetch if None)
        """
        self.exporter = exporter
        self.fixtures = list(fixtures)
        self.metrics_path = metrics_path
        self.wait = wait
        self.http_client = http_client
        self.teardown_errors: List[FixtureTeardownError] = []

    async def setup_fixtures(self, ready: List[Fixture]) -> None:
        """
        Set up fixtures in order

        Each fixture is appended to ``ready`` only once its setup completed,
        so after a failure ``ready`` holds exactly the fixtures to tear down.

        Args:
            ready: Caller-owned list receiving the set-up fixtures

        Raises:
            FixtureSetupError: On the first fixture that fails
        """
        for fixture in self.fixtures:
            logger.debug("Setting up fixture", fixture=str(fixture))
            try:
                await fixture.setup()
            except Exception as e:
                raise FixtureSetupError(f"failed to setup fixture {fixture}: {e}") from e
            ready.append(fixture)

    async def teardown_fixtures(self, ready: Sequence[Fixture]) -> List[FixtureTeardownError]:
        """
        Tear down fixtures in reverse order

        Every fixture is attempted; failures are logged and collected, never raised.

        Args:
            ready: Fixtures whose setup completed, in setup order

        Returns:
            Errors of the fixtures that failed to tear down
        """
        errors: List[FixtureTeardownError] = []
        for fixture in reversed(ready):
            logger.debug("Tearing down fixture", fixture=str(fixture))
            try:
                await fixture.teardown()
            except Exception as e:
                error = FixtureTeardownError(f"failed to tear down fixture {fixture}: {e}")
                error.__cause__ = e
                logger.error("Fixture teardown failed", fixture=str(fixture), error=str(e))
                errors.append(error)
        return errors

    async def fetch_metric_families(self, base_url: str) -> MetricFamilies:
        """
        Scrape and parse the metrics endpoint once

        Args:
            base_url: Exporter base URL

        Returns:
            Parsed families keyed by name

        Raises:
            MetricsFetchError: On transport errors or a non-200 status
            MetricsParseError: If the body is not valid exposition format
        """
        url = join_url(base_url, self.metrics_path)

        try:
            if self.http_client is not None:
                response = await self.http_client.get(url)
            else:
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL, OSError, OverflowError, ValueError) as e:
            raise MetricsFetchError(f"failed to fetch metrics from {url}: {e}") from e

        logger.info("Fetched metrics", url=url, status_code=response.status_code)

        if response.status_code != httpx.codes.OK:
            raise MetricsFetchError(
                f"failed to fetch metrics from {url}: "
                f"{response.status_code} {response.reason_phrase}"
            )

        metric_families = parse_metric_families(response.text)
        logger.info("Found metric families", count=len(metric_families))
        return metric_families

    async def run(self, callback: Callable[[MetricFamilies], Awaitable[T]]) -> T:
        """
        Run the whole pipeline once

        Args:
            callback: Coroutine evaluating the scraped families

        Returns:
            Whatever the callback returns

        Raises:
            FixtureSetupError: If a fixture failed to set up
            ExporterStartError: If the exporter failed to start
            MetricsFetchError: If the scrape or parse failed
            Whatever the callback raises (e.g. CheckFailedError)
        """
        ready: List[Fixture] = []
        self.teardown_errors = []

        try:
            await self.setup_fixtures(ready)

            try:
                base_url = await self.exporter.start()
            except PromCheckError:
                raise
            except Exception as e:
                raise ExporterStartError(f"failed to start exporter {self.exporter}: {e}") from e

            if self.wait > 0:
                # Port readiness does not imply the application has registered its metrics
                logger.info("Waiting before fetching metrics", seconds=self.wait)
                await asyncio.sleep(self.wait)

            metric_families = await self.fetch_metric_families(base_url)
            return await callback(metric_families)
        finally:
            self.teardown_errors = await self.teardown_fixtures(ready)
            if self.teardown_errors:
                logger.error("Failed to tear down fixtures", count=len(self.teardown_errors))
