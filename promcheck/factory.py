"""
Component Factory
Builds fixtures, exporter and metric checker from one settings group
"""

from typing import List, Optional

import httpx
import structlog

from promcheck.config.settings import CheckSettings
from promcheck.exporters import EXPORTER_TYPES
from promcheck.exporters.base import Exporter
from promcheck.fixtures.base import Fixture
from promcheck.fixtures.compose import ComposeStack
from promcheck.fixtures.script import ContainerScriptFixture, ScriptFixture
from promcheck.metric_checker import MetricChecker

logger = structlog.get_logger(__name__)


def build_compose_stack(settings: CheckSettings) -> Optional[ComposeStack]:
    """
    Build the compose stack if the exporter or a hook needs one

    Returns:
        ComposeStack, or None when everything runs outside compose
    """
    if not settings.uses_compose():
        return None
    return ComposeStack(settings.compose_file, remove_all_images=settings.remove_all_images)


def build_exporter(settings: CheckSettings, stack: Optional[ComposeStack]) -> Exporter:
    """
    Pick the exporter variant

    A non-empty ``base_url`` selects the external exporter; otherwise the
    exporter is the ``container`` service of the compose stack.
    """
    if settings.base_url:
        return EXPORTER_TYPES["external"](settings.base_url)

    return EXPORTER_TYPES["compose"](
        stack,
        settings.container,
        port=settings.port,
        startup_timeout=settings.startup_timeout,
    )


def build_fixtures(settings: CheckSettings, stack: Optional[ComposeStack]) -> List[Fixture]:
    """
    Build fixtures in setup order: the compose stack first, then each hook

    Hooks naming a container run inside that compose service.
    """
    fixtures: List[Fixture] = []
    if stack is not None:
        fixtures.append(stack)

    for hook in settings.hooks:
        if hook.container:
            fixtures.append(
                ContainerScriptFixture(stack, hook.name, hook.container, hook.setup, hook.teardown)
            )
        else:
            fixtures.append(ScriptFixture(hook.name, hook.setup, hook.teardown))

    logger.debug("Built fixtures", fixtures=[str(fixture) for fixture in fixtures])
    return fixtures


def build_metric_checker(
    settings: CheckSettings,
    http_client: Optional[httpx.AsyncClient] = None,
) -> MetricChecker:
    """
    Wire a MetricChecker for one check invocation

    Args:
        settings: Validated settings group
        http_client: Optional client for the scrape

    Returns:
        MetricChecker ready to run
    """
    stack = build_compose_stack(settings)
    return MetricChecker(
        exporter=build_exporter(settings, stack),
        fixtures=build_fixtures(settings, stack),
        metrics_path=settings.path,
        disallowed_metrics=settings.disallowed_metrics,
        allow_empty=settings.allow_empty,
        metrics=settings.metrics,
        wait=settings.wait,
        http_client=http_client,
    )
