"""
External Exporter
For services already running outside the managed infrastructure
"""

import structlog

from promcheck.exporters.base import Exporter

logger = structlog.get_logger(__name__)


class ExternalExporter(Exporter):
    """Returns a statically configured base URL without waiting"""

    def __init__(self, base_url: str):
        self.base_url = base_url

    def __str__(self) -> str:
        return f"ExternalExporter({self.base_url})"

    async def start(self) -> str:
        logger.info("Using external exporter", base_url=self.base_url)
        return self.base_url
