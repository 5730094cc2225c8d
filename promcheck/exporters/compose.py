"""
Compose Exporter
Locates the exporter service inside a compose stack and waits for its port
"""

import asyncio
from typing import Optional

import structlog

from promcheck.errors import ExporterStartError, FixtureError
from promcheck.exporters.base import Exporter
from promcheck.fixtures.compose import ComposeStack

logger = structlog.get_logger(__name__)


async def wait_for_port(host: str, port: int, poll_interval: float = 0.5) -> None:
    """
    Poll until a TCP connection to host:port succeeds

    Callers bound the wait with a timeout; this coroutine polls forever.

    Args:
        host: Host to connect to
        port: Port to connect to
        poll_interval: Seconds between attempts
    """
    while True:
        try:
            _, writer = await asyncio.open_connection(host, port)
        except OSError:
            await asyncio.sleep(poll_interval)
            continue

        writer.close()
        await writer.wait_closed()
        return


class ComposeExporter(Exporter):
    """
    Exporter running as a service of a compose stack

    Readiness means the published port accepts TCP connections within
    ``startup_timeout`` seconds; expiry is a hard failure.
    """

    def __init__(
        self,
        stack: ComposeStack,
        service: str,
        port: Optional[int] = None,
        startup_timeout: float = 60.0,
        scheme: str = "http",
        poll_interval: float = 0.5,
    ):
        """
        Initialize compose exporter

        Args:
            stack: Compose stack containing the service
            service: Compose service name of the exporter
            port: Target port inside the service (the only published one if None)
            startup_timeout: Readiness bound in seconds
            scheme: URL scheme of the returned base URL
            poll_interval: Seconds between readiness probes
        """
        self.stack = stack
        self.service = service
        self.port = port
        self.startup_timeout = startup_timeout
        self.scheme = scheme
        self.poll_interval = poll_interval

    def __str__(self) -> str:
        return f"ComposeExporter({self.service})"

    async def start(self) -> str:
        try:
            await self.stack.service_container(self.service)
            host, port = await self.stack.service_endpoint(self.service, self.port)
        except FixtureError as e:
            raise ExporterStartError(f"failed to locate exporter service {self.service}") from e

        logger.info(
            "Waiting for exporter",
            service=self.service,
            host=host,
            port=port,
            timeout=self.startup_timeout,
        )
        try:
            await asyncio.wait_for(
                wait_for_port(host, port, self.poll_interval), timeout=self.startup_timeout
            )
        except asyncio.TimeoutError as e:
            raise ExporterStartError(
                f"exporter service {self.service} not reachable at {host}:{port} "
                f"after {self.startup_timeout}s"
            ) from e

        endpoint = f"{self.scheme}://{host}:{port}"
        logger.info("Exporter ready", service=self.service, endpoint=endpoint)
        return endpoint
