"""
Compose Stack Fixture
Brings a docker compose project up and down through testcontainers
"""

import asyncio
from pathlib import Path
from typing import List, Optional, Tuple

import structlog
from testcontainers.compose import ComposeContainer, DockerCompose

from promcheck.errors import FixtureError
from promcheck.fixtures.base import Fixture

logger = structlog.get_logger(__name__)


class ComposeStack(Fixture):
    """
    A docker compose project used as a fixture

    The same handle is used by the compose exporter and by container script
    fixtures to locate services inside the stack. Blocking compose calls run
    in a worker thread.

    Up and down both remove orphan containers of the project; down also
    removes volumes, and every image the project used when
    ``remove_all_images`` is set.
    """

    def __init__(
        self,
        compose_file: str,
        compose: Optional[DockerCompose] = None,
        remove_all_images: bool = False,
    ):
        """
        Initialize compose stack

        Args:
            compose_file: Path to the compose file
            compose: Pre-built DockerCompose (built from compose_file if None)
            remove_all_images: Remove the project's images on teardown
        """
        path = Path(compose_file)
        self.name = str(path)
        self.remove_all_images = remove_all_images
        self.compose = compose or DockerCompose(
            context=str(path.parent),
            compose_file_name=path.name,
            wait=True,
        )

    def _run_compose(self, *args: str) -> None:
        self.compose._run_command(cmd=[*self.compose.compose_command_property, *args])

    def up_command(self) -> List[str]:
        return ["up", "--wait", "--remove-orphans"]

    def down_command(self) -> List[str]:
        command = ["down", "--volumes", "--remove-orphans"]
        if self.remove_all_images:
            command += ["--rmi", "all"]
        return command

    async def setup(self) -> None:
        logger.info("Starting compose stack", compose_file=self.name)
        # the worker thread can't be cancelled; shield it and tear down once it returns
        started = asyncio.ensure_future(asyncio.to_thread(self._run_compose, *self.up_command()))
        try:
            await asyncio.shield(started)
        except asyncio.CancelledError:
            logger.warning("Compose stack start interrupted", compose_file=self.name)
            await asyncio.wait([started])
            if not started.cancelled() and started.exception() is not None:
                logger.warning("Compose stack start failed", error=str(started.exception()))
            try:
                await self.teardown()
            except FixtureError as e:
                logger.error("Teardown of interrupted compose stack failed", error=str(e))
            raise
        except Exception as e:
            raise FixtureError(f"failed to start compose stack {self.name}: {e}") from e

    async def teardown(self) -> None:
        logger.info(
            "Stopping compose stack",
            compose_file=self.name,
            remove_all_images=self.remove_all_images,
        )
        try:
            await asyncio.to_thread(self._run_compose, *self.down_command())
        except Exception as e:
            raise FixtureError(f"failed to tear down compose stack {self.name}: {e}") from e

    async def service_container(self, service: str) -> ComposeContainer:
        """
        Locate the running container of a compose service

        Args:
            service: Compose service name

        Returns:
            The service container

        Raises:
            FixtureError: If the service has no running container
        """
        try:
            return await asyncio.to_thread(self.compose.get_container, service)
        except Exception as e:
            raise FixtureError(f"failed to get service container {service}: {e}") from e

    async def service_endpoint(self, service: str, port: Optional[int] = None) -> Tuple[str, int]:
        """
        Resolve the externally reachable host and port of a service

        Args:
            service: Compose service name
            port: Target port inside the service (the only published one if None)

        Returns:
            Tuple of (host, published_port)
        """
        try:
            host = await asyncio.to_thread(self.compose.get_service_host, service, port)
            published = await asyncio.to_thread(self.compose.get_service_port, service, port)
        except Exception as e:
            raise FixtureError(f"failed to resolve endpoint of service {service}: {e}") from e
        return host or "localhost", int(published)

    async def exec_in_service(self, service: str, command: List[str]) -> Tuple[str, str, int]:
        """
        Execute a command inside a service container

        Args:
            service: Compose service name
            command: Argument vector

        Returns:
            Tuple of (stdout, stderr, exit_code)
        """
        stdout, stderr, code = await asyncio.to_thread(
            self.compose.exec_in_container, command, service
        )
        return _text(stdout), _text(stderr), int(code)


def _text(output) -> str:
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output or ""
