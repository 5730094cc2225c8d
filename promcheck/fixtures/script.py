"""
Script Fixtures
Hook commands run on the host or inside a compose service container
"""

import asyncio
import shlex
from typing import List, Sequence

import structlog

from promcheck.errors import ScriptError
from promcheck.fixtures.base import Fixture
from promcheck.fixtures.compose import ComposeStack

logger = structlog.get_logger(__name__)


def split_command(command: str) -> List[str]:
    """
    Split a command line into an argument vector

    Args:
        command: Shell-like command line

    Returns:
        Argument vector

    Raises:
        ScriptError: If the command is empty or has unbalanced quotes
    """
    try:
        argv = shlex.split(command)
    except ValueError as e:
        raise ScriptError(f"failed to parse command: {command}") from e

    if not argv:
        raise ScriptError(f"empty command: {command!r}")
    return argv


async def run_script(command: str) -> None:
    """
    Run one command on the host, inheriting stdin/stdout/stderr

    The process is killed if the calling task is cancelled.

    Args:
        command: Command line to run

    Raises:
        ScriptError: If the command cannot be started or exits non-zero
    """
    argv = split_command(command)
    logger.debug("Running script", command=command)

    try:
        process = await asyncio.create_subprocess_exec(*argv)
    except OSError as e:
        raise ScriptError(f"failed to run script: {command}: {e}") from e

    try:
        code = await process.wait()
    except asyncio.CancelledError:
        process.kill()
        await process.wait()
        raise

    if code != 0:
        raise ScriptError(f"failed to run script: {command}, code: {code}")


async def run_scripts(commands: Sequence[str]) -> None:
    """Run commands in order, stopping at the first failure"""
    for command in commands:
        await run_script(command)


class ScriptFixture(Fixture):
    """Runs setup and teardown commands on the host"""

    def __init__(self, name: str, setup: Sequence[str] = (), teardown: Sequence[str] = ()):
        self.name = name
        self.setup_commands = list(setup)
        self.teardown_commands = list(teardown)

    async def setup(self) -> None:
        if not self.setup_commands:
            return
        logger.debug("Running setup fixture", fixture=self.name)
        await run_scripts(self.setup_commands)

    async def teardown(self) -> None:
        if not self.teardown_commands:
            return
        logger.debug("Running teardown fixture", fixture=self.name)
        await run_scripts(self.teardown_commands)


class ContainerScriptFixture(Fixture):
    """Runs setup and teardown commands inside a compose service container"""

    def __init__(
        self,
        stack: ComposeStack,
        name: str,
        container: str,
        setup: Sequence[str] = (),
        teardown: Sequence[str] = (),
    ):
        self.stack = stack
        self.name = name
        self.container = container
        self.setup_commands = list(setup)
        self.teardown_commands = list(teardown)

    def __str__(self) -> str:
        return f"ContainerScriptFixture({self.name}@{self.container})"

    async def _run_in_container(self, commands: Sequence[str]) -> None:
        await self.stack.service_container(self.container)

        for command in commands:
            argv = split_command(command)
            try:
                stdout, stderr, code = await self.stack.exec_in_service(self.container, argv)
            except Exception as e:
                raise ScriptError(f"failed to exec script: {command}: {e}") from e

            if code == 0:
                logger.info(
                    "Container script finished",
                    container=self.container,
                    command=command,
                    output=stdout.strip(),
                )
            else:
                logger.error(
                    "Container script failed",
                    container=self.container,
                    command=command,
                    code=code,
                    output=(stderr or stdout).strip(),
                )
                raise ScriptError(f"failed to exec script: {command}, code: {code}")

    async def setup(self) -> None:
        if not self.setup_commands:
            return
        await self._run_in_container(self.setup_commands)

    async def teardown(self) -> None:
        if not self.teardown_commands:
            return
        await self._run_in_container(self.teardown_commands)
