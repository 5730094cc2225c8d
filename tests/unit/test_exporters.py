"""
Unit tests for exporters
Tests external URLs and the compose readiness wait
"""

import asyncio

import pytest

from promcheck.errors import ExporterStartError
from promcheck.exporters import EXPORTER_TYPES, ComposeExporter, ExternalExporter, wait_for_port
from promcheck.fixtures.compose import ComposeStack


class EndpointStack(ComposeStack):
    """Compose stack stand-in resolving a service to a fixed endpoint"""

    def __init__(self, host: str, port: int, services=("exporter",)):
        self.name = "fake"
        self.host = host
        self.port = port
        self.services = services

    async def service_container(self, service):
        from promcheck.errors import FixtureError

        if service not in self.services:
            raise FixtureError(f"failed to get service container {service}")
        return service

    async def service_endpoint(self, service, port=None):
        return self.host, self.port


@pytest.fixture
async def listening_port():
    """A local TCP server accepting connections"""
    server = await asyncio.start_server(lambda reader, writer: writer.close(), "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    yield port
    server.close()
    await server.wait_closed()


def unused_port() -> int:
    import socket

    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.mark.asyncio
class TestExternalExporter:
    """Test ExternalExporter"""

    async def test_returns_configured_url(self):
        exporter = ExternalExporter("http://prometheus-node:9100")

        assert await exporter.start() == "http://prometheus-node:9100"


@pytest.mark.asyncio
class TestComposeExporter:
    """Test ComposeExporter"""

    async def test_ready_service_returns_endpoint(self, listening_port):
        exporter = ComposeExporter(
            EndpointStack("127.0.0.1", listening_port), "exporter", startup_timeout=5
        )

        assert await exporter.start() == f"http://127.0.0.1:{listening_port}"

    async def test_unreachable_port_times_out(self):
        exporter = ComposeExporter(
            EndpointStack("127.0.0.1", unused_port()),
            "exporter",
            startup_timeout=0.3,
            poll_interval=0.05,
        )

        with pytest.raises(ExporterStartError, match="not reachable"):
            await exporter.start()

    async def test_missing_service(self):
        exporter = ComposeExporter(EndpointStack("127.0.0.1", 1, services=()), "exporter")

        with pytest.raises(ExporterStartError, match="failed to locate"):
            await exporter.start()

    async def test_wait_for_port_returns_once_listening(self, listening_port):
        await asyncio.wait_for(wait_for_port("127.0.0.1", listening_port), timeout=5)


def test_registered_exporter_types():
    assert EXPORTER_TYPES == {"compose": ComposeExporter, "external": ExternalExporter}
