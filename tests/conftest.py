"""
Pytest Fixtures and Test Configuration
Provides exposition payloads, a mocked metrics endpoint and recording fixtures
"""

from typing import Callable, List, Optional

import httpx
import pytest

from promcheck.exporters.base import Exporter
from promcheck.fixtures.base import Fixture

# ============================================================================
# Exposition Payloads
# ============================================================================

NODE_METRICS = """\
# HELP up Whether the target is up
# TYPE up gauge
up 1
# HELP http_requests_total Total HTTP requests
# TYPE http_requests_total counter
http_requests_total{method="get",code="200"} 1027
http_requests_total{method="post",code="200"} 3
# HELP rpc_duration_seconds RPC latency
# TYPE rpc_duration_seconds summary
rpc_duration_seconds{quantile="0.5",service="auth"} 0.05
rpc_duration_seconds{quantile="0.99",service="auth"} 0.2
rpc_duration_seconds_sum{service="auth"} 17.5
rpc_duration_seconds_count{service="auth"} 250
# HELP request_size_bytes Request size
# TYPE request_size_bytes histogram
request_size_bytes_bucket{le="100"} 3
request_size_bytes_bucket{le="1000"} 7
request_size_bytes_bucket{le="+Inf"} 8
request_size_bytes_sum 4096
request_size_bytes_count 8
# TYPE build_info untyped
build_info{version="1.2.3"} 1
"""


@pytest.fixture
def node_metrics() -> str:
    """Exposition text covering every metric type"""
    return NODE_METRICS


# ============================================================================
# Mocked Metrics Endpoint
# ============================================================================


@pytest.fixture
def metrics_client() -> Callable[..., httpx.AsyncClient]:
    """
    Build an httpx client whose transport serves a fixed metrics body

    Returns:
        Factory taking (body, status_code) and returning an AsyncClient;
        requested URLs are recorded on ``client.requested_urls``
    """

    def factory(body: str = "", status_code: int = 200) -> httpx.AsyncClient:
        requested: List[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(status_code, text=body)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client.requested_urls = requested
        return client

    return factory


# ============================================================================
# Recording Fixtures and Exporters
# ============================================================================


class RecordingFixture(Fixture):
    """Fixture that records setup/teardown calls into a shared journal"""

    def __init__(
        self,
        name: str,
        journal: List[str],
        fail_setup: bool = False,
        fail_teardown: bool = False,
    ):
        self.name = name
        self.journal = journal
        self.fail_setup = fail_setup
        self.fail_teardown = fail_teardown

    async def setup(self) -> None:
        self.journal.append(f"setup:{self.name}")
        if self.fail_setup:
            raise RuntimeError(f"{self.name} setup exploded")

    async def teardown(self) -> None:
        self.journal.append(f"teardown:{self.name}")
        if self.fail_teardown:
            raise RuntimeError(f"{self.name} teardown exploded")


class StaticExporter(Exporter):
    """Exporter returning a fixed URL, or raising a fixed error"""

    def __init__(self, base_url: str = "http://exporter:9100", error: Optional[Exception] = None):
        self.base_url = base_url
        self.error = error
        self.started = 0

    async def start(self) -> str:
        self.started += 1
        if self.error is not None:
            raise self.error
        return self.base_url


@pytest.fixture
def journal() -> List[str]:
    """Shared list recording fixture calls in order"""
    return []


@pytest.fixture
def make_fixture(journal: List[str]) -> Callable[..., RecordingFixture]:
    """Factory for RecordingFixture instances sharing the journal"""

    def factory(name: str, fail_setup: bool = False, fail_teardown: bool = False):
        return RecordingFixture(name, journal, fail_setup=fail_setup, fail_teardown=fail_teardown)

    return factory


@pytest.fixture
def make_exporter() -> Callable[..., StaticExporter]:
    """Factory for StaticExporter instances"""
    return StaticExporter
