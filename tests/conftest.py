"""
Test Fixtures
=============

Shared fixtures for all test modules.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import httpx
import pytest

from scw_reconcile.config import ProviderConfig, ProviderMeta
from scw_reconcile.identity import decode_regional
from scw_reconcile.providers.base import RemoteResourceAPI, ResourceSnapshot
from scw_reconcile.providers.scaleway import ScalewayClient


PN_ID = "11111111-1111-1111-1111-111111111111"
PN_ID_2 = "22222222-2222-2222-2222-222222222222"
INSTANCE_ID = "33333333-3333-3333-3333-333333333333"
OFFER_ID = "de2426b4-a9e9-11ec-b909-0242ac120002"


# ============================================
# TIME & CANCELLATION
# ============================================

class FakeClock:
    """Monotonic clock advanced only by FakeCancel waits."""
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class FakeCancel:
    """
    Stand-in for threading.Event.

    `wait` advances the fake clock instead of sleeping. When
    `fire_on_wait` is N, the Nth wait sets the event and returns True.
    """
    def __init__(self, clock: FakeClock, fire_on_wait: Optional[int] = None):
        self.clock = clock
        self.fire_on_wait = fire_on_wait
        self.waits: List[float] = []
        self._set = False

    def is_set(self) -> bool:
        return self._set

    def set(self) -> None:
        self._set = True

    def wait(self, timeout: float) -> bool:
        self.waits.append(timeout)
        if self.fire_on_wait is not None and len(self.waits) >= self.fire_on_wait:
            self._set = True
            return True
        self.clock.now += timeout
        return False


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cancel(clock):
    return FakeCancel(clock)


# ============================================
# MOCK RESOURCE API
# ============================================

class MockResourceAPI(RemoteResourceAPI):
    """
    Scripted resource adapter.

    `states` is consumed one entry per fetch; the last entry repeats.
    None means the resource does not exist. An Exception entry is raised.
    """

    RESOURCE_TYPE = "mock_resource"
    RESOURCE_NAME = "mock resource"

    def __init__(self, matches: Sequence[Tuple[str, str]] = (), states: Sequence = ("ready",)):
        self.matches = list(matches)
        self.states = list(states)
        self.list_calls: List[Tuple[str, str]] = []
        self.fetch_calls: List[str] = []

    def list_by_name(self, region: str, name: str) -> List[Tuple[str, str]]:
        self.list_calls.append((region, name))
        return list(self.matches)

    def fetch_state(self, resource_id: str) -> Optional[ResourceSnapshot]:
        self.fetch_calls.append(resource_id)
        index = min(len(self.fetch_calls), len(self.states)) - 1
        state = self.states[index]
        if isinstance(state, Exception):
            raise state
        if state is None:
            return None
        regional = decode_regional(resource_id)
        return ResourceSnapshot(
            id=regional.local_id,
            name="mock",
            region=regional.partition,
            state=state,
        )


@pytest.fixture
def mock_api():
    return MockResourceAPI(matches=[(PN_ID, "my-network")])


# ============================================
# CONFIG & CONTEXT
# ============================================

@pytest.fixture
def config():
    return ProviderConfig(
        api_url="https://api.test.scaleway.com",
        secret_key="scw-secret-fake",
        default_region="fr-par",
        wait_retry_interval=1.0,
    )


@pytest.fixture
def meta(config):
    """Context without a real HTTP client, for resolver/poller tests."""
    return ProviderMeta(config=config, client=None)


class ScalewayRoutes:
    """
    Route table for httpx.MockTransport.

    Maps (method, path) to (status, json body); records requests.
    """
    def __init__(self):
        self.routes: Dict[Tuple[str, str], Tuple[int, dict]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, body: Optional[dict] = None):
        self.routes[(method, path)] = (status, body or {})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get((request.method, request.url.path), (404, {"message": "not found"}))
        return httpx.Response(status, json=body)


@pytest.fixture
def routes():
    return ScalewayRoutes()


@pytest.fixture
def http_meta(config, routes):
    """Context whose client talks to the route table."""
    client = ScalewayClient(config, transport=httpx.MockTransport(routes))
    yield ProviderMeta(config=config, client=client)
    client.close()
