"""Pytest configuration and fixtures."""
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from emotion_companion.config import Settings
from emotion_companion.main import create_app
from emotion_companion.providers import LocalProvider, ProviderChain
from emotion_companion.services import (
    ChatService,
    InMemoryStorage,
    MonitorService,
    SessionService,
    SessionStatisticsAggregator,
)
from helpers import FakeClock, FakeProvider


@pytest.fixture
def clock():
    """Create a controllable clock."""
    return FakeClock()


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        environment="test",
        provider_order=["local"],
        gemini_api_key="",
        openai_api_key="",
        huggingface_api_key="",
        sample_interval_seconds=0.01,
        persist_interval_seconds=0.02,
    )


@pytest.fixture
def storage():
    """Create an in-memory storage backend."""
    return InMemoryStorage()


@pytest.fixture
def local_chain():
    """Chain with a single configured remote provider and the local tail."""
    return ProviderChain([FakeProvider("remote"), LocalProvider()])


@pytest.fixture
def session_service(storage):
    return SessionService(storage)


@pytest.fixture
def monitor_service(storage, settings, clock):
    return MonitorService(storage, settings=settings, clock=clock)


@pytest.fixture
def chat_service(storage, local_chain, monitor_service):
    return ChatService(storage, local_chain, monitor_service)


@pytest.fixture
def stats_aggregator(storage, clock):
    return SessionStatisticsAggregator(storage, clock=clock)


@pytest.fixture
def app(settings, storage, local_chain):
    """Create the FastAPI app wired to test doubles."""
    return create_app(settings=settings, storage=storage, chain=local_chain)


@pytest_asyncio.fixture
async def async_client(app):
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
