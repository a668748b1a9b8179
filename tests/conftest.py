"""
Pytest configuration and fixtures for bodyparse tests.
"""
from collections.abc import AsyncGenerator, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from bodyparse.config import Settings, get_settings
from bodyparse.decoding.target import DecoderConfig
from bodyparse.main import create_app


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Make every test read settings fresh from the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        _env_file=None,
        app_env="development",
        port=8081,
    )


@pytest.fixture
def decoder_config() -> DecoderConfig:
    """Create the default shared decoding configuration."""
    return DecoderConfig()


@pytest.fixture
def app(decoder_config: DecoderConfig) -> FastAPI:
    """Create test FastAPI application."""
    return create_app(decoder_config)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create sync test client."""
    return TestClient(app)


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
