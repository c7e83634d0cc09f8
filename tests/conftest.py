from typing import AsyncGenerator

import httpx
import pytest
from fastapi import FastAPI

from service_registry.registry.registry import Registry
from tests.integrations.service_app import create_app


@pytest.fixture
def registry() -> Registry:
    return Registry(stats_logging=False)


@pytest.fixture
def app(registry: Registry) -> FastAPI:
    return create_app(registry)


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client
