"""Shared pytest fixtures for the DikeLab test suite.

Provides:
- anyio_backend: run async tests on asyncio only
- blob_store: empty in-memory blob store
- workspace: Workspace over the in-memory blob store
- client: AsyncClient with the workspace dependency overridden
"""

import pytest
from httpx import ASGITransport, AsyncClient

from dikelab.api.dependencies import get_workspace
from dikelab.storage.blob_store import InMemoryBlobStore
from dikelab.storage.workspace import Workspace


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def workspace(blob_store: InMemoryBlobStore) -> Workspace:
    return Workspace(blob_store)


@pytest.fixture
async def client(workspace: Workspace):
    """AsyncClient with get_workspace overridden to use the in-memory workspace."""
    from dikelab.api.main import app

    app.dependency_overrides[get_workspace] = lambda: workspace

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
