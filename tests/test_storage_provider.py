from unittest.mock import AsyncMock

import pytest

from app.core.config import Settings
from app.storage import provider as provider_module
from app.storage.memory import MemoryStorage
from app.storage.provider import StorageProvider


@pytest.mark.asyncio
async def test_without_database_url_uses_memory():
    provider = StorageProvider(Settings(MONGODB_URL=None))

    assert not provider.is_initialized
    storage = await provider.get()

    assert isinstance(storage, MemoryStorage)
    assert await provider.get() is storage


@pytest.mark.asyncio
async def test_unreachable_database_falls_back_to_memory(monkeypatch):
    connect = AsyncMock(side_effect=ConnectionError("down"))
    monkeypatch.setattr(provider_module, "connect_to_mongo", connect)

    provider = StorageProvider(Settings(MONGODB_URL="mongodb://db.invalid:27017"))
    storage = await provider.get()

    assert isinstance(storage, MemoryStorage)
    connect.assert_awaited_once()


@pytest.mark.asyncio
async def test_backend_is_selected_once(monkeypatch):
    connect = AsyncMock(side_effect=ConnectionError("down"))
    monkeypatch.setattr(provider_module, "connect_to_mongo", connect)

    provider = StorageProvider(Settings(MONGODB_URL="mongodb://db.invalid:27017"))
    first = await provider.get()
    second = await provider.get()

    assert first is second
    assert connect.await_count == 1
