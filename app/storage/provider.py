"""
app/storage/provider.py

Purpose: Storage backend selection

- Picks the backend once, on first access, and reuses it for the process lifetime
- MongoDB when MONGODB_URL is configured and reachable, in-memory otherwise
- Held on app.state and handed to routes through a FastAPI dependency
"""

import asyncio
from typing import Optional

from app.core.config import Settings
from app.core.logging import get_logger
from app.db.indexes import create_indexes
from app.db.mongo import connect_to_mongo, get_database
from app.storage.base import Storage
from app.storage.memory import MemoryStorage
from app.storage.mongo import MongoStorage

logger = get_logger(__name__)


class StorageProvider:
    """
    Lazily initialized, shared storage handle.

    Concurrent first calls to get() wait on the same lock, so only one
    backend is ever built.
    """

    def __init__(self, settings: Settings, backend: Optional[Storage] = None):
        self._settings = settings
        self._backend = backend
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._backend is not None

    async def get(self) -> Storage:
        if self._backend is not None:
            return self._backend

        async with self._lock:
            if self._backend is None:
                self._backend = await self._select_backend()

        return self._backend

    async def _select_backend(self) -> Storage:
        if not self._settings.MONGODB_URL:
            logger.warning("⚠️ MONGODB_URL is not set. Using in-memory storage as fallback.")
            logger.warning("⚠️ Documents and accounts will be lost on restart.")
            return MemoryStorage()

        try:
            client = await connect_to_mongo(self._settings.MONGODB_URL)
        except ConnectionError as e:
            logger.error(f"❌ MongoDB connection error: {e}")
            logger.warning("⚠️ Falling back to in-memory storage")
            return MemoryStorage()

        database = get_database(client, self._settings.MONGODB_DB_NAME)
        await create_indexes(database)

        logger.info(f"✅ Using MongoDB storage: {self._settings.MONGODB_DB_NAME}")
        return MongoStorage(
            database,
            bucket_name=self._settings.GRIDFS_BUCKET_NAME,
            client=client,
        )

    async def close(self):
        if self._backend is not None:
            await self._backend.close()
