"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
import threading

from venuecharge.config import get_settings
from venuecharge.db import InMemoryStorageClient, PostgresStorageClient, StorageClient

logger = logging.getLogger(__name__)

_storage_client: StorageClient | None = None
# Sync dependencies run in the threadpool; building is serialized here.
_storage_lock = threading.Lock()


def get_storage_client() -> StorageClient:
    """
    Return a singleton storage client chosen once per process.

    A configured DATABASE_URL selects Postgres; otherwise records live in
    memory until the process exits.
    """
    global _storage_client
    if _storage_client:
        return _storage_client

    with _storage_lock:
        if _storage_client:
            return _storage_client

        settings = get_settings()
        if settings.use_in_memory_backends or not settings.database_url:
            logger.info("Using in-memory storage backend")
            _storage_client = InMemoryStorageClient()
        else:
            logger.info("Using database storage backend")
            _storage_client = PostgresStorageClient(
                settings.database_url,
                auto_create_tables=settings.auto_create_tables,
            )
    return _storage_client
