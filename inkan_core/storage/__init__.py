# inkan_core/storage/__init__.py

from __future__ import annotations

from .models import (
    EncryptedBlob, KeyFilter, KeyPatch, KeyRecord, KeyStats, KeyStatus,
    KeyStrength, KeyType, PublicView,
)
from .provider import StorageProvider
from .providers.memory_provider import InMemoryStorage
from .providers.json_provider import JSONFileStorage
from inkan_core.constants import DEFAULT_STORAGE_PATH
from inkan_core.errors import ValidationError
import os


def load_storage_provider(config: dict | None = None) -> StorageProvider:
    """
    Factory resolver for selecting the runtime storage backend.

    For now:
        - json (default)
        - memory
    """
    config = config or {}
    provider = config.get("provider") or os.getenv("INKAN_STORAGE_PROVIDER", "json")

    if provider == "memory":
        return InMemoryStorage()

    if provider == "json":
        path = (
            config.get("path")
            or os.getenv("INKAN_STORAGE_PATH")
            or os.getenv("STORAGE_PATH")
            or DEFAULT_STORAGE_PATH
        )
        return JSONFileStorage(os.path.expanduser(path))

    raise ValidationError(f"Unknown storage provider: {provider}")


__all__ = [
    "EncryptedBlob",
    "KeyFilter",
    "KeyPatch",
    "KeyRecord",
    "KeyStats",
    "KeyStatus",
    "KeyStrength",
    "KeyType",
    "PublicView",
    "StorageProvider",
    "InMemoryStorage",
    "JSONFileStorage",
    "load_storage_provider",
]
