# inkan_core/storage/provider.py
from __future__ import annotations
from typing import Iterable, List

from inkan_core.storage.models import KeyRecord


class StorageProvider:
    """
    Durable backing for the KeyStore.

    Providers persist the whole key set at once; the KeyStore serializes
    calls to ``save`` so a provider never sees two concurrent writes.
    A transactional store can be substituted here without touching KeyStore
    callers.
    """
    name: str = "base"

    def load(self) -> List[KeyRecord]:
        raise NotImplementedError

    def save(self, records: Iterable[KeyRecord]) -> None:
        raise NotImplementedError

    def backup(self, path: str) -> None:
        raise NotImplementedError

    def close(self) -> None:
        return
