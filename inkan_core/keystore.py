"""
inkan_core.keystore
-------------------
Concurrent-safe in-memory collection of KeyRecords backed by a
StorageProvider.

Readers take a short-held lock and receive deep copies, so a caller never
observes a record half way through a mutation. Writers are serialized by a
separate writer lock that also covers persistence: a mutation is applied
to a copy, the resulting key set is saved, and only then is the copy
published. If the save fails the in-memory map is left untouched.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Optional
import copy, threading

from .errors import KeyNotFound, StorageError, ValidationError
from .logger import get_logger
from .storage.models import KeyRecord
from .storage.provider import StorageProvider

log = get_logger("Inkan.KeyStore")

Predicate = Callable[[KeyRecord], bool]
Mutator = Callable[[KeyRecord], None]


class KeyStore:
    def __init__(self, provider: StorageProvider):
        self.provider = provider
        self._records: Dict[str, KeyRecord] = {}
        self._lock = threading.Lock()          # guards the map for readers
        self._write_lock = threading.RLock()   # single writer incl. persistence

    @classmethod
    def open(cls, provider: StorageProvider) -> "KeyStore":
        """Load every record from ``provider``. A corrupt file aborts here."""
        store = cls(provider)
        records = provider.load()
        for rec in records:
            if rec.id in store._records:
                raise StorageError(f"duplicate key id in storage: {rec.id}")
            store._records[rec.id] = rec
        log.info(f"[KEYSTORE] opened with {len(store._records)} keys ({provider.name})")
        return store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get(self, key_id: str) -> KeyRecord:
        with self._lock:
            rec = self._records.get(key_id)
            if rec is None:
                raise KeyNotFound(key_id)
            return copy.deepcopy(rec)

    def exists(self, key_id: str) -> bool:
        with self._lock:
            return key_id in self._records

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def list(self, predicate: Optional[Predicate] = None) -> List[KeyRecord]:
        """Point-in-time snapshot; order follows insertion."""
        with self._lock:
            snap = [copy.deepcopy(r) for r in self._records.values()]
        if predicate is None:
            return snap
        return [r for r in snap if predicate(r)]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def _commit(self, key_id: str, rec: KeyRecord) -> None:
        # caller holds _write_lock
        with self._lock:
            staged = dict(self._records)
        staged[key_id] = rec
        self.provider.save(staged.values())
        with self._lock:
            self._records = staged

    def insert(self, rec: KeyRecord) -> KeyRecord:
        with self._write_lock:
            if self.exists(rec.id):
                raise ValidationError(f"key id already exists: {rec.id}")
            self._commit(rec.id, copy.deepcopy(rec))
        log.info(f"[KEYSTORE] inserted key {rec.id}")
        return copy.deepcopy(rec)

    def update(self, key_id: str, mutator: Mutator) -> KeyRecord:
        """
        Apply ``mutator`` to a copy of the record and persist it.

        Atomic with respect to every other mutation. The mutator may raise to
        abort; nothing is written in that case.
        """
        with self._write_lock:
            rec = self.get(key_id)
            mutator(rec)
            if rec.id != key_id:
                raise ValidationError("key id is immutable")
            self._commit(key_id, rec)
            return copy.deepcopy(rec)

    def backup(self, path: str) -> None:
        with self._write_lock:
            self.provider.backup(path)
