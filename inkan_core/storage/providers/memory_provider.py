import copy
from typing import Iterable, List
from inkan_core.errors import StorageError
from inkan_core.storage.models import KeyRecord
from inkan_core.storage.provider import StorageProvider
from inkan_core.storage.providers.json_provider import _atomic_write_json

class InMemoryStorage(StorageProvider):
    name = "memory"

    def __init__(self, records: Iterable[KeyRecord] = ()):
        self.records = [copy.deepcopy(r) for r in records]
        self.saves = 0

    def load(self) -> List[KeyRecord]:
        return [copy.deepcopy(r) for r in self.records]

    def save(self, records: Iterable[KeyRecord]):
        self.records = [copy.deepcopy(r) for r in records]
        self.saves += 1

    def backup(self, path: str):
        try:
            _atomic_write_json(path, [r.to_dict() for r in self.records])
        except OSError as e:
            raise StorageError(f"failed to write backup {path}: {e}") from e
