from __future__ import annotations
from typing import Iterable, List
import json, os, tempfile

from inkan_core.errors import KeyManagementError, StorageError
from inkan_core.logger import get_logger
from inkan_core.storage.models import KeyRecord
from inkan_core.storage.provider import StorageProvider

log = get_logger("Inkan.Storage.JSON")


def _atomic_write_json(path: str, doc, mode: int = 0o600) -> None:
    dir_path = os.path.dirname(os.path.abspath(path)) or "."
    os.makedirs(dir_path, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp.", suffix=".json", dir=dir_path)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(doc, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.unlink(tmp)


class JSONFileStorage(StorageProvider):
    """
    Whole-file JSON persistence: one array of records per file.

    ``save`` writes a temp file beside the target, fsyncs it and renames it
    over the target, so readers only ever see the previous or the new file.
    """
    name = "json"

    def __init__(self, path="keys.json"):
        self.path = path

    def load(self) -> List[KeyRecord]:
        if not os.path.exists(self.path):
            log.info(f"[STORAGE] no key file at {self.path}, starting empty")
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            raise StorageError(f"failed to read storage file {self.path}: {e}") from e

        if not content.strip():
            return []

        try:
            raw = json.loads(content)
        except json.JSONDecodeError as e:
            raise StorageError(f"failed to parse storage file {self.path}: {e}") from e
        if not isinstance(raw, list):
            raise StorageError(f"storage file {self.path} must hold a JSON array")

        records = []
        for i, item in enumerate(raw):
            try:
                records.append(KeyRecord.from_dict(item))
            except (KeyError, TypeError, ValueError, KeyManagementError) as e:
                raise StorageError(f"invalid key record at index {i} in {self.path}: {e}") from e
        log.info(f"[STORAGE] loaded {len(records)} keys from {self.path}")
        return records

    def _write(self, path: str, records: Iterable[KeyRecord]) -> None:
        doc = [rec.to_dict() for rec in records]
        try:
            _atomic_write_json(path, doc)
        except OSError as e:
            raise StorageError(f"failed to write storage file {path}: {e}") from e

    def save(self, records: Iterable[KeyRecord]) -> None:
        self._write(self.path, records)
        log.debug(f"[STORAGE] saved {self.path}")

    def backup(self, path: str) -> None:
        self._write(path, self.load())
        log.info(f"[STORAGE] backup written to {path}")
