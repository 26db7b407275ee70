"""
inkan_core.service
------------------
KeyService is the boundary the API layer calls into. It owns one KeyStore,
one LifecycleManager, one SigningEngine and a bounded worker pool for the
expensive parts (PBKDF2 and file writes).

Construct it once per process and share the instance:

    with KeyService.from_settings(Settings.from_env()) as svc:
        result = svc.generate(GenerateRequest(name="release"))
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional

from .config import Settings
from .constants import DEFAULT_EXPIRING_SOON_DAYS, DEFAULT_WORKERS
from .crypto import KeyCodec, KeyGenerator
from .errors import ValidationError
from .keystore import KeyStore
from .lifecycle import LifecycleManager
from .logger import get_logger
from .messages import GenerateRequest, GenerateResult, SignRequest, SignatureResult, VerifyRequest
from .signing import SigningEngine
from .storage import load_storage_provider
from .storage.models import (
    KeyFilter, KeyPatch, KeyRecord, KeyStats, KeyType, PublicView,
)
from .storage.provider import StorageProvider
from .utils import as_utc, new_id, utcnow

log = get_logger("Inkan.Service")

UNENCRYPTED_WARNING = "Private key is not encrypted - not recommended for production"


class KeyService:
    def __init__(self, provider: StorageProvider,
                 expiring_soon_days: int = DEFAULT_EXPIRING_SOON_DAYS,
                 workers: int = DEFAULT_WORKERS,
                 codec: Optional[KeyCodec] = None,
                 generator: Optional[KeyGenerator] = None):
        if workers < 1:
            raise ValidationError("workers must be >= 1")
        self.store = KeyStore.open(provider)
        self.lifecycle = LifecycleManager(self.store, expiring_soon_days)
        self.codec = codec or KeyCodec()
        self.generator = generator or KeyGenerator()
        self.pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="inkan-worker")
        self.signer = SigningEngine(self.store, self.codec, self.pool)

    @classmethod
    def from_settings(cls, settings: Settings) -> "KeyService":
        provider = load_storage_provider(settings.storage_config())
        return cls(provider, expiring_soon_days=settings.expiring_soon_days, workers=settings.workers)

    def _run(self, fn, *args):
        return self.pool.submit(fn, *args).result()

    def _view(self, rec: KeyRecord) -> PublicView:
        return PublicView.from_record(rec, self.lifecycle.status(rec))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def generate(self, req: GenerateRequest) -> GenerateResult:
        if not req.name or not req.name.strip():
            raise ValidationError("key name cannot be empty")

        public_key, seed = self.generator.generate()
        if req.password is not None:
            if not req.password:
                raise ValidationError("password cannot be empty")
            private_key = self._run(self.codec.encrypt, seed, req.password)
            key_type = KeyType.ED25519_ENCRYPTED
            warnings = []
        else:
            private_key = seed
            key_type = KeyType.ED25519
            warnings = [UNENCRYPTED_WARNING]

        rec = KeyRecord(
            id=new_id(),
            name=req.name,
            description=req.description,
            public_key=public_key,
            private_key=private_key,
            created_at=utcnow(),
            expires_at=as_utc(req.expires_at),
            tags=set(req.tags),
            key_type=key_type,
            key_strength=req.key_strength,
        )
        rec = self._run(self.store.insert, rec)
        log.info(f"[GENERATE] key={rec.id} type={key_type.value} strength={rec.key_strength.value}")
        return GenerateResult(key=self._view(rec), warnings=warnings)

    def get(self, key_id: str) -> KeyRecord:
        return self.store.get(key_id)

    def get_public(self, key_id: str) -> PublicView:
        return self._view(self.store.get(key_id))

    def list(self, flt: Optional[KeyFilter] = None) -> List[PublicView]:
        return [self._view(r) for r in self.lifecycle.list(flt)]

    def search(self, query: str) -> List[PublicView]:
        return [self._view(r) for r in self.lifecycle.search(query)]

    def update(self, key_id: str, patch: KeyPatch) -> KeyRecord:
        return self._run(self.lifecycle.update, key_id, patch)

    def revoke(self, key_id: str, reason: Optional[str] = None, immediate: bool = True) -> KeyRecord:
        return self._run(self.lifecycle.revoke, key_id, reason, immediate)

    def stats(self) -> KeyStats:
        return self.lifecycle.stats()

    def expiring_soon(self, days: Optional[int] = None) -> List[PublicView]:
        return [self._view(r) for r in self.lifecycle.expiring_soon(days)]

    def backup(self, path: str) -> None:
        self._run(self.store.backup, path)

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------
    def sign(self, req: SignRequest) -> SignatureResult:
        return self.signer.sign(req)

    def verify(self, req: VerifyRequest) -> bool:
        return self.signer.verify(req)

    def batch_verify(self, reqs: Iterable[VerifyRequest]) -> List[bool]:
        return [self.signer.verify(r) for r in reqs]

    # ------------------------------------------------------------------
    def close(self) -> None:
        self.pool.shutdown(wait=True)
        self.store.provider.close()

    def __enter__(self) -> "KeyService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
