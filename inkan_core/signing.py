"""
inkan_core.signing
------------------
Sign/verify protocol.

``sign`` borrows one record from the KeyStore for the length of the call.
Encrypted seeds are decrypted into a ``bytearray`` that is wiped in a
``finally`` block, so no exit path (success, error, early return) leaves
decrypted key bytes behind.

``verify`` never touches the KeyStore; it needs only the public key.
"""

from __future__ import annotations
from concurrent.futures import Executor
from typing import Optional

from .crypto import KeyCodec, document_digest, ed25519_sign, ed25519_verify, wipe
from .errors import KeyExpired, KeyRevoked, ValidationError
from .keystore import KeyStore
from .lifecycle import key_status
from .logger import get_logger
from .messages import SignRequest, SignatureResult, VerifyRequest
from .storage.models import EncryptedBlob, KeyRecord, KeyStatus
from .utils import b64d, b64e, utcnow

log = get_logger("Inkan.Signing")


def _ensure_usable(rec: KeyRecord, now) -> None:
    st = key_status(rec, now)
    if st is KeyStatus.REVOKED:
        raise KeyRevoked(rec.id)
    if st is KeyStatus.EXPIRED:
        raise KeyExpired(rec.id)


class SigningEngine:
    def __init__(self, store: KeyStore, codec: Optional[KeyCodec] = None,
                 executor: Optional[Executor] = None):
        self.store = store
        self.codec = codec or KeyCodec()
        self.executor = executor

    def _run(self, fn, *args):
        # PBKDF2 and file writes go through the bounded pool when one is set
        if self.executor is None:
            return fn(*args)
        return self.executor.submit(fn, *args).result()

    def sign(self, req: SignRequest) -> SignatureResult:
        rec = self.store.get(req.key_id)
        _ensure_usable(rec, utcnow())

        seed = None
        try:
            if isinstance(rec.private_key, EncryptedBlob):
                if req.password is None:
                    raise ValidationError("password required for encrypted key")
                seed = self._run(self.codec.decrypt, rec.private_key, req.password)
            else:
                seed = bytearray(rec.private_key)
            digest = document_digest(req.document_hash, req.document_content)
            signature = ed25519_sign(seed, digest)
        finally:
            wipe(seed)

        signed_at = utcnow()

        def _touch(r: KeyRecord) -> None:
            # the key may have been revoked while we were signing
            _ensure_usable(r, signed_at)
            r.last_used = signed_at

        self._run(self.store.update, rec.id, _touch)
        log.info(f"[SIGN] key={rec.id} digest={digest.hex()[:16]}...")
        return SignatureResult(
            signature=b64e(signature),
            key_id=rec.id,
            document_hash=digest.hex(),
            signing_time=signed_at,
        )

    def verify(self, req: VerifyRequest) -> bool:
        pub = b64d(req.public_key)
        sig = b64d(req.signature)
        digest = document_digest(req.document_hash, req.document_content)
        ok = ed25519_verify(pub, sig, digest)
        log.debug(f"[VERIFY] valid={ok}")
        return ok
