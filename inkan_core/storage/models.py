# inkan_core/storage/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Set, Union

from inkan_core.constants import SEED_SIZE, NONCE_SIZE
from inkan_core.errors import InvalidKeyFormat
from inkan_core.utils import b64e, b64d, from_iso, to_iso, public_key_fingerprint


class KeyType(str, Enum):
    ED25519 = "Ed25519"
    ED25519_ENCRYPTED = "Ed25519Encrypted"


class KeyStrength(str, Enum):
    # label only; every key is a 32-byte Ed25519 seed
    STANDARD = "Standard"
    HIGH = "High"
    ULTRA = "Ultra"


class KeyStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"


@dataclass(frozen=True)
class EncryptedBlob:
    ciphertext: bytes   # AES-GCM output, tag included
    nonce: bytes
    salt: bytes

    def __repr__(self) -> str:
        return "EncryptedBlob(<redacted>)"


PrivateKeyMaterial = Union[bytes, EncryptedBlob]


@dataclass
class KeyRecord:
    """
    One signing identity as held by the KeyStore and written to disk.

    ``private_key`` is the raw seed for ``KeyType.ED25519`` records and an
    ``EncryptedBlob`` for ``KeyType.ED25519_ENCRYPTED`` records. It is left
    out of ``repr`` and never appears in a ``PublicView``.
    """
    id: str
    name: str
    public_key: bytes
    private_key: PrivateKeyMaterial = field(repr=False)
    created_at: datetime
    key_type: KeyType = KeyType.ED25519
    key_strength: KeyStrength = KeyStrength.STANDARD
    description: Optional[str] = None
    last_used: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_active: bool = True
    revocation_reason: Optional[str] = None
    tags: Set[str] = field(default_factory=set)

    @property
    def is_encrypted(self) -> bool:
        return isinstance(self.private_key, EncryptedBlob)

    @property
    def fingerprint(self) -> str:
        return public_key_fingerprint(self.public_key)

    def to_dict(self) -> Dict[str, Any]:
        """Durable JSON shape of the record."""
        if isinstance(self.private_key, EncryptedBlob):
            private_key = b64e(self.private_key.ciphertext)
            salt = b64e(self.private_key.salt)
            nonce = b64e(self.private_key.nonce)
        else:
            private_key, salt, nonce = b64e(self.private_key), None, None
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "public_key": b64e(self.public_key),
            "private_key": private_key,
            "salt": salt,
            "nonce": nonce,
            "created_at": to_iso(self.created_at),
            "last_used": to_iso(self.last_used),
            "expires_at": to_iso(self.expires_at),
            "is_active": self.is_active,
            "revocation_reason": self.revocation_reason,
            "tags": sorted(self.tags),
            "key_type": self.key_type.value,
            "key_strength": self.key_strength.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeyRecord":
        """
        Inverse of to_dict; also reads files written before ``nonce`` was a field.

        Raises ``InvalidKeyFormat`` when the public key is not a usable
        Ed25519 key or the declared ``key_type`` disagrees with the material.
        """
        from inkan_core.crypto import load_public_key  # crypto imports this module

        if not isinstance(data, dict):
            raise InvalidKeyFormat(f"key record must be an object, got {type(data).__name__}")
        key_type = KeyType(data.get("key_type", KeyType.ED25519.value))
        public_key = b64d(data["public_key"])
        load_public_key(public_key)
        raw = b64d(data["private_key"])
        if data.get("salt"):
            salt = b64d(data["salt"])
            if data.get("nonce"):
                nonce, ct = b64d(data["nonce"]), raw
            else:
                # nonce prefixed to the ciphertext
                nonce, ct = raw[:NONCE_SIZE], raw[NONCE_SIZE:]
            private_key: PrivateKeyMaterial = EncryptedBlob(ciphertext=ct, nonce=nonce, salt=salt)
            key_type = KeyType.ED25519_ENCRYPTED
        else:
            if key_type is KeyType.ED25519_ENCRYPTED:
                raise InvalidKeyFormat(f"record {data.get('id')}: encrypted key has no salt")
            if len(raw) == 2 * SEED_SIZE:
                raw = raw[:SEED_SIZE]
            if len(raw) != SEED_SIZE:
                raise InvalidKeyFormat(f"record {data.get('id')}: private key must be {SEED_SIZE} bytes")
            private_key = raw
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description"),
            public_key=public_key,
            private_key=private_key,
            created_at=from_iso(data["created_at"]),
            last_used=from_iso(data.get("last_used")),
            expires_at=from_iso(data.get("expires_at")),
            is_active=bool(data.get("is_active", True)),
            revocation_reason=data.get("revocation_reason"),
            tags=set(data.get("tags") or []),
            key_type=key_type,
            key_strength=KeyStrength(data.get("key_strength", KeyStrength.STANDARD.value)),
        )


@dataclass
class PublicView:
    """Shareable projection of a KeyRecord. No private material, salt or nonce."""
    id: str
    name: str
    description: Optional[str]
    public_key: str
    fingerprint: str
    created_at: datetime
    last_used: Optional[datetime]
    expires_at: Optional[datetime]
    is_active: bool
    status: KeyStatus
    revocation_reason: Optional[str]
    tags: list
    key_type: KeyType
    key_strength: KeyStrength

    @classmethod
    def from_record(cls, rec: KeyRecord, status: KeyStatus) -> "PublicView":
        return cls(
            id=rec.id,
            name=rec.name,
            description=rec.description,
            public_key=b64e(rec.public_key),
            fingerprint=rec.fingerprint,
            created_at=rec.created_at,
            last_used=rec.last_used,
            expires_at=rec.expires_at,
            is_active=rec.is_active,
            status=status,
            revocation_reason=rec.revocation_reason,
            tags=sorted(rec.tags),
            key_type=rec.key_type,
            key_strength=rec.key_strength,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "public_key": self.public_key,
            "fingerprint": self.fingerprint,
            "created_at": to_iso(self.created_at),
            "last_used": to_iso(self.last_used),
            "expires_at": to_iso(self.expires_at),
            "is_active": self.is_active,
            "status": self.status.value,
            "revocation_reason": self.revocation_reason,
            "tags": list(self.tags),
            "key_type": self.key_type.value,
            "key_strength": self.key_strength.value,
        }


@dataclass
class KeyPatch:
    """Partial update; ``None`` means "leave unchanged"."""
    name: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[Set[str]] = None
    expires_at: Optional[datetime] = None
    is_active: Optional[bool] = None


@dataclass
class KeyFilter:
    active_only: bool = False
    key_type: Optional[KeyType] = None
    tags: Optional[Set[str]] = None
    search: Optional[str] = None


@dataclass
class KeyStats:
    total: int = 0
    active: int = 0
    expired: int = 0
    revoked: int = 0
    expiring_soon: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "active": self.active,
            "expired": self.expired,
            "revoked": self.revoked,
            "expiring_soon": self.expiring_soon,
        }
