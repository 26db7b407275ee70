"""
inkan_core.utils
----------------
Lightweight helpers for UUID generation, timestamps, base64 handling and
public key fingerprints. Everything here is pure and side-effect free.
"""

from __future__ import annotations
import base64, binascii, hashlib, uuid
from datetime import datetime, timezone
from typing import Optional

from .errors import InvalidKeyFormat


def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def b64d(s: str) -> bytes:
    try:
        return base64.b64decode(s.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError, AttributeError) as e:
        raise InvalidKeyFormat("invalid base64 encoding") from e

def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)

def to_iso(dt: Optional[datetime]) -> Optional[str]:
    # RFC3339 / ISO 8601 in UTC
    if dt is None:
        return None
    return as_utc(dt).isoformat().replace("+00:00", "Z")

def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    # naive datetimes are taken to be UTC already
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

def from_iso(s: Optional[str]) -> Optional[datetime]:
    if s is None:
        return None
    return as_utc(datetime.fromisoformat(s.replace("Z", "+00:00")))

def new_id() -> str:
    return str(uuid.uuid4())

def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

def public_key_fingerprint(public_key: bytes) -> str:
    """
    Stable, human-readable fingerprint for an Ed25519 public key.

    First 16 bytes of SHA-256 over the raw key, hex encoded and split into
    four colon-separated groups, e.g. ``1a2b3c4d:...:9f8e7d6c``.
    """
    digest = sha256_hex(public_key)[:32]
    return ":".join(digest[i:i + 8] for i in range(0, 32, 8))
