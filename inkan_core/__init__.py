"""
Inkan Core Package
==================
Key lifecycle and cryptographic operations engine for the Inkan key
management service.

Provides:
- Ed25519 key generation, signing and verification
- Password protection of private keys (PBKDF2-HMAC-SHA256 + AES-256-GCM)
- Concurrent-safe key store with pluggable persistence (JSON file default)
- Lifecycle state, search and statistics
"""

from .config import Settings
from .errors import (
    CryptoError, InvalidKeyFormat, InvalidPassword, KeyExpired, KeyManagementError,
    KeyNotFound, KeyRevoked, StorageError, ValidationError,
)
from .messages import GenerateRequest, GenerateResult, SignRequest, SignatureResult, VerifyRequest
from .service import KeyService
from .storage.models import KeyFilter, KeyPatch, KeyStats, KeyStatus, KeyStrength, KeyType, PublicView

__all__ = [
    "Settings",
    "KeyService",
    "GenerateRequest",
    "GenerateResult",
    "SignRequest",
    "SignatureResult",
    "VerifyRequest",
    "KeyFilter",
    "KeyPatch",
    "KeyStats",
    "KeyStatus",
    "KeyStrength",
    "KeyType",
    "PublicView",
    "KeyManagementError",
    "KeyNotFound",
    "KeyExpired",
    "KeyRevoked",
    "ValidationError",
    "InvalidKeyFormat",
    "StorageError",
    "CryptoError",
    "InvalidPassword",
]
