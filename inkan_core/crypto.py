"""
inkan_core.crypto
-----------------
Cryptographic primitives for the Inkan key engine:

- Ed25519: key generation, signing and verification
- PBKDF2-HMAC-SHA256 + AES-256-GCM: password protection of private seeds
- Document digests: the exact bytes that get signed

All functions here are stateless. Decrypted seeds are returned as
``bytearray`` so the caller can wipe them once a signature is produced.
"""

from __future__ import annotations
from typing import Tuple, Optional
from cryptography.exceptions import InvalidSignature, InvalidTag
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
import os, hashlib, binascii

from .constants import (
    SEED_SIZE, PUBLIC_KEY_SIZE, SIGNATURE_SIZE, PBKDF2_ITERATIONS,
    DERIVED_KEY_SIZE, SALT_SIZE, NONCE_SIZE, DIGEST_SIZE,
)
from .errors import CryptoError, InvalidKeyFormat, InvalidPassword, ValidationError
from .storage.models import EncryptedBlob

# --------- randomness ----------
def random_bytes(n: int) -> bytes:
    try:
        return os.urandom(n)
    except (OSError, NotImplementedError) as e:
        raise CryptoError("secure random source unavailable") from e

# --------- Ed25519 (sign/verify) ----------
def ed25519_generate() -> Tuple[bytes, bytes]:
    """Return ``(public_key, seed)`` for a freshly drawn 32-byte seed."""
    seed = random_bytes(SEED_SIZE)
    sk = ed25519.Ed25519PrivateKey.from_private_bytes(seed)
    return sk.public_key().public_bytes_raw(), seed

def ed25519_sign(seed, data: bytes) -> bytes:
    sk = ed25519.Ed25519PrivateKey.from_private_bytes(seed)
    return sk.sign(data)

def load_public_key(pub_raw: bytes) -> ed25519.Ed25519PublicKey:
    if len(pub_raw) != PUBLIC_KEY_SIZE:
        raise InvalidKeyFormat(f"public key must be {PUBLIC_KEY_SIZE} bytes, got {len(pub_raw)}")
    try:
        return ed25519.Ed25519PublicKey.from_public_bytes(pub_raw)
    except ValueError as e:
        raise InvalidKeyFormat("invalid Ed25519 public key") from e

def ed25519_verify(pub_raw: bytes, sig: bytes, data: bytes) -> bool:
    pk = load_public_key(pub_raw)
    if len(sig) != SIGNATURE_SIZE:
        raise InvalidKeyFormat(f"signature must be {SIGNATURE_SIZE} bytes, got {len(sig)}")
    try:
        pk.verify(sig, data)
        return True
    except InvalidSignature:
        return False


class KeyGenerator:
    """Produces raw Ed25519 key material. ``key_strength`` never reaches here."""

    def generate(self) -> Tuple[bytes, bytes]:
        return ed25519_generate()


# --------- PBKDF2 + AES-GCM (private key at rest) ----------
def derive_key(password: str, salt: bytes, iterations: int = PBKDF2_ITERATIONS) -> bytes:
    kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=DERIVED_KEY_SIZE, salt=salt, iterations=iterations)
    return kdf.derive(password.encode("utf-8"))


class KeyCodec:
    """
    Encrypts and decrypts private seeds with a password.

    Every ``encrypt`` call draws a new salt and a new nonce, so two
    encryptions of the same seed under the same password never share either.
    ``decrypt`` raises ``InvalidPassword`` for any failure, after running the
    full key derivation, so a wrong password and a damaged blob look the same.
    """

    def __init__(self, iterations: int = PBKDF2_ITERATIONS):
        self.iterations = iterations

    def encrypt(self, seed, password: str) -> EncryptedBlob:
        salt = random_bytes(SALT_SIZE)
        nonce = random_bytes(NONCE_SIZE)
        key = derive_key(password, salt, self.iterations)
        ct = AESGCM(key).encrypt(nonce, bytes(seed), None)
        return EncryptedBlob(ciphertext=ct, nonce=nonce, salt=salt)

    def decrypt(self, blob: EncryptedBlob, password: str) -> bytearray:
        key = derive_key(password, blob.salt, self.iterations)
        try:
            if len(blob.nonce) != NONCE_SIZE:
                raise ValueError("bad nonce length")
            plain = AESGCM(key).decrypt(blob.nonce, blob.ciphertext, None)
        except (InvalidTag, ValueError):
            raise InvalidPassword() from None
        seed = bytearray(plain)
        del plain
        if len(seed) == 2 * SEED_SIZE:
            # legacy keypair form: seed || public key
            seed[SEED_SIZE:] = bytes(SEED_SIZE)
            del seed[SEED_SIZE:]
        return seed


def wipe(buf: Optional[bytearray]) -> None:
    if buf is None:
        return
    for i in range(len(buf)):
        buf[i] = 0

# --------- Document digests ----------
def document_digest(document_hash: Optional[str] = None, document_content: Optional[str] = None) -> bytes:
    """
    Bytes that are actually signed.

    A supplied ``document_hash`` must be a hex-encoded SHA-256 digest and is
    used verbatim; otherwise the digest is SHA-256 over the UTF-8 encoded
    ``document_content``.
    """
    if document_hash is not None:
        h = document_hash.strip()
        if not h:
            raise ValidationError("document_hash must not be empty")
        try:
            digest = binascii.unhexlify(h)
        except (binascii.Error, ValueError) as e:
            raise ValidationError("document_hash must be hex encoded") from e
        if len(digest) != DIGEST_SIZE:
            raise ValidationError(f"document_hash must be a {DIGEST_SIZE}-byte SHA-256 digest ({2 * DIGEST_SIZE} hex chars)")
        return digest
    if document_content is not None:
        return hashlib.sha256(document_content.encode("utf-8")).digest()
    raise ValidationError("document_hash or document_content must be provided")
