from __future__ import annotations


class KeyManagementError(Exception):
    """Base class for every error the key engine raises."""
    status_code: int = 500


class KeyNotFound(KeyManagementError):
    status_code = 404

    def __init__(self, key_id: str):
        super().__init__(f"key not found: {key_id}")
        self.key_id = key_id


class KeyExpired(KeyManagementError):
    status_code = 410

    def __init__(self, key_id: str):
        super().__init__(f"key expired: {key_id}")
        self.key_id = key_id


class KeyRevoked(KeyManagementError):
    status_code = 410

    def __init__(self, key_id: str):
        super().__init__(f"key revoked: {key_id}")
        self.key_id = key_id


class ValidationError(KeyManagementError):
    status_code = 400


class InvalidKeyFormat(KeyManagementError):
    status_code = 400


class StorageError(KeyManagementError):
    status_code = 500


class CryptoError(KeyManagementError):
    status_code = 500


class InvalidPassword(CryptoError):
    # one message for every decrypt failure so callers cannot tell them apart
    status_code = 401

    def __init__(self):
        super().__init__("invalid password or corrupted key material")
