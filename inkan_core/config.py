"""
inkan_core.config
-----------------
Process settings read from the environment. The service is constructed
from a ``Settings`` instance; nothing else in the package reads env vars
except the logger level and the storage factory fallback.
"""

from __future__ import annotations
from dataclasses import dataclass
import os

from .constants import DEFAULT_EXPIRING_SOON_DAYS, DEFAULT_STORAGE_PATH, DEFAULT_WORKERS
from .errors import ValidationError


def _int_env(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValidationError(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass
class Settings:
    storage_provider: str = "json"
    storage_path: str = DEFAULT_STORAGE_PATH
    expiring_soon_days: int = DEFAULT_EXPIRING_SOON_DAYS
    workers: int = DEFAULT_WORKERS

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            storage_provider=os.getenv("INKAN_STORAGE_PROVIDER", "json").lower(),
            storage_path=os.getenv("INKAN_STORAGE_PATH") or os.getenv("STORAGE_PATH") or DEFAULT_STORAGE_PATH,
            expiring_soon_days=_int_env("INKAN_EXPIRING_SOON_DAYS", DEFAULT_EXPIRING_SOON_DAYS, 0),
            workers=_int_env("INKAN_WORKERS", DEFAULT_WORKERS, 1),
        )

    def storage_config(self) -> dict:
        return {"provider": self.storage_provider, "path": self.storage_path}
