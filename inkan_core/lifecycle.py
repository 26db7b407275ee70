"""
inkan_core.lifecycle
--------------------
Status derivation, filtering, search, revocation and statistics.

Status rules (mutually exclusive, exhaustive):
- revoked: ``is_active`` is False
- expired: ``expires_at`` is set and ``<= now``
- active:  otherwise
"""

from __future__ import annotations
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from .constants import DEFAULT_EXPIRING_SOON_DAYS
from .errors import KeyRevoked, ValidationError
from .keystore import KeyStore
from .logger import get_logger
from .storage.models import KeyFilter, KeyPatch, KeyRecord, KeyStats, KeyStatus
from .utils import as_utc, utcnow

log = get_logger("Inkan.Lifecycle")


def key_status(rec: KeyRecord, now: Optional[datetime] = None) -> KeyStatus:
    now = now or utcnow()
    if not rec.is_active:
        return KeyStatus.REVOKED
    if rec.expires_at is not None and rec.expires_at <= now:
        return KeyStatus.EXPIRED
    return KeyStatus.ACTIVE


def matches_search(rec: KeyRecord, query: str) -> bool:
    q = query.lower()
    if q in rec.name.lower():
        return True
    if rec.description and q in rec.description.lower():
        return True
    return any(q in tag.lower() for tag in rec.tags)


def matches_filter(rec: KeyRecord, flt: KeyFilter, now: datetime) -> bool:
    if flt.active_only and key_status(rec, now) is not KeyStatus.ACTIVE:
        return False
    if flt.key_type is not None and rec.key_type != flt.key_type:
        return False
    if flt.tags and not set(flt.tags).issubset(rec.tags):
        return False
    if flt.search and not matches_search(rec, flt.search):
        return False
    return True


def apply_patch(rec: KeyRecord, patch: KeyPatch) -> None:
    if patch.name is not None:
        if not patch.name.strip():
            raise ValidationError("key name cannot be empty")
        rec.name = patch.name
    if patch.description is not None:
        rec.description = patch.description
    if patch.tags is not None:
        rec.tags = set(patch.tags)
    if patch.expires_at is not None:
        rec.expires_at = as_utc(patch.expires_at)
    if patch.is_active is not None:
        if patch.is_active and not rec.is_active:
            raise KeyRevoked(rec.id)
        rec.is_active = patch.is_active


class LifecycleManager:
    def __init__(self, store: KeyStore, expiring_soon_days: int = DEFAULT_EXPIRING_SOON_DAYS):
        if expiring_soon_days < 0:
            raise ValidationError("expiring_soon_days must be >= 0")
        self.store = store
        self.expiring_soon_window = timedelta(days=expiring_soon_days)

    def status(self, rec: KeyRecord, now: Optional[datetime] = None) -> KeyStatus:
        return key_status(rec, now)

    def filter(self, records: Iterable[KeyRecord], flt: KeyFilter,
               now: Optional[datetime] = None) -> List[KeyRecord]:
        now = now or utcnow()
        return [r for r in records if matches_filter(r, flt, now)]

    def list(self, flt: Optional[KeyFilter] = None, now: Optional[datetime] = None) -> List[KeyRecord]:
        return self.filter(self.store.list(), flt or KeyFilter(), now)

    def search(self, query: str, now: Optional[datetime] = None) -> List[KeyRecord]:
        return self.list(KeyFilter(search=query), now)

    def update(self, key_id: str, patch: KeyPatch) -> KeyRecord:
        rec = self.store.update(key_id, lambda r: apply_patch(r, patch))
        log.info(f"[LIFECYCLE] updated key {key_id}")
        return rec

    def revoke(self, key_id: str, reason: Optional[str] = None, immediate: bool = True,
               now: Optional[datetime] = None) -> KeyRecord:
        """
        Deactivate a key and pin its expiry to ``now``.

        ``immediate`` is accepted for API compatibility and has no further
        effect; revocation always takes effect at once.
        """
        now = as_utc(now) or utcnow()

        def _revoke(r: KeyRecord) -> None:
            r.is_active = False
            r.expires_at = now
            r.revocation_reason = reason

        rec = self.store.update(key_id, _revoke)
        log.warning(f"[LIFECYCLE] revoked key {key_id} immediate={immediate} reason={reason!r}")
        return rec

    def is_expiring_soon(self, rec: KeyRecord, now: datetime,
                         window: Optional[timedelta] = None) -> bool:
        window = self.expiring_soon_window if window is None else window
        if key_status(rec, now) is not KeyStatus.ACTIVE or rec.expires_at is None:
            return False
        return now < rec.expires_at <= now + window

    def expiring_soon(self, days: Optional[int] = None, now: Optional[datetime] = None) -> List[KeyRecord]:
        now = now or utcnow()
        window = None if days is None else timedelta(days=days)
        return [r for r in self.store.list() if self.is_expiring_soon(r, now, window)]

    def stats(self, records: Optional[Iterable[KeyRecord]] = None,
              now: Optional[datetime] = None) -> KeyStats:
        now = now or utcnow()
        records = self.store.list() if records is None else records
        stats = KeyStats()
        for rec in records:
            stats.total += 1
            st = key_status(rec, now)
            if st is KeyStatus.ACTIVE:
                stats.active += 1
                if self.is_expiring_soon(rec, now):
                    stats.expiring_soon += 1
            elif st is KeyStatus.EXPIRED:
                stats.expired += 1
            else:
                stats.revoked += 1
        return stats
