from datetime import datetime, timedelta, timezone

import pytest

from inkan_core.crypto import ed25519_generate
from inkan_core.errors import KeyRevoked, ValidationError
from inkan_core.keystore import KeyStore
from inkan_core.lifecycle import LifecycleManager, key_status
from inkan_core.storage import InMemoryStorage, KeyFilter, KeyPatch, KeyRecord, KeyStatus, KeyType

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def _record(key_id, name="key", description=None, tags=(), expires_at=None,
            is_active=True, key_type=KeyType.ED25519):
    pub, seed = ed25519_generate()
    return KeyRecord(
        id=key_id, name=name, description=description, public_key=pub, private_key=seed,
        created_at=NOW - timedelta(days=100), tags=set(tags), expires_at=expires_at,
        is_active=is_active, key_type=key_type,
    )


@pytest.fixture
def manager():
    store = KeyStore.open(InMemoryStorage())
    for rec in [
        _record("active", name="Prod signer", tags={"api"}),
        _record("soon", name="rotating", expires_at=NOW + timedelta(days=10), tags={"PRODUCTION"}),
        _record("later", name="later", expires_at=NOW + timedelta(days=90)),
        _record("expired", name="old", expires_at=NOW - timedelta(days=1), description="staging"),
        _record("boundary", name="edge", expires_at=NOW),
        _record("revoked", name="bad", is_active=False, description="was prod"),
        _record("enc", name="vault", key_type=KeyType.ED25519_ENCRYPTED, tags={"api", "eu"}),
    ]:
        store.insert(rec)
    return LifecycleManager(store, expiring_soon_days=30)


def test_status_rules():
    assert key_status(_record("a"), NOW) is KeyStatus.ACTIVE
    assert key_status(_record("a", expires_at=NOW), NOW) is KeyStatus.EXPIRED
    assert key_status(_record("a", expires_at=NOW + timedelta(seconds=1)), NOW) is KeyStatus.ACTIVE
    # revoked wins over expired
    assert key_status(_record("a", is_active=False, expires_at=NOW - timedelta(days=1)), NOW) is KeyStatus.REVOKED


def test_active_only_never_returns_inactive(manager):
    ids = {r.id for r in manager.list(KeyFilter(active_only=True), NOW)}
    assert ids == {"active", "soon", "later", "enc"}
    for rec in manager.list(KeyFilter(active_only=True), NOW):
        assert manager.status(rec, NOW) is KeyStatus.ACTIVE


def test_filter_conjunction(manager):
    got = manager.list(KeyFilter(active_only=True, key_type=KeyType.ED25519_ENCRYPTED), NOW)
    assert [r.id for r in got] == ["enc"]
    got = manager.list(KeyFilter(tags={"api"}), NOW)
    assert {r.id for r in got} == {"active", "enc"}
    got = manager.list(KeyFilter(tags={"api", "eu"}), NOW)
    assert [r.id for r in got] == ["enc"]
    got = manager.list(KeyFilter(tags={"api"}, search="vault"), NOW)
    assert [r.id for r in got] == ["enc"]


def test_search_case_insensitive(manager):
    got = {r.id for r in manager.search("prod", NOW)}
    # name, tag and description matches
    assert got == {"active", "soon", "revoked"}
    assert manager.search("nothing-matches", NOW) == []


def test_stats(manager):
    stats = manager.stats(now=NOW)
    assert stats.total == 7
    assert stats.active == 4
    assert stats.expired == 2
    assert stats.revoked == 1
    assert stats.active + stats.expired + stats.revoked == stats.total
    assert stats.expiring_soon == 1


def test_expiring_soon_window(manager):
    assert [r.id for r in manager.expiring_soon(now=NOW)] == ["soon"]
    assert {r.id for r in manager.expiring_soon(days=120, now=NOW)} == {"soon", "later"}
    assert manager.expiring_soon(days=0, now=NOW) == []


def test_configurable_window():
    store = KeyStore.open(InMemoryStorage())
    store.insert(_record("a", expires_at=NOW + timedelta(days=45)))
    assert LifecycleManager(store, 30).stats(now=NOW).expiring_soon == 0
    assert LifecycleManager(store, 60).stats(now=NOW).expiring_soon == 1
    with pytest.raises(ValidationError):
        LifecycleManager(store, -1)


def test_revoke(manager):
    rec = manager.revoke("active", reason="compromised", immediate=True, now=NOW)
    assert rec.is_active is False
    assert rec.expires_at == NOW
    assert rec.revocation_reason == "compromised"
    assert manager.status(manager.store.get("active"), NOW) is KeyStatus.REVOKED


def test_revoke_not_immediate_behaves_the_same(manager):
    rec = manager.revoke("later", reason="retired", immediate=False, now=NOW)
    assert rec.is_active is False
    assert rec.expires_at == NOW


def test_update_applies_only_supplied_fields(manager):
    before = manager.store.get("enc")
    rec = manager.update("enc", KeyPatch(description="eu signer", tags={"eu"}))
    assert rec.name == "vault"
    assert rec.description == "eu signer"
    assert rec.tags == {"eu"}
    assert rec.private_key == before.private_key
    assert rec.public_key == before.public_key

    rec = manager.update("enc", KeyPatch(is_active=False, expires_at=NOW + timedelta(days=1)))
    assert rec.is_active is False
    assert rec.expires_at == NOW + timedelta(days=1)


def test_update_rejects_blank_name(manager):
    with pytest.raises(ValidationError):
        manager.update("enc", KeyPatch(name="  "))
    assert manager.store.get("enc").name == "vault"


def test_revoked_key_cannot_be_reactivated(manager):
    manager.revoke("active", reason="compromised", now=NOW)
    with pytest.raises(KeyRevoked):
        manager.update("active", KeyPatch(is_active=True))
    rec = manager.store.get("active")
    assert rec.is_active is False
    assert rec.revocation_reason == "compromised"
    # an already active key may be patched with is_active=True
    assert manager.update("later", KeyPatch(is_active=True)).is_active is True


def test_update_coerces_naive_expiry_to_utc(manager):
    rec = manager.update("later", KeyPatch(expires_at=datetime(2026, 6, 5, 12, 0)))
    assert rec.expires_at == datetime(2026, 6, 5, 12, 0, tzinfo=timezone.utc)
    assert manager.status(rec, NOW) is KeyStatus.ACTIVE
    assert manager.stats(now=NOW).total == 7


def test_revoke_accepts_naive_now(manager):
    rec = manager.revoke("later", now=datetime(2026, 6, 1, 12, 0))
    assert rec.expires_at == NOW
