from datetime import datetime, timedelta, timezone

import pytest

from inkan_core.errors import InvalidKeyFormat
from inkan_core.utils import as_utc, b64d, b64e, from_iso, new_id, public_key_fingerprint, sha256_hex, to_iso


def test_b64():
    assert b64d(b64e(b"\x00\x01")) == b"\x00\x01"
    with pytest.raises(InvalidKeyFormat):
        b64d("Invalid base64!")


def test_iso_roundtrip():
    dt = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)
    assert to_iso(dt) == "2026-10-18T09:30:00Z"
    assert from_iso("2026-10-18T09:30:00Z") == dt
    assert from_iso("2026-10-18T09:30:00") == dt
    assert to_iso(None) is None and from_iso(None) is None


def test_new_id_unique():
    assert new_id() != new_id()


def test_fingerprint():
    fpr = public_key_fingerprint(bytes(32))
    assert fpr.count(":") == 3
    assert len(fpr.replace(":", "")) == 32
    assert fpr.replace(":", "") == sha256_hex(bytes(32))[:32]


def test_as_utc_treats_naive_as_utc():
    naive = datetime(2026, 10, 18, 9, 30)
    aware = as_utc(naive)
    assert aware == datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)
    assert to_iso(naive) == "2026-10-18T09:30:00Z"
    plus_two = datetime(2026, 10, 18, 11, 30, tzinfo=timezone(timedelta(hours=2)))
    assert as_utc(plus_two).tzinfo is timezone.utc
    assert as_utc(plus_two) == aware
    assert as_utc(None) is None
