"""Tests for the TTL store backing password-reset OTPs"""
from backend.app.services.otp_store import EXPIRED, MISSING, TtlStore


def test_get_before_expiry_returns_value(otp_store, clock):
    otp_store.put("9876543210", "123456", ttl=600)
    clock.advance(599)
    assert otp_store.get("9876543210") == "123456"


def test_get_after_expiry_reports_expired_then_missing(otp_store, clock):
    otp_store.put("9876543210", "123456", ttl=600)
    clock.advance(600)
    assert otp_store.get("9876543210") is EXPIRED
    assert otp_store.get("9876543210") is MISSING


def test_unknown_key_is_missing(otp_store):
    assert otp_store.get("0000000000") is MISSING


def test_put_replaces_value_and_deadline(otp_store, clock):
    otp_store.put("k", "old", ttl=10)
    clock.advance(8)
    otp_store.put("k", "new", ttl=10)
    clock.advance(8)
    assert otp_store.get("k") == "new"


def test_delete(otp_store):
    otp_store.put("k", "v", ttl=10)
    otp_store.delete("k")
    otp_store.delete("k")
    assert otp_store.get("k") is MISSING


def test_purge_expired(otp_store, clock):
    otp_store.put("a", 1, ttl=5)
    otp_store.put("b", 2, ttl=50)
    clock.advance(10)
    assert otp_store.purge_expired() == 1
    assert len(otp_store) == 1
    assert otp_store.get("b") == 2


def test_stores_are_independent(clock):
    first, second = TtlStore(clock=clock), TtlStore(clock=clock)
    first.put("k", "v", ttl=10)
    assert second.get("k") is MISSING
