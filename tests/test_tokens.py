from datetime import datetime, timedelta, timezone
import threading
import time

import pytest

from autosort.core import AuthError, Credential
from autosort.spotify import (
    RefreshLockTable,
    TokenManager,
    credential_from_token_response,
)

from fakes import RefreshCounter, expired_credential, valid_credential


def test_valid_credential_is_returned_without_refresh(
    credential_store, token_manager, refresher
) -> None:
    credential_store.put(valid_credential("alice", token="access-1"))

    assert token_manager.get_access_token("alice") == "access-1"
    assert refresher.calls == 0


def test_credential_inside_margin_counts_as_expired() -> None:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    credential = Credential("alice", "a", "r", expires_at=now + timedelta(minutes=4))

    assert credential.is_expired(now, margin_seconds=300)
    assert not credential.is_expired(now, margin_seconds=60)


def test_missing_credential_is_auth_error(token_manager) -> None:
    with pytest.raises(AuthError):
        token_manager.get_access_token("nobody")


def test_refresh_keeps_refresh_token_when_omitted(
    credential_store, token_manager, refresher
) -> None:
    credential_store.put(expired_credential("alice"))

    assert token_manager.get_access_token("alice") == "access-2"

    stored = credential_store.get("alice")
    assert stored.access_token == "access-2"
    assert stored.refresh_token == "refresh-1"
    assert not stored.is_expired()


def test_refresh_stores_rotated_refresh_token(credential_store) -> None:
    credential_store.put(expired_credential("alice"))
    manager = TokenManager(
        credential_store, refresh_fn=RefreshCounter(refresh_token="refresh-2")
    )

    manager.get_access_token("alice")

    assert credential_store.get("alice").refresh_token == "refresh-2"


def test_credential_from_token_response_sets_expiry() -> None:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    credential = credential_from_token_response(
        "alice", {"access_token": "x", "expires_in": 600}, "old-refresh", now=now
    )

    assert credential.expires_at == now + timedelta(seconds=600)
    assert credential.refresh_token == "old-refresh"


def test_concurrent_refreshes_collapse_into_one(credential_store) -> None:
    credential_store.put(expired_credential("alice"))
    stale = credential_store.get("alice")
    calls = []

    def slow_refresh(refresh_token: str):
        calls.append(refresh_token)
        time.sleep(0.2)
        return {"access_token": "access-2", "expires_in": 3600}

    manager = TokenManager(credential_store, refresh_fn=slow_refresh)
    workers = 8
    barrier = threading.Barrier(workers)
    results, errors = [], []

    def worker() -> None:
        barrier.wait()
        try:
            results.append(manager.ensure_valid(stale))
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert errors == []
    assert results == ["access-2"] * workers
    assert len(calls) == 1
    assert len(manager.locks) == 0


def test_refresh_failure_is_auth_error_and_releases_lock(credential_store) -> None:
    credential_store.put(expired_credential("alice"))

    def failing_refresh(refresh_token: str):
        raise AuthError("Refresh token is invalid or expired")

    manager = TokenManager(credential_store, refresh_fn=failing_refresh)

    with pytest.raises(AuthError):
        manager.get_access_token("alice")

    assert "alice" not in manager.locks
    assert credential_store.get("alice").access_token == "expired-token"


def test_force_refresh_reuses_token_already_replaced(
    credential_store, token_manager, refresher
) -> None:
    credential_store.put(valid_credential("alice", token="access-9"))

    assert token_manager.force_refresh("alice", stale_token="access-1") == "access-9"
    assert refresher.calls == 0


def test_force_refresh_replaces_rejected_token(
    credential_store, token_manager, refresher
) -> None:
    credential_store.put(valid_credential("alice", token="access-1"))

    assert token_manager.force_refresh("alice", stale_token="access-1") == "access-2"
    assert refresher.calls == 1


def test_lock_table_single_owner_until_released() -> None:
    table = RefreshLockTable(ttl_seconds=60)

    first, owner = table.acquire("alice")
    second, second_owner = table.acquire("alice")

    assert owner is True
    assert second_owner is False
    assert second is first

    table.release("alice", first)
    _, owner_again = table.acquire("alice")
    assert owner_again is True


def test_lock_table_expired_lock_is_abandoned_and_swept() -> None:
    now = [0.0]
    table = RefreshLockTable(ttl_seconds=60, sweep_interval=300, clock=lambda: now[0])

    stuck, _ = table.acquire("alice")
    table.acquire("bob")

    now[0] = 61.0
    fresh, owner = table.acquire("alice")
    assert owner is True
    assert fresh is not stuck

    now[0] = 400.0
    table.acquire("carol")
    assert "bob" not in table
    assert "alice" not in table
    assert "carol" in table
