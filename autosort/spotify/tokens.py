"""Token lifecycle: expiry checks and single-flight refresh per principal.

Several requests for the same principal may find its access token expired
at the same time. Spotify can invalidate a refresh token once it has been
used, so only one of them is allowed to call the token endpoint; the others
wait on the same Future and then re-read the freshly persisted credential.

The lock table is owned by the TokenManager instance (no module globals) and
expired entries are swept lazily when the table is touched, since there is
no guarantee a background thread keeps running between requests.
"""

from concurrent.futures import Future, TimeoutError as FutureTimeout
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from autosort.config import (
    REFRESH_LOCK_SWEEP_INTERVAL_SECONDS,
    REFRESH_LOCK_TTL_SECONDS,
    TOKEN_EXPIRY_MARGIN_SECONDS,
)
from autosort.core import AuthError, Credential
from autosort.data import CredentialStore

from .auth import credential_from_token_response, refresh_access_token

logger = logging.getLogger(__name__)


@dataclass
class RefreshLock:
    future: Future
    expires_at: float


class RefreshLockTable:
    """In-flight refreshes keyed by principal id."""

    def __init__(
        self,
        ttl_seconds: float = REFRESH_LOCK_TTL_SECONDS,
        sweep_interval: float = REFRESH_LOCK_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._locks: Dict[str, RefreshLock] = {}
        self._mutex = threading.Lock()
        self._last_sweep = clock()

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self.sweep_interval:
            return
        self._last_sweep = now
        for key in [k for k, lock in self._locks.items() if lock.expires_at < now]:
            del self._locks[key]

    def acquire(self, principal_id: str) -> Tuple[Future, bool]:
        """
        Return (future, is_owner).

        The owner must resolve the future and call release(); everybody else
        only waits on it. A lock past its TTL is treated as abandoned.
        """
        with self._mutex:
            now = self._clock()
            self._sweep(now)
            lock = self._locks.get(principal_id)
            if lock is not None and lock.expires_at > now:
                return lock.future, False

            future: Future = Future()
            self._locks[principal_id] = RefreshLock(future, now + self.ttl_seconds)
            return future, True

    def release(self, principal_id: str, future: Future) -> None:
        with self._mutex:
            lock = self._locks.get(principal_id)
            if lock is not None and lock.future is future:
                del self._locks[principal_id]

    def __contains__(self, principal_id: str) -> bool:
        with self._mutex:
            return principal_id in self._locks

    def __len__(self) -> int:
        with self._mutex:
            return len(self._locks)


RefreshFn = Callable[[str], Dict]


class TokenManager:
    def __init__(
        self,
        credential_store: CredentialStore,
        *,
        refresh_fn: RefreshFn = refresh_access_token,
        locks: Optional[RefreshLockTable] = None,
        margin_seconds: int = TOKEN_EXPIRY_MARGIN_SECONDS,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = credential_store
        self.refresh_fn = refresh_fn
        self.locks = locks or RefreshLockTable()
        self.margin_seconds = margin_seconds
        self._now = now

    def _is_usable(self, credential: Credential, stale_token: Optional[str]) -> bool:
        if credential.is_expired(self._now(), self.margin_seconds):
            return False
        return stale_token is None or credential.access_token != stale_token

    def get_access_token(self, principal_id: str) -> str:
        credential = self.store.get(principal_id)
        if credential is None:
            raise AuthError("No stored credential for principal")
        return self.ensure_valid(credential)

    def ensure_valid(self, credential: Credential) -> str:
        """Return a usable access token, refreshing it if it is (nearly) expired."""
        if not credential.is_expired(self._now(), self.margin_seconds):
            return credential.access_token
        return self._refresh(credential.principal_id, credential, stale_token=None)

    def force_refresh(self, principal_id: str, stale_token: str) -> str:
        """
        Refresh after Spotify rejected `stale_token` with a 401.

        If another caller already replaced that token, its result is reused.
        """
        credential = self.store.get(principal_id)
        if credential is None:
            raise AuthError("No stored credential for principal")
        return self._refresh(principal_id, credential, stale_token=stale_token)

    def _refresh(
        self,
        principal_id: str,
        fallback: Credential,
        stale_token: Optional[str],
    ) -> str:
        future, is_owner = self.locks.acquire(principal_id)

        if not is_owner:
            logger.debug("Waiting for in-flight token refresh")
            try:
                future.result(timeout=self.locks.ttl_seconds)
            except FutureTimeout as exc:
                raise AuthError("Timed out waiting for token refresh") from exc

            current = self.store.get(principal_id) or fallback
            if self._is_usable(current, stale_token):
                return current.access_token
            raise AuthError("Token refresh did not produce a usable token")

        try:
            # Another refresh may have finished between our expiry check and
            # acquiring the lock; its result is already persisted.
            current = self.store.get(principal_id) or fallback
            if self._is_usable(current, stale_token):
                future.set_result(current.access_token)
                return current.access_token

            logger.info("Refreshing Spotify access token")
            token_info = self.refresh_fn(current.refresh_token)
            refreshed = credential_from_token_response(
                principal_id,
                token_info,
                previous_refresh_token=current.refresh_token,
                now=self._now(),
            )
            self.store.put(refreshed)
            future.set_result(refreshed.access_token)
            return refreshed.access_token
        except BaseException as exc:
            if not future.done():
                future.set_exception(exc)
            raise
        finally:
            self.locks.release(principal_id, future)
