"""FastAPI dependencies: service wiring, caller identity and request guards."""

from functools import lru_cache
import hmac
from typing import Optional

from fastapi import Cookie, Header, HTTPException, Request

from autosort import config
from autosort.core import RateLimiter, log_warning
from autosort.data import AuditStore, CredentialStore, PreferenceStore
from autosort.pipeline import AutoSortService


@lru_cache(maxsize=1)
def get_service() -> AutoSortService:
    return AutoSortService(
        CredentialStore(config.CREDENTIALS_FILE),
        PreferenceStore(config.PREFERENCES_FILE),
        AuditStore(config.SORT_LOG_FILE),
    )


def get_principal_id(spotify_user_id: Optional[str] = Cookie(default=None)) -> str:
    if not spotify_user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return spotify_user_id


def enforce_rate_limit(limiter: RateLimiter, identifier: str) -> None:
    result = limiter.check(identifier)
    if result.allowed:
        return
    raise HTTPException(
        status_code=429,
        detail="Too many requests. Please try again later.",
        headers={"Retry-After": str(result.retry_after(limiter.clock()))},
    )


def _client_key(request: Request, spotify_user_id: Optional[str]) -> str:
    if spotify_user_id:
        return spotify_user_id
    return request.client.host if request.client else "unknown"


def sort_rate_limit(
    request: Request, spotify_user_id: Optional[str] = Cookie(default=None)
) -> None:
    enforce_rate_limit(request.app.state.sort_limiter, _client_key(request, spotify_user_id))


def settings_rate_limit(
    request: Request, spotify_user_id: Optional[str] = Cookie(default=None)
) -> None:
    enforce_rate_limit(
        request.app.state.settings_limiter, _client_key(request, spotify_user_id)
    )


def verify_cron_secret(authorization: Optional[str] = Header(default=None)) -> None:
    """
    Require `Authorization: Bearer <CRON_SECRET>` on the scheduled-run route.

    Development mode lets unauthenticated calls through with a warning.
    """
    if config.AUTOSORT_ENV == "development" and not authorization:
        log_warning("Cron endpoint called without authorization (development mode).")
        return

    if not config.CRON_SECRET:
        raise HTTPException(status_code=500, detail="Server configuration error")

    expected = f"Bearer {config.CRON_SECRET}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        raise HTTPException(status_code=401, detail="Unauthorized")
