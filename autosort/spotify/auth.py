from datetime import datetime, timedelta, timezone
import logging
from typing import Dict, Optional

import requests

from autosort.config import (
    REQUEST_TIMEOUT_SECONDS,
    SPOTIFY_CLIENT_ID,
    SPOTIFY_CLIENT_SECRET,
    SPOTIFY_TOKEN_URL,
)
from autosort.core import AuthError, Credential

logger = logging.getLogger(__name__)


def refresh_access_token(
    refresh_token: str,
    *,
    session: Optional[requests.Session] = None,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> Dict:
    """
    Exchange a refresh token for a new access token.

    Any failure (revoked token, network error, malformed answer) is reported
    as AuthError: the principal has to re-authenticate upstream.
    """
    token_data = {
        "grant_type": "refresh_token",
        "refresh_token": refresh_token,
    }
    http = session or requests
    try:
        r = http.post(
            SPOTIFY_TOKEN_URL,
            data=token_data,
            auth=(SPOTIFY_CLIENT_ID or "", SPOTIFY_CLIENT_SECRET or ""),
            timeout=timeout,
        )
    except requests.RequestException as exc:
        logger.warning("Token refresh request failed (%s)", type(exc).__name__)
        raise AuthError("Token refresh request failed") from exc

    if r.status_code == 400:
        raise AuthError("Refresh token is invalid or expired")
    if not r.ok:
        raise AuthError(f"Failed to refresh token: {r.status_code}")

    try:
        token_info = r.json()
    except ValueError as exc:
        raise AuthError("Invalid token response") from exc

    if not isinstance(token_info, dict) or not token_info.get("access_token"):
        raise AuthError("Invalid token response: missing access_token")
    return token_info


def credential_from_token_response(
    principal_id: str,
    token_info: Dict,
    previous_refresh_token: str,
    now: Optional[datetime] = None,
) -> Credential:
    """
    Build the Credential to persist after a refresh.

    Spotify may omit refresh_token from the response, which means the old
    one stays valid and must be kept.
    """
    issued_at = now or datetime.now(timezone.utc)
    expires_in = int(token_info.get("expires_in", 3600))
    return Credential(
        principal_id=principal_id,
        access_token=token_info["access_token"],
        refresh_token=token_info.get("refresh_token") or previous_refresh_token,
        expires_at=issued_at + timedelta(seconds=expires_in),
    )


def spotify_headers(access_token: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {access_token}",
        "Content-Type": "application/json",
    }
