"""Resilient Spotify Web API client.

Every call goes through SpotifyClient.call(), which:

  1. obtains a valid access token from the TokenManager
  2. sends the request under a fixed timeout (timeouts are never retried,
     a write of unknown completion status must not be applied twice)
  3. on 401, forces one token refresh and retries once; a second 401 means
     the principal has to re-authenticate
  4. on 429, sleeps for Retry-After and retries once; a second 429 is
     reported as RateLimitExhausted
  5. maps any other non-2xx to UpstreamError carrying only the status code

There are no retry loops: each recovery path is taken at most once per call,
which keeps the latency of a scheduled run bounded.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from autosort.config import (
    AUDIO_FEATURES_BATCH_SIZE,
    DEFAULT_RETRY_AFTER_SECONDS,
    PLAYLIST_TRACKS_PAGE_SIZE,
    PLAYLIST_WRITE_LIMIT,
    REQUEST_TIMEOUT_SECONDS,
    SPOTIFY_API_BASE,
    USER_PLAYLISTS_PAGE_SIZE,
)
from autosort.core import (
    AuthError,
    RateLimitExhausted,
    RequestTimeoutError,
    UnsafeWriteError,
    UpstreamError,
)

from .auth import spotify_headers
from .tokens import TokenManager

logger = logging.getLogger(__name__)

PLAYLIST_TRACK_FIELDS = (
    "items(track(id,name,artists(name),album(name,release_date),"
    "disc_number,track_number,duration_ms,popularity,is_local)),total"
)


def _retry_after_seconds(response: requests.Response) -> float:
    value = response.headers.get("Retry-After")
    try:
        seconds = float(value) if value is not None else DEFAULT_RETRY_AFTER_SECONDS
    except ValueError:
        seconds = DEFAULT_RETRY_AFTER_SECONDS
    return max(0.0, seconds)


class SpotifyClient:
    """Spotify Web API client bound to a single principal."""

    def __init__(
        self,
        principal_id: str,
        token_manager: TokenManager,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        api_base: str = SPOTIFY_API_BASE,
    ):
        self.principal_id = principal_id
        self.tokens = token_manager
        self.session = session or requests.Session()
        self.timeout = timeout
        self._sleep = sleep
        self.api_base = api_base.rstrip("/")

    # ---------- transport ----------

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith("http://") or endpoint.startswith("https://"):
            return endpoint
        return f"{self.api_base}/{endpoint.lstrip('/')}"

    def _send(
        self,
        method: str,
        endpoint: str,
        token: str,
        params: Optional[Dict[str, Any]],
        body: Optional[Any],
    ) -> requests.Response:
        try:
            return self.session.request(
                method,
                self._url(endpoint),
                headers=spotify_headers(token),
                params=params,
                json=body,
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise RequestTimeoutError(
                f"Request timeout after {self.timeout:g}s: {method} {endpoint.split('?')[0]}"
            ) from exc
        except requests.RequestException as exc:
            logger.warning("Spotify request failed (%s)", type(exc).__name__)
            raise UpstreamError() from exc

    @staticmethod
    def _parse(response: requests.Response) -> Dict[str, Any]:
        status = response.status_code
        if status == 401:
            raise AuthError("Spotify rejected the access token")
        if status == 429:
            raise RateLimitExhausted("Rate limit exceeded. Retry failed: 429")
        if status < 200 or status >= 300:
            # The body is deliberately not included in the error.
            raise UpstreamError(status)
        if status == 204 or not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(status) from exc
        return data if isinstance(data, dict) else {"items": data}

    def call(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Any] = None,
    ) -> Dict[str, Any]:
        token = self.tokens.get_access_token(self.principal_id)
        response = self._send(method, endpoint, token, params, body)

        if response.status_code == 401:
            logger.info("Spotify returned 401; refreshing token and retrying once")
            token = self.tokens.force_refresh(self.principal_id, stale_token=token)
            response = self._send(method, endpoint, token, params, body)
            if response.status_code == 401:
                raise AuthError("Token expired and refresh failed. Please re-authenticate.")

        if response.status_code == 429:
            delay = _retry_after_seconds(response)
            logger.warning("Spotify rate limit hit; retrying once in %.1fs", delay)
            self._sleep(delay)
            response = self._send(method, endpoint, token, params, body)

        return self._parse(response)

    # ---------- read endpoints ----------

    def get_current_user(self) -> Dict[str, Any]:
        return self.call("GET", "/me")

    def get_user_playlists_page(
        self, limit: int = USER_PLAYLISTS_PAGE_SIZE, offset: int = 0
    ) -> Dict[str, Any]:
        return self.call("GET", "/me/playlists", params={"limit": limit, "offset": offset})

    def get_playlist(self, playlist_id: str) -> Dict[str, Any]:
        return self.call("GET", f"/playlists/{playlist_id}")

    def get_playlist_track_count(self, playlist_id: str) -> int:
        data = self.call(
            "GET", f"/playlists/{playlist_id}", params={"fields": "tracks(total)"}
        )
        tracks = data.get("tracks") or {}
        return int(tracks.get("total", 0))

    def get_playlist_tracks_page(
        self,
        playlist_id: str,
        limit: int = PLAYLIST_TRACKS_PAGE_SIZE,
        offset: int = 0,
    ) -> Dict[str, Any]:
        return self.call(
            "GET",
            f"/playlists/{playlist_id}/tracks",
            params={"limit": limit, "offset": offset, "fields": PLAYLIST_TRACK_FIELDS},
        )

    def get_audio_features(self, track_ids: List[str]) -> List[Dict[str, Any]]:
        """Audio features for the given ids, batched; null entries are dropped."""
        features: List[Dict[str, Any]] = []
        for i in range(0, len(track_ids), AUDIO_FEATURES_BATCH_SIZE):
            chunk = track_ids[i : i + AUDIO_FEATURES_BATCH_SIZE]
            data = self.call("GET", "/audio-features", params={"ids": ",".join(chunk)})
            features.extend(f for f in data.get("audio_features") or [] if f)
        return features

    # ---------- write endpoints ----------

    def set_playlist_tracks(self, playlist_id: str, uris: List[str]) -> Dict[str, Any]:
        """
        Replace the playlist contents with `uris` (PUT, replace semantics).

        An empty list clears the playlist; only SafePlaylistWriter is expected
        to do that, as an intermediate step of a chunked rewrite.
        """
        if len(uris) > PLAYLIST_WRITE_LIMIT:
            raise UnsafeWriteError(
                f"Cannot set more than {PLAYLIST_WRITE_LIMIT} tracks in one call"
            )
        return self.call("PUT", f"/playlists/{playlist_id}/tracks", body={"uris": uris})

    def add_tracks(self, playlist_id: str, uris: List[str]) -> Dict[str, Any]:
        """Append `uris` to the end of the playlist (POST, append semantics)."""
        if not uris:
            return {}
        if len(uris) > PLAYLIST_WRITE_LIMIT:
            raise UnsafeWriteError(
                f"Cannot add more than {PLAYLIST_WRITE_LIMIT} tracks in one call"
            )
        return self.call("POST", f"/playlists/{playlist_id}/tracks", body={"uris": uris})
