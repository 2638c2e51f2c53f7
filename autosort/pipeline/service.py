"""Service object wiring stores, tokens and Spotify clients together.

AutoSortService owns every piece of cross-request state (the refresh lock
table lives inside its TokenManager) and is the entrypoint for the
interactive sort. The scheduled run (BatchOrchestrator) and the preference
sync reuse the same instance, so both paths share one sort implementation.
"""

import time
from typing import Callable, Dict, List, Optional

import requests

from autosort.config import (
    CHUNK_DELAY_SECONDS,
    PLAYLIST_WRITE_LIMIT,
    REQUEST_TIMEOUT_SECONDS,
    SORT_LOG_DEFAULT_LIMIT,
)
from autosort.core import (
    AutoSortError,
    NotFoundError,
    PermissionDeniedError,
    PlaylistPreference,
    PrincipalPreference,
    SortOutcome,
    SortStatus,
    log_error,
    log_step,
    log_success,
    log_warning,
    sanitize_error,
    validate_playlist_id,
)
from autosort.data import AuditStore, CredentialStore, PreferenceStore
from autosort.spotify import SpotifyClient, TokenManager, is_owned_by

from .replacement import SafePlaylistWriter
from .sorter import SortResult, sort_playlist_tracks


class AutoSortService:
    def __init__(
        self,
        credentials: CredentialStore,
        preferences: PreferenceStore,
        audit: AuditStore,
        *,
        token_manager: Optional[TokenManager] = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        chunk_size: int = PLAYLIST_WRITE_LIMIT,
        chunk_delay: float = CHUNK_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.credentials = credentials
        self.preferences = preferences
        self.audit = audit
        self.tokens = token_manager or TokenManager(credentials)
        self.session_factory = session_factory
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.chunk_delay = chunk_delay
        self.sleep = sleep

    # ---------- wiring ----------

    def client_for(self, principal_id: str) -> SpotifyClient:
        return SpotifyClient(
            principal_id,
            self.tokens,
            session=self.session_factory(),
            timeout=self.timeout,
            sleep=self.sleep,
        )

    def writer_for(self, client: SpotifyClient) -> SafePlaylistWriter:
        return SafePlaylistWriter(
            client,
            chunk_size=self.chunk_size,
            chunk_delay=self.chunk_delay,
            sleep=self.sleep,
        )

    def sort_with_client(self, client: SpotifyClient, playlist_id: str) -> SortResult:
        return sort_playlist_tracks(client, playlist_id, writer=self.writer_for(client))

    # ---------- audit ----------

    # Store failures here are logged and reported through the return value;
    # they never replace the result or error of the sort itself.

    def record_success(self, principal_id: str, playlist_id: str, tracks_sorted: int) -> bool:
        recorded = True
        try:
            self.preferences.mark_sorted(principal_id, playlist_id)
        except Exception as exc:  # noqa: BLE001
            log_error(f"Could not update last sorted time ({type(exc).__name__}).")
            recorded = False

        outcome = SortOutcome(
            principal_id=principal_id,
            playlist_id=playlist_id,
            status=SortStatus.SUCCESS,
            tracks_sorted=tracks_sorted,
        )
        return self._append_outcome(outcome) and recorded

    def record_failure(
        self,
        principal_id: str,
        playlist_id: Optional[str],
        error_message: str,
        *,
        cause: Optional[BaseException] = None,
    ) -> bool:
        """
        Append a failed outcome. It is recorded as partial instead when `cause`
        says the playlist had already been modified (cleared, partly appended
        or left unverified).
        """
        modified = bool(getattr(cause, "playlist_modified", False))
        outcome = SortOutcome(
            principal_id=principal_id,
            playlist_id=playlist_id,
            status=SortStatus.PARTIAL if modified else SortStatus.FAILED,
            error_message=error_message,
        )
        return self._append_outcome(outcome)

    def _append_outcome(self, outcome: SortOutcome) -> bool:
        try:
            self.audit.append(outcome)
        except Exception as exc:  # noqa: BLE001
            log_error(f"Could not record sort outcome ({type(exc).__name__}).")
            return False
        return True

    def sort_logs(
        self, principal_id: str, limit: int = SORT_LOG_DEFAULT_LIMIT
    ) -> List[SortOutcome]:
        return self.audit.list_for_principal(principal_id, limit=limit)

    # ---------- interactive sort ----------

    def sort_playlist(self, principal_id: str, playlist_id: str) -> Dict[str, int]:
        """
        Sort one playlist on behalf of its owner.

        Raises the error taxonomy unchanged; the caller decides how to present
        it. A failed attempt is still recorded in the audit log.
        """
        validate_playlist_id(playlist_id)
        if self.credentials.get(principal_id) is None:
            raise NotFoundError("Unknown principal")

        client = self.client_for(principal_id)

        playlist = client.get_playlist(playlist_id)
        if not is_owned_by(playlist, principal_id):
            raise PermissionDeniedError()

        if self.preferences.get_playlist(principal_id, playlist_id) is None:
            raise NotFoundError("Playlist not found")

        log_step(f"Sorting playlist {playlist_id}")
        try:
            result = self.sort_with_client(client, playlist_id)
        except AutoSortError as exc:
            self.record_failure(principal_id, playlist_id, sanitize_error(exc), cause=exc)
            raise

        if result.tracks_sorted:
            if not self.record_success(principal_id, playlist_id, result.tracks_sorted):
                log_warning("Playlist sorted but the result could not be fully recorded.")
            log_success(f"Playlist sorted ({result.tracks_sorted} tracks).")
        else:
            log_warning("Playlist is empty or has no valid tracks.")
        return {"tracks_sorted": result.tracks_sorted}

    # ---------- preferences ----------

    def principal_settings(self, principal_id: str) -> PrincipalPreference:
        """Stored switch, or disabled for a principal who never opted in."""
        if self.credentials.get(principal_id) is None:
            raise NotFoundError("Unknown principal")
        pref = self.preferences.get_principal(principal_id)
        return pref or PrincipalPreference(principal_id=principal_id, auto_sort_enabled=False)

    def set_principal_auto_sort(self, principal_id: str, enabled: bool) -> PrincipalPreference:
        if self.credentials.get(principal_id) is None:
            raise NotFoundError("Unknown principal")
        return self.preferences.set_principal_auto_sort(principal_id, enabled)

    def set_playlist_auto_sort(
        self, principal_id: str, playlist_id: str, enabled: bool
    ) -> PlaylistPreference:
        validate_playlist_id(playlist_id)
        if self.credentials.get(principal_id) is None:
            raise NotFoundError("Unknown principal")

        playlist = self.client_for(principal_id).get_playlist(playlist_id)
        if not is_owned_by(playlist, principal_id):
            raise PermissionDeniedError()

        pref = self.preferences.set_playlist_auto_sort(principal_id, playlist_id, enabled)
        if pref is None:
            pref = self.preferences.upsert_playlist(
                principal_id,
                playlist_id,
                playlist.get("name") or playlist_id,
                auto_sort_enabled=enabled,
            )
        return pref
