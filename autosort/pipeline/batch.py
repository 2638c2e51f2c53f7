"""Scheduled sort over every opted-in principal and playlist.

The run is one sequential pass:

    principals with auto-sort on
      -> their playlists with auto-sort on (others are counted as skipped)
        -> shared sort operation
          -> SortOutcome recorded

Playlists are handled one at a time with a short pause in between to keep
the aggregate call rate against Spotify low. Any failure is contained at the
level where it happened: a playlist failure is recorded and the loop moves on
to the next playlist, a principal failure is recorded and the loop moves on
to the next principal. Errors surfaced in the summary are generic strings.
"""

from dataclasses import asdict, dataclass, field
import time
from typing import Any, Dict, List

from autosort.config import PLAYLIST_DELAY_SECONDS
from autosort.core import (
    GENERIC_ERROR_MESSAGE,
    log_error,
    log_info,
    log_progress,
    log_section,
    log_success,
    log_warning,
)

from .service import AutoSortService


@dataclass
class RunSummary:
    principals_processed: int = 0
    playlists_sorted: int = 0
    playlists_skipped: int = 0
    errors: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class BatchOrchestrator:
    def __init__(
        self,
        service: AutoSortService,
        *,
        playlist_delay: float = PLAYLIST_DELAY_SECONDS,
    ):
        self.service = service
        self.playlist_delay = playlist_delay

    def run(self) -> RunSummary:
        summary = RunSummary()
        started = time.monotonic()
        log_section("Scheduled playlist sort")

        try:
            principal_ids = self.service.preferences.list_auto_sort_principals()
        except Exception as exc:  # noqa: BLE001
            log_error(f"Could not list principals ({type(exc).__name__}).")
            summary.errors.append(f"Global error: {GENERIC_ERROR_MESSAGE}")
            principal_ids = []

        log_info(f"{len(principal_ids)} principals with auto-sort enabled.")

        for principal_id in principal_ids:
            summary.principals_processed += 1
            try:
                self._run_principal(principal_id, summary)
            except Exception as exc:  # noqa: BLE001
                log_warning(f"Principal processing failed ({type(exc).__name__}).")
                summary.errors.append("User processing failed")
                self.service.record_failure(principal_id, None, GENERIC_ERROR_MESSAGE)

        summary.duration_seconds = round(time.monotonic() - started, 3)
        log_success(
            f"Run finished: {summary.principals_processed} principals, "
            f"{summary.playlists_sorted} sorted, {summary.playlists_skipped} skipped, "
            f"{len(summary.errors)} errors."
        )
        return summary

    def _run_principal(self, principal_id: str, summary: RunSummary) -> None:
        playlists = self.service.preferences.list_playlists(principal_id)
        to_sort = [p for p in playlists if p.auto_sort_enabled]
        summary.playlists_skipped += len(playlists) - len(to_sort)
        if not to_sort:
            return

        # Fail fast on a revoked credential instead of once per playlist.
        self.service.tokens.get_access_token(principal_id)
        client = self.service.client_for(principal_id)

        for index, playlist in enumerate(to_sort):
            if index > 0 and self.playlist_delay > 0:
                self.service.sleep(self.playlist_delay)
            log_progress(index + 1, len(to_sort), prefix="Sorting playlists")

            try:
                result = self.service.sort_with_client(client, playlist.playlist_id)
            except Exception as exc:  # noqa: BLE001
                log_warning(f"Playlist {playlist.name} failed ({type(exc).__name__}).")
                summary.errors.append(f"Playlist {playlist.name}: {GENERIC_ERROR_MESSAGE}")
                self.service.record_failure(
                    principal_id, playlist.playlist_id, GENERIC_ERROR_MESSAGE, cause=exc
                )
                continue

            if result.tracks_sorted == 0:
                summary.playlists_skipped += 1
                continue

            # The playlist is already rewritten; a bookkeeping failure only adds an error.
            summary.playlists_sorted += 1
            if not self.service.record_success(
                principal_id, playlist.playlist_id, result.tracks_sorted
            ):
                summary.errors.append(f"Playlist {playlist.name}: Sort result not recorded")


def run_scheduled_sort(service: AutoSortService) -> RunSummary:
    return BatchOrchestrator(service).run()
