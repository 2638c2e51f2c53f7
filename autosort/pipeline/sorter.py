from dataclasses import dataclass
from typing import Optional

from autosort.core import (
    PlaylistSnapshot,
    SortDecision,
    UnsafeWriteError,
    log_info,
    log_step,
)
from autosort.spotify import SpotifyClient, fetch_playlist_snapshot

from .ordering import sort_tracks
from .replacement import SafePlaylistWriter


@dataclass
class SortResult:
    playlist_id: str
    tracks_sorted: int
    written: bool


def plan_sort(snapshot: PlaylistSnapshot) -> SortDecision:
    """Compute the target order and whether it differs from the current one."""
    target = sort_tracks(snapshot.tracks)
    needs_write = [t.id for t in target] != snapshot.track_ids
    return SortDecision(
        playlist_id=snapshot.playlist_id,
        target=target,
        needs_write=needs_write,
    )


def sort_playlist_tracks(
    client: SpotifyClient,
    playlist_id: str,
    writer: Optional[SafePlaylistWriter] = None,
) -> SortResult:
    """
    Bring one playlist into canonical order.

    Used by both the interactive sort and the scheduled run. A playlist that
    is already in order is left untouched (no write calls at all).
    """
    snapshot = fetch_playlist_snapshot(client, playlist_id)
    if not snapshot.tracks:
        log_info("Playlist is empty or has no valid tracks; nothing to sort.")
        return SortResult(playlist_id=playlist_id, tracks_sorted=0, written=False)

    decision = plan_sort(snapshot)
    count = len(snapshot.tracks)

    if not decision.needs_write:
        log_info(f"Playlist already sorted ({count} tracks); no write needed.")
        return SortResult(playlist_id=playlist_id, tracks_sorted=count, written=False)

    if snapshot.unwritable:
        raise UnsafeWriteError(
            f"Playlist holds {snapshot.unwritable} local or unavailable tracks "
            "that cannot be re-added; refusing to rewrite it."
        )

    log_step(f"Writing new order for {count} tracks")
    writer = writer or SafePlaylistWriter(client)
    writer.replace(playlist_id, decision.target_uris, expected_count=count)
    return SortResult(playlist_id=playlist_id, tracks_sorted=count, written=True)
