"""Safe rewrite of a playlist's track list.

Spotify's "set tracks" call replaces the whole playlist and accepts at most
100 URIs, so a larger playlist can only be reordered by clearing it and
appending the tracks back in chunks. That makes a bad write destructive;
SafePlaylistWriter guards it with checks before and after:

  - an empty target list is refused before any network call
  - the target length must equal the expected count before any network call
  - after writing, the playlist's track count is re-fetched and must equal
    the expected count, otherwise IntegrityError is raised and nothing else
    is written to that playlist
"""

import time
from typing import Callable, List

from autosort.config import CHUNK_DELAY_SECONDS, PLAYLIST_WRITE_LIMIT
from autosort.core import (
    AutoSortError,
    IntegrityError,
    UnsafeWriteError,
    log_error,
    log_step,
)
from autosort.spotify import SpotifyClient


class SafePlaylistWriter:
    def __init__(
        self,
        client: SpotifyClient,
        *,
        chunk_size: int = PLAYLIST_WRITE_LIMIT,
        chunk_delay: float = CHUNK_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.chunk_size = chunk_size
        self.chunk_delay = chunk_delay
        self._sleep = sleep

    def replace(self, playlist_id: str, uris: List[str], expected_count: int) -> int:
        """Rewrite the playlist to exactly `uris`, in order. Returns the verified count."""
        if not uris:
            raise UnsafeWriteError(
                "Cannot replace playlist with an empty track list; "
                "this would delete all tracks."
            )
        if len(uris) != expected_count:
            raise UnsafeWriteError(
                f"Track count mismatch: expected {expected_count} tracks, "
                f"got {len(uris)}. Aborting to prevent data loss."
            )

        if len(uris) <= self.chunk_size:
            self.client.set_playlist_tracks(playlist_id, list(uris))
        else:
            self._clear_and_append(playlist_id, uris)

        self.verify_track_count(playlist_id, expected_count)
        return expected_count

    def _clear_and_append(self, playlist_id: str, uris: List[str]) -> None:
        chunks = [uris[i : i + self.chunk_size] for i in range(0, len(uris), self.chunk_size)]
        log_step(f"Rewriting {len(uris)} tracks in {len(chunks)} chunks")

        # Safe only because every target is appended right after.
        self.client.set_playlist_tracks(playlist_id, [])

        for index, chunk in enumerate(chunks):
            try:
                self.client.add_tracks(playlist_id, chunk)
            except AutoSortError as exc:
                log_error(
                    f"Append failed at chunk {index + 1}/{len(chunks)}; "
                    "playlist is only partially rewritten."
                )
                exc.playlist_modified = True
                raise
            if index < len(chunks) - 1:
                self._sleep(self.chunk_delay)

    def verify_track_count(self, playlist_id: str, expected_count: int) -> None:
        try:
            actual = self.client.get_playlist_track_count(playlist_id)
        except AutoSortError as exc:
            # The write went out but its result cannot be confirmed.
            raise IntegrityError(
                "Could not verify playlist track count after writing",
                expected=expected_count,
            ) from exc

        if actual != expected_count:
            message = (
                f"Track count mismatch after replacement: expected {expected_count}, "
                f"playlist now has {actual}. Tracks may have been lost."
            )
            log_error(message)
            raise IntegrityError(message, expected=expected_count, actual=actual)
