from typing import List

from autosort.core import (
    NotFoundError,
    PlaylistPreference,
    log_info,
    log_step,
    sanitize_text,
)
from autosort.spotify import get_all_user_playlists

from .service import AutoSortService


def sync_playlist_preferences(
    service: AutoSortService, principal_id: str
) -> List[PlaylistPreference]:
    """
    Mirror the principal's Spotify playlists into the preference store.

    Names are refreshed; an existing auto_sort_enabled value is kept and new
    playlists start enabled. Playlists that no longer exist on Spotify are
    left in place (their sort attempts will fail and be recorded).
    """
    if service.credentials.get(principal_id) is None:
        raise NotFoundError("Unknown principal")

    log_step("Fetching Spotify playlists for preference sync...")
    client = service.client_for(principal_id)
    playlists = get_all_user_playlists(client)

    synced: List[PlaylistPreference] = []
    for p in playlists:
        if not isinstance(p, dict) or not p.get("id"):
            continue
        synced.append(
            service.preferences.upsert_playlist(
                principal_id,
                p["id"],
                sanitize_text(p.get("name")) or p["id"],
            )
        )

    log_info(f"Preference sync: {len(synced)} playlists stored.")
    return synced
