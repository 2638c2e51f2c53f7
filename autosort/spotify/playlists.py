from typing import Any, Dict, List, Optional

from autosort.config import PLAYLIST_TRACKS_PAGE_SIZE, USER_PLAYLISTS_PAGE_SIZE
from autosort.core import Album, PlaylistSnapshot, Track, log_info

from .client import SpotifyClient
from .pagination import PageCursor, fetch_all, page_from_response


def track_from_item(item: Dict[str, Any]) -> Optional[Track]:
    """
    Build a Track from a playlist item.

    Returns None for items whose track is null (removed/unavailable) and for
    local files, which have no Spotify id and cannot be written back by URI.
    """
    t = item.get("track") if isinstance(item, dict) else None
    if not t or not t.get("id") or t.get("is_local"):
        return None

    album = t.get("album") or {}
    return Track(
        id=t["id"],
        name=t.get("name") or "",
        artists=[a.get("name", "") for a in t.get("artists") or [] if a],
        album=Album(
            name=album.get("name") or "",
            release_date=album.get("release_date"),
        ),
        disc_number=int(t.get("disc_number") or 0),
        track_number=int(t.get("track_number") or 0),
        duration_ms=int(t.get("duration_ms") or 0),
        popularity=int(t.get("popularity") or 0),
    )


def get_all_user_playlists(client: SpotifyClient) -> List[Dict]:
    """All playlists of the principal; pages after the first are fetched concurrently."""

    def _fetch(limit: int, offset: int):
        data = client.get_user_playlists_page(limit=limit, offset=offset)
        return page_from_response(data, offset, limit)

    playlists = fetch_all(_fetch, USER_PLAYLISTS_PAGE_SIZE, label="playlists")
    log_info(f"{len(playlists)} playlists found.")
    return playlists


def iter_playlist_items(client: SpotifyClient, playlist_id: str) -> PageCursor:
    """Raw playlist items (null tracks included), one page per request."""

    def _fetch(limit: int, offset: int):
        data = client.get_playlist_tracks_page(playlist_id, limit=limit, offset=offset)
        return page_from_response(data, offset, limit)

    return PageCursor(_fetch, PLAYLIST_TRACKS_PAGE_SIZE)


def fetch_playlist_snapshot(client: SpotifyClient, playlist_id: str) -> PlaylistSnapshot:
    total = 0
    unwritable = 0
    tracks: List[Track] = []
    for page in iter_playlist_items(client, playlist_id).pages():
        total = page.total
        for item in page.items:
            track = track_from_item(item)
            if track is not None:
                tracks.append(track)
            elif isinstance(item, dict) and item.get("track"):
                unwritable += 1
    return PlaylistSnapshot(
        playlist_id=playlist_id,
        tracks=tracks,
        total=total,
        unwritable=unwritable,
    )


def is_owned_by(playlist: Dict[str, Any], principal_id: str) -> bool:
    owner = playlist.get("owner") or {}
    return owner.get("id") == principal_id
