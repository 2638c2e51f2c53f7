"""Public façade for the autosort.spotify package.

This module exposes the Spotify Web API integration: token refresh and the
single-flight TokenManager, the resilient SpotifyClient, paging helpers and
playlist fetchers. Callers should import these symbols from this façade
instead of the internal auth, tokens, client or playlists modules.
"""

from .auth import (
    credential_from_token_response,
    refresh_access_token,
    spotify_headers,
)
from .client import SpotifyClient
from .pagination import Page, PageCursor, fetch_all, page_from_response
from .playlists import (
    fetch_playlist_snapshot,
    get_all_user_playlists,
    is_owned_by,
    iter_playlist_items,
    track_from_item,
)
from .tokens import RefreshLock, RefreshLockTable, TokenManager

__all__ = [
    "refresh_access_token",
    "credential_from_token_response",
    "spotify_headers",
    "RefreshLock",
    "RefreshLockTable",
    "TokenManager",
    "SpotifyClient",
    "Page",
    "PageCursor",
    "fetch_all",
    "page_from_response",
    "track_from_item",
    "get_all_user_playlists",
    "iter_playlist_items",
    "fetch_playlist_snapshot",
    "is_owned_by",
]
