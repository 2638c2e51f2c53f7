from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


@dataclass
class Credential:
    """
    Access/refresh token pair for one principal.

    expires_at is always a timezone-aware UTC datetime.
    """

    principal_id: str
    access_token: str
    refresh_token: str
    expires_at: datetime

    def is_expired(
        self,
        now: Optional[datetime] = None,
        margin_seconds: int = 300,
    ) -> bool:
        """True once we are inside the safety margin before expiry."""
        current = now or datetime.now(timezone.utc)
        return current >= self.expires_at - timedelta(seconds=margin_seconds)


@dataclass
class Album:
    name: str
    release_date: Optional[str] = None


@dataclass
class Track:
    id: str
    name: str
    artists: List[str]
    album: Album
    disc_number: int = 0
    track_number: int = 0
    duration_ms: int = 0
    popularity: int = 0

    @property
    def uri(self) -> str:
        return f"spotify:track:{self.id}"


@dataclass
class PlaylistSnapshot:
    """
    Current track order of a playlist as stored on Spotify.

    `tracks` only holds playable entries (null/removed items are dropped);
    `total` is the raw item count reported by Spotify. `unwritable` counts
    entries that exist but cannot be re-added by URI (local files).
    """

    playlist_id: str
    tracks: List[Track]
    total: int
    unwritable: int = 0

    @property
    def track_ids(self) -> List[str]:
        return [t.id for t in self.tracks]


@dataclass
class SortDecision:
    playlist_id: str
    target: List[Track]
    needs_write: bool

    @property
    def target_uris(self) -> List[str]:
        return [t.uri for t in self.target]


class SortStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass(frozen=True)
class SortOutcome:
    """Append-only audit record for one (principal, playlist) sort attempt."""

    principal_id: str
    playlist_id: Optional[str]
    status: SortStatus
    tracks_sorted: int = 0
    error_message: Optional[str] = None
    sorted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class PrincipalPreference(BaseModel):
    """Principal-level auto-sort switch."""

    principal_id: str
    auto_sort_enabled: bool = True


class PlaylistPreference(BaseModel):
    """
    Playlist known to the preference store.

    - playlist_id       : Spotify playlist id
    - name              : last known display name
    - auto_sort_enabled : included in scheduled runs when True
    - last_sorted_at    : set after each successful sort (UTC)
    """

    principal_id: str
    playlist_id: str
    name: str
    auto_sort_enabled: bool = True
    last_sorted_at: Optional[datetime] = None
