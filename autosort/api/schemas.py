from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str


class SortResponse(BaseModel):
    tracks_sorted: int


class AutoSortSettingsRequest(BaseModel):
    auto_sort_enabled: bool


class UserSettingsResponse(BaseModel):
    auto_sort_enabled: bool


class PlaylistSettingsResponse(BaseModel):
    playlist_id: str
    name: str
    auto_sort_enabled: bool
    last_sorted_at: Optional[datetime] = None


class PlaylistSyncResponse(BaseModel):
    playlists: List[PlaylistSettingsResponse]


class SortLogEntry(BaseModel):
    playlist_id: Optional[str] = None
    status: str
    tracks_sorted: int
    error_message: Optional[str] = None
    sorted_at: datetime


class SortLogListResponse(BaseModel):
    logs: List[SortLogEntry]


class RunSummaryResponse(BaseModel):
    principals_processed: int
    playlists_sorted: int
    playlists_skipped: int
    errors: List[str]
    duration_seconds: float
