from fastapi import APIRouter, Depends, Query

from autosort.config import SORT_LOG_DEFAULT_LIMIT
from autosort.pipeline import AutoSortService, sync_playlist_preferences

from .dependencies import get_principal_id, get_service, settings_rate_limit
from .schemas import (
    AutoSortSettingsRequest,
    PlaylistSettingsResponse,
    PlaylistSyncResponse,
    SortLogEntry,
    SortLogListResponse,
    UserSettingsResponse,
)

router = APIRouter()


@router.get("/settings", response_model=UserSettingsResponse)
def get_user_settings(
    principal_id: str = Depends(get_principal_id),
    service: AutoSortService = Depends(get_service),
) -> UserSettingsResponse:
    pref = service.principal_settings(principal_id)
    return UserSettingsResponse(auto_sort_enabled=pref.auto_sort_enabled)


@router.patch(
    "/settings",
    response_model=UserSettingsResponse,
    dependencies=[Depends(settings_rate_limit)],
)
def update_user_settings(
    body: AutoSortSettingsRequest,
    principal_id: str = Depends(get_principal_id),
    service: AutoSortService = Depends(get_service),
) -> UserSettingsResponse:
    pref = service.set_principal_auto_sort(principal_id, body.auto_sort_enabled)
    return UserSettingsResponse(auto_sort_enabled=pref.auto_sort_enabled)


@router.get("/sort-logs", response_model=SortLogListResponse)
def list_sort_logs(
    limit: int = Query(default=SORT_LOG_DEFAULT_LIMIT, ge=1, le=SORT_LOG_DEFAULT_LIMIT),
    principal_id: str = Depends(get_principal_id),
    service: AutoSortService = Depends(get_service),
) -> SortLogListResponse:
    """Most recent sort attempts for the caller, newest first."""
    outcomes = service.sort_logs(principal_id, limit=limit)
    return SortLogListResponse(
        logs=[
            SortLogEntry(
                playlist_id=o.playlist_id,
                status=o.status.value,
                tracks_sorted=o.tracks_sorted,
                error_message=o.error_message,
                sorted_at=o.sorted_at,
            )
            for o in outcomes
        ]
    )


@router.post(
    "/playlists/sync",
    response_model=PlaylistSyncResponse,
    dependencies=[Depends(settings_rate_limit)],
)
def sync_playlists(
    principal_id: str = Depends(get_principal_id),
    service: AutoSortService = Depends(get_service),
) -> PlaylistSyncResponse:
    synced = sync_playlist_preferences(service, principal_id)
    return PlaylistSyncResponse(
        playlists=[
            PlaylistSettingsResponse(
                playlist_id=p.playlist_id,
                name=p.name,
                auto_sort_enabled=p.auto_sort_enabled,
                last_sorted_at=p.last_sorted_at,
            )
            for p in synced
        ]
    )
