from fastapi import APIRouter, Depends

from autosort.pipeline import AutoSortService

from .dependencies import get_principal_id, get_service, settings_rate_limit, sort_rate_limit
from .schemas import AutoSortSettingsRequest, PlaylistSettingsResponse, SortResponse

router = APIRouter()


@router.post(
    "/{playlist_id}/sort",
    response_model=SortResponse,
    dependencies=[Depends(sort_rate_limit)],
)
def sort_playlist(
    playlist_id: str,
    principal_id: str = Depends(get_principal_id),
    service: AutoSortService = Depends(get_service),
) -> SortResponse:
    """
    Sort one playlist now: newest release first, albums grouped, track order
    kept within an album. Already-sorted playlists are left untouched.
    """
    result = service.sort_playlist(principal_id, playlist_id)
    return SortResponse(tracks_sorted=result["tracks_sorted"])


@router.patch(
    "/{playlist_id}/settings",
    response_model=PlaylistSettingsResponse,
    dependencies=[Depends(settings_rate_limit)],
)
def update_playlist_settings(
    playlist_id: str,
    body: AutoSortSettingsRequest,
    principal_id: str = Depends(get_principal_id),
    service: AutoSortService = Depends(get_service),
) -> PlaylistSettingsResponse:
    pref = service.set_playlist_auto_sort(principal_id, playlist_id, body.auto_sort_enabled)
    return PlaylistSettingsResponse(
        playlist_id=pref.playlist_id,
        name=pref.name,
        auto_sort_enabled=pref.auto_sort_enabled,
        last_sorted_at=pref.last_sorted_at,
    )
