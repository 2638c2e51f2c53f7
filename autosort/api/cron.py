from fastapi import APIRouter, Depends

from autosort.pipeline import AutoSortService, run_scheduled_sort

from .dependencies import get_service, verify_cron_secret
from .schemas import RunSummaryResponse

router = APIRouter()


@router.get(
    "/sort-playlists",
    response_model=RunSummaryResponse,
    dependencies=[Depends(verify_cron_secret)],
)
def cron_sort_playlists(
    service: AutoSortService = Depends(get_service),
) -> RunSummaryResponse:
    """
    Scheduled entrypoint: one sequential pass over every opted-in principal.

    Always answers 200 with the run summary; per-playlist and per-principal
    failures are reported in `errors`.
    """
    summary = run_scheduled_sort(service)
    return RunSummaryResponse(**summary.to_dict())
