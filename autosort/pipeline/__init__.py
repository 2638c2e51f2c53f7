"""Public façade for the autosort.pipeline package.

This module exposes the sort pipeline: the canonical ordering, the safe
replacement protocol, the shared single-playlist sort, the AutoSortService
used by the interactive path, the scheduled BatchOrchestrator and the
playlist preference sync. Other packages should import pipeline behaviour
from this façade instead of the internal submodules.
"""

from .batch import BatchOrchestrator, RunSummary, run_scheduled_sort
from .ordering import (
    EPOCH,
    collation_key,
    compare_tracks,
    parse_release_date,
    sort_tracks,
    track_sort_key,
)
from .replacement import SafePlaylistWriter
from .service import AutoSortService
from .sorter import SortResult, plan_sort, sort_playlist_tracks
from .sync import sync_playlist_preferences

__all__ = [
    "EPOCH",
    "parse_release_date",
    "collation_key",
    "track_sort_key",
    "compare_tracks",
    "sort_tracks",
    "SafePlaylistWriter",
    "SortResult",
    "plan_sort",
    "sort_playlist_tracks",
    "AutoSortService",
    "BatchOrchestrator",
    "RunSummary",
    "run_scheduled_sort",
    "sync_playlist_preferences",
]
