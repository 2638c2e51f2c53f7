from datetime import datetime, timezone
import threading
from typing import Any, Dict, List

from autosort.config import SORT_LOG_DEFAULT_LIMIT, SORT_LOG_FILE
from autosort.core import SortOutcome, SortStatus, read_json, write_json


def _serialize_outcome(outcome: SortOutcome) -> Dict[str, Any]:
    return {
        "principal_id": outcome.principal_id,
        "playlist_id": outcome.playlist_id,
        "status": outcome.status.value,
        "tracks_sorted": outcome.tracks_sorted,
        "error_message": outcome.error_message,
        "sorted_at": outcome.sorted_at.isoformat(),
    }


def _deserialize_outcome(data: Dict[str, Any]) -> SortOutcome:
    sorted_at = datetime.fromisoformat(data["sorted_at"])
    if sorted_at.tzinfo is None:
        sorted_at = sorted_at.replace(tzinfo=timezone.utc)
    return SortOutcome(
        principal_id=data["principal_id"],
        playlist_id=data.get("playlist_id"),
        status=SortStatus(data["status"]),
        tracks_sorted=int(data.get("tracks_sorted") or 0),
        error_message=data.get("error_message"),
        sorted_at=sorted_at,
    )


class AuditStore:
    """Append-only log of SortOutcome records, stored as a JSON list."""

    def __init__(self, path: str = SORT_LOG_FILE):
        self.path = path
        self._lock = threading.Lock()

    def _load_raw(self) -> List[Any]:
        raw = read_json(self.path, default=[])
        return raw if isinstance(raw, list) else []

    def append(self, outcome: SortOutcome) -> None:
        with self._lock:
            raw = self._load_raw()
            raw.append(_serialize_outcome(outcome))
            write_json(self.path, raw)

    def list_for_principal(
        self, principal_id: str, limit: int = SORT_LOG_DEFAULT_LIMIT
    ) -> List[SortOutcome]:
        """Newest first, at most `limit` entries. Malformed entries are skipped."""
        with self._lock:
            raw = self._load_raw()

        outcomes: List[SortOutcome] = []
        for item in raw:
            if not isinstance(item, dict) or item.get("principal_id") != principal_id:
                continue
            try:
                outcomes.append(_deserialize_outcome(item))
            except (KeyError, TypeError, ValueError):
                continue

        outcomes.sort(key=lambda o: o.sorted_at, reverse=True)
        return outcomes[:limit]


__all__ = ["AuditStore"]
