from datetime import datetime, timezone
import threading
from typing import Any, Dict, List, Optional

from autosort.config import PREFERENCES_FILE
from autosort.core import (
    PlaylistPreference,
    PrincipalPreference,
    log_warning,
    read_json,
    write_json,
)


class PreferenceStore:
    """
    Auto-sort switches for principals and their playlists.

    On-disk structure:
      {
        "principals": {"<principal_id>": {...PrincipalPreference}},
        "playlists":  {"<playlist_id>":  {...PlaylistPreference}}
      }
    Malformed entries are skipped on load instead of failing the whole store.
    """

    def __init__(self, path: str = PREFERENCES_FILE):
        self.path = path
        self._lock = threading.Lock()

    # ---------- raw document ----------

    def _load(self) -> Dict[str, Dict[str, Any]]:
        raw = read_json(self.path, default={})
        if not isinstance(raw, dict):
            log_warning("Preferences file has invalid structure; using empty store.")
            raw = {}
        principals = raw.get("principals")
        playlists = raw.get("playlists")
        return {
            "principals": principals if isinstance(principals, dict) else {},
            "playlists": playlists if isinstance(playlists, dict) else {},
        }

    def _save(self, doc: Dict[str, Dict[str, Any]]) -> None:
        write_json(self.path, doc)

    @staticmethod
    def _parse_playlist(item: Any) -> Optional[PlaylistPreference]:
        if not isinstance(item, dict):
            return None
        try:
            return PlaylistPreference(**item)
        except Exception:
            return None

    # ---------- principals ----------

    def set_principal_auto_sort(self, principal_id: str, enabled: bool) -> PrincipalPreference:
        pref = PrincipalPreference(principal_id=principal_id, auto_sort_enabled=enabled)
        with self._lock:
            doc = self._load()
            doc["principals"][principal_id] = pref.model_dump(mode="json")
            self._save(doc)
        return pref

    def get_principal(self, principal_id: str) -> Optional[PrincipalPreference]:
        with self._lock:
            item = self._load()["principals"].get(principal_id)
        if not isinstance(item, dict):
            return None
        try:
            return PrincipalPreference(**item)
        except Exception:
            return None

    def list_auto_sort_principals(self) -> List[str]:
        """Principal ids whose auto-sort preference is enabled."""
        with self._lock:
            principals = self._load()["principals"]
        result: List[str] = []
        for principal_id, item in principals.items():
            if isinstance(item, dict) and item.get("auto_sort_enabled") is True:
                result.append(principal_id)
        return result

    # ---------- playlists ----------

    def get_playlist(self, principal_id: str, playlist_id: str) -> Optional[PlaylistPreference]:
        with self._lock:
            item = self._load()["playlists"].get(playlist_id)
        pref = self._parse_playlist(item)
        if pref is None or pref.principal_id != principal_id:
            return None
        return pref

    def list_playlists(self, principal_id: str) -> List[PlaylistPreference]:
        with self._lock:
            playlists = self._load()["playlists"]
        result: List[PlaylistPreference] = []
        for item in playlists.values():
            pref = self._parse_playlist(item)
            if pref is not None and pref.principal_id == principal_id:
                result.append(pref)
        return result

    def upsert_playlist(
        self,
        principal_id: str,
        playlist_id: str,
        name: str,
        auto_sort_enabled: Optional[bool] = None,
    ) -> PlaylistPreference:
        """
        Create or rename a playlist entry.

        An existing auto_sort_enabled value is preserved unless explicitly
        provided; new playlists default to enabled.
        """
        with self._lock:
            doc = self._load()
            existing = self._parse_playlist(doc["playlists"].get(playlist_id))
            if auto_sort_enabled is None:
                auto_sort_enabled = existing.auto_sort_enabled if existing else True
            pref = PlaylistPreference(
                principal_id=principal_id,
                playlist_id=playlist_id,
                name=name,
                auto_sort_enabled=auto_sort_enabled,
                last_sorted_at=existing.last_sorted_at if existing else None,
            )
            doc["playlists"][playlist_id] = pref.model_dump(mode="json")
            self._save(doc)
        return pref

    def set_playlist_auto_sort(
        self, principal_id: str, playlist_id: str, enabled: bool
    ) -> Optional[PlaylistPreference]:
        return self._update_playlist(principal_id, playlist_id, auto_sort_enabled=enabled)

    def mark_sorted(
        self,
        principal_id: str,
        playlist_id: str,
        when: Optional[datetime] = None,
    ) -> Optional[PlaylistPreference]:
        return self._update_playlist(
            principal_id,
            playlist_id,
            last_sorted_at=when or datetime.now(timezone.utc),
        )

    def _update_playlist(
        self, principal_id: str, playlist_id: str, **changes: Any
    ) -> Optional[PlaylistPreference]:
        with self._lock:
            doc = self._load()
            pref = self._parse_playlist(doc["playlists"].get(playlist_id))
            if pref is None or pref.principal_id != principal_id:
                return None
            pref = pref.model_copy(update=changes)
            doc["playlists"][playlist_id] = pref.model_dump(mode="json")
            self._save(doc)
        return pref


__all__ = ["PreferenceStore"]
