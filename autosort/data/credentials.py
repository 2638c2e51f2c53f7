from datetime import datetime, timezone
import threading
from typing import Any, Dict, Optional

from autosort.config import CREDENTIALS_FILE
from autosort.core import Credential, log_warning, read_json, write_json


def _serialize_credential(credential: Credential) -> Dict[str, Any]:
    return {
        "principal_id": credential.principal_id,
        "access_token": credential.access_token,
        "refresh_token": credential.refresh_token,
        "expires_at": credential.expires_at.isoformat(),
    }


def _parse_dt(value: str) -> datetime:
    """Parse an ISO datetime and normalize it to UTC-aware."""
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _deserialize_credential(principal_id: str, data: Dict[str, Any]) -> Credential:
    return Credential(
        principal_id=data.get("principal_id", principal_id),
        access_token=data["access_token"],
        refresh_token=data["refresh_token"],
        expires_at=_parse_dt(data["expires_at"]),
    )


class CredentialStore:
    """
    JSON-backed credential store keyed by principal id.

    A single in-process lock serializes read-modify-write cycles; the file
    itself is replaced atomically by write_json.
    """

    def __init__(self, path: str = CREDENTIALS_FILE):
        self.path = path
        self._lock = threading.Lock()

    def _load_raw(self) -> Dict[str, Any]:
        def _on_error(e: Exception) -> None:
            log_warning("Credentials file is corrupted; ignoring it.")

        raw = read_json(self.path, default={}, on_error=_on_error)
        if not isinstance(raw, dict):
            return {}
        return raw

    def get(self, principal_id: str) -> Optional[Credential]:
        with self._lock:
            payload = self._load_raw().get(principal_id)
        if not isinstance(payload, dict):
            return None
        try:
            return _deserialize_credential(principal_id, payload)
        except (KeyError, TypeError, ValueError):
            log_warning("Stored credential is malformed; treating it as missing.")
            return None

    def put(self, credential: Credential) -> None:
        with self._lock:
            raw = self._load_raw()
            raw[credential.principal_id] = _serialize_credential(credential)
            write_json(self.path, raw)


__all__ = ["CredentialStore"]
