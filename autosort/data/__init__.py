"""Public façade for the autosort.data package.

This module exposes the JSON-backed stores used by the sort pipeline: the
credential store, the auto-sort preference store and the append-only audit
store. Callers should use this façade instead of importing from the
internal modules directly.
"""

from .audit import AuditStore
from .credentials import CredentialStore
from .preferences import PreferenceStore

__all__ = [
    "CredentialStore",
    "PreferenceStore",
    "AuditStore",
]
