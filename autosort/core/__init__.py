"""Public façade for the autosort.core package.

This module exposes logging helpers, filesystem utilities, domain models, the
error taxonomy and small stateless helpers (sanitizers, rate limiter) that are
safe to import from other packages. Callers should import these cross-cutting
concerns from this façade instead of the internal submodules.
"""

from .errors import (
    AuthError,
    AutoSortError,
    IntegrityError,
    InvalidPlaylistIdError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExhausted,
    RequestTimeoutError,
    UnsafeWriteError,
    UpstreamError,
)
from .fs_utils import ensure_parent_dir, read_json, write_json
from .logging_config import configure_logging
from .logging_utils import (
    log_error,
    log_info,
    log_progress,
    log_section,
    log_step,
    log_success,
    log_warning,
)
from .models import (
    Album,
    Credential,
    PlaylistPreference,
    PlaylistSnapshot,
    PrincipalPreference,
    SortDecision,
    SortOutcome,
    SortStatus,
    Track,
)
from .rate_limit import RateLimiter, RateLimitResult
from .sanitize import (
    GENERIC_ERROR_MESSAGE,
    is_valid_spotify_id,
    sanitize_error,
    sanitize_text,
    validate_playlist_id,
)

__all__ = [
    "configure_logging",
    "log_section",
    "log_info",
    "log_step",
    "log_success",
    "log_warning",
    "log_error",
    "log_progress",
    "ensure_parent_dir",
    "write_json",
    "read_json",
    "Album",
    "Credential",
    "PlaylistPreference",
    "PlaylistSnapshot",
    "PrincipalPreference",
    "SortDecision",
    "SortOutcome",
    "SortStatus",
    "Track",
    "AutoSortError",
    "AuthError",
    "RateLimitExhausted",
    "RequestTimeoutError",
    "IntegrityError",
    "UpstreamError",
    "UnsafeWriteError",
    "NotFoundError",
    "PermissionDeniedError",
    "InvalidPlaylistIdError",
    "GENERIC_ERROR_MESSAGE",
    "sanitize_error",
    "sanitize_text",
    "is_valid_spotify_id",
    "validate_playlist_id",
    "RateLimiter",
    "RateLimitResult",
]
