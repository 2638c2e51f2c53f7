import re
from typing import Optional

from .errors import AutoSortError, InvalidPlaylistIdError

GENERIC_ERROR_MESSAGE = "Operation failed"

_SPOTIFY_ID_RE = re.compile(r"^[a-zA-Z0-9]{22}$")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")
_SENSITIVE_WORDS = ("token", "password", "secret", "key", "database", "connection")


def sanitize_text(text: Optional[str]) -> str:
    """Strip control characters and surrounding whitespace."""
    if not text or not isinstance(text, str):
        return ""
    return _CONTROL_CHARS_RE.sub("", text).strip()


def sanitize_error(error: BaseException) -> str:
    """
    Turn any exception into a message that is safe to return to a user.

    Known errors expose their fixed public message. Anything else collapses
    to a generic string, since library exceptions may quote URLs, headers or
    response bodies.
    """
    if isinstance(error, AutoSortError):
        return error.public_message

    message = str(error).lower()
    if any(word in message for word in _SENSITIVE_WORDS):
        return "An internal error occurred. Please try again later."
    return "An error occurred. Please try again later."


def is_valid_spotify_id(value: str) -> bool:
    return isinstance(value, str) and bool(_SPOTIFY_ID_RE.match(value))


def validate_playlist_id(playlist_id: str) -> str:
    """Return the id unchanged or raise InvalidPlaylistIdError."""
    if not is_valid_spotify_id(playlist_id):
        raise InvalidPlaylistIdError()
    return playlist_id
