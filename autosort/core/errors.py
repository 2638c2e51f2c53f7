"""Error taxonomy shared by the Spotify client, the sort pipeline and the API.

Every error carries a `public_message` that is safe to show to an end user:
it never contains token values, raw upstream bodies or stack details. The
exception's own `str()` may carry a little more context for server logs, but
is still free of secrets.
"""

from typing import Optional


class AutoSortError(Exception):
    public_message = "An error occurred. Please try again later."
    # True once a destructive write reached the playlist before the failure.
    playlist_modified = False

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)


class AuthError(AutoSortError):
    """Credential invalid/expired and could not be refreshed."""

    public_message = "Spotify authorization expired. Please re-authenticate."


class RateLimitExhausted(AutoSortError):
    """Spotify still answered 429 after the single backoff retry."""

    public_message = "Spotify rate limit exceeded. Please try again later."


class RequestTimeoutError(AutoSortError, TimeoutError):
    """A Spotify call exceeded its time limit."""

    public_message = "Spotify did not respond in time."


class IntegrityError(AutoSortError):
    """Post-write verification failed: tracks may have been lost."""

    public_message = "Playlist verification failed after writing."
    playlist_modified = True

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
    ):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class UpstreamError(AutoSortError):
    """Any other non-2xx answer from Spotify."""

    public_message = "Spotify request failed."

    def __init__(self, status_code: Optional[int] = None):
        if status_code is None:
            message = "Spotify API request failed"
        else:
            message = f"Spotify API error: {status_code}"
        super().__init__(message)
        self.status_code = status_code


class UnsafeWriteError(AutoSortError, ValueError):
    """A playlist write was refused before touching the network."""

    public_message = "Refusing to write playlist: the update is not safe."


class NotFoundError(AutoSortError):
    public_message = "Not found."


class PermissionDeniedError(AutoSortError):
    public_message = "You do not have permission to modify this playlist."


class InvalidPlaylistIdError(AutoSortError, ValueError):
    public_message = "Invalid playlist ID format: must be 22 alphanumeric characters."
