"""Map the error taxonomy onto HTTP responses.

Only `public_message` ever reaches the response body; the exception's own
text is logged at warning level without request data.
"""

from typing import List, Tuple, Type

from fastapi import Request
from fastapi.responses import JSONResponse

from autosort.core import (
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
    log_warning,
    sanitize_error,
)

# First match wins.
_STATUS_BY_ERROR: List[Tuple[Type[AutoSortError], int]] = [
    (InvalidPlaylistIdError, 400),
    (UnsafeWriteError, 400),
    (AuthError, 401),
    (PermissionDeniedError, 403),
    (NotFoundError, 404),
    (RateLimitExhausted, 429),
    (UpstreamError, 502),
    (RequestTimeoutError, 504),
    (IntegrityError, 500),
]


def status_code_for(error: AutoSortError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return 500


async def autosort_error_handler(request: Request, exc: AutoSortError) -> JSONResponse:
    status_code = status_code_for(exc)
    log_warning(f"{request.method} {request.url.path} failed with {type(exc).__name__}.")
    return JSONResponse(status_code=status_code, content={"detail": sanitize_error(exc)})
