"""Public façade for the autosort.api package.

Exposes the FastAPI application (and its factory) serving the interactive
sort, preference, audit and scheduled-run endpoints.
"""

from .dependencies import get_service
from .errors import status_code_for
from .fastapi_app import app, create_app

__all__ = [
    "app",
    "create_app",
    "get_service",
    "status_code_for",
]
