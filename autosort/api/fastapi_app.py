from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from autosort import __version__, config
from autosort.core import AutoSortError, RateLimiter, configure_logging

from .cron import router as cron_router
from .errors import autosort_error_handler
from .health import router as health_router
from .playlists import router as playlists_router
from .user import router as user_router


def create_app() -> FastAPI:
    configure_logging(config.AUTOSORT_LOG_LEVEL)

    app = FastAPI(
        title="Spotify Auto-Sort API",
        version=__version__,
        description="Keeps Spotify playlists ordered by release date, album and track.",
    )

    # Inbound limiter state belongs to this app instance.
    app.state.sort_limiter = RateLimiter(
        config.SORT_RATE_LIMIT, config.RATE_LIMIT_WINDOW_SECONDS
    )
    app.state.settings_limiter = RateLimiter(
        config.SETTINGS_RATE_LIMIT, config.RATE_LIMIT_WINDOW_SECONDS
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.ALLOWED_ORIGIN],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["Authorization", "Content-Type"],
    )
    app.add_exception_handler(AutoSortError, autosort_error_handler)

    app.include_router(health_router, tags=["health"])
    app.include_router(playlists_router, prefix="/playlists", tags=["playlists"])
    app.include_router(user_router, prefix="/user", tags=["user"])
    app.include_router(cron_router, prefix="/cron", tags=["cron"])
    return app


app = create_app()
