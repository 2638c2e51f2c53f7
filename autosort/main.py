import sys

from autosort import config
from autosort.core import configure_logging, log_error, log_info, log_section, log_warning
from autosort.data import AuditStore, CredentialStore, PreferenceStore
from autosort.pipeline import AutoSortService, run_scheduled_sort


def build_service() -> AutoSortService:
    return AutoSortService(
        CredentialStore(config.CREDENTIALS_FILE),
        PreferenceStore(config.PREFERENCES_FILE),
        AuditStore(config.SORT_LOG_FILE),
    )


def main() -> int:
    """Run one scheduled sort pass from the command line (for cron / systemd timers)."""
    configure_logging(config.AUTOSORT_LOG_LEVEL)

    # 0) Basic config check
    if not (config.SPOTIFY_CLIENT_ID and config.SPOTIFY_CLIENT_SECRET):
        log_error("Please set SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET in the .env file.")
        return 2

    summary = run_scheduled_sort(build_service())

    log_section("Summary")
    log_info(f"Principals processed: {summary.principals_processed}")
    log_info(f"Playlists sorted:     {summary.playlists_sorted}")
    log_info(f"Playlists skipped:    {summary.playlists_skipped}")
    log_info(f"Duration:             {summary.duration_seconds:.1f}s")
    for message in summary.errors:
        log_warning(message)

    return 1 if summary.errors else 0


if __name__ == "__main__":
    sys.exit(main())
