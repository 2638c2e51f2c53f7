import pytest

from autosort.data import AuditStore, CredentialStore, PreferenceStore
from autosort.pipeline import AutoSortService
from autosort.spotify import SpotifyClient, TokenManager

from fakes import FakeSpotify, RefreshCounter, valid_credential


def _no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def credential_store(tmp_path) -> CredentialStore:
    return CredentialStore(str(tmp_path / "credentials.json"))


@pytest.fixture
def preference_store(tmp_path) -> PreferenceStore:
    return PreferenceStore(str(tmp_path / "preferences.json"))


@pytest.fixture
def audit_store(tmp_path) -> AuditStore:
    return AuditStore(str(tmp_path / "sort_log.json"))


@pytest.fixture
def refresher() -> RefreshCounter:
    return RefreshCounter()


@pytest.fixture
def token_manager(credential_store, refresher) -> TokenManager:
    return TokenManager(credential_store, refresh_fn=refresher)


@pytest.fixture
def spotify() -> FakeSpotify:
    return FakeSpotify(owner_id="alice")


@pytest.fixture
def client(credential_store, token_manager, spotify) -> SpotifyClient:
    credential_store.put(valid_credential("alice"))
    return SpotifyClient("alice", token_manager, session=spotify, sleep=_no_sleep)


@pytest.fixture
def service(
    credential_store, preference_store, audit_store, token_manager, spotify
) -> AutoSortService:
    credential_store.put(valid_credential("alice"))
    return AutoSortService(
        credential_store,
        preference_store,
        audit_store,
        token_manager=token_manager,
        session_factory=lambda: spotify,
        chunk_delay=0,
        sleep=_no_sleep,
    )
