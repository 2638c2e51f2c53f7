from pathlib import Path

from autosort import config
from autosort.main import main


def _point_stores_at(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(config, "CREDENTIALS_FILE", str(tmp_path / "credentials.json"))
    monkeypatch.setattr(config, "PREFERENCES_FILE", str(tmp_path / "preferences.json"))
    monkeypatch.setattr(config, "SORT_LOG_FILE", str(tmp_path / "sort_log.json"))


def test_main_requires_spotify_app_credentials(tmp_path: Path, monkeypatch) -> None:
    _point_stores_at(tmp_path, monkeypatch)
    monkeypatch.setattr(config, "SPOTIFY_CLIENT_ID", None)

    assert main() == 2


def test_main_runs_one_pass(tmp_path: Path, monkeypatch) -> None:
    _point_stores_at(tmp_path, monkeypatch)
    monkeypatch.setattr(config, "SPOTIFY_CLIENT_ID", "id")
    monkeypatch.setattr(config, "SPOTIFY_CLIENT_SECRET", "secret")

    assert main() == 0
