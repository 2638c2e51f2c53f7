from autosort.core import SortStatus
from autosort.pipeline import BatchOrchestrator, run_scheduled_sort

from fakes import FakeResponse, make_track, playlist_id, valid_credential


def _unsorted(prefix: str, n: int = 3):
    return [
        make_track(f"{prefix}{i}", album="Album", release_date=f"{2000 + i}")
        for i in range(n)
    ]


def _register(service, spotify, principal_id, pid, tracks, *, name, enabled=True):
    spotify.add_playlist(pid, tracks, name=name, owner_id=principal_id)
    service.preferences.upsert_playlist(
        principal_id, pid, name, auto_sort_enabled=enabled
    )


def test_one_failing_playlist_does_not_stop_the_run(service, spotify) -> None:
    service.preferences.set_principal_auto_sort("alice", True)
    healthy_a, broken, healthy_b = playlist_id(1), playlist_id(2), playlist_id(3)
    _register(service, spotify, "alice", healthy_a, _unsorted("a"), name="Morning")
    _register(service, spotify, "alice", broken, _unsorted("b"), name="Broken")
    _register(service, spotify, "alice", healthy_b, _unsorted("c"), name="Evening")
    spotify.script("GET", f"/playlists/{broken}/tracks", FakeResponse(500))

    summary = BatchOrchestrator(service, playlist_delay=0).run()

    assert summary.principals_processed == 1
    assert summary.playlists_sorted == 2
    assert summary.playlists_skipped == 0
    assert summary.errors == ["Playlist Broken: Operation failed"]

    prefs = {p.playlist_id: p for p in service.preferences.list_playlists("alice")}
    assert prefs[healthy_a].last_sorted_at is not None
    assert prefs[healthy_b].last_sorted_at is not None
    assert prefs[broken].last_sorted_at is None

    logs = service.sort_logs("alice")
    failed = [o for o in logs if o.status is SortStatus.FAILED]
    assert len(failed) == 1
    assert failed[0].playlist_id == broken
    assert failed[0].error_message == "Operation failed"
    assert sum(o.status is SortStatus.SUCCESS for o in logs) == 2


def test_disabled_playlists_are_skipped_without_calls(service, spotify) -> None:
    service.preferences.set_principal_auto_sort("alice", True)
    on, off = playlist_id(1), playlist_id(2)
    _register(service, spotify, "alice", on, _unsorted("a"), name="On")
    _register(service, spotify, "alice", off, _unsorted("b"), name="Off", enabled=False)

    summary = run_scheduled_sort(service)

    assert summary.playlists_sorted == 1
    assert summary.playlists_skipped == 1
    assert not any(off in c["path"] for c in spotify.calls)


def test_empty_playlists_count_as_skipped(service, spotify) -> None:
    service.preferences.set_principal_auto_sort("alice", True)
    _register(service, spotify, "alice", playlist_id(1), [], name="Empty")

    summary = run_scheduled_sort(service)

    assert summary.playlists_sorted == 0
    assert summary.playlists_skipped == 1
    assert summary.errors == []


def test_rerun_is_idempotent(service, spotify) -> None:
    service.preferences.set_principal_auto_sort("alice", True)
    _register(service, spotify, "alice", playlist_id(1), _unsorted("a"), name="One")

    first = run_scheduled_sort(service)
    writes = len(spotify.writes)
    second = run_scheduled_sort(service)

    assert first.playlists_sorted == second.playlists_sorted == 1
    assert len(spotify.writes) == writes


def test_principal_failure_is_recorded_and_others_continue(service, spotify) -> None:
    # "ghost" has preferences but no stored credential.
    service.preferences.set_principal_auto_sort("ghost", True)
    service.preferences.set_principal_auto_sort("bob", True)
    service.credentials.put(valid_credential("bob"))
    _register(service, spotify, "ghost", playlist_id(1), _unsorted("g"), name="Ghost")
    _register(service, spotify, "bob", playlist_id(2), _unsorted("b"), name="Bob's")

    summary = run_scheduled_sort(service)

    assert summary.principals_processed == 2
    assert summary.playlists_sorted == 1
    assert summary.errors == ["User processing failed"]

    ghost_logs = service.sort_logs("ghost")
    assert len(ghost_logs) == 1
    assert ghost_logs[0].status is SortStatus.FAILED
    assert ghost_logs[0].playlist_id is None


def test_principals_with_auto_sort_off_are_not_processed(service, spotify) -> None:
    service.preferences.set_principal_auto_sort("alice", False)
    _register(service, spotify, "alice", playlist_id(1), _unsorted("a"), name="One")

    summary = run_scheduled_sort(service)

    assert summary.principals_processed == 0
    assert spotify.calls == []


def test_summary_serializes_for_the_api(service) -> None:
    summary = run_scheduled_sort(service)

    data = summary.to_dict()
    assert set(data) == {
        "principals_processed",
        "playlists_sorted",
        "playlists_skipped",
        "errors",
        "duration_seconds",
    }


def test_bookkeeping_failure_after_a_sort_does_not_stop_the_run(
    service, spotify, monkeypatch
) -> None:
    service.preferences.set_principal_auto_sort("alice", True)
    pids = [playlist_id(1), playlist_id(2), playlist_id(3)]
    for pid, name in zip(pids, ["Morning", "Noon", "Evening"]):
        _register(service, spotify, "alice", pid, _unsorted(name[0]), name=name)

    original = service.preferences.mark_sorted

    def flaky_mark_sorted(principal_id, pid, when=None):
        if pid == pids[0]:
            raise OSError("disk full")
        return original(principal_id, pid, when)

    monkeypatch.setattr(service.preferences, "mark_sorted", flaky_mark_sorted)

    summary = BatchOrchestrator(service, playlist_delay=0).run()

    assert summary.playlists_sorted == 3
    assert summary.errors == ["Playlist Morning: Sort result not recorded"]
    rewritten = {c["path"].split("/")[2] for c in spotify.writes}
    assert rewritten == set(pids)
    logs = service.sort_logs("alice")
    assert [o.status for o in logs] == [SortStatus.SUCCESS] * 3


def test_audit_failure_for_a_failed_playlist_does_not_stop_the_run(
    service, spotify, monkeypatch
) -> None:
    service.preferences.set_principal_auto_sort("alice", True)
    broken, healthy = playlist_id(1), playlist_id(2)
    _register(service, spotify, "alice", broken, _unsorted("b"), name="Broken")
    _register(service, spotify, "alice", healthy, _unsorted("h"), name="Healthy")
    spotify.script("GET", f"/playlists/{broken}/tracks", FakeResponse(500))

    original = service.audit.append

    def flaky_append(outcome):
        if outcome.status is SortStatus.FAILED:
            raise OSError("disk full")
        return original(outcome)

    monkeypatch.setattr(service.audit, "append", flaky_append)

    summary = BatchOrchestrator(service, playlist_delay=0).run()

    assert summary.playlists_sorted == 1
    assert summary.errors == ["Playlist Broken: Operation failed"]
    assert service.preferences.get_playlist("alice", healthy).last_sorted_at is not None


def test_failed_append_after_clearing_is_recorded_as_partial(service, spotify) -> None:
    service.preferences.set_principal_auto_sort("alice", True)
    pid = playlist_id(1)
    _register(service, spotify, "alice", pid, _unsorted("x", 150), name="Big")
    spotify.script("POST", f"/playlists/{pid}/tracks", FakeResponse(201), FakeResponse(500))

    summary = BatchOrchestrator(service, playlist_delay=0).run()

    assert summary.playlists_sorted == 0
    assert summary.errors == ["Playlist Big: Operation failed"]
    [log] = service.sort_logs("alice")
    assert log.status is SortStatus.PARTIAL
    assert log.error_message == "Operation failed"
