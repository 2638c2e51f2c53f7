import pytest

from autosort.core import PlaylistSnapshot, UnsafeWriteError
from autosort.pipeline import plan_sort, sort_playlist_tracks, sort_tracks
from autosort.spotify import fetch_playlist_snapshot

from fakes import make_track, playlist_id


def _unsorted_tracks(n: int):
    # Oldest release first, i.e. the reverse of the canonical order.
    return [
        make_track(f"t{i:03d}", album=f"Album {i:03d}", release_date=f"{1900 + i}-01-01")
        for i in range(n)
    ]


def test_already_sorted_playlist_is_not_written(client, spotify) -> None:
    pid = playlist_id(1)
    spotify.add_playlist(pid, sort_tracks(_unsorted_tracks(4)))

    result = sort_playlist_tracks(client, pid)

    assert result.tracks_sorted == 4
    assert result.written is False
    assert spotify.writes == []


def test_second_run_performs_zero_writes(client, spotify) -> None:
    pid = playlist_id(2)
    spotify.add_playlist(pid, _unsorted_tracks(120))

    first = sort_playlist_tracks(client, pid)
    writes_after_first = len(spotify.writes)
    second = sort_playlist_tracks(client, pid)

    assert first.written is True
    assert second.written is False
    assert len(spotify.writes) == writes_after_first
    assert second.tracks_sorted == first.tracks_sorted == 120


def test_sorted_then_refetched_matches_comparator_output(client, spotify) -> None:
    pid = playlist_id(3)
    tracks = _unsorted_tracks(37)
    spotify.add_playlist(pid, tracks)

    sort_playlist_tracks(client, pid)
    snapshot = fetch_playlist_snapshot(client, pid)

    assert snapshot.track_ids == [t.id for t in sort_tracks(tracks)]
    assert len(snapshot.tracks) == len(tracks)


def test_empty_playlist_reports_zero_without_writing(client, spotify) -> None:
    pid = playlist_id(4)
    spotify.add_playlist(pid, [], extra_items=[{"track": None}])

    result = sort_playlist_tracks(client, pid)

    assert result.tracks_sorted == 0
    assert spotify.writes == []


def test_removed_tracks_are_dropped_from_the_rewrite(client, spotify) -> None:
    pid = playlist_id(5)
    tracks = _unsorted_tracks(3)
    spotify.add_playlist(pid, tracks, extra_items=[{"track": None}])

    result = sort_playlist_tracks(client, pid)

    assert result.tracks_sorted == 3
    assert spotify.track_ids(pid) == [t.id for t in sort_tracks(tracks)]


def test_local_files_block_a_rewrite(client, spotify) -> None:
    pid = playlist_id(6)
    local_item = {"track": {"id": None, "name": "demo.mp3", "is_local": True}}
    spotify.add_playlist(pid, _unsorted_tracks(3), extra_items=[local_item])

    with pytest.raises(UnsafeWriteError):
        sort_playlist_tracks(client, pid)

    assert spotify.writes == []


def test_plan_sort_detects_order_difference() -> None:
    tracks = _unsorted_tracks(3)
    unsorted = PlaylistSnapshot(playlist_id(7), tracks, total=3)
    already = PlaylistSnapshot(playlist_id(7), sort_tracks(tracks), total=3)

    assert plan_sort(unsorted).needs_write is True
    assert plan_sort(already).needs_write is False
    assert plan_sort(unsorted).target_uris[0] == "spotify:track:t002"
