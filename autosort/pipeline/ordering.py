"""Canonical track order for sorted playlists.

Priority:
  1. album release date, newest first (YYYY and YYYY-MM are read as the
     first day of that period; missing dates count as the epoch, so undated
     tracks end up last)
  2. album name, ascending (keeps an album's tracks together on date ties)
  3. disc number, ascending
  4. track number, ascending
  5. track title, ascending

The order is expressed as a sort key rather than a pairwise comparator, so
it is total by construction. The track id is the final tiebreak, which makes
the result independent of the input order.
"""

from datetime import date
from functools import lru_cache
from typing import Iterable, List, Optional, Tuple
import unicodedata

from autosort.core import Track

EPOCH = date(1970, 1, 1)


def parse_release_date(value: Optional[str]) -> date:
    if not value:
        return EPOCH

    parts = str(value).strip().split("-")
    try:
        year = int(parts[0])
        month = int(parts[1]) if len(parts) > 1 else 1
        day = int(parts[2]) if len(parts) > 2 else 1
        return date(year, month, day)
    except (ValueError, IndexError):
        return EPOCH


@lru_cache(maxsize=4096)
def collation_key(text: str) -> Tuple[str, str]:
    """
    Locale-insensitive approximation of a "natural" string comparison.

    Accents are stripped and case is folded so that "Émile" sorts next to
    "emile"; the raw string breaks remaining ties.
    """
    text = text or ""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return base.casefold(), text


def track_sort_key(track: Track):
    released = parse_release_date(track.album.release_date)
    return (
        -released.toordinal(),
        collation_key(track.album.name),
        track.disc_number,
        track.track_number,
        collation_key(track.name),
        track.id,
    )


def compare_tracks(a: Track, b: Track) -> int:
    key_a, key_b = track_sort_key(a), track_sort_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0


def sort_tracks(tracks: Iterable[Track]) -> List[Track]:
    return sorted(tracks, key=track_sort_key)
