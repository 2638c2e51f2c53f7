"""Keep Spotify playlists in a canonical sort order, on demand and on a schedule."""

__version__ = "0.1.0"
