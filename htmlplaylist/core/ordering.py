"""
Ordering for the playlist model.

- Artists and albums: ascending by plain string comparison (code points).
  Sentinel names such as "Unknown Artist" are not special-cased.
- Tracks: numbered tracks first, ascending; unnumbered tracks after them.
  Ties keep extraction order (list.sort is stable).
"""

from __future__ import annotations

from htmlplaylist.core.playlist import PlaylistModel, TrackRecord


def track_sort_key(track: TrackRecord) -> tuple[bool, int]:
    """Sort key putting numbered tracks first, ascending by number."""
    if track.track_number is None:
        return (True, 0)
    return (False, track.track_number)


def sort_playlist(model: PlaylistModel) -> None:
    """Reorder `model` in place: artists, then albums per artist, then tracks per album."""
    model.artists = {name: model.artists[name] for name in sorted(model.artists)}

    for artist in model.artists.values():
        artist.albums = {name: artist.albums[name] for name in sorted(artist.albums)}
        for album in artist.albums.values():
            album.tracks.sort(key=track_sort_key)
