"""
Playlist model and aggregation.

The model is a two-level grouping, artist -> album -> tracks, built from the
per-file extraction outcomes of a single run.

Design decisions:
- Plain dicts keyed by name; iteration order is insertion order until
  `htmlplaylist.core.ordering.sort_playlist` rebuilds them in sorted order.
- Missing artist/album tags are grouped under literal sentinel names
  (configurable), which sort like any other string.
- The first track seen for an (artist, album) pair decides the album cover.
  Later tracks are never consulted, even when the first one had no picture.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from htmlplaylist.core import ExtractionError
from htmlplaylist.core.artwork import cover_filename
from htmlplaylist.core.scanner import ScanIssue, TrackMetadata

if TYPE_CHECKING:
    from htmlplaylist.core.artwork import CoverMaterializer

logger = logging.getLogger(__name__)

DEFAULT_UNKNOWN_ARTIST = "Unknown Artist"
DEFAULT_UNKNOWN_ALBUM = "Unknown Album"


@dataclass(frozen=True, slots=True)
class TrackRecord:
    """One song as it appears in the playlist."""

    path: Path
    artist: str
    album: str
    title: str | None = None
    track_number: int | None = None


@dataclass(slots=True)
class AlbumEntry:
    artist: str
    name: str
    cover_extension: str | None = None
    tracks: list[TrackRecord] = field(default_factory=list)

    @property
    def cover_filename(self) -> str | None:
        """File name of this album's thumbnail inside the covers directory, if any."""
        if self.cover_extension is None:
            return None
        return cover_filename(self.artist, self.name, self.cover_extension)


@dataclass(slots=True)
class ArtistEntry:
    name: str
    album_names: set[str] = field(default_factory=set)
    albums: dict[str, AlbumEntry] = field(default_factory=dict)

    def get_or_create_album(self, album: str) -> tuple[AlbumEntry, bool]:
        """Return (entry, created) for `album`, creating the entry on first use."""
        entry = self.albums.get(album)
        if entry is not None:
            return entry, False
        entry = AlbumEntry(artist=self.name, name=album)
        self.albums[album] = entry
        self.album_names.add(album)
        return entry, True


@dataclass(slots=True)
class PlaylistModel:
    """Root aggregate: artist name -> ArtistEntry."""

    artists: dict[str, ArtistEntry] = field(default_factory=dict)

    def __len__(self) -> int:
        """Return number of tracks in the model."""
        return sum(len(album.tracks) for album in self.iter_albums())

    def get_or_create_artist(self, artist: str) -> tuple[ArtistEntry, bool]:
        entry = self.artists.get(artist)
        if entry is not None:
            return entry, False
        entry = ArtistEntry(name=artist)
        self.artists[artist] = entry
        return entry, True

    def iter_albums(self) -> Iterator[AlbumEntry]:
        for artist in self.artists.values():
            yield from artist.albums.values()

    def iter_tracks(self) -> Iterator[tuple[AlbumEntry, TrackRecord]]:
        """Yield (album, track) pairs in the model's current order."""
        for album in self.iter_albums():
            for track in album.tracks:
                yield album, track

    @property
    def album_count(self) -> int:
        return sum(len(artist.albums) for artist in self.artists.values())

    @property
    def cover_count(self) -> int:
        return sum(1 for album in self.iter_albums() if album.cover_extension is not None)


class Aggregator:
    """
    Builds a PlaylistModel from extraction outcomes.

    Successful outcomes become TrackRecords; failures are logged and kept in
    `issues` without touching the model.
    """

    def __init__(
        self,
        materializer: CoverMaterializer | None = None,
        *,
        unknown_artist: str = DEFAULT_UNKNOWN_ARTIST,
        unknown_album: str = DEFAULT_UNKNOWN_ALBUM,
    ) -> None:
        self.materializer = materializer
        self.unknown_artist = unknown_artist
        self.unknown_album = unknown_album
        self.model = PlaylistModel()
        self.issues: list[ScanIssue] = []

    def add(self, meta: TrackMetadata) -> TrackRecord:
        """Add one successfully extracted file to the model."""
        artist_name = meta.artist or self.unknown_artist
        album_name = meta.album or self.unknown_album

        artist, _ = self.model.get_or_create_artist(artist_name)
        album, created = artist.get_or_create_album(album_name)

        if created and self.materializer is not None:
            album.cover_extension = self.materializer.materialize(
                artist_name, album_name, meta.cover
            )

        record = TrackRecord(
            path=meta.path,
            artist=artist_name,
            album=album_name,
            title=meta.title,
            track_number=meta.track_number,
        )
        album.tracks.append(record)
        return record

    def add_failure(self, error: ExtractionError) -> ScanIssue:
        """Record a file that could not be read. The model is left untouched."""
        cause = error.cause
        message = (
            f"{type(cause).__name__}: {cause}"
            if cause is not None
            else "unsupported or unreadable audio file"
        )
        issue = ScanIssue(path=error.path, message=message)
        self.issues.append(issue)
        logger.warning("Skipping %s: %s", error.path, message)
        return issue

    def consume(self, outcome: TrackMetadata | ExtractionError) -> None:
        if isinstance(outcome, ExtractionError):
            self.add_failure(outcome)
        else:
            self.add(outcome)


def aggregate(
    outcomes: Iterable[TrackMetadata | ExtractionError],
    materializer: CoverMaterializer | None = None,
    *,
    unknown_artist: str = DEFAULT_UNKNOWN_ARTIST,
    unknown_album: str = DEFAULT_UNKNOWN_ALBUM,
) -> Aggregator:
    """Feed every outcome through a fresh Aggregator and return it."""
    aggregator = Aggregator(
        materializer, unknown_artist=unknown_artist, unknown_album=unknown_album
    )
    for outcome in outcomes:
        aggregator.consume(outcome)
    return aggregator
