from __future__ import annotations

import base64
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any

from mutagen import File as mutagen_file
from mutagen.flac import FLAC, Picture
from mutagen.id3 import ID3
from mutagen.mp4 import MP4, MP4Cover

from htmlplaylist.core import ExtractionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CoverImage:
    """Raw embedded cover art, exactly as stored in the tag."""

    data: bytes
    mime: str | None = None


@dataclass(frozen=True, slots=True)
class TrackMetadata:
    """
    Normalized metadata extracted from an audio file.

    Every tag field is optional: absence is a normal value here, not an error.
    Grouping decisions (e.g. what to call a missing artist) belong to the playlist layer.
    """

    path: Path
    title: str | None = None
    artist: str | None = None
    album: str | None = None
    track_number: int | None = None
    cover: CoverImage | None = None


@dataclass(frozen=True, slots=True)
class ScanIssue:
    path: Path
    message: str


def is_junk_file(name: str, patterns: Iterable[str]) -> bool:
    """
    Return True if a bare file name matches one of the junk glob patterns.

    Matching is case-insensitive; Windows writes `AlbumArtSmall.jpg` and
    `albumartsmall.jpg` interchangeably.
    """
    lowered = name.lower()
    return any(fnmatchcase(lowered, p.lower()) for p in patterns)


def list_audio_files(
    root: Path,
    *,
    junk_patterns: Iterable[str] = (),
    recursive: bool = False,
) -> list[Path]:
    """
    List candidate files under `root`, sorted by their path relative to root.

    Files are not filtered by extension: anything that is not junk gets an
    extraction attempt. Failing to list `root` itself raises (fatal); entries
    that cannot be stat'ed are skipped.
    """
    root = root.resolve()
    if not root.exists():
        raise FileNotFoundError(root)
    if not root.is_dir():
        raise NotADirectoryError(root)

    patterns = tuple(junk_patterns)
    entries = root.rglob("*") if recursive else root.iterdir()

    paths: list[Path] = []
    for p in entries:
        try:
            if not p.is_file():
                continue
        except OSError:
            continue
        if is_junk_file(p.name, patterns):
            logger.debug("Skipping junk file %s", p)
            continue
        paths.append(p)

    paths.sort(key=lambda p: p.relative_to(root).as_posix())
    return paths


def _clean_str(value: str | None) -> str | None:
    if value is None:
        return None
    s = value.strip()
    return s if s else None


def _first_text(value: Any) -> str | None:
    """
    Mutagen returns different shapes depending on container/tag type:
    - ID3 frames
    - lists of strings
    - plain strings
    - objects with `.text`
    We normalize to a single string (first item if multiple).
    """
    if value is None:
        return None

    # Common case: list/tuple of values (MP4 `trkn` is a list of (n, total) tuples)
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        return _first_text(value[0])

    if isinstance(value, bytes):
        return _clean_str(value.decode("utf-8", errors="replace"))

    # Mutagen ID3 frames often have `.text` list
    text = getattr(value, "text", None)
    if text is not None:
        return _first_text(text)

    # Fall back to string conversion
    try:
        s = str(value)
    except Exception:
        return None

    return _clean_str(s)


def _parse_int_maybe(value: Any) -> int | None:
    """
    Parse things like:
    - "3"
    - "3/12"
    - ["3/12"]
    - [(3, 12)]
    - mutagen frame objects
    """
    s = _first_text(value)
    if not s:
        return None

    # handle "3/12"
    if "/" in s:
        s = s.split("/", 1)[0].strip()

    try:
        return int(s)
    except ValueError:
        return None


def _tags_get(tags: Any, keys: Iterable[str]) -> Any:
    if not tags:
        return None
    for k in keys:
        if k in tags:
            return tags[k]
    return None


def _detect_mime_from_magic(data: bytes) -> str | None:
    """Fallback MIME detection via magic bytes."""
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith(b"GIF87a") or data.startswith(b"GIF89a"):
        return "image/gif"
    if data.startswith(b"RIFF") and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def _extract_cover(audio: Any) -> CoverImage | None:
    """Pull the first usable picture out of whatever tag container `audio` carries."""
    tags = getattr(audio, "tags", None)

    # MP4 (m4a, m4b): MP4Cover.imageformat is more reliable than sniffing
    if isinstance(audio, MP4):
        covers = tags.get("covr") if tags else None
        if not covers:
            return None
        cover = covers[0]
        data = bytes(cover)
        mime: str | None = None
        if isinstance(cover, MP4Cover):
            if cover.imageformat == MP4Cover.FORMAT_PNG:
                mime = "image/png"
            elif cover.imageformat == MP4Cover.FORMAT_JPEG:
                mime = "image/jpeg"
        return CoverImage(data=data, mime=mime or _detect_mime_from_magic(data))

    # FLAC: proper MIME in picture metadata; prefer the front cover (type 3)
    if isinstance(audio, FLAC):
        pictures = audio.pictures
        if not pictures:
            return None
        pic = next((p for p in pictures if p.type == 3), pictures[0])
        return CoverImage(data=pic.data, mime=pic.mime or None)

    # ID3 (mp3, aiff, ...): prefer the front cover (type 3)
    id3 = audio if isinstance(audio, ID3) else tags if isinstance(tags, ID3) else None
    if id3 is not None:
        apic_frames = id3.getall("APIC")
        if not apic_frames:
            return None
        cover = next((f for f in apic_frames if f.type == 3), apic_frames[0])
        return CoverImage(data=cover.data, mime=cover.mime or None)

    # Vorbis comments (ogg, opus): base64 METADATA_BLOCK_PICTURE, front cover preferred
    if tags:
        pictures: list[Picture] = []
        for key in ("metadata_block_picture", "METADATA_BLOCK_PICTURE"):
            if key not in tags:
                continue
            for b64_data in tags[key]:
                try:
                    pictures.append(Picture(base64.b64decode(b64_data)))
                except Exception as e:
                    logger.debug("Skipping unreadable METADATA_BLOCK_PICTURE: %s", e)
        if pictures:
            pic = next((p for p in pictures if p.type == 3), pictures[0])
            return CoverImage(data=pic.data, mime=pic.mime or None)

    return None


def _metadata_from_audio(path: Path, audio: Any) -> TrackMetadata:
    tags: Any = None
    if getattr(audio, "tags", None) is not None:
        # mutagen tags often behave like dict
        try:
            tags = dict(audio.tags)
        except Exception:
            # Some tag containers may not be directly castable
            tags = audio.tags

    # Keys: ID3=TIT2, Vorbis=title, MP4=©nam
    title = _first_text(_tags_get(tags, ("TIT2", "title", "TITLE", "©nam")))
    # Keys: ID3=TPE1, Vorbis=artist, MP4=©ART
    artist = _first_text(_tags_get(tags, ("TPE1", "artist", "ARTIST", "©ART")))
    # Keys: ID3=TALB, Vorbis=album, MP4=©alb
    album = _first_text(_tags_get(tags, ("TALB", "album", "ALBUM", "©alb")))
    # Keys: ID3=TRCK, Vorbis=tracknumber, MP4=trkn
    track_number = _parse_int_maybe(
        _tags_get(tags, ("TRCK", "tracknumber", "TRACKNUMBER", "trkn"))
    )

    return TrackMetadata(
        path=path,
        title=title,
        artist=artist,
        album=album,
        track_number=track_number,
        cover=_extract_cover(audio),
    )


def extract_metadata(path: Path) -> TrackMetadata:
    """
    Extract tags and cover art using mutagen.

    Synchronous on purpose; the generator runs it through `asyncio.to_thread`.

    Raises:
        ExtractionError: the file is unreadable, not a recognised audio
            container, or its tags are corrupt.
    """
    try:
        audio = mutagen_file(path)
    except Exception as e:
        raise ExtractionError(path, e) from e
    if audio is None:
        raise ExtractionError(path)

    try:
        return _metadata_from_audio(path, audio)
    except Exception as e:
        raise ExtractionError(path, e) from e
