"""
Tests for htmlplaylist.core.scanner.

These tests verify:
- tag value normalization helpers
- junk file detection and directory listing
- metadata and cover extraction from mutagen tag containers
"""

from __future__ import annotations

import base64
from pathlib import Path
from types import SimpleNamespace

import pytest
from mutagen.flac import FLAC, Picture, VCFLACDict
from mutagen.id3 import APIC, ID3, TALB, TIT2, TPE1, TRCK
from mutagen.mp4 import MP4, AtomDataType, MP4Cover, MP4Tags

from htmlplaylist.config import load_config
from htmlplaylist.core import ExtractionError
from htmlplaylist.core.scanner import (
    CoverImage,
    _detect_mime_from_magic,
    _first_text,
    _metadata_from_audio,
    _parse_int_maybe,
    extract_metadata,
    is_junk_file,
    list_audio_files,
)

JUNK_PATTERNS = (
    "AlbumArt_{*}*.jpg",
    "AlbumArtSmall.jpg",
    "Folder.jpg",
    "desktop.ini",
)

# =============================================================================
# Helper Tests
# =============================================================================


class TestScannerHelpers:
    """Tests for scanner utility functions."""

    def test_first_text_string(self) -> None:
        assert _first_text("hello") == "hello"
        assert _first_text("  spaced  ") == "spaced"
        assert _first_text("") is None

    def test_first_text_list(self) -> None:
        assert _first_text(["first", "second"]) == "first"
        assert _first_text([]) is None

    def test_first_text_bytes(self) -> None:
        assert _first_text(b"raw") == "raw"

    def test_first_text_none(self) -> None:
        assert _first_text(None) is None

    def test_parse_int_maybe_simple(self) -> None:
        assert _parse_int_maybe("5") == 5
        assert _parse_int_maybe(["42"]) == 42

    def test_parse_int_maybe_with_total(self) -> None:
        assert _parse_int_maybe("3/12") == 3
        assert _parse_int_maybe("1/1") == 1

    def test_parse_int_maybe_mp4_tuple(self) -> None:
        assert _parse_int_maybe([(7, 10)]) == 7

    def test_parse_int_maybe_invalid(self) -> None:
        assert _parse_int_maybe("abc") is None
        assert _parse_int_maybe("A1") is None
        assert _parse_int_maybe("") is None
        assert _parse_int_maybe(None) is None

    def test_detect_mime_from_magic(self) -> None:
        assert _detect_mime_from_magic(b"\xff\xd8\xff\xe0rest") == "image/jpeg"
        assert _detect_mime_from_magic(b"\x89PNG\r\n\x1a\nrest") == "image/png"
        assert _detect_mime_from_magic(b"GIF89a") == "image/gif"
        assert _detect_mime_from_magic(b"nothing") is None


# =============================================================================
# Listing Tests
# =============================================================================


class TestJunkFiles:
    def test_windows_media_player_sidecars(self) -> None:
        name = "AlbumArt_{8D4A0C3E-1234-4F7B-9C1D-ABCDEF012345}_Large.jpg"
        assert is_junk_file(name, JUNK_PATTERNS)
        assert is_junk_file("AlbumArtSmall.jpg", JUNK_PATTERNS)
        assert is_junk_file("folder.JPG", JUNK_PATTERNS)

    def test_bare_guid_sidecar(self) -> None:
        name = "AlbumArt_{6A7F1E2D-1111-2222-3333-444455556666}.jpg"
        assert is_junk_file(name, JUNK_PATTERNS)
        assert is_junk_file(name, load_config().junk_patterns)

    def test_default_patterns_cover_large_and_small(self) -> None:
        patterns = load_config().junk_patterns
        guid = "{6A7F1E2D-1111-2222-3333-444455556666}"
        assert is_junk_file(f"AlbumArt_{guid}_Large.jpg", patterns)
        assert is_junk_file(f"AlbumArt_{guid}_Small.jpg", patterns)
        assert not is_junk_file("AlbumArt_cover.jpg", patterns)

    def test_regular_files_are_not_junk(self) -> None:
        assert not is_junk_file("01 - Intro.mp3", JUNK_PATTERNS)
        assert not is_junk_file("AlbumArt.png", JUNK_PATTERNS)
        assert not is_junk_file("cover.jpg", JUNK_PATTERNS)

    def test_no_patterns(self) -> None:
        assert not is_junk_file("Folder.jpg", ())


class TestListAudioFiles:
    def test_sorted_and_filtered(self, tmp_path: Path) -> None:
        junk = ("AlbumArtSmall.jpg", "AlbumArt_{6A7F1E2D-1111-2222-3333-444455556666}.jpg")
        for name in ("b.mp3", "a.flac", "notes.txt", *junk):
            (tmp_path / name).write_bytes(b"x")
        (tmp_path / "subdir").mkdir()
        (tmp_path / "subdir" / "c.mp3").write_bytes(b"x")

        paths = list_audio_files(tmp_path, junk_patterns=JUNK_PATTERNS)

        # No extension filter: notes.txt is still a candidate
        assert [p.name for p in paths] == ["a.flac", "b.mp3", "notes.txt"]
        assert all(p.is_absolute() for p in paths)

    def test_recursive(self, tmp_path: Path) -> None:
        (tmp_path / "b.mp3").write_bytes(b"x")
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "z.mp3").write_bytes(b"x")

        paths = list_audio_files(tmp_path, recursive=True)

        assert [p.relative_to(tmp_path.resolve()).as_posix() for p in paths] == [
            "a/z.mp3",
            "b.mp3",
        ]

    def test_missing_directory_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            list_audio_files(tmp_path / "missing")

    def test_file_instead_of_directory_raises(self, tmp_path: Path) -> None:
        f = tmp_path / "song.mp3"
        f.write_bytes(b"x")
        with pytest.raises(NotADirectoryError):
            list_audio_files(f)


# =============================================================================
# Extraction Tests
# =============================================================================


class TestMetadataFromAudio:
    """Metadata extraction from mutagen-shaped objects (no real audio fixtures)."""

    def test_id3_tags(self, tmp_path: Path) -> None:
        id3 = ID3()
        id3.add(TIT2(encoding=3, text=["Song"]))
        id3.add(TPE1(encoding=3, text=["Artist"]))
        id3.add(TALB(encoding=3, text=["Album"]))
        id3.add(TRCK(encoding=3, text=["3/12"]))
        id3.add(APIC(encoding=3, mime="image/png", type=0, desc="back", data=b"BACK"))
        id3.add(APIC(encoding=3, mime="image/jpeg", type=3, desc="front", data=b"FRONT"))

        meta = _metadata_from_audio(tmp_path / "a.mp3", SimpleNamespace(tags=id3))

        assert meta.title == "Song"
        assert meta.artist == "Artist"
        assert meta.album == "Album"
        assert meta.track_number == 3
        assert meta.cover == CoverImage(data=b"FRONT", mime="image/jpeg")

    def test_vorbis_tags_with_picture(self, tmp_path: Path) -> None:
        pic = Picture()
        pic.type = 3
        pic.mime = "image/png"
        pic.data = b"PNGDATA"
        encoded = base64.b64encode(pic.write()).decode("ascii")

        tags = {
            "title": ["Vorbis Song"],
            "artist": ["Vorbis Artist"],
            "album": ["Vorbis Album"],
            "tracknumber": ["9"],
            "metadata_block_picture": [encoded],
        }
        meta = _metadata_from_audio(tmp_path / "a.ogg", SimpleNamespace(tags=tags))

        assert meta.title == "Vorbis Song"
        assert meta.track_number == 9
        assert meta.cover == CoverImage(data=b"PNGDATA", mime="image/png")

    def test_mp4_tags_with_png_cover(self, tmp_path: Path) -> None:
        mp4 = MP4.__new__(MP4)
        mp4.tags = MP4Tags()
        mp4.tags["\xa9nam"] = ["MP4 Song"]
        mp4.tags["\xa9ART"] = ["MP4 Artist"]
        mp4.tags["\xa9alb"] = ["MP4 Album"]
        mp4.tags["trkn"] = [(4, 10)]
        mp4.tags["covr"] = [MP4Cover(b"PNGBYTES", imageformat=MP4Cover.FORMAT_PNG)]

        meta = _metadata_from_audio(tmp_path / "a.m4a", mp4)

        assert meta.title == "MP4 Song"
        assert meta.artist == "MP4 Artist"
        assert meta.album == "MP4 Album"
        assert meta.track_number == 4
        assert meta.cover == CoverImage(data=b"PNGBYTES", mime="image/png")

    def test_mp4_cover_jpeg_format(self, tmp_path: Path) -> None:
        mp4 = MP4.__new__(MP4)
        mp4.tags = MP4Tags()
        mp4.tags["covr"] = [MP4Cover(b"JPEGBYTES", imageformat=MP4Cover.FORMAT_JPEG)]

        meta = _metadata_from_audio(tmp_path / "a.m4a", mp4)

        assert meta.cover == CoverImage(data=b"JPEGBYTES", mime="image/jpeg")

    def test_mp4_cover_falls_back_to_magic_bytes(self, tmp_path: Path) -> None:
        mp4 = MP4.__new__(MP4)
        mp4.tags = MP4Tags()
        mp4.tags["covr"] = [MP4Cover(b"GIF89a....", imageformat=AtomDataType.GIF)]

        meta = _metadata_from_audio(tmp_path / "a.m4a", mp4)

        assert meta.cover == CoverImage(data=b"GIF89a....", mime="image/gif")

    def test_mp4_without_cover(self, tmp_path: Path) -> None:
        mp4 = MP4.__new__(MP4)
        mp4.tags = MP4Tags()
        mp4.tags["\xa9nam"] = ["Bare"]

        meta = _metadata_from_audio(tmp_path / "a.m4a", mp4)

        assert meta.title == "Bare"
        assert meta.cover is None

    def test_flac_prefers_front_cover(self, tmp_path: Path) -> None:
        flac = FLAC.__new__(FLAC)
        flac.metadata_blocks = []
        flac.tags = VCFLACDict()
        flac.tags["title"] = "FLAC Song"
        flac.tags["tracknumber"] = "2/9"

        back = Picture()
        back.type = 4
        back.mime = "image/png"
        back.data = b"BACK"
        front = Picture()
        front.type = 3
        front.mime = "image/jpeg"
        front.data = b"FRONT"
        flac.add_picture(back)
        flac.add_picture(front)

        meta = _metadata_from_audio(tmp_path / "a.flac", flac)

        assert meta.title == "FLAC Song"
        assert meta.track_number == 2
        assert meta.cover == CoverImage(data=b"FRONT", mime="image/jpeg")

    def test_flac_first_picture_without_front_cover(self, tmp_path: Path) -> None:
        flac = FLAC.__new__(FLAC)
        flac.metadata_blocks = []

        other = Picture()
        other.type = 0
        other.mime = "image/png"
        other.data = b"OTHER"
        flac.add_picture(other)

        meta = _metadata_from_audio(tmp_path / "a.flac", flac)

        assert meta.cover == CoverImage(data=b"OTHER", mime="image/png")

    def test_flac_without_pictures(self, tmp_path: Path) -> None:
        flac = FLAC.__new__(FLAC)
        flac.metadata_blocks = []

        assert _metadata_from_audio(tmp_path / "a.flac", flac).cover is None

    def test_missing_tags_are_none(self, tmp_path: Path) -> None:
        meta = _metadata_from_audio(tmp_path / "a.wav", SimpleNamespace(tags=None))

        assert meta.path == tmp_path / "a.wav"
        assert meta.title is None
        assert meta.artist is None
        assert meta.album is None
        assert meta.track_number is None
        assert meta.cover is None

    def test_blank_values_are_none(self, tmp_path: Path) -> None:
        tags = {"artist": ["   "], "album": [""], "tracknumber": ["side A"]}
        meta = _metadata_from_audio(tmp_path / "a.ogg", SimpleNamespace(tags=tags))

        assert meta.artist is None
        assert meta.album is None
        assert meta.track_number is None


class TestExtractMetadata:
    def test_non_audio_file_raises_extraction_error(self, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("just some text\n")

        with pytest.raises(ExtractionError) as excinfo:
            extract_metadata(path)

        assert excinfo.value.path == path
        assert str(path) in str(excinfo.value)

    def test_missing_file_raises_extraction_error(self, tmp_path: Path) -> None:
        path = tmp_path / "gone.mp3"

        with pytest.raises(ExtractionError) as excinfo:
            extract_metadata(path)

        assert excinfo.value.cause is not None
