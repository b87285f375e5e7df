"""
Album cover thumbnails.

One small square thumbnail is written per (artist, album) pair into the
covers directory. Deciding *which* track supplies the cover is the
Aggregator's job; the materializer just resizes and writes whatever it is given.
"""

from __future__ import annotations

import hashlib
import io
import logging
import re
import sys
from pathlib import Path

from PIL import Image, ImageOps

from htmlplaylist.core import ImageDecodeError, OutputError
from htmlplaylist.core.mime import extension_for_mime
from htmlplaylist.core.scanner import CoverImage

logger = logging.getLogger(__name__)

DEFAULT_THUMBNAIL_SIZE = 64

# Formats re-encoded as-is; everything else (BMP, TIFF, ...) becomes PNG.
_KEPT_FORMATS = frozenset({"JPEG", "PNG", "GIF", "WEBP"})

_ILLEGAL_CHARS = re.compile(r'[/\?<>\\:\*\|"]')
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x80-\x9f]")
_RESERVED_NAMES = re.compile(r"^\.+$")
_WINDOWS_RESERVED = re.compile(r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])(\..*)?$", re.IGNORECASE)
_WINDOWS_TRAILING = re.compile(r"[\. ]+$")
_MAX_FILENAME_BYTES = 255
_DIGEST_CHARS = 12


def sanitize_filename(
    name: str,
    replacement: str = "",
    max_bytes: int = _MAX_FILENAME_BYTES,
) -> str:
    """
    Make `name` safe to use as a single path component.

    Path separators and characters Windows refuses are replaced, as are control
    characters, `.`/`..`, reserved device names (CON, NUL, LPT1, ...) and
    trailing dots/spaces. The result is truncated to `max_bytes` UTF-8 bytes.
    """
    s = _ILLEGAL_CHARS.sub(replacement, name)
    s = _CONTROL_CHARS.sub(replacement, s)
    s = _RESERVED_NAMES.sub(replacement, s)
    s = _WINDOWS_RESERVED.sub(replacement, s)
    s = _WINDOWS_TRAILING.sub(replacement, s)

    encoded = s.encode("utf-8")
    if len(encoded) > max_bytes:
        s = encoded[:max_bytes].decode("utf-8", errors="ignore")
    return s


def cover_filename(artist: str, album: str, extension: str) -> str:
    """
    File name (no directory) of the thumbnail for an (artist, album) pair.

    The extension always survives. Stems too long for one path component are
    cut and suffixed with a digest of the full stem, so distinct albums keep
    distinct files.
    """
    budget = _MAX_FILENAME_BYTES - len(extension.encode("utf-8"))
    stem = sanitize_filename(f"{artist}-{album}", max_bytes=sys.maxsize)
    if len(stem.encode("utf-8")) > budget:
        digest = hashlib.sha1(stem.encode("utf-8")).hexdigest()[:_DIGEST_CHARS]
        stem = sanitize_filename(stem, max_bytes=budget - _DIGEST_CHARS - 1)
        stem = f"{stem}~{digest}"
    return f"{stem}{extension}"


class CoverMaterializer:
    """
    Resizes embedded cover art and writes it to the covers directory.

    Stateless per call: calling `materialize` twice for the same album simply
    overwrites the file, so callers enforce "first track wins".
    """

    def __init__(
        self,
        covers_dir: Path,
        size: int = DEFAULT_THUMBNAIL_SIZE,
        jpeg_quality: int = 85,
    ) -> None:
        self.covers_dir = covers_dir
        self.size = size
        self.jpeg_quality = jpeg_quality

    def make_thumbnail(self, data: bytes) -> bytes:
        """
        Crop-and-resize image bytes to a `size` x `size` square.

        The source format is kept for JPEG/PNG/GIF/WebP; other formats are
        re-encoded as PNG.

        Raises:
            ImageDecodeError: `data` is not a decodable image.
        """
        try:
            with Image.open(io.BytesIO(data)) as img:
                fmt = img.format if img.format in _KEPT_FORMATS else "PNG"
                thumb = ImageOps.fit(img, (self.size, self.size), Image.Resampling.LANCZOS)

            save_kwargs: dict[str, object] = {}
            if fmt == "JPEG":
                # JPEG has no alpha/palette
                if thumb.mode not in ("RGB", "L", "CMYK"):
                    thumb = thumb.convert("RGB")
                save_kwargs["quality"] = self.jpeg_quality

            output = io.BytesIO()
            thumb.save(output, format=fmt, **save_kwargs)
        except Exception as e:
            raise ImageDecodeError(f"{type(e).__name__}: {e}") from e

        return output.getvalue()

    def materialize(self, artist: str, album: str, cover: CoverImage | None) -> str | None:
        """
        Write the thumbnail for an album.

        Returns:
            The file extension used (e.g. ".jpg"), or None when there is no
            usable cover (absent or undecodable).

        Raises:
            OutputError: the thumbnail could not be written.
        """
        if cover is None or not cover.data:
            return None

        try:
            thumbnail = self.make_thumbnail(cover.data)
        except ImageDecodeError as e:
            logger.warning("Unreadable cover art for %s / %s: %s", artist, album, e)
            return None

        extension = extension_for_mime(cover.mime)
        target = self.covers_dir / cover_filename(artist, album, extension)
        try:
            target.write_bytes(thumbnail)
        except OSError as e:
            raise OutputError(f"failed to write cover {target}: {e}") from e

        logger.debug("Wrote cover %s (%d bytes)", target, len(thumbnail))
        return extension
