"""
MIME type -> file extension lookup.

Cover art embedded in tags carries a MIME string chosen by whatever tagger
wrote it, so the table is deliberately broad (images plus the audio, video and
document types that occasionally end up in picture frames). Unknown types map
to FALLBACK_EXTENSION.
"""

from __future__ import annotations

from types import MappingProxyType

FALLBACK_EXTENSION = ".txt"

MIME_EXTENSIONS = MappingProxyType(
    {
        # Images
        "image/jpeg": ".jpg",
        "image/jpg": ".jpg",
        "image/pjpeg": ".jpg",
        "image/png": ".png",
        "image/gif": ".gif",
        "image/webp": ".webp",
        "image/bmp": ".bmp",
        "image/x-ms-bmp": ".bmp",
        "image/tiff": ".tif",
        "image/svg+xml": ".svg",
        "image/vnd.microsoft.icon": ".ico",
        "image/x-icon": ".ico",
        "image/avif": ".avif",
        "image/heic": ".heic",
        # Audio
        "audio/aac": ".aac",
        "audio/mpeg": ".mp3",
        "audio/mp4": ".m4a",
        "audio/flac": ".flac",
        "audio/ogg": ".oga",
        "audio/opus": ".opus",
        "audio/wav": ".wav",
        "audio/x-wav": ".wav",
        "audio/webm": ".weba",
        "audio/midi": ".mid",
        "audio/x-midi": ".mid",
        "audio/3gpp": ".3gp",
        # Video
        "video/mp4": ".mp4",
        "video/mpeg": ".mpeg",
        "video/ogg": ".ogv",
        "video/webm": ".webm",
        "video/x-msvideo": ".avi",
        "video/mp2t": ".ts",
        # Documents and archives
        "application/pdf": ".pdf",
        "application/json": ".json",
        "application/xml": ".xml",
        "application/zip": ".zip",
        "application/gzip": ".gz",
        "application/x-tar": ".tar",
        "application/x-7z-compressed": ".7z",
        "application/vnd.rar": ".rar",
        "application/rtf": ".rtf",
        "application/msword": ".doc",
        "application/octet-stream": ".bin",
        "text/plain": ".txt",
        "text/html": ".html",
        "text/css": ".css",
        "text/csv": ".csv",
    }
)


def extension_for_mime(mime: str | None) -> str:
    """
    Resolve a file extension (with leading dot) for a MIME type.

    Matching ignores case and any `; charset=...` style parameters.
    Never raises: missing or unknown types give FALLBACK_EXTENSION.
    """
    if not mime:
        return FALLBACK_EXTENSION
    key = mime.split(";", 1)[0].strip().lower()
    return MIME_EXTENSIONS.get(key, FALLBACK_EXTENSION)
