"""
HTML rendering for the playlist page.

Output is deliberately plain and fully deterministic (no timestamps), so
re-running over an unchanged folder produces a byte-identical page.
"""

from __future__ import annotations

from html import escape
from urllib.parse import quote

from htmlplaylist.core.playlist import AlbumEntry, PlaylistModel, TrackRecord

DEFAULT_COVERS_DIRNAME = "covers"


def cover_src(album: AlbumEntry, covers_dirname: str = DEFAULT_COVERS_DIRNAME) -> str | None:
    """Relative, URL-encoded image path for an album's cover, or None."""
    filename = album.cover_filename
    if filename is None:
        return None
    return f"{quote(covers_dirname)}/{quote(filename)}"


def subtitle(track: TrackRecord) -> str:
    """'artist | album', plus ' | Track No. N' when the track is numbered."""
    parts = [track.artist, track.album]
    if track.track_number is not None:
        parts.append(f"Track No. {track.track_number}")
    return " | ".join(parts)


def render_row(
    album: AlbumEntry,
    track: TrackRecord,
    covers_dirname: str = DEFAULT_COVERS_DIRNAME,
) -> str:
    src = cover_src(album, covers_dirname)
    if src is None:
        img = '<img alt="">'
    else:
        img = f'<img src="{escape(src)}" alt="{escape(album.name)}">'

    return (
        "<tr>"
        f"<td>{img}</td>"
        f"<td><b>{escape(track.title or '')}</b><br>"
        f"<small>{escape(subtitle(track))}</small></td>"
        "</tr>"
    )


def render_playlist(model: PlaylistModel, covers_dirname: str = DEFAULT_COVERS_DIRNAME) -> str:
    """One table row per track, in the model's current order."""
    return "\n".join(
        render_row(album, track, covers_dirname) for album, track in model.iter_tracks()
    )


def render_page(
    model: PlaylistModel,
    *,
    title: str = "Playlist",
    covers_dirname: str = DEFAULT_COVERS_DIRNAME,
) -> str:
    """Wrap the rows in a minimal html/body/table skeleton."""
    rows = render_playlist(model, covers_dirname)
    lines = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{escape(title)}</title>",
        "</head>",
        "<body>",
        "<table>",
    ]
    if rows:
        lines.append(rows)
    lines += ["</table>", "</body>", "</html>", ""]
    return "\n".join(lines)
