"""
htmlplaylist - Render a folder of music files as a static HTML playlist.

The pipeline reads embedded tags and cover art from every file in a folder,
groups the tracks by artist and album, orders them, and writes an
``index.html`` page with one small thumbnail per album.
"""

__version__ = "0.1.0"
__author__ = "htmlplaylist Contributors"
__license__ = "GPL-2.0"

from htmlplaylist.generator import GenerationResult, PlaylistGenerator

__all__ = ["GenerationResult", "PlaylistGenerator", "__version__"]
