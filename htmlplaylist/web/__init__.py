"""
Output layer: turns a sorted PlaylistModel into the static HTML page.
"""

from htmlplaylist.web.renderer import render_page, render_playlist

__all__ = ["render_page", "render_playlist"]
