"""
Playlist generation pipeline.

This module contains the PlaylistGenerator class that wires the core pieces
together for one run:

    list files -> extract tags (per file) -> aggregate (+ cover thumbnails)
    -> sort -> render -> write index.html

Files are processed strictly one at a time. Each extraction runs in a worker
thread so the event loop stays free, but the next file is only started once
the previous one has been aggregated; this keeps cover writes and progress
output in listing order and holds at most one decoded image in memory.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from htmlplaylist.config import GeneratorConfig, get_config
from htmlplaylist.core import ExtractionError, OutputError
from htmlplaylist.core.artwork import CoverMaterializer
from htmlplaylist.core.ordering import sort_playlist
from htmlplaylist.core.playlist import Aggregator, PlaylistModel
from htmlplaylist.core.scanner import (
    ScanIssue,
    TrackMetadata,
    extract_metadata,
    list_audio_files,
)
from htmlplaylist.web.renderer import render_page

logger = logging.getLogger(__name__)

Extractor = Callable[[Path], TrackMetadata]
ProgressCallback = Callable[[int, int, Path], None]


def log_progress(done: int, total: int, path: Path) -> None:
    """Default progress reporter."""
    logger.info("[%3d%%] %s", percent(done, total), path.name)


def percent(done: int, total: int) -> int:
    if total <= 0:
        return 100
    return done * 100 // total


@dataclass(slots=True)
class GenerationResult:
    directory: Path
    index_path: Path
    covers_dir: Path
    model: PlaylistModel
    html: str
    issues: list[ScanIssue] = field(default_factory=list)

    @property
    def track_count(self) -> int:
        return len(self.model)

    @property
    def album_count(self) -> int:
        return self.model.album_count

    @property
    def cover_count(self) -> int:
        return self.model.cover_count


class PlaylistGenerator:
    """
    Runs the playlist pipeline for a directory.

    Per-file problems (unreadable tags, broken cover art) are logged and
    skipped. Setup problems (missing input directory, unwritable output)
    propagate to the caller.
    """

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        *,
        extractor: Extractor = extract_metadata,
        progress: ProgressCallback | None = log_progress,
    ) -> None:
        """
        Initialize the generator.

        Args:
            config: Settings for the run; defaults to the packaged defaults.
            extractor: Callable reading one file. Should raise ExtractionError on failure.
            progress: Called once per file with (done, total, path); None disables it.
        """
        self.config = config if config is not None else get_config()
        self.extractor = extractor
        self.progress = progress

    def _prepare_output(self) -> None:
        for directory in (self.config.output_dir, self.config.covers_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise OutputError(f"failed to create {directory}: {e}") from e

    def _extract(self, path: Path) -> TrackMetadata | ExtractionError:
        try:
            return self.extractor(path)
        except ExtractionError as e:
            return e
        except Exception as e:  # noqa: BLE001 - one bad file must not stop the run
            return ExtractionError(path, e)

    def _write_index(self, html: str) -> Path:
        target = self.config.index_path
        try:
            target.write_text(html, encoding="utf-8")
        except OSError as e:
            raise OutputError(f"failed to write {target}: {e}") from e
        return target

    async def generate(self, directory: Path | str) -> GenerationResult:
        """
        Build the playlist page for `directory`.

        Raises:
            FileNotFoundError / NotADirectoryError / PermissionError: the
                input directory cannot be listed.
            OutputError: the output directory or one of its files cannot be written.
        """
        config = self.config
        root = Path(directory).resolve()
        logger.info("Generating playlist for %s", root)

        paths = await asyncio.to_thread(
            list_audio_files,
            root,
            junk_patterns=config.junk_patterns,
            recursive=config.recursive,
        )
        total = len(paths)
        logger.debug("Found %d candidate files", total)

        await asyncio.to_thread(self._prepare_output)

        aggregator = Aggregator(
            CoverMaterializer(
                config.covers_dir,
                size=config.thumbnail_size,
                jpeg_quality=config.jpeg_quality,
            ),
            unknown_artist=config.unknown_artist,
            unknown_album=config.unknown_album,
        )

        for done, path in enumerate(paths, start=1):
            outcome = await asyncio.to_thread(self._extract, path)
            await asyncio.to_thread(aggregator.consume, outcome)
            if self.progress is not None:
                self.progress(done, total, path)

        model = aggregator.model
        sort_playlist(model)
        html = render_page(model, title=config.page_title, covers_dirname=config.covers_dirname)
        index_path = await asyncio.to_thread(self._write_index, html)

        logger.info(
            "Wrote %s: %d tracks, %d albums, %d covers, %d skipped files",
            index_path,
            len(model),
            model.album_count,
            model.cover_count,
            len(aggregator.issues),
        )

        return GenerationResult(
            directory=root,
            index_path=index_path,
            covers_dir=config.covers_dir,
            model=model,
            html=html,
            issues=aggregator.issues,
        )
