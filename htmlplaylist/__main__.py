"""
HTML Playlist Generator - Entry Point

Run with: python -m htmlplaylist [DIRECTORY]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from htmlplaylist import __version__
from htmlplaylist.config import load_config
from htmlplaylist.core import OutputError
from htmlplaylist.generator import PlaylistGenerator, percent
from htmlplaylist.menu import InvalidChoiceError, choose_directory

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_CHOICE = 3


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from third-party libraries
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="htmlplaylist",
        description="Render a folder of music files as a static HTML playlist",
    )

    parser.add_argument(
        "directory",
        nargs="?",
        type=Path,
        help="Music directory to process (default: choose from a menu)",
    )

    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output directory (default: ./playlist)",
    )

    parser.add_argument(
        "--size",
        type=int,
        default=None,
        help="Cover thumbnail edge length in pixels (default: 64)",
    )

    parser.add_argument(
        "--recursive",
        action="store_true",
        default=None,
        help="Also scan subdirectories",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="TOML file overriding the default settings",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)


def print_progress(done: int, total: int, path: Path) -> None:
    print(f"{percent(done, total):3d}% {path.name}", flush=True)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the application."""
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    logger = logging.getLogger(__name__)

    try:
        config = load_config(args.config).with_overrides(
            output_dir=args.output,
            thumbnail_size=args.size,
            recursive=args.recursive,
        )
    except (OSError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_FAILURE

    directory = args.directory
    if directory is None:
        try:
            directory = choose_directory(Path.cwd(), exclude=(config.output_dir.name,))
        except InvalidChoiceError as e:
            logger.debug("Invalid menu choice: %s", e)
            print("Invalid option. Exiting app.")
            return EXIT_INVALID_CHOICE
        except (EOFError, KeyboardInterrupt):
            return EXIT_INVALID_CHOICE
        if directory is None:
            print("Exiting App")
            return EXIT_OK

    print(f'You chose the directory "{directory}"')
    generator = PlaylistGenerator(config, progress=print_progress)

    try:
        result = asyncio.run(generator.generate(directory))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_FAILURE
    except (OSError, OutputError) as e:
        logger.error("Playlist generation failed: %s", e)
        return EXIT_FAILURE

    print(
        f"Wrote {result.index_path} ({result.track_count} tracks, "
        f"{len(result.issues)} skipped)"
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
