"""
Interactive directory picker for the CLI.

Lists the subdirectories of the working directory as numbered options,
followed by "type a path" and "exit". Kept free of sys.exit so it can be
driven from tests with scripted input.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

BANNER = "~~ HTML Playlist Generator ~~"
SKIPPED_DIRECTORIES = frozenset({"node_modules", "__pycache__"})


class MenuAction(Enum):
    DIRECTORY = "directory"
    PROMPT_PATH = "prompt_path"
    EXIT = "exit"


@dataclass(frozen=True, slots=True)
class MenuOption:
    label: str
    action: MenuAction
    path: Path | None = None


class InvalidChoiceError(Exception):
    """Raised when the menu input is not one of the listed option numbers."""


def build_menu(cwd: Path, *, exclude: Iterable[str] = ()) -> list[MenuOption]:
    """Options for every visible subdirectory of `cwd`, then the two fixed options."""
    skipped = SKIPPED_DIRECTORIES | set(exclude)
    options: list[MenuOption] = []

    for entry in sorted(cwd.iterdir(), key=lambda p: p.name):
        if entry.name.startswith(".") or entry.name in skipped:
            continue
        try:
            if not entry.is_dir():
                continue
        except OSError:
            continue
        options.append(MenuOption(entry.name, MenuAction.DIRECTORY, entry.resolve()))

    options.append(MenuOption("Type In Abs Path to Music Dir", MenuAction.PROMPT_PATH))
    options.append(MenuOption("Exit Application", MenuAction.EXIT))
    return options


def format_menu(options: list[MenuOption]) -> str:
    lines = [
        "",
        BANNER,
        " Choose a directory of music to process, or select an option below:",
        "",
    ]
    lines += [f"\t{i}. {option.label}" for i, option in enumerate(options, start=1)]
    return "\n".join(lines)


def parse_choice(raw: str, options: list[MenuOption]) -> MenuOption:
    """
    Map typed input to an option.

    Raises:
        InvalidChoiceError: input is not an integer in 1..len(options).
    """
    try:
        index = int(raw.strip())
    except ValueError:
        raise InvalidChoiceError(f"not a number: {raw!r}") from None
    if not 1 <= index <= len(options):
        raise InvalidChoiceError(f"out of range: {index}")
    return options[index - 1]


def choose_directory(
    cwd: Path,
    *,
    exclude: Iterable[str] = (),
    read: Callable[[str], str] | None = None,
    write: Callable[[str], None] | None = None,
) -> Path | None:
    """
    Run the menu once.

    Returns:
        The chosen directory, or None if the user picked "Exit Application".

    Raises:
        InvalidChoiceError: the menu selection was invalid.
    """
    read = read or input
    write = write or print

    options = build_menu(cwd, exclude=exclude)
    write(format_menu(options))

    option = parse_choice(read(f"\n Choice [1-{len(options)}]: "), options)
    write("")

    if option.action is MenuAction.PROMPT_PATH:
        typed = read("Type in the absolute path here: ").strip()
        return Path(typed).expanduser()
    if option.action is MenuAction.DIRECTORY:
        if option.path is None:
            raise InvalidChoiceError(f"option {option.label!r} has no directory")
        logger.debug("Menu selected %s", option.path)
        return option.path

    return None
