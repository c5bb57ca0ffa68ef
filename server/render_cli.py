#!/usr/bin/env python3
"""Write colour format strings to the terminal."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from colour_format import ColourFormatError
from colours import Colour, parse_colour
from console import ColourConsole
from input_listener import ConsoleInputListener, PostInputEvent

log = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "colourfmt"
ENV_FILE = CONFIG_DIR / "env"

DEFAULT_FOREGROUND = Colour.WHITE
DEFAULT_BACKGROUND = Colour.BLACK
QUIT_WORDS = frozenset({"quit", "exit"})


def load_export_env(path: Path, prefix: str = "CF_") -> dict[str, str]:
    """Read the 'export NAME=value' lines of a shell env file.

    Only names starting with *prefix* are kept, so the file can be shared with
    other tools' settings.
    """
    values: dict[str, str] = {}
    if not path.exists():
        return values

    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip("'").strip('"')
        if key and key.startswith(prefix):
            values[key] = value
    return values


def env_colour(name: str, fallback: Colour, file_env: dict[str, str]) -> Colour:
    """Colour from the environment, then the env file, then *fallback*."""
    raw = (os.environ.get(name, "") or file_env.get(name, "")).strip()
    if not raw:
        return fallback
    colour = Colour.from_name(raw)
    if colour is None:
        log.warning("Ignoring %s=%r: not a colour", name, raw)
        return fallback
    return colour


def _colour_arg(value: str) -> Colour:
    try:
        return parse_colour(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="colourfmt",
        description="Write a string with inline {fg:bg} colour blocks",
    )
    parser.add_argument("format", nargs="?", default=None, help="Format string, e.g. '{red:}error{:} done'")
    parser.add_argument(
        "-a", "--arg", dest="args", action="append", type=_colour_arg, default=[],
        help="Colour argument referenced by index, e.g. {0:1}; repeatable",
    )
    parser.add_argument("--fg", type=_colour_arg, default=None, help="Default foreground colour")
    parser.add_argument("--bg", type=_colour_arg, default=None, help="Default background colour")
    parser.add_argument("-n", "--no-newline", action="store_true", help="Don't end output with a newline")
    parser.add_argument("--list-colours", action="store_true", help="Print the palette and exit")
    parser.add_argument("--interactive", action="store_true", help="Format each input line until 'quit'")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    return parser.parse_args(argv)


def list_colours(console: ColourConsole) -> None:
    for colour in Colour:
        console.write_line("{0:}%s" % colour.label, colour)


def run_interactive(console: ColourConsole, args: Sequence[Colour]) -> int:
    listener = ConsoleInputListener(console)

    def echo(event: PostInputEvent) -> None:
        if event.text.strip().lower() in QUIT_WORDS:
            event.cancel_requested = True
            return
        try:
            console.write_line(event.text, *args)
        except ColourFormatError as exc:
            print(f"error: {exc}", file=sys.stderr)

    listener.on_post_input(echo)
    handled = listener.listen()
    log.debug("Interactive session handled %d line(s)", handled)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    level = "DEBUG" if args.verbose else os.environ.get("CF_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")

    file_env = load_export_env(ENV_FILE)
    fg = args.fg if args.fg is not None else env_colour("CF_FOREGROUND", DEFAULT_FOREGROUND, file_env)
    bg = args.bg if args.bg is not None else env_colour("CF_BACKGROUND", DEFAULT_BACKGROUND, file_env)
    console = ColourConsole(fg, bg)

    if args.list_colours:
        list_colours(console)
        return 0

    if args.interactive:
        return run_interactive(console, args.args)

    if args.format is None:
        print("error: a format string is required", file=sys.stderr)
        return 2

    try:
        if args.no_newline:
            console.write(args.format, *args.args)
        else:
            console.write_line(args.format, *args.args)
    except ColourFormatError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    finally:
        console.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
