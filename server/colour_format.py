"""Colour directive parser.

Converts a format string with inline colour blocks into colour-tagged runs:

    "{red:}error{:}: disk full"  ->  [ColourString(Red, Black, "error"),
                                      ColourString(White, Black, ": disk full")]

A block header is ``{<fg>:<bg>}``. Each side is blank (keep the current
colour), an index into the colour arguments, or a palette name. ``\\`` makes
the next character literal.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Sequence

from colour_string import ColourString
from colours import Colour

log = logging.getLogger(__name__)

_INDEX_RE = re.compile(r"^[+-]?[0-9]+$")


@dataclass(frozen=True)
class FormatMarkers:
    escape: str = "\\"
    start: str = "{"
    end: str = "}"
    separator: str = ":"

    def __post_init__(self) -> None:
        chars = (self.escape, self.start, self.end, self.separator)
        for ch in chars:
            if not isinstance(ch, str) or len(ch) != 1:
                raise ValueError(f"Format marker must be a single character, got {ch!r}")
            # Colour names and indices are built from these
            if ch.isalnum() or ch.isspace():
                raise ValueError(f"Format marker can't be a letter, digit or space, got {ch!r}")
        if len(set(chars)) != len(chars):
            raise ValueError(f"Format markers must be distinct: {chars!r}")


DEFAULT_MARKERS = FormatMarkers()


class ColourFormatError(ValueError):
    """A format string could not be turned into colour runs."""

    kind = "format_error"

    def __init__(self, reason: str, block: str, block_index: int | None = None):
        self.reason = reason
        self.block = block
        self.block_index = block_index
        super().__init__(f"Invalid format block {block!r}: {reason}")


class MalformedBlockError(ColourFormatError):
    kind = "malformed_block"


class ColourIndexError(ColourFormatError):
    kind = "index_out_of_range"


class UnknownColourError(ColourFormatError):
    kind = "unknown_colour"


def split_blocks(
    text: str,
    foreground: Colour,
    background: Colour,
    markers: FormatMarkers = DEFAULT_MARKERS,
) -> list[str]:
    """Split *text* into raw blocks at every unescaped block start.

    Text that doesn't open with a block gets a header for the current colours
    prepended. Escape markers are removed from every block, the last included.
    """
    if not text.startswith(markers.start):
        text = f"{markers.start}{foreground.label}{markers.separator}{background.label}{markers.end}{text}"

    blocks: list[str] = []
    current: list[str] = [text[0]]
    escape_next = False
    for ch in text[1:]:
        if escape_next:
            escape_next = False
            current.append(ch)
        elif ch == markers.escape:
            escape_next = True
        elif ch == markers.start:
            blocks.append("".join(current))
            current = [ch]
        else:
            current.append(ch)
    blocks.append("".join(current))
    return blocks


def resolve_colour(spec: str, args: Sequence[Colour]) -> Colour:
    """Resolve a non-blank specifier to a colour.

    Integers index into *args*; anything else is looked up by name.
    """
    spec = spec.strip()
    if _INDEX_RE.match(spec):
        index = int(spec)
        if not 0 <= index < len(args):
            raise ColourIndexError(
                f"colour argument index {index} out of range for {len(args)} argument(s)", spec
            )
        return args[index]
    colour = Colour.from_name(spec)
    if colour is None:
        raise UnknownColourError(f"colour {spec!r} does not exist", spec)
    return colour


def parse_block(
    block: str,
    args: Sequence[Colour],
    foreground: Colour,
    background: Colour,
    markers: FormatMarkers = DEFAULT_MARKERS,
) -> ColourString:
    """Parse one raw block into a ColourString."""
    if not block.startswith(markers.start):
        raise MalformedBlockError("does not start with a block", block)

    end = block.find(markers.end)
    if end == -1:
        raise MalformedBlockError(f"block is never closed with {markers.end!r}", block)
    sep = block.find(markers.separator)
    if sep == -1 or sep > end:
        raise MalformedBlockError(f"no {markers.separator!r} separator inside the block", block)

    fg_spec = block[1:sep]
    bg_spec = block[sep + 1 : end]
    try:
        fg = resolve_colour(fg_spec, args) if fg_spec.strip() else foreground
        bg = resolve_colour(bg_spec, args) if bg_spec.strip() else background
    except ColourFormatError as exc:
        # Report the whole block, not just the specifier
        raise type(exc)(exc.reason, block) from None
    return ColourString(fg, bg, block[end + 1 :])


def format_string(
    text: str,
    args: Sequence[Colour] = (),
    foreground: Colour = Colour.WHITE,
    background: Colour = Colour.BLACK,
    markers: FormatMarkers = DEFAULT_MARKERS,
) -> list[ColourString]:
    """Parse a whole format string into ordered colour runs.

    Fails on the first bad block; nothing is returned for the blocks before it.
    """
    blocks = split_blocks(text, foreground, background, markers)
    result: list[ColourString] = []
    for i, block in enumerate(blocks):
        try:
            result.append(parse_block(block, args, foreground, background, markers))
        except ColourFormatError as exc:
            exc.block_index = i
            log.debug("Format block %d rejected: %s", i, exc.reason)
            raise
    log.debug("Parsed %d block(s) from %r", len(result), text)
    return result
