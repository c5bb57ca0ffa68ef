"""Console colour palette.

The sixteen classic console colours, with the ANSI SGR codes used to render
them and the compact run names used in JSON output.
"""

from __future__ import annotations

import enum


class Colour(enum.Enum):
    BLACK = 0
    DARK_BLUE = 1
    DARK_GREEN = 2
    DARK_CYAN = 3
    DARK_RED = 4
    DARK_MAGENTA = 5
    DARK_YELLOW = 6
    GRAY = 7
    DARK_GRAY = 8
    BLUE = 9
    GREEN = 10
    CYAN = 11
    RED = 12
    MAGENTA = 13
    YELLOW = 14
    WHITE = 15

    @property
    def label(self) -> str:
        """Canonical name, e.g. ``DarkBlue``."""
        return "".join(part.capitalize() for part in self.name.split("_"))

    @property
    def fg_code(self) -> int:
        return _SGR_FG[self]

    @property
    def bg_code(self) -> int:
        return _SGR_FG[self] + 10

    @property
    def run_name(self) -> str:
        return _RUN_NAMES[self]

    @classmethod
    def from_name(cls, name: str) -> Colour | None:
        """Case-insensitive lookup by canonical or member name."""
        return _BY_NAME.get(name.strip().lower())

    def __str__(self) -> str:
        return self.label


_SGR_FG = {
    Colour.BLACK: 30, Colour.DARK_RED: 31, Colour.DARK_GREEN: 32, Colour.DARK_YELLOW: 33,
    Colour.DARK_BLUE: 34, Colour.DARK_MAGENTA: 35, Colour.DARK_CYAN: 36, Colour.GRAY: 37,
    Colour.DARK_GRAY: 90, Colour.RED: 91, Colour.GREEN: 92, Colour.YELLOW: 93,
    Colour.BLUE: 94, Colour.MAGENTA: 95, Colour.CYAN: 96, Colour.WHITE: 97,
}

# Compact run names, the xterm 16-colour naming used by the JSON runs
_RUN_NAMES = {
    Colour.BLACK: "black", Colour.DARK_RED: "red", Colour.DARK_GREEN: "green",
    Colour.DARK_YELLOW: "yellow", Colour.DARK_BLUE: "blue", Colour.DARK_MAGENTA: "magenta",
    Colour.DARK_CYAN: "cyan", Colour.GRAY: "white",
    Colour.DARK_GRAY: "brBlack", Colour.RED: "brRed", Colour.GREEN: "brGreen",
    Colour.YELLOW: "brYellow", Colour.BLUE: "brBlue", Colour.MAGENTA: "brMagenta",
    Colour.CYAN: "brCyan", Colour.WHITE: "brWhite",
}

_BY_NAME: dict[str, Colour] = {}
for _colour in Colour:
    _BY_NAME[_colour.label.lower()] = _colour
    _BY_NAME[_colour.name.lower()] = _colour
del _colour

RESET = "\x1b[0m"
DEFAULT_FG_CODE = 39
DEFAULT_BG_CODE = 49


def sgr(*codes: int) -> str:
    """Build one SGR escape sequence from the given parameter codes."""
    return "\x1b[" + ";".join(str(c) for c in codes) + "m"


def parse_colour(name: str) -> Colour:
    """Like :meth:`Colour.from_name` but raises ``ValueError`` on unknown names."""
    colour = Colour.from_name(name)
    if colour is None:
        raise ValueError(f"Unknown colour: {name!r}")
    return colour
