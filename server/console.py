"""Console wrappers that render colours as ANSI SGR sequences."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Callable, Iterator, Sequence, TextIO

from colour_format import DEFAULT_MARKERS, FormatMarkers, format_string
from colour_string import ColourString
from colours import DEFAULT_BG_CODE, DEFAULT_FG_CODE, RESET, Colour, sgr

log = logging.getLogger(__name__)

EVENTS = (
    "pre_write",
    "post_write",
    "pre_write_line",
    "post_write_line",
    "pre_read",
    "post_read",
)

_CLEAR_SCREEN = "\x1b[2J\x1b[H"


class Console:
    """Text stream wrapper with pre/post hooks around reads and writes.

    ``out`` must support ``write``; ``in_`` must support ``readline``.
    """

    def __init__(self, out: TextIO | None = None, in_: TextIO | None = None) -> None:
        self.out = out if out is not None else sys.stdout
        self.in_ = in_ if in_ is not None else sys.stdin
        self._listeners: dict[str, list[Callable[[Console], None]]] = {e: [] for e in EVENTS}
        self._terminal_fg: Colour | None = None
        self._terminal_bg: Colour | None = None

    def subscribe(self, event: str, callback: Callable[[Console], None]) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown console event: {event!r}")
        self._listeners[event].append(callback)

    def unsubscribe(self, event: str, callback: Callable[[Console], None]) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown console event: {event!r}")
        self._listeners[event].remove(callback)

    def _emit(self, event: str) -> None:
        for callback in list(self._listeners[event]):
            callback(self)

    @property
    def terminal_foreground(self) -> Colour | None:
        """Foreground colour last sent to the stream (None = terminal default)."""
        return self._terminal_fg

    @terminal_foreground.setter
    def terminal_foreground(self, colour: Colour | None) -> None:
        if colour == self._terminal_fg:
            return
        self._terminal_fg = colour
        self.out.write(sgr(colour.fg_code if colour is not None else DEFAULT_FG_CODE))

    @property
    def terminal_background(self) -> Colour | None:
        return self._terminal_bg

    @terminal_background.setter
    def terminal_background(self, colour: Colour | None) -> None:
        if colour == self._terminal_bg:
            return
        self._terminal_bg = colour
        self.out.write(sgr(colour.bg_code if colour is not None else DEFAULT_BG_CODE))

    def write(self, text: str) -> None:
        self._emit("pre_write")
        self.out.write(text)
        self._emit("post_write")

    def write_line(self, text: str = "") -> None:
        self._emit("pre_write_line")
        self.out.write(text + "\n")
        self._emit("post_write_line")

    def read_line(self) -> str | None:
        """Read one line without its newline, or None at end of input."""
        self._emit("pre_read")
        line = self.in_.readline()
        self._emit("post_read")
        if not line:
            return None
        return line.rstrip("\r\n")

    def clear(self) -> None:
        self.out.write(_CLEAR_SCREEN)

    def reset_colour(self) -> None:
        self.out.write(RESET)
        self._terminal_fg = None
        self._terminal_bg = None

    def flush(self) -> None:
        flush = getattr(self.out, "flush", None)
        if flush is not None:
            flush()


class ColourConsole(Console):
    """Console whose writes accept inline colour blocks.

    ``foreground``/``background`` are the colours of any text written without
    an explicit block. Terminal colours are restored after every write.
    """

    def __init__(
        self,
        foreground: Colour = Colour.WHITE,
        background: Colour = Colour.BLACK,
        out: TextIO | None = None,
        in_: TextIO | None = None,
        markers: FormatMarkers = DEFAULT_MARKERS,
    ) -> None:
        for colour in (foreground, background):
            if not isinstance(colour, Colour):
                raise ValueError(f"ColourConsole colours must be Colour members, got {colour!r}")
        super().__init__(out=out, in_=in_)
        self.default_foreground = foreground
        self.default_background = background
        self.foreground = foreground
        self.background = background
        self.markers = markers

        self._staged = False
        self._holding = False
        self._previous_fg: Colour | None = None
        self._previous_bg: Colour | None = None

        self.subscribe("pre_write", self._on_pre_write)
        self.subscribe("pre_write_line", self._on_pre_write)
        self.subscribe("post_write", self._on_post_write)
        self.subscribe("post_write_line", self._on_post_write)

    def _on_pre_write(self, _console: Console) -> None:
        if not self._holding:
            self.stage(self.foreground, self.background)

    def _on_post_write(self, _console: Console) -> None:
        if not self._holding:
            self.unstage()

    @property
    def staged(self) -> bool:
        return self._staged

    def stage(self, foreground: Colour, background: Colour) -> None:
        """Switch the terminal to the given colours.

        The colours in effect before the first stage are kept for unstage();
        staging again before unstaging only switches colours.
        """
        if not self._staged:
            self._previous_fg = self.terminal_foreground
            self._previous_bg = self.terminal_background
            self._staged = True
        self.terminal_foreground = foreground
        self.terminal_background = background

    def unstage(self) -> None:
        if not self._staged:
            return
        self._staged = False
        self.terminal_foreground = self._previous_fg
        self.terminal_background = self._previous_bg

    @contextmanager
    def _hold(self) -> Iterator[None]:
        """Keep colours staged across several writes, restore them once."""
        self._holding = True
        try:
            yield
        except BaseException:
            self._holding = False
            try:
                self.unstage()
            except Exception:
                log.warning("Could not restore console colours", exc_info=True)
            raise
        self._holding = False
        self.unstage()

    def format(self, text: str, *args: Colour) -> list[ColourString]:
        return format_string(text, args, self.foreground, self.background, self.markers)

    def write_segments(self, segments: Sequence[ColourString]) -> None:
        with self._hold():
            for segment in segments:
                self.stage(segment.foreground, segment.background)
                super().write(segment.text)

    def write(self, text: str, *args: Colour) -> None:
        """Format *text* against *args* and write it.

        The whole string is parsed before anything is written.
        """
        self.write_segments(self.format(text, *args))

    def write_line(self, text: str = "", *args: Colour) -> None:
        self.write_segments(self.format(text, *args))
        super().write_line()

    def read_line(
        self, foreground: Colour | None = None, background: Colour | None = None
    ) -> str | None:
        """Read a line with the input echoed in the given colours."""
        with self._hold():
            self.stage(
                foreground if foreground is not None else self.foreground,
                background if background is not None else self.background,
            )
            return super().read_line()

    def clear_console(self) -> None:
        self.terminal_foreground = self.foreground
        self.terminal_background = self.background
        self.clear()

    def reset_colour(self) -> None:
        """Go back to the colours this console was created with."""
        self.foreground = self.default_foreground
        self.background = self.default_background
        log.debug("Console colours reset to %s:%s", self.foreground, self.background)
