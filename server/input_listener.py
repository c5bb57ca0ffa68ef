"""Line-by-line input loop with pre/post input callbacks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from console import Console

log = logging.getLogger(__name__)


@dataclass
class PreInputEvent:
    console: Console
    cancel_requested: bool = False


@dataclass
class PostInputEvent:
    console: Console
    text: str
    cancel_requested: bool = False


class ConsoleInputListener:
    """Reads lines from a console until a callback cancels or input ends."""

    def __init__(self, console: Console | None) -> None:
        if console is None:
            raise ValueError("ConsoleInputListener needs a console")
        self.console = console
        self._pre: list[Callable[[PreInputEvent], None]] = []
        self._post: list[Callable[[PostInputEvent], None]] = []

    def on_pre_input(self, callback: Callable[[PreInputEvent], None]) -> None:
        self._pre.append(callback)

    def on_post_input(self, callback: Callable[[PostInputEvent], None]) -> None:
        self._post.append(callback)

    def listen(self) -> int:
        """Run the loop and return how many lines were handled."""
        handled = 0
        while True:
            pre = PreInputEvent(self.console)
            for callback in self._pre:
                callback(pre)
            if pre.cancel_requested:
                break

            text = self.console.read_line()
            if text is None:
                log.debug("Input closed after %d line(s)", handled)
                break

            post = PostInputEvent(self.console, text)
            for callback in self._post:
                callback(post)
            handled += 1
            if post.cancel_requested:
                break
        return handled
