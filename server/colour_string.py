"""Text tagged with a foreground and background colour."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from colours import Colour


@dataclass(frozen=True)
class ColourString:
    """One run of text in a single colour pair.

    Equality compares all three fields; ordering compares ``text`` only.
    """

    foreground: Colour
    background: Colour
    text: str

    def __iter__(self) -> Iterator[str]:
        return iter(self.text)

    def __len__(self) -> int:
        return len(self.text)

    def __lt__(self, other: ColourString) -> bool:
        if not isinstance(other, ColourString):
            return NotImplemented
        return self.text < other.text

    def __le__(self, other: ColourString) -> bool:
        if not isinstance(other, ColourString):
            return NotImplemented
        return self.text <= other.text

    def __gt__(self, other: ColourString) -> bool:
        if not isinstance(other, ColourString):
            return NotImplemented
        return self.text > other.text

    def __ge__(self, other: ColourString) -> bool:
        if not isinstance(other, ColourString):
            return NotImplemented
        return self.text >= other.text

    def to_run(self) -> dict[str, Any]:
        """Build a compact run dict."""
        return {"t": self.text, "fg": self.foreground.run_name, "bg": self.background.run_name}
