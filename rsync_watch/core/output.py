"""Per-service console output with colored name prefixes."""

import random
from typing import List, Optional, Sequence

from rich.console import Console
from rich.text import Text

from rsync_watch.security.validation import strip_terminal_codes

SERVICE_COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan", "bright_cyan"]
PREFIX_WIDTH = 10


class ColorCycle:
    """Hands out service colors in a shuffled order, wrapping around."""

    def __init__(self, colors: Sequence[str] = SERVICE_COLORS, rng: Optional[random.Random] = None) -> None:
        self._colors: List[str] = list(colors)
        (rng or random).shuffle(self._colors)
        self._index = 0

    def next(self) -> str:
        color = self._colors[self._index]
        self._index = (self._index + 1) % len(self._colors)
        return color


class ServiceOutput:
    """Writes lines of one service to the console."""

    def __init__(self, console: Console, service_name: str, color: str) -> None:
        self.console = console
        self.service_name = service_name
        self.color = color

    def prefix(self) -> Text:
        return Text(f"{self.service_name:<{PREFIX_WIDTH}}| ", style=self.color)

    def line(self, text: str) -> None:
        """Print one line of subprocess output."""
        self._print(self.prefix() + Text(strip_terminal_codes(text)))

    def notice(self, text: str) -> None:
        """Print a status notice entirely in the service color."""
        self._print(self.prefix() + Text(text, style=self.color))

    def _print(self, text: Text) -> None:
        self.console.print(text, highlight=False, soft_wrap=True)
