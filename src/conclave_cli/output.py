"""
Output Sink

Growable, styled output buffer handed to command handlers and renderers.
Text is collected as a rich Text object and rendered through a rich
Console when flushed to the line console.
"""

import io
from contextlib import contextmanager
from typing import Iterator, Optional

from rich.console import Console
from rich.text import Text


class OutputSink:
    """Collects styled text for one dispatch or one render."""

    def __init__(self):
        self._text = Text()

    def write(self, text: str, style: Optional[str] = None) -> None:
        """
        Append text.

        Args:
            text: Text to append (include the newline yourself)
            style: Optional rich style, e.g. "yellow" or "bold cyan"
        """
        self._text.append(text, style=style)

    def __len__(self) -> int:
        return len(self._text)

    @property
    def plain(self) -> str:
        """Collected text without styling."""
        return self._text.plain

    def clear(self) -> None:
        self._text = Text()

    def render(self, color: bool = False) -> str:
        """Render the collected text, with ANSI colour codes if requested."""
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            force_terminal=color,
            color_system="standard" if color else None,
            soft_wrap=True,
            highlight=False,
        )
        console.print(self._text, end="")
        return buffer.getvalue()

    def flush_to(self, line_console) -> None:
        """Write the collected text to the line console and clear it."""
        if not self._text:
            return
        output = line_console.output
        color = hasattr(output, "isatty") and output.isatty()
        line_console.write(self.render(color=color))
        self.clear()


@contextmanager
def acquire_output() -> Iterator[OutputSink]:
    """Provide a fresh sink that is emptied on every exit path."""
    sink = OutputSink()
    try:
        yield sink
    finally:
        sink.clear()
