"""
Line Console

A non-blocking single-line editor for the interactive prompt. Keystrokes
are read without waiting, echoed as the user types, and a completed line is
reported from poll(). While asynchronous output is written, the displayed
line can be erased and later restored with its buffered contents intact.

Decoding and key parsing come from prompt_toolkit, so multi-byte characters
and escape sequences split across reads are reassembled before they reach
the line buffer.
"""

import logging
import os
import sys
import termios
import tty
from enum import Enum
from typing import List, Optional, TextIO

from prompt_toolkit.input.posix_utils import PosixStdinReader
from prompt_toolkit.input.vt100_parser import Vt100Parser
from prompt_toolkit.key_binding import KeyPress
from prompt_toolkit.keys import Keys

logger = logging.getLogger(__name__)

RETURN_KEYS = (Keys.ControlM, Keys.ControlJ)

ERASE_LINE = "\r\x1b[2K"


class LineStatus(Enum):
    """Result of polling the console."""

    PENDING = "pending"
    READY = "ready"
    CLOSED = "closed"


class TerminalReader:
    """
    Reads keystrokes from a terminal without blocking.

    The terminal is switched to cbreak mode (no line buffering, no echo)
    on open() and restored on close(). Ctrl-C still raises SIGINT.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdin
        self._fd = self.stream.fileno()
        self._stdin = PosixStdinReader(self._fd)
        self._saved_attributes = None

    @property
    def at_eof(self) -> bool:
        """True once the input stream has been closed by the other end."""
        return self._stdin.closed

    def open(self) -> None:
        if not os.isatty(self._fd):
            logger.warning("stdin is not a terminal, line editing disabled")
            return
        self._saved_attributes = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)

    def read_available(self) -> str:
        """Return every character typed since the last call."""
        chunks = []
        while not self._stdin.closed:
            data = self._stdin.read()
            if not data:
                break
            chunks.append(data)
        return "".join(chunks)

    def close(self) -> None:
        if self._saved_attributes is not None:
            termios.tcsetattr(
                self._fd, termios.TCSADRAIN, self._saved_attributes
            )
            self._saved_attributes = None


class LineConsole:
    """
    Interactive input line with erase/restore support.

    Attributes:
        prompt: Prompt text drawn before the input line
    """

    def __init__(self, reader=None, output: Optional[TextIO] = None):
        """
        Initialize the console.

        Args:
            reader: Object with read_available(), close() and an at_eof
                    flag; defaults to a TerminalReader on stdin
            output: Stream the prompt, echo and rendered output go to
        """
        self.reader = reader if reader is not None else TerminalReader()
        self.output = output or sys.stdout
        self.prompt = ""
        self._line = ""
        self._pending: List[KeyPress] = []
        self._parser = Vt100Parser(self._pending.append)
        self._ready = False
        self._erased = False

        if hasattr(self.reader, "open"):
            self.reader.open()

    def set_prompt(self, text: str) -> None:
        """Set the prompt and draw it at the start of the current row."""
        self.prompt = text
        self._write(text)

    def poll(self) -> LineStatus:
        """
        Process pending keystrokes.

        Returns:
            LineStatus.READY once return has been pressed, until
            reset_for_next_line() is called. LineStatus.CLOSED once input
            has ended and every key typed before that has been applied.
        """
        if self._ready:
            return LineStatus.READY
        status = self.feed(self.reader.read_available())
        if status is LineStatus.PENDING and self.reader.at_eof:
            self._parser.flush()
            status = self._apply_pending()
            if status is LineStatus.PENDING:
                return LineStatus.CLOSED
        return status

    def feed(self, text: str) -> LineStatus:
        """
        Apply keystrokes to the line buffer.

        An incomplete escape sequence is held back until the rest of it
        arrives. Keys that arrive after a completed line are kept and
        applied to the next line.
        """
        self._parser.feed(text)
        return self._apply_pending()

    def current_line(self) -> str:
        return self._line

    def clear_editing(self) -> None:
        """Forget the completed line."""
        self._line = ""

    def reset_for_next_line(self) -> None:
        """Start editing a new line, applying any keystrokes typed ahead."""
        self._line = ""
        self._ready = False
        self._erased = False
        self._apply_pending()

    def erase_displayed_line(self) -> None:
        """Remove the prompt and input line from the terminal row."""
        if self._erased:
            return
        self._write(ERASE_LINE)
        self._erased = True

    def restore_displayed_line(self) -> None:
        """Redraw the buffered input after the prompt has been drawn."""
        if not self._erased:
            return
        self._write(self._line)
        self._erased = False

    def write(self, text: str) -> None:
        self._write(text)

    def close(self) -> None:
        self._write("\n")
        self.reader.close()

    def _apply_pending(self) -> LineStatus:
        consumed = 0
        while consumed < len(self._pending) and not self._ready:
            key = self._pending[consumed].key
            consumed += 1

            if key in RETURN_KEYS:
                self._write("\n")
                self._ready = True
            elif key == Keys.ControlH:
                if self._line:
                    self._line = self._line[:-1]
                    self._write("\b \b")
            elif key == Keys.ControlU:
                self._line = ""
                self._write(ERASE_LINE + self.prompt)
            elif isinstance(key, Keys):
                # cursor movement and function keys
                continue
            elif key.isprintable():
                self._line += key
                self._write(key)

        del self._pending[:consumed]
        return LineStatus.READY if self._ready else LineStatus.PENDING

    def _write(self, text: str) -> None:
        if text:
            self.output.write(text)
            self.output.flush()
