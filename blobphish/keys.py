"""Key bindings and raw keyboard input from the controlling terminal."""

from __future__ import annotations

import logging
import os
import select
import sys
import termios
import tty
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional, Tuple

log = logging.getLogger(__name__)


class TerminalError(RuntimeError):
    """The terminal could not be set up or read."""


@dataclass(frozen=True)
class KeyBinding:
    keys: Tuple[str, ...]
    help_key: str
    help_text: str

    def matches(self, key: str) -> bool:
        return key in self.keys


UP = KeyBinding(("up", "k"), "↑/k", "up")
DOWN = KeyBinding(("down", "j"), "↓/j", "down")
CONFIRM = KeyBinding(("enter",), "enter", "select")
HELP = KeyBinding(("?",), "?", "help")
QUIT = KeyBinding(("q", "esc", "ctrl+c"), "q", "quit")
LAUNCH = KeyBinding(("enter",), "enter", "run workflow")

PROMPT_KEYS = (UP, DOWN, CONFIRM, QUIT)
MAIN_KEYS = (HELP, QUIT, LAUNCH)

_SEQUENCES = {
    b"\x1b[A": "up",
    b"\x1bOA": "up",
    b"\x1b[B": "down",
    b"\x1bOB": "down",
    b"\x1b[C": "right",
    b"\x1bOC": "right",
    b"\x1b[D": "left",
    b"\x1bOD": "left",
    b"\r": "enter",
    b"\n": "enter",
    b"\r\n": "enter",
    b"\x1b": "esc",
    b"\x03": "ctrl+c",
    b"\t": "tab",
    b"\x7f": "backspace",
    b"\x08": "backspace",
}


_LONGEST_SEQUENCE = max(len(seq) for seq in _SEQUENCES)


def decode_key(data: bytes) -> str:
    """Name the key a chunk of terminal input stands for.

    Unknown escape sequences come back as their decoded text, which no
    binding matches.
    """
    if data in _SEQUENCES:
        return _SEQUENCES[data]
    return data.decode("utf-8", errors="replace")


def _key_length(data: bytes, start: int) -> int:
    """Byte length of the key starting at ``data[start]``."""
    for size in range(min(_LONGEST_SEQUENCE, len(data) - start), 1, -1):
        if data[start:start + size] in _SEQUENCES:
            return size

    lead = data[start]
    if lead == 0x1B and start + 1 < len(data):
        follow = data[start + 1]
        if follow == ord("["):
            # CSI: parameters and intermediates, then one final byte in 0x40-0x7e
            end = start + 2
            while end < len(data) and not 0x40 <= data[end] <= 0x7E:
                end += 1
            return min(end + 1, len(data)) - start
        if follow == ord("O") and start + 2 < len(data):
            return 3
        return 1
    if lead >= 0xF0:
        size = 4
    elif lead >= 0xE0:
        size = 3
    elif lead >= 0xC0:
        size = 2
    else:
        size = 1
    return min(size, len(data) - start)


def split_keys(data: bytes) -> List[str]:
    """Split a read from the terminal into one name per key pressed."""
    out: List[str] = []
    pos = 0
    while pos < len(data):
        size = _key_length(data, pos)
        out.append(decode_key(data[pos:pos + size]))
        pos += size
    return out


class TerminalKeys:
    """Reads keys from a tty in cbreak mode.

    Entering puts the terminal in cbreak mode (no echo, no line buffering,
    signals still delivered); leaving always restores the saved attributes.
    """

    def __init__(self, stream=None):
        self._stream = stream if stream is not None else sys.stdin
        self._fd: Optional[int] = None
        self._saved = None
        self._pending: Deque[str] = deque()

    def __enter__(self) -> "TerminalKeys":
        try:
            fd = self._stream.fileno()
            if not os.isatty(fd):
                raise TerminalError("standard input is not a terminal")
            self._saved = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        except TerminalError:
            raise
        except (OSError, ValueError, termios.error) as exc:
            raise TerminalError(f"cannot initialise terminal: {exc}") from exc
        self._fd = fd
        log.debug("terminal fd %d in cbreak mode", fd)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        fd, saved = self._fd, self._saved
        self._fd = None
        self._saved = None
        self._pending.clear()
        if fd is None or saved is None:
            return
        try:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
        except (OSError, termios.error) as err:
            log.warning("could not restore terminal attributes: %s", err)
        else:
            log.debug("terminal fd %d restored", fd)

    def read_key(self, timeout: float) -> Optional[str]:
        """Next key pressed, or None when nothing arrives within ``timeout``.

        Several keys read in one go are queued and handed out one per call.
        """
        if self._fd is None:
            raise TerminalError("terminal is not initialised")
        if self._pending:
            return self._pending.popleft()
        try:
            ready, _, _ = select.select([self._fd], [], [], timeout)
            if not ready:
                return None
            data = os.read(self._fd, 32)
        except OSError as exc:
            raise TerminalError(f"cannot read from terminal: {exc}") from exc
        if not data:
            raise TerminalError("terminal input closed")
        self._pending.extend(split_keys(data))
        return self._pending.popleft()
