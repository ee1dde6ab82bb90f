"""Read-dispatch-render loop for the terminal session, and its cancellation."""

from __future__ import annotations

import contextlib
import logging
import signal
import threading
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from rich.console import Console
from rich.live import Live

from blobphish.keys import TerminalError, TerminalKeys
from blobphish.model import Decision, Effect, Model, Signal

log = logging.getLogger(__name__)

__all__ = ["CancelToken", "Outcome", "SessionRunner", "TerminalError", "cancel_on_signals"]


class CancelToken:
    """Set-once cancellation flag shared between signal handlers and the loop."""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.RLock()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


@contextlib.contextmanager
def cancel_on_signals(
    token: CancelToken,
    signals: Sequence[signal.Signals] = (signal.SIGINT, signal.SIGTERM),
) -> Iterator[CancelToken]:
    """Cancel ``token`` when one of ``signals`` arrives.

    Previous handlers come back on exit. Python only lets the main thread
    install handlers; from any other thread nothing is installed.
    """
    if threading.current_thread() is not threading.main_thread():
        log.debug("not in main thread, signal cancellation disabled")
        yield token
        return

    def _handler(signum, _frame) -> None:
        name = signal.Signals(signum).name
        log.info("received %s, cancelling session", name)
        token.cancel(name)

    previous = {}
    for sig in signals:
        try:
            previous[sig] = signal.signal(sig, _handler)
        except (OSError, ValueError) as exc:
            log.debug("cannot handle %s: %s", sig, exc)
    try:
        yield token
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


@dataclass(frozen=True)
class Outcome:
    model: Model
    effect: Optional[Effect] = None
    cancelled: bool = False


def _ends_loop(effect: Optional[Effect]) -> bool:
    return isinstance(effect, (Decision, Signal))


class SessionRunner:
    """Drives one model at a time until it quits, decides or is cancelled.

    The key source is entered for the duration of each run, so the terminal
    is restored however the loop ends.
    """

    def __init__(
        self,
        console: Console,
        token: CancelToken,
        keys=None,
        poll_interval: float = 0.1,
    ):
        self.console = console
        self.token = token
        self.keys = keys if keys is not None else TerminalKeys()
        self.poll_interval = poll_interval

    def run(self, model: Model) -> Outcome:
        if self.token.cancelled:
            return Outcome(model, cancelled=True)

        effect: Optional[Effect] = None
        with self.keys as source:
            with Live(model.render(), console=self.console, auto_refresh=False, transient=False) as live:
                while not self.token.cancelled:
                    key = source.read_key(self.poll_interval)
                    if key is None:
                        continue
                    log.debug("key %r -> %s", key, type(model).__name__)
                    model, effect = model.transition(key)
                    live.update(model.render(), refresh=True)
                    if _ends_loop(effect):
                        break

        if self.token.cancelled and not _ends_loop(effect):
            log.info("session loop unwound: %s", self.token.reason)
            return Outcome(model, cancelled=True)
        return Outcome(model, effect)
