"""Host loop: terminal input, effect execution and live frame output.

Everything that blocks lives here. The dashboard only ever sees events taken
from one FIFO queue on the main thread, so a dispatch always finishes before
the next event is read.
"""

from __future__ import annotations

import logging
import os
import queue
import select
import sys
import termios
import threading
import tty
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

from rich.console import Console
from rich.live import Live
from rich.text import Text

from dash_core.effects import Effect, Quit, Tick, flatten, run_callable, wants_quit
from dash_core.errors import InitializationFailure
from dash_core.models import KeyEvent, ResizeEvent

logger = logging.getLogger(__name__)

POLL_SECONDS = 0.05

ESCAPE_SEQUENCES = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[Z": "shift+tab",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
}

CONTROL_KEYS = {
    "\t": "tab",
    "\r": "enter",
    "\n": "enter",
    " ": "space",
    "\x7f": "backspace",
    "\x03": "ctrl+c",
    "\x1b": "esc",
}


def key_name(raw: str) -> str:
    if raw in ESCAPE_SEQUENCES:
        return ESCAPE_SEQUENCES[raw]
    return CONTROL_KEYS.get(raw, raw)


def utf8_length(lead: int) -> int:
    """Byte length of the UTF-8 sequence starting with ``lead``."""
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


class TerminalKeys:
    """Puts stdin into cbreak mode and reads one key at a time."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self._saved = None

    def __enter__(self) -> TerminalKeys:
        try:
            fd = self.stream.fileno()
            self._saved = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        except (OSError, termios.error, ValueError) as exc:
            raise InitializationFailure(f"stdin is not an interactive terminal: {exc}") from exc
        return self

    def __exit__(self, *exc_info) -> None:
        if self._saved is not None:
            termios.tcsetattr(self.stream.fileno(), termios.TCSADRAIN, self._saved)
            self._saved = None

    def _ready(self, timeout: float) -> bool:
        return bool(select.select([self.stream], [], [], timeout)[0])

    def read(self, timeout: float = POLL_SECONDS) -> str | None:
        if not self._ready(timeout):
            return None
        fd = self.stream.fileno()
        raw = os.read(fd, 1)
        if not raw:
            return None
        if raw == b"\x1b":
            while self._ready(0.01) and len(raw) < 6:
                raw += os.read(fd, 1)
                if len(raw) >= 3 and (raw[-1:].isalpha() or raw[-1:] == b"~"):
                    break
        else:
            missing = utf8_length(raw[0]) - 1
            while missing > 0 and self._ready(0.01):
                chunk = os.read(fd, missing)
                if not chunk:
                    break
                raw += chunk
                missing -= len(chunk)
        text = raw.decode("utf-8", errors="replace")
        return key_name(text) if text else None


class EffectRunner:
    """Executes effects off the dispatch thread and queues their events."""

    def __init__(self, max_workers: int = 4, events: queue.Queue | None = None):
        self.events: queue.Queue = events or queue.Queue()
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="effect")
        self._timers: list[threading.Timer] = []
        self._closed = False

    def submit(self, effect: Effect | None) -> None:
        for item in flatten(effect):
            if self._closed or isinstance(item, Quit):
                continue
            if isinstance(item, Tick):
                self._schedule(item)
            else:
                self._pool.submit(self._run, item)

    def _schedule(self, tick: Tick) -> None:
        timer = threading.Timer(tick.delay, self.events.put, args=(tick.event,))
        timer.daemon = True
        self._timers = [t for t in self._timers if t.is_alive()]
        self._timers.append(timer)
        timer.start()

    def _run(self, effect: Callable[[], Any]) -> None:
        event = run_callable(effect)
        if event is not None and not self._closed:
            self.events.put(event)

    def shutdown(self) -> None:
        self._closed = True
        for timer in self._timers:
            timer.cancel()
        self._pool.shutdown(wait=False, cancel_futures=True)


def drain(dashboard, events: queue.Queue, runner: EffectRunner) -> tuple[bool, bool]:
    """Dispatch every queued event in arrival order.

    Returns ``(dispatched, quit)``.
    """
    dispatched = False
    while True:
        try:
            event = events.get_nowait()
        except queue.Empty:
            return dispatched, False
        dispatched = True
        _, effect = dashboard.handle_event(event)
        if wants_quit(effect):
            return dispatched, True
        runner.submit(effect)


def run_live(dashboard, console: Console, runner: EffectRunner, poll: float = POLL_SECONDS) -> int:
    events = runner.events
    size = None
    with TerminalKeys() as keys, Live(console=console, screen=True, auto_refresh=False) as live:
        runner.submit(dashboard.init())
        try:
            while True:
                current = (console.size.width, console.size.height)
                if current != size:
                    size = current
                    events.put(ResizeEvent(*current))

                key = keys.read(poll)
                if key:
                    events.put(KeyEvent(key))

                dispatched, stop = drain(dashboard, events, runner)
                if stop:
                    return 0
                if dispatched:
                    live.update(Text.from_ansi(dashboard.render()), refresh=True)
        except KeyboardInterrupt:
            logger.info("interrupted")
            return 0
        finally:
            runner.shutdown()
