"""
Monitor loop: one immediate probe, then probe -> accounting -> display on every
timer tick until the stop event is set (SIGINT/SIGTERM).

Everything runs on the calling thread; the only other actor is the signal
handler, which just sets the stop event.
"""
from __future__ import annotations

import contextlib
import logging
import math
import signal
import threading
import time
from typing import Callable, Iterator, Optional

from .config import Attribution
from .probe import ProbeResult
from .stats import MonitorState
from .tui import Display

log = logging.getLogger(__name__)


class Monitor:
    def __init__(self,
                 prober: Callable[[], ProbeResult],
                 display: Display,
                 interval: float,
                 attribution: Attribution = Attribution.CURRENT,
                 clock: Callable[[], float] = time.monotonic,
                 stop: Optional[threading.Event] = None):
        self.prober = prober
        self.display = display
        self.interval = interval
        self.attribution = attribution
        self.clock = clock
        self.stop = stop if stop is not None else threading.Event()
        self.state: Optional[MonitorState] = None

    def start(self) -> MonitorState:
        """Startup probe; seeds the state with the current time."""
        result = self.prober()
        now = self.clock()
        self.state = MonitorState.seed(result, now, self.attribution)
        log.debug("initial probe: %s", result.describe())
        self._render(result, now)
        return self.state

    def tick(self) -> ProbeResult:
        if self.state is None:
            raise RuntimeError("Monitor.tick() called before start()")
        result = self.prober()
        now = self.clock()
        elapsed = self.state.record(result, now)
        log.debug("tick %d: %s, %.3fs credited", self.state.ticks, result.describe(), elapsed)
        self._render(result, now)
        return result

    def run(self) -> MonitorState:
        """Loop until stopped; returns the final state for the summary."""
        state = self.start()
        deadline = self.clock() + self.interval
        while not self.stop.is_set():
            delay = deadline - self.clock()
            if delay > 0 and self.stop.wait(delay):
                break
            if self.stop.is_set():
                break
            self.tick()
            # ticker semantics: a slow tick drops the deadlines it overran
            now = self.clock()
            deadline += self.interval
            if deadline <= now:
                deadline += math.ceil((now - deadline) / self.interval) * self.interval
                if deadline <= now:
                    deadline = now + self.interval
        log.debug("stopped after %d ticks", state.ticks)
        return state

    def _render(self, result: ProbeResult, now: float) -> None:
        try:
            self.display.render(self.state, result, now)
        except Exception:
            log.debug("display render failed", exc_info=True)


@contextlib.contextmanager
def install_signal_handlers(stop: threading.Event) -> Iterator[None]:
    """Route SIGINT/SIGTERM to ``stop.set()`` for the duration of the block."""
    def _handle(signum, _frame):
        log.debug("received signal %d", signum)
        stop.set()

    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            previous[sig] = signal.signal(sig, _handle)
        except (ValueError, OSError):
            # not the main thread, or unsupported on this platform
            pass
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
