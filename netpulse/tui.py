"""
Terminal rendering for the connection monitor.

Two displays share one ``render(state, result, now)`` method:

- LiveDisplay: rich ``Live`` region redrawn in place every tick
- LogDisplay:  one plain line per tick, for pipes and log files

plus the formatting helpers and the exit summary printer.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Protocol

from rich import box
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from .probe import ProbeResult
from .stats import MonitorState, Summary

log = logging.getLogger(__name__)

UNKNOWN = "Unknown"


# --------------------
# Formatting
# --------------------

def format_duration(seconds: float) -> str:
    """Whole-second duration as '1h 2m 3s', dropping zero leading units."""
    total = int(max(0.0, seconds) + 0.5)
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    if h > 0:
        return f"{h}h {m}m {s}s"
    if m > 0:
        return f"{m}m {s}s"
    return f"{s}s"


def format_latency(seconds: Optional[float]) -> str:
    """Latency at millisecond resolution: '87ms', '1.25s'."""
    if seconds is None:
        return UNKNOWN
    ms = int(max(0.0, seconds) * 1000 + 0.5)
    if ms < 1000:
        return f"{ms}ms"
    return f"{ms / 1000:.3f}".rstrip("0").rstrip(".") + "s"


def fmt_availability(pct: Optional[float]) -> Text:
    if pct is None:
        return Text("--", style="dim")
    val = max(0.0, min(100.0, pct))
    if val >= 99.0:
        style = "bold green"
    elif val >= 95.0:
        style = "yellow"
    elif val >= 80.0:
        style = "red"
    else:
        style = "bold red"
    return Text(f"{val:.2f}%", style=style)


def status_text(connected: bool, stamp: str) -> Text:
    if connected:
        return Text(f"[{stamp}] ✓ CONNECTED    ", style="bold green")
    return Text(f"[{stamp}] ✗ DISCONNECTED ", style="bold red")


# --------------------
# Displays
# --------------------

class Display(Protocol):
    def render(self, state: MonitorState, result: ProbeResult, now: float) -> None:
        ...


def build_view(url: str, state: MonitorState, result: ProbeResult, now: float,
               stamp: str, verbose: bool = False) -> Panel:
    connected = state.last_status
    line = status_text(connected, stamp)
    in_state = state.time_in_state(now)
    if in_state > 0:
        line.append(f"Duration: {format_duration(in_state)}", style="cyan")

    rows = [line]
    if connected:
        rows.append(Text(f"Network Latency: {format_latency(result.latency)}"))
    elif verbose:
        rows.append(Text(f"Last error: {result.describe()}", style="dim"))

    totals = Text(f"Uptime: {format_duration(state.uptime)}  ", style="green")
    totals.append(f"Downtime: {format_duration(state.downtime)}  ", style="red")
    totals.append("Availability: ")
    totals.append_text(fmt_availability(state.availability))
    rows.append(Text(""))
    rows.append(totals)

    header = Text(f"Testing connection to: {url}\n", style="bold")
    header.append("Press Ctrl+C to exit", style="dim")
    return Panel(Group(header, Text(""), *rows), title="Internet Connection Monitor", box=box.SQUARE)


class LiveDisplay:
    """In-place status region; use as a context manager around the loop."""

    def __init__(self, url: str, console: Optional[Console] = None,
                 wallclock: Callable[[], datetime] = datetime.now, verbose: bool = False):
        self.url = url
        self.console = console or Console()
        self.wallclock = wallclock
        self.verbose = verbose
        self._live: Optional[Live] = None

    def __enter__(self) -> "LiveDisplay":
        self._live = Live(Text("Starting…"), console=self.console, auto_refresh=False, transient=False)
        self._live.__enter__()
        return self

    def __exit__(self, *exc) -> None:
        if self._live is not None:
            self._live.__exit__(*exc)
            self._live = None

    def render(self, state: MonitorState, result: ProbeResult, now: float) -> None:
        stamp = self.wallclock().strftime("%H:%M:%S")
        try:
            view = build_view(self.url, state, result, now, stamp, verbose=self.verbose)
        except Exception as e:
            log.debug("render failed", exc_info=True)
            view = Panel(Text(f"Error: {e}", style="red"), title="Internet Connection Monitor")
        if self._live is None:
            self.console.print(view)
        else:
            self._live.update(view, refresh=True)


class LogDisplay:
    """One line per tick, no cursor movement."""

    def __init__(self, url: str, console: Optional[Console] = None,
                 wallclock: Callable[[], datetime] = datetime.now, verbose: bool = False):
        self.url = url
        self.console = console or Console()
        self.wallclock = wallclock
        self.verbose = verbose

    def __enter__(self) -> "LogDisplay":
        self.console.print(f"Internet Connection Monitor, testing {self.url} (Ctrl+C to exit)")
        return self

    def __exit__(self, *exc) -> None:
        pass

    def render(self, state: MonitorState, result: ProbeResult, now: float) -> None:
        stamp = self.wallclock().strftime("%H:%M:%S")
        line = status_text(state.last_status, stamp)
        in_state = state.time_in_state(now)
        if in_state > 0:
            line.append(f"Duration: {format_duration(in_state)}", style="cyan")
        if state.last_status:
            line.append(f"  Latency: {format_latency(result.latency)}")
        elif self.verbose:
            line.append(f"  ({result.describe()})", style="dim")
        self.console.print(line)


# --------------------
# Exit summary
# --------------------

def print_summary(console: Console, summary: Summary) -> None:
    console.print()
    console.print("Exiting Connection Monitor", style="bold")
    if summary.monitored > 0:
        console.print(f"Monitored for: {format_duration(summary.monitored)}")
    console.print(f"Total uptime: {format_duration(summary.uptime)}")
    console.print(f"Total downtime: {format_duration(summary.downtime)}")
    if summary.availability is not None:
        avail = Text("Availability: ")
        avail.append_text(fmt_availability(summary.availability))
        avail.append(f" ({summary.outages} outage{'s' if summary.outages != 1 else ''})")
        console.print(avail)
        console.print(f"Status changes: {summary.transitions}")
    if summary.samples > 0:
        console.print(f"Min latency: {format_latency(summary.min_latency)}")
        console.print(f"Max latency: {format_latency(summary.max_latency)}")
        console.print(f"Avg latency: {format_latency(summary.avg_latency)}")
