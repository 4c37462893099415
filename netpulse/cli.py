"""
netpulse command line.

Usage:
  netpulse
  netpulse --interval 5s --url https://example.com --timeout 2s
  netpulse --config ./netpulse.yaml --plain -v
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import (
    ConfigError,
    MonitorConfig,
    build_config,
    load_config,
    parse_attribution,
    parse_duration,
)
from .monitor import Monitor, install_signal_handlers
from .probe import Prober
from .stats import Summary
from .tui import LiveDisplay, LogDisplay, print_summary

app = typer.Typer(add_completion=False, help="Live internet connection monitor")
console = Console()
err_console = Console(stderr=True)

log = logging.getLogger("netpulse")


def setup_logging(verbose: bool) -> None:
    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    log.handlers[:] = [handler]
    log.setLevel(logging.DEBUG if verbose else logging.WARNING)
    log.propagate = False


def resolve_config(config: Optional[str], interval: Optional[str], url: Optional[str],
                   timeout: Optional[str], attribution: Optional[str]) -> MonitorConfig:
    file_values = load_config(config) if config else {}
    return build_config(
        file_values,
        interval=parse_duration(interval) if interval is not None else None,
        url=url,
        timeout=parse_duration(timeout) if timeout is not None else None,
        attribution=parse_attribution(attribution) if attribution is not None else None,
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"netpulse {__version__}")
        raise typer.Exit()


@app.command()
def monitor(
    interval: Optional[str] = typer.Option(None, help="Interval between connection checks (e.g. 2s, 1m) [default: 2s]"),
    url: Optional[str] = typer.Option(None, help="URL to test connection against [default: https://www.google.com]"),
    timeout: Optional[str] = typer.Option(None, help="HTTP request timeout (e.g. 5s) [default: 5s]"),
    config: Optional[str] = typer.Option(None, help="Path to YAML config (command-line options win)"),
    attribution: Optional[str] = typer.Option(None, help="Credit each interval to the 'current' or 'previous' status [default: current]"),
    plain: bool = typer.Option(False, "--plain", help="Print one line per check instead of the live screen"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging to stderr"),
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"),
):
    """Probe the target URL every interval and show live connection status."""
    setup_logging(verbose)
    try:
        cfg = resolve_config(config, interval, url, timeout, attribution)
    except ConfigError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    log.debug("config: %s", cfg)

    if plain or not console.is_terminal:
        display = LogDisplay(cfg.url, console=console, verbose=verbose)
    else:
        display = LiveDisplay(cfg.url, console=console, verbose=verbose)

    stop = threading.Event()
    with Prober(cfg.url, cfg.timeout) as prober, install_signal_handlers(stop):
        with display:
            mon = Monitor(prober, display, cfg.interval, attribution=cfg.attribution, stop=stop)
            state = mon.run()
    print_summary(console, Summary.from_state(state))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
