"""
Reachability probe: a single HTTP GET against the target URL.

A probe never raises. Timeouts, connection failures and non-2xx responses all
come back as ``reachable=False``; the kind of failure is kept on the result
for the verbose display and debug log.
"""
from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from . import __version__

log = logging.getLogger(__name__)

USER_AGENT = f"netpulse/{__version__}"


class ProbeError(enum.Enum):
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    HTTP_STATUS = "http_status"
    REQUEST = "request"


@dataclass(frozen=True)
class ProbeResult:
    reachable: bool
    latency: Optional[float] = None  # seconds, only when reachable
    error: Optional[ProbeError] = None
    status_code: Optional[int] = None

    def describe(self) -> str:
        if self.reachable:
            return "ok"
        if self.error is ProbeError.HTTP_STATUS:
            return f"HTTP {self.status_code}"
        return self.error.value if self.error else "unreachable"


def probe(session: requests.Session, url: str, timeout: float,
          timer: Callable[[], float] = time.perf_counter) -> ProbeResult:
    """Issue one GET and classify it. Reachable iff 200 <= status < 300."""
    start = timer()
    try:
        # stream=True: headers are enough, the body is never downloaded
        resp = session.get(url, timeout=timeout, stream=True)
    except requests.Timeout:
        log.debug("probe %s: timed out after %.1fs", url, timeout)
        return ProbeResult(reachable=False, error=ProbeError.TIMEOUT)
    except requests.ConnectionError as e:
        log.debug("probe %s: connection error: %s", url, e)
        return ProbeResult(reachable=False, error=ProbeError.CONNECTION)
    except requests.RequestException as e:
        log.debug("probe %s: request failed: %s", url, e)
        return ProbeResult(reachable=False, error=ProbeError.REQUEST)
    latency = timer() - start
    try:
        code = resp.status_code
    finally:
        resp.close()
    if 200 <= code < 300:
        log.debug("probe %s: HTTP %d in %.1fms", url, code, latency * 1000)
        return ProbeResult(reachable=True, latency=latency, status_code=code)
    log.debug("probe %s: HTTP %d", url, code)
    return ProbeResult(reachable=False, error=ProbeError.HTTP_STATUS, status_code=code)


class Prober:
    """Bound probe for one target; owns the HTTP session."""

    def __init__(self, url: str, timeout: float, session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
        self.session = session

    def __call__(self) -> ProbeResult:
        return probe(self.session, self.url, self.timeout)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "Prober":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
