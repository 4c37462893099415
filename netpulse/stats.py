"""
Connection accounting: the CONNECTED/DISCONNECTED state machine, uptime and
downtime totals, and latency aggregates.

All times are monotonic-clock seconds. The state is created once from the
startup probe (``MonitorState.seed``) and then updated exactly once per tick
(``MonitorState.record``).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import Attribution
from .probe import ProbeResult


@dataclass
class MonitorState:
    last_status: bool
    started_at: float
    status_change_time: float  # last accounting mark, moved every tick
    transition_time: float     # when last_status began
    attribution: Attribution = Attribution.CURRENT
    uptime: float = 0.0
    downtime: float = 0.0
    min_latency: Optional[float] = None
    max_latency: Optional[float] = None
    total_latency: float = 0.0
    latency_count: int = 0
    transitions: int = 0
    outages: int = 0  # disconnected periods entered, including a down start
    ticks: int = 0

    @classmethod
    def seed(cls, result: ProbeResult, now: float,
             attribution: Attribution = Attribution.CURRENT) -> "MonitorState":
        state = cls(
            last_status=result.reachable,
            started_at=now,
            status_change_time=now,
            transition_time=now,
            attribution=attribution,
            outages=0 if result.reachable else 1,
        )
        state._add_latency(result)
        return state

    def record(self, result: ProbeResult, now: float) -> float:
        """Account one tick and return the elapsed interval it covered."""
        elapsed = max(0.0, now - self.status_change_time)
        if self.attribution is Attribution.PREVIOUS:
            credited = self.last_status
        else:
            credited = result.reachable
        if credited:
            self.uptime += elapsed
        else:
            self.downtime += elapsed

        self.status_change_time = now
        if result.reachable != self.last_status:
            self.last_status = result.reachable
            self.transition_time = now
            self.transitions += 1
            if not result.reachable:
                self.outages += 1

        self._add_latency(result)
        self.ticks += 1
        return elapsed

    def _add_latency(self, result: ProbeResult) -> None:
        lat = result.latency
        if not result.reachable or lat is None or lat <= 0:
            return
        if self.min_latency is None or lat < self.min_latency:
            self.min_latency = lat
        if self.max_latency is None or lat > self.max_latency:
            self.max_latency = lat
        self.total_latency += lat
        self.latency_count += 1

    # --------------------
    # Derived values
    # --------------------

    @property
    def average_latency(self) -> Optional[float]:
        if not self.latency_count:
            return None
        return self.total_latency / self.latency_count

    @property
    def accounted(self) -> float:
        return self.uptime + self.downtime

    @property
    def availability(self) -> Optional[float]:
        """Percent of accounted time spent connected."""
        if self.accounted <= 0:
            return None
        return 100.0 * self.uptime / self.accounted

    def time_in_state(self, now: float) -> float:
        return max(0.0, now - self.transition_time)


@dataclass
class Summary:
    uptime: float
    downtime: float
    min_latency: Optional[float]
    max_latency: Optional[float]
    avg_latency: Optional[float]
    samples: int
    availability: Optional[float]
    outages: int
    transitions: int = 0
    monitored: float = 0.0  # startup probe to last tick

    @classmethod
    def from_state(cls, state: MonitorState) -> "Summary":
        return cls(
            uptime=state.uptime,
            downtime=state.downtime,
            min_latency=state.min_latency,
            max_latency=state.max_latency,
            avg_latency=state.average_latency,
            samples=state.latency_count,
            availability=state.availability,
            outages=state.outages,
            transitions=state.transitions,
            monitored=max(0.0, state.status_change_time - state.started_at),
        )
