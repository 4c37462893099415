"""
Monitor configuration: defaults, duration parsing and optional YAML file.

Example config.yaml:

  interval: 2s
  url: https://www.google.com
  timeout: 5s
  attribution: current   # current|previous
"""
from __future__ import annotations

import enum
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from urllib.parse import urlparse

import yaml

DEFAULT_INTERVAL = 2.0
DEFAULT_URL = "https://www.google.com"
DEFAULT_TIMEOUT = 5.0

MIN_INTERVAL = 0.01
MAX_INTERVAL = 24 * 3600.0
MAX_TIMEOUT = 3600.0

# Go-style durations: 500ms, 2s, 1m30s, 1.5h
_DURATION_PART_RE = re.compile(r"(?P<num>[0-9]*\.?[0-9]+)(?P<unit>ns|us|µs|ms|s|m|h)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


class ConfigError(ValueError):
    """Raised for invalid configuration values or files."""


class Attribution(enum.Enum):
    """Which status a tick's elapsed interval is credited to."""
    CURRENT = "current"    # status observed by the probe ending the interval
    PREVIOUS = "previous"  # status held while the interval elapsed


@dataclass
class MonitorConfig:
    interval: float = DEFAULT_INTERVAL
    url: str = DEFAULT_URL
    timeout: float = DEFAULT_TIMEOUT
    attribution: Attribution = Attribution.CURRENT

    def validate(self) -> "MonitorConfig":
        if not (math.isfinite(self.interval) and MIN_INTERVAL <= self.interval <= MAX_INTERVAL):
            raise ConfigError(f"interval must be between {MIN_INTERVAL}s and {MAX_INTERVAL:.0f}s, got {self.interval}")
        if not (math.isfinite(self.timeout) and 0 < self.timeout <= MAX_TIMEOUT):
            raise ConfigError(f"timeout must be positive and at most {MAX_TIMEOUT:.0f}s, got {self.timeout}")
        try:
            parsed = urlparse(self.url)
        except ValueError as e:
            raise ConfigError(f"Invalid url '{self.url}': {e}") from None
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"url must be an absolute http(s) URL, got '{self.url}'")
        return self


def parse_duration(value: Union[str, int, float]) -> float:
    """Parse '2s', '500ms', '1m30s' or a bare number of seconds into seconds."""
    if isinstance(value, bool):
        raise ConfigError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            raise ConfigError(f"Duration out of range: {value!r}") from None
    text = str(value).strip()
    if not text:
        raise ConfigError("Empty duration")
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise ConfigError(f"Invalid duration: '{text}'")
        return seconds
    total = 0.0
    pos = 0
    for m in _DURATION_PART_RE.finditer(text):
        if m.start() != pos:
            raise ConfigError(f"Invalid duration: '{text}'")
        total += float(m.group("num")) * _UNIT_SECONDS[m.group("unit")]
        pos = m.end()
    if pos != len(text):
        raise ConfigError(f"Invalid duration: '{text}'")
    return total


def parse_attribution(value: str) -> Attribution:
    try:
        return Attribution(str(value).strip().lower())
    except ValueError:
        choices = "|".join(a.value for a in Attribution)
        raise ConfigError(f"Invalid attribution '{value}' (expected {choices})") from None


def load_config(path: str) -> Dict[str, Any]:
    """Read a YAML config file and return the recognized, parsed keys.

    Only keys present in the file are returned so the caller can layer
    command-line options on top.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from None
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from None
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    unknown = set(raw) - {"interval", "url", "timeout", "attribution"}
    if unknown:
        raise ConfigError(f"Unknown config key(s): {', '.join(sorted(unknown))}")

    out: Dict[str, Any] = {}
    if "interval" in raw:
        out["interval"] = parse_duration(raw["interval"])
    if "timeout" in raw:
        out["timeout"] = parse_duration(raw["timeout"])
    if "url" in raw:
        out["url"] = str(raw["url"])
    if "attribution" in raw:
        out["attribution"] = parse_attribution(raw["attribution"])
    return out


def build_config(file_values: Optional[Dict[str, Any]] = None, **overrides: Any) -> MonitorConfig:
    """Merge defaults, config file values and explicit overrides (None = unset)."""
    values: Dict[str, Any] = dict(file_values or {})
    for key, val in overrides.items():
        if val is not None:
            values[key] = val
    return MonitorConfig(**values).validate()
