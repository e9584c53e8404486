"""
Centralized timing utilities.

- Uses monotonic time for durations and process uptime
- Exposes UTC timestamp helpers for logs and API responses
- Hands out strictly increasing millisecond tokens for cache-busting URLs
"""
from __future__ import annotations

import threading
import time
from datetime import datetime, timezone

_PROCESS_START_MONOTONIC = time.monotonic()
_PROCESS_START_WALL = time.time()

_token_lock = threading.Lock()
_last_token = 0


def monotonic_seconds() -> float:
	"""Current monotonic time in seconds."""
	return time.monotonic()


def uptime_seconds() -> float:
	"""Seconds since process start based on monotonic clock."""
	return time.monotonic() - _PROCESS_START_MONOTONIC


def now_utc_iso(ms: bool = True) -> str:
	"""ISO-8601 UTC timestamp string suitable for logs (e.g., 2025-08-25T12:34:56.789Z)."""
	dt = datetime.now(timezone.utc)
	if ms:
		return dt.isoformat(timespec='milliseconds').replace('+00:00', 'Z')
	return dt.isoformat().replace('+00:00', 'Z')


def process_start_utc_iso() -> str:
	"""UTC ISO for process start time (approx; uses wall clock at import)."""
	return datetime.fromtimestamp(_PROCESS_START_WALL, tz=timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def freshness_token() -> int:
	"""Wall-clock milliseconds, bumped so that every call returns a larger value than the last."""
	global _last_token
	with _token_lock:
		token = max(int(time.time() * 1000), _last_token + 1)
		_last_token = token
		return token
