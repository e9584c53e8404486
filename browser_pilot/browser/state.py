from __future__ import annotations

import asyncio
import logging
from dataclasses import fields
from typing import Any, Optional

from browser_pilot.browser.views import ATTACHED_STATES, BLANK_URL, LifecycleState, SessionSnapshot, SessionState
from browser_pilot.concurrency import timed_lock

logger = logging.getLogger(__name__)


class SessionStateManager:
	"""Owns the SessionState record and applies every transition under a single lock.

	No method awaits browser I/O while holding the lock, so readers such as the
	health endpoint never queue behind a slow navigation.
	"""

	def __init__(self, max_launch_retries: int = 3, lock_timeout_seconds: float = 5.0):
		self._state = SessionState()
		self._lock = asyncio.Lock()
		self.max_launch_retries = max_launch_retries
		self.lock_timeout_seconds = lock_timeout_seconds
		self._stale: list[tuple[Any, Any]] = []

	async def snapshot(self) -> SessionSnapshot:
		async with timed_lock(self._lock, self.lock_timeout_seconds):
			return self._snapshot_internal()

	def _snapshot_internal(self) -> SessionSnapshot:
		# dataclasses.asdict would deep-copy the playwright handles
		return SessionSnapshot(**{f.name: getattr(self._state, f.name) for f in fields(SessionState)})

	def _set_lifecycle_internal(self, new_state: LifecycleState) -> None:
		"""Internal, non-locking. Must be called from within a held lock."""
		if self._state.lifecycle != new_state:
			logger.debug(f'Session transition: {self._state.lifecycle.value} -> {new_state.value}')
			self._state.lifecycle = new_state

	def _detach_internal(self, new_state: LifecycleState) -> None:
		if self._state.browser is not None or self._state.context is not None:
			self._stale.append((self._state.browser, self._state.context))
		self._state.browser = None
		self._state.context = None
		self._state.page = None
		self._set_lifecycle_internal(new_state)

	# region - launch transitions

	async def begin_launch(self) -> bool:
		"""Atomically claim the starting guard. Returns False if a launch is already in flight."""
		async with timed_lock(self._lock, self.lock_timeout_seconds):
			if self._state.starting:
				return False
			self._state.starting = True
			self._state.retry_count = 0
			self._detach_internal(LifecycleState.STARTING)
			return True

	def pop_stale_handles(self) -> list[tuple[Any, Any]]:
		"""Hand over (browser, context) pairs detached from the record so the caller can close them."""
		stale, self._stale = self._stale, []
		return stale

	async def mark_ready(self, browser: Any, context: Any, page: Any, url: str) -> None:
		async with timed_lock(self._lock, self.lock_timeout_seconds):
			self._state.browser = browser
			self._state.context = context
			self._state.page = page
			self._state.current_url = url
			self._state.retry_count = 0
			self._state.last_error = None
			self._state.starting = False
			self._set_lifecycle_internal(LifecycleState.READY)

	async def record_launch_failure(self, error: str) -> bool:
		"""Count a failed attempt. Returns True if another attempt is allowed.

		On exhaustion the session settles in ERROR and the starting guard is released.
		"""
		async with timed_lock(self._lock, self.lock_timeout_seconds):
			self._state.last_error = error
			if self._state.retry_count < self.max_launch_retries:
				self._state.retry_count += 1
				return True
			self._state.starting = False
			self._set_lifecycle_internal(LifecycleState.ERROR)
			return False

	async def abort_launch(self, error: str) -> None:
		"""Release the starting guard after an interrupted launch (e.g. cancellation)."""
		async with timed_lock(self._lock, self.lock_timeout_seconds):
			if not self._state.starting:
				return
			self._state.starting = False
			self._state.last_error = error
			self._set_lifecycle_internal(LifecycleState.ERROR)

	# endregion

	async def detach(self, new_state: LifecycleState = LifecycleState.DISCONNECTED, browser: Any = None) -> bool:
		"""Drop browser/context/page together.

		If `browser` is given, only detach when it is the currently attached one, so
		late events from an already replaced browser are ignored. Returns True if
		the record changed.
		"""
		async with timed_lock(self._lock, self.lock_timeout_seconds):
			if browser is not None and browser is not self._state.browser:
				return False
			if self._state.browser is None and self._state.lifecycle == new_state:
				return False
			self._detach_internal(new_state)
			return True

	async def begin_navigation(self) -> None:
		async with timed_lock(self._lock, self.lock_timeout_seconds):
			if self._state.lifecycle == LifecycleState.READY:
				self._set_lifecycle_internal(LifecycleState.NAVIGATING)

	async def end_navigation(self, url: Optional[str] = None) -> None:
		"""Return to READY; record `url` only when the navigation was confirmed."""
		async with timed_lock(self._lock, self.lock_timeout_seconds):
			if url is not None and self._state.lifecycle in ATTACHED_STATES:
				self._state.current_url = url
			if self._state.lifecycle == LifecycleState.NAVIGATING:
				self._set_lifecycle_internal(LifecycleState.READY)

	async def set_current_url(self, url: str, page: Any = None) -> None:
		async with timed_lock(self._lock, self.lock_timeout_seconds):
			if page is not None and page is not self._state.page:
				return
			self._state.current_url = url or BLANK_URL

	async def set_screenshot_ref(self, ref: str) -> None:
		async with timed_lock(self._lock, self.lock_timeout_seconds):
			self._state.screenshot_ref = ref
