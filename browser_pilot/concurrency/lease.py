"""
Serialization primitives for driving a single browser page.

Only one command may touch the page at a time; the CommandLease is the one
place where that ordering is enforced.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from types import TracebackType
from typing import Optional, Type

from browser_pilot.exceptions import LockTimeoutError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def timed_lock(lock: asyncio.Lock, timeout: float):
	"""Acquire `lock` within `timeout` seconds or raise LockTimeoutError.

	Usage:
		async with timed_lock(self._lock, 5.0):
			...
	"""
	try:
		await asyncio.wait_for(lock.acquire(), timeout=timeout)
	except asyncio.TimeoutError as e:
		raise LockTimeoutError(f'Failed to acquire lock within {timeout}s') from e
	try:
		yield
	finally:
		lock.release()


class CommandLease:
	"""Single-permit lease that serializes browser commands.

	Usage:
		lease = CommandLease(timeout=120)
		async with lease:
			await session.ensure_ready()
			await page.goto(url)
	"""

	def __init__(self, timeout: float = 120.0):
		self._timeout = timeout
		self._lock = asyncio.Lock()
		self._waiting = 0

	@property
	def busy(self) -> bool:
		"""True while a command holds the lease."""
		return self._lock.locked()

	async def __aenter__(self) -> CommandLease:
		self._waiting += 1
		try:
			await asyncio.wait_for(self._lock.acquire(), timeout=self._timeout)
		except asyncio.TimeoutError as e:
			logger.warning(f'⏳ Command lease not acquired after {self._timeout}s ({self._waiting - 1} other command(s) queued)')
			raise LockTimeoutError(f'Browser is busy, gave up waiting after {self._timeout}s') from e
		finally:
			self._waiting -= 1
		return self

	async def __aexit__(
		self,
		exc_type: Optional[Type[BaseException]],
		exc: Optional[BaseException],
		tb: Optional[TracebackType],
	) -> bool:
		self._lock.release()
		return False
