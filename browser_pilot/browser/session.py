from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, InstanceOf, PrivateAttr

from browser_pilot.browser.profile import BrowserProfile
from browser_pilot.browser.screenshot import ScreenshotPipeline
from browser_pilot.browser.state import SessionStateManager
from browser_pilot.browser.utils import _log_pretty_url
from browser_pilot.browser.views import HealthStatus, LifecycleState, SessionSnapshot
from browser_pilot.concurrency import CommandLease
from browser_pilot.config import CONFIG
from browser_pilot.exceptions import BrowserDisconnectedError, BrowserStartingError, LaunchError


class BrowserSession(BaseModel):
	"""
	Owns the one visible browser + page pair and keeps it alive.

	- launch(): bounded retry loop that (re)starts chromium, opens a single page and
	  navigates it to the home URL
	- ensure_ready(): precondition for every command, lazily launches and refuses to
	  start a second launch while one is in flight
	- observers: page navigations update the current URL, browser disconnects and
	  page crashes trigger a background relaunch
	- status(): read-only health projection, never launches

	Playwright (or a stand-in with the same async API) can be passed as playwright=...;
	otherwise it is started on first launch and stopped by stop().
	"""

	model_config = ConfigDict(
		extra='forbid',
		arbitrary_types_allowed=True,
		validate_assignment=False,
		validate_by_alias=True,
		validate_by_name=True,
	)

	id: str = Field(default_factory=lambda: uuid.uuid4().hex)
	browser_profile: InstanceOf[BrowserProfile] = Field(
		default_factory=BrowserProfile,
		validation_alias=AliasChoices('browser_profile', 'profile'),
	)
	public_dir: Path = Field(
		default_factory=lambda: CONFIG.BROWSER_PILOT_PUBLIC_DIR,
		description='Directory served as static content; the screenshot file lives here',
	)
	playwright: Optional[Any] = Field(
		default=None,
		description='Playwright library object returned by: await async_playwright().start()',
		exclude=True,
	)
	command_lock_timeout: float = Field(default_factory=lambda: CONFIG.BROWSER_PILOT_COMMAND_LOCK_TIMEOUT, gt=0)

	_state: SessionStateManager = PrivateAttr()
	_screenshots: ScreenshotPipeline = PrivateAttr()
	_command_lease: CommandLease = PrivateAttr()
	_owns_playwright: bool = PrivateAttr(default=False)
	_closing: bool = PrivateAttr(default=False)
	_background_tasks: set[asyncio.Task] = PrivateAttr(default_factory=set)
	_logger: Optional[logging.Logger] = PrivateAttr(default=None)

	def model_post_init(self, __context: Any) -> None:
		self._state = SessionStateManager(max_launch_retries=self.browser_profile.max_launch_retries)
		self._screenshots = ScreenshotPipeline(self._state, self.browser_profile, self.public_dir)
		self._command_lease = CommandLease(timeout=self.command_lock_timeout)

	@property
	def logger(self) -> logging.Logger:
		"""Instance-specific logger with the session ID in the name"""
		if self._logger is None:
			self._logger = logging.getLogger(f'browser_pilot.{self}')
		return self._logger

	def __str__(self) -> str:
		return f'BrowserSession🆂 {self.id[-4:]}'

	def __repr__(self) -> str:
		return f'BrowserSession🆂 {self.id[-4:]} (headless={self.browser_profile.headless}, home={self.browser_profile.home_url})'

	@property
	def state(self) -> SessionStateManager:
		return self._state

	@property
	def screenshots(self) -> ScreenshotPipeline:
		return self._screenshots

	@property
	def command_lease(self) -> CommandLease:
		"""The single serialization point for everything that touches the page."""
		return self._command_lease

	# region - availability guard & health

	async def ensure_ready(self) -> SessionSnapshot:
		"""Make sure a browser and page exist before a command runs.

		Raises BrowserStartingError if another launch is already in flight and
		LaunchError if launching failed after all retries.
		"""
		snapshot = await self._state.snapshot()
		if snapshot.browser is not None and snapshot.page is not None:
			return snapshot

		if not await self._state.begin_launch():
			self.logger.info('⏳ Browser already starting, rejecting request')
			raise BrowserStartingError('Browser is starting, retry shortly')

		self.logger.info('🔄 Browser not running, starting...')
		await self.launch()
		return await self._state.snapshot()

	async def status(self) -> HealthStatus:
		snapshot = await self._state.snapshot()
		return HealthStatus(
			status='ready' if snapshot.is_ready else 'starting',
			url=snapshot.current_url,
			screenshot=snapshot.screenshot_ref,
			state=snapshot.lifecycle,
		)

	async def get_current_page(self) -> Any:
		snapshot = await self._state.snapshot()
		if snapshot.page is None:
			raise BrowserDisconnectedError('Browser is not connected')
		return snapshot.page

	# endregion

	# region - lifecycle

	async def start(self) -> bool:
		"""Claim the starting guard and launch. Returns False if a launch was already in flight."""
		if not await self._state.begin_launch():
			return False
		await self.launch()
		return True

	def start_in_background(self) -> asyncio.Task:
		"""Eager launch at process start, without blocking the caller."""
		return self._spawn(self._start_logged('startup'), name='browser-startup')

	async def launch(self) -> None:
		"""Bring the session to READY or fail definitively.

		The caller must already hold the starting guard (SessionStateManager.begin_launch()),
		so that checking the guard and launching is one step from the caller's side.
		Runs at most max_launch_retries + 1 attempts.
		"""
		attempt = 0
		# (browser, context) of the current attempt until mark_ready() publishes them
		unpublished: Optional[tuple[Any, Any]] = None
		try:
			while True:
				attempt += 1
				await self._close_stale_handles()
				try:
					browser, context, page = await self._launch_attempt(attempt)
					unpublished = (browser, context)
					# the page is not published yet, so nothing else can be driving it during this capture
					await self._screenshots.capture(page)
					if not browser.is_connected() or page.is_closed():
						raise BrowserDisconnectedError('Browser disconnected before it became ready')
				except Exception as e:
					if unpublished is not None:
						await self._close_handles(*unpublished)
						unpublished = None
					error = f'{type(e).__name__}: {e}'
					self.logger.error(f'❌ Browser launch attempt {attempt} failed: {error}')
					if not await self._state.record_launch_failure(error):
						raise LaunchError(f'Failed to start browser after {attempt} attempts ({error})') from e
					if self.browser_profile.launch_retry_delay:
						await asyncio.sleep(self.browser_profile.launch_retry_delay)
					continue
				break
			await self._state.mark_ready(browser, context, page, page.url or self.browser_profile.home_url)
			unpublished = None
		except BaseException as e:
			if unpublished is not None:
				await self._close_handles(*unpublished)
			# no-op when the guard was already released by record_launch_failure()
			await self._state.abort_launch(f'{type(e).__name__}: {e}')
			raise

		self.logger.info(f'✅ Browser ready on {_log_pretty_url(page.url or "")} after {attempt} attempt(s)')

	async def _launch_attempt(self, attempt: int) -> tuple[Any, Any, Any]:
		profile = self.browser_profile
		playwright = await self._get_playwright()

		self.logger.info(f'🚀 Starting chromium (attempt {attempt}, headless={profile.headless})...')
		browser = await playwright.chromium.launch(**profile.kwargs_for_launch())
		context = None
		try:
			context = await browser.new_context(**profile.kwargs_for_new_context())
			page = await context.new_page()
			self._register_observers(browser, page)

			self.logger.info(f'🌐 Navigating to home page {_log_pretty_url(profile.home_url)}...')
			await page.goto(profile.home_url, wait_until='networkidle', timeout=profile.navigation_timeout_ms)
		except BaseException:
			await self._close_handles(browser, context)
			raise
		return browser, context, page

	async def _get_playwright(self) -> Any:
		if self.playwright is None:
			from browser_pilot.browser.types import async_playwright

			self.playwright = await async_playwright().start()
			self._owns_playwright = True
		return self.playwright

	async def stop(self) -> None:
		"""Close the browser and release every resource. Safe to call more than once."""
		self._closing = True
		try:
			tasks = [task for task in self._background_tasks if not task.done()]
			for task in tasks:
				task.cancel()
			if tasks:
				await asyncio.gather(*tasks, return_exceptions=True)

			if await self._state.detach(LifecycleState.UNINITIALIZED):
				self.logger.info('🛑 Closing browser')
			await self._close_stale_handles()

			if self.playwright is not None and self._owns_playwright:
				try:
					await self.playwright.stop()
				except Exception as e:
					self.logger.debug(f'Error stopping playwright: {type(e).__name__}: {e}')
				self.playwright = None
				self._owns_playwright = False
		finally:
			self._closing = False

	async def _close_stale_handles(self) -> None:
		for browser, context in self._state.pop_stale_handles():
			await self._close_handles(browser, context)

	async def _close_handles(self, browser: Any, context: Any) -> None:
		"""Close context then browser. Failures are logged and never block a relaunch."""
		for handle in (context, browser):
			if handle is None:
				continue
			try:
				await asyncio.wait_for(handle.close(), timeout=self.browser_profile.close_timeout_s)
			except Exception as e:
				if 'closed' in str(e).lower():
					continue
				self.logger.warning(f'⚠️ Error closing existing browser: {type(e).__name__}: {e}')

	# endregion

	# region - observers

	def _register_observers(self, browser: Any, page: Any) -> None:
		browser.on('disconnected', lambda _browser: self._on_disconnect(browser, 'disconnected'))
		page.on('crash', lambda _page: self._on_disconnect(browser, 'page crashed'))
		page.on('framenavigated', lambda frame: self._on_frame_navigated(page, frame))

	def _on_disconnect(self, browser: Any, reason: str) -> None:
		if self._closing:
			return
		self._spawn(self._handle_disconnect(browser, reason), name='browser-disconnect')

	def _on_frame_navigated(self, page: Any, frame: Any) -> None:
		if self._closing or frame.parent_frame is not None:
			return
		self._spawn(self._handle_navigation(page, frame.url), name='browser-navigated')

	async def _handle_disconnect(self, browser: Any, reason: str) -> None:
		if not await self._state.detach(LifecycleState.DISCONNECTED, browser=browser):
			return  # stale browser or already handled
		self.logger.warning(f'💔 Browser {reason}, session disconnected')
		await self._close_stale_handles()

		if not self.browser_profile.auto_recover:
			return
		if not await self._state.begin_launch():
			return  # someone else is already relaunching
		self.logger.info('🔄 Relaunching browser after disconnect...')
		await self._start_logged('recovery', claimed=True)

	async def _handle_navigation(self, page: Any, url: str) -> None:
		await self._state.set_current_url(url, page=page)
		if self._command_lease.busy:
			return  # the running command captures its own screenshot when it finishes
		async with self._command_lease:
			snapshot = await self._state.snapshot()
			if snapshot.page is page and snapshot.lifecycle == LifecycleState.READY:
				await self._screenshots.capture(page)

	async def _start_logged(self, reason: str, claimed: bool = False) -> None:
		try:
			if claimed:
				await self.launch()
			elif not await self.start():
				self.logger.debug(f'Skipping {reason} launch, another launch is in flight')
		except LaunchError as e:
			self.logger.error(f'❌ Browser {reason} launch failed: {e}')

	def _spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
		task = asyncio.get_running_loop().create_task(coro, name=name)
		self._background_tasks.add(task)
		task.add_done_callback(self._on_background_task_done)
		return task

	def _on_background_task_done(self, task: asyncio.Task) -> None:
		self._background_tasks.discard(task)
		if task.cancelled():
			return
		exc = task.exception()
		if exc is not None:
			self.logger.error(f'❌ Background task {task.get_name()} failed: {type(exc).__name__}: {exc}')

	# endregion
