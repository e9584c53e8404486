from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from browser_pilot.browser.profile import BrowserProfile
from browser_pilot.browser.state import SessionStateManager
from browser_pilot.browser.utils import _log_pretty_url
from browser_pilot.exceptions import ScreenshotError
from browser_pilot.timing import freshness_token

logger = logging.getLogger(__name__)

SCREENSHOT_FILENAME = 'browser-screenshot.png'


class ScreenshotPipeline:
	"""Captures the top-left viewport clip of the page into one overwritable file.

	There is no history: every capture replaces public_dir/browser-screenshot.png
	and publishes "/browser-screenshot.png?t=<token>" with a strictly increasing
	token so polling clients can tell a fresh image from a cached one.
	"""

	def __init__(self, state: SessionStateManager, profile: BrowserProfile, public_dir: Path | str):
		self._state = state
		self._profile = profile
		self.public_dir = Path(public_dir)
		self.public_dir.mkdir(parents=True, exist_ok=True)

	@property
	def path(self) -> Path:
		return self.public_dir / SCREENSHOT_FILENAME

	@property
	def public_path(self) -> str:
		return f'/{SCREENSHOT_FILENAME}'

	async def capture(self, page: Optional[Any] = None, require: bool = False) -> Optional[str]:
		"""Capture the active page and return the new screenshot ref.

		Failures are logged and swallowed (returning None, the previous ref stays
		published) unless require=True, in which case ScreenshotError is raised.
		"""
		if page is None:
			page = (await self._state.snapshot()).page
		if page is None:
			logger.warning('📸 No page available for screenshot')
			if require:
				raise ScreenshotError('No page available for screenshot')
			return None

		try:
			await page.screenshot(
				path=str(self.path),
				full_page=False,
				clip=self._profile.screenshot_clip(),
				timeout=self._profile.screenshot_timeout_ms,
			)
		except Exception as e:
			logger.error(f'❌ Screenshot failed on {_log_pretty_url(getattr(page, "url", "") or "")}: {type(e).__name__}: {e}')
			if require:
				raise ScreenshotError(f'Screenshot failed: {e}') from e
			return None

		ref = f'{self.public_path}?t={freshness_token()}'
		await self._state.set_screenshot_ref(ref)
		logger.debug(f'📸 Screenshot saved ({ref})')
		return ref
