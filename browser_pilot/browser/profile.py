from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from browser_pilot.config import CONFIG

# Chromium flags for a visible browser running under a service account / container
CHROME_DEFAULT_ARGS = [
	'--no-sandbox',
	'--disable-setuid-sandbox',
	'--disable-dev-shm-usage',
	'--disable-features=VizDisplayCompositor',
	'--start-maximized',
]

# Reduce the automation fingerprint that makes search engines serve captchas
CHROME_STEALTH_ARGS = [
	'--disable-blink-features=AutomationControlled',
]

CHROME_IGNORE_DEFAULT_ARGS = ['--enable-automation']

DEFAULT_USER_AGENT = (
	'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

SEARCH_INPUT_SELECTOR = 'textarea[name="q"], input[name="q"]'


class ViewportSize(BaseModel):
	model_config = ConfigDict(frozen=True)

	width: int = 1200
	height: int = 800


class BrowserProfile(BaseModel):
	"""Launch and timing parameters for the single controlled browser."""

	model_config = ConfigDict(extra='forbid', validate_assignment=True)

	headless: bool = Field(default_factory=lambda: CONFIG.BROWSER_PILOT_HEADLESS)
	viewport: ViewportSize = Field(default_factory=ViewportSize)
	args: list[str] = Field(default_factory=list, description='Extra chromium flags appended to the defaults')
	user_agent: str = DEFAULT_USER_AGENT
	ignore_https_errors: bool = True

	home_url: str = Field(default_factory=lambda: CONFIG.BROWSER_PILOT_HOME_URL)
	search_input_selector: str = SEARCH_INPUT_SELECTOR

	navigation_timeout_ms: int = Field(default_factory=lambda: CONFIG.BROWSER_PILOT_NAVIGATION_TIMEOUT_MS, ge=0)
	element_timeout_ms: int = Field(default_factory=lambda: CONFIG.BROWSER_PILOT_ELEMENT_TIMEOUT_MS, ge=0)
	screenshot_timeout_ms: int = Field(default=10_000, ge=0)
	close_timeout_s: float = Field(default=10.0, ge=0)

	max_launch_retries: int = Field(default_factory=lambda: CONFIG.BROWSER_PILOT_MAX_LAUNCH_RETRIES, ge=0)
	launch_retry_delay: float = Field(default_factory=lambda: CONFIG.BROWSER_PILOT_LAUNCH_RETRY_DELAY, ge=0)
	auto_recover: bool = Field(default_factory=lambda: CONFIG.BROWSER_PILOT_AUTO_RECOVER)

	def get_args(self) -> list[str]:
		"""Full chromium argument list, deduplicated, order preserved."""
		args = [*CHROME_DEFAULT_ARGS, *CHROME_STEALTH_ARGS, *self.args]
		return list(dict.fromkeys(args))

	def kwargs_for_launch(self) -> dict[str, Any]:
		return {
			'headless': self.headless,
			'args': self.get_args(),
			'ignore_default_args': list(CHROME_IGNORE_DEFAULT_ARGS),
		}

	def kwargs_for_new_context(self) -> dict[str, Any]:
		return {
			'viewport': self.viewport.model_dump(),
			'user_agent': self.user_agent,
			'ignore_https_errors': self.ignore_https_errors,
		}

	def screenshot_clip(self) -> dict[str, int]:
		"""Top-left region of the page matching the viewport."""
		return {'x': 0, 'y': 0, 'width': self.viewport.width, 'height': self.viewport.height}
