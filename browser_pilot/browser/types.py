# centralize imports for browser typing

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright._impl._errors import TargetClosedError

__all__ = [
	'Browser',
	'BrowserContext',
	'Page',
	'Playwright',
	'PlaywrightError',
	'PlaywrightTimeoutError',
	'TargetClosedError',
	'async_playwright',
]
