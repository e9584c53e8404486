"""
Shared fixtures: an in-memory stand-in for the Playwright async API.

The fakes implement just the calls BrowserSession and Controller make
(chromium.launch -> browser.new_context -> context.new_page -> page.*) and
raise the real playwright exception classes so error translation is exercised.
"""

import asyncio
import inspect
from collections import defaultdict
from contextlib import asynccontextmanager
from pathlib import Path
from types import SimpleNamespace
from urllib.parse import quote_plus

import pytest
import pytest_asyncio
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from browser_pilot.browser.profile import BrowserProfile
from browser_pilot.browser.session import BrowserSession
from browser_pilot.controller.service import Controller

HOME_URL = 'https://www.google.com'


class FakeEmitter:
    def __init__(self):
        self._handlers = defaultdict(list)

    def on(self, event, handler):
        self._handlers[event].append(handler)

    def emit(self, event, *args):
        for handler in list(self._handlers[event]):
            handler(*args)


class FakeFrame:
    def __init__(self, url, parent_frame=None):
        self.url = url
        self.parent_frame = parent_frame


class FakeSearchBox:
    """Locator for the search input; `.first` resolves to itself."""

    def __init__(self, page):
        self.page = page
        self.value = ''
        self.clicks = 0

    @property
    def first(self):
        return self

    async def wait_for(self, state=None, timeout=None):
        if not self.page.search_box_present:
            raise PlaywrightTimeoutError(f'Timeout {timeout}ms exceeded.')

    async def click(self):
        self.clicks += 1

    async def fill(self, value):
        self.value = value

    async def press_sequentially(self, text):
        self.value += text


class FakeKeyboard:
    def __init__(self):
        self.presses = []

    async def press(self, key):
        self.presses.append(key)


class FakePage(FakeEmitter):
    def __init__(self, context, goto_error=None):
        super().__init__()
        self.context = context
        self.url = 'about:blank'
        self.keyboard = FakeKeyboard()
        self.search_box = FakeSearchBox(self)
        self.search_box_present = True

        self.goto_error = goto_error
        self.goto_delay = 0.0
        self.screenshot_error = None
        self.screenshot_gate = context.browser.chromium.screenshot_gate
        self.submit_error = None
        self.closed = False

        self.goto_calls = []
        self.screenshot_calls = []
        self.active_gotos = 0
        self.max_concurrent_gotos = 0

    @property
    def main_frame(self):
        return FakeFrame(self.url)

    def is_closed(self):
        return self.closed

    def locator(self, selector):
        return self.search_box

    async def goto(self, url, wait_until=None, timeout=None):
        self.goto_calls.append(url)
        self.active_gotos += 1
        self.max_concurrent_gotos = max(self.max_concurrent_gotos, self.active_gotos)
        try:
            if self.goto_delay:
                await asyncio.sleep(self.goto_delay)
            if self.goto_error is not None:
                raise self.goto_error
            self.url = url
        finally:
            self.active_gotos -= 1

    async def screenshot(self, path=None, full_page=False, clip=None, timeout=None):
        self.screenshot_calls.append({'path': path, 'full_page': full_page, 'clip': clip, 'timeout': timeout})
        if self.screenshot_gate is not None:
            await self.screenshot_gate.wait()
        if self.screenshot_error is not None:
            raise self.screenshot_error
        Path(path).write_bytes(b'\x89PNG\r\n\x1a\nfake')
        return b''

    @asynccontextmanager
    async def expect_navigation(self, wait_until=None, timeout=None):
        yield None
        if self.submit_error is not None:
            raise self.submit_error
        self.url = f'{HOME_URL}/search?q={quote_plus(self.search_box.value)}'


class FakeContext:
    def __init__(self, browser, **kwargs):
        self.browser = browser
        self.kwargs = kwargs
        self.pages = []
        self.closed = False

    async def new_page(self):
        chromium = self.browser.chromium
        goto_error = None
        if chromium.goto_failures > 0:
            chromium.goto_failures -= 1
            goto_error = PlaywrightTimeoutError('Timeout 30000ms exceeded.')
        page = FakePage(self, goto_error=goto_error)
        self.pages.append(page)
        return page

    async def close(self):
        self.closed = True
        for page in self.pages:
            page.closed = True


class FakeBrowser(FakeEmitter):
    def __init__(self, chromium, **kwargs):
        super().__init__()
        self.chromium = chromium
        self.kwargs = kwargs
        self.contexts = []
        self.closed = False

    def is_connected(self):
        return not self.closed

    @property
    def page(self):
        return self.contexts[-1].pages[-1]

    async def new_context(self, **kwargs):
        context = FakeContext(self, **kwargs)
        self.contexts.append(context)
        return context

    async def close(self):
        if self.closed:
            return
        self.closed = True
        self.emit('disconnected', self)

    def crash(self):
        """Connection lost without close() being called."""
        self.closed = True
        self.emit('disconnected', self)


class FakeChromium:
    def __init__(self):
        self.browsers = []
        self.launch_calls = []
        self.launch_failures = 0
        self.goto_failures = 0
        self.launch_gate = None
        self.screenshot_gate = None
        self.launches_started = 0

    async def launch(self, **kwargs):
        self.launch_calls.append(kwargs)
        self.launches_started += 1
        if self.launch_gate is not None:
            await self.launch_gate.wait()
        if self.launch_failures > 0:
            self.launch_failures -= 1
            raise PlaywrightError('Browser closed unexpectedly')
        browser = FakeBrowser(self, **kwargs)
        self.browsers.append(browser)
        return browser


class FakePlaywright:
    def __init__(self):
        self.chromium = FakeChromium()
        self.stopped = False

    async def stop(self):
        self.stopped = True


async def _wait_until(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        result = predicate()
        if inspect.isawaitable(result):
            result = await result
        if result:
            return
        if loop.time() > deadline:
            raise AssertionError('condition not met before timeout')
        await asyncio.sleep(0.01)


@pytest.fixture
def fakes():
    return SimpleNamespace(Frame=FakeFrame, Page=FakePage, Playwright=FakePlaywright, home_url=HOME_URL)


@pytest.fixture
def wait_until():
    return _wait_until


@pytest.fixture
def fake_playwright():
    return FakePlaywright()


@pytest.fixture
def profile():
    return BrowserProfile(
        headless=True,
        home_url=HOME_URL,
        max_launch_retries=3,
        launch_retry_delay=0,
        auto_recover=True,
        navigation_timeout_ms=1_000,
        element_timeout_ms=100,
        close_timeout_s=1,
    )


@pytest.fixture
def public_dir(tmp_path):
    return tmp_path / 'public'


@pytest_asyncio.fixture
async def browser_session(profile, fake_playwright, public_dir):
    session = BrowserSession(
        browser_profile=profile,
        playwright=fake_playwright,
        public_dir=public_dir,
        command_lock_timeout=5,
    )
    yield session
    await session.stop()


@pytest.fixture
def controller(browser_session):
    return Controller(browser_session)
