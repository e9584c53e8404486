import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from browser_pilot.browser.profile import BrowserProfile
from browser_pilot.browser.session import BrowserSession
from browser_pilot.browser.types import PlaywrightError, PlaywrightTimeoutError, TargetClosedError
from browser_pilot.browser.utils import _log_pretty_url, normalize_url, same_site
from browser_pilot.controller.router import PromptIntent, parse_prompt
from browser_pilot.controller.views import CommandResult
from browser_pilot.exceptions import (
    BrowserDisconnectedError,
    ElementNotFoundError,
    MissingFieldError,
    NavigationError,
)

logger = logging.getLogger(__name__)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class Controller:
    """Command handlers for the single browser page.

    Every command runs as one serialized unit on the session's command lease:
    availability guard -> page interaction -> screenshot -> result.
    """

    def __init__(self, browser_session: BrowserSession):
        self.browser_session = browser_session

    @property
    def profile(self) -> BrowserProfile:
        return self.browser_session.browser_profile

    @asynccontextmanager
    async def _command(self, name: str) -> AsyncIterator[Any]:
        async with self.browser_session.command_lease:
            await self.browser_session.ensure_ready()
            page = await self.browser_session.get_current_page()
            try:
                yield page
            except TargetClosedError as e:
                logger.warning(f'💔 Browser closed during {name}: {e}')
                raise BrowserDisconnectedError(f'Browser disconnected during {name}, please retry') from e

    async def _result(self, text: Optional[str] = None) -> CommandResult:
        snapshot = await self.browser_session.state.snapshot()
        return CommandResult(url=snapshot.current_url, screenshot=snapshot.screenshot_ref, result=text)

    async def _goto(self, page: Any, url: str) -> None:
        """Navigate and record the URL only once the page has settled."""
        state = self.browser_session.state
        await state.begin_navigation()
        confirmed_url = None
        try:
            await page.goto(url, wait_until='networkidle', timeout=self.profile.navigation_timeout_ms)
            confirmed_url = url
        except TargetClosedError:
            raise
        except PlaywrightError as e:
            raise NavigationError(f'Navigation to {url} failed: {e.message}') from e
        finally:
            await state.end_navigation(confirmed_url)

    async def navigate(self, url: Optional[str]) -> CommandResult:
        if _is_blank(url):
            raise MissingFieldError('URL required')
        target = normalize_url(url)

        async with self._command('navigate') as page:
            logger.info(f'🌐 Navigating to: {target}')
            await self._goto(page, target)
            await self.browser_session.screenshots.capture(page)
            return await self._result()

    async def search(self, query: Optional[str]) -> CommandResult:
        if _is_blank(query):
            raise MissingFieldError('Search query required')
        query = query.strip()
        selector = self.profile.search_input_selector

        async with self._command('search') as page:
            logger.info(f'🔍 Searching for: {query}')
            snapshot = await self.browser_session.state.snapshot()
            if not same_site(snapshot.current_url, self.profile.home_url):
                await self._goto(page, self.profile.home_url)

            search_box = page.locator(selector).first
            try:
                await search_box.wait_for(state='visible', timeout=self.profile.element_timeout_ms)
            except TargetClosedError:
                raise
            except PlaywrightTimeoutError as e:
                raise ElementNotFoundError(f'Search input not found on {_log_pretty_url(page.url, None)}') from e

            state = self.browser_session.state
            await state.begin_navigation()
            confirmed_url = None
            try:
                await search_box.click()
                # some engines restore the previous query into the box
                await search_box.fill('')
                await search_box.press_sequentially(query)
                async with page.expect_navigation(wait_until='networkidle', timeout=self.profile.navigation_timeout_ms):
                    await page.keyboard.press('Enter')
                confirmed_url = page.url
            except TargetClosedError:
                raise
            except PlaywrightError as e:
                raise NavigationError(f'Search for "{query}" failed: {e.message}') from e
            finally:
                await state.end_navigation(confirmed_url)

            await self.browser_session.screenshots.capture(page)
            return await self._result()

    async def screenshot(self) -> CommandResult:
        async with self._command('screenshot') as page:
            await self.browser_session.screenshots.capture(page, require=True)
            return await self._result()

    async def run_prompt(self, prompt: Optional[str]) -> CommandResult:
        """Route a free-text command to navigate/search by literal keywords."""
        if _is_blank(prompt):
            raise MissingFieldError('Prompt is required')
        prompt = prompt.strip()

        parsed = parse_prompt(prompt)
        logger.info(f'🤖 Processing command ({parsed.intent.value}): {prompt}')
        if parsed.intent == PromptIntent.NAVIGATE:
            result = await self.navigate(parsed.argument)
        elif parsed.intent == PromptIntent.SEARCH:
            result = await self.search(parsed.argument)
        else:
            # accepted, but nothing to do on the page
            async with self._command('prompt'):
                result = await self._result()
            return result.model_copy(update={'result': f'No browser action for: {prompt}'})

        return result.model_copy(update={'result': f'Executed: {prompt}'})
