import asyncio
import logging
import os
import platform
from contextlib import asynccontextmanager

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from errors import RefreshError

logger = logging.getLogger(__name__)

BROWSER_ARGS = [
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-blink-features=AutomationControlled',
    '--disable-gpu',
]

SYSTEM_CHROMIUM_PATHS = (
    '/snap/bin/chromium',
    '/usr/bin/chromium',
    '/usr/bin/chromium-browser',
)

# Only one browser per process. asyncio locks belong to one event loop,
# so a new lock is made whenever the running loop changes.
_lock = None
_lock_loop = None


def _browser_lock():
    global _lock, _lock_loop
    loop = asyncio.get_running_loop()
    if _lock is None or _lock_loop is not loop:
        _lock = asyncio.Lock()
        _lock_loop = loop
    return _lock


def system_chromium_path():
    """Bundled Chromium builds do not exist for Linux ARM; fall back to the distro one."""
    if platform.system() == 'Linux' and platform.machine().lower() in ('aarch64', 'arm64', 'armv7l'):
        for path in SYSTEM_CHROMIUM_PATHS:
            if os.path.exists(path):
                logger.info("ARM detected, using system Chromium: %s", path)
                return path
    return None


class BrowserSession:
    """A single browser page, exposed through the few calls a refresh needs."""

    def __init__(self, context, page):
        self._context = context
        self._page = page

    async def get_cookies(self):
        try:
            return await self._context.cookies()
        except PlaywrightError as e:
            raise RefreshError(f"Could not read browser cookies: {e}") from e

    async def set_cookies(self, cookies):
        if not cookies:
            return
        try:
            await self._context.add_cookies(cookies)
        except PlaywrightError as e:
            raise RefreshError(f"Browser rejected stored cookies: {e}") from e

    async def navigate(self, url, timeout):
        try:
            await self._page.goto(url, wait_until='networkidle', timeout=timeout * 1000)
        except PlaywrightError as e:
            raise RefreshError(f"Could not load {url}: {e}") from e

    async def is_ready(self):
        try:
            return await self._page.evaluate("document.readyState") == 'complete'
        except PlaywrightError:
            # The page is mid-navigation while the portal swaps tokens.
            return False

    async def wait_for_dashboard(self, timeout):
        await self._page.wait_for_function(
            """() => document.querySelector('[class*="user"]') !== null
                || document.body.innerText.includes('Overview')
                || document.body.innerText.includes('Attendance')""",
            timeout=timeout * 1000,
        )


@asynccontextmanager
async def open_browser_session(headless=True, user_data_dir=None):
    """Launches Chromium and always closes it, whatever happens inside the block."""
    async with _browser_lock():
        async with async_playwright() as p:
            launch_options = {
                'headless': headless,
                'args': BROWSER_ARGS,
                'executable_path': system_chromium_path(),
            }
            browser = None
            try:
                if user_data_dir:
                    os.makedirs(user_data_dir, exist_ok=True)
                    context = await p.chromium.launch_persistent_context(user_data_dir, no_viewport=not headless, **launch_options)
                else:
                    browser = await p.chromium.launch(**launch_options)
                    context = await browser.new_context()
            except PlaywrightError as e:
                if browser is not None:
                    await browser.close()
                raise RefreshError(f"Could not launch browser: {e}") from e

            try:
                page = context.pages[0] if context.pages else await context.new_page()
                yield BrowserSession(context, page)
            finally:
                await context.close()
                if browser is not None:
                    await browser.close()
                logger.debug("Browser closed")
