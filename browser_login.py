import logging

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

import config
from browser_session import open_browser_session
from errors import SessionExpired
from token_store import Credential

logger = logging.getLogger(__name__)


async def interactive_login(session_file, timeout=config.LOGIN_TIMEOUT_SECONDS):
    """
    Opens a visible browser so the user can finish SSO + 2FA, then exports the
    portal cookies to the session file. Returns the captured Credential.
    """
    logger.info("Opening browser; complete the Microsoft login in the window")
    async with open_browser_session(headless=False, user_data_dir=config.BROWSER_PROFILE_DIR) as browser:
        await browser.navigate(config.HRMS_PORTAL_URL, timeout=config.NAVIGATION_TIMEOUT_SECONDS)
        logger.info("Waiting up to %ds for login to complete...", timeout)
        try:
            await browser.wait_for_dashboard(timeout)
        except PlaywrightTimeoutError as e:
            raise SessionExpired("Login timed out or failed") from e
        cookies = await browser.get_cookies()

    credential = Credential.from_cookies(cookies, config.HRMS_MAPPING_ID)
    if credential is None:
        raise SessionExpired("Logged in, but the portal did not set hr_atk / XSRF-TOKEN cookies")

    saved = session_file.save_cookies(cookies)
    logger.info("Session exported to %s (%d cookies)", session_file.path, len(saved))
    logger.info("Token expires: %s", credential.expires_at or "unknown")
    return credential
