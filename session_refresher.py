import asyncio
import logging
import time

import config
from browser_session import open_browser_session
from errors import RefreshError, SessionExpired
from session_file import normalize_cookie
from token_store import Credential, CredentialStore, utc_now

logger = logging.getLogger(__name__)


async def poll_until(condition, timeout, interval=0.25, clock=time.monotonic, sleep=asyncio.sleep):
    """Awaits `condition()` until it returns True. False once `timeout` seconds pass."""
    deadline = clock() + timeout
    while True:
        if await condition():
            return True
        if clock() >= deadline:
            return False
        await sleep(interval)


def load_store(session_file, default_mapping_id=config.HRMS_MAPPING_ID, clock=utc_now):
    """Seeds a CredentialStore from session.json so a still-valid token needs no browser."""
    if not session_file.exists():
        raise SessionExpired(f"No session file at {session_file.path}; log in first")

    credential = Credential.from_cookies(session_file.load_cookies(), default_mapping_id)
    store = CredentialStore(clock=clock)
    if credential is not None:
        store.replace(credential)
    return store


class SessionRefresher:
    def __init__(
        self,
        store,
        session_file,
        provider_factory=open_browser_session,
        portal_url=config.HRMS_PORTAL_URL,
        default_mapping_id=config.HRMS_MAPPING_ID,
        navigation_timeout=config.NAVIGATION_TIMEOUT_SECONDS,
        ready_timeout=config.READY_TIMEOUT_SECONDS,
        clock=time.monotonic,
        sleep=asyncio.sleep,
    ):
        self.store = store
        self.session_file = session_file
        self._provider_factory = provider_factory
        self._portal_url = portal_url
        self._default_mapping_id = default_mapping_id
        self._navigation_timeout = navigation_timeout
        self._ready_timeout = ready_timeout
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()

    async def ensure_valid(self) -> Credential:
        if self.store.is_valid():
            return self.store.get()

        async with self._lock:
            # Whoever held the lock before us may already have refreshed.
            if self.store.is_valid():
                return self.store.get()

            logger.info("Token is %s, refreshing via browser", self.store.status().value)
            credential, cookies = await self._refresh()
            self.store.replace(credential)
            logger.info("Tokens refreshed, valid until %s", credential.expires_at)
            try:
                self.session_file.save_cookies(cookies)
            except OSError as e:
                # This run can still use the fresh tokens; the next one refreshes again.
                logger.error("Could not save refreshed session to %s: %s", self.session_file.path, e)
            return credential

    async def _refresh(self):
        stored_cookies = [normalize_cookie(c) for c in self.session_file.load_cookies()]

        async with self._provider_factory() as provider:
            await provider.set_cookies(stored_cookies)
            await provider.navigate(self._portal_url, timeout=self._navigation_timeout)
            ready = await poll_until(provider.is_ready, self._ready_timeout, clock=self._clock, sleep=self._sleep)
            if not ready:
                raise RefreshError(f"Portal did not finish loading within {self._ready_timeout}s")
            cookies = await provider.get_cookies()

        credential = Credential.from_cookies(cookies, self._default_mapping_id)
        if credential is None:
            raise SessionExpired("Session expired: the portal did not hand out fresh tokens")
        return credential, cookies
