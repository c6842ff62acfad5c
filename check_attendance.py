import logging
from datetime import date

import aiohttp

import config
from absence_aggregator import aggregate
from attendance_client import fetch_month, normalize_payload

logger = logging.getLogger(__name__)


async def fetch_window(session, window, refresher, base_url=config.HRMS_DASHBOARD_URL, today: date = None):
    """
    Fetches every month of the window in order. The first failure propagates and
    nothing fetched so far is returned.
    """
    payloads = []
    for month, year in window.months:
        logger.info("Fetching %d/%d...", month, year)
        credential = await refresher.ensure_valid()
        try:
            raw = await fetch_month(session, month, year, credential, base_url=base_url, today=today)
        except Exception as e:
            logger.error("Error fetching %d/%d: %s", month, year, e)
            raise
        payloads.append(normalize_payload(raw, month, year))
    return payloads


async def check_attendance(window, refresher, session=None, base_url=config.HRMS_DASHBOARD_URL, today: date = None):
    """Checks the window for absences and returns an AggregateResult."""
    logger.info("Checking attendance from %s to %s", window.start_date, window.end_date)

    if session is not None:
        payloads = await fetch_window(session, window, refresher, base_url=base_url, today=today)
    else:
        timeout = aiohttp.ClientTimeout(total=config.HTTP_TIMEOUT_SECONDS)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            payloads = await fetch_window(session, window, refresher, base_url=base_url, today=today)

    return aggregate(payloads, window)
