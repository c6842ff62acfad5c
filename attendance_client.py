import asyncio
import json
import logging
from datetime import date

import aiohttp

import config
from errors import AuthError, NetworkError, UnknownError
from models import DailyStatus, DayAttendance, MonthPayload
from token_store import ACCESS_TOKEN_COOKIE, MAPPING_ID_COOKIE, XSRF_TOKEN_COOKIE

logger = logging.getLogger(__name__)

SUMMARY_PATH = '/attendance-summary/get-monthly-attendance-summary'

COUNT_KEYS = {
    'present': 'PresentCount',
    'absent': 'AbsentCount',
    'leave': 'LeaveCount',
    'holiday': 'HolidayCount',
    'weekly_off': 'WeeklyOffCount',
    'payable_days': 'PayableDays',
    'regularization_count': 'RegularizationCount',
}


def auth_headers(credential):
    return {
        'Authorization': f'Bearer {credential.access_token}',
        'Mappingid': credential.mapping_id,
        'X-XSRF-TOKEN': credential.xsrf_token,
        'Content-Type': 'application/json',
        'Accept': 'application/json',
    }


def cookie_header(credential):
    return (
        f'{ACCESS_TOKEN_COOKIE}={credential.access_token}; '
        f'{XSRF_TOKEN_COOKIE}={credential.xsrf_token}; '
        f'{MAPPING_ID_COOKIE}={credential.mapping_id}'
    )


async def fetch_month(session: aiohttp.ClientSession, month: int, year: int, credential, base_url=config.HRMS_DASHBOARD_URL, today: date = None):
    """
    Fetches one month of attendance summary and returns the decoded JSON as-is.
    Raises AuthError, NetworkError or UnknownError.
    """
    today = today or date.today()
    params = {
        'month': str(month),
        'year': str(year),
        'currentCalendarDate': today.isoformat(),
    }
    headers = {**auth_headers(credential), 'Cookie': cookie_header(credential)}

    try:
        async with session.get(f'{base_url}{SUMMARY_PATH}', params=params, headers=headers) as response:
            body = await response.text(errors='replace')
            status = response.status
    except asyncio.TimeoutError as e:
        raise NetworkError(f'Timed out fetching {month}/{year}') from e
    except aiohttp.ClientError as e:
        raise NetworkError(f'Could not reach HRMS for {month}/{year}: {e}') from e

    if status in (401, 403):
        raise AuthError(f'Failed to fetch attendance: {status}', status=status, body=body)
    if not 200 <= status < 300:
        raise UnknownError(f'Failed to fetch attendance: {status} - {body[:200]}', status=status, body=body)

    try:
        return json.loads(body)
    except ValueError as e:
        raise UnknownError(f'HRMS returned invalid JSON for {month}/{year}', status=status, body=body) from e


def _as_dict(value):
    return value if isinstance(value, dict) else {}


def _as_list(value):
    return value if isinstance(value, list) else []


def _as_number(value, cast=int):
    if isinstance(value, bool):
        return cast(0)
    try:
        return cast(value)
    except (TypeError, ValueError):
        return cast(0)


def _parse_day(value):
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def normalize_payload(raw, month, year) -> MonthPayload:
    """Turns whatever HRMS returned into a MonthPayload with no optional parts."""
    data = _as_dict(_as_dict(raw).get('Data'))

    days = []
    for entry in _as_list(data.get('DailyAttendanceSummary')):
        entry = _as_dict(entry)
        day = _parse_day(_as_dict(entry.get('ShiftDetails')).get('Date'))
        if day is None:
            continue
        statuses = tuple(
            DailyStatus(
                tag_type=s.get('TagType') if isinstance(s.get('TagType'), int) else None,
                tag_name=s.get('TagName') if isinstance(s.get('TagName'), str) else '',
            )
            for s in map(_as_dict, _as_list(entry.get('DailyAttendanceStatus')))
        )
        days.append(DayAttendance(day=day, statuses=statuses))

    count_details = _as_dict(data.get('CountDetails'))
    counts = {
        name: _as_number(count_details.get(key), float if name == 'payable_days' else int)
        for name, key in COUNT_KEYS.items()
    }
    return MonthPayload(month=month, year=year, days=tuple(days), counts=counts)
