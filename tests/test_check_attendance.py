import asyncio
from datetime import date

import aiohttp
import pytest
from aiohttp import test_utils, web

from attendance_client import SUMMARY_PATH
from check_attendance import check_attendance
from date_window import salary_period_window
from errors import AuthError, SessionExpired
from token_store import Credential


def month_response(absent_count, absent_dates):
    return {
        'Data': {
            'CountDetails': {'AbsentCount': absent_count, 'PresentCount': 20},
            'DailyAttendanceSummary': [
                {
                    'ShiftDetails': {'Date': f'{d}T00:00:00'},
                    'DailyAttendanceStatus': [{'TagType': 3, 'TagName': 'Absent'}],
                }
                for d in absent_dates
            ],
        }
    }


class FakeRefresher:
    def __init__(self, error=None):
        self.calls = 0
        self.error = error

    async def ensure_valid(self):
        self.calls += 1
        if self.error:
            raise self.error
        return Credential('access', 'xsrf', 'MID')


async def run_check(responses, window, refresher):
    requested = []

    async def handler(request):
        key = (int(request.query['month']), int(request.query['year']))
        requested.append(key)
        status, body = responses[key]
        if status != 200:
            return web.Response(status=status, text=body)
        return web.json_response(body)

    app = web.Application()
    app.router.add_get('/api' + SUMMARY_PATH, handler)
    async with test_utils.TestServer(app) as server:
        async with aiohttp.ClientSession() as session:
            result = await check_attendance(
                window, refresher, session=session,
                base_url=f'http://{server.host}:{server.port}/api', today=date(2025, 2, 26),
            )
    return result, requested


def test_salary_period_check_aggregates_both_months():
    window = salary_period_window(date(2025, 2, 10))
    responses = {
        (1, 2025): (200, month_response(2, ['2025-01-10', '2025-01-27'])),
        (2, 2025): (200, month_response(1, ['2025-02-20', '2025-02-26'])),
    }
    refresher = FakeRefresher()

    result, requested = asyncio.run(run_check(responses, window, refresher))

    assert requested == [(1, 2025), (2, 2025)]
    assert refresher.calls == 2
    assert [r.date for r in result.absent_days] == ['2025-01-27', '2025-02-20']
    assert result.total_absent == 2
    assert [(s.month, s.absent) for s in result.summary] == [(1, 2), (2, 1)]
    assert result.reported_absent == 3


def test_auth_failure_on_second_month_aborts_whole_window():
    window = salary_period_window(date(2025, 2, 10))
    responses = {
        (1, 2025): (200, month_response(2, ['2025-01-27'])),
        (2, 2025): (401, 'Unauthorized'),
    }
    outcome = {}

    async def attempt():
        try:
            outcome['result'] = await run_check(responses, window, FakeRefresher())
        except AuthError as e:
            outcome['error'] = e

    asyncio.run(attempt())

    assert 'result' not in outcome
    assert outcome['error'].status == 401
    assert outcome['error'].body == 'Unauthorized'


def test_refresh_failure_stops_before_any_request():
    window = salary_period_window(date(2025, 2, 10))

    with pytest.raises(SessionExpired):
        asyncio.run(run_check({}, window, FakeRefresher(error=SessionExpired('gone'))))
