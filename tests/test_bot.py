import asyncio
from datetime import timedelta

import pytest

import bot
import config
from conftest import NOW, make_jwt, portal_cookies
from errors import AuthError, ErrorKind
from models import AbsenceRecord, AggregateResult, MonthlySummary
from session_file import SessionFile


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.setattr(config, 'SMTP_USER', 'me@example.com')
    monkeypatch.setattr(config, 'SMTP_PASS', 'secret')
    monkeypatch.setattr(config, 'NOTIFY_EMAIL', 'me@example.com')
    monkeypatch.setattr(config, 'SESSION_FILE', str(tmp_path / 'session.json'))

    sent = {'absence': [], 'failure': [], 'test': 0}

    async def absence_alert(result, window):
        sent['absence'].append(result)

    async def failure_alert(kind, error):
        sent['failure'].append(kind)

    async def test_email():
        sent['test'] += 1

    monkeypatch.setattr(bot, 'send_absence_alert', absence_alert)
    monkeypatch.setattr(bot, 'send_failure_alert', failure_alert)
    monkeypatch.setattr(bot, 'send_test_email', test_email)
    return sent


def write_session(access_token=None):
    token = access_token or make_jwt(NOW + timedelta(days=3650))
    SessionFile(config.SESSION_FILE, config.HRMS_COOKIE_DOMAIN).save_cookies(portal_cookies(token))


def fake_check(result=None, error=None):
    async def check(window, refresher, today=None):
        if error:
            raise error
        return result
    return check


ABSENT_RESULT = AggregateResult(
    absent_days=(AbsenceRecord('2025-01-10', 'Absent'),),
    summary=(MonthlySummary(1, 2025, absent=1),),
    reported_totals={'absent': 1},
)


def test_missing_config_fails_before_network(env, monkeypatch):
    monkeypatch.setattr(config, 'SMTP_PASS', None)
    monkeypatch.setattr(bot, 'check_attendance', fake_check(error=AssertionError("should not run")))

    assert asyncio.run(bot.main([])) == 1
    assert env['failure'] == []


def test_test_email_mode(env):
    assert asyncio.run(bot.main(['--test-email'])) == 0
    assert env['test'] == 1


def test_absences_trigger_alert(env, monkeypatch):
    write_session()
    monkeypatch.setattr(bot, 'check_attendance', fake_check(ABSENT_RESULT))

    assert asyncio.run(bot.main([])) == 0
    assert env['absence'] == [ABSENT_RESULT]


def test_test_mode_skips_alert(env, monkeypatch):
    write_session()
    monkeypatch.setattr(bot, 'check_attendance', fake_check(ABSENT_RESULT))

    assert asyncio.run(bot.main(['--test'])) == 0
    assert env['absence'] == []


def test_no_absences_sends_nothing(env, monkeypatch):
    write_session()
    empty = AggregateResult(absent_days=(), summary=())
    monkeypatch.setattr(bot, 'check_attendance', fake_check(empty))

    assert asyncio.run(bot.main([])) == 0
    assert env['absence'] == []


def test_auth_error_is_classified_and_reported(env, monkeypatch):
    write_session()
    monkeypatch.setattr(bot, 'check_attendance', fake_check(error=AuthError('401', status=401)))

    assert asyncio.run(bot.main([])) == 1
    assert env['failure'] == [ErrorKind.AUTH]


def test_missing_session_file_sends_session_expired_alert(env):
    assert asyncio.run(bot.main([])) == 1
    assert env['failure'] == [ErrorKind.SESSION_EXPIRED]


def test_salary_period_flag_selects_window(env, monkeypatch):
    write_session()
    seen = {}

    async def check(window, refresher, today=None):
        seen['window'] = window
        return AggregateResult(absent_days=(), summary=())

    monkeypatch.setattr(bot, 'check_attendance', check)

    asyncio.run(bot.main(['--salary-period']))

    window = seen['window']
    assert window.start_date.day == 26
    assert window.end_date.day == 25
