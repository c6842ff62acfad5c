import asyncio
from datetime import date

import config
import send_email_alert
from date_window import salary_period_window
from errors import ErrorKind, SessionExpired
from models import AbsenceRecord, AggregateResult, MonthlySummary


def configure(monkeypatch, user='me@example.com'):
    monkeypatch.setattr(config, 'SMTP_USER', user)
    monkeypatch.setattr(config, 'SMTP_PASS', 'secret')
    monkeypatch.setattr(config, 'NOTIFY_EMAIL', 'boss@example.com')


def test_absence_alert_lists_days_and_reported_counts(monkeypatch):
    configure(monkeypatch)
    result = AggregateResult(
        absent_days=(AbsenceRecord('2025-02-20', 'Absent <unapproved>'),),
        summary=(MonthlySummary(1, 2025, absent=2), MonthlySummary(2, 2025, absent=1)),
        reported_totals={'absent': 3},
    )

    msg = send_email_alert.absence_alert_message(result, salary_period_window(date(2025, 2, 10)))

    assert msg['Subject'] == '⚠️ HRMS Alert: 1 Absent Day(s) Detected'
    assert msg['To'] == 'boss@example.com'
    text = msg.get_body(('plain',)).get_content()
    assert 'Thursday, 20 February 2025 - Absent <unapproved>' in text
    assert 'HRMS reports 3 absence(s)' in text
    html_part = msg.get_body(('html',)).get_content()
    assert 'Absent &lt;unapproved&gt;' in html_part


def test_session_expired_alert_is_distinct(monkeypatch):
    configure(monkeypatch)

    expired = send_email_alert.failure_alert_message(ErrorKind.SESSION_EXPIRED, SessionExpired('gone'))
    generic = send_email_alert.failure_alert_message(ErrorKind.NETWORK, OSError('down'))

    assert 'session expired' in expired['Subject']
    assert 'network' in generic['Subject']
    assert 'network connection' in generic.get_body(('plain',)).get_content()


def test_send_skips_without_credentials(monkeypatch):
    configure(monkeypatch, user=None)
    delivered = []
    monkeypatch.setattr(send_email_alert, '_deliver', delivered.append)

    assert asyncio.run(send_email_alert.send_test_email()) is False
    assert delivered == []


def test_send_delivers_in_worker_thread(monkeypatch):
    configure(monkeypatch)
    delivered = []
    monkeypatch.setattr(send_email_alert, '_deliver', delivered.append)

    assert asyncio.run(send_email_alert.send_test_email()) is True
    assert delivered[0]['Subject'] == '✅ HRMS Notifier - Test Email'
