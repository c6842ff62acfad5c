import asyncio
import html
import logging
import smtplib
from datetime import date
from email.message import EmailMessage
from email.utils import formataddr

import config
from errors import HINTS, ErrorKind

logger = logging.getLogger(__name__)

SENDER_NAME = 'HRMS Notifier'

STYLE = """
body { font-family: 'Segoe UI', Arial, sans-serif; line-height: 1.6; color: #333; }
.container { max-width: 600px; margin: 0 auto; padding: 20px; }
.header { background: #ee5a5a; color: white; padding: 20px; border-radius: 8px 8px 0 0; }
.content { background: #f8f9fa; padding: 20px; border-radius: 0 0 8px 8px; }
.count { font-size: 48px; font-weight: bold; }
ul { background: white; padding: 15px 15px 15px 35px; border-left: 4px solid #ee5a5a; }
table { border-collapse: collapse; }
td, th { padding: 4px 10px; border-bottom: 1px solid #ddd; text-align: left; }
.footer { margin-top: 20px; font-size: 12px; color: #666; }
"""


def format_display_date(date_str):
    """'2025-01-10' -> 'Friday, 10 January 2025'."""
    return date.fromisoformat(date_str).strftime('%A, %-d %B %Y')


def _wrap_html(title, body):
    return (
        f"<!DOCTYPE html><html><head><style>{STYLE}</style></head><body>"
        f"<div class=\"container\"><div class=\"header\">{title}</div>"
        f"<div class=\"content\">{body}<div class=\"footer\"><p>This is an automated alert from {SENDER_NAME}.</p></div>"
        f"</div></div></body></html>"
    )


def build_message(subject, text, html_body):
    msg = EmailMessage()
    msg['From'] = formataddr((SENDER_NAME, config.SMTP_USER or ''))
    msg['To'] = config.NOTIFY_EMAIL or ''
    msg['Subject'] = subject
    msg.set_content(text)
    msg.add_alternative(html_body, subtype='html')
    return msg


def _deliver(msg):
    if config.SMTP_SECURE:
        server = smtplib.SMTP_SSL(config.SMTP_HOST, config.SMTP_PORT, timeout=30)
    else:
        server = smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=30)
    with server:
        if not config.SMTP_SECURE:
            server.starttls()
        server.login(config.SMTP_USER, config.SMTP_PASS)
        server.send_message(msg)


async def send_email(msg):
    if not config.SMTP_USER or not config.SMTP_PASS or not config.NOTIFY_EMAIL:
        logger.warning("Email credentials missing - skipping notification")
        return False
    await asyncio.to_thread(_deliver, msg)
    logger.info("Email '%s' sent to %s", msg['Subject'], config.NOTIFY_EMAIL)
    return True


def absence_alert_message(result, window):
    count = result.total_absent
    period = f"{window.start_date:%d %b %Y} to {window.end_date:%d %b %Y}"
    lines = [f"  • {format_display_date(r.date)} - {r.status}" for r in result.absent_days]
    summary_lines = [
        f"  {s.month}/{s.year}: Present={s.present}, Absent={s.absent}, Leave={s.leave}, Holiday={s.holiday}"
        for s in result.summary
    ]
    text = "\n".join([
        "HRMS Attendance Alert",
        "=====================",
        "",
        f"{count} absent day(s) detected between {period}:",
        "",
        *lines,
        "",
        f"HRMS reports {result.reported_absent} absence(s) across the months checked:",
        *summary_lines,
        "",
        "Please review your attendance in HRMS and apply for regularization or leave.",
        "",
        f"HRMS Portal: {config.HRMS_PORTAL_URL}",
    ])

    items = "".join(
        f"<li><strong>{html.escape(format_display_date(r.date))}</strong> - {html.escape(r.status)}</li>"
        for r in result.absent_days
    )
    rows = "".join(
        f"<tr><td>{s.month}/{s.year}</td><td>{s.present}</td><td>{s.absent}</td><td>{s.leave}</td><td>{s.holiday}</td></tr>"
        for s in result.summary
    )
    body = (
        f"<p>The following absent days were found between {period}:</p><ul>{items}</ul>"
        f"<table><tr><th>Month</th><th>Present</th><th>Absent</th><th>Leave</th><th>Holiday</th></tr>{rows}</table>"
        f"<p><a href=\"{config.HRMS_PORTAL_URL}\">Open HRMS Portal</a></p>"
    )
    title = f"<div class=\"count\">{count}</div><div>Absent Day(s) Detected</div>"
    return build_message(f"⚠️ HRMS Alert: {count} Absent Day(s) Detected", text, _wrap_html(title, body))


def failure_alert_message(kind, error):
    hint = HINTS[kind]
    if kind is ErrorKind.SESSION_EXPIRED:
        subject = "🔑 HRMS Notifier: session expired, login required"
        intro = "The saved HRMS session could not be refreshed, so attendance was not checked."
    else:
        subject = f"❌ HRMS Notifier: attendance check failed ({kind.value})"
        intro = "The attendance check did not complete."
    text = f"{intro}\n\nError: {error}\n\n{hint}"
    body = f"<p>{html.escape(intro)}</p><p><code>{html.escape(str(error))}</code></p><p>{html.escape(hint)}</p>"
    return build_message(subject, text, _wrap_html(html.escape(subject), body))


def probe_email_message():
    text = f"This is a test email from {SENDER_NAME}. Your email configuration is working correctly!"
    return build_message(
        f"✅ {SENDER_NAME} - Test Email",
        text,
        _wrap_html("✅ Email Configuration Verified!", f"<p>{html.escape(text)}</p>"),
    )


async def send_absence_alert(result, window):
    return await send_email(absence_alert_message(result, window))


async def send_failure_alert(kind, error):
    return await send_email(failure_alert_message(kind, error))


async def send_test_email():
    return await send_email(probe_email_message())
