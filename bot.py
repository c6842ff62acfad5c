import argparse
import asyncio
import logging
import sys
from datetime import datetime
from zoneinfo import ZoneInfo

import config
from browser_login import interactive_login
from check_attendance import check_attendance
from date_window import WindowMode, get_reporting_window
from errors import HINTS, ConfigError, ErrorKind, NotifierError, classify_error
from send_email_alert import send_absence_alert, send_failure_alert, send_test_email
from session_file import SessionFile
from session_refresher import SessionRefresher, load_store

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Check HRMS attendance and email an alert on absences")
    parser.add_argument('--test', action='store_true', help="check attendance but do not send any email")
    parser.add_argument('--test-email', action='store_true', help="send a test email and exit")
    parser.add_argument('--login', action='store_true', help="log in interactively and export session.json")
    parser.add_argument('--salary-period', action='store_true', default=config.SALARY_PERIOD_MODE,
                        help="check the 26th-to-25th salary period instead of the last N days")
    parser.add_argument('--days', type=int, default=config.DAYS_TO_CHECK, help="days to look back (default %(default)s)")
    return parser.parse_args(argv)


def log_result(result):
    logger.info("Attendance summary:")
    for s in result.summary:
        logger.info("  %d/%d: Present=%s, Absent=%s, Leave=%s", s.month, s.year, s.present, s.absent, s.leave)
    if result.total_absent != result.reported_absent:
        logger.info("HRMS reports %s absence(s) for the whole months; %d fall inside the window",
                    result.reported_absent, result.total_absent)
    for day in result.absent_days:
        logger.warning("  Absent: %s - %s", day.date, day.status)


async def run(args, session_file=None, today=None):
    session_file = session_file or SessionFile(config.SESSION_FILE, config.HRMS_COOKIE_DOMAIN)

    if args.login:
        await interactive_login(session_file)
        return 0

    errors = config.validate_config()
    if errors:
        raise ConfigError(errors)
    logger.info("Configuration validated")

    if args.test_email:
        await send_test_email()
        logger.info("Test email sent successfully")
        return 0

    today = today or datetime.now(ZoneInfo(config.TIMEZONE)).date()
    mode = WindowMode.SALARY_PERIOD if args.salary_period else WindowMode.TRAILING
    window = get_reporting_window(today, mode, args.days)

    refresher = SessionRefresher(load_store(session_file), session_file)
    result = await check_attendance(window, refresher, today=today)
    log_result(result)

    if result.total_absent == 0:
        logger.info("No absences detected between %s and %s", window.start_date, window.end_date)
    elif args.test:
        logger.info("Test mode: skipping email notification")
    else:
        await send_absence_alert(result, window)
    return 0


async def main(argv=None):
    args = parse_args(argv)
    try:
        return await run(args)
    except Exception as e:
        kind = classify_error(e)
        if isinstance(e, NotifierError):
            logger.error("%s", e)
        else:
            logger.exception("Unexpected error: %s", e)
        logger.info(HINTS[kind])
        if kind is not ErrorKind.CONFIG and not args.test and not args.login:
            try:
                await send_failure_alert(kind, e)
            except Exception as mail_error:
                logger.error("Failed to send failure alert: %s", mail_error)
        return 1


def cli():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
