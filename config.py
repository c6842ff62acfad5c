import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default="false"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


# HRMS portal
HRMS_BASE_URL = os.getenv('HRMS_BASE_URL', 'https://hrms.pitsolutions.com')
HRMS_API_PATH = os.getenv('HRMS_API_PATH', '/hrmsapi/api/v1')
HRMS_DASHBOARD_URL = f"{HRMS_BASE_URL}{HRMS_API_PATH}/attendance-management/dashboard"
HRMS_PORTAL_URL = HRMS_BASE_URL.rstrip('/') + '/'
HRMS_MAPPING_ID = os.getenv('HRMS_MAPPING_ID', 'P4D9T6HA')
HRMS_COOKIE_DOMAIN = os.getenv('HRMS_COOKIE_DOMAIN', 'pitsolutions.com')

# Browser session
SESSION_FILE = os.getenv('SESSION_FILE', 'session.json')
BROWSER_PROFILE_DIR = os.getenv('BROWSER_PROFILE_DIR', '.browser-session')

# Email
SMTP_HOST = os.getenv('SMTP_HOST', 'smtp.gmail.com')
SMTP_PORT = int(os.getenv('SMTP_PORT', '587'))
SMTP_SECURE = _env_bool('SMTP_SECURE')
SMTP_USER = os.getenv('SMTP_USER')
SMTP_PASS = os.getenv('SMTP_PASS')
NOTIFY_EMAIL = os.getenv('NOTIFY_EMAIL')

# Reporting window
DAYS_TO_CHECK = int(os.getenv('DAYS_TO_CHECK', '31'))
SALARY_PERIOD_MODE = _env_bool('SALARY_PERIOD_MODE')
TIMEZONE = os.getenv('TIMEZONE', 'Asia/Kolkata')

# Timeouts (seconds)
HTTP_TIMEOUT_SECONDS = float(os.getenv('HTTP_TIMEOUT_SECONDS', '15'))
NAVIGATION_TIMEOUT_SECONDS = 60
READY_TIMEOUT_SECONDS = 30
LOGIN_TIMEOUT_SECONDS = 300


def validate_config():
    """Returns a list of problems with the email settings, empty when usable."""
    errors = []
    if not SMTP_USER:
        errors.append('SMTP_USER is required for sending email notifications')
    if not SMTP_PASS:
        errors.append('SMTP_PASS is required for SMTP authentication')
    if not NOTIFY_EMAIL:
        errors.append('NOTIFY_EMAIL is required - where to send absence alerts')
    return errors
