import json
import logging
import os
from datetime import datetime, timezone

from errors import SessionExpired

logger = logging.getLogger(__name__)


def normalize_cookie(cookie):
    """Shapes a stored cookie the way the browser expects to receive it."""
    domain = cookie.get('domain') or ''
    return {
        'name': cookie['name'],
        'value': cookie['value'],
        'domain': domain if domain.startswith('.') else f'.{domain}',
        'path': cookie.get('path') or '/',
        'httpOnly': bool(cookie.get('httpOnly', False)),
        'secure': bool(cookie.get('secure', False)),
        'sameSite': cookie.get('sameSite') or 'Lax',
    }


class SessionFile:
    """The portable session.json holding exported HRMS cookies."""

    def __init__(self, path, cookie_domain):
        self.path = path
        self.cookie_domain = cookie_domain

    def exists(self):
        return os.path.exists(self.path)

    def load_cookies(self):
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except FileNotFoundError:
            raise SessionExpired(f"No session file found at {self.path}")
        except json.JSONDecodeError as e:
            raise SessionExpired(f"Session file {self.path} is not valid JSON: {e}")

        cookies = data.get('cookies') if isinstance(data, dict) else None
        if not isinstance(cookies, list):
            raise SessionExpired(f"Session file {self.path} has no cookie list")
        logger.debug("Loaded %d cookies (exported %s)", len(cookies), data.get('exportedAt'))
        return [c for c in cookies if isinstance(c, dict) and 'name' in c and 'value' in c]

    def keep_portal_cookies(self, cookies):
        return [c for c in cookies if self.cookie_domain in (c.get('domain') or '') or 'hrms' in (c.get('domain') or '')]

    def save_cookies(self, cookies):
        """Writes the whole file at once; readers never see a half-written session."""
        portal_cookies = self.keep_portal_cookies(cookies)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, 'w') as f:
            json.dump({
                'exportedAt': datetime.now(timezone.utc).isoformat(),
                'cookies': portal_cookies,
            }, f, indent=2)
        os.replace(tmp_path, self.path)
        logger.info("Saved %d cookies to %s", len(portal_cookies), self.path)
        return portal_cookies
