import base64
import json
from datetime import datetime, timezone

import pytest

NOW = datetime(2025, 2, 10, 9, 0, tzinfo=timezone.utc)


def make_jwt(exp, pad=False):
    def encode(obj):
        raw = base64.urlsafe_b64encode(json.dumps(obj).encode()).decode()
        return raw if pad else raw.rstrip('=')

    return f"{encode({'alg': 'HS256', 'typ': 'JWT'})}.{encode({'sub': 'emp-42', 'exp': int(exp.timestamp())})}.signature"


def portal_cookies(access_token, xsrf='xsrf-value', mapping_id='MID123', domain='hrms.pitsolutions.com'):
    cookies = [
        {'name': 'hr_atk', 'value': access_token, 'domain': domain, 'path': '/'},
        {'name': 'XSRF-TOKEN', 'value': xsrf, 'domain': domain, 'path': '/'},
    ]
    if mapping_id:
        cookies.append({'name': 'hr_mid', 'value': mapping_id, 'domain': domain, 'path': '/'})
    return cookies


@pytest.fixture
def clock():
    return lambda: NOW
