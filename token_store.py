import base64
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

ACCESS_TOKEN_COOKIE = 'hr_atk'
XSRF_TOKEN_COOKIE = 'XSRF-TOKEN'
MAPPING_ID_COOKIE = 'hr_mid'

EXPIRY_BUFFER = timedelta(minutes=5)


def utc_now():
    return datetime.now(timezone.utc)


def decode_token_expiry(token) -> Optional[datetime]:
    """Reads the `exp` claim of a JWT without verifying it. None if undecodable."""
    try:
        payload_part = token.split('.')[1]
        padded = payload_part + '=' * (-len(payload_part) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded))
        return datetime.fromtimestamp(int(payload['exp']), tz=timezone.utc)
    except (AttributeError, IndexError, KeyError, TypeError, ValueError, OverflowError):
        return None


@dataclass(frozen=True)
class Credential:
    access_token: str
    xsrf_token: str
    mapping_id: str
    expires_at: Optional[datetime] = None

    @classmethod
    def from_tokens(cls, access_token, xsrf_token, mapping_id):
        return cls(access_token, xsrf_token, mapping_id, decode_token_expiry(access_token))

    @classmethod
    def from_cookies(cls, cookies, default_mapping_id):
        """Builds a credential from browser cookies, or None if a required one is missing."""
        values = {c.get('name'): c.get('value') for c in cookies}
        access_token = values.get(ACCESS_TOKEN_COOKIE)
        xsrf_token = values.get(XSRF_TOKEN_COOKIE)
        if not access_token or not xsrf_token:
            return None
        return cls.from_tokens(access_token, xsrf_token, values.get(MAPPING_ID_COOKIE) or default_mapping_id)

    def __repr__(self):
        return f"Credential(access_token={self.access_token[:12]}..., mapping_id={self.mapping_id!r}, expires_at={self.expires_at})"


class TokenStatus(Enum):
    VALID = "valid"
    EXPIRING = "expiring"
    EXPIRED = "expired"
    UNKNOWN = "unknown"


class CredentialStore:
    def __init__(self, credential=None, clock=utc_now):
        self._credential = None
        self._clock = clock
        if credential is not None:
            self.replace(credential)

    def status(self) -> TokenStatus:
        credential = self._credential
        if credential is None or credential.expires_at is None:
            # Nothing to judge by: ask for a refresh rather than trusting it.
            return TokenStatus.UNKNOWN
        now = self._clock()
        if credential.expires_at <= now:
            return TokenStatus.EXPIRED
        if credential.expires_at - EXPIRY_BUFFER <= now:
            return TokenStatus.EXPIRING
        return TokenStatus.VALID

    def is_valid(self):
        return self.status() is TokenStatus.VALID

    def get(self) -> Credential:
        if self._credential is None:
            raise LookupError("No credential has been loaded")
        return self._credential

    def replace(self, credential):
        if not isinstance(credential, Credential):
            raise ValueError(f"Expected a Credential, got {type(credential).__name__}")
        if not (credential.access_token and credential.xsrf_token and credential.mapping_id):
            raise ValueError("Credential is missing a token field")
        self._credential = credential

    def clear(self):
        self._credential = None
