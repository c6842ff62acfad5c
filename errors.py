from enum import Enum


class NotifierError(Exception):
    """Base class for everything the notifier raises on purpose."""


class ConfigError(NotifierError):
    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("Configuration errors: " + "; ".join(self.errors))


class RefreshError(NotifierError):
    """The browser session could not be refreshed."""


class SessionExpired(RefreshError):
    """No usable credential is left; a new interactive login is required."""


class FetchError(NotifierError):
    def __init__(self, message, status=None, body=None):
        super().__init__(message)
        self.status = status
        self.body = body


class AuthError(FetchError):
    pass


class NetworkError(FetchError):
    pass


class UnknownError(FetchError):
    pass


class ErrorKind(Enum):
    CONFIG = "config"
    SESSION_EXPIRED = "session_expired"
    AUTH = "auth"
    NETWORK = "network"
    UNKNOWN = "unknown"


HINTS = {
    ErrorKind.CONFIG: "Copy .env.example to .env and fill in your values.",
    ErrorKind.SESSION_EXPIRED: "Run `python bot.py --login` on a machine with a display and copy session.json to the server.",
    ErrorKind.AUTH: "Authentication failed. Your tokens may have expired; log in again to refresh them.",
    ErrorKind.NETWORK: "Could not reach HRMS. Check your network connection and try again.",
    ErrorKind.UNKNOWN: "Unexpected failure. See the log output for details.",
}


def classify_error(exc: BaseException) -> ErrorKind:
    # Order matters: subclasses before their bases.
    if isinstance(exc, ConfigError):
        return ErrorKind.CONFIG
    if isinstance(exc, SessionExpired):
        return ErrorKind.SESSION_EXPIRED
    if isinstance(exc, AuthError):
        return ErrorKind.AUTH
    if isinstance(exc, NetworkError):
        return ErrorKind.NETWORK
    return ErrorKind.UNKNOWN
