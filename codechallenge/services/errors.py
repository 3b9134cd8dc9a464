from typing import Optional

GENERIC_ERROR = "An error occurred"
QUOTA_EXCEEDED = "Daily quota exceeded"


class ChallengeError(Exception):
    """Base class for everything this client raises on purpose."""


class MalformedDataError(ChallengeError):
    """A challenge payload could not be decoded (e.g. bad `options`)."""


class ApiError(ChallengeError):
    """Failure of a call made through the request pipeline."""


class AuthError(ApiError):
    """No bearer token could be obtained. Not retried."""


class QuotaExceededError(ApiError):
    status_code = 429

    def __init__(self, message: str = QUOTA_EXCEEDED):
        super().__init__(message or QUOTA_EXCEEDED)


class ServerError(ApiError):
    def __init__(self, message: str = GENERIC_ERROR, *, status_code: Optional[int] = None):
        super().__init__(message or GENERIC_ERROR)
        self.status_code = status_code


class TransportError(ApiError):
    """The request never got a response (DNS, refused, timeout...)."""
