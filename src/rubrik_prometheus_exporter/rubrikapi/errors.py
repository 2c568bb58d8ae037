"""Exceptions raised by the Rubrik API client layer."""


class RubrikApiError(Exception):
    """Base class for all Rubrik API errors."""


class AuthError(RubrikApiError):
    """Raised when no authentication strategy produced a usable token."""


class RequestError(RubrikApiError):
    """Raised when a REST call fails or returns a non-2xx status."""

    def __init__(self, path: str, status_code: int | None = None, reason: str = ""):
        self.path = path
        self.status_code = status_code
        self.reason = reason
        if status_code is not None:
            msg = f"HTTP {status_code}: {path}"
        else:
            msg = f"Request to {path} failed: {reason}"
        super().__init__(msg)


class QueryError(RubrikApiError):
    """Raised when a GraphQL query fails for any reason."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class DecodeError(RubrikApiError):
    """Raised when a REST response body cannot be decoded into the expected shape."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to decode response from {path}: {reason}")
