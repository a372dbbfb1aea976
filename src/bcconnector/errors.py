"""
Error taxonomy for BCConnector

Every failure surfaced by the token store or the REST client is an ApiError.
"""

from typing import Any, Dict, Optional


class ApiError(Exception):
    """Base class for errors surfaced to callers"""

    retryable = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def error_code(self) -> Optional[str]:
        """Server-provided error code, if the response body carried one"""
        code = self.details.get("code")
        return str(code) if code is not None else None

    @property
    def server_message(self) -> Optional[str]:
        """Server-provided error message, if the response body carried one"""
        message = self.details.get("message")
        return str(message) if message is not None else None


class InvalidConfigurationError(ApiError):
    """Malformed URL or missing settings"""


class UnauthenticatedError(ApiError):
    """Token invalid, expired, revoked, or the sign-in flow failed"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class HttpStatusError(ApiError):
    """Non-success HTTP status other than 401"""

    def __init__(self, status_code: int, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.status_code = status_code


class DecodeFailureError(ApiError):
    """Response body does not match the expected schema"""


class TransportError(ApiError):
    """No response was received (connection failure, timeout)"""

    retryable = True
