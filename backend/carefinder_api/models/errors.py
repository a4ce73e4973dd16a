"""Error models"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error codes surfaced to API clients"""
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class ApplicationError(Exception):
    """Application error carrying an error code and an optional detail message"""
    code = ErrorCode.UPSTREAM_ERROR

    def __init__(self, message: str, details: Optional[str] = None, code: Optional[ErrorCode] = None):
        if code is not None:
            self.code = code
        self.message = message
        self.details = details
        super().__init__(self.message)

    def model_dump(self) -> Dict[str, Any]:
        """Return dict representation for API responses"""
        body: Dict[str, Any] = {
            "error": self.message,
            "code": self.code.value,
        }
        if self.details:
            body["details"] = self.details
        return body

    @property
    def http_status(self) -> int:
        """Map error code to HTTP status"""
        mapping = {
            ErrorCode.INVALID_REQUEST: 400,
            ErrorCode.INVALID_INPUT: 400,
            ErrorCode.NOT_FOUND: 404,
            ErrorCode.UPSTREAM_ERROR: 500,
            ErrorCode.SERVICE_UNAVAILABLE: 503,
            ErrorCode.CONFIGURATION_ERROR: 500,
        }
        return mapping.get(self.code, 500)


class InvalidRequestError(ApplicationError):
    """The request lacks the input needed to pick a search strategy"""
    code = ErrorCode.INVALID_REQUEST


class InvalidInputError(ApplicationError):
    """A supplied value is malformed (e.g. a too-short pincode)"""
    code = ErrorCode.INVALID_INPUT


class NotFoundError(ApplicationError):
    code = ErrorCode.NOT_FOUND


class UpstreamError(ApplicationError):
    """A third-party API or transport call failed"""
    code = ErrorCode.UPSTREAM_ERROR


class ServiceUnavailableError(ApplicationError):
    code = ErrorCode.SERVICE_UNAVAILABLE


class ConfigurationError(ApplicationError):
    code = ErrorCode.CONFIGURATION_ERROR
