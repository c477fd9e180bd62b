"""
Parts Sourcing Errors

Every failure the sourcing pipeline can surface to a caller carries one of
the codes below. Callers only ever see the `{code, message}` pair.
"""
from enum import Enum
from typing import Dict


class ErrorCode(str, Enum):
    AUTH_FAILED = "AUTH_FAILED"
    VIN_NOT_FOUND = "VIN_NOT_FOUND"
    VIN_INVALID = "VIN_INVALID"
    PART_TYPE_NOT_FOUND = "PART_TYPE_NOT_FOUND"
    SEARCH_FAILED = "SEARCH_FAILED"
    NETWORK_ERROR = "NETWORK_ERROR"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    TIMEOUT = "TIMEOUT"


class PartsSourcingError(Exception):
    """Base exception for sourcing failures"""
    code: ErrorCode = ErrorCode.SEARCH_FAILED

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"{self.code.value}: {message}")

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code.value, "message": self.message}


class AuthFailedError(PartsSourcingError):
    """Login handshake did not produce the required session cookies"""
    code = ErrorCode.AUTH_FAILED


class VinNotFoundError(PartsSourcingError):
    code = ErrorCode.VIN_NOT_FOUND


class VinInvalidError(PartsSourcingError):
    code = ErrorCode.VIN_INVALID


class PartTypeNotFoundError(PartsSourcingError):
    code = ErrorCode.PART_TYPE_NOT_FOUND


class SearchFailedError(PartsSourcingError):
    """Query reached the marketplace but it answered with GraphQL errors"""
    code = ErrorCode.SEARCH_FAILED

    def __init__(self, message: str, graphql_errors=None):
        self.graphql_errors = graphql_errors or []
        super().__init__(message)


class NetworkError(PartsSourcingError):
    code = ErrorCode.NETWORK_ERROR


class SessionExpiredError(PartsSourcingError):
    """Transient - the whole request is retried once with a fresh session"""
    code = ErrorCode.SESSION_EXPIRED


class PartsListGenerationError(Exception):
    """Raised when the AI reply for a parts list cannot be parsed"""

    def __init__(self, message: str, raw_response: str = ""):
        self.raw_response = raw_response
        super().__init__(message)
