"""
Error Taxonomy

Structured error codes, categories and exceptions shared by the pipeline,
the policy summary service and the tool-result validation gate.

Design:
- ErrorInfo is the serializable shape handed back to callers
- Exceptions carry a code and details so they can be turned into ErrorInfo
- Timeout/external failures are degraded locally; validation and
  configuration failures are surfaced to the immediate caller
"""

import time
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorCode:
    """Standard error codes"""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    TIMEOUT = "TIMEOUT"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class ErrorCategory(str, Enum):
    """Error categories, matching what a calling agent needs to decide on"""

    AUTH = "AUTH"
    VALIDATION = "VALIDATION"
    EXTERNAL = "EXTERNAL"
    NOT_FOUND = "NOT_FOUND"
    AI_MODEL = "AI_MODEL"
    TIMEOUT = "TIMEOUT"
    RATE_LIMIT = "RATE_LIMIT"
    INTERNAL = "INTERNAL"
    CONFIGURATION = "CONFIGURATION"


class ErrorInfo(BaseModel):
    """Standardized, loggable error description."""

    code: str
    message: str
    category: ErrorCategory = ErrorCategory.INTERNAL
    retryable: bool = False
    details: Dict[str, Any] = Field(default_factory=dict)
    timestamp: float = Field(default_factory=time.time)

    @classmethod
    def validation(cls, message: str, details: Optional[Dict[str, Any]] = None) -> "ErrorInfo":
        return cls(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            category=ErrorCategory.VALIDATION,
            retryable=False,
            details=details or {},
        )

    @classmethod
    def internal(cls, message: str, details: Optional[Dict[str, Any]] = None) -> "ErrorInfo":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=message,
            category=ErrorCategory.INTERNAL,
            retryable=False,
            details=details or {},
        )

    @classmethod
    def timeout(cls, message: str, details: Optional[Dict[str, Any]] = None) -> "ErrorInfo":
        return cls(
            code=ErrorCode.TIMEOUT,
            message=message,
            category=ErrorCategory.TIMEOUT,
            retryable=True,
            details=details or {},
        )

    @classmethod
    def external(cls, message: str, details: Optional[Dict[str, Any]] = None) -> "ErrorInfo":
        return cls(
            code=ErrorCode.EXTERNAL_SERVICE_ERROR,
            message=message,
            category=ErrorCategory.EXTERNAL,
            retryable=True,
            details=details or {},
        )

    @classmethod
    def configuration(cls, message: str, details: Optional[Dict[str, Any]] = None) -> "ErrorInfo":
        return cls(
            code=ErrorCode.CONFIGURATION_ERROR,
            message=message,
            category=ErrorCategory.CONFIGURATION,
            retryable=False,
            details=details or {},
        )


# ===== Exceptions =====

class PolicyDigestError(Exception):
    """
    Base exception.

    Carries a structured code and details so it can be converted to ErrorInfo.
    """

    def __init__(
        self,
        message: str,
        code: str = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class TimeoutException(PolicyDigestError):
    """Raised when an external call exceeds its deadline."""

    def __init__(self, message: str, timeout_ms: int):
        super().__init__(message, code=ErrorCode.TIMEOUT, details={"timeout_ms": timeout_ms})
        self.timeout_ms = timeout_ms


class PolicyStoreError(PolicyDigestError):
    """Raised when the policy store cannot be reached."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.EXTERNAL_SERVICE_ERROR, details=details)


class ConfigurationError(PolicyDigestError):
    """Raised when a required setting (e.g. an API key) is missing."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=ErrorCode.CONFIGURATION_ERROR, details=details)


class ToolResultValidationError(PolicyDigestError):
    """Raised by validate_tool_result_or_throw when a tool result is rejected."""

    def __init__(self, error_info: ErrorInfo):
        super().__init__(error_info.message, code=error_info.code, details=error_info.details)
        self.error_info = error_info


def normalize_error(error: Any) -> BaseException:
    """Return ``error`` as an exception instance, wrapping anything else."""
    if isinstance(error, BaseException):
        return error
    return Exception(str(error))


def to_error_info(error: Any) -> ErrorInfo:
    """Map a raised value onto the matching ErrorInfo factory."""
    error = normalize_error(error)
    if isinstance(error, ToolResultValidationError):
        return error.error_info
    if isinstance(error, TimeoutException):
        return ErrorInfo.timeout(error.message, details=error.details)
    if isinstance(error, PolicyStoreError):
        return ErrorInfo.external(error.message, details=error.details)
    if isinstance(error, ConfigurationError):
        return ErrorInfo.configuration(error.message, details=error.details)
    return ErrorInfo.internal(str(error), details={"error_type": type(error).__name__})


__all__ = [
    "ErrorCode",
    "ErrorCategory",
    "ErrorInfo",
    "PolicyDigestError",
    "TimeoutException",
    "PolicyStoreError",
    "ConfigurationError",
    "ToolResultValidationError",
    "normalize_error",
    "to_error_info",
]
