# src/triunity/exceptions.py
from typing import Any


class ErrorCode:
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    NOT_FOUND = "NOT_FOUND"
    INVALID_REQUEST = "INVALID_REQUEST"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class TelemetryError(Exception):
    """Base exception class for telemetry service errors"""
    pass


class ConfigurationError(TelemetryError):
    """Raised when configuration values or profile names are invalid"""
    pass


class ApiError(TelemetryError):
    """Raised by the request router; rendered as an error envelope"""

    def __init__(self, code: str, message: str, status: int = 400, **extra: Any) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status
        self.extra = extra


class MethodNotAllowedError(ApiError):
    def __init__(self, method: str, allowed_methods: Any) -> None:
        super().__init__(
            ErrorCode.METHOD_NOT_ALLOWED,
            f"Method {method} not allowed",
            status=405,
            allowed_methods=list(allowed_methods),
        )


class EndpointNotFoundError(ApiError):
    def __init__(self, operation: str, available_endpoints: Any) -> None:
        message = f"Endpoint '{operation}' not found" if operation else "No endpoint specified"
        super().__init__(ErrorCode.NOT_FOUND, message, status=404)
        self.available_endpoints = list(available_endpoints)


class InvalidRequestError(ApiError):
    def __init__(self, message: str, details: Any = None) -> None:
        extra = {"details": details} if details is not None else {}
        super().__init__(ErrorCode.INVALID_REQUEST, message, status=400, **extra)
