"""Custom exceptions for yomitore."""

from __future__ import annotations

from typing import Optional


class YomitoreError(Exception):
    """Base exception for all yomitore errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EvaluationParseError(YomitoreError):
    """Raised when a model evaluation response cannot be parsed."""

    def __init__(self, message: str, key: Optional[str] = None, details: Optional[dict] = None):
        self.key = key
        merged = {"key": key}
        merged.update(details or {})
        super().__init__(message, merged)


class DuplicateFieldError(EvaluationParseError):
    """Raised when a required field appears more than once."""

    def __init__(self, key: str):
        super().__init__(f"Duplicate field in evaluation: {key}", key)


class MissingFieldError(EvaluationParseError):
    """Raised when a required field is absent from the evaluation."""

    def __init__(self, key: str):
        super().__init__(f"Missing field in evaluation: {key}", key)


class InvalidValueError(EvaluationParseError):
    """Raised when a field value does not satisfy its rule."""

    def __init__(self, key: str, raw: str):
        self.raw = raw
        super().__init__(f"Invalid value for {key}: {raw!r}", key, {"raw": raw})


class PersistenceError(YomitoreError):
    """Raised when the stats document cannot be written."""

    def __init__(self, message: str, path: Optional[str] = None, cause: Optional[Exception] = None):
        self.path = path
        self.cause = cause
        details = {"path": path}
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)


class ApiError(YomitoreError):
    """Raised when a request to the model provider fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, cause: Optional[Exception] = None):
        self.status_code = status_code
        self.cause = cause
        details = {"status_code": status_code}
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)


class InvalidApiKeyError(ApiError):
    """Raised when the provider rejects the configured API key."""

    def __init__(self, status_code: Optional[int] = None):
        super().__init__("Invalid API key.", status_code)


class NoChoicesError(ApiError):
    """Raised when a chat completion response contains no choices."""

    def __init__(self):
        super().__init__("API response contained no choices.")


class ConfigurationError(YomitoreError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        super().__init__(message, {"config_key": config_key})
