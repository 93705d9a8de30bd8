from typing import Any, Dict, Optional


class SchemaEngineError(Exception):
    """Base exception class for the metadata schema engine."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary representation."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
        }


class ValidationError(SchemaEngineError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs,
    ) -> None:
        details = kwargs.pop("details", None) or {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details=details, **kwargs)


class InvalidArgumentError(ValidationError):
    """Raised when a caller passes an unusable resolution context.

    Covers an unknown asset type, a category without a brand and an empty
    role. These are caller or configuration problems and are never retried.
    """

    def __init__(self, message: str = "Invalid argument", **kwargs) -> None:
        super().__init__(message, **kwargs)


class LockTimeoutError(SchemaEngineError):
    """Raised when the schema build lock is not acquired within its bound."""

    retryable = True

    def __init__(
        self,
        message: str = "Timed out waiting for schema build lock",
        lock_key: Optional[str] = None,
        timeout: Optional[float] = None,
        **kwargs,
    ) -> None:
        details = kwargs.pop("details", None) or {}
        if lock_key:
            details["lock_key"] = lock_key
        if timeout is not None:
            details["timeout_seconds"] = timeout
        super().__init__(message, details=details, **kwargs)


class CacheError(SchemaEngineError):
    """Raised when cache operations fail."""

    def __init__(
        self,
        message: str = "Cache operation failed",
        operation: Optional[str] = None,
        **kwargs,
    ) -> None:
        details = kwargs.pop("details", None) or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details=details, **kwargs)


class DatabaseError(SchemaEngineError):
    """Raised when a store read fails."""

    def __init__(
        self,
        message: str = "Database operation failed",
        operation: Optional[str] = None,
        **kwargs,
    ) -> None:
        details = kwargs.pop("details", None) or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details=details, **kwargs)


class ConfigurationError(SchemaEngineError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str = "Configuration error",
        config_key: Optional[str] = None,
        **kwargs,
    ) -> None:
        details = kwargs.pop("details", None) or {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details=details, **kwargs)
