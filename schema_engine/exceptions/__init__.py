from .base import (
    CacheError,
    ConfigurationError,
    DatabaseError,
    InvalidArgumentError,
    LockTimeoutError,
    SchemaEngineError,
    ValidationError,
)

__all__ = [
    "CacheError",
    "ConfigurationError",
    "DatabaseError",
    "InvalidArgumentError",
    "LockTimeoutError",
    "SchemaEngineError",
    "ValidationError",
]
