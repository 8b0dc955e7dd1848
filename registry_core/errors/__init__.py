# =============================================================================
# registry_core/errors/__init__.py
# Centralized Error Handling for the Product Registry
# =============================================================================

from .exceptions import (
    RegistryError,
    RemoteStoreError,
    LocalStorageError,
    ValidationError,
    ConfigurationError,
    AuthenticationError,
    MOCK_MODE,
    TABLE_NOT_FOUND,
    UNEXPECTED_ERROR,
)

from .handlers import (
    handle_error,
    safe_execute,
    ErrorContext,
)

__all__ = [
    # Exceptions
    "RegistryError",
    "RemoteStoreError",
    "LocalStorageError",
    "ValidationError",
    "ConfigurationError",
    "AuthenticationError",
    # Sentinel codes
    "MOCK_MODE",
    "TABLE_NOT_FOUND",
    "UNEXPECTED_ERROR",
    # Handlers
    "handle_error",
    "safe_execute",
    "ErrorContext",
]
