# =============================================================================
# registry_core/errors/exceptions.py
# Custom Exception Hierarchy for the Product Registry
# =============================================================================

from typing import Optional, Dict, Any


# Sentinel codes reported by the remote store boundary
MOCK_MODE = "MOCK_MODE"
TABLE_NOT_FOUND = "TABLE_NOT_FOUND"
UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


class RegistryError(Exception):
    """
    Base exception for all registry errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "REMOTE_001")
        details: Additional context as a dictionary
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "REG_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# STORAGE EXCEPTIONS
# =============================================================================

class RemoteStoreError(RegistryError):
    """Raised when a call against the remote store fails"""

    def __init__(
        self,
        message: str,
        code: str = "REMOTE_001",
        table: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if table:
            details["table"] = table
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            code=code,
            details=details,
            **kwargs,
        )

    @property
    def is_mock_mode(self) -> bool:
        return self.code == MOCK_MODE


class LocalStorageError(RegistryError):
    """Raised when the local mirror cannot be read or written"""

    def __init__(self, message: str, key: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if key:
            details["key"] = key

        super().__init__(
            message=message,
            code="LOCAL_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# DATA EXCEPTIONS
# =============================================================================

class ValidationError(RegistryError):
    """Raised when a record fails presence or uniqueness checks"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value

        super().__init__(
            message=message,
            code="DATA_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# CONFIGURATION / AUTH EXCEPTIONS
# =============================================================================

class ConfigurationError(RegistryError):
    """Raised when configuration is invalid"""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )


class AuthenticationError(RegistryError):
    """Raised when sign-in, sign-up or sign-out fails"""

    def __init__(self, message: str, email: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if email:
            details["email"] = email

        super().__init__(
            message=message,
            code="AUTH_001",
            details=details,
            **kwargs,
        )
