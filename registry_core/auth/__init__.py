# =============================================================================
# registry_core/auth/__init__.py
# =============================================================================

from .authentication import (
    AuthSession,
    AuthUser,
    MOCK_EMAIL,
    MOCK_PASSWORD,
)

__all__ = [
    "AuthSession",
    "AuthUser",
    "MOCK_EMAIL",
    "MOCK_PASSWORD",
]
