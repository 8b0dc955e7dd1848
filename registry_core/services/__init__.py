# =============================================================================
# registry_core/services/__init__.py
# Service Layer for the Product Registry
# =============================================================================
"""
Service layer for the product registry.

Usage Example:
-------------
    from registry_core.services.sync_service import RegistrySession
    from registry_core.services.registration_form import RegistrationFormController

    session = RegistrySession(settings)
    session.start()

    form = RegistrationFormController(session)

The session and form modules are imported from their own modules; this
package only exposes the dependency-free pieces so the data layer can use
ServiceResult without a circular import.
"""

from .base_service import BaseService, ServiceResult
from .history_service import HistoryService, HistoryFilter, filter_products, filter_users

__all__ = [
    "BaseService",
    "ServiceResult",
    "HistoryService",
    "HistoryFilter",
    "filter_products",
    "filter_users",
]
