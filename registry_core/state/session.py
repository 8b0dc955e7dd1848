# =============================================================================
# registry_core/state/session.py
# Streamlit session-state wiring for the registry
# =============================================================================

from __future__ import annotations
from typing import Any, Optional

import streamlit as st

from registry_core.auth import AuthSession
from registry_core.config import AppSettings, load_settings
from registry_core.logging import get_logger
from registry_core.services.registration_form import RegistrationFormController
from registry_core.services.sync_service import RegistrySession

logger = get_logger(__name__)

# Central registry for session-state keys used across the app.
SESSION_DEFAULTS = {
    "settings": None,
    "registry": None,
    "form": None,
    "auth": None,
    "active_tab": "Registreren",
    # History tab filters
    "history_search": "",
    "history_user": "all",
    "history_location": "all",
    "history_sort_by": "date",
    "history_sort_order": "newest",
    # Per-tab search boxes
    "user_search": "",
    "product_search": "",
    "product_category": "all",
    # Open edit dialog: (kind value, key) or None
    "editing": None,
    # Last edit outcome: (kind value, ServiceResult) or None
    "edit_feedback": None,
}


def init_state(settings: Optional[AppSettings] = None, client: Any = None) -> None:
    """
    Initialize session state with defaults and build the registry once.

    The registry session, form controller and auth session survive
    Streamlit reruns; they are only rebuilt after ``reset_registry``.
    """
    for k, v in SESSION_DEFAULTS.items():
        if k not in st.session_state:
            st.session_state[k] = v

    if st.session_state["settings"] is None:
        st.session_state["settings"] = settings or load_settings(st.secrets)

    if st.session_state["registry"] is None:
        settings = st.session_state["settings"]
        registry = RegistrySession(settings, client=client)
        mode = registry.start()
        logger.info(f"Registry session started in {mode.value} mode")

        st.session_state["registry"] = registry
        st.session_state["form"] = RegistrationFormController(
            registry, banner_ms=settings.banner_ms, message_ms=settings.message_ms
        )
        if st.session_state["auth"] is None:
            st.session_state["auth"] = AuthSession(registry.client, settings.remote)


def get_registry() -> RegistrySession:
    return st.session_state["registry"]


def get_form() -> RegistrationFormController:
    return st.session_state["form"]


def get_auth() -> AuthSession:
    return st.session_state["auth"]


def reset_registry() -> None:
    """Tear down realtime channels and drop the session objects (auth is kept)."""
    registry = st.session_state.get("registry")
    if registry is not None:
        registry.close()
    for key in ("registry", "form"):
        st.session_state[key] = None
