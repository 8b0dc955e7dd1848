"""
Streamlit entry point for the product usage registry.

    streamlit run app.py
"""

from __future__ import annotations
import streamlit as st

from registry_core.config import load_settings
from registry_core.errors import ErrorContext
from registry_core.logging import setup_logging
from registry_core.state import get_auth, get_form, get_registry, init_state
from registry_core.ui import header, render_login, render_tabs, status_line

# ============================================================================
# PAGE CONFIGURATION
# ============================================================================
st.set_page_config(
    page_title="Product Registratie",
    page_icon="📦",
    layout="wide",
)

if "settings" not in st.session_state:
    settings = load_settings(st.secrets)
    setup_logging(level=settings.log_level)
    init_state(settings)
else:
    init_state()

header("Product Registratie", "Registreer het gebruik van producten per gebruiker, locatie en doel")

auth = get_auth()
if not render_login(auth):
    st.stop()

registry = get_registry()

with st.sidebar:
    user = auth.current_user()
    st.markdown(f"👤 **{user.name}**")
    st.caption(user.email)
    if st.button("Uitloggen", use_container_width=True):
        with ErrorContext("Uitloggen"):
            auth.sign_out()
        st.rerun()
    st.divider()
    status_line(registry.get_status())

with ErrorContext("Registratie weergeven"):
    render_tabs(registry, get_form())
