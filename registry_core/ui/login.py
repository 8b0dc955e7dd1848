# =============================================================================
# registry_core/ui/login.py
# Login form shown before the registry tabs
# =============================================================================

import streamlit as st

from registry_core.auth import AuthSession


def render_login(auth: AuthSession) -> bool:
    """
    Render the login form.

    Returns:
        True once a user is signed in
    """
    if auth.is_authenticated:
        return True

    st.markdown("### 🔐 Inloggen")
    if auth.is_mock:
        st.info("Supabase is niet geconfigureerd. Gebruik admin@example.com / admin123.")

    with st.form("login_form"):
        email = st.text_input("E-mail", placeholder="naam@bedrijf.nl")
        password = st.text_input("Wachtwoord", type="password")
        submitted = st.form_submit_button("Inloggen", type="primary", use_container_width=True)

    if submitted:
        result = auth.sign_in(email, password)
        if result.success:
            st.rerun()
        st.error(f"Inloggen mislukt: {result.error}")

    return False
