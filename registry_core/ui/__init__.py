# =============================================================================
# registry_core/ui/__init__.py
# Streamlit views for the product registry
# =============================================================================

from .components import header, status_line, show_result
from .login import render_login
from .tabs import TAB_LABELS, render_tabs

__all__ = [
    "header",
    "status_line",
    "show_result",
    "render_login",
    "TAB_LABELS",
    "render_tabs",
]
