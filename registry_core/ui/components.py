import plotly.graph_objects as go
import streamlit as st

from registry_core.services.base_service import ServiceResult
from registry_core.services.registration_form import Banner

# === COLOR PALETTE ===
PRIMARY_COLOR    = "#d97706"
SUCCESS_COLOR    = "#10b981"
WARNING_COLOR    = "#f59e0b"
DANGER_COLOR     = "#ef4444"
TEXT_COLOR       = "#2c3e50"
SUBTLE_TEXT      = "#495057"
GRID_COLOR       = "#e5e7eb"
CARD_BG_LIGHT    = "#ffffff"


def header(title: str, subtitle: str, icon: str = "📦"):
    st.markdown(f"## {icon} {title}")
    st.caption(subtitle)


def status_line(status: dict):
    """Connection badge shown under the page header."""
    if status.get("mode") == "connected":
        st.success(f"🟢 {status['label']}")
    else:
        st.warning(f"🟠 {status['label']}")
    if status.get("realtime") == "degraded":
        reason = status.get("realtime_error") or "niet alle kanalen open"
        st.caption(f"⚠️ Live updates beperkt: {reason} (vernieuw handmatig)")
    for table, error in (status.get("load_errors") or {}).items():
        st.caption(f"⚠️ {table}: {error} (standaardgegevens gebruikt)")


def show_banner(banner: Banner):
    if banner is None:
        return
    if banner.level == "success":
        st.success(banner.message)
    elif banner.level == "error":
        st.error(banner.message)
    else:
        st.info(banner.message)


def show_result(result: ServiceResult, success_message: str, error_message: str):
    """
    Report a mutation outcome.

    A failed remote write may still have been applied locally; the error is
    shown so the user knows it did not reach the server.
    """
    if result.success:
        st.success(success_message)
    elif result.error_code in ("EMPTY", "DUPLICATE"):
        st.warning(result.error)
    else:
        st.error(f"{error_message}: {result.error}")


def add_grid(fig):
    """Shared axis and background styling for plotly charts."""
    fig.update_xaxes(showgrid=True, gridcolor=GRID_COLOR, zeroline=False,
                     tickfont=dict(color=SUBTLE_TEXT), title_font=dict(color=TEXT_COLOR))
    fig.update_yaxes(showgrid=False, tickfont=dict(color=SUBTLE_TEXT))
    fig.update_layout(plot_bgcolor=CARD_BG_LIGHT, paper_bgcolor=CARD_BG_LIGHT,
                      font=dict(family="Segoe UI, sans-serif", size=12, color=TEXT_COLOR),
                      margin=dict(l=10, r=10, t=40, b=10), height=280)
    return fig


def top_counts_chart(title: str, counts: list) -> go.Figure:
    """Horizontal bar chart for a top-N list of (name, count) pairs."""
    names = [name for name, _ in counts][::-1]
    values = [count for _, count in counts][::-1]
    fig = go.Figure(go.Bar(
        x=values,
        y=names,
        orientation="h",
        marker=dict(color=PRIMARY_COLOR),
        hovertemplate="%{y}: %{x}<extra></extra>",
    ))
    fig.update_layout(title=dict(text=title, font=dict(size=14, color=TEXT_COLOR)))
    return add_grid(fig)
