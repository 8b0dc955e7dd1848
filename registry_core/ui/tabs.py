# =============================================================================
# registry_core/ui/tabs.py
# The eight registry tabs
# =============================================================================
"""
Tab renderers. Every function takes the session objects explicitly; none of
them reads globals besides ``st.session_state`` widget values.
"""

from __future__ import annotations
from typing import Callable, List, Optional

import pandas as pd
import streamlit as st

from registry_core.data.models import EntityKind
from registry_core.errors import safe_execute
from registry_core.services.history_service import (
    ALL,
    HistoryFilter,
    HistoryService,
    filter_products,
    filter_users,
)
from registry_core.services.registration_form import RegistrationFormController
from registry_core.services.sync_service import RegistrySession
from .components import show_banner, show_result, top_counts_chart

TAB_LABELS = [
    "📦 Registreren",
    "📋 Geschiedenis",
    "👥 Gebruikers",
    "🏷️ Producten",
    "🗂️ Categorieën",
    "📍 Locaties",
    "🎯 Doelen",
    "📊 Statistieken",
]

SORT_LABELS = {"date": "Datum", "user": "Gebruiker", "product": "Product", "location": "Locatie"}
ORDER_LABELS = {"newest": "Nieuwste eerst", "oldest": "Oudste eerst"}


def _index_of(options: List[str], value: str) -> Optional[int]:
    return options.index(value) if value in options else None


# =============================================================================
# EDIT DIALOG
# =============================================================================

def _open_edit(registry: RegistrySession, kind: EntityKind, key: str):
    """Open one edit box; a box already open for another kind is closed first."""
    previous = st.session_state.get("editing")
    if previous and previous[0] != kind.value:
        registry.guard.set_edit_in_progress(EntityKind(previous[0]), False)
    registry.guard.set_edit_in_progress(kind, True)
    st.session_state["editing"] = (kind.value, key)


def _close_edit(registry: RegistrySession, kind: EntityKind):
    registry.guard.set_edit_in_progress(kind, False)
    st.session_state["editing"] = None


def _show_edit_feedback(kind: EntityKind):
    """Outcome of the last save for ``kind``, shown once after the rerun."""
    feedback = st.session_state.get("edit_feedback")
    if feedback and feedback[0] == kind.value:
        st.session_state["edit_feedback"] = None
        show_result(feedback[1], "Bijgewerkt", "Bijwerken niet mogelijk")


def _render_edit(registry: RegistrySession, kind: EntityKind, current: str):
    """Inline edit box; realtime pushes for ``kind`` are held back while it is open."""
    editing = st.session_state.get("editing")
    if not editing or editing[0] != kind.value:
        return

    key = editing[1]
    with st.container(border=True):
        st.markdown(f"**Bewerken:** {current}")
        new_value = st.text_input("Nieuwe naam", value=current, key=f"edit_{kind.value}_{key}")
        save_col, cancel_col = st.columns(2)
        if save_col.button("Opslaan", key=f"save_{kind.value}", type="primary"):
            result = registry.update_entity(kind, key, new_value)
            st.session_state["edit_feedback"] = (kind.value, result)
            _close_edit(registry, kind)
            st.rerun()
        if cancel_col.button("Annuleren", key=f"cancel_{kind.value}"):
            _close_edit(registry, kind)
            st.rerun()


# =============================================================================
# REGISTER
# =============================================================================

def render_register_tab(registry: RegistrySession, form: RegistrationFormController):
    st.markdown("### 📦 Nieuw Product Registreren")

    scan_col, button_col = st.columns([3, 1])
    code = scan_col.text_input("QR code", value=form.scanned_code, placeholder="Scan of typ een QR code")
    if button_col.button("Zoek", use_container_width=True) and code:
        form.apply_scanned_code(code)

    users = filter_users(registry.users)
    form.user = st.selectbox(
        "Gebruiker", users, index=_index_of(users, form.user), placeholder="Selecteer gebruiker"
    ) or ""

    categories = {c.id: c.name for c in registry.categories}
    category_options = [ALL] + list(categories)
    form.selected_category = st.selectbox(
        "Categorie",
        category_options,
        index=_index_of(category_options, form.selected_category) or 0,
        format_func=lambda cid: "Alle categorieën" if cid == ALL else categories.get(cid, cid),
    )

    form.product_search = st.text_input("Zoek product", value=form.product_search, placeholder="Zoek product...")
    products = filter_products(registry.products, form.selected_category, form.product_search)
    product_names = [p.name for p in products]
    if form.product and form.product not in product_names:
        product_names.insert(0, form.product)
    form.product = st.selectbox(
        "Product", product_names, index=_index_of(product_names, form.product), placeholder="Selecteer product"
    ) or ""

    locations = registry.locations
    form.location = st.selectbox(
        "Locatie", locations, index=_index_of(locations, form.location), placeholder="Selecteer een locatie"
    ) or ""

    purposes = registry.purposes
    form.purpose = st.selectbox(
        "Doel", purposes, index=_index_of(purposes, form.purpose), placeholder="Selecteer een doel"
    ) or ""

    if st.button("Registreren", type="primary", disabled=not form.is_complete, use_container_width=True):
        form.submit()

    show_banner(form.visible_banner())


# =============================================================================
# HISTORY
# =============================================================================

def render_history_tab(registry: RegistrySession, history: HistoryService):
    st.markdown("### 📋 Registratie Geschiedenis")
    registrations = registry.registrations

    search = st.text_input("Zoeken", placeholder="Zoek in registraties...", key="history_search")
    user_col, location_col = st.columns(2)
    user = user_col.selectbox(
        "Gebruiker", [ALL] + filter_users(registry.users), key="history_user",
        format_func=lambda u: "Alle gebruikers" if u == ALL else u,
    )
    location = location_col.selectbox(
        "Locatie", [ALL] + registry.locations, key="history_location",
        format_func=lambda loc: "Alle locaties" if loc == ALL else loc,
    )

    from_col, to_col, sort_col, order_col = st.columns(4)
    date_from = from_col.date_input("Vanaf", value=None)
    date_to = to_col.date_input("Tot en met", value=None)
    sort_by = sort_col.selectbox("Sorteren op", list(SORT_LABELS), format_func=SORT_LABELS.get, key="history_sort_by")
    sort_order = order_col.selectbox("Volgorde", list(ORDER_LABELS), format_func=ORDER_LABELS.get, key="history_sort_order")

    criteria = HistoryFilter(
        search=search,
        user=user,
        location=location,
        date_from=date_from.isoformat() if date_from else None,
        date_to=date_to.isoformat() if date_to else None,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    rows = history.filter_registrations(registrations, criteria)

    st.caption(f"{len(rows)} van {len(registrations)} registraties")
    if not rows:
        st.info("Geen registraties gevonden")
        return

    df = pd.DataFrame([r.to_dict() for r in rows])
    st.dataframe(
        df[["date", "time", "user", "product", "qrcode", "location", "purpose"]],
        use_container_width=True,
        hide_index=True,
    )
    st.download_button(
        "⬇️ Exporteer CSV",
        data=safe_execute(history.export_csv, rows, default=b"", error_message="Export mislukt"),
        file_name="registraties.csv",
        mime="text/csv",
    )


# =============================================================================
# NAMED COLLECTIONS (users, locations, purposes)
# =============================================================================

def _render_named_tab(
    registry: RegistrySession,
    kind: EntityKind,
    title: str,
    placeholder: str,
    values: List[str],
    add: Callable,
    remove: Callable,
):
    st.markdown(f"### {title}")

    with st.form(f"add_{kind.value}", clear_on_submit=True):
        name = st.text_input(placeholder, placeholder=placeholder)
        if st.form_submit_button("Toevoegen"):
            show_result(add(name), f"'{name.strip()}' toegevoegd", "Opslaan mislukt")

    for value in values:
        name_col, edit_col, delete_col = st.columns([6, 1, 1])
        name_col.write(value)
        if edit_col.button("✏️", key=f"edit_btn_{kind.value}_{value}"):
            _open_edit(registry, kind, value)
        if delete_col.button("🗑️", key=f"del_{kind.value}_{value}"):
            show_result(remove(value), f"'{value}' verwijderd", "Verwijderen mislukt")
            st.rerun()

    _show_edit_feedback(kind)
    editing = st.session_state.get("editing")
    if editing and editing[0] == kind.value:
        _render_edit(registry, kind, editing[1])


def render_users_tab(registry: RegistrySession):
    search = st.text_input("Zoek op naam...", key="user_search")
    _render_named_tab(
        registry, EntityKind.USERS, "👥 Gebruikers Beheren", "Nieuwe gebruiker",
        filter_users(registry.users, search), registry.add_user, registry.remove_user,
    )


def render_locations_tab(registry: RegistrySession):
    _render_named_tab(
        registry, EntityKind.LOCATIONS, "📍 Locaties Beheren", "Nieuwe locatie",
        registry.locations, registry.add_location, registry.remove_location,
    )


def render_purposes_tab(registry: RegistrySession):
    _render_named_tab(
        registry, EntityKind.PURPOSES, "🎯 Doelen Beheren", "Nieuw doel",
        registry.purposes, registry.add_purpose, registry.remove_purpose,
    )


# =============================================================================
# PRODUCTS / CATEGORIES
# =============================================================================

def render_products_tab(registry: RegistrySession):
    st.markdown("### 🏷️ Producten Beheren")
    categories = {c.id: c.name for c in registry.categories}

    with st.form("add_product", clear_on_submit=True):
        name = st.text_input("Product naam")
        qrcode = st.text_input("QR Code (optioneel)")
        category_id = st.selectbox(
            "Categorie", ["none"] + list(categories),
            format_func=lambda cid: "Geen categorie" if cid == "none" else categories[cid],
        )
        if st.form_submit_button("Product toevoegen"):
            show_result(registry.add_product(name, qrcode, category_id), "Product toegevoegd", "Opslaan mislukt")

    search_col, category_col = st.columns(2)
    search = search_col.text_input("Zoek product", key="product_search")
    category = category_col.selectbox(
        "Filter categorie", [ALL] + list(categories), key="product_category",
        format_func=lambda cid: "Alle categorieën" if cid == ALL else categories[cid],
    )

    for product in filter_products(registry.products, category, search):
        name_col, code_col, cat_col, edit_col, delete_col = st.columns([4, 2, 2, 1, 1])
        name_col.write(product.name)
        code_col.caption(product.qrcode or "-")
        cat_col.caption(registry.category_name(product.category_id))
        if edit_col.button("✏️", key=f"edit_btn_products_{product.id}"):
            _open_edit(registry, EntityKind.PRODUCTS, product.id)
        if delete_col.button("🗑️", key=f"del_products_{product.id}"):
            show_result(registry.remove_product(product.id), "Product verwijderd", "Verwijderen mislukt")
            st.rerun()

    _show_edit_feedback(EntityKind.PRODUCTS)
    editing = st.session_state.get("editing")
    if editing and editing[0] == EntityKind.PRODUCTS.value:
        product = next((p for p in registry.products if p.id == editing[1]), None)
        if product is None:
            _close_edit(registry, EntityKind.PRODUCTS)
        else:
            _render_edit(registry, EntityKind.PRODUCTS, product.name)


def render_categories_tab(registry: RegistrySession):
    st.markdown("### 🗂️ Categorieën Beheren")

    with st.form("add_category", clear_on_submit=True):
        name = st.text_input("Nieuwe categorie")
        if st.form_submit_button("Toevoegen"):
            show_result(registry.add_category(name), "Categorie toegevoegd", "Opslaan mislukt")

    for category in registry.categories:
        name_col, count_col, edit_col, delete_col = st.columns([5, 2, 1, 1])
        name_col.write(category.name)
        used = sum(1 for p in registry.products if p.category_id == category.id)
        count_col.caption(f"{used} producten")
        if edit_col.button("✏️", key=f"edit_btn_categories_{category.id}"):
            _open_edit(registry, EntityKind.CATEGORIES, category.id)
        if delete_col.button("🗑️", key=f"del_categories_{category.id}"):
            show_result(registry.remove_category(category.id), "Categorie verwijderd", "Verwijderen mislukt")
            st.rerun()

    _show_edit_feedback(EntityKind.CATEGORIES)
    editing = st.session_state.get("editing")
    if editing and editing[0] == EntityKind.CATEGORIES.value:
        category = next((c for c in registry.categories if c.id == editing[1]), None)
        if category is None:
            _close_edit(registry, EntityKind.CATEGORIES)
        else:
            _render_edit(registry, EntityKind.CATEGORIES, category.name)


# =============================================================================
# STATISTICS
# =============================================================================

def render_statistics_tab(registry: RegistrySession, history: HistoryService):
    st.markdown("### 📊 Statistieken")
    stats = history.statistics(
        registry.registrations, registry.users, registry.products, registry.locations
    )

    cols = st.columns(4)
    cols[0].metric("Totaal Registraties", stats["total_registrations"])
    cols[1].metric("Actieve Gebruikers", stats["total_users"])
    cols[2].metric("Geregistreerde Producten", stats["total_products"])
    cols[3].metric("Beschikbare Locaties", stats["total_locations"])

    if not stats["total_registrations"]:
        st.info("Nog geen registraties")
        return

    for title, key in (
        ("Top 5 Producten", "top_products"),
        ("Top 5 Gebruikers", "top_users"),
        ("Top 5 Locaties", "top_locations"),
    ):
        st.plotly_chart(top_counts_chart(title, stats[key]), use_container_width=True)


# =============================================================================
# ENTRY
# =============================================================================

def render_tabs(registry: RegistrySession, form: RegistrationFormController):
    history = HistoryService()
    tabs = st.tabs(TAB_LABELS)

    with tabs[0]:
        render_register_tab(registry, form)
    with tabs[1]:
        render_history_tab(registry, history)
    with tabs[2]:
        render_users_tab(registry)
    with tabs[3]:
        render_products_tab(registry)
    with tabs[4]:
        render_categories_tab(registry)
    with tabs[5]:
        render_locations_tab(registry)
    with tabs[6]:
        render_purposes_tab(registry)
    with tabs[7]:
        render_statistics_tab(registry, history)
