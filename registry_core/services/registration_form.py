# =============================================================================
# registry_core/services/registration_form.py
# Registration Form Controller
# =============================================================================
"""
State machine behind the Register tab.

    IDLE --submit (all four selections set)--> SUBMITTING
    SUBMITTING --adapter ok--> SUCCESS --> IDLE   (selections cleared)
    SUBMITTING --adapter error--> ERROR --> IDLE  (selections kept for retry)

A submit with any selection missing is inert: nothing is created and the
state stays IDLE. Outcome banners clear themselves after ``banner_ms``;
the scan lookup message after the shorter ``message_ms``.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from registry_core.data.models import Registration
from .base_service import BaseService, ServiceResult
from .sync_service import RegistrySession

ALL_CATEGORIES = "all"


class FormState(Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Banner:
    """A transient message shown until ``expires_at``."""
    message: str
    level: str  # success, info, error
    expires_at: datetime

    def is_visible(self, now: datetime) -> bool:
        return now < self.expires_at


class RegistrationFormController(BaseService):
    """
    Usage:
        form = RegistrationFormController(session)
        form.user = "Jan Janssen"
        form.product = "Interflon Fin Super"
        form.location = "Warehouse"
        form.purpose = "Demonstratie"
        registration = form.submit()
    """

    def __init__(
        self,
        session: RegistrySession,
        clock: Optional[Callable[[], datetime]] = None,
        banner_ms: int = 3000,
        message_ms: int = 2000,
    ):
        super().__init__()
        self.session = session
        self.clock = clock or session.clock
        self.banner_ms = banner_ms
        self.message_ms = message_ms

        self.state = FormState.IDLE
        self.last_outcome: Optional[FormState] = None
        self.banner: Optional[Banner] = None

        self.user = ""
        self.product = ""
        self.location = ""
        self.purpose = ""
        self.product_search = ""
        self.selected_category = ALL_CATEGORIES
        self.scanned_code = ""

    # =========================================================================
    # SELECTIONS
    # =========================================================================

    @property
    def is_complete(self) -> bool:
        return all([self.user, self.product, self.location, self.purpose])

    def select_product(self, name: str) -> None:
        self.product = name
        self.product_search = name

    def clear_selections(self) -> None:
        self.product = ""
        self.location = ""
        self.purpose = ""
        self.user = ""
        self.product_search = ""
        self.selected_category = ALL_CATEGORIES
        self.scanned_code = ""

    def _show(self, message: str, level: str, duration_ms: Optional[int] = None) -> None:
        duration_ms = self.banner_ms if duration_ms is None else duration_ms
        self.banner = Banner(
            message=message,
            level=level,
            expires_at=self.clock() + timedelta(milliseconds=duration_ms),
        )

    def visible_banner(self) -> Optional[Banner]:
        """The current banner, or None once its delay has passed."""
        if self.banner and not self.banner.is_visible(self.clock()):
            self.banner = None
        return self.banner

    # =========================================================================
    # SUBMIT
    # =========================================================================

    def submit(self) -> Optional[Registration]:
        """
        Create a registration from the current selections.

        Returns:
            The registration on success, None when inert or on error
        """
        if self.state is not FormState.IDLE or not self.is_complete:
            return None

        self.state = FormState.SUBMITTING
        now = self.clock()
        product = self.session.find_product_by_name(self.product)
        registration = Registration.create(
            user=self.user,
            product=self.product,
            location=self.location,
            purpose=self.purpose,
            now=now,
            qrcode=product.qrcode if product else None,
        )

        try:
            result = self.session.add_registration(registration)
        except Exception as e:
            self.logger.error(f"Error saving registration: {e}", exc_info=True)
            result = ServiceResult.from_exception(e)

        if result.success:
            self.last_outcome = FormState.SUCCESS
            self.clear_selections()
            self._show("Product geregistreerd!", "success")
            saved = result.data if isinstance(result.data, Registration) else registration
        else:
            self.last_outcome = FormState.ERROR
            self.logger.warning(f"Registration not saved: {result.error}")
            self._show("Fout bij opslaan registratie", "error")
            saved = None

        self.state = FormState.IDLE
        return saved

    # =========================================================================
    # QR SCAN
    # =========================================================================

    def apply_scanned_code(self, code: str) -> bool:
        """
        Select the product whose scan code matches ``code``.

        Returns:
            True when a product was found
        """
        self.scanned_code = (code or "").strip()
        product = self.session.find_product_by_qrcode(self.scanned_code)
        if product is None:
            self._show(f"Geen product gevonden voor QR code: {self.scanned_code}", "error")
            return False

        self.select_product(product.name)
        if product.category_id:
            self.selected_category = product.category_id
        self._show(f"Product gevonden: {product.name}", "info", self.message_ms)
        return True
