# =============================================================================
# tests/unit/test_registration_form.py
# Unit Tests for RegistrationFormController
# =============================================================================

from registry_core.data.models import Registration, instant_id


def _fill(form, user="Jan Janssen", product="Interflon Fin Super", location="Warehouse", purpose="Demonstratie"):
    form.user = user
    form.select_product(product)
    form.location = location
    form.purpose = purpose


class TestSubmit:
    """Submitting the form"""

    def test_complete_form_creates_registration(self, local_session, fixed_now):
        from registry_core.services.registration_form import FormState, RegistrationFormController

        form = RegistrationFormController(local_session)
        _fill(form)

        registration = form.submit()

        assert registration == Registration(
            id=instant_id(fixed_now),
            user="Jan Janssen",
            product="Interflon Fin Super",
            location="Warehouse",
            purpose="Demonstratie",
            timestamp="2024-03-15T10:30:00.000Z",
            date="2024-03-15",
            time=fixed_now.astimezone().strftime("%H:%M:%S"),
            qrcode="IFLS001",
        )
        assert local_session.registrations[0] == registration
        assert form.state is FormState.IDLE
        assert form.last_outcome is FormState.SUCCESS

    def test_success_clears_selections_and_shows_banner(self, local_session):
        from registry_core.services.registration_form import RegistrationFormController

        form = RegistrationFormController(local_session)
        _fill(form)
        form.submit()

        assert (form.user, form.product, form.location, form.purpose) == ("", "", "", "")
        assert form.product_search == ""
        assert form.visible_banner().message == "Product geregistreerd!"

    def test_banner_expires(self, local_session, clock):
        from registry_core.services.registration_form import RegistrationFormController

        form = RegistrationFormController(local_session, banner_ms=3000)
        _fill(form)
        form.submit()

        clock.advance(2999)
        assert form.visible_banner() is not None
        clock.advance(1)
        assert form.visible_banner() is None

    def test_missing_location_is_inert(self, local_session):
        from registry_core.services.registration_form import FormState, RegistrationFormController

        form = RegistrationFormController(local_session)
        _fill(form, location="")

        assert form.submit() is None
        assert local_session.registrations == []
        assert form.state is FormState.IDLE
        assert form.banner is None
        assert form.user == "Jan Janssen"

    def test_unknown_product_has_no_qrcode(self, local_session):
        from registry_core.services.registration_form import RegistrationFormController

        form = RegistrationFormController(local_session)
        _fill(form, product="Handgetypt product")

        assert form.submit().qrcode is None

    def test_failed_save_keeps_selections(
        self, connected_settings, mirror, clock, supabase_factory, fake_realtime
    ):
        from registry_core.services.registration_form import FormState, RegistrationFormController
        from registry_core.services.sync_service import RegistrySession

        session = RegistrySession(
            connected_settings,
            client=supabase_factory(fail_inserts=("registrations",)),
            mirror=mirror,
            clock=clock,
            realtime=fake_realtime,
        )
        session.start()
        form = RegistrationFormController(session)
        _fill(form)

        assert form.submit() is None
        assert form.last_outcome is FormState.ERROR
        assert form.state is FormState.IDLE
        assert form.user == "Jan Janssen"
        assert form.location == "Warehouse"
        assert form.visible_banner().level == "error"
        assert session.registrations == []
        session.close()


class TestScannedCode:
    """QR code lookup"""

    def test_known_code_selects_product_and_category(self, local_session):
        from registry_core.services.registration_form import RegistrationFormController

        form = RegistrationFormController(local_session)

        assert form.apply_scanned_code(" IFMK006 ")
        assert form.product == "Interflon Maintenance Kit"
        assert form.selected_category == "3"
        assert form.visible_banner().level == "info"

    def test_unknown_code_leaves_selection(self, local_session):
        from registry_core.services.registration_form import RegistrationFormController

        form = RegistrationFormController(local_session)
        form.select_product("Interflon Degreaser")

        assert not form.apply_scanned_code("NOPE")
        assert form.product == "Interflon Degreaser"
        assert "NOPE" in form.visible_banner().message

    def test_found_message_uses_the_shorter_delay(self, local_session, clock):
        from registry_core.services.registration_form import RegistrationFormController

        form = RegistrationFormController(local_session, banner_ms=3000, message_ms=2000)
        form.apply_scanned_code("IFMK006")

        clock.advance(1999)
        assert form.visible_banner() is not None
        clock.advance(1)
        assert form.visible_banner() is None

    def test_not_found_message_uses_the_banner_delay(self, local_session, clock):
        from registry_core.services.registration_form import RegistrationFormController

        form = RegistrationFormController(local_session, banner_ms=3000, message_ms=2000)
        form.apply_scanned_code("NOPE")

        clock.advance(2500)
        assert form.visible_banner().level == "error"
