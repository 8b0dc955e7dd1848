# =============================================================================
# tests/integration/test_session_flow.py
# Integration Tests: check -> load -> mutate -> persist -> reload
# =============================================================================

from registry_core.data.models import EntityKind, Product
from registry_core.data.supabase_client import StubSupabaseClient
from registry_core.offline.connectivity import SessionMode
from registry_core.services.history_service import HistoryFilter, HistoryService
from registry_core.services.registration_form import RegistrationFormController
from registry_core.services.sync_service import RegistrySession


class TestLocalSessionFlow:
    """A full working day without Supabase"""

    def test_changes_survive_a_new_session(self, local_settings, mirror, clock):
        session = RegistrySession(local_settings, client=StubSupabaseClient(), mirror=mirror, clock=clock)
        assert session.start() is SessionMode.LOCAL

        session.add_user("Piet")
        session.add_location("Zolder")
        session.remove_product("6")

        form = RegistrationFormController(session)
        form.user = "Piet"
        assert form.apply_scanned_code("IFGR004")
        form.location = "Zolder"
        form.purpose = "Reparatie"
        registration = form.submit()
        session.close()

        clock.advance(86_400_000)
        reloaded = RegistrySession(local_settings, client=StubSupabaseClient(), mirror=mirror, clock=clock)
        reloaded.start()

        assert "Piet" in reloaded.users
        assert "Zolder" in reloaded.locations
        assert all(p.id != "6" for p in reloaded.products)
        assert reloaded.registrations == [registration]
        assert registration.product == "Interflon Fin Grease"
        assert registration.qrcode == "IFGR004"

        rows = HistoryService().filter_registrations(reloaded.registrations, HistoryFilter(user="Piet"))
        assert rows == [registration]


class TestConnectedSessionFlow:
    """Remote load followed by realtime pushes"""

    def test_push_updates_collection_until_edit_opens(
        self, connected_settings, mirror, clock, supabase_factory, fake_realtime
    ):
        client = supabase_factory({
            "users": [{"name": "Remote Jan"}],
            "products": [{"id": 10, "name": "Remote Kit", "qr_code": "RK10"}],
        })
        session = RegistrySession(
            connected_settings, client=client, mirror=mirror, clock=clock, realtime=fake_realtime
        )

        assert session.start() is SessionMode.CONNECTED
        assert session.products == [Product(id="10", name="Remote Kit", qrcode="RK10")]

        callbacks = fake_realtime.callbacks
        assert set(callbacks) == {kind.value for kind in EntityKind}

        client.set_rows("products", [
            {"id": 10, "name": "Remote Kit", "qr_code": "RK10"},
            {"id": 11, "name": "Second Kit"},
        ])
        callbacks["products"]({"eventType": "INSERT"})
        assert [p.id for p in session.products] == ["10", "11"]

        session.guard.set_edit_in_progress(EntityKind.PRODUCTS, True)
        client.set_rows("products", [])
        callbacks["products"]({"eventType": "DELETE"})
        assert [p.id for p in session.products] == ["10", "11"]

        session.guard.set_edit_in_progress(EntityKind.PRODUCTS, False)
        session.close()
        assert session.subscriptions.active_count == 0
        assert fake_realtime.closed
