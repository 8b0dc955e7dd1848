# =============================================================================
# tests/unit/test_sync_service.py
# Unit Tests for RegistrySession
# =============================================================================

import pytest

from registry_core.data.models import Category, EntityKind, Registration, instant_id
from registry_core.data.seeds import seed_for
from registry_core.offline.connectivity import SessionMode


def _session(settings, client, mirror, clock, realtime=None):
    from registry_core.services.sync_service import RegistrySession

    session = RegistrySession(settings, client=client, mirror=mirror, clock=clock, realtime=realtime)
    session.start()
    return session


class TestLocalSessionStartup:
    """Session without a remote store"""

    def test_starts_in_local_mode_with_seeds(self, local_session):
        assert local_session.mode is SessionMode.LOCAL
        for kind in EntityKind:
            assert local_session.collection(kind) == seed_for(kind)

    def test_no_subscriptions_in_local_mode(self, local_session):
        assert local_session.subscriptions.active_count == 0

    def test_status_reports_local_mode(self, local_session):
        status = local_session.get_status()

        assert status["mode"] == "local"
        assert status["counts"]["products"] == 6
        assert status["subscriptions"] == 0


class TestNamedEntities:
    """Users, locations and purposes"""

    def test_add_user_appends_and_persists(self, local_session, mirror):
        result = local_session.add_user("  Piet  ")

        assert result.success
        assert local_session.users[-1] == "Piet"
        assert mirror.load(EntityKind.USERS)[-1] == "Piet"

    def test_duplicate_user_is_refused(self, local_session):
        local_session.add_user("Piet")
        result = local_session.add_user("Piet")

        assert not result.success
        assert result.error_code == "DUPLICATE"
        assert local_session.users.count("Piet") == 1

    def test_blank_name_is_refused(self, local_session):
        result = local_session.add_location("   ")

        assert result.error_code == "EMPTY"
        assert local_session.locations == seed_for(EntityKind.LOCATIONS)

    def test_remove_twice_is_a_no_op(self, local_session):
        assert local_session.remove_purpose("Training").success
        assert local_session.remove_purpose("Training").success
        assert "Training" not in local_session.purposes
        assert len(local_session.purposes) == 4


class TestCategoriesAndProducts:
    """Categories and products"""

    def test_add_category_uses_instant_id(self, local_session, clock):
        result = local_session.add_category("Gereedschap")

        assert result.success
        assert local_session.categories[-1] == Category(id=instant_id(clock()), name="Gereedschap")

    def test_duplicate_category_name_is_refused(self, local_session):
        assert local_session.add_category("Reinigers").error_code == "DUPLICATE"

    def test_remove_category_leaves_products_dangling(self, local_session):
        local_session.remove_category("1")

        fin_super = local_session.find_product_by_name("Interflon Fin Super")
        assert fin_super.category_id == "1"
        assert local_session.category_name(fin_super.category_id) == "Geen"

    def test_category_name_lookup(self, local_session):
        assert local_session.category_name("2") == "Reinigers"
        assert local_session.category_name(None) == "Geen"

    def test_add_product_normalizes_fields(self, local_session, clock, fixed_now):
        local_session.add_product("Kit", " QR9 ", "none")
        product = local_session.products[-1]

        assert product.id == instant_id(fixed_now)
        assert product.qrcode == "QR9"
        assert product.category_id is None
        assert product.created_at == "2024-03-15T10:30:00.000Z"

    def test_ids_created_at_the_same_instant_are_unique(self, local_session):
        local_session.add_product("A")
        local_session.add_product("B")
        first, second = local_session.products[-2:]

        assert int(second.id) == int(first.id) + 1

    def test_remove_product(self, local_session, mirror):
        local_session.remove_product("3")

        assert all(p.id != "3" for p in local_session.products)
        assert all(p.id != "3" for p in mirror.load(EntityKind.PRODUCTS))

    def test_product_lookup_first_match_wins(self, local_session):
        local_session.add_product("Interflon Fin Super", "OTHER")

        assert local_session.find_product_by_name("Interflon Fin Super").id == "1"

    def test_product_lookup_by_qrcode(self, local_session):
        assert local_session.find_product_by_qrcode("IFD003").name == "Interflon Degreaser"
        assert local_session.find_product_by_qrcode("  ") is None
        assert local_session.find_product_by_qrcode("UNKNOWN") is None

    def test_update_is_not_implemented(self, local_session):
        result = local_session.update_entity(EntityKind.PRODUCTS, "1", "Nieuw")

        assert result.error_code == "NOT_IMPLEMENTED"
        assert local_session.products[0].name == "Interflon Fin Super"


class TestRegistrations:
    """Registration history"""

    def test_newest_registration_comes_first(self, local_session, clock):
        first = Registration.create("Jan Janssen", "Kit", "Thuis", "Training", clock())
        clock.advance(60_000)
        second = Registration.create("Anna van der Berg", "Kit", "Thuis", "Training", clock())

        local_session.add_registration(first)
        local_session.add_registration(second)

        assert local_session.registrations == [second, first]

    def test_failed_remote_registration_is_not_applied(
        self, connected_settings, mirror, clock, supabase_factory, fake_realtime
    ):
        client = supabase_factory(fail_inserts=("registrations",))
        session = _session(connected_settings, client, mirror, clock, fake_realtime)
        registration = Registration.create("Jan", "Kit", "Thuis", "Training", clock())

        result = session.add_registration(registration)

        assert not result.success
        assert session.registrations == []
        session.close()


class TestConnectedSession:
    """Session against the (mocked) remote store"""

    def test_starts_connected_and_subscribes(self, connected_session):
        assert connected_session.mode is SessionMode.CONNECTED
        assert connected_session.subscriptions.active_count == len(EntityKind)
        assert connected_session.load_errors == {}

    def test_empty_remote_tables_use_seeds(self, connected_session):
        assert connected_session.users == seed_for(EntityKind.USERS)
        assert connected_session.registrations == []

    def test_failed_collection_falls_back_alone(
        self, connected_settings, mirror, clock, supabase_factory, fake_realtime
    ):
        client = supabase_factory(
            {"users": [{"name": "Remote User"}]},
            fail_tables=("products",),
        )
        session = _session(connected_settings, client, mirror, clock, fake_realtime)

        assert session.is_connected
        assert session.users == ["Remote User"]
        assert session.products == seed_for(EntityKind.PRODUCTS)
        assert "does not exist" in session.load_errors[EntityKind.PRODUCTS]
        session.close()

    def test_failed_remote_write_is_applied_optimistically(
        self, connected_settings, mirror, clock, supabase_factory, fake_realtime
    ):
        client = supabase_factory(fail_inserts=("users",))
        session = _session(connected_settings, client, mirror, clock, fake_realtime)

        result = session.add_user("Piet")

        assert not result.success
        assert "Piet" in session.users
        session.close()

    def test_connected_mutations_do_not_touch_the_mirror(self, connected_session, mirror):
        connected_session.add_user("Piet")

        assert mirror.get_raw(mirror.key_for(EntityKind.USERS)) is None

    def test_push_replaces_collection(self, connected_session):
        applied = connected_session.apply_push(EntityKind.LOCATIONS, ["Alleen deze"])

        assert applied
        assert connected_session.locations == ["Alleen deze"]

    def test_push_dropped_while_editing(self, connected_session):
        connected_session.guard.set_edit_in_progress(EntityKind.PRODUCTS, True)

        applied = connected_session.apply_push(EntityKind.PRODUCTS, [])

        assert not applied
        assert connected_session.products == seed_for(EntityKind.PRODUCTS)
        assert connected_session.guard.dropped_pushes(EntityKind.PRODUCTS) == 1

    def test_refresh_reads_one_collection(self, connected_session, mock_supabase):
        mock_supabase.set_rows("purposes", [{"name": "Audit"}])

        result = connected_session.refresh(EntityKind.PURPOSES)

        assert result.success
        assert connected_session.purposes == ["Audit"]

    def test_close_unsubscribes_every_channel(self, connected_session, fake_realtime):
        connected_session.close()

        assert sorted(fake_realtime.removed) == sorted(kind.value for kind in EntityKind)
        assert connected_session.subscriptions.active_count == 0
        assert fake_realtime.closed

    def test_push_channel_refreshes_collection(self, connected_session, mock_supabase, fake_realtime):
        mock_supabase.set_rows("locations", [{"name": "Magazijn"}])

        fake_realtime.callbacks["locations"]({"eventType": "INSERT"})

        assert connected_session.locations == ["Magazijn"]


class TestRealtimeStatus:
    """Push channel availability"""

    def test_active_when_every_channel_is_open(self, connected_session):
        status = connected_session.get_status()

        assert status["realtime"] == "active"
        assert status["subscriptions"] == len(EntityKind)

    def test_degraded_when_realtime_cannot_connect(
        self, connected_settings, mirror, clock, mock_supabase, realtime_factory
    ):
        realtime = realtime_factory(available=False)
        session = _session(connected_settings, mock_supabase, mirror, clock, realtime)

        status = session.get_status()

        assert session.is_connected
        assert session.subscriptions.active_count == 0
        assert status["realtime"] == "degraded"
        assert status["realtime_error"] == "connection refused"
        session.close()
        assert realtime.closed

    def test_off_in_local_mode(self, local_session):
        assert local_session.get_status()["realtime"] == "off"
        assert local_session.realtime is None

    def test_default_clock_is_timezone_aware(self, local_settings, mirror):
        from registry_core.data.supabase_client import StubSupabaseClient
        from registry_core.services.sync_service import RegistrySession

        session = RegistrySession(local_settings, client=StubSupabaseClient(), mirror=mirror)

        assert session.clock().utcoffset() is not None


@pytest.mark.parametrize("name", ["Jan Janssen", "Marie Pietersen"])
def test_existing_seed_user_is_duplicate(local_session, name):
    assert local_session.add_user(name).error_code == "DUPLICATE"
