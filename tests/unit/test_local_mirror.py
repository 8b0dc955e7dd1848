# =============================================================================
# tests/unit/test_local_mirror.py
# Unit Tests for LocalMirror
# =============================================================================

import pytest

from registry_core.data.models import Category, EntityKind, Product, Registration
from registry_core.data.seeds import seed_for


class TestLocalMirrorLoad:
    """Reading collections"""

    def test_absent_collection_loads_seed(self, mirror):
        for kind in EntityKind:
            assert mirror.load(kind) == seed_for(kind)

    def test_flushed_collection_is_loaded_back(self, mirror, fixed_now):
        products = [Product(id="1", name="Kit", qrcode="K1", category_id="3")]
        registrations = [Registration.create("Jan", "Kit", "Thuis", "Training", fixed_now, qrcode="K1")]

        mirror.flush(EntityKind.PRODUCTS, products)
        mirror.flush(EntityKind.REGISTRATIONS, registrations)
        mirror.flush(EntityKind.USERS, ["Jan"])

        assert mirror.load(EntityKind.PRODUCTS) == products
        assert mirror.load(EntityKind.REGISTRATIONS) == registrations
        assert mirror.load(EntityKind.USERS) == ["Jan"]

    def test_empty_list_is_kept(self, mirror):
        mirror.flush(EntityKind.LOCATIONS, [])

        assert mirror.load(EntityKind.LOCATIONS) == []

    def test_unparseable_blob_loads_seed(self, mirror):
        mirror.set_raw(mirror.key_for(EntityKind.CATEGORIES), "{not json")

        assert mirror.load(EntityKind.CATEGORIES) == seed_for(EntityKind.CATEGORIES)

    def test_wrong_shape_loads_seed(self, mirror):
        mirror.set_raw(mirror.key_for(EntityKind.USERS), '{"name": "Jan"}')
        mirror.set_raw(mirror.key_for(EntityKind.CATEGORIES), '[{"unexpected": 1}]')

        assert mirror.load(EntityKind.USERS) == seed_for(EntityKind.USERS)
        assert mirror.load(EntityKind.CATEGORIES) == seed_for(EntityKind.CATEGORIES)


class TestLocalMirrorKeys:
    """Namespaced keys"""

    def test_key_format(self, mirror):
        assert mirror.key_for(EntityKind.USERS) == "test-registry-users"

    def test_namespaces_are_isolated(self, tmp_path):
        from registry_core.offline.local_mirror import LocalMirror

        first = LocalMirror(tmp_path / "shared.db", namespace="one")
        second = LocalMirror(tmp_path / "shared.db", namespace="two")
        first.flush(EntityKind.USERS, ["Alleen in een"])

        assert second.load(EntityKind.USERS) == seed_for(EntityKind.USERS)
        first.close()
        second.close()

    def test_flush_overwrites(self, mirror):
        mirror.flush(EntityKind.PURPOSES, ["A"])
        mirror.flush(EntityKind.PURPOSES, ["B"])

        assert mirror.load(EntityKind.PURPOSES) == ["B"]

    def test_clear_one_and_all(self, mirror):
        mirror.flush(EntityKind.USERS, ["Jan"])
        mirror.flush(EntityKind.CATEGORIES, [Category(id="9", name="X")])

        mirror.clear(EntityKind.USERS)
        assert mirror.get_raw(mirror.key_for(EntityKind.USERS)) is None
        assert mirror.get_raw(mirror.key_for(EntityKind.CATEGORIES)) is not None

        mirror.clear()
        assert mirror.get_raw(mirror.key_for(EntityKind.CATEGORIES)) is None


class TestLocalMirrorErrors:
    """Write failures"""

    def test_unserializable_value_raises_local_storage_error(self, mirror):
        from registry_core.errors import LocalStorageError

        with pytest.raises(LocalStorageError) as exc_info:
            mirror.flush(EntityKind.USERS, [object()])

        assert exc_info.value.details["key"] == "test-registry-users"
