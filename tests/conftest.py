# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import pytest
from datetime import datetime, timedelta, timezone
from typing import Dict, List
from unittest.mock import MagicMock

from registry_core.config import AppSettings, RemoteConfig
from registry_core.data.models import EntityKind


# =============================================================================
# CLOCK
# =============================================================================

class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, milliseconds: int) -> None:
        self.now += timedelta(milliseconds=milliseconds)


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 15, 10, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now):
    return FakeClock(fixed_now)


# =============================================================================
# CONFIGURATION
# =============================================================================

@pytest.fixture
def remote_config():
    """Credentials that pass the is_configured() check"""
    return RemoteConfig(url="https://test-project.supabase.co", key="test-anon-key")


@pytest.fixture
def local_settings(tmp_path):
    return AppSettings(namespace="test-registry", db_path=tmp_path / "registry.db")


@pytest.fixture
def connected_settings(tmp_path, remote_config):
    return AppSettings(
        namespace="test-registry",
        db_path=tmp_path / "registry.db",
        remote=remote_config,
    )


# =============================================================================
# LOCAL STORAGE
# =============================================================================

@pytest.fixture
def mirror(tmp_path):
    """Temporary SQLite mirror"""
    from registry_core.offline.local_mirror import LocalMirror

    local_mirror = LocalMirror(tmp_path / "registry.db", namespace="test-registry")
    yield local_mirror
    local_mirror.close()


# =============================================================================
# MOCK FIXTURES
# =============================================================================

def build_supabase_client(
    tables: Dict[str, List[dict]] = None,
    fail_tables=(),
    fail_inserts=(),
):
    """
    MagicMock shaped like a supabase Client.

    Each table gets its own query mock (``client.queries[name]``) so tests
    can change rows or inspect calls per table.
    """
    tables = tables or {}
    client = MagicMock()
    client.queries = {}

    for kind in EntityKind:
        name = kind.value
        query = MagicMock()
        select_execute = query.select.return_value.order.return_value.range.return_value.execute
        if name in fail_tables:
            select_execute.side_effect = Exception(f'relation "public.{name}" does not exist')
        else:
            select_execute.return_value.data = list(tables.get(name, []))
        if name in fail_inserts:
            query.insert.return_value.execute.side_effect = Exception("insert rejected")
        else:
            query.insert.return_value.execute.return_value.data = []
        client.queries[name] = query

    def set_rows(name, rows):
        query = client.queries[name]
        query.select.return_value.order.return_value.range.return_value.execute.return_value.data = list(rows)

    client.table.side_effect = lambda name: client.queries[name]
    client.set_rows = set_rows
    return client


@pytest.fixture
def supabase_factory():
    """Build a mocked client with specific rows or failures"""
    return build_supabase_client


@pytest.fixture
def mock_supabase():
    """Mock Supabase client with empty tables"""
    return build_supabase_client()


class FakeRealtime:
    """Stands in for RealtimeClient; keeps the change callback per table."""

    def __init__(self, available: bool = True):
        self.available = available
        self.error = None if available else "connection refused"
        self.callbacks = {}
        self.removed = []
        self.closed = False

    @property
    def is_available(self) -> bool:
        return self.available and not self.closed

    def start(self) -> bool:
        return self.available

    def open_channel(self, name, table, callback):
        self.callbacks[table] = callback
        handle = MagicMock()
        handle.unsubscribe.side_effect = lambda: self.removed.append(table)
        return handle

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_realtime():
    """Connected realtime stand-in"""
    return FakeRealtime()


@pytest.fixture
def realtime_factory():
    return FakeRealtime


@pytest.fixture
def mock_streamlit(monkeypatch):
    """Mock Streamlit in the modules that call it directly"""
    mock_st = MagicMock()
    mock_st.session_state = {}
    mock_st.secrets = {}

    monkeypatch.setattr("registry_core.errors.handlers.st", mock_st)
    monkeypatch.setattr("registry_core.state.session.st", mock_st)
    monkeypatch.setattr("registry_core.ui.tabs.st", mock_st)
    monkeypatch.setattr("registry_core.ui.components.st", mock_st)

    yield mock_st


# =============================================================================
# SESSIONS
# =============================================================================

@pytest.fixture
def local_session(local_settings, mirror, clock):
    """Started session running from local storage"""
    from registry_core.data.supabase_client import StubSupabaseClient
    from registry_core.services.sync_service import RegistrySession

    session = RegistrySession(
        local_settings,
        client=StubSupabaseClient(),
        mirror=mirror,
        clock=clock,
    )
    session.start()
    yield session
    session.close()


@pytest.fixture
def connected_session(connected_settings, mirror, clock, mock_supabase, fake_realtime):
    """Started session against the mocked Supabase client"""
    from registry_core.services.sync_service import RegistrySession

    session = RegistrySession(
        connected_settings,
        client=mock_supabase,
        mirror=mirror,
        clock=clock,
        realtime=fake_realtime,
    )
    session.start()
    yield session
    session.close()
