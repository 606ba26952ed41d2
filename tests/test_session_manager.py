"""Unit tests for sign-in and the backend session lifecycle."""

from datetime import datetime, timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from clinic_app.services import session_manager
from clinic_app.services.data_store import SnowflakeDataStore
from clinic_app.services.entities import PATIENT_PICKER, PATIENTS, REPORTS
from clinic_app.services.exceptions import AuthenticationError
from clinic_app.services.memory_store import InMemoryDataStore
from clinic_app.services.record_fetcher import RecordFetcher
from clinic_app.services.session_manager import SessionManager


@pytest.fixture
def demo_credentials(monkeypatch):
    monkeypatch.setenv('DEMO_USER', 'admin')
    monkeypatch.setenv('DEMO_PASSWORD', 'wellness')
    monkeypatch.delenv('SESSION_TIMEOUT', raising=False)


@pytest.fixture
def manager(demo_credentials, memory_store: InMemoryDataStore) -> SessionManager:
    return SessionManager(backend='memory', memory_store_factory=lambda: memory_store)


class TestMemoryBackend:
    def test_sign_in(self, manager: SessionManager, memory_store: InMemoryDataStore) -> None:
        store = manager.sign_in('admin', 'wellness')

        assert store is memory_store
        assert manager.is_authenticated()
        assert manager.user == 'admin'

    @pytest.mark.parametrize("user, password", [
        ('admin', 'wrong'),
        ('nurse', 'wellness'),
        ('', 'wellness'),
        ('admin', ''),
    ])
    def test_bad_credentials(self, manager: SessionManager, user: str, password: str) -> None:
        with pytest.raises(AuthenticationError):
            manager.sign_in(user, password)
        assert not manager.is_authenticated()

    def test_user_name_is_trimmed(self, manager: SessionManager) -> None:
        manager.sign_in('  admin ', 'wellness')
        assert manager.user == 'admin'

    def test_sign_out(self, manager: SessionManager) -> None:
        manager.sign_in('admin', 'wellness')
        manager.sign_out()

        assert not manager.is_authenticated()
        assert manager.get_store() is None
        assert manager.get_status()['user'] is None

    def test_session_expires(self, manager: SessionManager, monkeypatch) -> None:
        monkeypatch.setenv('SESSION_TIMEOUT', '60')
        manager.sign_in('admin', 'wellness')
        manager.signed_in_at = datetime.now() - timedelta(minutes=5)

        assert not manager.is_authenticated()
        assert manager.get_store() is None

    def test_check_connection(self, manager: SessionManager) -> None:
        assert manager.check_connection() is False
        manager.sign_in('admin', 'wellness')

        assert manager.check_connection() is True
        assert manager.last_health_check is not None


class TestSnowflakeBackend:
    def test_sign_in_binds_snowflake_store(self, monkeypatch) -> None:
        fake_session = MagicMock()
        fake_class = MagicMock()
        fake_class.builder.configs.return_value.create.return_value = fake_session
        monkeypatch.setattr(session_manager, 'Session', fake_class)
        monkeypatch.setenv('SNOWFLAKE_ACCOUNT', 'xy12345')

        manager = SessionManager(backend='snowflake')
        store = manager.sign_in('clinician', 's3cret')

        assert isinstance(store, SnowflakeDataStore)
        assert manager.get_session() is fake_session
        params = fake_class.builder.configs.call_args[0][0]
        assert params['user'] == 'clinician'
        assert params['password'] == 's3cret'
        assert params['account'] == 'xy12345'

    def test_rejected_credentials(self, monkeypatch) -> None:
        fake_class = MagicMock()
        fake_class.builder.configs.return_value.create.side_effect = Exception("Incorrect username or password")
        monkeypatch.setattr(session_manager, 'Session', fake_class)

        manager = SessionManager(backend='snowflake')

        with pytest.raises(AuthenticationError):
            manager.sign_in('clinician', 'nope')
        assert not manager.is_authenticated()

    def test_sign_out_closes_session(self, monkeypatch) -> None:
        fake_session = MagicMock()
        fake_class = MagicMock()
        fake_class.builder.configs.return_value.create.return_value = fake_session
        monkeypatch.setattr(session_manager, 'Session', fake_class)

        manager = SessionManager(backend='snowflake')
        manager.sign_in('clinician', 's3cret')
        manager.sign_out()

        fake_session.close.assert_called_once()
        assert manager.get_session() is None


class _FakeSessionState(dict):
    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __setattr__(self, name, value):
        self[name] = value


class TestPageState:
    @pytest.fixture
    def state(self, monkeypatch) -> _FakeSessionState:
        state = _FakeSessionState()
        monkeypatch.setattr(session_manager, 'st', SimpleNamespace(session_state=state))
        return state

    @pytest.fixture
    def loaded_fetchers(self, state: _FakeSessionState, seeded_store: InMemoryDataStore) -> dict:
        fetchers = {
            'patients': RecordFetcher(seeded_store, PATIENTS),
            'appointment_patient_picker': RecordFetcher(seeded_store, PATIENT_PICKER),
            'reports': RecordFetcher(seeded_store, REPORTS),
        }
        for fetcher in fetchers.values():
            fetcher.ensure_loaded()
        state['fetchers'] = fetchers
        return fetchers

    def test_write_marks_matching_fetchers_stale(self, loaded_fetchers: dict) -> None:
        assert session_manager.refresh_tables('patients') == 2

        assert not loaded_fetchers['patients'].loaded
        assert not loaded_fetchers['appointment_patient_picker'].loaded
        assert loaded_fetchers['reports'].loaded

    def test_changing_route_marks_every_fetcher_stale(self, state: _FakeSessionState,
                                                      loaded_fetchers: dict) -> None:
        state['active_route'] = 'patients'

        assert session_manager.activate_route('patients') is False
        assert all(f.loaded for f in loaded_fetchers.values())

        assert session_manager.activate_route('dashboard') is True
        assert state['active_route'] == 'dashboard'
        assert not any(f.loaded for f in loaded_fetchers.values())

    def test_refresh_without_fetchers(self, state: _FakeSessionState) -> None:
        assert session_manager.refresh_tables('patients') == 0

    def test_clear_page_state_drops_registration_service(self, state: _FakeSessionState) -> None:
        state['registration_service'] = object()
        state['active_route'] = 'register'

        session_manager.clear_page_state()

        assert 'registration_service' not in state
        assert 'active_route' not in state
