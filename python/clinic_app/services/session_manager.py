"""
Session Manager for Wellness+ Clinic Dashboard

Owns the signed-in backend session. Signing in opens a Snowpark session with
the user's own credentials; the dashboard treats "a live session exists" as
"logged in". The in-memory backend checks the configured demo credentials
instead and shares one process-wide store.
"""

import streamlit as st
from snowflake.snowpark import Session
from typing import Any, Dict, Optional
import logging
from datetime import datetime, timedelta

from clinic_app.services.data_service import DataService
from clinic_app.services.data_store import DataStore, SnowflakeDataStore
from clinic_app.services.entities import JSON_COLUMNS, EntityConfig
from clinic_app.services.exceptions import AuthenticationError
from clinic_app.services.memory_store import InMemoryDataStore
from clinic_app.services.record_fetcher import RecordFetcher, invalidate_fetchers
from clinic_app.utils import config

logger = logging.getLogger(__name__)


@st.cache_resource
def get_shared_memory_store() -> InMemoryDataStore:
    """Process-wide in-memory store, seeded once with demo data when enabled"""
    store = InMemoryDataStore()
    app_config = config.get_app_config()
    if app_config.get('seed_demo_data'):
        from clinic_app.data_generation.clinic_data_generator import ClinicDataGenerator

        generator = ClinicDataGenerator()
        counts = generator.load_into(store, patient_count=app_config.get('seed_patients', 25))
        logger.info(f"Seeded in-memory store: {counts}")
    return store


class SessionManager:
    """Manages the backend session and the data store bound to it"""

    def __init__(self, backend: str = None, memory_store_factory=None):
        self.backend = backend or config.get_data_backend()
        self.memory_store_factory = memory_store_factory or get_shared_memory_store
        self.session: Optional[Session] = None
        self.store: Optional[DataStore] = None
        self.user: Optional[str] = None
        self.signed_in_at: Optional[datetime] = None
        self.last_health_check: Optional[datetime] = None

    def sign_in(self, user: str, password: str) -> DataStore:
        """
        Open a backend session for the given credentials

        Args:
            user: Account user name
            password: Account password

        Returns:
            The data store bound to the new session

        Raises:
            AuthenticationError: When the credentials are rejected
        """
        user = (user or "").strip()
        if not user or not password:
            raise AuthenticationError("User name and password are required")

        if self.backend == config.BACKEND_MEMORY:
            auth = config.get_auth_config()
            if user != auth['demo_user'] or password != auth['demo_password']:
                logger.warning(f"Rejected demo sign-in for '{user}'")
                raise AuthenticationError("Invalid user name or password")
            self.store = self.memory_store_factory()
        else:
            self.session = self._create_snowflake_session(user, password)
            self.store = SnowflakeDataStore(self.get_session, json_columns=JSON_COLUMNS)

        self.user = user
        self.signed_in_at = datetime.now()
        logger.info(f"User '{user}' signed in ({self.backend} backend)")
        return self.store

    def _create_snowflake_session(self, user: str, password: str) -> Session:
        db_config = config.get_database_config()
        connection_parameters = {
            'account': db_config.get('snowflake_account'),
            'user': user,
            'password': password,
            'database': db_config.get('snowflake_database'),
            'schema': db_config.get('snowflake_schema'),
            'warehouse': db_config.get('snowflake_warehouse'),
        }
        if db_config.get('snowflake_role'):
            connection_parameters['role'] = db_config['snowflake_role']

        try:
            return Session.builder.configs(connection_parameters).create()
        except Exception as e:
            logger.error(f"Failed to create Snowflake session for '{user}': {e}")
            raise AuthenticationError("Unable to sign in with the supplied credentials") from e

    def sign_out(self):
        if self.session is not None:
            try:
                self.session.close()
            except Exception as e:
                logger.error(f"Error closing Snowflake session: {e}")
        logger.info(f"User '{self.user}' signed out")
        self.session = None
        self.store = None
        self.user = None
        self.signed_in_at = None
        self.last_health_check = None

    def get_session(self) -> Optional[Session]:
        """Get the active Snowflake session"""
        return self.session

    def get_store(self) -> Optional[DataStore]:
        return self.store

    def is_authenticated(self) -> bool:
        if self.store is None:
            return False
        timeout = config.get_auth_config()['session_timeout']
        if self.signed_in_at and datetime.now() - self.signed_in_at > timedelta(seconds=timeout):
            logger.info(f"Session for '{self.user}' expired")
            self.sign_out()
            return False
        return True

    def check_connection(self) -> bool:
        """Check if the backend connection is healthy, at most every 5 minutes"""
        if self.store is None:
            return False
        now = datetime.now()
        if self.last_health_check is None or now - self.last_health_check > timedelta(minutes=5):
            if not self.store.check_connection():
                return False
            self.last_health_check = now
        return True

    def get_status(self) -> Dict[str, Any]:
        return {
            'backend': self.backend,
            'user': self.user,
            'signed_in_at': self.signed_in_at,
            'last_health_check': self.last_health_check,
        }


def get_session_manager() -> SessionManager:
    """Per-browser-session SessionManager kept in Streamlit session state"""
    if 'session_manager' not in st.session_state:
        st.session_state.session_manager = SessionManager()
    return st.session_state.session_manager


def get_data_service() -> DataService:
    """DataService bound to the signed-in store, rebuilt when the store changes"""
    store = get_session_manager().get_store()
    service = st.session_state.get('data_service')
    if service is None or service.store is not store:
        service = DataService(store)
        st.session_state.data_service = service
    return service


def get_fetcher(key: str, entity: EntityConfig) -> RecordFetcher:
    """
    Session-scoped fetcher for one screen

    Args:
        key: Screen-specific key; two keys for one entity are independent
        entity: Entity the fetcher reads

    Returns:
        The RecordFetcher stored under ``key``
    """
    store = get_session_manager().get_store()
    fetchers = st.session_state.setdefault('fetchers', {})
    fetcher = fetchers.get(key)
    if fetcher is None or fetcher.store is not store:
        fetcher = RecordFetcher(store, entity)
        fetchers[key] = fetcher
    return fetcher


def refresh_tables(*tables: str) -> int:
    """Mark this session's fetchers over the given tables stale after a write"""
    fetchers = st.session_state.get('fetchers') or {}
    return invalidate_fetchers(fetchers.values(), tables)


def activate_route(route: str) -> bool:
    """
    Record the route being rendered; entering a different route makes every
    list refetch on its next render

    Returns:
        True when the route changed
    """
    if st.session_state.get('active_route') == route:
        return False
    st.session_state.active_route = route
    invalidate_fetchers((st.session_state.get('fetchers') or {}).values())
    return True


def clear_page_state():
    """Drop per-user page state on sign-out"""
    for key in ('fetchers', 'data_service', 'wizard_state', 'open_form', 'active_route',
                'form_submissions', 'registration_errors', 'registration_service'):
        st.session_state.pop(key, None)
