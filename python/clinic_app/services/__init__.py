"""
Services Module for Wellness+ Clinic Dashboard

This module contains the core business logic and data services for the application.
Services handle data access, entity rules, form submission, the registration
wizard and report generation. Store-bound services are created per browser
session by the pages, not at import time.
"""

from .exceptions import AuthenticationError, DataStoreError, RegistrationError
from .data_store import DataStore, SnowflakeDataStore, Filter, Order, Embed, Query
from .memory_store import InMemoryDataStore
from .record_fetcher import RecordFetcher
from .data_service import DataService
from .session_manager import SessionManager, get_session_manager

__all__ = [
    'AuthenticationError',
    'DataStoreError',
    'RegistrationError',
    'DataStore',
    'SnowflakeDataStore',
    'InMemoryDataStore',
    'Filter',
    'Order',
    'Embed',
    'Query',
    'RecordFetcher',
    'DataService',
    'SessionManager',
    'get_session_manager',
]
