"""
Generic record fetcher shared by every list screen.

One instance per screen and entity. ``fetch`` issues a single select and
replaces the in-memory list wholesale; failures are logged, leave the list
empty and never propagate to the page.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from clinic_app.services.data_store import DataStore
from clinic_app.services.entities import EntityConfig
from clinic_app.utils.filters import filter_rows

logger = logging.getLogger(__name__)


class RecordFetcher:
    """Loads one entity's rows into memory and filters them for display"""

    def __init__(self, store: DataStore, entity: EntityConfig):
        self.store = store
        self.entity = entity
        self.rows: List[Dict[str, Any]] = []
        self.loading = False
        self.loaded = False
        self.error: Optional[str] = None

    def fetch(self) -> List[Dict[str, Any]]:
        self.loading = True
        try:
            rows = self.store.select(self.entity.query())
            self.rows = list(rows or [])
            self.error = None
            logger.info(f"Fetched {len(self.rows)} {self.entity.table} rows")
        except Exception as e:
            logger.error(f"Error fetching {self.entity.table}: {e}")
            self.rows = []
            self.error = str(e)
        finally:
            self.loading = False
            self.loaded = True
        return self.rows

    def invalidate(self):
        """Mark the rows stale; the next ensure_loaded refetches"""
        self.loaded = False

    def ensure_loaded(self) -> List[Dict[str, Any]]:
        """Fetch unless the rows are current"""
        if not self.loaded:
            self.fetch()
        return self.rows

    def filtered(self, search_term: str = "", **exact: Optional[str]) -> List[Dict[str, Any]]:
        return filter_rows(self.rows, search_term, self.entity.search_fields, exact)

    def empty_message(self, search_term: str = "") -> str:
        return self.entity.empty_list_message(search_term)


def invalidate_fetchers(fetchers: Iterable[RecordFetcher], tables: Iterable[str] = None) -> int:
    """
    Mark fetchers stale after a write or a screen change

    Args:
        fetchers: Fetchers to check
        tables: Only fetchers reading one of these tables; all when None

    Returns:
        Number of fetchers marked stale
    """
    wanted = None if tables is None else set(tables)
    count = 0
    for fetcher in fetchers:
        if wanted is None or wanted.intersection(fetcher.entity.tables):
            fetcher.invalidate()
            count += 1
    return count
