"""
In-memory DataStore used for local demos and tests.

Pre-load ``tables`` (or call ``insert``) to control what the store returns.
Set ``select_error``, ``insert_error`` or ``update_error`` to make the
corresponding call raise. Inspect ``calls`` to see what was requested.
"""

import copy
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Sequence

from clinic_app.services.data_store import DataStore, Filter, Query, new_row_defaults
from clinic_app.services.exceptions import DataStoreError

logger = logging.getLogger(__name__)


def _matches(row: Dict[str, Any], flt: Filter) -> bool:
    value = row.get(flt.column)
    if flt.op == 'eq':
        return value == flt.value
    if flt.op == 'neq':
        return value != flt.value
    if flt.op == 'in':
        return value in flt.value
    if value is None:
        return False
    if flt.op == 'gt':
        return value > flt.value
    if flt.op == 'gte':
        return value >= flt.value
    if flt.op == 'lt':
        return value < flt.value
    return value <= flt.value


class InMemoryDataStore(DataStore):

    def __init__(self, tables: Dict[str, List[Dict[str, Any]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = tables or {}
        self.calls: List[tuple] = []
        self.select_error: Exception = None
        self.insert_error: Exception = None
        self.update_error: Exception = None

    def _raise(self, operation: str, table: str, error: Exception):
        if isinstance(error, DataStoreError):
            raise error
        raise DataStoreError(operation, table, str(error)) from error

    def select(self, query: Query) -> List[Dict[str, Any]]:
        self.calls.append(('select', query.table, query))
        if self.select_error:
            self._raise('select', query.table, self.select_error)

        rows = [
            row for row in self.tables.get(query.table, [])
            if all(_matches(row, f) for f in query.filters)
        ]
        # Stable sorts applied last-key-first give multi-column ordering
        for order in reversed(query.order):
            rows = sorted(
                rows,
                key=lambda r: (r.get(order.column) is None, r.get(order.column) or ''),
                reverse=not order.ascending,
            )

        results = []
        for row in rows:
            if query.columns == ('*',):
                record = copy.deepcopy(row)
            else:
                record = {c: copy.deepcopy(row.get(c)) for c in query.columns}
            if query.embed:
                embed = query.embed
                related = next(
                    (r for r in self.tables.get(embed.table, [])
                     if r.get('id') == row.get(embed.foreign_key)),
                    None,
                )
                record[embed.alias] = (
                    {c: related.get(c) for c in embed.columns} if related else None
                )
            results.append(record)
        return results

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(('insert', table, row))
        if self.insert_error:
            self._raise('insert', table, self.insert_error)
        record = {**new_row_defaults(), **copy.deepcopy(row)}
        self.tables.setdefault(table, []).append(record)
        logger.debug(f"Inserted row {record['id']} into {table}")
        return copy.deepcopy(record)

    def update(self, table: str, values: Dict[str, Any], filters: Sequence[Filter]) -> int:
        self.calls.append(('update', table, values))
        if self.update_error:
            self._raise('update', table, self.update_error)
        if not filters:
            raise ValueError("Refusing to update without filters")
        updated = 0
        for row in self.tables.get(table, []):
            if all(_matches(row, f) for f in filters):
                row.update(copy.deepcopy(values))
                row['updated_at'] = datetime.now().isoformat(timespec='seconds')
                updated += 1
        return updated

    @contextmanager
    def transaction(self) -> Iterator['InMemoryDataStore']:
        snapshot = copy.deepcopy(self.tables)
        try:
            yield self
        except Exception:
            logger.warning("Rolling back in-memory transaction")
            self.tables = snapshot
            raise
