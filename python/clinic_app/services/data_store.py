"""
Data Store for Wellness+ Clinic Dashboard

Query surface over the hosted relational store. Every screen reads and writes
through a DataStore: per-table select with projection, filters, ordering and a
single relational embed, single-row insert, filtered update and a transaction
scope. SnowflakeDataStore implements it with bound SQL over a Snowpark session.
"""

import json
import logging
import re
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from clinic_app.services.exceptions import DataStoreError

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')

FILTER_OPERATORS = {
    'eq': '=',
    'neq': '<>',
    'gt': '>',
    'gte': '>=',
    'lt': '<',
    'lte': '<=',
    'in': 'IN',
}

EMBED_SEPARATOR = '__'


@dataclass(frozen=True)
class Filter:
    """A column predicate such as ``Filter('status', 'eq', 'Scheduled')``."""
    column: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass(frozen=True)
class Order:
    column: str
    ascending: bool = True


@dataclass(frozen=True)
class Embed:
    """
    Relational embed of a foreign-keyed entity

    The related row is returned nested under ``alias`` in each result row.
    ``foreign_key`` is the column on the base table holding the related ``id``.
    """
    table: str
    foreign_key: str
    columns: Tuple[str, ...]
    alias: str


@dataclass(frozen=True)
class Query:
    table: str
    columns: Tuple[str, ...] = ('*',)
    filters: Tuple[Filter, ...] = ()
    order: Tuple[Order, ...] = ()
    embed: Optional[Embed] = None


class DataStore:
    """Contract shared by every data store backend"""

    def select(self, query: Query) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    def update(self, table: str, values: Dict[str, Any], filters: Sequence[Filter]) -> int:
        raise NotImplementedError

    @contextmanager
    def transaction(self) -> Iterator['DataStore']:
        yield self

    def check_connection(self) -> bool:
        return True


def new_row_defaults() -> Dict[str, Any]:
    """Storage-key and timestamp columns assigned to every new row"""
    return {
        'id': str(uuid.uuid4()),
        'created_at': datetime.now().isoformat(timespec='seconds'),
    }


def quote_identifier(name: str) -> str:
    if not _IDENTIFIER.match(name or ''):
        raise ValueError(f"Invalid identifier: {name!r}")
    return name.upper()


def _to_bind_value(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


def build_select_sql(query: Query) -> Tuple[str, List[Any]]:
    """
    Build a bound SELECT statement for a query

    Args:
        query: Query description

    Returns:
        Tuple of (sql, params) using qmark placeholders
    """
    base = quote_identifier(query.table)
    if query.columns == ('*',):
        select_list = ["t.*"]
    else:
        select_list = [f"t.{quote_identifier(c)}" for c in query.columns]

    from_clause = f"{base} t"
    if query.embed:
        embed = query.embed
        related = quote_identifier(embed.table)
        for column in embed.columns:
            alias = f"{embed.alias}{EMBED_SEPARATOR}{column}".upper()
            select_list.append(f"e.{quote_identifier(column)} AS {alias}")
        from_clause += f" LEFT JOIN {related} e ON t.{quote_identifier(embed.foreign_key)} = e.ID"

    params: List[Any] = []
    where_conditions = []
    for flt in query.filters:
        column = f"t.{quote_identifier(flt.column)}"
        if flt.op == 'in':
            values = list(flt.value)
            if not values:
                where_conditions.append("1=0")
                continue
            placeholders = ", ".join("?" for _ in values)
            where_conditions.append(f"{column} IN ({placeholders})")
            params.extend(_to_bind_value(v) for v in values)
        else:
            where_conditions.append(f"{column} {FILTER_OPERATORS[flt.op]} ?")
            params.append(_to_bind_value(flt.value))

    sql = f"SELECT {', '.join(select_list)} FROM {from_clause}"
    if where_conditions:
        sql += f" WHERE {' AND '.join(where_conditions)}"
    if query.order:
        order_by = [
            f"t.{quote_identifier(o.column)} {'ASC' if o.ascending else 'DESC'}"
            for o in query.order
        ]
        sql += f" ORDER BY {', '.join(order_by)}"
    return sql, params


def build_insert_sql(table: str, row: Dict[str, Any],
                     json_columns: Sequence[str] = ()) -> Tuple[str, List[Any]]:
    """
    Build a bound INSERT statement

    Snowflake only accepts PARSE_JSON in an INSERT ... SELECT, so every insert
    uses that form.
    """
    columns = list(row.keys())
    expressions = [
        "PARSE_JSON(?)" if column in json_columns else "?"
        for column in columns
    ]
    sql = (
        f"INSERT INTO {quote_identifier(table)} "
        f"({', '.join(quote_identifier(c) for c in columns)}) "
        f"SELECT {', '.join(expressions)}"
    )
    return sql, [_to_bind_value(row[c]) for c in columns]


def build_update_sql(table: str, values: Dict[str, Any],
                     filters: Sequence[Filter]) -> Tuple[str, List[Any]]:
    if not filters:
        raise ValueError("Refusing to update without filters")
    assignments = [f"{quote_identifier(c)} = ?" for c in values]
    params = [_to_bind_value(v) for v in values.values()]
    conditions = []
    for flt in filters:
        if flt.op == 'in':
            raise ValueError("IN filters are not supported for updates")
        conditions.append(f"{quote_identifier(flt.column)} {FILTER_OPERATORS[flt.op]} ?")
        params.append(_to_bind_value(flt.value))
    sql = (
        f"UPDATE {quote_identifier(table)} SET {', '.join(assignments)} "
        f"WHERE {' AND '.join(conditions)}"
    )
    return sql, params


def nest_embedded(row: Dict[str, Any], embed: Optional[Embed]) -> Dict[str, Any]:
    """Lower-case column names and fold embed columns into a nested dict"""
    result: Dict[str, Any] = {}
    nested: Dict[str, Any] = {}
    prefix = f"{embed.alias}{EMBED_SEPARATOR}" if embed else None
    for key, value in row.items():
        name = key.lower()
        if prefix and name.startswith(prefix):
            nested[name[len(prefix):]] = value
        else:
            result[name] = value
    if embed:
        # LEFT JOIN with no match yields all-null embed columns
        has_match = any(v is not None for v in nested.values())
        result[embed.alias] = nested if has_match else None
    return result


class SnowflakeDataStore(DataStore):
    """DataStore over a Snowpark session"""

    def __init__(self, session_provider, json_columns: Dict[str, Sequence[str]] = None):
        """
        Args:
            session_provider: Zero-argument callable returning the active Snowpark session
            json_columns: Per-table VARIANT columns, parsed on read and PARSE_JSON'd on write
        """
        self.session_provider = session_provider
        self.json_columns = json_columns or {}
        self._in_transaction = False

    def _session(self, operation: str, table: str):
        session = self.session_provider()
        if session is None:
            raise DataStoreError(operation, table, "no active session")
        return session

    def _decode(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        for column in self.json_columns.get(table, ()):
            value = row.get(column)
            if isinstance(value, str):
                try:
                    row[column] = json.loads(value)
                except ValueError:
                    logger.warning(f"Column {table}.{column} holds invalid JSON")
        for key, value in row.items():
            if isinstance(value, (datetime, date, time)):
                row[key] = value.isoformat()
        return row

    def select(self, query: Query) -> List[Dict[str, Any]]:
        session = self._session('select', query.table)
        sql, params = build_select_sql(query)
        try:
            rows = session.sql(sql, params=params).collect()
        except Exception as e:
            logger.error(f"Select on {query.table} failed: {e}")
            raise DataStoreError('select', query.table, str(e)) from e

        results = []
        for row in rows:
            record = nest_embedded(row.as_dict(), query.embed)
            if query.embed and record.get(query.embed.alias):
                self._decode(query.embed.table, record[query.embed.alias])
            results.append(self._decode(query.table, record))
        logger.debug(f"Selected {len(results)} rows from {query.table}")
        return results

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        session = self._session('insert', table)
        record = {**new_row_defaults(), **row}
        sql, params = build_insert_sql(table, record, self.json_columns.get(table, ()))
        try:
            session.sql(sql, params=params).collect()
        except Exception as e:
            logger.error(f"Insert into {table} failed: {e}")
            raise DataStoreError('insert', table, str(e)) from e
        logger.info(f"Inserted row {record['id']} into {table}")
        return record

    def update(self, table: str, values: Dict[str, Any], filters: Sequence[Filter]) -> int:
        session = self._session('update', table)
        values = {**values, 'updated_at': datetime.now().isoformat(timespec='seconds')}
        sql, params = build_update_sql(table, values, filters)
        try:
            result = session.sql(sql, params=params).collect()
        except Exception as e:
            logger.error(f"Update on {table} failed: {e}")
            raise DataStoreError('update', table, str(e)) from e
        updated = 0
        if result:
            first = result[0].as_dict()
            updated = int(next(iter(first.values()), 0) or 0)
        logger.info(f"Updated {updated} row(s) in {table}")
        return updated

    @contextmanager
    def transaction(self) -> Iterator['SnowflakeDataStore']:
        if self._in_transaction:
            yield self
            return
        session = self._session('transaction', '*')
        session.sql("BEGIN").collect()
        self._in_transaction = True
        try:
            yield self
        except Exception:
            logger.warning("Rolling back transaction")
            session.sql("ROLLBACK").collect()
            raise
        else:
            session.sql("COMMIT").collect()
        finally:
            self._in_transaction = False

    def check_connection(self) -> bool:
        try:
            session = self.session_provider()
            if session is None:
                return False
            return bool(session.sql("SELECT CURRENT_TIMESTAMP()").collect())
        except Exception as e:
            logger.error(f"Connection health check failed: {e}")
            return False
