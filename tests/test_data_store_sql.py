"""Unit tests for SQL generation and the Snowpark-backed data store."""

from unittest.mock import MagicMock

import pytest

from clinic_app.services.data_store import (
    Filter, Order, Query, SnowflakeDataStore, build_insert_sql, build_select_sql,
    build_update_sql, nest_embedded, quote_identifier,
)
from clinic_app.services.entities import APPOINTMENTS, JSON_COLUMNS, PATIENT_EMBED, PATIENTS
from clinic_app.services.exceptions import DataStoreError


def _row(data: dict) -> MagicMock:
    row = MagicMock()
    row.as_dict.return_value = data
    return row


def _session(rows=None) -> MagicMock:
    session = MagicMock()
    session.sql.return_value.collect.return_value = rows or []
    return session


class TestQuoteIdentifier:
    def test_upper_cases_valid_names(self) -> None:
        assert quote_identifier('first_name') == 'FIRST_NAME'

    @pytest.mark.parametrize("name", ["", "1abc", "name; DROP TABLE x", "a-b"])
    def test_rejects_invalid_names(self, name: str) -> None:
        with pytest.raises(ValueError):
            quote_identifier(name)


class TestBuildSelectSql:
    def test_patients_query(self) -> None:
        sql, params = build_select_sql(PATIENTS.query())

        assert sql == "SELECT t.* FROM PATIENTS t ORDER BY t.CREATED_AT DESC"
        assert params == []

    def test_embed_and_multi_order(self) -> None:
        sql, _ = build_select_sql(APPOINTMENTS.query())

        assert sql == (
            "SELECT t.*, e.FIRST_NAME AS PATIENT__FIRST_NAME, e.LAST_NAME AS PATIENT__LAST_NAME, "
            "e.PATIENT_ID AS PATIENT__PATIENT_ID FROM APPOINTMENTS t "
            "LEFT JOIN PATIENTS e ON t.PATIENT_ID = e.ID "
            "ORDER BY t.APPOINTMENT_DATE ASC, t.APPOINTMENT_TIME ASC"
        )

    def test_filters_are_bound(self) -> None:
        query = Query(
            'patients',
            columns=('id',),
            filters=(Filter('patient_id', 'eq', 'PAT123'), Filter('gender', 'in', ['Male', 'Other'])),
        )
        sql, params = build_select_sql(query)

        assert sql == "SELECT t.ID FROM PATIENTS t WHERE t.PATIENT_ID = ? AND t.GENDER IN (?, ?)"
        assert params == ['PAT123', 'Male', 'Other']

    def test_empty_in_matches_nothing(self) -> None:
        sql, params = build_select_sql(Query('patients', filters=(Filter('id', 'in', []),)))

        assert "WHERE 1=0" in sql
        assert params == []

    def test_unknown_operator_rejected(self) -> None:
        with pytest.raises(ValueError):
            Filter('id', 'like', 'x')


class TestBuildInsertAndUpdateSql:
    def test_insert_parses_json_columns(self) -> None:
        sql, params = build_insert_sql(
            'reports', {'report_name': 'R', 'report_data': {'total': 3}}, JSON_COLUMNS['reports'])

        assert sql == "INSERT INTO REPORTS (REPORT_NAME, REPORT_DATA) SELECT ?, PARSE_JSON(?)"
        assert params == ['R', '{"total": 3}']

    def test_update(self) -> None:
        sql, params = build_update_sql('appointments', {'status': 'Cancelled'},
                                       [Filter('id', 'eq', 'a-1')])

        assert sql == "UPDATE APPOINTMENTS SET STATUS = ? WHERE ID = ?"
        assert params == ['Cancelled', 'a-1']

    def test_update_requires_filters(self) -> None:
        with pytest.raises(ValueError):
            build_update_sql('appointments', {'status': 'Cancelled'}, [])


class TestNestEmbedded:
    def test_folds_alias_columns(self) -> None:
        row = {'ID': 'a-1', 'PATIENT__FIRST_NAME': 'Raisa', 'PATIENT__LAST_NAME': 'Anggiani',
               'PATIENT__PATIENT_ID': 'PAT1'}

        assert nest_embedded(row, PATIENT_EMBED) == {
            'id': 'a-1',
            'patient': {'first_name': 'Raisa', 'last_name': 'Anggiani', 'patient_id': 'PAT1'},
        }

    def test_unmatched_join_is_none(self) -> None:
        row = {'ID': 'a-1', 'PATIENT__FIRST_NAME': None, 'PATIENT__LAST_NAME': None,
               'PATIENT__PATIENT_ID': None}
        assert nest_embedded(row, PATIENT_EMBED)['patient'] is None


class TestSnowflakeDataStore:
    def test_select_decodes_rows(self) -> None:
        session = _session([_row({'ID': 'r-1', 'REPORT_DATA': '{"total": 3}'})])
        store = SnowflakeDataStore(lambda: session, json_columns=JSON_COLUMNS)

        rows = store.select(Query('reports'))

        assert rows == [{'id': 'r-1', 'report_data': {'total': 3}}]
        session.sql.assert_called_once_with("SELECT t.* FROM REPORTS t", params=[])

    def test_select_failure_raises_data_store_error(self) -> None:
        session = MagicMock()
        session.sql.return_value.collect.side_effect = RuntimeError("warehouse suspended")
        store = SnowflakeDataStore(lambda: session)

        with pytest.raises(DataStoreError, match="warehouse suspended"):
            store.select(Query('patients'))

    def test_no_session_raises(self) -> None:
        store = SnowflakeDataStore(lambda: None)
        with pytest.raises(DataStoreError, match="no active session"):
            store.insert('patients', {'first_name': 'Raisa'})

    def test_insert_returns_row_with_defaults(self) -> None:
        session = _session()
        store = SnowflakeDataStore(lambda: session)

        row = store.insert('patients', {'first_name': 'Raisa'})

        assert row['first_name'] == 'Raisa'
        assert row['id'] and row['created_at']
        sql = session.sql.call_args.args[0]
        assert sql.startswith("INSERT INTO PATIENTS (ID, CREATED_AT, FIRST_NAME)")

    def test_update_reads_affected_count(self) -> None:
        session = _session([_row({'number of rows updated': 2})])
        store = SnowflakeDataStore(lambda: session)

        assert store.update('appointments', {'status': 'Completed'}, [Filter('id', 'eq', 'a-1')]) == 2

    def test_transaction_commits(self) -> None:
        session = _session()
        store = SnowflakeDataStore(lambda: session)

        with store.transaction():
            store.insert('patients', {'first_name': 'Raisa'})

        statements = [c.args[0] for c in session.sql.call_args_list]
        assert statements[0] == "BEGIN"
        assert statements[-1] == "COMMIT"

    def test_transaction_rolls_back(self) -> None:
        session = _session()
        store = SnowflakeDataStore(lambda: session)

        with pytest.raises(RuntimeError):
            with store.transaction():
                raise RuntimeError("boom")

        statements = [c.args[0] for c in session.sql.call_args_list]
        assert statements == ["BEGIN", "ROLLBACK"]

    def test_check_connection_handles_errors(self) -> None:
        session = MagicMock()
        session.sql.side_effect = RuntimeError("offline")
        store = SnowflakeDataStore(lambda: session)

        assert store.check_connection() is False
