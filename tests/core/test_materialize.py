"""Tests for result execution and value normalization."""

import json
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

import numpy as np
import pytest

from flatquery.core.errors import QueryError
from flatquery.core.models import PageResult
from flatquery.core.query import ephemeral_engine
from flatquery.core.query.materialize import (
    MAX_SAFE_INTEGER,
    count_rows,
    execute_statement,
    normalize_value,
    run_query,
)


@pytest.fixture
def con():
    with ephemeral_engine() as c:
        c.execute("CREATE TABLE data (name VARCHAR, age INTEGER)")
        c.execute("INSERT INTO data VALUES ('Alice', 30), ('Bob', 25), ('Carol', 35)")
        yield c


@pytest.mark.parametrize(
    "value, type_name, expected",
    [
        (None, "BIGINT", None),
        (True, "BOOLEAN", True),
        (5, "BIGINT", "5"),
        (5, "HUGEINT", "5"),
        (5, "INTEGER", 5),
        (MAX_SAFE_INTEGER + 2, "", str(MAX_SAFE_INTEGER + 2)),
        (np.int64(7), "", "7"),
        (1.5, "DOUBLE", 1.5),
        (float("inf"), "DOUBLE", "inf"),
        (Decimal("1.10"), "DECIMAL(3,2)", "1.10"),
        (date(2024, 1, 2), "DATE", "2024-01-02"),
        (datetime(2024, 1, 2, 3, 4, 5), "TIMESTAMP", "2024-01-02T03:04:05"),
        (UUID(int=1), "UUID", "00000000-0000-0000-0000-000000000001"),
        (b"\x01\xff", "BLOB", "01ff"),
        ([1, MAX_SAFE_INTEGER + 2], "BIGINT[]", [1, str(MAX_SAFE_INTEGER + 2)]),
        ({"a": Decimal("2")}, "STRUCT", {"a": "2"}),
    ],
)
def test_normalize_value(value, type_name, expected):
    assert normalize_value(value, type_name) == expected


def test_count_rows(con):
    assert count_rows(con) == 3


def test_count_rows_without_table_is_query_error():
    with ephemeral_engine() as c:
        with pytest.raises(QueryError):
            count_rows(c)


def test_execute_statement_wide_integers_become_strings(con):
    columns, rows = execute_statement(
        con, "SELECT 9007199254740993::BIGINT AS big, 1::INTEGER AS small, 3::HUGEINT AS huge"
    )
    assert columns == ["big", "small", "huge"]
    assert rows == [["9007199254740993", 1, "3"]]


def test_execute_statement_columns_follow_projection(con):
    columns, rows = execute_statement(con, "SELECT age * 2 AS \"double age\" FROM data ORDER BY age", origin="sql")
    assert columns == ["double_age"]
    assert [int(r[0]) for r in rows] == [50, 60, 70]


def test_empty_result_recovers_columns_from_probe(con):
    columns, rows = execute_statement(con, "SELECT name FROM data WHERE age > 100 LIMIT 5 OFFSET 0")
    assert columns == ["name"]
    assert rows == []


def test_invalid_sql_raises_query_error(con):
    with pytest.raises(QueryError) as excinfo:
        execute_statement(con, "SELEC nonsense", origin="sql")
    err = excinfo.value
    assert err.origin == "sql"
    assert err.statement == "SELEC nonsense"
    assert err.detail
    assert err.user_message.startswith("Please check your SQL query")


def test_missing_column_raises_query_error(con):
    with pytest.raises(QueryError):
        execute_statement(con, "SELECT nope FROM data", origin="sql")


def test_run_query_total_is_base_table_count(con):
    result = run_query(
        con,
        "SELECT * FROM data WHERE name = 'Bob'",
        ["name", "age"],
        offset=0,
        limit=10,
    )
    assert isinstance(result, PageResult)
    assert result.total == 3
    assert result.rows == [["Bob", 25]]
    json.dumps(result.to_dict())


def test_page_result_rejects_ragged_rows():
    with pytest.raises(ValueError):
        PageResult(columns=["a", "b"], rows=[["x"]], offset=0, limit=1, total=1)
