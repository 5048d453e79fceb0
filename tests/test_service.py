"""End-to-end tests for PagedQueryService over every supported file kind."""

import asyncio
import logging
from unittest.mock import patch

import pytest

from flatquery import PagedQueryService
from flatquery.core.config import UNBOUNDED_LIMIT, EngineConfig
from flatquery.core.enums import FileKind
from flatquery.core.errors import QueryError, SourceUnreadableError
from flatquery.core.query import run_query


@pytest.fixture
def service():
    return PagedQueryService()


def test_package_exports():
    import flatquery

    for name in flatquery.__all__:
        assert hasattr(flatquery, name)
    assert flatquery.PagedQueryService is PagedQueryService
    assert flatquery.__version__ == "0.1.0"


def test_first_page_of_comma_file(service, people_csv):
    result = service.load_page(people_csv, offset=0, limit=2)
    assert result.columns == ["name", "age"]
    assert len(result.rows) == 2
    assert result.total == 3
    assert [r[0] for r in result.rows] == ["Alice", "Bob"]


def test_search_returns_matching_row_with_unfiltered_total(service, people_csv):
    result = service.load_page(people_csv, offset=0, limit=10, search="Bob")
    assert [r[0] for r in result.rows] == ["Bob"]
    assert result.total == 3


def test_sql_aggregate_result(service, people_csv):
    result = service.load_page(people_csv, sql="SELECT COUNT(*) as c FROM data")
    assert result.columns == ["c"]
    assert len(result.rows) == 1
    assert str(result.rows[0][0]) == "3"
    assert result.total == 3


def test_every_kind_returns_all_rows(service, sample_file):
    n = len(sample_file.rows)
    result = service.load_page(sample_file.path, offset=0, limit=n + 50)
    assert len(result.rows) == n
    assert result.total == n
    assert len(result.columns) == len(sample_file.columns)
    assert all(len(r) == len(result.columns) for r in result.rows)


def test_every_kind_searches_across_columns(service, sample_file):
    result = service.load_page(sample_file.path, limit=10, search="35")
    assert [r[0] for r in result.rows] == ["Carol"]
    assert result.total == 3


def test_paging_past_the_end_keeps_columns(service, people_csv):
    result = service.load_page(people_csv, offset=10, limit=5)
    assert result.rows == []
    assert result.columns == ["name", "age"]
    assert result.total == 3


def test_search_without_matches_keeps_columns(service, people_csv):
    result = service.load_page(people_csv, search="zzz")
    assert result.rows == []
    assert result.columns == ["name", "age"]
    assert result.total == 3


def test_sql_takes_precedence_over_search(service, people_csv):
    with patch("flatquery.service.run_query", wraps=run_query) as spy:
        result = service.load_page(people_csv, search="Bob", sql="SELECT name FROM data ORDER BY name DESC")
    assert spy.call_args.args[1] == "SELECT name FROM data ORDER BY name DESC"
    assert spy.call_args.kwargs["origin"] == "sql"
    assert result.columns == ["name"]
    assert [r[0] for r in result.rows] == ["Carol", "Bob", "Alice"]


def test_sql_can_use_sanitized_column_names(service, sample_writer):
    sample = sample_writer(FileKind.CSV, columns=["first name", "age"], rows=[["Ann", 1], ["Bo", 2]])
    result = service.load_page(sample.path, sql="SELECT first_name FROM data WHERE age > 1")
    assert result.columns == ["first_name"]
    assert result.rows == [["Bo"]]


def test_search_matches_sanitized_columns(service, sample_writer):
    sample = sample_writer(FileKind.TSV, columns=["first name", "age"], rows=[["Ann", 1], ["Bo", 2]])
    result = service.load_page(sample.path, search="Ann")
    assert result.columns == ["first_name", "age"]
    assert [r[0] for r in result.rows] == ["Ann"]


@pytest.mark.parametrize("header", [["a b", "a_b"], ["A b", "a_b"]])
def test_headers_colliding_after_sanitizing_load_every_row(service, sample_writer, header):
    sample = sample_writer(FileKind.CSV, columns=header, rows=[["x", "y"], ["z", "w"]])
    result = service.load_page(sample.path, search="w")
    assert result.columns[1] == "a_b_1"
    assert result.rows == [["z", "w"]]
    assert result.total == 2


def test_invalid_sql_is_reported_as_query_error(service, people_csv, caplog):
    with caplog.at_level(logging.WARNING, logger="flatquery.service"):
        with pytest.raises(QueryError) as excinfo:
            service.load_page(people_csv, sql="SELECT missing_column FROM data")
    assert excinfo.value.origin == "sql"
    assert excinfo.value.user_message.startswith("Please check your SQL query")
    assert "Caller SQL rejected" in caplog.text


def test_missing_source_is_ingest_error(service, tmp_path):
    with pytest.raises(SourceUnreadableError):
        service.load_page(tmp_path / "nope.csv")


def test_document_without_records_is_empty_result(service, tmp_path):
    path = tmp_path / "values.xml"
    path.write_text("<list><v>1</v><v>2</v></list>", encoding="utf-8")
    result = service.load_page(path)
    assert result.columns == []
    assert result.rows == []
    assert result.total == 0


def test_default_limit_comes_from_config(people_csv):
    result = PagedQueryService(EngineConfig(default_page_size=1)).load_page(people_csv)
    assert result.limit == 1
    assert len(result.rows) == 1


def test_load_all_is_unbounded(service, people_csv):
    result = service.load_all(people_csv)
    assert result.limit == UNBOUNDED_LIMIT
    assert len(result.rows) == 3


def test_export_to_csv_writes_filtered_result(service, people_csv, tmp_path):
    out = tmp_path / "out.csv"
    service.export_to_csv(people_csv, out, search="Bob")
    assert out.read_text(encoding="utf-8") == "name,age\nBob,25\n"


def test_export_to_csv_from_sql(service, sample_writer, tmp_path):
    sample = sample_writer(FileKind.JSON)
    out = tmp_path / "ages.csv"
    service.export_to_csv(sample.path, out, sql="SELECT age FROM data ORDER BY age")
    assert out.read_text(encoding="utf-8") == "age\n25\n30\n35\n"


def test_save_in_place_replaces_delimited_file(service, people_csv):
    service.save(people_csv, ["name"], [["Zed"]])
    assert people_csv.read_text(encoding="utf-8") == "name\nZed\n"
    assert not people_csv.with_name(people_csv.name + ".tmp").exists()


def test_save_non_delimited_writes_directly(service, tmp_path):
    dest = tmp_path / "people.json"
    service.save(dest, ["name"], [["Zed"]])
    assert service.load_all(dest).rows == [["Zed"]]


def test_async_wrappers(service, people_csv, tmp_path):
    result = asyncio.run(service.aload_page(people_csv, 1, 1))
    assert [r[0] for r in result.rows] == ["Bob"]

    out = tmp_path / "async.csv"
    asyncio.run(service.aexport_to_csv(people_csv, out, None, "SELECT name FROM data WHERE age < 30"))
    assert out.read_text(encoding="utf-8") == "name\nBob\n"

    dest = tmp_path / "async.tsv"
    asyncio.run(service.asave_as(dest, ["a", "b"], [[1, 2]]))
    assert dest.read_text(encoding="utf-8") == "a\tb\n1\t2\n"
