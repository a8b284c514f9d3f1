"""Tests for SQL execution through DuckDB."""

from unittest.mock import Mock

import pytest

from parqscope.core.query import EMPTY_QUERY_MESSAGE, QueryErr, QueryOk, run_query
from parqscope.integrations import DBConnector


@pytest.fixture
def connector(parquet_path):
    db = DBConnector(parquet_path)
    yield db
    db.close()


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_query_rejected_locally(text):
    """Test blank queries never reach the engine."""
    engine = Mock()
    assert run_query(engine, text) == QueryErr(EMPTY_QUERY_MESSAGE)
    engine.fetch_query.assert_not_called()


def test_select_returns_normalized_result(connector):
    """Test a query result keeps column and row order."""
    outcome = run_query(connector, "SELECT name, id FROM parquet WHERE id < 3 ORDER BY id")

    assert isinstance(outcome, QueryOk)
    assert outcome.result.columns == ("name", "id")
    assert outcome.result.rows == (("NULL", "0"), ("name-1", "1"), ("name-2", "2"))


def test_aggregate_query(connector):
    """Test aggregates over the whole file, not just the sample."""
    outcome = run_query(connector, "SELECT count(*) AS n FROM parquet")
    assert isinstance(outcome, QueryOk)
    assert outcome.result.rows == (("100",),)


def test_repeated_column_names_are_kept(connector):
    """Test a column selected twice keeps its name both times."""
    outcome = run_query(connector, "SELECT id, id FROM parquet WHERE id < 2 ORDER BY id")

    assert isinstance(outcome, QueryOk)
    assert outcome.result.columns == ("id", "id")
    assert outcome.result.rows == (("0", "0"), ("1", "1"))


def test_invalid_sql_becomes_error(connector):
    """Test engine failures are reported as messages."""
    outcome = run_query(connector, "SELEC nonsense")
    assert isinstance(outcome, QueryErr)
    assert outcome.message


def test_unknown_column_becomes_error(connector):
    """Test binder errors are reported and the connector stays usable."""
    outcome = run_query(connector, "SELECT missing_column FROM parquet")
    assert isinstance(outcome, QueryErr)
    assert "missing_column" in outcome.message

    assert isinstance(run_query(connector, "SELECT 1 AS one"), QueryOk)


def test_engine_exception_is_captured():
    """Test any exception raised by the engine is turned into an error outcome."""
    engine = Mock()
    engine.fetch_query.side_effect = RuntimeError("engine exploded")
    assert run_query(engine, "SELECT 1") == QueryErr("engine exploded")


def test_custom_table_name(parquet_path):
    """Test the file can be registered under another name."""
    db = DBConnector(parquet_path, table_name="events")
    try:
        outcome = run_query(db, "SELECT max(id) FROM events")
        assert isinstance(outcome, QueryOk)
        assert outcome.result.rows == (("99",),)
    finally:
        db.close()
