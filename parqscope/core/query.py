"""Ad-hoc SQL execution against the open Parquet file."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .result_set import ResultSet

if TYPE_CHECKING:
    from ..integrations import DBConnector

logger = logging.getLogger("parqscope")

EMPTY_QUERY_MESSAGE = "Empty query"


@dataclass(frozen=True)
class QueryOk:
    """Successful query outcome holding the normalized result."""

    result: ResultSet


@dataclass(frozen=True)
class QueryErr:
    """Failed query outcome holding the engine's message verbatim."""

    message: str


def run_query(connector: "DBConnector", query_text: str) -> QueryOk | QueryErr:
    """Run ``query_text`` through ``connector``.

    Empty or whitespace-only text is rejected here and never reaches the
    engine. Engine failures are returned as ``QueryErr`` rather than raised.
    """
    if not query_text.strip():
        return QueryErr(EMPTY_QUERY_MESSAGE)

    logger.info(f"Executing SQL: {query_text[:100]}")
    try:
        columns, df = connector.fetch_query(query_text)
        result = ResultSet.from_dataframe(df, columns=columns)
    except Exception as e:
        # DuckDB, Arrow and Polars each raise their own error hierarchy
        logger.error(f"SQL execution error: {e}")
        return QueryErr(str(e))

    logger.info(f"SQL returned {result.total_rows} rows x {result.total_columns} columns")
    return QueryOk(result)
