"""Shared fixtures for parqscope tests."""

from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from parqscope.core.parquet_file import FileMetadata, ParquetSource, SchemaNode
from parqscope.core.query import QueryOk
from parqscope.core.result_set import ResultSet
from parqscope.core.views import ViewContext, ViewKind, ViewTabs


def make_result(rows: int, columns: tuple[str, ...] = ("id", "message")) -> ResultSet:
    """Build a result set whose first column is the row number."""
    data = []
    for index in range(rows):
        data.append((str(index),) + tuple(f"{name}-{index}" for name in columns[1:]))
    return ResultSet(columns=columns, rows=tuple(data))


def make_source(sample: ResultSet | None = None, leaf_names: tuple[str, ...] = ("a", "b", "c")) -> ParquetSource:
    """Build an in-memory source without touching the filesystem."""
    sample = sample if sample is not None else make_result(100)
    schema = tuple(
        SchemaNode(kind="primitive", name=name, depth=0, path=name, column_index=index)
        for index, name in enumerate(leaf_names)
    )
    metadata = FileMetadata(
        file_name="sample.parquet",
        file_size=1024,
        format_version="2.6",
        created_by="tests",
        num_rows=sample.total_rows,
        num_row_groups=0,
        num_columns=len(leaf_names),
        metadata_size=128,
    )
    return ParquetSource(
        file_path=Path("sample.parquet"),
        metadata=metadata,
        schema=schema,
        sample=sample,
    )


def make_context(source: ParquetSource | None = None, run_query=None) -> ViewContext:
    if run_query is None:

        def run_query(text):
            return QueryOk(make_result(5))

    return ViewContext(source=source if source is not None else make_source(), run_query=run_query)


def select_view(tabs: ViewTabs, kind: ViewKind) -> None:
    """Cycle ``tabs`` forward until the view tagged ``kind`` is active."""
    for _ in tabs.views:
        if tabs.active.kind is kind:
            return
        tabs.next()
    raise ValueError(f"View '{kind.value}' not found")


@pytest.fixture
def parquet_path(tmp_path) -> Path:
    """A 100-row file in four row groups with a nested struct column."""
    ids = list(range(100))
    table = pa.table(
        {
            "id": pa.array(ids, type=pa.int64()),
            "name": pa.array([None if i % 10 == 0 else f"name-{i}" for i in ids]),
            "nested": pa.array(
                [{"a": i * 2, "b": f"b{i}"} for i in ids],
                type=pa.struct([("a", pa.int64()), ("b", pa.string())]),
            ),
        }
    )
    path = tmp_path / "sample.parquet"
    pq.write_table(table, path, row_group_size=25, compression="snappy")
    return path
