"""Tabular result sets shared by the sample browser and the query view."""

from dataclasses import dataclass, field
from typing import Any, Sequence

try:
    import polars as pl
except ImportError:
    pl = None

NULL_DISPLAY = "NULL"


def format_cell(value: Any) -> str:
    """Render a single cell value the way the tables display it."""
    if value is None:
        return NULL_DISPLAY
    return str(value)


@dataclass(frozen=True)
class ResultSet:
    """Immutable rectangular dataset of stringified cells.

    Attributes:
        columns: Column names in display order
        rows: Rows of stringified cells, one entry per column
        total_rows: Number of rows
        total_columns: Number of columns
    """

    columns: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()
    total_rows: int = field(init=False)
    total_columns: int = field(init=False)

    def __post_init__(self) -> None:
        """Freeze the inputs and check that every row is as wide as the header."""
        columns = tuple(self.columns)
        rows = tuple(tuple(row) for row in self.rows)
        for index, row in enumerate(rows):
            if len(row) != len(columns):
                raise ValueError(
                    f"Row {index} has {len(row)} cells, expected {len(columns)}"
                )
        object.__setattr__(self, "columns", columns)
        object.__setattr__(self, "rows", rows)
        object.__setattr__(self, "total_rows", len(rows))
        object.__setattr__(self, "total_columns", len(columns))

    @classmethod
    def from_dataframe(
        cls, df: "pl.DataFrame", columns: Sequence[str] | None = None
    ) -> "ResultSet":
        """Normalize a Polars DataFrame into a result set.

        Column order and row order are kept exactly as the frame emits them.
        Nulls become ``NULL``; every other value uses its ``str`` form.

        Args:
            df: DataFrame produced by sampling or by the query engine
            columns: Names to use instead of ``df.columns``, for engines whose
                names Polars cannot hold (duplicates)

        Returns:
            New ResultSet

        Raises:
            ImportError: If polars is not available
            ValueError: If ``columns`` does not match the frame width
        """
        if pl is None:
            raise ImportError("Polars is required but not installed")

        rows = [tuple(format_cell(value) for value in row) for row in df.iter_rows()]
        names = tuple(columns) if columns is not None else tuple(df.columns)
        return cls(columns=names, rows=tuple(rows))

    def row(self, index: int) -> tuple[str, ...] | None:
        """Return the row at ``index`` or None when it is out of range."""
        if 0 <= index < self.total_rows:
            return self.rows[index]
        return None

    def filter_rows(self, query: str) -> "ResultSet":
        """Keep the rows containing ``query`` in any cell, ignoring case.

        Cells of a row are joined with a single space before matching. The
        source set is left untouched.
        """
        needle = query.lower()
        matches = tuple(row for row in self.rows if needle in " ".join(row).lower())
        return ResultSet(columns=self.columns, rows=matches)
