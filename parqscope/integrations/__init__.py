from pathlib import Path

try:
    import duckdb
except ImportError:
    duckdb = None

try:
    import polars as pl
except ImportError:
    pl = None


class DBConnector:
    """DuckDB connector exposing a Parquet file as a queryable table."""

    def __init__(self, file_path: str | Path, table_name: str = "parquet"):
        """Initialize the connector.

        Args:
            file_path: Path to the Parquet file to expose
            table_name: Name under which the file is visible to SQL
        """
        if duckdb is None:
            raise ImportError("DuckDB is required but not installed")

        self.file_path = Path(file_path)
        self.table_name = table_name
        self._connection = None

    @property
    def connection(self):
        """Get or create the in-memory DuckDB connection with the file view registered."""
        if self._connection is None:
            self._connection = duckdb.connect(":memory:")
            source = str(self.file_path).replace("'", "''")
            self._connection.execute(
                f'CREATE VIEW "{self.table_name}" AS SELECT * FROM read_parquet(\'{source}\')'
            )
        return self._connection

    def fetch_query(self, query: str) -> tuple[list[str], "pl.DataFrame"]:
        """Execute a query and return its column names and a Polars DataFrame.

        Polars deduplicates repeated output names, so the names are taken
        from the cursor description instead of the frame.

        Args:
            query: SQL query to execute

        Returns:
            Column names as the engine emits them and the result rows

        Raises:
            ImportError: If polars is not available
            duckdb.Error: If the query fails to parse or run
        """
        if pl is None:
            raise ImportError("Polars is required but not installed")

        cursor = self.connection.execute(query)
        description = cursor.description
        df = cursor.pl()
        columns = [column[0] for column in description] if description else df.columns
        return columns, df

    def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
