"""Parquet file model: metadata, schema tree, row groups and sample rows."""

import logging
import statistics
from dataclasses import dataclass, field
from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from .result_set import ResultSet, format_cell

try:
    import polars as pl
except ImportError:
    pl = None

logger = logging.getLogger("parqscope")

DEFAULT_SAMPLE_ROWS = 1000


@dataclass(frozen=True)
class SchemaNode:
    """One line of the schema tree.

    Attributes:
        kind: "group" for nested containers, "primitive" for leaf columns
        name: Last path component
        depth: Nesting depth, 0 for top-level fields
        path: Dotted path from the root
        physical_type: Parquet physical type (leaves only)
        logical_type: Parquet logical type (leaves only)
        converted_type: Legacy converted type (leaves only)
        max_definition_level: Maximum definition level (leaves only)
        max_repetition_level: Maximum repetition level (leaves only)
        column_index: Position among leaf columns (leaves only)
    """

    kind: str
    name: str
    depth: int
    path: str
    physical_type: str | None = None
    logical_type: str | None = None
    converted_type: str | None = None
    max_definition_level: int | None = None
    max_repetition_level: int | None = None
    column_index: int | None = None

    @property
    def is_primitive(self) -> bool:
        return self.kind == "primitive"


@dataclass(frozen=True)
class ColumnChunkInfo:
    """Storage metadata of one column chunk inside a row group."""

    path: str
    physical_type: str
    compression: str
    encodings: tuple[str, ...]
    num_values: int
    compressed_size: int
    uncompressed_size: int
    min_value: str | None = None
    max_value: str | None = None
    null_count: int | None = None

    @property
    def compression_ratio(self) -> float:
        if self.compressed_size == 0:
            return 0.0
        return self.uncompressed_size / self.compressed_size


@dataclass(frozen=True)
class RowGroupInfo:
    """Storage metadata of a single row group."""

    index: int
    num_rows: int
    total_byte_size: int
    compressed_size: int
    columns: tuple[ColumnChunkInfo, ...] = ()


@dataclass(frozen=True)
class RowGroupStats:
    """Averages and medians across all row groups of a file."""

    avg_rows: float = 0.0
    median_rows: float = 0.0
    avg_bytes: float = 0.0
    median_bytes: float = 0.0

    @classmethod
    def from_row_groups(cls, row_groups: tuple[RowGroupInfo, ...]) -> "RowGroupStats":
        if not row_groups:
            return cls()
        rows = [rg.num_rows for rg in row_groups]
        sizes = [rg.total_byte_size for rg in row_groups]
        return cls(
            avg_rows=statistics.mean(rows),
            median_rows=statistics.median(rows),
            avg_bytes=statistics.mean(sizes),
            median_bytes=statistics.median(sizes),
        )


@dataclass(frozen=True)
class FileMetadata:
    """File-level facts shown in the Metadata view."""

    file_name: str
    file_size: int
    format_version: str
    created_by: str
    num_rows: int
    num_row_groups: int
    num_columns: int
    metadata_size: int
    compressions: tuple[str, ...] = ()
    key_value_keys: tuple[str, ...] = ()

    def items(self) -> list[tuple[str, str]]:
        """Return label/value pairs in display order."""
        return [
            ("File", self.file_name),
            ("File size", format_bytes(self.file_size)),
            ("Format version", self.format_version),
            ("Created by", self.created_by or "unknown"),
            ("Rows", f"{self.num_rows:,}"),
            ("Row groups", str(self.num_row_groups)),
            ("Columns", str(self.num_columns)),
            ("Metadata size", format_bytes(self.metadata_size)),
            ("Compression", ", ".join(self.compressions) or "none"),
            ("Key/value metadata", ", ".join(self.key_value_keys) or "none"),
        ]


def format_bytes(size: float) -> str:
    """Format a byte count with a binary unit suffix."""
    for unit in ("B", "KiB", "MiB", "GiB"):
        if abs(size) < 1024 or unit == "GiB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GiB"


def flatten_structs(df: "pl.DataFrame") -> "pl.DataFrame":
    """Replace struct columns with one ``parent.child`` column per field."""
    while True:
        struct_columns = [name for name, dtype in df.schema.items() if isinstance(dtype, pl.Struct)]
        if not struct_columns:
            return df
        for name in struct_columns:
            dtype = df.schema[name]
            renamed = [f"{name}.{struct_field.name}" for struct_field in dtype.fields]
            df = df.with_columns(pl.col(name).struct.rename_fields(renamed)).unnest(name)


def build_schema_tree(schema: "pq.ParquetSchema") -> tuple[SchemaNode, ...]:
    """Build the ordered schema tree from the leaf columns of a Parquet schema.

    Group nodes are emitted the first time one of their leaves is seen, so
    the result reads top to bottom like an indented tree.
    """
    nodes = []
    seen_groups = set()
    for index in range(len(schema)):
        column = schema.column(index)
        parts = column.path.split(".")
        for depth in range(len(parts) - 1):
            group_path = ".".join(parts[: depth + 1])
            if group_path not in seen_groups:
                seen_groups.add(group_path)
                nodes.append(
                    SchemaNode(kind="group", name=parts[depth], depth=depth, path=group_path)
                )
        nodes.append(
            SchemaNode(
                kind="primitive",
                name=parts[-1],
                depth=len(parts) - 1,
                path=column.path,
                physical_type=str(column.physical_type),
                logical_type=str(column.logical_type),
                converted_type=str(column.converted_type),
                max_definition_level=column.max_definition_level,
                max_repetition_level=column.max_repetition_level,
                column_index=index,
            )
        )
    return tuple(nodes)


def read_row_groups(metadata: "pq.FileMetaData") -> tuple[RowGroupInfo, ...]:
    """Collect per row group and per column chunk storage metadata."""
    row_groups = []
    for rg_index in range(metadata.num_row_groups):
        rg = metadata.row_group(rg_index)
        columns = []
        for col_index in range(rg.num_columns):
            chunk = rg.column(col_index)
            min_value = max_value = None
            null_count = None
            stats = chunk.statistics if chunk.is_stats_set else None
            if stats is not None:
                if stats.has_min_max:
                    min_value = format_cell(stats.min)
                    max_value = format_cell(stats.max)
                if stats.has_null_count:
                    null_count = stats.null_count
            columns.append(
                ColumnChunkInfo(
                    path=chunk.path_in_schema,
                    physical_type=str(chunk.physical_type),
                    compression=str(chunk.compression),
                    encodings=tuple(str(encoding) for encoding in chunk.encodings),
                    num_values=chunk.num_values,
                    compressed_size=chunk.total_compressed_size,
                    uncompressed_size=chunk.total_uncompressed_size,
                    min_value=min_value,
                    max_value=max_value,
                    null_count=null_count,
                )
            )
        row_groups.append(
            RowGroupInfo(
                index=rg_index,
                num_rows=rg.num_rows,
                total_byte_size=rg.total_byte_size,
                compressed_size=sum(c.compressed_size for c in columns),
                columns=tuple(columns),
            )
        )
    return tuple(row_groups)


@dataclass
class ParquetSource:
    """Everything the explorer knows about one Parquet file.

    Attributes:
        file_path: Path of the file on disk
        metadata: File-level metadata
        schema: Ordered schema tree (groups and primitive leaves)
        row_groups: Per row group storage metadata
        row_group_stats: Averages and medians across row groups
        sample: First rows of the file as a result set
    """

    file_path: Path
    metadata: FileMetadata
    schema: tuple[SchemaNode, ...] = ()
    row_groups: tuple[RowGroupInfo, ...] = ()
    row_group_stats: RowGroupStats = field(default_factory=RowGroupStats)
    sample: ResultSet = field(default_factory=ResultSet)

    @classmethod
    def open(cls, file_path: str | Path, sample_rows: int = DEFAULT_SAMPLE_ROWS) -> "ParquetSource":
        """Read metadata, schema and the sample rows of a Parquet file.

        Args:
            file_path: Path to the Parquet file
            sample_rows: Number of leading rows loaded for browsing

        Returns:
            New ParquetSource instance

        Raises:
            ImportError: If polars is not available
            FileNotFoundError: If the file does not exist
            ValueError: If the file cannot be read as Parquet
        """
        if pl is None:
            raise ImportError("Polars is required but not installed")

        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        logger.info(f"Opening {file_path} (sample_rows={sample_rows})")
        try:
            parquet_file = pq.ParquetFile(file_path)
            file_metadata = parquet_file.metadata
            schema = build_schema_tree(parquet_file.schema)
            row_groups = read_row_groups(file_metadata)
        except (pa.ArrowException, OSError) as e:
            raise ValueError(f"Not a readable Parquet file: {file_path} ({e})") from e

        try:
            df = pl.read_parquet(file_path, n_rows=sample_rows)
            sample = ResultSet.from_dataframe(flatten_structs(df))
        except pl.exceptions.PolarsError as e:
            raise ValueError(f"Not a readable Parquet file: {file_path} ({e})") from e

        compressions = []
        for rg in row_groups:
            for column in rg.columns:
                if column.compression not in compressions:
                    compressions.append(column.compression)
        kv_metadata = file_metadata.metadata or {}

        metadata = FileMetadata(
            file_name=file_path.name,
            file_size=file_path.stat().st_size,
            format_version=str(file_metadata.format_version),
            created_by=file_metadata.created_by or "",
            num_rows=file_metadata.num_rows,
            num_row_groups=file_metadata.num_row_groups,
            num_columns=file_metadata.num_columns,
            metadata_size=file_metadata.serialized_size,
            compressions=tuple(compressions),
            key_value_keys=tuple(
                key.decode("utf-8", "replace") if isinstance(key, bytes) else str(key)
                for key in kv_metadata
            ),
        )
        logger.info(
            f"Loaded {metadata.num_columns} columns, {metadata.num_row_groups} row groups, "
            f"{sample.total_rows} sample rows"
        )
        return cls(
            file_path=file_path,
            metadata=metadata,
            schema=schema,
            row_groups=row_groups,
            row_group_stats=RowGroupStats.from_row_groups(row_groups),
            sample=sample,
        )

    @property
    def column_count(self) -> int:
        """Number of primitive (leaf) columns."""
        return sum(1 for node in self.schema if node.is_primitive)

    @property
    def row_group_count(self) -> int:
        return len(self.row_groups)

    @property
    def tree_width(self) -> int:
        """Width of the widest indented label in the schema tree."""
        return max((node.depth * 2 + len(node.name) for node in self.schema), default=0)

    def primitive_tree_index(self, column: int) -> int | None:
        """Return the tree position of primitive column ``column`` (0-based)."""
        seen = 0
        for tree_index, node in enumerate(self.schema):
            if node.is_primitive:
                if seen == column:
                    return tree_index
                seen += 1
        return None

    def filter_rows(self, query: str) -> ResultSet:
        """Filter the sample rows with a case-insensitive substring match."""
        result = self.sample.filter_rows(query)
        logger.info(f"Filter {query!r} matched {result.total_rows} of {self.sample.total_rows} rows")
        return result
