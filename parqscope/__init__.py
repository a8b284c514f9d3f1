"""parqscope - A Textual-based interactive explorer for Parquet files."""

__version__ = "0.1.0"

# Only import what's available to avoid import errors during installation
__all__ = ["__version__"]

try:
    from .core.parquet_file import ParquetSource  # noqa: F401
    from .core.result_set import ResultSet  # noqa: F401

    __all__.extend(["ParquetSource", "ResultSet"])
except ImportError:
    # Dependencies not yet installed
    pass
