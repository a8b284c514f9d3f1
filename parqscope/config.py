"""Runtime settings for a parqscope session."""

import logging
from dataclasses import dataclass
from pathlib import Path

from .core.parquet_file import DEFAULT_SAMPLE_ROWS

LOGGER_NAME = "parqscope"


@dataclass
class ExplorerConfig:
    """Settings resolved from the command line and environment.

    Attributes:
        sample_rows: Number of leading rows loaded into the Browse view
        log_file: Debug log destination, None to disable logging
        table_name: Name the file is registered under for SQL
        title: Title shown in the footer
    """

    sample_rows: int = DEFAULT_SAMPLE_ROWS
    log_file: Path | None = None
    table_name: str = "parquet"
    title: str = "parqscope"

    def __post_init__(self) -> None:
        if self.sample_rows <= 0:
            raise ValueError(f"sample_rows must be positive, got {self.sample_rows}")
        if self.log_file is not None:
            self.log_file = Path(self.log_file)


def setup_debug_logging(log_file: Path | None = None) -> logging.Logger:
    """Configure the parqscope logger.

    Logs only ever go to a file so they never corrupt the terminal UI. Without
    a ``log_file`` the logger stays silent.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    # Don't propagate to root logger to avoid console output
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file is None:
        logger.addHandler(logging.NullHandler())
        return logger

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
    logger.addHandler(file_handler)
    return logger
