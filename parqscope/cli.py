import logging

import click

from .config import ExplorerConfig, setup_debug_logging
from .core.parquet_file import DEFAULT_SAMPLE_ROWS, ParquetSource
from .ui.app import run_app

logger = logging.getLogger("parqscope")


@click.command()
@click.version_option(package_name="parqscope")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--sample-rows",
    "-n",
    type=click.IntRange(min=1),
    default=DEFAULT_SAMPLE_ROWS,
    show_default=True,
    envvar="PARQSCOPE_SAMPLE_ROWS",
    help="Number of leading rows loaded into the Browse view",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True),
    envvar="PARQSCOPE_LOG_FILE",
    help="Write debug logs to this file",
)
def main(file: str, sample_rows: int, log_file: str | None):
    """parqscope - Explore a Parquet file in the terminal."""
    config = ExplorerConfig(sample_rows=sample_rows, log_file=log_file)
    setup_debug_logging(config.log_file)

    try:
        source = ParquetSource.open(file, sample_rows=config.sample_rows)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Could not open {file}: {e}")
        raise click.ClickException(str(e)) from e

    try:
        run_app(source, config=config)
    except KeyboardInterrupt:
        click.echo("\nGoodbye!")


if __name__ == "__main__":
    main()
