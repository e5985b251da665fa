"""
Command-line interface for jlscheck
"""

import logging
import sys
from pathlib import Path

import click

from .log_helpers import setup_logger
from .runner import run_directory

USAGE = "usage: jlscheck <directory-to-test>"


@click.command()
@click.argument('directory', required=False, type=click.Path(path_type=Path))
@click.option('--near-lossless', '-n', default=0, type=click.IntRange(0, 255),
              help='NEAR value for the encoder, 0 is lossless (default: 0)')
@click.option('--write-output/--no-write-output', default=True,
              help='Write <stem>-<mode>.jls next to each source (default: on)')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def main(directory, near_lossless, write_output, verbose):
    """Round-trip every PGM/PPM file below DIRECTORY through JPEG-LS."""
    logger = setup_logger(level=logging.DEBUG if verbose else logging.INFO)

    if directory is None:
        click.echo(USAGE)
        sys.exit(1)

    try:
        passed = run_directory(directory, near_lossless=near_lossless, write_output=write_output)
    except Exception as e:
        click.echo(f"Unexpected failure: {e}")
        logger.debug("Run aborted", exc_info=True)
        sys.exit(1)

    sys.exit(0 if passed else 1)


if __name__ == '__main__':
    main()
