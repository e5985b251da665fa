"""
Batch runner: walk a directory tree and check every reference image in it.
"""

import enum
import logging
import os
from pathlib import Path

import click

from .checker import check_color_file, check_file

logger = logging.getLogger(__name__)


class RasterKind(enum.Enum):
    MONOCHROME = 'monochrome'
    COLOR = 'color'
    UNRECOGNIZED = 'unrecognized'


RASTER_EXTENSIONS = {
    '.pgm': RasterKind.MONOCHROME,
    '.ppm': RasterKind.COLOR,
}


def classify_file(path):
    """Raster kind declared by the file extension."""
    return RASTER_EXTENSIONS.get(Path(path).suffix.lower(), RasterKind.UNRECOGNIZED)


def iter_files(root):
    """Yield every file below root in sorted, depth-first order."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            yield Path(dirpath) / filename


def run_directory(root, near_lossless=0, write_output=True):
    """
    Check every PGM and PPM file below root.

    Monochrome files are checked without interleaving, color files in all
    three modes. The run stops at the first failing file.

    Args:
        root: Directory to scan
        near_lossless: NEAR value handed to the encoder
        write_output: Write .jls files next to the sources

    Returns:
        bool: True when every checked file passed (or none matched)
    """
    if not os.path.isdir(root):
        raise NotADirectoryError(f"Not a directory: {root}")

    options = {'near_lossless': near_lossless, 'write_output': write_output}

    checked = 0
    for path in iter_files(root):
        kind = classify_file(path)
        if kind is RasterKind.UNRECOGNIZED:
            logger.debug("Skipping %s", path)
            continue

        click.echo(f"Checking file: {path}")
        if kind is RasterKind.MONOCHROME:
            passed = check_file(path, **options).passed
        else:
            passed = check_color_file(path, **options)
        click.echo(f" Status: {'Passed' if passed else 'Failed'}")

        if not passed:
            return False
        checked += 1

    logger.info("%d file(s) passed", checked)
    return True
