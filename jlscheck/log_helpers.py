"""
Logging helpers for jlscheck.

Report lines are written with click.echo; this logger carries diagnostics.
"""

import logging
import sys

PACKAGE_LOGGER = 'jlscheck'


def setup_logger(level=logging.INFO):
    """
    Set up and configure the package logger.

    Args:
        level: The logging level (DEBUG with --verbose)

    Returns:
        logging.Logger: The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    if logger.handlers:
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('%(levelname)s %(name)s: %(message)s'))
    logger.addHandler(handler)

    return logger
