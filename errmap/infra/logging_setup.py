"""
Logging configuration for the application.

One format for every logger, written to stdout.
Logging must not change program behavior.
"""

import logging
import sys

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def resolve_level(level: str) -> int:
    value = logging.getLevelName(str(level).strip().upper())
    # unknown names come back as the string 'Level <name>'
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: str = 'INFO') -> None:
    logging.basicConfig(
        level=resolve_level(level),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )

    # uvicorn logs every request on its own
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
