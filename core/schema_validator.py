#!/usr/bin/env python3
"""
Schema readiness check run before any table is migrated.

Both catalogs must contain every expected table. Extra tables are fine.
"""

import logging
from typing import AbstractSet, Iterable, Optional, Set

from core.errors import SchemaValidationError

logger = logging.getLogger(__name__)


def missing_tables(expected: Iterable[str], found: Iterable[str]) -> Set[str]:
    """Expected table names that are not in the found catalog"""
    return set(expected) - set(found)


def check_tables(source, destination, expected_names: AbstractSet[str],
                 log: Optional[logging.Logger] = None) -> bool:
    """
    Confirm that source and destination both contain the expected tables.

    Args:
        source: adapter exposing get_tables() for the MySQL side
        destination: adapter exposing get_tables() for the SQLite side
        expected_names: table names that must exist on both sides
        log: logger to report on

    Returns:
        True only when neither side is missing a table. Missing names and
        catalog errors are logged, never raised.
    """
    log = log or logger
    try:
        source_tables = source.get_tables()
        destination_tables = destination.get_tables()

        for backend, found in (("Mysql", source_tables), ("Sqlite", destination_tables)):
            missing = missing_tables(expected_names, found)
            if missing:
                raise SchemaValidationError(backend, missing)
    except SchemaValidationError as e:
        log.error(e.message)
        return False
    except Exception as e:
        log.error(f"Error determining existing tables: {e}")
        return False
    return True
