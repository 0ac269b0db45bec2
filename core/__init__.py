#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mumble Migrator Core Package
Exports the migration engine building blocks

The orchestrator lives in core.orchestrator and is not re-exported here,
since it pulls in the database adapters.
"""

from .errors import (
    ErrorCode,
    MigratorError,
    ProvisioningError,
    CatalogQueryError,
    SchemaValidationError,
    TableMigrationError,
)
from .schema import TableSpec, MUMBLE_TABLES, EXPECTED_TABLES, get_table_spec
from .schema_validator import check_tables, missing_tables
from .table_migrator import TableMigrator

__all__ = [
    # Errors
    'ErrorCode',
    'MigratorError',
    'ProvisioningError',
    'CatalogQueryError',
    'SchemaValidationError',
    'TableMigrationError',

    # Table catalog
    'TableSpec',
    'MUMBLE_TABLES',
    'EXPECTED_TABLES',
    'get_table_spec',

    # Engine
    'check_tables',
    'missing_tables',
    'TableMigrator',
]

__version__ = '1.0.0'
