#!/usr/bin/env python3
"""
Mumble Migrator Error Hierarchy
Canonical exception classes for the migration engine.
"""

from enum import Enum
from typing import Iterable


class ErrorCode(Enum):
    UNKNOWN = "UNKNOWN_ERROR"
    PROVISIONING_ERROR = "PROVISIONING_ERROR"
    CATALOG_ERROR = "CATALOG_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MIGRATION_ERROR = "MIGRATION_ERROR"


class MigratorError(Exception):
    """Base class for all migrator exceptions"""
    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN, details: dict = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ProvisioningError(MigratorError):
    """Raised when a backend connection cannot be opened"""
    def __init__(self, message: str, backend: str = None):
        super().__init__(message, ErrorCode.PROVISIONING_ERROR, {'backend': backend})
        self.backend = backend


class CatalogQueryError(MigratorError):
    """Raised when a table catalog cannot be listed"""
    def __init__(self, message: str, backend: str = None):
        super().__init__(message, ErrorCode.CATALOG_ERROR, {'backend': backend})
        self.backend = backend


class SchemaValidationError(MigratorError):
    """Raised when expected tables are missing on one side"""
    def __init__(self, backend: str, missing: Iterable[str]):
        self.backend = backend
        self.missing = sorted(missing)
        message = f"{backend} is missing the following tables: {', '.join(self.missing)}"
        super().__init__(message, ErrorCode.VALIDATION_ERROR,
                         {'backend': backend, 'missing': self.missing})


class TableMigrationError(MigratorError):
    """Raised when reading, clearing or writing one table fails"""
    def __init__(self, table: str, cause: Exception = None):
        self.table = table
        message = f"Migration of table {table} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, ErrorCode.MIGRATION_ERROR, {'table': table})
