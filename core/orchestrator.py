#!/usr/bin/env python3
"""
Mumble Migrator Orchestrator
============================

Drives one migration run: open both databases, check their schemas, replace
every Murmur table in dependency order, close both databases.

A failing table is logged and skipped; the run always moves on to the next
table and always closes what it opened.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional, Sequence

from config.migrator_config import ConnectionParams, MigratorConfig, ValidationPolicy
from core.schema import EXPECTED_TABLES, MUMBLE_TABLES, TableSpec
from core.schema_validator import check_tables
from core.table_migrator import TableMigrator
from extensions.plugins.mysql_adapter import connect_mysql
from extensions.plugins.sqlite_adapter import connect_sqlite

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_TERMINATED = "terminated"
STATUS_INVALID_SCHEMA = "invalid_schema"


class MigrationOrchestrator:
    """Migrate a Murmur database from MySQL to SQLite"""

    def __init__(self, config: Optional[MigratorConfig] = None,
                 log: Optional[logging.Logger] = None,
                 source_connector: Callable = connect_mysql,
                 destination_connector: Callable = connect_sqlite,
                 tables: Sequence[TableSpec] = MUMBLE_TABLES):
        self.config = config or MigratorConfig()
        self.log = log or logger
        self.source_connector = source_connector
        self.destination_connector = destination_connector
        self.tables = tuple(tables)
        self.source = None
        self.destination = None
        self.report: Dict[str, Any] = self._new_report()

    @staticmethod
    def _new_report() -> Dict[str, Any]:
        return {
            "status": STATUS_PENDING,
            "schema_ok": None,
            "tables": [],
            "failed": [],
            "total_rows": 0,
            "duration_seconds": 0.0,
        }

    def execute(self, params: ConnectionParams) -> None:
        """Run the migration. Failures are logged, never raised."""
        self.report = self._new_report()
        start_time = time.time()
        self.log.info(f"Connection parameters: {params.get_safe_dict()}")
        self.log.info(f"Run settings: {self.config.get_safe_dict()}")

        self.source = self.source_connector(params, self.log)
        self.destination = self.destination_connector(params, self.log)
        if not self.source or not self.destination:
            self.log.error("One database couldn't be connected. Terminating.")
            self.report["status"] = STATUS_TERMINATED
            self._close()
            return

        try:
            schema_ok = check_tables(self.source, self.destination, EXPECTED_TABLES, self.log)
            self.report["schema_ok"] = schema_ok
            if not schema_ok:
                if self.config.validation_policy == ValidationPolicy.ABORT:
                    self.log.error("Databases not ok. Terminating.")
                    self.report["status"] = STATUS_INVALID_SCHEMA
                    return
                self.log.error("Databases not ok. Continuing anyway.")

            for spec in self.tables:
                self._migrate_table(spec)
            self.report["status"] = STATUS_COMPLETED
        finally:
            self.report["duration_seconds"] = time.time() - start_time
            self._close()

        self._log_summary()
        self.log.info("Good bye")

    def _migrate_table(self, spec: TableSpec) -> None:
        """Migrate one table, logging instead of raising on failure"""
        self.log.info(f"Migrating {spec.name}...")
        migrator = TableMigrator(spec, self.source, self.destination, self.log,
                                 batch_size=self.config.batch_size,
                                 dry_run=self.config.dry_run)
        entry = {"name": spec.name, "rows": 0, "success": False, "error": None}
        try:
            entry["rows"] = migrator.migrate()
            entry["success"] = True
            self.report["total_rows"] += entry["rows"]
            self.log.info("Done.")
        except Exception as e:
            entry["error"] = str(e)
            self.report["failed"].append(spec.name)
            self.log.error(f"Error. {e}")
        self.report["tables"].append(entry)

    def _close(self) -> None:
        """Close destination then source; each at most once"""
        if self.destination is not None:
            self.log.info("Closing sqlite...")
            self._close_quietly(self.destination, "sqlite")
            self.destination = None
        if self.source is not None:
            self.log.info("Closing mysql...")
            self._close_quietly(self.source, "mysql")
            self.source = None

    def _close_quietly(self, adapter, name: str) -> None:
        try:
            adapter.close()
        except Exception as e:
            self.log.error(f"Failed to close {name}: {e}")

    def _log_summary(self) -> None:
        migrated = len(self.report["tables"]) - len(self.report["failed"])
        self.log.info(f"Migrated {migrated}/{len(self.report['tables'])} tables, "
                      f"{self.report['total_rows']} rows in {self.report['duration_seconds']:.2f}s")
        if self.report["failed"]:
            self.log.error(f"Failed tables: {', '.join(self.report['failed'])}")
