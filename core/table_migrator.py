#!/usr/bin/env python3
"""
Per-table transfer: read everything from the source, clear the destination
table, write every row back in bounded batches.

The clear and the inserts share one destination transaction, so a failed
table keeps whatever it held before the run.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from config.migrator_config import DEFAULT_BATCH_SIZE
from core.errors import TableMigrationError
from core.schema import TableSpec

logger = logging.getLogger(__name__)


class TableMigrator:
    """Replace one destination table with the source table's rows"""

    def __init__(self, spec: TableSpec, source, destination,
                 log: Optional[logging.Logger] = None,
                 batch_size: int = DEFAULT_BATCH_SIZE,
                 dry_run: bool = False):
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.spec = spec
        self.source = source
        self.destination = destination
        self.log = log or logger
        self.batch_size = batch_size
        self.dry_run = dry_run

    def _bind(self, row: Dict[str, Any]) -> Tuple[Any, ...]:
        """Row values in insert column order"""
        return tuple(row.get(col) for col in self.spec.columns)

    def _batches(self, rows: Sequence[Dict[str, Any]]):
        for start in range(0, len(rows), self.batch_size):
            yield rows[start:start + self.batch_size]

    def read(self) -> List[Dict[str, Any]]:
        return list(self.source.fetch_rows(self.spec.name))

    def write(self, rows: Sequence[Dict[str, Any]]) -> int:
        """Clear the destination table and insert rows, atomically"""
        written = 0
        with self.destination.transaction():
            self.destination.delete_all(self.spec.name)
            for batch in self._batches(rows):
                if self.spec.label_column:
                    for row in batch:
                        self.log.info(f'Migrating {self.spec.name} entry "{row.get(self.spec.label_column)}"')
                written += self.destination.insert_rows(
                    self.spec.name, self.spec.columns, [self._bind(row) for row in batch]
                )
        return written

    def migrate(self) -> int:
        """
        Run the transfer.

        Returns:
            Number of rows written (rows read, in dry-run mode)

        Raises:
            TableMigrationError: on any read or write failure
        """
        try:
            rows = self.read()
            if self.dry_run:
                self.log.info(f"[DRY RUN] Would migrate {len(rows)} rows into {self.spec.name}")
                return len(rows)
            return self.write(rows)
        except TableMigrationError:
            raise
        except Exception as e:
            raise TableMigrationError(self.spec.name, e) from e
