#!/usr/bin/env python3
"""
Mumble Migrator
===============

Copy a Murmur server database from MySQL into an SQLite file.

The SQLite file must already carry the Murmur schema (start murmur once
against it); every Murmur table in it is replaced with the MySQL contents.

Usage:
    mumble-migrator -h localhost -u murmur -P secret -d murmur -f murmur.sqlite

    # Credentials from the environment
    export MUMBLE_MIGRATOR_MYSQL_PASSWORD=secret
    python3 -m tools.mumble_migrator -h db.example.org -u murmur -d murmur -f murmur.sqlite
"""

import argparse
import logging
import sys
from typing import List, Optional

from config.migrator_config import ConnectionParams, MigratorConfig, ValidationPolicy
from core.orchestrator import MigrationOrchestrator, STATUS_COMPLETED

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def build_parser() -> argparse.ArgumentParser:
    # -h is the MySQL host, so help is long-only
    parser = argparse.ArgumentParser(prog="mumble-migrator",
                                     description="Migrate mysql to sqlite3.",
                                     add_help=False)
    parser.add_argument("--help", action="help", help="Show this help message and exit")

    mysql = parser.add_argument_group("mysql source")
    mysql.add_argument("-h", "--host", help="MySQL host (env MUMBLE_MIGRATOR_MYSQL_HOST)")
    mysql.add_argument("-p", "--port", type=int, help="MySQL port, default 3306 (env MUMBLE_MIGRATOR_MYSQL_PORT)")
    mysql.add_argument("-u", "--username", help="MySQL user (env MUMBLE_MIGRATOR_MYSQL_USER)")
    mysql.add_argument("-P", "--password", help="MySQL password (env MUMBLE_MIGRATOR_MYSQL_PASSWORD)")
    mysql.add_argument("-d", "--database", help="MySQL database (env MUMBLE_MIGRATOR_MYSQL_DATABASE)")

    sqlite = parser.add_argument_group("sqlite destination")
    sqlite.add_argument("-f", "--filename", help="SQLite database file (env MUMBLE_MIGRATOR_SQLITE_FILE)")

    run = parser.add_argument_group("run options")
    run.add_argument("--batch-size", type=int, help="Rows per insert batch (default 500)")
    run.add_argument("--continue-on-invalid-schema", action="store_true",
                     help="Migrate even when expected tables are missing")
    run.add_argument("--dry-run", action="store_true", help="Read the source only, write nothing")
    run.add_argument("--log-level", choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                     help="Console log level (default INFO)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        params = ConnectionParams.from_env(
            host=args.host, port=args.port, username=args.username,
            password=args.password, database=args.database, filename=args.filename,
        )
        config = MigratorConfig(
            batch_size=args.batch_size,
            validation_policy=ValidationPolicy.CONTINUE if args.continue_on_invalid_schema else None,
            log_level=args.log_level,
            dry_run=args.dry_run,
        )
    except ValueError as e:
        parser.error(str(e))

    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    orchestrator = MigrationOrchestrator(config=config)
    orchestrator.execute(params)
    return 0 if orchestrator.report["status"] == STATUS_COMPLETED else 1


if __name__ == "__main__":
    sys.exit(main())
