#!/usr/bin/env python3
"""
Configuration for Mumble Migrator
Handles connection parameters and runtime settings from environment variables
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

ENV_PREFIX = "MUMBLE_MIGRATOR_"

DEFAULT_MYSQL_PORT = 3306
DEFAULT_BATCH_SIZE = 500


class ValidationPolicy(Enum):
    """What to do when the schema check fails"""
    ABORT = "abort"
    CONTINUE = "continue"


@dataclass(frozen=True)
class ConnectionParams:
    """Connection parameters for both backends.

    host, port, username, password and database address the MySQL source;
    filename is the path of the SQLite destination.
    """
    host: str
    username: str
    password: str
    database: str
    filename: str
    port: Optional[int] = None

    def __post_init__(self):
        missing = [name for name in ('host', 'username', 'password', 'database', 'filename')
                   if not getattr(self, name)]
        if missing:
            raise ValueError(f"Missing connection parameters: {', '.join(missing)}")

    def mysql_params(self) -> Dict[str, Any]:
        """Parameters addressing the MySQL source"""
        return {
            'host': self.host,
            'port': self.port or DEFAULT_MYSQL_PORT,
            'user': self.username,
            'password': self.password,
            'database': self.database,
        }

    def sqlite_params(self) -> Dict[str, Any]:
        """Parameters addressing the SQLite destination"""
        return {'database': self.filename}

    def get_safe_dict(self) -> Dict[str, Any]:
        """Parameters without the password"""
        return {
            'host': self.host,
            'port': self.port or DEFAULT_MYSQL_PORT,
            'username': self.username,
            'database': self.database,
            'filename': self.filename,
        }

    @classmethod
    def from_env(cls, **overrides) -> 'ConnectionParams':
        """Build parameters from MUMBLE_MIGRATOR_* variables.

        Keyword arguments that are not None take precedence over the
        environment.
        """
        values = {
            'host': os.environ.get(f'{ENV_PREFIX}MYSQL_HOST'),
            'port': os.environ.get(f'{ENV_PREFIX}MYSQL_PORT'),
            'username': os.environ.get(f'{ENV_PREFIX}MYSQL_USER'),
            'password': os.environ.get(f'{ENV_PREFIX}MYSQL_PASSWORD'),
            'database': os.environ.get(f'{ENV_PREFIX}MYSQL_DATABASE'),
            'filename': os.environ.get(f'{ENV_PREFIX}SQLITE_FILE'),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        if values['port'] is not None:
            values['port'] = int(values['port'])
        return cls(**values)


@dataclass
class MigratorConfig:
    """Runtime settings for a migration run"""

    batch_size: int = None
    validation_policy: ValidationPolicy = None
    log_level: str = None
    dry_run: bool = False

    def __post_init__(self):
        """Fill unset values from the environment, then defaults"""
        if self.batch_size is None:
            self.batch_size = int(os.environ.get(f'{ENV_PREFIX}BATCH_SIZE', DEFAULT_BATCH_SIZE))
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {self.batch_size}")

        if self.validation_policy is None:
            self.validation_policy = os.environ.get(f'{ENV_PREFIX}ON_INVALID_SCHEMA',
                                                    ValidationPolicy.ABORT.value)
        if not isinstance(self.validation_policy, ValidationPolicy):
            self.validation_policy = ValidationPolicy(str(self.validation_policy).lower())

        if self.log_level is None:
            self.log_level = os.environ.get(f'{ENV_PREFIX}LOG_LEVEL', 'INFO')
        self.log_level = str(self.log_level).upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    def get_safe_dict(self) -> Dict[str, Any]:
        """Settings as logged at the start of a run"""
        return {
            'batch_size': self.batch_size,
            'validation_policy': self.validation_policy.value,
            'log_level': self.log_level,
            'dry_run': self.dry_run,
        }
