#!/usr/bin/env python3
"""
Mumble Migrator Test Configuration - PyTest Fixtures

Shared fixtures: the Murmur SQLite schema, a sample Murmur dataset, an
in-memory stand-in for the MySQL source, and SQLite destinations on disk.
"""

import copy
import os
import sqlite3
import sys
from datetime import datetime
from typing import Any, Dict, List

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from extensions.plugins.sqlite_adapter import SQLiteAdapter

MURMUR_SQLITE_SCHEMA = """
    CREATE TABLE servers (server_id INTEGER PRIMARY KEY AUTOINCREMENT);
    CREATE TABLE slog (server_id INTEGER NOT NULL, msg TEXT, msgtime DATE);
    CREATE TABLE config (server_id INTEGER NOT NULL, key TEXT, value TEXT);
    CREATE UNIQUE INDEX config_key ON config (server_id, key);
    CREATE TABLE channels (server_id INTEGER NOT NULL, channel_id INTEGER NOT NULL,
                           parent_id INTEGER, name TEXT, inheritacl INTEGER);
    CREATE UNIQUE INDEX channel_id ON channels (server_id, channel_id);
    CREATE TABLE channel_info (server_id INTEGER NOT NULL, channel_id INTEGER NOT NULL,
                               key INTEGER, value TEXT);
    CREATE UNIQUE INDEX channel_info_id ON channel_info (server_id, channel_id, key);
    CREATE TABLE users (server_id INTEGER NOT NULL, user_id INTEGER NOT NULL, name TEXT NOT NULL,
                        pw TEXT, salt TEXT, kdfiterations INTEGER, lastchannel INTEGER,
                        texture BLOB, last_active DATE);
    CREATE UNIQUE INDEX users_name ON users (server_id, name);
    CREATE UNIQUE INDEX users_id ON users (server_id, user_id);
    CREATE TABLE user_info (server_id INTEGER NOT NULL, user_id INTEGER NOT NULL,
                            key INTEGER, value TEXT);
    CREATE UNIQUE INDEX user_info_id ON user_info (server_id, user_id, key);
    CREATE TABLE groups (group_id INTEGER PRIMARY KEY AUTOINCREMENT, server_id INTEGER NOT NULL,
                         name TEXT, channel_id INTEGER NOT NULL, inherit INTEGER, inheritable INTEGER);
    CREATE UNIQUE INDEX groups_name_channels ON groups (server_id, channel_id, name);
    CREATE TABLE group_members (group_id INTEGER NOT NULL, server_id INTEGER NOT NULL,
                                user_id INTEGER NOT NULL, addit INTEGER);
    CREATE TABLE acl (server_id INTEGER NOT NULL, channel_id INTEGER NOT NULL, priority INTEGER,
                      user_id INTEGER, group_name TEXT, apply_here INTEGER, apply_sub INTEGER,
                      grantpriv INTEGER, revokepriv INTEGER);
    CREATE UNIQUE INDEX acl_channel_pri ON acl (server_id, channel_id, priority);
    CREATE TABLE channel_links (server_id INTEGER NOT NULL, channel_id INTEGER NOT NULL,
                                link_id INTEGER NOT NULL);
    CREATE TABLE bans (server_id INTEGER NOT NULL, base BLOB, mask INTEGER, name TEXT,
                       hash TEXT, reason TEXT, start DATE, duration INTEGER);
    CREATE TABLE meta (keystring TEXT PRIMARY KEY, value TEXT);
"""

MURMUR_ROWS: Dict[str, List[Dict[str, Any]]] = {
    "servers": [{"server_id": 1}, {"server_id": 2}],
    "channels": [
        {"server_id": 1, "channel_id": 0, "parent_id": None, "name": "Root", "inheritacl": 1},
        {"server_id": 1, "channel_id": 1, "parent_id": 0, "name": "Lobby", "inheritacl": 1},
        {"server_id": 1, "channel_id": 2, "parent_id": 0, "name": "AFK", "inheritacl": 0},
        {"server_id": 2, "channel_id": 0, "parent_id": None, "name": "Root", "inheritacl": 1},
    ],
    "users": [
        {"server_id": 1, "user_id": 0, "name": "SuperUser", "pw": "ab12", "salt": "cd34",
         "kdfiterations": 16000, "lastchannel": 0, "texture": None,
         "last_active": datetime(2023, 5, 1, 12, 30, 0)},
        {"server_id": 1, "user_id": 1, "name": "alice", "pw": None, "salt": None,
         "kdfiterations": None, "lastchannel": 1, "texture": b"\x89PNG\r\n\x1a\n",
         "last_active": datetime(2023, 6, 2, 8, 0, 0)},
    ],
    "groups": [
        {"group_id": 1, "server_id": 1, "name": "admin", "channel_id": 0, "inherit": 1, "inheritable": 1},
        {"group_id": 2, "server_id": 1, "name": "moderators", "channel_id": 1, "inherit": 1, "inheritable": 0},
    ],
    "acl": [
        {"server_id": 1, "channel_id": 0, "priority": 1, "user_id": None, "group_name": "admin",
         "apply_here": 1, "apply_sub": 1, "grantpriv": 1, "revokepriv": 0},
        {"server_id": 1, "channel_id": 0, "priority": 2, "user_id": 1, "group_name": None,
         "apply_here": 1, "apply_sub": 0, "grantpriv": 0x400, "revokepriv": 0},
    ],
    "bans": [
        {"server_id": 1, "base": b"\x00" * 10 + b"\xff\xff\xc0\xa8\x01\x0a", "mask": 128,
         "name": "troll", "hash": "0f0e", "reason": "spam", "start": datetime(2023, 1, 1, 0, 0, 0),
         "duration": 3600},
    ],
    "channel_info": [
        {"server_id": 1, "channel_id": 1, "key": 0, "value": "Welcome to the lobby"},
    ],
    "channel_links": [
        {"server_id": 1, "channel_id": 1, "link_id": 2},
        {"server_id": 1, "channel_id": 2, "link_id": 1},
    ],
    "config": [
        {"server_id": 1, "key": "registername", "value": "My Server"},
        {"server_id": 1, "key": "port", "value": "64738"},
    ],
    "group_members": [
        {"group_id": 1, "server_id": 1, "user_id": 0, "addit": 1},
        {"group_id": 2, "server_id": 1, "user_id": 1, "addit": 1},
    ],
    "meta": [{"keystring": "version", "value": "8"}],
    "slog": [
        {"server_id": 1, "msg": "Server listening on 0.0.0.0:64738", "msgtime": datetime(2023, 6, 2, 7, 59, 0)},
    ],
    "user_info": [
        {"server_id": 1, "user_id": 1, "key": 1, "value": "alice@example.org"},
    ],
}


class FakeMySQLSource:
    """Stands in for MySQLAdapter: serves rows from a dict of tables"""

    def __init__(self, tables: Dict[str, List[Dict[str, Any]]],
                 failing_tables=(), catalog_error: Exception = None):
        self.tables = copy.deepcopy(tables)
        self.failing_tables = set(failing_tables)
        self.catalog_error = catalog_error
        self.fetched: List[str] = []
        self.close_calls = 0

    def get_tables(self) -> List[str]:
        if self.catalog_error is not None:
            raise self.catalog_error
        return list(self.tables)

    def fetch_rows(self, table_name: str) -> List[Dict[str, Any]]:
        self.fetched.append(table_name)
        if table_name in self.failing_tables:
            raise RuntimeError(f"Table '{table_name}' doesn't exist")
        return copy.deepcopy(self.tables[table_name])

    def close(self):
        self.close_calls += 1


def create_murmur_sqlite(path: str) -> str:
    """Create an SQLite file carrying the Murmur schema"""
    with sqlite3.connect(path) as conn:
        conn.executescript(MURMUR_SQLITE_SCHEMA)
    conn.close()
    return path


def read_table(path: str, table: str) -> List[tuple]:
    """All rows of a destination table, sorted"""
    conn = sqlite3.connect(path)
    try:
        rows = conn.execute(f'SELECT * FROM "{table}"').fetchall()
    finally:
        conn.close()
    return sorted(rows, key=repr)


_sqlite_connect = sqlite3.connect


def connect_read_only(database, **kwargs):
    """sqlite3.connect replacement that opens the file read-only, like an unwritable file"""
    return _sqlite_connect(f"file:{database}?mode=ro", uri=True, **kwargs)


@pytest.fixture
def murmur_rows():
    return copy.deepcopy(MURMUR_ROWS)


@pytest.fixture
def fake_source(murmur_rows):
    return FakeMySQLSource(murmur_rows)


@pytest.fixture
def sqlite_path(tmp_path):
    """Path of a fresh SQLite file with the Murmur schema"""
    return create_murmur_sqlite(str(tmp_path / "murmur.sqlite"))


@pytest.fixture
def sqlite_destination(sqlite_path):
    adapter = SQLiteAdapter(database=sqlite_path)
    yield adapter
    adapter.close()
