#!/usr/bin/env python3
"""
Murmur Table Catalog

The tables of a Murmur server database, in the order they are migrated.
Parents come before the tables that reference them (servers before
channels, channels before their ACL entries and so on).
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class TableSpec:
    """A migrated table: its name, ordered insert columns and log label"""
    name: str
    columns: Tuple[str, ...]
    label_column: Optional[str] = None

    def __post_init__(self):
        if not self.columns:
            raise ValueError(f"Table {self.name} needs at least one column")
        if self.label_column is not None and self.label_column not in self.columns:
            raise ValueError(f"Label column {self.label_column} is not a column of {self.name}")


MUMBLE_TABLES: Tuple[TableSpec, ...] = (
    TableSpec("servers", ("server_id",)),
    TableSpec("channels", ("server_id", "channel_id", "parent_id", "name", "inheritacl"),
              label_column="name"),
    TableSpec("users", ("server_id", "user_id", "name", "pw", "salt", "kdfiterations",
                        "lastchannel", "texture", "last_active"),
              label_column="name"),
    TableSpec("groups", ("group_id", "server_id", "name", "channel_id", "inherit", "inheritable"),
              label_column="name"),
    TableSpec("acl", ("server_id", "channel_id", "priority", "user_id", "group_name",
                      "apply_here", "apply_sub", "grantpriv", "revokepriv")),
    TableSpec("bans", ("server_id", "base", "mask", "name", "hash", "reason", "start", "duration")),
    TableSpec("channel_info", ("server_id", "channel_id", "key", "value")),
    TableSpec("channel_links", ("server_id", "channel_id", "link_id")),
    TableSpec("config", ("server_id", "key", "value")),
    TableSpec("group_members", ("group_id", "server_id", "user_id", "addit")),
    TableSpec("meta", ("keystring", "value")),
    TableSpec("slog", ("server_id", "msg", "msgtime")),
    TableSpec("user_info", ("server_id", "user_id", "key", "value")),
)

EXPECTED_TABLES: FrozenSet[str] = frozenset(spec.name for spec in MUMBLE_TABLES)


def get_table_spec(name: str) -> TableSpec:
    """Look up a table spec by name"""
    specs: Dict[str, TableSpec] = {spec.name: spec for spec in MUMBLE_TABLES}
    try:
        return specs[name]
    except KeyError:
        raise KeyError(f"Unknown Murmur table: {name}") from None
