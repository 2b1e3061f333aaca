##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Schema introspection for the SQLite driver.

Embedded relations are not declared anywhere in Refinery; the SQLite driver finds
them from the foreign keys the tables were created with. This module wraps the
`PRAGMA table_info` and `PRAGMA foreign_key_list` lookups for one connection.
"""

import logging
import sqlite3
from dataclasses import dataclass
from typing import Dict, List, Optional

from refinery.exceptions import StoreError


LOG = logging.getLogger(__name__)

MANY_TO_ONE = "many_to_one"
ONE_TO_MANY = "one_to_many"


def quote(identifier: str) -> str:
    """Quote an identifier that has already been validated."""
    return f'"{identifier}"'


def qualify(table: str, schema: Optional[str] = None) -> str:
    """Return the quoted, optionally schema-qualified name of `table`."""
    return f"{quote(schema)}.{quote(table)}" if schema else quote(table)


@dataclass(frozen=True)
class ForeignKey:
    """A single-column foreign key from `table.column` to `ref_table.ref_column`."""

    table: str
    column: str
    ref_table: str
    ref_column: str


@dataclass(frozen=True)
class Relationship:
    """
    How an embedded table hangs off its parent.

    Attributes:
        kind: `many_to_one` when the parent holds the foreign key, `one_to_many`
            when the embedded table does.
        parent_column: Column of the parent table used in the join.
        child_column: Column of the embedded table used in the join.
    """

    kind: str
    parent_column: str
    child_column: str


class SQLiteSchema:
    """
    Cached table metadata for a single SQLite connection.

    Methods:
        columns: Column names of a table.
        primary_key: Primary key column of a table.
        foreign_keys: Outgoing single-column foreign keys of a table.
        relationship: How one table embeds another.
    """

    def __init__(self, conn: sqlite3.Connection, schema: Optional[str] = None):
        self.conn = conn
        self.schema = schema
        self._columns: Dict[str, List[sqlite3.Row]] = {}
        self._foreign_keys: Dict[str, List[ForeignKey]] = {}

    def _pragma(self, pragma: str, table: str) -> List[sqlite3.Row]:
        prefix = f"{quote(self.schema)}." if self.schema else ""
        return self.conn.execute(f"PRAGMA {prefix}{pragma}({quote(table)})").fetchall()

    def _table_info(self, table: str) -> List[sqlite3.Row]:
        if table not in self._columns:
            info = self._pragma("table_info", table)
            if not info:
                raise StoreError(f'relation "{table}" does not exist', code="42P01")
            self._columns[table] = info
        return self._columns[table]

    def columns(self, table: str) -> List[str]:
        return [row["name"] for row in self._table_info(table)]

    def has_column(self, table: str, column: str) -> bool:
        return column in self.columns(table)

    def require_column(self, table: str, column: str):
        """
        Raise a `StoreError` if `table` has no column named `column`.
        """
        if not self.has_column(table, column):
            raise StoreError(f"column {table}.{column} does not exist", code="42703")

    def primary_key(self, table: str) -> str:
        """
        Return the primary key column of `table`.

        Tables without a declared primary key fall back to `rowid`.
        """
        keys = sorted((row for row in self._table_info(table) if row["pk"]), key=lambda row: row["pk"])
        if len(keys) == 1:
            return keys[0]["name"]
        if not keys:
            return "rowid"
        raise StoreError(f'relation "{table}" has a composite primary key, which is not supported', code="0A000")

    def foreign_keys(self, table: str) -> List[ForeignKey]:
        if table not in self._foreign_keys:
            rows = self._pragma("foreign_key_list", table)
            grouped: Dict[int, List[sqlite3.Row]] = {}
            for row in rows:
                grouped.setdefault(row["id"], []).append(row)
            keys = []
            for parts in grouped.values():
                if len(parts) != 1:
                    LOG.debug(f"Skipping composite foreign key on '{table}'.")
                    continue
                part = parts[0]
                ref_column = part["to"] or self.primary_key(part["table"])
                keys.append(ForeignKey(table, part["from"], part["table"], ref_column))
            self._foreign_keys[table] = keys
        return self._foreign_keys[table]

    def relationship(self, parent: str, child: str) -> Relationship:
        """
        Work out how `child` is embedded under `parent`.

        The parent's own foreign keys are checked first (many-to-one), then the
        child's foreign keys back to the parent (one-to-many).

        Raises:
            StoreError: If the two tables are not related by a foreign key.
        """
        self._table_info(child)
        for key in self.foreign_keys(parent):
            if key.ref_table == child:
                return Relationship(MANY_TO_ONE, key.column, key.ref_column)
        for key in self.foreign_keys(child):
            if key.ref_table == parent:
                return Relationship(ONE_TO_MANY, key.ref_column, key.column)
        raise StoreError(
            f"Could not find a relationship between '{parent}' and '{child}' in the schema cache", code="PGRST200"
        )
