##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
SQLite driver implementation for the Refinery application.

This module defines `SQLiteDriver`, a concrete `StoreDriver` that executes primitive
select/insert/update/delete operations against a SQLite database file.

Embedded relations in select expressions are resolved from the tables' foreign keys:
a many-to-one relation embeds a single object, a one-to-many relation embeds a list
(or `[{"count": n}]` for `table(count)`). Inner embeds and filters on embedded
columns are enforced with correlated `EXISTS` subqueries, so parent rows are never
duplicated. Integrity failures are reported as `StoreError`s carrying
PostgreSQL-compatible SQLSTATE codes so that callers can classify them uniformly.

Every primitive opens a short-lived connection and runs in a worker thread, which
keeps the event loop free while SQLite blocks.
"""

import asyncio
import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from refinery.backends.primitives import ColumnPredicate, OrderClause, PrimitiveOp, RowWindow, SelectResult
from refinery.backends.sqlite.sqlite_connection import ILIKE_FUNCTION, SQLiteConnection
from refinery.backends.sqlite.sqlite_schema import MANY_TO_ONE, SQLiteSchema, qualify, quote
from refinery.backends.store_base import StoreDriver
from refinery.backends.utils import deserialize_record, serialize_record, serialize_value
from refinery.exceptions import StoreError
from refinery.query.predicates import validate_identifier
from refinery.query.select_expression import Column, Embed, SelectExpression


LOG = logging.getLogger(__name__)

DEFAULT_DB_PATH = os.path.join(os.path.expanduser("~"), ".refinery", "catalog.db")
MAX_PARAMS_PER_QUERY = 500

COMPARISONS = {
    PrimitiveOp.EQ: "=",
    PrimitiveOp.NEQ: "!=",
    PrimitiveOp.GT: ">",
    PrimitiveOp.GTE: ">=",
    PrimitiveOp.LT: "<",
    PrimitiveOp.LTE: "<=",
}


@contextmanager
def transaction(conn: sqlite3.Connection):
    """
    Run the enclosed statements in one explicit transaction.

    Args:
        conn: A connection in autocommit mode.
    """
    conn.execute("BEGIN")
    try:
        yield
    except BaseException:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")


def compile_condition(column_sql: str, predicate: ColumnPredicate) -> Tuple[str, List[Any]]:
    """
    Compile one column predicate into a SQL condition and its parameters.

    Args:
        column_sql: The already quoted (and aliased) column reference.
        predicate: The predicate to compile.

    Returns:
        A tuple of the SQL condition and its positional parameters.
    """
    op = predicate.op
    if op is PrimitiveOp.IS_NULL or (op is PrimitiveOp.EQ and predicate.value is None):
        return f"{column_sql} IS NULL", []
    if op is PrimitiveOp.NOT_NULL or (op is PrimitiveOp.NEQ and predicate.value is None):
        return f"{column_sql} IS NOT NULL", []
    if op is PrimitiveOp.IN:
        values = list(predicate.value or [])
        if not values:
            # Avoid generating invalid SQL like `IN ()`
            return "1 = 0", []
        placeholders = ", ".join("?" for _ in values)
        return f"{column_sql} IN ({placeholders})", [serialize_value(v) for v in values]
    if op is PrimitiveOp.ILIKE:
        # SQLite's LIKE only folds ASCII case
        return f"{ILIKE_FUNCTION}({column_sql}, ?)", [str(predicate.value)]
    return f"{column_sql} {COMPARISONS[op]} ?", [serialize_value(predicate.value)]


def chunked(values: Sequence[Any], size: int = MAX_PARAMS_PER_QUERY) -> Iterable[Sequence[Any]]:
    """Yield successive slices of `values` holding at most `size` items."""
    for start in range(0, len(values), size):
        yield values[start : start + size]


class SQLiteDriver(StoreDriver):
    """
    A SQLite-based implementation of the `StoreDriver` interface.

    Attributes:
        path (str): The SQLite database file.
        timeout (float): Seconds to wait on a locked database.
        attachments (Dict[str, str]): Extra databases attached as schemas.

    Methods:
        get_version: Query SQLite for the current version.
        select: Read rows, embedded relations and counts.
        insert: Insert records in a single transaction.
        update: Update the rows matching local column predicates.
        delete: Delete the rows matching local column predicates.
        execute_script: Run a SQL script (used to apply schemas).
        list_tables: List the user tables of the database.
    """

    def __init__(self, path: str = DEFAULT_DB_PATH, timeout: float = 30.0, attachments: Dict[str, str] = None):
        """
        Initialize the `SQLiteDriver` instance.

        Args:
            path: Path to the SQLite database file. Each operation opens its own
                connection, so in-memory databases are not supported.
            timeout: Seconds to wait on a locked database before failing.
            attachments: Optional mapping of schema name to database file to attach.
        """
        super().__init__("sqlite")
        self.path: str = os.path.expanduser(str(path))
        self.timeout: float = float(timeout)
        self.attachments: Dict[str, str] = {
            validate_identifier(name, "schema"): os.path.expanduser(str(db)) for name, db in (attachments or {}).items()
        }

    def _connection(self) -> SQLiteConnection:
        return SQLiteConnection(self.path, timeout=self.timeout, attachments=self.attachments)

    ###########################################
    # Async primitives                         #
    ###########################################

    async def get_version(self) -> str:
        """
        Query SQLite for the current version.

        Returns:
            The SQLite version string.
        """
        return await asyncio.to_thread(self._get_version)

    async def select(
        self,
        table: str,
        columns: str = "*",
        predicates: Sequence[ColumnPredicate] = (),
        orders: Sequence[OrderClause] = (),
        row_window: Optional[RowWindow] = None,
        count_mode: Optional[str] = None,
        schema: Optional[str] = None,
    ) -> SelectResult:
        return await asyncio.to_thread(
            self._select, table, columns, list(predicates), list(orders), row_window, count_mode, schema
        )

    async def insert(
        self, table: str, records: Sequence[Dict[str, Any]], columns: str = "*", schema: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self._insert, table, [dict(r) for r in records], columns, schema)

    async def update(
        self,
        table: str,
        values: Dict[str, Any],
        match: Sequence[ColumnPredicate],
        columns: str = "*",
        schema: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self._update, table, dict(values), list(match), columns, schema)

    async def delete(
        self, table: str, match: Sequence[ColumnPredicate], schema: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self._delete, table, list(match), schema)

    async def execute_script(self, script: str):
        """
        Run a multi-statement SQL script.

        Args:
            script: The SQL to run.
        """
        await asyncio.to_thread(self._execute_script, script)

    async def list_tables(self) -> List[str]:
        """
        List the user tables in the main database.

        Returns:
            Table names in alphabetical order.
        """
        return await asyncio.to_thread(self._list_tables)

    ###########################################
    # Blocking implementations                 #
    ###########################################

    def _get_version(self) -> str:
        with self._connection() as conn:
            cursor = conn.execute("SELECT sqlite_version()")
            return cursor.fetchone()[0]

    def _execute_script(self, script: str):
        with self._connection() as conn:
            try:
                conn.executescript(script)
            except sqlite3.Error as exc:
                raise StoreError(str(exc)) from exc

    def _list_tables(self) -> List[str]:
        with self._connection() as conn:
            cursor = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
            )
            return [row[0] for row in cursor.fetchall()]

    def _select(
        self,
        table: str,
        columns: str,
        predicates: List[ColumnPredicate],
        orders: List[OrderClause],
        row_window: Optional[RowWindow],
        count_mode: Optional[str],
        schema: Optional[str],
    ) -> SelectResult:
        validate_identifier(table, "table")
        expr = SelectExpression.parse(columns)
        with self._connection() as conn:
            meta = SQLiteSchema(conn, schema)
            try:
                local_preds, related_preds = self._split_predicates(expr, predicates)
                conditions, params = self._where_conditions(meta, table, "t", local_preds, related_preds, expr, schema)
                order_sql, embed_orders = self._order_terms(meta, table, "t", orders, schema)

                where_sql = f" WHERE {' AND '.join(conditions)}" if conditions else ""
                sql = f"SELECT t.* FROM {qualify(table, schema)} AS t{where_sql}"
                if order_sql:
                    sql += f" ORDER BY {', '.join(order_sql)}"
                query_params = list(params)
                if row_window is not None:
                    sql += " LIMIT ? OFFSET ?"
                    query_params += [row_window.limit, row_window.start]

                LOG.debug(f"SQLite query: {sql}")
                LOG.debug(f"SQLite params: {query_params}")
                raw_rows = [deserialize_record(dict(row)) for row in conn.execute(sql, query_params).fetchall()]
                rows = self._materialize(meta, table, raw_rows, expr, schema, related_preds, embed_orders)

                count = None
                if count_mode:
                    if count_mode != "exact":
                        LOG.debug(f"SQLite has no planner statistics; using an exact count for '{count_mode}'.")
                    count_sql = f"SELECT COUNT(*) FROM {qualify(table, schema)} AS t{where_sql}"
                    count = conn.execute(count_sql, params).fetchone()[0]
            except sqlite3.Error as exc:
                raise self._translate_error(exc, meta, table) from exc

        LOG.debug(f"Selected {len(rows)} row(s) from '{table}'.")
        return SelectResult(rows=rows, count=count)

    def _insert(
        self, table: str, records: List[Dict[str, Any]], columns: str, schema: Optional[str]
    ) -> List[Dict[str, Any]]:
        validate_identifier(table, "table")
        expr = SelectExpression.parse(columns)
        target = qualify(table, schema)
        with self._connection() as conn:
            meta = SQLiteSchema(conn, schema)
            inserted = []
            try:
                for record in records:
                    self._check_columns(meta, table, record)
                with transaction(conn):
                    for record in records:
                        data = serialize_record(record)
                        if data:
                            column_sql = ", ".join(quote(col) for col in data)
                            placeholders = ", ".join("?" for _ in data)
                            sql = f"INSERT INTO {target} ({column_sql}) VALUES ({placeholders}) RETURNING *"
                        else:
                            sql = f"INSERT INTO {target} DEFAULT VALUES RETURNING *"
                        LOG.debug(f"SQLite query: {sql}")
                        returned = conn.execute(sql, list(data.values())).fetchall()
                        inserted.extend(deserialize_record(dict(row)) for row in returned)
                rows = self._materialize(meta, table, inserted, expr, schema)
            except sqlite3.Error as exc:
                raise self._translate_error(exc, meta, table, records) from exc

        LOG.debug(f"Inserted {len(rows)} row(s) into '{table}'.")
        return rows

    def _update(
        self,
        table: str,
        values: Dict[str, Any],
        match: List[ColumnPredicate],
        columns: str,
        schema: Optional[str],
    ) -> List[Dict[str, Any]]:
        validate_identifier(table, "table")
        if not values:
            raise StoreError(f"No values given to update '{table}'.", code="PGRST102")
        if not match:
            raise StoreError("UPDATE requires a WHERE clause", code="21000")
        expr = SelectExpression.parse(columns)
        with self._connection() as conn:
            meta = SQLiteSchema(conn, schema)
            try:
                self._check_columns(meta, table, values)
                where_sql, where_params = self._match_clause(meta, table, match)
                data = serialize_record(values)
                set_sql = ", ".join(f"{quote(col)} = ?" for col in data)
                sql = f"UPDATE {qualify(table, schema)} SET {set_sql} WHERE {where_sql} RETURNING *"
                LOG.debug(f"SQLite query: {sql}")
                with transaction(conn):
                    returned = conn.execute(sql, list(data.values()) + where_params).fetchall()
                updated = [deserialize_record(dict(row)) for row in returned]
                rows = self._materialize(meta, table, updated, expr, schema)
            except sqlite3.Error as exc:
                raise self._translate_error(exc, meta, table, [values]) from exc

        LOG.debug(f"Updated {len(rows)} row(s) in '{table}'.")
        return rows

    def _delete(self, table: str, match: List[ColumnPredicate], schema: Optional[str]) -> List[Dict[str, Any]]:
        validate_identifier(table, "table")
        if not match:
            raise StoreError("DELETE requires a WHERE clause", code="21000")
        with self._connection() as conn:
            meta = SQLiteSchema(conn, schema)
            try:
                where_sql, where_params = self._match_clause(meta, table, match)
                sql = f"DELETE FROM {qualify(table, schema)} WHERE {where_sql} RETURNING *"
                LOG.debug(f"SQLite query: {sql}")
                with transaction(conn):
                    returned = conn.execute(sql, where_params).fetchall()
            except sqlite3.Error as exc:
                raise self._translate_error(exc, meta, table, action="delete") from exc

        rows = [deserialize_record(dict(row)) for row in returned]
        LOG.debug(f"Deleted {len(rows)} row(s) from '{table}'.")
        return rows

    ###########################################
    # Query building                           #
    ###########################################

    def _check_columns(self, meta: SQLiteSchema, table: str, record: Dict[str, Any]):
        for column in record:
            validate_identifier(column, "column")
            meta.require_column(table, column)

    def _split_predicates(
        self, expr: SelectExpression, predicates: List[ColumnPredicate]
    ) -> Tuple[List[ColumnPredicate], Dict[str, List[Tuple[str, ColumnPredicate]]]]:
        """
        Separate local predicates from predicates on embedded relations.

        Raises:
            StoreError: If a dotted predicate names a relation that is not embedded.
        """
        local = []
        related: Dict[str, List[Tuple[str, ColumnPredicate]]] = {}
        for predicate in predicates:
            if "." in predicate.column:
                rel_table, column = predicate.column.split(".", 1)
                validate_identifier(rel_table, "related table")
                validate_identifier(column, "related column")
                if expr.find_embed(rel_table) is None:
                    raise StoreError(f"'{rel_table}' is not an embedded resource in this request", code="PGRST108")
                related.setdefault(rel_table, []).append((column, predicate))
            else:
                validate_identifier(predicate.column, "column")
                local.append(predicate)
        return local, related

    def _where_conditions(
        self,
        meta: SQLiteSchema,
        table: str,
        alias: str,
        local_preds: List[ColumnPredicate],
        related_preds: Dict[str, List[Tuple[str, ColumnPredicate]]],
        expr: SelectExpression,
        schema: Optional[str],
    ) -> Tuple[List[str], List[Any]]:
        conditions = []
        params: List[Any] = []
        for predicate in local_preds:
            meta.require_column(table, predicate.column)
            sql, values = compile_condition(f"{alias}.{quote(predicate.column)}", predicate)
            conditions.append(sql)
            params.extend(values)

        # Only inner embeds restrict the parent rows
        for index, embed in enumerate(embed for embed in expr.embeds if embed.is_inner):
            relationship = meta.relationship(table, embed.table)
            sub = f"r{index}"
            sub_conditions = [f"{sub}.{quote(relationship.child_column)} = {alias}.{quote(relationship.parent_column)}"]
            for column, predicate in related_preds.get(embed.table, []):
                meta.require_column(embed.table, column)
                sql, values = compile_condition(f"{sub}.{quote(column)}", predicate)
                sub_conditions.append(sql)
                params.extend(values)
            conditions.append(
                f"EXISTS (SELECT 1 FROM {qualify(embed.table, schema)} AS {sub} WHERE {' AND '.join(sub_conditions)})"
            )
        return conditions, params

    def _order_terms(
        self, meta: SQLiteSchema, table: str, alias: str, orders: List[OrderClause], schema: Optional[str]
    ) -> Tuple[List[str], Dict[str, List[OrderClause]]]:
        """
        Compile order clauses for the parent query.

        Ordering by a many-to-one foreign column orders the parent rows; ordering by a
        one-to-many foreign column orders the embedded lists instead.
        """
        terms = []
        embed_orders: Dict[str, List[OrderClause]] = {}
        for index, order in enumerate(orders):
            validate_identifier(order.column, "sort column")
            direction = "ASC NULLS LAST" if order.ascending else "DESC NULLS FIRST"
            if order.foreign_table is None:
                meta.require_column(table, order.column)
                terms.append(f"{alias}.{quote(order.column)} {direction}")
                continue
            validate_identifier(order.foreign_table, "foreign table")
            relationship = meta.relationship(table, order.foreign_table)
            meta.require_column(order.foreign_table, order.column)
            if relationship.kind == MANY_TO_ONE:
                sub = f"o{index}"
                terms.append(
                    f"(SELECT {sub}.{quote(order.column)} FROM {qualify(order.foreign_table, schema)} AS {sub} "
                    f"WHERE {sub}.{quote(relationship.child_column)} = {alias}.{quote(relationship.parent_column)}) "
                    f"{direction}"
                )
            else:
                embed_orders.setdefault(order.foreign_table, []).append(order)
        return terms, embed_orders

    def _match_clause(self, meta: SQLiteSchema, table: str, match: List[ColumnPredicate]) -> Tuple[str, List[Any]]:
        conditions = []
        params: List[Any] = []
        for predicate in match:
            if "." in predicate.column:
                raise StoreError(f"Cannot match on embedded column '{predicate.column}' when writing", code="PGRST100")
            validate_identifier(predicate.column, "column")
            meta.require_column(table, predicate.column)
            sql, values = compile_condition(quote(predicate.column), predicate)
            conditions.append(sql)
            params.extend(values)
        return " AND ".join(conditions), params

    ###########################################
    # Embedding and projection                 #
    ###########################################

    def _materialize(
        self,
        meta: SQLiteSchema,
        table: str,
        rows: List[Dict[str, Any]],
        expr: SelectExpression,
        schema: Optional[str],
        related_preds: Dict[str, List[Tuple[str, ColumnPredicate]]] = None,
        embed_orders: Dict[str, List[OrderClause]] = None,
    ) -> List[Dict[str, Any]]:
        """Attach embedded relations to raw rows and project the selected columns."""
        self._attach_embeds(meta, table, rows, expr.embeds, schema, related_preds or {}, embed_orders or {})
        return [self._project(meta, table, row, expr.items) for row in rows]

    def _project(self, meta: SQLiteSchema, table: str, row: Dict[str, Any], items: List) -> Dict[str, Any]:
        projected = {}
        for item in items:
            if isinstance(item, Embed):
                projected[item.table] = row.get(item.table)
            elif item.name == "*":
                for column in meta.columns(table):
                    projected[column] = row.get(column)
            else:
                meta.require_column(table, item.name)
                projected[item.name] = row.get(item.name)
        return projected

    def _fetch_rows(
        self,
        meta: SQLiteSchema,
        table: str,
        key_column: str,
        keys: List[Any],
        predicates: List[Tuple[str, ColumnPredicate]],
        orders: List[OrderClause],
        schema: Optional[str],
    ) -> List[Dict[str, Any]]:
        rows: List[Dict[str, Any]] = []
        order_terms = []
        for order in orders:
            direction = "ASC NULLS LAST" if order.ascending else "DESC NULLS FIRST"
            order_terms.append(f"c.{quote(order.column)} {direction}")
        for chunk in chunked(keys):
            conditions = [f"c.{quote(key_column)} IN ({', '.join('?' for _ in chunk)})"]
            params = [serialize_value(key) for key in chunk]
            for column, predicate in predicates:
                meta.require_column(table, column)
                sql, values = compile_condition(f"c.{quote(column)}", predicate)
                conditions.append(sql)
                params.extend(values)
            sql = f"SELECT c.* FROM {qualify(table, schema)} AS c WHERE {' AND '.join(conditions)}"
            if order_terms:
                sql += f" ORDER BY {', '.join(order_terms)}"
            LOG.debug(f"SQLite query: {sql}")
            rows.extend(deserialize_record(dict(row)) for row in meta.conn.execute(sql, params).fetchall())
        return rows

    def _count_rows(
        self,
        meta: SQLiteSchema,
        table: str,
        key_column: str,
        keys: List[Any],
        predicates: List[Tuple[str, ColumnPredicate]],
        schema: Optional[str],
    ) -> Dict[Any, int]:
        counts: Dict[Any, int] = {}
        for chunk in chunked(keys):
            conditions = [f"c.{quote(key_column)} IN ({', '.join('?' for _ in chunk)})"]
            params = [serialize_value(key) for key in chunk]
            for column, predicate in predicates:
                sql, values = compile_condition(f"c.{quote(column)}", predicate)
                conditions.append(sql)
                params.extend(values)
            sql = (
                f"SELECT c.{quote(key_column)} AS key, COUNT(*) AS total FROM {qualify(table, schema)} AS c "
                f"WHERE {' AND '.join(conditions)} GROUP BY c.{quote(key_column)}"
            )
            for row in meta.conn.execute(sql, params).fetchall():
                counts[row["key"]] = row["total"]
        return counts

    def _attach_embeds(
        self,
        meta: SQLiteSchema,
        parent: str,
        rows: List[Dict[str, Any]],
        embeds: List[Embed],
        schema: Optional[str],
        related_preds: Dict[str, List[Tuple[str, ColumnPredicate]]],
        embed_orders: Dict[str, List[OrderClause]],
    ):
        for embed in embeds:
            relationship = meta.relationship(parent, embed.table)
            parent_values = (row.get(relationship.parent_column) for row in rows)
            keys = list(dict.fromkeys(value for value in parent_values if value is not None))
            predicates = related_preds.get(embed.table, [])
            nested = SelectExpression(embed.items)

            if relationship.kind == MANY_TO_ONE:
                children = self._fetch_rows(meta, embed.table, relationship.child_column, keys, predicates, [], schema)
                self._attach_embeds(meta, embed.table, children, nested.embeds, schema, {}, {})
                by_key = {
                    child[relationship.child_column]: self._project(meta, embed.table, child, embed.items)
                    for child in children
                }
                for row in rows:
                    row[embed.table] = by_key.get(row.get(relationship.parent_column))
                continue

            if [item.name for item in embed.items if isinstance(item, Column)] == ["count"] and not nested.embeds:
                counts = self._count_rows(meta, embed.table, relationship.child_column, keys, predicates, schema)
                for row in rows:
                    row[embed.table] = [{"count": counts.get(row.get(relationship.parent_column), 0)}]
                continue

            orders = embed_orders.get(embed.table, [])
            children = self._fetch_rows(meta, embed.table, relationship.child_column, keys, predicates, orders, schema)
            self._attach_embeds(meta, embed.table, children, nested.embeds, schema, {}, {})
            grouped: Dict[Any, List[Dict[str, Any]]] = {}
            for child in children:
                grouped.setdefault(child[relationship.child_column], []).append(
                    self._project(meta, embed.table, child, embed.items)
                )
            for row in rows:
                row[embed.table] = grouped.get(row.get(relationship.parent_column), [])

    ###########################################
    # Error translation                        #
    ###########################################

    def _describe_foreign_key_violation(
        self, meta: SQLiteSchema, table: str, records: Sequence[Dict[str, Any]]
    ) -> Optional[str]:
        """
        Find which referenced value is missing, since SQLite does not say.

        Returns:
            A PostgreSQL style detail string, or None if no culprit was found.
        """
        try:
            for record in records:
                for key in meta.foreign_keys(table):
                    value = record.get(key.column)
                    if value is None:
                        continue
                    target = qualify(key.ref_table, meta.schema)
                    sql = f"SELECT 1 FROM {target} WHERE {quote(key.ref_column)} = ? LIMIT 1"
                    found = meta.conn.execute(sql, (serialize_value(value),)).fetchone()
                    if found is None:
                        return f'Key ({key.column})=({value}) is not present in table "{key.ref_table}".'
        except (sqlite3.Error, StoreError) as exc:
            LOG.debug(f"Could not describe foreign key violation on '{table}': {exc}")
        return None

    def _translate_error(
        self,
        exc: sqlite3.Error,
        meta: SQLiteSchema,
        table: str,
        records: Sequence[Dict[str, Any]] = (),
        action: str = "write",
    ) -> StoreError:
        """
        Convert a `sqlite3` error into a `StoreError` with a SQLSTATE style code.

        Args:
            exc: The error raised by sqlite3.
            meta: Schema metadata for the failing connection.
            table: The table being operated on.
            records: The records being written, used to pinpoint foreign key failures.
            action: "write" for inserts/updates, "delete" for deletes.

        Returns:
            The translated error.
        """
        message = str(exc)
        LOG.debug(f"SQLite error on '{table}': {message}")
        if isinstance(exc, sqlite3.IntegrityError):
            if message.startswith("UNIQUE constraint failed"):
                columns = [part.strip().split(".")[-1] for part in message.split(":", 1)[1].split(",")]
                return StoreError(
                    f'duplicate key value violates unique constraint "{table}_{"_".join(columns)}_key"',
                    code="23505",
                    details=f"Key ({', '.join(columns)}) already exists.",
                )
            if message.startswith("NOT NULL constraint failed"):
                column = message.split(":", 1)[1].strip().split(".")[-1]
                return StoreError(
                    f'null value in column "{column}" of relation "{table}" violates not-null constraint', code="23502"
                )
            if "FOREIGN KEY constraint failed" in message:
                if action == "delete":
                    return StoreError(
                        f'update or delete on table "{table}" violates foreign key constraint', code="23503"
                    )
                return StoreError(
                    f'insert or update on table "{table}" violates foreign key constraint',
                    code="23503",
                    details=self._describe_foreign_key_violation(meta, table, records),
                )
            if message.startswith("CHECK constraint failed"):
                return StoreError(
                    f'new row for relation "{table}" violates check constraint', code="23514", details=message
                )
            return StoreError(message, code="23000")
        if isinstance(exc, sqlite3.OperationalError):
            if message.startswith("no such table"):
                return StoreError(f'relation "{message.split(":", 1)[1].strip()}" does not exist', code="42P01")
            if "no such column" in message or "has no column named" in message:
                return StoreError(message, code="42703")
        return StoreError(message)
