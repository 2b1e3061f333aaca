##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Primitive store operations.

These are the only shapes a store driver has to understand: column predicates,
order clauses, row windows and the select operation that bundles them. The query
translator produces `PrimitiveSelect` values; drivers execute them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple


if TYPE_CHECKING:
    from refinery.backends.store_base import StoreDriver


class PrimitiveOp(Enum):
    """Predicate operators every driver supports."""

    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    ILIKE = "ilike"
    IS_NULL = "is_null"
    NOT_NULL = "not_null"


@dataclass(frozen=True)
class ColumnPredicate:
    """
    A predicate on a single column.

    `column` may be dotted (`related_table.column`) to target a column of an
    inner-joined embedded relation.
    """

    column: str
    op: PrimitiveOp
    value: Any = None

    def describe(self) -> str:
        if self.op in (PrimitiveOp.IS_NULL, PrimitiveOp.NOT_NULL):
            return f"{self.column} {self.op.value}"
        return f"{self.column} {self.op.value} {self.value!r}"


@dataclass(frozen=True)
class OrderClause:
    """An order clause, optionally scoped to an embedded foreign table."""

    column: str
    ascending: bool = True
    foreign_table: Optional[str] = None

    def describe(self) -> str:
        scope = f"{self.foreign_table}." if self.foreign_table else ""
        return f"{scope}{self.column} {'asc' if self.ascending else 'desc'}"


@dataclass(frozen=True)
class RowWindow:
    """A zero-based, inclusive `[start, end]` row range."""

    start: int
    end: int

    @property
    def limit(self) -> int:
        return self.end - self.start + 1


@dataclass
class SelectResult:
    """Rows returned by a select along with the count of all matching rows."""

    rows: List[Dict[str, Any]] = field(default_factory=list)
    count: Optional[int] = None


@dataclass(frozen=True)
class PrimitiveSelect:
    """
    A fully translated select, ready to be executed by a driver.

    Attributes:
        table: The table to read.
        columns: The rendered select expression.
        predicates: AND-combined column predicates, in filter order.
        orders: Order clauses, in sorter order.
        row_window: Optional row range restriction.
        count_mode: How the driver should count matching rows, if at all.
        schema: Optional schema the table lives in.
    """

    table: str
    columns: str = "*"
    predicates: Tuple[ColumnPredicate, ...] = ()
    orders: Tuple[OrderClause, ...] = ()
    row_window: Optional[RowWindow] = None
    count_mode: Optional[str] = None
    schema: Optional[str] = None

    def describe(self) -> str:
        """
        Render a deterministic, human readable form of this select.

        The same translation always produces the same string, which makes it
        usable in logs and in assertions.
        """
        table = f"{self.schema}.{self.table}" if self.schema else self.table
        parts = [f"select {self.columns} from {table}"]
        if self.count_mode:
            parts.append(f"count={self.count_mode}")
        if self.predicates:
            parts.append("where " + " and ".join(p.describe() for p in self.predicates))
        if self.orders:
            parts.append("order by " + ", ".join(o.describe() for o in self.orders))
        if self.row_window:
            parts.append(f"range {self.row_window.start}-{self.row_window.end}")
        return " ".join(parts)

    async def execute(self, driver: "StoreDriver") -> SelectResult:
        """
        Run this select against `driver`.

        Args:
            driver: The store driver to execute against.

        Returns:
            The matching rows and their total count.
        """
        return await driver.select(
            self.table,
            columns=self.columns,
            predicates=list(self.predicates),
            orders=list(self.orders),
            row_window=self.row_window,
            count_mode=self.count_mode,
            schema=self.schema,
        )
