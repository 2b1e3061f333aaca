##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Value types exchanged between the presentation layer and the data layer.

This module defines the predicate model: entity references, filters, sorters,
pagination and select metadata, plus the many-to-many relation declarations that
the relationship resolver consumes. Every type here is a small immutable value
created per request and validated before any store operation is issued.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Tuple, Union

from refinery.exceptions import ValidationError


IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

Scalar = Union[str, int, float, bool, date, datetime]
FilterValue = Union[Scalar, Tuple[Scalar, ...], None]


def validate_identifier(name: Any, what: str = "identifier") -> str:
    """
    Ensure a table, column or schema name is a plain SQL identifier.

    Args:
        name: The name to check.
        what: A short description of the name used in the error message.

    Returns:
        The validated name.

    Raises:
        ValidationError: If `name` is not a string made of letters, digits and underscores.
    """
    if not isinstance(name, str) or not IDENTIFIER_PATTERN.match(name):
        raise ValidationError(f"Invalid {what} '{name}'.", field=name if isinstance(name, str) else None)
    return name


def is_scalar(value: Any) -> bool:
    """Return True if `value` may be used as a single filter operand."""
    return isinstance(value, (str, int, float, bool, date, datetime))


class Operator(Enum):
    """Filter operators understood by the query translator."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    CONTAINS = "contains"
    NULL = "null"


RANGE_OPERATORS = (Operator.GT, Operator.GTE, Operator.LT, Operator.LTE)


class SortOrder(Enum):
    """Sort directions."""

    ASC = "asc"
    DESC = "desc"


class PaginationMode(Enum):
    """Where pagination happens. Only `server` produces a row window."""

    SERVER = "server"
    CLIENT = "client"
    OFF = "off"


class CountMode(Enum):
    """How the store should count the matching rows."""

    EXACT = "exact"
    ESTIMATED = "estimated"
    PLANNED = "planned"


class RelationKind(Enum):
    """Supported relation kinds."""

    MANY_TO_MANY = "manyToMany"


def _coerce_enum(enum_class, value: Any, what: str):
    if isinstance(value, enum_class):
        return value
    try:
        return enum_class(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_class)
        raise ValidationError(f"Invalid {what} '{value}'. Expected one of: {allowed}.") from exc


@dataclass(frozen=True)
class EntityRef:
    """
    Identifies a logical table.

    Attributes:
        name: The table name.
        id_column: The single primary key column. Composite keys are unsupported.
        schema: Optional schema (or attached database) the table lives in.
    """

    name: str
    id_column: str = "id"
    schema: Optional[str] = None

    def __post_init__(self):
        validate_identifier(self.name, "entity name")
        validate_identifier(self.id_column, "id column")
        if self.schema is not None:
            validate_identifier(self.schema, "schema")


@dataclass(frozen=True)
class Filter:
    """
    A single AND-combined predicate.

    A dotted `field` (`relatedTable.column`) marks a join filter whose column lives
    on a related table.
    """

    field: str
    operator: Operator
    value: Any = None

    def __post_init__(self):
        object.__setattr__(self, "operator", _coerce_enum(Operator, self.operator, "filter operator"))
        if isinstance(self.value, (list, set, frozenset)):
            object.__setattr__(self, "value", tuple(self.value))

    @property
    def is_join_filter(self) -> bool:
        """True if the filter targets a column of a related table."""
        return "." in self.field

    def split_field(self) -> Tuple[Optional[str], str]:
        """
        Split the field into `(related_table, column)`.

        Returns:
            A tuple whose first item is None for local fields.

        Raises:
            ValidationError: If the field is not one identifier or two dot-joined identifiers.
        """
        if not isinstance(self.field, str):
            raise ValidationError(f"Invalid filter field '{self.field}'.")
        parts = self.field.split(".")
        if len(parts) == 1:
            return None, validate_identifier(parts[0], "filter field")
        if len(parts) != 2:
            raise ValidationError(f"Unparseable join filter field '{self.field}'.", field=self.field)
        related, column = parts
        validate_identifier(related, "related table")
        validate_identifier(column, "related column")
        return related, column

    def validate(self):
        """
        Check that the field parses and that the value matches the operator.

        Raises:
            ValidationError: On an unparseable field or an operator/value mismatch.
        """
        self.split_field()
        op = self.operator
        if op is Operator.IN:
            if not isinstance(self.value, tuple) or not all(is_scalar(item) for item in self.value):
                raise ValidationError(
                    f"Operator 'in' on '{self.field}' requires a sequence of scalar values.", field=self.field
                )
        elif op is Operator.NULL:
            if not isinstance(self.value, bool):
                raise ValidationError(f"Operator 'null' on '{self.field}' requires a boolean value.", field=self.field)
        elif op in (Operator.EQ, Operator.NE):
            if self.value is not None and not is_scalar(self.value):
                raise ValidationError(
                    f"Operator '{op.value}' on '{self.field}' requires a scalar value.", field=self.field
                )
        elif not is_scalar(self.value) or (op is Operator.CONTAINS and isinstance(self.value, bool)):
            raise ValidationError(f"Operator '{op.value}' on '{self.field}' requires a scalar value.", field=self.field)


@dataclass(frozen=True)
class Sorter:
    """
    An ordering key. A dotted `field` (`foreignTable.column`) orders by a column of
    an embedded foreign table.
    """

    field: str
    order: SortOrder = SortOrder.ASC

    def __post_init__(self):
        object.__setattr__(self, "order", _coerce_enum(SortOrder, self.order, "sort order"))

    def split_field(self) -> Tuple[Optional[str], str]:
        """
        Split the field on its right-most dot into `(foreign_table, column)`.

        Raises:
            ValidationError: If either half is not an identifier.
        """
        if not isinstance(self.field, str):
            raise ValidationError(f"Invalid sort field '{self.field}'.")
        if "." not in self.field:
            return None, validate_identifier(self.field, "sort field")
        foreign_table, column = self.field.rsplit(".", 1)
        validate_identifier(foreign_table, "foreign table")
        validate_identifier(column, "sort column")
        return foreign_table, column

    @property
    def ascending(self) -> bool:
        return self.order is SortOrder.ASC


@dataclass(frozen=True)
class Pagination:
    """Page based pagination. Pages are 1-based."""

    page: int = 1
    page_size: int = 10
    mode: PaginationMode = PaginationMode.SERVER

    def __post_init__(self):
        object.__setattr__(self, "mode", _coerce_enum(PaginationMode, self.mode, "pagination mode"))
        for name in ("page", "page_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValidationError(f"Pagination {name} must be an integer >= 1, got '{value}'.")

    def row_window(self) -> Tuple[int, int]:
        """
        Compute the zero-based, inclusive row window for this page.

        Returns:
            `((page - 1) * page_size, page * page_size - 1)`
        """
        return (self.page - 1) * self.page_size, self.page * self.page_size - 1


@dataclass(frozen=True)
class SelectMeta:
    """
    Column selection and counting metadata.

    Attributes:
        select: A select expression (see `refinery.query.select_expression`).
        count_mode: How to count matching rows.
        id_column: Overrides the entity's id column when set.
    """

    select: str = "*"
    count_mode: CountMode = CountMode.EXACT
    id_column: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "count_mode", _coerce_enum(CountMode, self.count_mode, "count mode"))
        if not isinstance(self.select, str) or not self.select.strip():
            object.__setattr__(self, "select", "*")
        if self.id_column is not None:
            validate_identifier(self.id_column, "id column")

    def resolve_id_column(self, entity: EntityRef) -> str:
        """Return the id column to use for `entity`."""
        return self.id_column or entity.id_column


@dataclass(frozen=True)
class RelationConfig:
    """
    Declares that a logical field is materialized through a junction table.

    Attributes:
        through_table: The junction table.
        owner_key: Junction column referencing the primary entity.
        related_key: Junction column referencing the associated entity.
        kind: Always `manyToMany`.
    """

    through_table: str
    owner_key: str
    related_key: str
    kind: RelationKind = field(default=RelationKind.MANY_TO_MANY)

    def __post_init__(self):
        object.__setattr__(self, "kind", _coerce_enum(RelationKind, self.kind, "relation kind"))
        validate_identifier(self.through_table, "junction table")
        validate_identifier(self.owner_key, "owner key")
        validate_identifier(self.related_key, "related key")
