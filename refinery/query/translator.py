##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Translation of predicate sets into primitive select operations.

The `QueryTranslator` converts an entity reference, its filters, sorters,
pagination and select metadata into a single `PrimitiveSelect`. Translation is
pure: nothing is sent to a store here, and every filter and sorter is validated
before anything is built so that a malformed request is never partially applied.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from refinery.backends.primitives import ColumnPredicate, OrderClause, PrimitiveOp, PrimitiveSelect, RowWindow
from refinery.exceptions import ValidationError
from refinery.query.predicates import (
    EntityRef,
    Filter,
    Operator,
    Pagination,
    PaginationMode,
    SelectMeta,
    Sorter,
)
from refinery.query.select_expression import SelectExpression


LOG = logging.getLogger(__name__)

OPERATOR_MAP = {
    Operator.EQ: PrimitiveOp.EQ,
    Operator.NE: PrimitiveOp.NEQ,
    Operator.GT: PrimitiveOp.GT,
    Operator.GTE: PrimitiveOp.GTE,
    Operator.LT: PrimitiveOp.LT,
    Operator.LTE: PrimitiveOp.LTE,
    Operator.IN: PrimitiveOp.IN,
}


def escape_like(value: Any) -> str:
    """Escape LIKE wildcards in `value` with a backslash so they match literally."""
    text = str(value)
    for char in ("\\", "%", "_"):
        text = text.replace(char, f"\\{char}")
    return text


def as_filter(item: Union[Filter, Dict[str, Any]]) -> Filter:
    """
    Accept a `Filter` or a mapping with `field`, `operator` and `value` keys.

    Raises:
        ValidationError: If `item` is neither.
    """
    if isinstance(item, Filter):
        return item
    if isinstance(item, dict):
        try:
            return Filter(item["field"], item["operator"], item.get("value"))
        except KeyError as exc:
            raise ValidationError(f"Filter {item} is missing the {exc} key.") from exc
    raise ValidationError(f"Unsupported filter {item!r}.")


def as_sorter(item: Union[Sorter, Dict[str, Any]]) -> Sorter:
    """
    Accept a `Sorter` or a mapping with `field` and optional `order` keys.

    Raises:
        ValidationError: If `item` is neither.
    """
    if isinstance(item, Sorter):
        return item
    if isinstance(item, dict) and "field" in item:
        return Sorter(item["field"], item.get("order", "asc"))
    raise ValidationError(f"Unsupported sorter {item!r}.")


class QueryTranslator:
    """
    Builds `PrimitiveSelect` values from predicate sets.

    Methods:
        translate: Translate a full list request.
        translate_filter: Map a single filter onto a column predicate.
    """

    def translate_filter(self, flt: Filter) -> ColumnPredicate:
        """
        Map a validated filter onto a column predicate.

        `contains` becomes a case-insensitive match with the value wrapped in `%`
        wildcards. Wildcards inside the value are escaped, so it matches as a
        literal substring. `null` becomes `is_null` for True and `not_null` for False.

        Args:
            flt: The filter to map.

        Returns:
            The equivalent column predicate.
        """
        if flt.operator is Operator.NULL:
            return ColumnPredicate(flt.field, PrimitiveOp.IS_NULL if flt.value else PrimitiveOp.NOT_NULL)
        if flt.operator is Operator.CONTAINS:
            return ColumnPredicate(flt.field, PrimitiveOp.ILIKE, f"%{escape_like(flt.value)}%")
        return ColumnPredicate(flt.field, OPERATOR_MAP[flt.operator], flt.value)

    def translate(
        self,
        entity: EntityRef,
        filters: Sequence[Filter] = (),
        sorters: Sequence[Sorter] = (),
        pagination: Optional[Pagination] = None,
        meta: Optional[SelectMeta] = None,
    ) -> PrimitiveSelect:
        """
        Translate a list request into a primitive select.

        Join filters (`related.column`) add an inner expansion of the related table
        to the select expression, once per table. Foreign-table sorters make sure
        the foreign table is expanded with the sort column and scope their order
        clause to it. Server pagination adds a row window.

        Args:
            entity: The entity to read.
            filters: AND-combined filters, translated in order.
            sorters: Sort keys, translated in order.
            pagination: Optional pagination; only `server` mode restricts rows.
            meta: Select metadata; defaults to `SelectMeta()`.

        Returns:
            The primitive select.

        Raises:
            ValidationError: If any filter, sorter or the select expression is malformed.
        """
        meta = meta or SelectMeta()
        filters = [as_filter(flt) for flt in filters]
        sorters = [as_sorter(sorter) for sorter in sorters]

        # Validate everything before building anything
        for flt in filters:
            flt.validate()
        sort_keys: List[Tuple[Sorter, Optional[str], str]] = []
        for sorter in sorters:
            foreign_table, column = sorter.split_field()
            sort_keys.append((sorter, foreign_table, column))
        expr = SelectExpression.parse(meta.select)

        predicates = []
        for flt in filters:
            related_table, _ = flt.split_field()
            if related_table is not None:
                expr.ensure_inner(related_table)
            predicates.append(self.translate_filter(flt))

        orders = []
        for sorter, foreign_table, column in sort_keys:
            if foreign_table is not None:
                expr.ensure_column(foreign_table, column)
            orders.append(OrderClause(column, ascending=sorter.ascending, foreign_table=foreign_table))

        row_window = None
        if pagination is not None and pagination.mode is PaginationMode.SERVER:
            row_window = RowWindow(*pagination.row_window())

        select = PrimitiveSelect(
            table=entity.name,
            columns=expr.render(),
            predicates=tuple(predicates),
            orders=tuple(orders),
            row_window=row_window,
            count_mode=meta.count_mode.value,
            schema=entity.schema,
        )
        LOG.debug(f"Translated query: {select.describe()}")
        return select
