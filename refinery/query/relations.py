##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Resolution of many-to-many relation filters.

A store's filter language cannot express "prompts tagged with X" when the tag
lives in a junction table. The `RelationshipResolver` turns such filters into
auxiliary selects against the junction tables, intersects the owner ids they
return and replaces the relation filters with a single `id in (...)` filter.
It knows nothing about embedded relations or inner joins.
"""

import logging
from typing import Any, List, Mapping, NamedTuple, Optional, Sequence

from refinery.backends.primitives import ColumnPredicate, PrimitiveOp, PrimitiveSelect
from refinery.backends.store_base import StoreDriver
from refinery.exceptions import ValidationError
from refinery.query.predicates import EntityRef, Filter, Operator, RelationConfig
from refinery.query.translator import as_filter


LOG = logging.getLogger(__name__)


class Resolution(NamedTuple):
    """
    The outcome of resolving relation filters.

    Attributes:
        filters: The rewritten filter list.
        short_circuit_empty: True when the intersected id set is empty and the
            main select must not be issued.
    """

    filters: List[Filter]
    short_circuit_empty: bool = False


class RelationshipResolver:
    """
    Rewrites relation filters into primary key membership filters.

    Methods:
        find_relation: Return the relation a filter targets, if any.
        owner_ids: Fetch the owner ids linked to a related value.
        resolve: Rewrite a filter list.
    """

    @staticmethod
    def find_relation(flt: Filter, relations: Mapping[str, RelationConfig]) -> Optional[RelationConfig]:
        for relation in relations.values():
            if flt.field == relation.related_key:
                return relation
        return None

    async def owner_ids(
        self, driver: StoreDriver, entity: EntityRef, relation: RelationConfig, flt: Filter
    ) -> List[Any]:
        """
        Query the junction table for the owners linked to the filter's value.

        Args:
            driver: The store driver.
            entity: The primary entity; its schema is used for the junction table.
            relation: The relation the filter targets.
            flt: An `eq` or `in` filter on `relation.related_key`.

        Returns:
            Owner ids in the order the store returned them, without duplicates.
        """
        op = PrimitiveOp.IN if flt.operator is Operator.IN else PrimitiveOp.EQ
        select = PrimitiveSelect(
            table=relation.through_table,
            columns=relation.owner_key,
            predicates=(ColumnPredicate(relation.related_key, op, flt.value),),
            schema=entity.schema,
        )
        LOG.debug(f"Resolving relation filter: {select.describe()}")
        result = await select.execute(driver)
        return list(dict.fromkeys(row[relation.owner_key] for row in result.rows))

    async def resolve(
        self,
        driver: StoreDriver,
        entity: EntityRef,
        filters: Sequence[Filter],
        relations: Optional[Mapping[str, RelationConfig]] = None,
    ) -> Resolution:
        """
        Replace relation filters with a single `<id column> in (...)` filter.

        Candidate id sets of all relation filters are intersected, so a record
        has to satisfy every relation filter. Filters that target no relation are
        kept in their original order.

        Args:
            driver: The store driver used for the auxiliary selects.
            entity: The primary entity.
            filters: The request's filters.
            relations: Relation declarations keyed by logical field name.

        Returns:
            A `Resolution` with the rewritten filters, flagged as empty when the
            intersection holds no ids.

        Raises:
            ValidationError: If a relation filter is malformed or uses an operator
                other than `eq` or `in`.
        """
        filters = [as_filter(flt) for flt in filters]
        if not relations:
            return Resolution(filters)

        remaining: List[Filter] = []
        targeted = []
        for flt in filters:
            relation = self.find_relation(flt, relations)
            if relation is None:
                remaining.append(flt)
                continue
            flt.validate()
            if flt.operator not in (Operator.EQ, Operator.IN) or flt.value is None:
                raise ValidationError(
                    f"Relation filter on '{flt.field}' only supports 'eq' and 'in' with a value.", field=flt.field
                )
            targeted.append((relation, flt))

        if not targeted:
            return Resolution(filters)

        matching: Optional[List[Any]] = None
        for relation, flt in targeted:
            ids = await self.owner_ids(driver, entity, relation, flt)
            if matching is None:
                matching = ids
            else:
                found = set(ids)
                matching = [owner for owner in matching if owner in found]
            if not matching:
                break

        LOG.debug(f"Relation filters on '{entity.name}' matched {len(matching)} id(s).")
        if not matching:
            return Resolution(remaining, short_circuit_empty=True)

        remaining.append(Filter(entity.id_column, Operator.IN, tuple(matching)))
        return Resolution(remaining)
