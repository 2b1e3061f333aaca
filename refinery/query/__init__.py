##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Query building for the Refinery data layer.

Modules:
    predicates: The predicate model (filters, sorters, pagination, select metadata, relations).
    select_expression: Parsing and rewriting of select expressions.
    translator: Turns a predicate set into a `PrimitiveSelect`.
    relations: Rewrites many-to-many relation filters into primary key membership filters.
"""

from refinery.query.predicates import (
    CountMode,
    EntityRef,
    Filter,
    Operator,
    Pagination,
    PaginationMode,
    RelationConfig,
    RelationKind,
    SelectMeta,
    Sorter,
    SortOrder,
)
from refinery.query.relations import RelationshipResolver, Resolution
from refinery.query.translator import QueryTranslator


__all__ = [
    "CountMode",
    "EntityRef",
    "Filter",
    "Operator",
    "Pagination",
    "PaginationMode",
    "QueryTranslator",
    "RelationConfig",
    "RelationKind",
    "RelationshipResolver",
    "Resolution",
    "SelectMeta",
    "Sorter",
    "SortOrder",
]
