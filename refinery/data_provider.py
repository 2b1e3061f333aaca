##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
The interface the Refinery data layer exposes to its callers.

`DataProvider` wraps one explicit store driver and offers list/one/many reads,
single-record writes that fail fast, batch writes that return per-record results,
junction lookups and a page-through read for exports. Callers build one provider
per driver and pass it wherever data access is needed.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from refinery.backends.primitives import ColumnPredicate, PrimitiveOp, PrimitiveSelect
from refinery.backends.store_base import StoreDriver
from refinery.exceptions import EntityNotFoundError, StoreError
from refinery.importer.models import ImportDescriptor, ImportReport
from refinery.importer.pipeline import ProgressCallback, Transform, run_import
from refinery.mutations.bulk_executor import BulkMutationExecutor
from refinery.mutations.results import BatchResult
from refinery.query.predicates import (
    EntityRef,
    Filter,
    Pagination,
    PaginationMode,
    RelationConfig,
    SelectMeta,
    Sorter,
    SortOrder,
    validate_identifier,
)
from refinery.query.relations import RelationshipResolver
from refinery.query.select_expression import SelectExpression
from refinery.query.translator import QueryTranslator, as_filter


LOG = logging.getLogger(__name__)

EXPORT_PAGE_SIZE = 1000

EntityLike = Union[EntityRef, str]


@dataclass
class ListResult:
    """Rows of one list request and the number of rows matching it overall."""

    data: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0


class DataProvider:
    """
    Generic resource data access on top of a `StoreDriver`.

    Attributes:
        driver (StoreDriver): The store driver every operation goes through.
        translator (QueryTranslator): Builds primitive selects from predicate sets.
        resolver (RelationshipResolver): Rewrites many-to-many relation filters.
        executor (BulkMutationExecutor): Issues single and batch writes.

    Methods:
        get_list: Filtered, sorted, paginated read with a total count.
        get_one: Read one record by id.
        get_many: Read several records by id.
        create: Insert one record.
        create_many: Insert several records, one result each.
        update: Update one record by id.
        update_many: Apply the same values to several ids, one result each.
        upsert: Update a record if its id exists, insert it otherwise.
        delete_one: Delete one record by id.
        delete_many: Delete several ids, one result each.
        get_related: Read the rows of a junction table linked to a value.
        clear_related: Delete the rows of a junction table linked to a value.
        add_related: Insert junction rows.
        run_import: Import tabular rows through the import pipeline.
        fetch_all: Read every matching record page by page.
    """

    def __init__(
        self,
        driver: StoreDriver,
        translator: Optional[QueryTranslator] = None,
        resolver: Optional[RelationshipResolver] = None,
    ):
        self.driver = driver
        self.translator = translator or QueryTranslator()
        self.resolver = resolver or RelationshipResolver()
        self.executor = BulkMutationExecutor(driver)

    @staticmethod
    def _entity(entity: EntityLike, meta: Optional[SelectMeta] = None) -> EntityRef:
        entity = EntityRef(entity) if isinstance(entity, str) else entity
        if meta is not None and meta.id_column:
            entity = replace(entity, id_column=meta.id_column)
        return entity

    async def get_list(
        self,
        entity: EntityLike,
        filters: Sequence[Filter] = (),
        sorters: Sequence[Sorter] = (),
        pagination: Optional[Pagination] = None,
        meta: Optional[SelectMeta] = None,
        relations: Optional[Mapping[str, RelationConfig]] = None,
    ) -> ListResult:
        """
        Read a page of records.

        Relation filters are resolved into an id membership filter first. When no
        record can satisfy them the main select is skipped entirely.

        Args:
            entity: The entity (or its table name) to read.
            filters: AND-combined filters.
            sorters: Sort keys.
            pagination: Optional pagination.
            meta: Select metadata.
            relations: Many-to-many relations keyed by logical field name.

        Returns:
            The rows and the total number of matching rows.

        Raises:
            ValidationError: If the request is malformed; no store call has been made.
            StoreError: If the store rejects a select.
        """
        meta = meta or SelectMeta()
        entity = self._entity(entity, meta)
        filters = [as_filter(flt) for flt in filters]

        # Translating up front validates the request before any store call
        self.translator.translate(entity, filters, sorters, pagination, meta)

        resolution = await self.resolver.resolve(self.driver, entity, filters, relations)
        if resolution.short_circuit_empty:
            LOG.debug(f"Relation filters on '{entity.name}' match nothing; skipping the main select.")
            return ListResult([], 0)

        select = self.translator.translate(entity, resolution.filters, sorters, pagination, meta)
        result = await select.execute(self.driver)
        total = result.count if result.count is not None else len(result.rows)
        return ListResult(result.rows, total)

    async def get_one(self, entity: EntityLike, record_id: Any, meta: Optional[SelectMeta] = None) -> Dict[str, Any]:
        """
        Read the record with id `record_id`.

        Raises:
            EntityNotFoundError: If no record has that id.
            StoreError: If the id matches more than one record.
        """
        meta = meta or SelectMeta()
        entity = self._entity(entity, meta)
        select = PrimitiveSelect(
            table=entity.name,
            columns=SelectExpression.parse(meta.select).render(),
            predicates=(ColumnPredicate(entity.id_column, PrimitiveOp.EQ, record_id),),
            schema=entity.schema,
        )
        LOG.debug(f"Fetching one record: {select.describe()}")
        rows = (await select.execute(self.driver)).rows
        if not rows:
            raise EntityNotFoundError(f"No '{entity.name}' record with {entity.id_column}={record_id}.")
        if len(rows) > 1:
            raise StoreError(
                f"Expected one '{entity.name}' record with {entity.id_column}={record_id}, found {len(rows)}.",
                code="PGRST116",
            )
        return rows[0]

    async def get_many(
        self, entity: EntityLike, ids: Sequence[Any], meta: Optional[SelectMeta] = None
    ) -> List[Dict[str, Any]]:
        """
        Read the records whose ids are in `ids`. An empty list makes no store call.
        """
        ids = list(ids)
        if not ids:
            return []
        meta = meta or SelectMeta()
        entity = self._entity(entity, meta)
        select = PrimitiveSelect(
            table=entity.name,
            columns=SelectExpression.parse(meta.select).render(),
            predicates=(ColumnPredicate(entity.id_column, PrimitiveOp.IN, tuple(ids)),),
            schema=entity.schema,
        )
        LOG.debug(f"Fetching many records: {select.describe()}")
        return (await select.execute(self.driver)).rows

    async def create(
        self, entity: EntityLike, payload: Dict[str, Any], meta: Optional[SelectMeta] = None
    ) -> Dict[str, Any]:
        return await self.executor.create_one(self._entity(entity, meta), payload, meta)

    async def create_many(
        self, entity: EntityLike, payloads: Sequence[Dict[str, Any]], meta: Optional[SelectMeta] = None
    ) -> BatchResult:
        return await self.executor.create_many(self._entity(entity, meta), payloads, meta)

    async def update(
        self, entity: EntityLike, record_id: Any, values: Dict[str, Any], meta: Optional[SelectMeta] = None
    ) -> Dict[str, Any]:
        return await self.executor.update_one(self._entity(entity, meta), record_id, values, meta)

    async def update_many(
        self, entity: EntityLike, ids: Sequence[Any], values: Dict[str, Any], meta: Optional[SelectMeta] = None
    ) -> BatchResult:
        return await self.executor.update_many(self._entity(entity, meta), ids, values, meta)

    async def delete_one(self, entity: EntityLike, record_id: Any, meta: Optional[SelectMeta] = None) -> Dict[str, Any]:
        return await self.executor.delete_one(self._entity(entity, meta), record_id, meta)

    async def delete_many(
        self, entity: EntityLike, ids: Sequence[Any], meta: Optional[SelectMeta] = None
    ) -> BatchResult:
        return await self.executor.delete_many(self._entity(entity, meta), ids, meta)

    async def upsert(
        self, entity: EntityLike, payload: Dict[str, Any], meta: Optional[SelectMeta] = None
    ) -> Dict[str, Any]:
        """
        Update the whole record if its id exists, insert it otherwise.

        Args:
            entity: The entity to write.
            payload: The record; must hold a value for the id column.
            meta: Select metadata.

        Returns:
            The written record.
        """
        meta = meta or SelectMeta()
        entity = self._entity(entity, meta)
        record_id = payload[entity.id_column]
        existing = await self.get_many(entity, [record_id], SelectMeta(select=entity.id_column))
        if existing:
            LOG.debug(f"Updating existing '{entity.name}' record {record_id}.")
            values = {key: val for key, val in payload.items() if key != entity.id_column}
            if not values:
                return existing[0]
            return await self.executor.update_one(entity, record_id, values, meta)
        LOG.debug(f"Creating '{entity.name}' record {record_id}.")
        return await self.executor.create_one(entity, payload, meta)

    async def get_related(
        self, junction_table: str, column: str, value: Any, select: str = "*", schema: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Read the junction rows whose `column` equals `value`.

        Args:
            junction_table: The junction table.
            column: The junction column to match.
            value: The value to match.
            select: Columns to return.
            schema: Optional schema of the junction table.

        Returns:
            The matching junction rows.
        """
        validate_identifier(junction_table, "junction table")
        validate_identifier(column, "junction column")
        select_op = PrimitiveSelect(
            table=junction_table,
            columns=SelectExpression.parse(select).render(),
            predicates=(ColumnPredicate(column, PrimitiveOp.EQ, value),),
            schema=schema,
        )
        return (await select_op.execute(self.driver)).rows

    async def clear_related(
        self, junction_table: str, column: str, value: Any, schema: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Delete every junction row whose `column` equals `value`.

        Returns:
            The deleted junction rows, possibly none.
        """
        validate_identifier(junction_table, "junction table")
        validate_identifier(column, "junction column")
        return await self.driver.delete(
            junction_table, [ColumnPredicate(column, PrimitiveOp.EQ, value)], schema=schema
        )

    async def add_related(
        self, junction_table: str, records: Sequence[Dict[str, Any]], schema: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Insert junction rows with a single insert.

        Returns:
            The inserted junction rows.
        """
        validate_identifier(junction_table, "junction table")
        if not records:
            return []
        return await self.driver.insert(junction_table, list(records), schema=schema)

    async def run_import(
        self,
        descriptor: ImportDescriptor,
        records: Sequence[Mapping[str, Any]],
        transform: Optional[Transform] = None,
        on_progress: Optional[ProgressCallback] = None,
        max_reported_missing_ids: int = 5,
    ) -> ImportReport:
        """
        Import tabular rows into the descriptor's resource.

        Args:
            descriptor: Header mapping, relations and excluded fields.
            records: Rows of header to cell value.
            transform: Optional function applied to each mapped entity before writing.
            on_progress: Optional `(done, total)` callback.
            max_reported_missing_ids: Missing ids listed per relation validation message.

        Returns:
            The import report. Row failures are reported, never raised.
        """
        return await run_import(self, descriptor, records, transform, on_progress, max_reported_missing_ids)

    async def fetch_all(
        self,
        entity: EntityLike,
        filters: Sequence[Filter] = (),
        sorters: Optional[Sequence[Sorter]] = None,
        meta: Optional[SelectMeta] = None,
        relations: Optional[Mapping[str, RelationConfig]] = None,
        page_size: int = EXPORT_PAGE_SIZE,
    ) -> List[Dict[str, Any]]:
        """
        Read every matching record, one page at a time.

        Without explicit sorters the newest records come first (`created_at desc`).

        Returns:
            All matching records.
        """
        if sorters is None:
            sorters = [Sorter("created_at", SortOrder.DESC)]
        rows: List[Dict[str, Any]] = []
        page = 1
        while True:
            pagination = Pagination(page=page, page_size=page_size, mode=PaginationMode.SERVER)
            result = await self.get_list(entity, filters, sorters, pagination, meta, relations)
            rows.extend(result.data)
            if len(result.data) < page_size or len(rows) >= result.total:
                break
            page += 1
        LOG.debug(f"Fetched {len(rows)} record(s) from '{self._entity(entity).name}' in {page} page(s).")
        return rows
