##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Multi-record create, update and delete.

The primitive store interface has no "update each row to its own value" or
"delete and return each row" operation, so the `BulkMutationExecutor` issues one
primitive write per record. The writes run concurrently with no upper bound and
their outcomes are collected positionally; one failing record never stops the
others.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from refinery.backends.primitives import ColumnPredicate, PrimitiveOp
from refinery.backends.store_base import StoreDriver
from refinery.exceptions import EntityNotFoundError
from refinery.mutations.results import BatchResult, Result
from refinery.query.predicates import EntityRef, SelectMeta


LOG = logging.getLogger(__name__)


class BulkMutationExecutor:
    """
    Issues single-record writes and fans them out for batches.

    Attributes:
        driver (StoreDriver): The store driver writes are sent to.

    Methods:
        create_one: Insert one record.
        update_one: Update one record by id.
        delete_one: Delete one record by id.
        create_many: Insert records concurrently, one insert each.
        update_many: Apply the same values to several ids concurrently.
        delete_many: Delete several ids concurrently.
    """

    def __init__(self, driver: StoreDriver):
        self.driver = driver

    def _id_match(self, entity: EntityRef, meta: SelectMeta, record_id: Any) -> List[ColumnPredicate]:
        return [ColumnPredicate(meta.resolve_id_column(entity), PrimitiveOp.EQ, record_id)]

    async def create_one(
        self, entity: EntityRef, payload: Dict[str, Any], meta: Optional[SelectMeta] = None
    ) -> Dict[str, Any]:
        """
        Insert one record.

        Returns:
            The record as stored.
        """
        meta = meta or SelectMeta()
        rows = await self.driver.insert(entity.name, [payload], columns=meta.select, schema=entity.schema)
        return rows[0] if rows else dict(payload)

    async def update_one(
        self, entity: EntityRef, record_id: Any, values: Dict[str, Any], meta: Optional[SelectMeta] = None
    ) -> Dict[str, Any]:
        """
        Update the record with id `record_id`.

        Returns:
            The updated record.

        Raises:
            EntityNotFoundError: If no record has that id.
        """
        meta = meta or SelectMeta()
        rows = await self.driver.update(
            entity.name, values, self._id_match(entity, meta, record_id), columns=meta.select, schema=entity.schema
        )
        if not rows:
            raise EntityNotFoundError(f"No '{entity.name}' record with {meta.resolve_id_column(entity)}={record_id}.")
        return rows[0]

    async def delete_one(self, entity: EntityRef, record_id: Any, meta: Optional[SelectMeta] = None) -> Dict[str, Any]:
        """
        Delete the record with id `record_id`.

        Returns:
            The deleted record.

        Raises:
            EntityNotFoundError: If no record has that id.
        """
        meta = meta or SelectMeta()
        rows = await self.driver.delete(entity.name, self._id_match(entity, meta, record_id), schema=entity.schema)
        if not rows:
            raise EntityNotFoundError(f"No '{entity.name}' record with {meta.resolve_id_column(entity)}={record_id}.")
        return rows[0]

    async def _fan_out(
        self,
        action: str,
        entity: EntityRef,
        keys: Sequence[Any],
        operation: Callable[[Any], Awaitable[Dict[str, Any]]],
    ) -> BatchResult:
        outcomes = await asyncio.gather(*(operation(key) for key in keys), return_exceptions=True)
        results = BatchResult()
        for key, outcome in zip(keys, outcomes):
            if isinstance(outcome, Exception):
                LOG.debug(f"Failed to {action} '{entity.name}' record {key!r}: {outcome}")
                results.append(Result(key=key, error=outcome))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(Result(key=key, value=outcome))
        LOG.info(
            f"{action.capitalize()} on '{entity.name}': {len(results.successes)} succeeded, "
            f"{len(results.failures)} failed."
        )
        return results

    async def create_many(
        self, entity: EntityRef, payloads: Sequence[Dict[str, Any]], meta: Optional[SelectMeta] = None
    ) -> BatchResult:
        """
        Insert each payload with its own insert.

        Returns:
            One result per payload, in input order.
        """
        return await self._fan_out(
            "create", entity, list(payloads), lambda payload: self.create_one(entity, payload, meta)
        )

    async def update_many(
        self, entity: EntityRef, ids: Sequence[Any], values: Dict[str, Any], meta: Optional[SelectMeta] = None
    ) -> BatchResult:
        """
        Apply the same `values` to each id with its own update.

        Returns:
            One result per id, in input order.
        """
        return await self._fan_out(
            "update", entity, list(ids), lambda record_id: self.update_one(entity, record_id, values, meta)
        )

    async def delete_many(
        self, entity: EntityRef, ids: Sequence[Any], meta: Optional[SelectMeta] = None
    ) -> BatchResult:
        """
        Delete each id with its own delete.

        Returns:
            One result per id, in input order.
        """
        return await self._fan_out(
            "delete", entity, list(ids), lambda record_id: self.delete_one(entity, record_id, meta)
        )
