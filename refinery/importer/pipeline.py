##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Row-by-row import of tabular data.

The `ImportPipeline` walks through four states:

1. `parsed`: headers are mapped onto fields and every row is split into entity
   fields, relation ids and excluded fields.
2. `relations_validated`: the related ids referenced by all rows are checked for
   existence. Missing ids are reported but never block the run; they are dropped
   from the junction rows of every row that references them.
3. `importing`: rows are written one after the other in file order. A row with a
   non-empty id is upserted and its junction rows are replaced; a row without an
   id is created. A failing row is recorded and the next row is processed.
4. `completed`: the `ImportReport` is available.

The primary write of a row and its junction writes are separate store calls and
are not atomic.
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Sequence, Set

from refinery.exceptions import InvalidStateTransitionError, RelationValidationError
from refinery.importer.error_classifier import classify_error
from refinery.importer.models import (
    ImportDescriptor,
    ImportReport,
    ImportRow,
    ImportState,
    RowResult,
    RowStatus,
)
from refinery.query.predicates import SelectMeta
from refinery.utils import split_list


if TYPE_CHECKING:
    from refinery.data_provider import DataProvider


LOG = logging.getLogger(__name__)

Transform = Callable[[Dict[str, Any]], Dict[str, Any]]
ProgressCallback = Callable[[int, int], None]

NEXT_STATE = {
    ImportState.CREATED: ImportState.PARSED,
    ImportState.PARSED: ImportState.RELATIONS_VALIDATED,
    ImportState.RELATIONS_VALIDATED: ImportState.IMPORTING,
    ImportState.IMPORTING: ImportState.COMPLETED,
}


def coerce_cell(value: Any) -> Any:
    """Turn `"true"`/`"false"` (any case) into booleans; leave other values alone."""
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return value


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ImportPipeline:
    """
    Imports parsed tabular rows into one resource.

    Attributes:
        provider (DataProvider): Data access used for every read and write.
        descriptor (ImportDescriptor): How rows map onto the resource.
        transform (Optional[Transform]): Applied to each mapped entity before it is written.
        on_progress (Optional[ProgressCallback]): Called with `(done, total)` after each row.
        max_reported_missing_ids (int): Missing ids listed per relation validation message.
        state (ImportState): The current state.
        rows (List[ImportRow]): The parsed rows.
        report (ImportReport): The report being built.

    Methods:
        parse: Map raw rows onto fields.
        validate_relations: Check that referenced related ids exist.
        run: Import every row.
        abort: Stop before the next row.
        execute: Parse, validate and run in one call.
    """

    def __init__(
        self,
        provider: "DataProvider",
        descriptor: ImportDescriptor,
        transform: Optional[Transform] = None,
        on_progress: Optional[ProgressCallback] = None,
        max_reported_missing_ids: int = 5,
    ):
        self.provider = provider
        self.descriptor = descriptor
        self.transform = transform
        self.on_progress = on_progress
        self.max_reported_missing_ids = max_reported_missing_ids
        self.state = ImportState.CREATED
        self.rows: List[ImportRow] = []
        self.report = ImportReport()
        self._missing_ids: Dict[str, Set[str]] = {}
        self._abort_requested = False

    def _advance(self, expected: ImportState):
        if self.state is not expected:
            raise InvalidStateTransitionError(
                f"Cannot move import of '{self.descriptor.resource.name}' to "
                f"'{NEXT_STATE[expected].value}' from '{self.state.value}'."
            )
        self.state = NEXT_STATE[expected]
        LOG.debug(f"Import of '{self.descriptor.resource.name}' is now '{self.state.value}'.")

    def abort(self):
        """
        Ask the run to stop. Checked between rows; rows already written stay written.
        """
        LOG.debug(f"Abort requested for import of '{self.descriptor.resource.name}'.")
        self._abort_requested = True

    def parse_row(self, index: int, raw: Mapping[str, Any]) -> ImportRow:
        """
        Map one raw row onto entity fields and relation ids.

        Unknown headers are ignored, blank cells are left out so that store defaults
        apply (which also routes a row with a blank id to create), and relation cells
        are split on commas.
        """
        header_map = self.descriptor.header_map
        relation_fields = self.descriptor.relation_fields
        excluded = set(self.descriptor.exclude_fields)

        row = ImportRow(index=index, raw_fields=dict(raw))
        for header, value in raw.items():
            field_name = header_map.get(header)
            if field_name is None:
                continue
            if field_name in relation_fields:
                ids = split_list(value)
                if ids:
                    row.relation_values[field_name] = ids
            elif field_name in excluded or is_blank(value):
                continue
            else:
                row.mapped_entity[field_name] = coerce_cell(value)
        return row

    def parse(self, records: Sequence[Mapping[str, Any]]) -> List[ImportRow]:
        """
        Parse every raw row.

        Args:
            records: Rows of header to cell value, e.g. from `read_rows`.

        Returns:
            The parsed rows.
        """
        self._advance(ImportState.CREATED)
        self.rows = [self.parse_row(index, raw) for index, raw in enumerate(records)]
        self.report.rows = self.rows
        LOG.debug(f"Parsed {len(self.rows)} row(s) for '{self.descriptor.resource.name}'.")
        return self.rows

    async def validate_relations(self) -> List[RelationValidationError]:
        """
        Check that every related id referenced by any row exists.

        The result is advisory: the missing ids are remembered and dropped from the
        junction rows later, but nothing stops the run.

        Returns:
            One error per relation field with missing ids.
        """
        self._advance(ImportState.PARSED)
        errors = []
        for relation in self.descriptor.relations:
            referenced = list(
                dict.fromkeys(rid for row in self.rows for rid in row.relation_values.get(relation.field, []))
            )
            if not referenced:
                continue
            existing = await self.provider.get_many(relation.resource, referenced, SelectMeta(select="id"))
            found = {str(record["id"]) for record in existing}
            missing = [rid for rid in referenced if rid not in found]
            if missing:
                error = RelationValidationError(relation.field, missing, max_listed=self.max_reported_missing_ids)
                LOG.warning(str(error))
                errors.append(error)
                self._missing_ids[relation.field] = set(missing)
        self.report.validation_errors = errors
        return errors

    async def _sync_relations(self, row: ImportRow, owner_id: Any, replace_existing: bool):
        entity = self.descriptor.resource
        for relation in self.descriptor.relations:
            missing = self._missing_ids.get(relation.field, set())
            ids = [rid for rid in row.relation_values.get(relation.field, []) if rid not in missing]
            dropped = len(row.relation_values.get(relation.field, [])) - len(ids)
            if dropped:
                LOG.warning(f"Row {row.index + 1}: dropped {dropped} unknown id(s) from '{relation.field}'.")
            if not ids:
                continue
            owner_key = relation.owner_key_for(entity.name)
            if replace_existing:
                await self.provider.clear_related(relation.through_table, owner_key, owner_id, schema=entity.schema)
            junction_rows = [{owner_key: owner_id, relation.related_key: rid} for rid in ids]
            await self.provider.add_related(relation.through_table, junction_rows, schema=entity.schema)

    async def import_row(self, row: ImportRow) -> Dict[str, Any]:
        """
        Write one row and synchronize its junction rows.

        Returns:
            The written record.
        """
        entity = self.descriptor.resource
        record = dict(row.mapped_entity)
        is_upsert = not is_blank(record.get(entity.id_column))
        if self.transform is not None:
            record = self.transform(record)

        if is_upsert:
            written = await self.provider.upsert(entity, record)
        else:
            written = await self.provider.create(entity, record)

        owner_id = written.get(entity.id_column, record.get(entity.id_column))
        if owner_id is not None:
            await self._sync_relations(row, owner_id, replace_existing=is_upsert)
        return written

    async def run(self) -> ImportReport:
        """
        Import every parsed row in file order.

        Returns:
            The import report.
        """
        self._advance(ImportState.RELATIONS_VALIDATED)
        name = self.descriptor.resource.name
        total = len(self.rows)
        for done, row in enumerate(self.rows, start=1):
            if self._abort_requested:
                self.report.aborted = True
                LOG.warning(f"Import of '{name}' aborted after {done - 1} of {total} row(s).")
                break
            try:
                await self.import_row(row)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                error = classify_error(exc)
                LOG.debug(f"Row {row.index + 1} of '{name}' failed: {error}")
                self.report.results.append(RowResult(row.index, RowStatus.FAILED, error))
            else:
                self.report.results.append(RowResult(row.index, RowStatus.SUCCESS))
            if self.on_progress is not None:
                self.on_progress(done, total)

        self._advance(ImportState.IMPORTING)
        LOG.info(f"Import of '{name}' completed: {self.report.summary()}.")
        return self.report

    async def execute(self, records: Sequence[Mapping[str, Any]]) -> ImportReport:
        """
        Parse, validate and import `records`.

        Returns:
            The import report.
        """
        self.parse(records)
        await self.validate_relations()
        return await self.run()


async def run_import(
    provider: "DataProvider",
    descriptor: ImportDescriptor,
    records: Sequence[Mapping[str, Any]],
    transform: Optional[Transform] = None,
    on_progress: Optional[ProgressCallback] = None,
    max_reported_missing_ids: int = 5,
) -> ImportReport:
    """
    Import `records` into the descriptor's resource in one call.

    Returns:
        The import report.
    """
    pipeline = ImportPipeline(provider, descriptor, transform, on_progress, max_reported_missing_ids)
    return await pipeline.execute(records)
