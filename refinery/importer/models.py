##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Value types of the import pipeline.

An `ImportDescriptor` describes how tabular rows map onto one resource: which
header feeds which field, which fields carry comma-joined ids of a many-to-many
relation, and which fields are never written. Parsing produces one `ImportRow`
per input row; running produces one `RowResult` per row, gathered in an
`ImportReport`.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from refinery.exceptions import PartialBatchError, RelationValidationError, ValidationError
from refinery.query.predicates import EntityRef, validate_identifier
from refinery.utils import get_singular, load_yaml


ERROR_COLUMN = "Error"
DEFAULT_MAX_REPORTED_ERRORS = 10


class ImportState(Enum):
    """States of an import run. Each state can only move to the next one."""

    CREATED = "created"
    PARSED = "parsed"
    RELATIONS_VALIDATED = "relations_validated"
    IMPORTING = "importing"
    COMPLETED = "completed"


class RowStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ColumnMapping:
    """
    Maps a tabular header onto an entity field.

    Attributes:
        header: The column header in the file (e.g. `Tag IDs`).
        field: The entity field it feeds (e.g. `tag_ids`).
        example: A sample value written to import templates.
    """

    header: str
    field: str
    example: str = ""


@dataclass(frozen=True)
class ImportRelation:
    """
    A many-to-many relation written through a junction table during import.

    Attributes:
        field: The import field holding comma-joined related ids.
        resource: The related resource the ids must exist in.
        through_table: The junction table.
        owner_key: Junction column referencing the imported record. Defaults to
            `<singular imported resource>_id`.
        related_key: Junction column referencing the related record. Defaults to
            `<singular related resource>_id`.
    """

    field: str
    resource: str
    through_table: str
    owner_key: Optional[str] = None
    related_key: Optional[str] = None

    def __post_init__(self):
        validate_identifier(self.resource, "related resource")
        validate_identifier(self.through_table, "junction table")
        if self.related_key is None:
            object.__setattr__(self, "related_key", f"{get_singular(self.resource)}_id")
        validate_identifier(self.related_key, "related key")
        if self.owner_key is not None:
            validate_identifier(self.owner_key, "owner key")

    def owner_key_for(self, owner: str) -> str:
        """Return the owner key, defaulting it from the imported resource name."""
        return self.owner_key or f"{get_singular(owner)}_id"


@dataclass
class ImportDescriptor:
    """
    How tabular rows are imported into one resource.

    Attributes:
        resource: The entity rows are written to.
        columns: Header to field mappings, in template order.
        relations: Many-to-many relations synchronized per row.
        exclude_fields: Fields that are mapped (and exported) but never written.
    """

    resource: EntityRef
    columns: List[ColumnMapping] = field(default_factory=list)
    relations: List[ImportRelation] = field(default_factory=list)
    exclude_fields: List[str] = field(default_factory=list)

    @property
    def header_map(self) -> Dict[str, str]:
        return {column.header: column.field for column in self.columns}

    @property
    def relation_fields(self) -> Dict[str, ImportRelation]:
        return {relation.field: relation for relation in self.relations}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportDescriptor":
        """
        Build a descriptor from plain data, e.g. a YAML document.

        Expected layout:
            resource: prompts            # or {name: prompts, id_column: id, schema: null}
            columns:
              - {header: ID, field: id, example: my-prompt}
            relations:
              - {field: tag_ids, resource: tags, through_table: prompt_tags}
            exclude_fields: [created_at]

        Raises:
            ValidationError: If the data is malformed.
        """
        if not isinstance(data, dict) or "resource" not in data:
            raise ValidationError("An import descriptor needs a 'resource' entry.")
        resource = data["resource"]
        try:
            entity = EntityRef(**resource) if isinstance(resource, dict) else EntityRef(resource)
            columns = [ColumnMapping(**column) for column in data.get("columns") or []]
            relations = [ImportRelation(**relation) for relation in data.get("relations") or []]
        except TypeError as exc:
            raise ValidationError(f"Malformed import descriptor: {exc}") from exc
        return cls(entity, columns, relations, list(data.get("exclude_fields") or []))

    @classmethod
    def from_yaml(cls, filepath: str) -> "ImportDescriptor":
        return cls.from_dict(load_yaml(filepath))


@dataclass
class ImportRow:
    """
    One parsed input row.

    Attributes:
        index: Zero-based position of the row in the input.
        raw_fields: The cells as read, keyed by header.
        mapped_entity: Fields written to the imported resource.
        relation_values: Related ids per relation field.
    """

    index: int
    raw_fields: Dict[str, Any]
    mapped_entity: Dict[str, Any] = field(default_factory=dict)
    relation_values: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class RowResult:
    index: int
    status: RowStatus
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is RowStatus.SUCCESS


@dataclass
class ImportReport:
    """
    The outcome of an import run.

    Rows that were never reached because the run was aborted have no result.

    Attributes:
        results: One result per processed row, in file order.
        rows: The parsed rows, used to rebuild failed rows for a retry file.
        validation_errors: Advisory relation validation errors.
        aborted: True if the run was stopped before every row was processed.
    """

    results: List[RowResult] = field(default_factory=list)
    rows: List[ImportRow] = field(default_factory=list)
    validation_errors: List[RelationValidationError] = field(default_factory=list)
    aborted: bool = False

    @property
    def success_count(self) -> int:
        return sum(1 for result in self.results if result.ok)

    @property
    def failed_count(self) -> int:
        return sum(1 for result in self.results if not result.ok)

    @property
    def failures(self) -> List[RowResult]:
        return [result for result in self.results if not result.ok]

    def errors(self, limit: Optional[int] = DEFAULT_MAX_REPORTED_ERRORS) -> List[str]:
        """
        Return failure messages as `Row N: message`, with N counted from 1.

        Args:
            limit: The maximum number of messages; None for all of them.
        """
        messages = [f"Row {result.index + 1}: {result.error}" for result in self.failures]
        return messages if limit is None else messages[:limit]

    def failed_rows(self) -> List[Dict[str, Any]]:
        """
        Rebuild the failed input rows with the error appended in an `Error` column.
        """
        by_index = {row.index: row for row in self.rows}
        failed = []
        for result in self.failures:
            row = by_index.get(result.index)
            cells = dict(row.raw_fields) if row is not None else {}
            cells[ERROR_COLUMN] = result.error
            failed.append(cells)
        return failed

    def raise_for_failures(self):
        """
        Raise a `PartialBatchError` carrying the failed row results, if there are any.
        """
        failures = self.failures
        if failures:
            raise PartialBatchError(f"{len(failures)} of {len(self.results)} row(s) failed to import.", failures)

    def summary(self) -> str:
        text = f"{self.success_count} imported, {self.failed_count} failed"
        if self.aborted:
            text += " (aborted)"
        return text
