##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Module of all Refinery-specific exception types.
"""

from typing import Any, List, Optional, Sequence


__all__ = (
    "RefineryError",
    "ValidationError",
    "StoreError",
    "EntityNotFoundError",
    "RelationValidationError",
    "PartialBatchError",
    "BackendNotSupportedError",
    "InvalidStateTransitionError",
)


class RefineryError(Exception):
    """
    Base class for every error raised by Refinery.
    """


class ValidationError(RefineryError):
    """
    Exception for malformed predicates (filters, sorters, pagination, select
    metadata). Always raised before any store operation is issued.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class StoreError(RefineryError):
    """
    Exception to signal that the underlying store rejected an operation.

    Attributes:
        message: The human readable message reported by the store.
        code: A store specific error code (SQLSTATE style, e.g. `23505`).
        details: Additional detail text reported by the store, if any.
        hint: A hint reported by the store, if any.
    """

    def __init__(
        self, message: str, code: Optional[str] = None, details: Optional[str] = None, hint: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.hint = hint


class EntityNotFoundError(StoreError):
    """
    Exception to signal that a single-entity lookup matched no record.
    """

    def __init__(self, message: str):
        super().__init__(message, code="PGRST116")


class RelationValidationError(RefineryError):
    """
    One or more related ids referenced by an import do not exist.

    This is advisory: the import pipeline reports instances of this class
    instead of raising them, but callers may raise one to gate an import.

    Attributes:
        field: The import field that carries the related ids.
        missing_ids: Every id that could not be found, in first-seen order.
    """

    def __init__(self, field: str, missing_ids: Sequence[str], max_listed: int = 5):
        self.field = field
        self.missing_ids: List[str] = list(missing_ids)
        listed = ", ".join(self.missing_ids[:max_listed])
        overflow = len(self.missing_ids) - max_listed
        message = f"Invalid {field}: {listed}"
        if overflow > 0:
            message += f" and {overflow} more"
        super().__init__(message)


class PartialBatchError(RefineryError):
    """
    Raised on request by batch results when some records failed.

    Batch operations never raise this on their own; callers opt in through
    `raise_for_failures()` on a batch result or an import report.
    """

    def __init__(self, message: str, failures: Sequence[Any]):
        super().__init__(message)
        self.failures = list(failures)


class BackendNotSupportedError(RefineryError):
    """
    Exception to signal that the requested store driver is not supported.
    """


class InvalidStateTransitionError(RefineryError):
    """
    Exception to signal that the import pipeline was driven out of order.
    """
