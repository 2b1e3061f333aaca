##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Outcome types for batch operations.

Batch operations never raise because one record failed. Each record gets a
`Result` holding either the written record or the error raised for it, and the
results are collected positionally into a `BatchResult`.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from refinery.exceptions import PartialBatchError


@dataclass
class Result:
    """
    The outcome of one record in a batch.

    Attributes:
        key: The id or payload the operation was issued for.
        value: The record returned by the store on success.
        error: The exception raised for this record on failure.
    """

    key: Any = None
    value: Optional[Dict[str, Any]] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Optional[Dict[str, Any]]:
        """
        Return the value, or raise the stored error.
        """
        if self.error is not None:
            raise self.error
        return self.value


class BatchResult(List[Result]):
    """
    One `Result` per input record, in input order.

    Methods:
        successes: The successful results.
        failures: The failed results.
        values: The records written successfully.
        raise_for_failures: Opt in to an exception when anything failed.
    """

    @property
    def successes(self) -> List[Result]:
        return [result for result in self if result.ok]

    @property
    def failures(self) -> List[Result]:
        return [result for result in self if not result.ok]

    @property
    def values(self) -> List[Optional[Dict[str, Any]]]:
        return [result.value for result in self if result.ok]

    def raise_for_failures(self):
        """
        Raise a `PartialBatchError` carrying the failed results, if there are any.

        Raises:
            PartialBatchError: If at least one record failed.
        """
        failures = self.failures
        if failures:
            raise PartialBatchError(f"{len(failures)} of {len(self)} record(s) failed.", failures)
