##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Write paths of the Refinery data layer.

Modules:
    results: `Result` and `BatchResult`, the non-raising outcome types of batch operations.
    bulk_executor: `BulkMutationExecutor`, one primitive write per record, issued concurrently.
"""

from refinery.mutations.bulk_executor import BulkMutationExecutor
from refinery.mutations.results import BatchResult, Result


__all__ = ["BatchResult", "BulkMutationExecutor", "Result"]
