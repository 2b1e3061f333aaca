##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Turns store errors into short, human readable import messages.
"""

import re

from refinery.exceptions import StoreError


UNIQUE_VIOLATION = "23505"
NOT_NULL_VIOLATION = "23502"
FOREIGN_KEY_VIOLATION = "23503"
CHECK_VIOLATION = "23514"

COLUMN_PATTERN = re.compile(r'column "(?P<column>[^"]+)"')
KEY_PATTERN = re.compile(r"Key \((?P<column>[^)]+)\)=\((?P<value>[^)]*)\)")
CHECK_PATTERN = re.compile(r"CHECK constraint failed: (?P<constraint>.+)")


def classify_error(exc: Exception) -> str:
    """
    Describe why a row failed.

    Store errors are classified by their code into duplicate keys, missing
    required fields (naming the column), invalid references (naming the column
    and value) and violated check constraints. Anything else is described by its message.

    Args:
        exc: The exception raised while importing a row.

    Returns:
        The message recorded for the row.
    """
    if isinstance(exc, StoreError):
        if exc.code == UNIQUE_VIOLATION:
            return f"Duplicate key: {exc.details or exc.message}"
        if exc.code == NOT_NULL_VIOLATION:
            match = COLUMN_PATTERN.search(exc.message)
            return f"Missing required field: {match.group('column') if match else exc.message}"
        if exc.code == FOREIGN_KEY_VIOLATION:
            match = KEY_PATTERN.search(exc.details or "")
            if match:
                return f"Invalid reference: {match.group('column')} = {match.group('value')}"
            return f"Invalid reference: {exc.details or exc.message}"
        if exc.code == CHECK_VIOLATION:
            match = CHECK_PATTERN.search(exc.details or "")
            return f"Constraint violated: {match.group('constraint') if match else exc.details or exc.message}"
    return str(exc) or "Unknown error"
