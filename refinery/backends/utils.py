##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Utility functions for store drivers in the Refinery application.

These utilities convert Python values into a format that relational stores without
native array/JSON/date types can persist, and convert them back when reading.
"""

import json
import logging
from datetime import date, datetime
from typing import Any, Dict


LOG = logging.getLogger(__name__)


def serialize_value(value: Any) -> Any:
    """
    Convert a Python value into something the store can bind as a parameter.

    Args:
        value: The value to convert.

    Returns:
        Lists, tuples, sets and dicts as JSON strings, dates as ISO 8601 strings,
        everything else unchanged.
    """
    if isinstance(value, (set, frozenset, tuple)):
        return json.dumps(list(value))
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def serialize_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Serialize every value of a record.

    Args:
        record: A mapping of column name to value.

    Returns:
        A new mapping with serialized values.
    """
    return {key: serialize_value(val) for key, val in record.items()}


def deserialize_value(value: Any) -> Any:
    """
    Convert a stored value back into a Python value.

    Strings holding a JSON array or object are decoded; anything that fails to
    decode is returned untouched.

    Args:
        value: The stored value.

    Returns:
        The decoded value.
    """
    if isinstance(value, str) and value[:1] in ("[", "{"):
        try:
            loaded = json.loads(value)
        except json.JSONDecodeError:
            return value
        if isinstance(loaded, (list, dict)):
            return loaded
    return value


def deserialize_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deserialize every value of a record read from the store.

    Args:
        record: A mapping of column name to stored value.

    Returns:
        A new mapping with decoded values.
    """
    return {key: deserialize_value(val) for key, val in record.items()}
