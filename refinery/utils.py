##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Module for project-wide utility functions.
"""

import asyncio
import logging
import os
from copy import deepcopy
from types import SimpleNamespace
from typing import Any, Awaitable, Dict, Iterable, List, TypeVar

import yaml


LOG = logging.getLogger(__name__)

T = TypeVar("T")


def load_yaml(filepath: str) -> Dict:
    """
    Safely read a YAML file and return its contents.

    Args:
        filepath: The file path to the YAML file to be read.

    Returns:
        A dict representing the contents of the YAML file.
    """
    with open(filepath, "r") as _file:
        return yaml.safe_load(_file)


def nested_dict_to_namespaces(dic: Dict) -> SimpleNamespace:
    """
    Convert a nested dictionary into a nested SimpleNamespace structure.

    Args:
        dic: The nested dictionary to be converted.

    Returns:
        A SimpleNamespace object representing the nested structure of the input dictionary.

    Raises:
        TypeError: If the input is not a dictionary.
    """

    def recurse(dic):
        if not isinstance(dic, dict):
            return dic
        for key, val in list(dic.items()):
            dic[key] = recurse(val)
        return SimpleNamespace(**dic)

    if not isinstance(dic, dict):
        raise TypeError(f"{dic} is not a dict")

    new_dic = deepcopy(dic)
    return recurse(new_dic)


def nested_namespace_to_dicts(namespaces: SimpleNamespace) -> Dict:
    """
    Convert a nested SimpleNamespace structure into a nested dictionary.

    Args:
        namespaces: The nested SimpleNamespace to be converted.

    Returns:
        A dictionary representing the nested structure of the input SimpleNamespace.

    Raises:
        TypeError: If the input is not a SimpleNamespace.
    """

    def recurse(namespaces):
        if not isinstance(namespaces, SimpleNamespace):
            return namespaces
        for key, val in list(namespaces.__dict__.items()):
            setattr(namespaces, key, recurse(val))
        return namespaces.__dict__

    if not isinstance(namespaces, SimpleNamespace):
        raise TypeError(f"{namespaces} is not a SimpleNamespace")

    new_ns = deepcopy(namespaces)
    return recurse(new_ns)


def fill_defaults(values: Dict, defaults: Dict) -> Dict:
    """
    Return a copy of `values` where every key missing from it is taken from `defaults`.

    Nested dictionaries are filled recursively; values already present always win.

    Args:
        values: The user supplied values.
        defaults: The default values.

    Returns:
        A new, filled dictionary.
    """
    merged = deepcopy(defaults)
    for key, val in (values or {}).items():
        if isinstance(val, dict) and isinstance(merged.get(key), dict):
            merged[key] = fill_defaults(val, merged[key])
        else:
            merged[key] = deepcopy(val)
    return merged


def expand_path(path: str) -> str:
    """Expand `~` and environment variables in `path`."""
    return os.path.expandvars(os.path.expanduser(str(path)))


def get_singular(name: str) -> str:
    """
    Return the naive singular form of a table name by dropping its last character.

    `tags` becomes `tag` and `ai_models` becomes `ai_model`; names that do not end
    in `s` are returned unchanged.
    """
    return name[:-1] if name.endswith("s") else name


def split_list(value: Any, separator: str = ",") -> List[str]:
    """
    Split a delimited cell into trimmed, non-empty items.

    Args:
        value: A delimited string, a list, or None.
        separator: The delimiter.

    Returns:
        The items in their original order.
    """
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple)) else str(value).split(separator)
    return [str(item).strip() for item in items if str(item).strip()]


async def gather_bounded(aws: Iterable[Awaitable[T]], limit: int, return_exceptions: bool = False) -> List[T]:
    """
    Await `aws` concurrently with at most `limit` of them in flight.

    Args:
        aws: The awaitables to run.
        limit: The maximum number running at once.
        return_exceptions: Passed on to `asyncio.gather`.

    Returns:
        The results in input order.
    """
    semaphore = asyncio.Semaphore(max(1, int(limit)))

    async def run(awaitable: Awaitable[T]) -> T:
        async with semaphore:
            return await awaitable

    return await asyncio.gather(*(run(aw) for aw in aws), return_exceptions=return_exceptions)
