##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Utility functions to support Refinery CLI command handlers.

This module turns command-line filter and sorter arguments into predicates and
builds the driver and data provider described by the loaded configuration.
"""

import logging
from argparse import Namespace
from contextlib import suppress
from dataclasses import replace
from typing import Any, List, Optional

from refinery.backends.backend_factory import backend_factory
from refinery.backends.store_base import StoreDriver
from refinery.catalog.resources import RESOURCES, Resource
from refinery.config import Config
from refinery.config.configfile import load
from refinery.data_provider import DataProvider
from refinery.exceptions import ValidationError
from refinery.importer.models import ImportDescriptor
from refinery.query.predicates import EntityRef, Filter, Operator, Sorter, SortOrder
from refinery.utils import expand_path, split_list


LOG = logging.getLogger(__name__)


def parse_cli_value(raw: str) -> Any:
    """
    Interpret a command-line value: `true`/`false` become booleans, integers and
    floats become numbers, everything else stays a string.
    """
    lowered = raw.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    with suppress(ValueError):
        return int(raw)
    with suppress(ValueError):
        return float(raw)
    return raw


def parse_filter(expression: str) -> Filter:
    """
    Parse a `field:operator:value` filter argument.

    `in` takes a comma separated list and `null` takes `true` or `false`. A
    value may itself contain colons.

    Raises:
        ValidationError: If the expression is malformed.
    """
    parts = expression.split(":", 2)
    if len(parts) != 3:
        raise ValidationError(f"Filters take the form field:operator:value, got '{expression}'.", field="filter")
    field_name, operator, raw_value = parts
    try:
        operator = Operator(operator.strip().lower())
    except ValueError as exc:
        valid = ", ".join(op.value for op in Operator)
        raise ValidationError(f"Unknown operator '{operator}'. Valid operators: {valid}.", field="filter") from exc

    if operator is Operator.IN:
        value = tuple(parse_cli_value(item) for item in split_list(raw_value))
    elif operator is Operator.CONTAINS:
        value = raw_value
    else:
        value = parse_cli_value(raw_value)
    return Filter(field_name.strip(), operator, value)


def parse_sorter(expression: str) -> Sorter:
    """
    Parse a `field[:asc|:desc]` sorter argument.

    Raises:
        ValidationError: If the order is neither `asc` nor `desc`.
    """
    field_name, _, order = expression.partition(":")
    return Sorter(field_name.strip(), order.strip().lower() or SortOrder.ASC)


def get_cli_config(args: Namespace) -> Config:
    """Load the configuration named by `--config`, or the default one."""
    return load(getattr(args, "config", None))


def create_driver(config: Config, path: Optional[str] = None) -> StoreDriver:
    """
    Create the store driver described by the `store` section of the configuration.

    Args:
        config: The loaded configuration.
        path: Optional database path overriding the configured one.
    """
    store = config.store
    driver_config = {"path": expand_path(path or store.path), "timeout": store.timeout}
    LOG.debug(f"Creating '{store.driver}' driver for {driver_config['path']}.")
    return backend_factory.create(store.driver, driver_config)


def create_provider(args: Namespace) -> DataProvider:
    """Build a data provider for the store the CLI arguments point at."""
    config = get_cli_config(args)
    return DataProvider(create_driver(config, getattr(args, "database", None)))


def collect_filters(expressions: Optional[List[str]]) -> List[Filter]:
    return [parse_filter(expression) for expression in expressions or []]


def resolve_resource(name: str, descriptor_path: Optional[str] = None) -> Resource:
    """
    Find the resource a command works on.

    Catalog resources come with their select expression, relations and import
    descriptor; any other table is read with `*`. A descriptor file, when given,
    replaces the resource's import descriptor.

    Args:
        name: The table name.
        descriptor_path: Optional YAML import descriptor.
    """
    resource = RESOURCES.get(name) or Resource(EntityRef(name))
    if descriptor_path:
        descriptor = ImportDescriptor.from_yaml(expand_path(descriptor_path))
        LOG.debug(f"Using import descriptor {descriptor_path} for '{descriptor.resource.name}'.")
        resource = replace(resource, entity=descriptor.resource, descriptor=descriptor)
    return resource
