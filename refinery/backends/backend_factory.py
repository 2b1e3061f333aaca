##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Driver factory for selecting and instantiating store drivers in Refinery.

This module defines the `DriverFactory` class, which maps driver names and aliases
to `StoreDriver` implementations and raises a clear error if an unsupported driver
is requested. Third party drivers can register under the `refinery.backends`
entry point group.
"""

from typing import Any, Type

from refinery.abstracts import RefineryBaseFactory
from refinery.backends.sqlite.sqlite_driver import SQLiteDriver
from refinery.backends.store_base import StoreDriver
from refinery.exceptions import BackendNotSupportedError


class DriverFactory(RefineryBaseFactory):
    """
    Factory class for managing and instantiating supported store drivers.

    Methods:
        register: Register a new driver class and optional aliases.
        list_available: Return a list of supported driver names.
        create: Instantiate a driver class by name or alias.
        get_component_info: Return metadata about a registered driver.
    """

    def _register_builtins(self):
        self.register("sqlite", SQLiteDriver, aliases=["sqlite3"])

    def _validate_component(self, component_class: Any):
        """
        Ensure registered component is a subclass of StoreDriver.

        Raises:
            TypeError: If the component does not subclass StoreDriver.
        """
        if not isinstance(component_class, type) or not issubclass(component_class, StoreDriver):
            raise TypeError(f"{component_class} must inherit from StoreDriver")

    def _entry_point_group(self) -> str:
        return "refinery.backends"

    def _raise_component_error_class(self, msg: str) -> Type[Exception]:
        raise BackendNotSupportedError(msg)


backend_factory = DriverFactory()
