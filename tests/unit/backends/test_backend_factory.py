##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Tests for the `backend_factory.py` module.
"""

import pytest
from pytest_mock import MockerFixture

from refinery.backends.backend_factory import DriverFactory
from refinery.backends.store_base import StoreDriver
from refinery.exceptions import BackendNotSupportedError


class DummySQLiteDriver(StoreDriver):
    def __init__(self, path: str = "dummy.db", timeout: float = 30.0):
        super().__init__("sqlite")
        self.path = path
        self.timeout = timeout

    async def get_version(self):
        pass

    async def select(self, table, columns="*", predicates=(), orders=(), row_window=None, count_mode=None, schema=None):
        pass

    async def insert(self, table, records, columns="*", schema=None):
        pass

    async def update(self, table, values, match, columns="*", schema=None):
        pass

    async def delete(self, table, match, schema=None):
        pass


class TestDriverFactory:
    """
    Test suite for the `DriverFactory`.

    This class tests that the driver factory correctly registers, resolves, instantiates,
    and reports supported store drivers. It uses mocking to isolate driver behavior
    and focuses on the factory's interface and logic.
    """

    @pytest.fixture
    def driver_factory(self, mocker: MockerFixture) -> DriverFactory:
        """
        An instance of the `DriverFactory` class. Resets on each test.

        Args:
            mocker: PyTest mocker fixture.

        Returns:
            An instance of the `DriverFactory` class for testing.
        """
        mocker.patch("refinery.backends.backend_factory.SQLiteDriver", DummySQLiteDriver)
        mocker.patch("refinery.abstracts.factory.entry_points", return_value=[])

        return DriverFactory()

    def test_list_available_drivers(self, driver_factory: DriverFactory):
        """
        Test that `list_available` returns the built-in drivers.

        Args:
            driver_factory: An instance of the `DriverFactory` class for testing.
        """
        assert driver_factory.list_available() == ["sqlite"]

    @pytest.mark.parametrize("driver_name", ["sqlite", "sqlite3"])
    def test_create_valid_driver(self, driver_factory: DriverFactory, driver_name: str):
        """
        Test that `create` returns a driver for the canonical name and its alias.

        Args:
            driver_factory: An instance of the `DriverFactory` class for testing.
            driver_name: The name or alias of the driver to create.
        """
        instance = driver_factory.create(driver_name, {"path": "catalog.db", "timeout": 5})
        assert isinstance(instance, DummySQLiteDriver)
        assert instance.path == "catalog.db"
        assert instance.timeout == 5

    def test_create_invalid_driver_raises(self, driver_factory: DriverFactory):
        """
        Test that `create` raises `BackendNotSupportedError` for unknown drivers.

        Args:
            driver_factory: An instance of the `DriverFactory` class for testing.
        """
        with pytest.raises(BackendNotSupportedError, match="postgres"):
            driver_factory.create("postgres")

    def test_create_with_bad_config_raises(self, driver_factory: DriverFactory):
        """
        Test that a driver that cannot be instantiated is reported as a `ValueError`.

        Args:
            driver_factory: An instance of the `DriverFactory` class for testing.
        """
        with pytest.raises(ValueError, match="Failed to create component 'sqlite'"):
            driver_factory.create("sqlite", {"unknown_option": True})

    def test_invalid_registration_type_error(self, driver_factory: DriverFactory):
        """
        Test that trying to register a non-StoreDriver raises TypeError.

        Args:
            driver_factory: An instance of the `DriverFactory` class for testing.
        """

        class NotAStoreDriver:
            pass

        with pytest.raises(TypeError, match="must inherit from StoreDriver"):
            driver_factory.register("fake", NotAStoreDriver)

    def test_plugins_are_discovered_from_entry_points(self, mocker: MockerFixture):
        """
        Test that drivers published under the `refinery.backends` entry point group are registered.

        Args:
            mocker: PyTest mocker fixture.
        """
        entry_point = mocker.MagicMock()
        entry_point.name = "dummy"
        entry_point.load.return_value = DummySQLiteDriver
        mock_entry_points = mocker.patch("refinery.abstracts.factory.entry_points", return_value=[entry_point])

        factory = DriverFactory()

        assert "dummy" in factory.list_available()
        assert isinstance(factory.create("dummy"), DummySQLiteDriver)
        mock_entry_points.assert_called_once_with(group="refinery.backends")

    def test_get_component_info(self, driver_factory: DriverFactory):
        """
        Test that component info names the class behind an alias.

        Args:
            driver_factory: An instance of the `DriverFactory` class for testing.
        """
        info = driver_factory.get_component_info("sqlite3")
        assert info["name"] == "sqlite"
        assert info["class"] == "DummySQLiteDriver"
