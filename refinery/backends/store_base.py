##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
This module defines the abstract base class for all store drivers in Refinery.

This module provides the `StoreDriver` class, which outlines the narrow primitive
interface the data layer drives: filtered/sorted/paginated select, insert, update
and delete by table name and column predicates. All concrete drivers (e.g. the
SQLite driver) must inherit from this class and implement its abstract methods.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from refinery.backends.primitives import ColumnPredicate, OrderClause, RowWindow, SelectResult


class StoreDriver(ABC):
    """
    Base class for all store drivers supported in Refinery.

    Every primitive is a coroutine so that callers can issue independent
    operations concurrently.

    Attributes:
        driver_name (str): The name of the driver (e.g. "sqlite").

    Methods:
        get_name: Retrieve the name of the driver.
        get_version: Query the store for its version.
        select: Read rows matching column predicates.
        insert: Insert records and return them as stored.
        update: Update every row matching the predicates and return the updated rows.
        delete: Delete every row matching the predicates and return the deleted rows.
        close: Release any resources held by the driver.
    """

    def __init__(self, driver_name: str):
        """
        Initialize the `StoreDriver` instance.

        Args:
            driver_name: The name of the driver (e.g. "sqlite").
        """
        self.driver_name: str = driver_name

    def get_name(self) -> str:
        """
        Get the name of the driver.

        Returns:
            The name of the driver (e.g. sqlite).
        """
        return self.driver_name

    @abstractmethod
    async def get_version(self) -> str:
        """
        Query the store for the current version.

        Returns:
            A string representing the current version of the store.
        """
        raise NotImplementedError("Subclasses of `StoreDriver` must implement a `get_version` method.")

    @abstractmethod
    async def select(
        self,
        table: str,
        columns: str = "*",
        predicates: Sequence[ColumnPredicate] = (),
        orders: Sequence[OrderClause] = (),
        row_window: Optional[RowWindow] = None,
        count_mode: Optional[str] = None,
        schema: Optional[str] = None,
    ) -> SelectResult:
        """
        Read rows from `table`.

        Args:
            table: The table to read.
            columns: A select expression, possibly with embedded relations.
            predicates: AND-combined predicates.
            orders: Order clauses.
            row_window: Optional row range restriction.
            count_mode: If given, also count every matching row.
            schema: Optional schema the table lives in.

        Returns:
            The rows and, when `count_mode` is set, the count of all matching rows.
        """
        raise NotImplementedError("Subclasses of `StoreDriver` must implement a `select` method.")

    @abstractmethod
    async def insert(
        self, table: str, records: Sequence[Dict[str, Any]], columns: str = "*", schema: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Insert `records` into `table`.

        Returns:
            The inserted records as the store holds them.
        """
        raise NotImplementedError("Subclasses of `StoreDriver` must implement an `insert` method.")

    @abstractmethod
    async def update(
        self,
        table: str,
        values: Dict[str, Any],
        match: Sequence[ColumnPredicate],
        columns: str = "*",
        schema: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Set `values` on every row of `table` matching `match`.

        Returns:
            The updated rows.
        """
        raise NotImplementedError("Subclasses of `StoreDriver` must implement an `update` method.")

    @abstractmethod
    async def delete(
        self, table: str, match: Sequence[ColumnPredicate], schema: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Delete every row of `table` matching `match`.

        Returns:
            The deleted rows.
        """
        raise NotImplementedError("Subclasses of `StoreDriver` must implement a `delete` method.")

    async def close(self):
        """Release resources held by the driver. Nothing to do by default."""
        return None
