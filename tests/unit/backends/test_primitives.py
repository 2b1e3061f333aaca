##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Tests for the `primitives.py` module.
"""

import asyncio

from refinery.backends.primitives import (
    ColumnPredicate,
    OrderClause,
    PrimitiveOp,
    PrimitiveSelect,
    RowWindow,
    SelectResult,
)
from tests.fixture_types import FixtureDriver


def test_column_predicate_describe():
    """
    Test that predicates describe themselves with their value, except for null checks.
    """
    assert ColumnPredicate("tier", PrimitiveOp.EQ, "pro").describe() == "tier eq 'pro'"
    assert ColumnPredicate("id", PrimitiveOp.IN, ("a", "b")).describe() == "id in ('a', 'b')"
    assert ColumnPredicate("category_id", PrimitiveOp.IS_NULL).describe() == "category_id is_null"


def test_order_clause_describe():
    """
    Test that order clauses name their foreign table when scoped to one.
    """
    assert OrderClause("created_at", ascending=False).describe() == "created_at desc"
    assert OrderClause("name", foreign_table="categories").describe() == "categories.name asc"


def test_row_window_limit():
    """
    Test that the limit of an inclusive window counts both ends.
    """
    assert RowWindow(10, 19).limit == 10
    assert RowWindow(0, 0).limit == 1


def test_describe_minimal_select():
    """
    Test the description of a select with nothing but a table.
    """
    assert PrimitiveSelect("tags").describe() == "select * from tags"


def test_execute_passes_every_part_to_the_driver(mock_driver: FixtureDriver):
    """
    Test that `execute` hands the whole select to the driver and returns its result.

    Args:
        mock_driver: The mocked driver.
    """
    expected = SelectResult(rows=[{"id": "seo"}], count=1)
    mock_driver.select.return_value = expected
    select = PrimitiveSelect(
        table="tags",
        columns="id",
        predicates=(ColumnPredicate("id", PrimitiveOp.EQ, "seo"),),
        orders=(OrderClause("id"),),
        row_window=RowWindow(0, 9),
        count_mode="exact",
        schema="catalog",
    )

    result = asyncio.run(select.execute(mock_driver))

    assert result is expected
    mock_driver.select.assert_called_once_with(
        "tags",
        columns="id",
        predicates=[ColumnPredicate("id", PrimitiveOp.EQ, "seo")],
        orders=[OrderClause("id")],
        row_window=RowWindow(0, 9),
        count_mode="exact",
        schema="catalog",
    )
