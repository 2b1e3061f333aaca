##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Tests for the `predicates.py` module.
"""

from datetime import date

import pytest

from refinery.exceptions import ValidationError
from refinery.query.predicates import (
    CountMode,
    EntityRef,
    Filter,
    Operator,
    Pagination,
    PaginationMode,
    RelationConfig,
    RelationKind,
    SelectMeta,
    Sorter,
    SortOrder,
    validate_identifier,
)


class TestValidateIdentifier:
    """Tests for `validate_identifier`."""

    @pytest.mark.parametrize("name", ["prompts", "_private", "ai_models", "Table1"])
    def test_valid_names_are_returned(self, name: str):
        """
        Test that plain identifiers pass through unchanged.

        Args:
            name: The identifier to check.
        """
        assert validate_identifier(name) == name

    @pytest.mark.parametrize("name", ["", "1table", "prompts; drop table tags", "a-b", "a.b", None, 5])
    def test_invalid_names_raise(self, name):
        """
        Test that anything but a letters/digits/underscores name is rejected.

        Args:
            name: The identifier to check.
        """
        with pytest.raises(ValidationError, match="Invalid column"):
            validate_identifier(name, "column")


class TestEntityRef:
    """Tests for `EntityRef`."""

    def test_defaults(self):
        """Test that the id column defaults to `id` and there is no schema."""
        entity = EntityRef("prompts")
        assert entity.id_column == "id"
        assert entity.schema is None

    def test_invalid_schema_raises(self):
        """Test that the schema must be an identifier too."""
        with pytest.raises(ValidationError):
            EntityRef("prompts", schema="public.x")


class TestFilter:
    """Tests for `Filter` construction and validation."""

    def test_operator_is_coerced_from_string(self):
        """Test that operator strings are turned into `Operator` members."""
        assert Filter("title", "contains", "seo").operator is Operator.CONTAINS

    def test_unknown_operator_raises(self):
        """Test that an unknown operator is reported with the valid choices."""
        with pytest.raises(ValidationError, match="Expected one of: eq, ne"):
            Filter("title", "like", "seo")

    def test_list_values_become_tuples(self):
        """Test that list and set values are frozen into tuples."""
        assert Filter("id", Operator.IN, ["a", "b"]).value == ("a", "b")
        assert Filter("id", Operator.IN, {"a"}).value == ("a",)

    def test_split_field(self):
        """Test that local and join fields are split into their parts."""
        assert Filter("title", Operator.EQ, "x").split_field() == (None, "title")
        assert Filter("categories.name", Operator.EQ, "x").split_field() == ("categories", "name")
        assert Filter("categories.name", Operator.EQ, "x").is_join_filter

    @pytest.mark.parametrize("field", ["a.b.c", "a.", ".b", "bad field"])
    def test_unparseable_fields_raise(self, field: str):
        """
        Test that a field must be one identifier or exactly two dot-joined identifiers.

        Args:
            field: The malformed field.
        """
        with pytest.raises(ValidationError):
            Filter(field, Operator.EQ, "x").validate()

    @pytest.mark.parametrize(
        "operator, value",
        [
            (Operator.EQ, "x"),
            (Operator.EQ, None),
            (Operator.NE, 3),
            (Operator.GT, 1.5),
            (Operator.LTE, date(2024, 1, 1)),
            (Operator.IN, ("a", "b")),
            (Operator.IN, ()),
            (Operator.CONTAINS, "seo"),
            (Operator.NULL, True),
            (Operator.NULL, False),
        ],
    )
    def test_valid_operator_values(self, operator: Operator, value):
        """
        Test the operator/value pairs that validate.

        Args:
            operator: The filter operator.
            value: The filter value.
        """
        Filter("field", operator, value).validate()

    @pytest.mark.parametrize(
        "operator, value",
        [
            (Operator.IN, "a,b"),
            (Operator.IN, (["nested"],)),
            (Operator.NULL, "true"),
            (Operator.NULL, None),
            (Operator.EQ, ("a",)),
            (Operator.GT, None),
            (Operator.CONTAINS, True),
            (Operator.LT, {"a": 1}),
        ],
    )
    def test_operator_value_mismatch_raises(self, operator: Operator, value):
        """
        Test that a value of the wrong shape for its operator is rejected.

        Args:
            operator: The filter operator.
            value: The mismatched value.
        """
        with pytest.raises(ValidationError) as excinfo:
            Filter("field", operator, value).validate()
        assert excinfo.value.field == "field"


class TestSorter:
    """Tests for `Sorter`."""

    def test_default_order_is_ascending(self):
        """Test that sorters default to ascending order."""
        sorter = Sorter("created_at")
        assert sorter.order is SortOrder.ASC
        assert sorter.ascending

    def test_order_is_coerced(self):
        """Test that order strings are turned into `SortOrder` members."""
        assert Sorter("created_at", "desc").order is SortOrder.DESC

    def test_invalid_order_raises(self):
        """Test that an unknown order is rejected."""
        with pytest.raises(ValidationError):
            Sorter("created_at", "sideways")

    def test_split_on_rightmost_dot(self):
        """Test that the foreign table and column are split on the last dot."""
        assert Sorter("created_at").split_field() == (None, "created_at")
        assert Sorter("categories.name").split_field() == ("categories", "name")

    def test_invalid_foreign_table_raises(self):
        """Test that a nested path is not a valid foreign table."""
        with pytest.raises(ValidationError):
            Sorter("a.b.name").split_field()


class TestPagination:
    """Tests for `Pagination`."""

    @pytest.mark.parametrize(
        "page, page_size, expected",
        [(1, 10, (0, 9)), (2, 10, (10, 19)), (3, 25, (50, 74)), (1, 1, (0, 0))],
    )
    def test_row_window(self, page: int, page_size: int, expected: tuple):
        """
        Test the zero-based inclusive row window of a page.

        Args:
            page: The page number.
            page_size: The page size.
            expected: The expected row window.
        """
        assert Pagination(page, page_size).row_window() == expected

    @pytest.mark.parametrize("page, page_size", [(0, 10), (1, 0), (-1, 5), (True, 10), (1.5, 10), ("1", 10)])
    def test_invalid_values_raise(self, page, page_size):
        """
        Test that page and page size must be integers of at least one.

        Args:
            page: The page number.
            page_size: The page size.
        """
        with pytest.raises(ValidationError):
            Pagination(page, page_size)

    def test_mode_is_coerced(self):
        """Test that mode strings are turned into `PaginationMode` members."""
        assert Pagination(mode="client").mode is PaginationMode.CLIENT
        assert Pagination().mode is PaginationMode.SERVER


class TestSelectMeta:
    """Tests for `SelectMeta`."""

    @pytest.mark.parametrize("select", ["", "   ", None])
    def test_blank_select_means_all_columns(self, select):
        """
        Test that an empty select expression selects every column.

        Args:
            select: The blank select expression.
        """
        assert SelectMeta(select=select).select == "*"

    def test_count_mode_is_coerced(self):
        """Test that count mode strings are turned into `CountMode` members."""
        assert SelectMeta(count_mode="planned").count_mode is CountMode.PLANNED

    def test_resolve_id_column(self):
        """Test that the metadata's id column overrides the entity's."""
        entity = EntityRef("prompts")
        assert SelectMeta().resolve_id_column(entity) == "id"
        assert SelectMeta(id_column="slug").resolve_id_column(entity) == "slug"


class TestRelationConfig:
    """Tests for `RelationConfig`."""

    def test_kind_defaults_to_many_to_many(self):
        """Test that the only relation kind is the default."""
        relation = RelationConfig("prompt_tags", "prompt_id", "tag_id")
        assert relation.kind is RelationKind.MANY_TO_MANY

    def test_unknown_kind_raises(self):
        """Test that other relation kinds are rejected."""
        with pytest.raises(ValidationError):
            RelationConfig("prompt_tags", "prompt_id", "tag_id", kind="oneToMany")

    def test_invalid_junction_table_raises(self):
        """Test that junction names must be identifiers."""
        with pytest.raises(ValidationError):
            RelationConfig("prompt tags", "prompt_id", "tag_id")
