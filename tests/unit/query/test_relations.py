##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Tests for the `relations.py` module.
"""

import asyncio
from typing import Dict, List

import pytest

from refinery.backends.primitives import ColumnPredicate, PrimitiveOp, SelectResult
from refinery.exceptions import ValidationError
from refinery.query.predicates import EntityRef, Filter, Operator, RelationConfig
from refinery.query.relations import RelationshipResolver
from tests.fixture_types import FixtureDict, FixtureDriver


@pytest.fixture
def relations() -> FixtureDict[str, RelationConfig]:
    """
    The relations of prompts to tags and models.

    Returns:
        Relation declarations keyed by logical field.
    """
    return {
        "tag_id": RelationConfig("prompt_tags", "prompt_id", "tag_id"),
        "model_id": RelationConfig("prompt_models", "prompt_id", "model_id"),
    }


def junction_rows(*owner_ids: str) -> SelectResult:
    """Build the select result of a junction lookup returning `owner_ids`."""
    return SelectResult(rows=[{"prompt_id": owner_id} for owner_id in owner_ids])


class TestRelationshipResolver:
    """Tests for `RelationshipResolver.resolve`."""

    def test_no_relations_returns_filters_unchanged(self, mock_driver: FixtureDriver):
        """Test that nothing is queried when no relations are declared."""
        filters = [Filter("tag_id", Operator.EQ, "seo")]
        resolution = asyncio.run(RelationshipResolver().resolve(mock_driver, EntityRef("prompts"), filters))

        assert resolution.filters == filters
        assert not resolution.short_circuit_empty
        mock_driver.select.assert_not_called()

    def test_no_relation_filters(self, mock_driver: FixtureDriver, relations: Dict):
        """Test that filters on ordinary fields are kept and nothing is queried."""
        filters = [Filter("is_published", Operator.EQ, True)]
        resolution = asyncio.run(RelationshipResolver().resolve(mock_driver, EntityRef("prompts"), filters, relations))

        assert resolution.filters == filters
        mock_driver.select.assert_not_called()

    def test_single_relation_filter(self, mock_driver: FixtureDriver, relations: Dict):
        """Test that a relation filter becomes an id membership filter."""
        mock_driver.select.return_value = junction_rows("p1", "p2", "p1")
        filters = [Filter("is_published", Operator.EQ, True), Filter("tag_id", Operator.EQ, "seo")]

        resolution = asyncio.run(RelationshipResolver().resolve(mock_driver, EntityRef("prompts"), filters, relations))

        assert resolution.filters == [
            Filter("is_published", Operator.EQ, True),
            Filter("id", Operator.IN, ("p1", "p2")),
        ]
        mock_driver.select.assert_called_once_with(
            "prompt_tags",
            columns="prompt_id",
            predicates=[ColumnPredicate("tag_id", PrimitiveOp.EQ, "seo")],
            orders=[],
            row_window=None,
            count_mode=None,
            schema=None,
        )

    def test_in_filter_uses_membership_lookup(self, mock_driver: FixtureDriver, relations: Dict):
        """Test that an `in` relation filter queries the junction with `in`."""
        mock_driver.select.return_value = junction_rows("p3")
        filters = [Filter("tag_id", Operator.IN, ("seo", "ads"))]

        asyncio.run(RelationshipResolver().resolve(mock_driver, EntityRef("prompts"), filters, relations))

        predicates = mock_driver.select.call_args.kwargs["predicates"]
        assert predicates == [ColumnPredicate("tag_id", PrimitiveOp.IN, ("seo", "ads"))]

    def test_multiple_relation_filters_are_intersected(self, mock_driver: FixtureDriver, relations: Dict):
        """Test that a record must satisfy every relation filter."""
        mock_driver.select.side_effect = [junction_rows("p1", "p2", "p3"), junction_rows("p3", "p1", "p9")]
        filters = [Filter("tag_id", Operator.EQ, "seo"), Filter("model_id", Operator.EQ, "gpt-4o")]

        resolution = asyncio.run(RelationshipResolver().resolve(mock_driver, EntityRef("prompts"), filters, relations))

        assert resolution.filters == [Filter("id", Operator.IN, ("p1", "p3"))]
        assert not resolution.short_circuit_empty

    def test_empty_intersection_short_circuits(self, mock_driver: FixtureDriver, relations: Dict):
        """Test that an empty intersection is flagged and stops further lookups."""
        mock_driver.select.side_effect = [junction_rows(), junction_rows("p1")]
        filters = [
            Filter("title", Operator.CONTAINS, "blog"),
            Filter("tag_id", Operator.EQ, "missing"),
            Filter("model_id", Operator.EQ, "gpt-4o"),
        ]

        resolution = asyncio.run(RelationshipResolver().resolve(mock_driver, EntityRef("prompts"), filters, relations))

        assert resolution.short_circuit_empty
        assert resolution.filters == [Filter("title", Operator.CONTAINS, "blog")]
        assert mock_driver.select.call_count == 1

    def test_custom_id_column(self, mock_driver: FixtureDriver, relations: Dict):
        """Test that the membership filter targets the entity's id column."""
        mock_driver.select.return_value = junction_rows("p1")
        resolution = asyncio.run(
            RelationshipResolver().resolve(
                mock_driver, EntityRef("prompts", id_column="slug"), [Filter("tag_id", "eq", "seo")], relations
            )
        )
        assert resolution.filters == [Filter("slug", Operator.IN, ("p1",))]

    @pytest.mark.parametrize(
        "flt",
        [
            Filter("tag_id", Operator.CONTAINS, "se"),
            Filter("tag_id", Operator.NE, "seo"),
            Filter("tag_id", Operator.EQ, None),
            Filter("tag_id", Operator.NULL, True),
        ],
    )
    def test_unsupported_relation_operators_raise(self, mock_driver: FixtureDriver, relations: Dict, flt: Filter):
        """
        Test that relation filters only accept `eq` and `in` with a value.

        Args:
            mock_driver: The mocked driver.
            relations: The relation declarations.
            flt: The unsupported relation filter.
        """
        with pytest.raises(ValidationError, match="only supports 'eq' and 'in'"):
            asyncio.run(RelationshipResolver().resolve(mock_driver, EntityRef("prompts"), [flt], relations))
        mock_driver.select.assert_not_called()

    def test_junction_schema_follows_entity(self, mock_driver: FixtureDriver, relations: Dict):
        """Test that junction lookups run in the entity's schema."""
        mock_driver.select.return_value = junction_rows("p1")
        asyncio.run(
            RelationshipResolver().owner_ids(
                mock_driver,
                EntityRef("prompts", schema="catalog"),
                relations["tag_id"],
                Filter("tag_id", Operator.EQ, "seo"),
            )
        )
        assert mock_driver.select.call_args.kwargs["schema"] == "catalog"

    def test_find_relation(self, relations: Dict):
        """Test that relations are matched on their related key."""
        resolver = RelationshipResolver()
        found: List = [
            resolver.find_relation(Filter("model_id", Operator.EQ, "x"), relations),
            resolver.find_relation(Filter("title", Operator.EQ, "x"), relations),
        ]
        assert found == [relations["model_id"], None]
