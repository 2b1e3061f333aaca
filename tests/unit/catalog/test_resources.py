##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Tests for the `catalog/resources.py` module.
"""

import pytest

from refinery.catalog.resources import RESOURCES, get_resource, model_for_import, prompt_for_export
from refinery.catalog.schema import TABLES
from refinery.exceptions import ValidationError


def test_every_resource_is_a_catalog_table():
    """
    Test that each resource names a catalog table and imports into itself.
    """
    for name, resource in RESOURCES.items():
        assert resource.name == name
        assert name in TABLES
        assert resource.descriptor.resource == resource.entity


def test_timestamps_are_never_imported():
    """
    Test that the exported `Created At` column is never written back.
    """
    for resource in RESOURCES.values():
        assert "created_at" in resource.descriptor.exclude_fields
        assert "Created At" in resource.descriptor.header_map


def test_prompt_relations():
    """
    Test that prompts filter and import through their junction tables.
    """
    prompts = get_resource("prompts")

    assert sorted(prompts.relations) == ["model_id", "tag_id"]
    assert prompts.relations["tag_id"].through_table == "prompt_tags"
    assert {rel.field: rel.through_table for rel in prompts.descriptor.relations} == {
        "tag_ids": "prompt_tags",
        "model_ids": "prompt_models",
    }
    assert prompts.descriptor.relations[1].related_key == "model_id"


def test_get_resource_unknown():
    """
    Test that an unknown resource names the available ones.
    """
    with pytest.raises(ValidationError, match="Available resources: ai_models, ai_providers") as excinfo:
        get_resource("users")
    assert excinfo.value.field == "resource"


def test_prompt_for_export():
    """
    Test that embedded tags and models become id lists.
    """
    record = {
        "id": "p1",
        "title": "SEO blog outline",
        "categories": {"id": "marketing", "name": "Marketing"},
        "prompt_tags": [{"tags": {"id": "seo", "name": "SEO"}}, {"tags": None}],
        "prompt_models": [{"ai_models": {"id": "gpt-4o", "name": "GPT-4o"}}],
    }

    assert prompt_for_export(record) == {
        "id": "p1",
        "title": "SEO blog outline",
        "tag_ids": ["seo"],
        "model_ids": ["gpt-4o"],
    }


def test_prompt_for_export_without_embeds():
    """
    Test that a prompt without relations exports empty id lists.
    """
    assert prompt_for_export({"id": "p4"}) == {"id": "p4", "tag_ids": [], "model_ids": []}


def test_model_for_import():
    """
    Test that a capabilities cell is split into a list and other records pass through.
    """
    assert model_for_import({"id": "gpt-4o", "capabilities": "text, vision"}) == {
        "id": "gpt-4o",
        "capabilities": ["text", "vision"],
    }
    assert model_for_import({"id": "gpt-4o"}) == {"id": "gpt-4o"}
