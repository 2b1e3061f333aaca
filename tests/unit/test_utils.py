##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Tests for the `utils.py` module.
"""

import asyncio
from types import SimpleNamespace

import pytest

from refinery.utils import (
    expand_path,
    fill_defaults,
    gather_bounded,
    get_singular,
    load_yaml,
    nested_dict_to_namespaces,
    nested_namespace_to_dicts,
    split_list,
)
from tests.fixture_types import FixtureCallable


def test_load_yaml(write_yaml: FixtureCallable):
    """
    Test that a YAML file is read into a dictionary.

    Args:
        write_yaml: Writes a YAML file in the temporary directory.
    """
    assert load_yaml(write_yaml("app.yaml", {"store": {"timeout": 5}})) == {"store": {"timeout": 5}}


def test_namespace_round_trip():
    """
    Test the conversion between nested dictionaries and namespaces.
    """
    nested = {"store": {"path": "catalog.db", "options": {"timeout": 5}}, "flag": True}

    namespaces = nested_dict_to_namespaces(nested)

    assert namespaces.store.options.timeout == 5
    assert namespaces.flag is True
    assert nested_namespace_to_dicts(namespaces) == nested
    assert isinstance(nested["store"], dict)


def test_namespace_conversion_type_errors():
    """
    Test that the conversions reject the wrong input types.
    """
    with pytest.raises(TypeError):
        nested_dict_to_namespaces(["not", "a", "dict"])
    with pytest.raises(TypeError):
        nested_namespace_to_dicts({"not": "a namespace"})
    assert nested_namespace_to_dicts(SimpleNamespace()) == {}


def test_fill_defaults():
    """
    Test that defaults fill missing keys recursively without overriding given values.
    """
    defaults = {"store": {"driver": "sqlite", "timeout": 30}, "logging": {"level": "INFO"}}
    values = {"store": {"timeout": 5}, "extra": [1]}

    filled = fill_defaults(values, defaults)

    assert filled == {
        "store": {"driver": "sqlite", "timeout": 5},
        "logging": {"level": "INFO"},
        "extra": [1],
    }
    assert defaults["store"]["timeout"] == 30
    assert fill_defaults(None, defaults) == defaults


def test_expand_path(monkeypatch):
    """
    Test that user and environment references are expanded.

    Args:
        monkeypatch: PyTest fixture used to set environment variables.
    """
    monkeypatch.setenv("REFINERY_DATA", "/data")
    monkeypatch.setenv("HOME", "/home/tester")

    assert expand_path("$REFINERY_DATA/catalog.db") == "/data/catalog.db"
    assert expand_path("~/catalog.db") == "/home/tester/catalog.db"


@pytest.mark.parametrize(
    "name, expected", [("tags", "tag"), ("ai_models", "ai_model"), ("prompts", "prompt"), ("media", "media")]
)
def test_get_singular(name: str, expected: str):
    """
    Test the naive singular of table names.

    Args:
        name: The table name.
        expected: The expected singular.
    """
    assert get_singular(name) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("seo, ads ,,copywriting", ["seo", "ads", "copywriting"]),
        ("", []),
        (None, []),
        (["seo", " ", "ads "], ["seo", "ads"]),
        (42, ["42"]),
    ],
)
def test_split_list(value, expected):
    """
    Test that delimited cells split into trimmed, non-empty items.

    Args:
        value: The cell value.
        expected: The expected items.
    """
    assert split_list(value) == expected


class TestGatherBounded:
    """Tests for `gather_bounded`."""

    def test_limit_and_order(self):
        """Test that no more than `limit` awaitables run at once and results keep input order."""
        running = []
        peak = []

        async def job(value: int) -> int:
            running.append(value)
            peak.append(len(running))
            await asyncio.sleep(0.01 * (5 - value))
            running.remove(value)
            return value * 10

        results = asyncio.run(gather_bounded([job(value) for value in range(5)], limit=2))

        assert results == [0, 10, 20, 30, 40]
        assert max(peak) == 2

    def test_return_exceptions(self):
        """Test that failures are returned in place when asked for."""

        async def fail():
            raise ValueError("bad")

        async def succeed():
            return "ok"

        results = asyncio.run(gather_bounded([succeed(), fail()], limit=0, return_exceptions=True))

        assert results[0] == "ok"
        assert isinstance(results[1], ValueError)
