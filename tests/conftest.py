##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
This module contains pytest fixtures to be used throughout the entire test suite.
"""
import os
from glob import glob
from typing import Callable

import pytest
import yaml

from tests.fixture_types import FixtureCallable, FixtureStr


# pylint: disable=redefined-outer-name


#######################################
# Loading in Module Specific Fixtures #
#######################################

fixture_glob = os.path.join("tests", "fixtures", "**", "*.py")
pytest_plugins = [
    fixture_file.replace(os.sep, ".").replace(".py", "")
    for fixture_file in glob(fixture_glob, recursive=True)
    if not fixture_file.endswith("__init__.py")
]


#######################################
######### Fixture Definitions #########
#######################################


@pytest.fixture
def refinery_home(tmp_path, monkeypatch) -> FixtureStr:
    """
    Point the user home of every test at a temporary directory so that no test
    ever reads or writes the real `~/.refinery` directory.

    Args:
        tmp_path: PyTest fixture providing a temporary directory.
        monkeypatch: PyTest fixture used to patch module level paths.

    Returns:
        The temporary refinery home directory.
    """
    home = tmp_path / "home" / ".refinery"
    config_path_file = str(home / "config_path.txt")
    for module in ("refinery.config.config_filepaths", "refinery.config.configfile", "refinery.cli.commands.config"):
        monkeypatch.setattr(f"{module}.REFINERY_HOME", str(home))
        monkeypatch.setattr(f"{module}.CONFIG_PATH_FILE", config_path_file)
    return str(home)


@pytest.fixture
def write_yaml(tmp_path) -> FixtureCallable:
    """
    Write a dictionary to a YAML file under the test's temporary directory.

    Returns:
        A function taking a file name and the contents to write and returning
        the path of the written file.
    """

    def _write_yaml(filename: str, contents: dict) -> str:
        filepath = tmp_path / filename
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w") as yaml_file:
            yaml.safe_dump(contents, yaml_file)
        return str(filepath)

    return _write_yaml


@pytest.fixture
def write_csv_file(tmp_path) -> Callable[[str, str], str]:
    """
    Write raw CSV text to a file under the test's temporary directory.

    Returns:
        A function taking a file name and the CSV text and returning the file path.
    """

    def _write_csv_file(filename: str, text: str) -> str:
        filepath = tmp_path / filename
        filepath.write_text(text, encoding="utf-8")
        return str(filepath)

    return _write_csv_file
