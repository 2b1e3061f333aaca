##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Tests for the configfile.py module.
"""

import os

import pytest
import yaml

from refinery.config.configfile import (
    DEFAULT_CONFIG,
    create_default_config,
    default_config_info,
    find_config_file,
    get_config,
    load,
    load_config,
)
from tests.fixture_types import FixtureCallable, FixtureStr


# pylint: disable=redefined-outer-name


@pytest.fixture
def workdir(tmp_path, monkeypatch, refinery_home: FixtureStr) -> FixtureStr:
    """
    Move into an empty working directory with an empty refinery home.

    Args:
        tmp_path: PyTest fixture providing a temporary directory.
        monkeypatch: PyTest fixture used to change directories.
        refinery_home: The temporary refinery home directory.

    Returns:
        The working directory.
    """
    cwd = tmp_path / "work"
    cwd.mkdir()
    monkeypatch.chdir(cwd)
    return str(cwd)


def test_load_config_missing_file(tmp_path):
    """
    Test that a missing file loads as None.

    Args:
        tmp_path: PyTest fixture providing a temporary directory.
    """
    assert load_config(str(tmp_path / "app.yaml")) is None


def test_load_config_empty_file(tmp_path):
    """
    Test that an empty file loads as an empty dictionary.

    Args:
        tmp_path: PyTest fixture providing a temporary directory.
    """
    filepath = tmp_path / "app.yaml"
    filepath.write_text("")
    assert load_config(str(filepath)) == {}


class TestFindConfigFile:
    """Tests for the search order of `find_config_file`."""

    def test_nothing_found(self, workdir: FixtureStr):
        """
        Test that no file anywhere gives None.

        Args:
            workdir: An empty working directory.
        """
        assert find_config_file() is None

    def test_working_directory_first(self, workdir: FixtureStr, refinery_home: FixtureStr):
        """
        Test that `app.yaml` in the working directory wins over the refinery home.

        Args:
            workdir: An empty working directory.
            refinery_home: The temporary refinery home directory.
        """
        os.makedirs(refinery_home)
        for directory in (workdir, refinery_home):
            with open(os.path.join(directory, "app.yaml"), "w"):
                pass
        assert find_config_file() == os.path.join(workdir, "app.yaml")

    def test_config_path_file(self, workdir: FixtureStr, refinery_home: FixtureStr, write_yaml: FixtureCallable):
        """
        Test that the file named in `config_path.txt` is used.

        Args:
            workdir: An empty working directory.
            refinery_home: The temporary refinery home directory.
            write_yaml: Writes a YAML file in the temporary directory.
        """
        custom = write_yaml("custom/settings.yaml", {"logging": {"level": "DEBUG"}})
        os.makedirs(refinery_home)
        with open(os.path.join(refinery_home, "config_path.txt"), "w") as path_file:
            path_file.write(f"{custom}\n")

        assert find_config_file() == custom

    def test_refinery_home(self, workdir: FixtureStr, refinery_home: FixtureStr):
        """
        Test that `app.yaml` in the refinery home is found last.

        Args:
            workdir: An empty working directory.
            refinery_home: The temporary refinery home directory.
        """
        os.makedirs(refinery_home)
        app_path = os.path.join(refinery_home, "app.yaml")
        with open(app_path, "w"):
            pass
        assert find_config_file() == app_path

    def test_explicit_file_and_directory(self, write_yaml: FixtureCallable):
        """
        Test that an explicit path may name the file or its directory.

        Args:
            write_yaml: Writes a YAML file in the temporary directory.
        """
        app_path = write_yaml("explicit/app.yaml", {})
        assert find_config_file(app_path) == app_path
        assert find_config_file(os.path.dirname(app_path)) == app_path
        assert find_config_file(os.path.join(os.path.dirname(app_path), "missing")) is None


class TestGetConfig:
    """Tests for loading and defaulting the configuration."""

    def test_defaults_without_file(self, workdir: FixtureStr):
        """
        Test that the defaults are used when there is no file.

        Args:
            workdir: An empty working directory.
        """
        assert get_config() == DEFAULT_CONFIG

    def test_partial_file_is_filled(self, write_yaml: FixtureCallable):
        """
        Test that missing settings are filled in and given ones are kept.

        Args:
            write_yaml: Writes a YAML file in the temporary directory.
        """
        app_path = write_yaml("app.yaml", {"store": {"path": "prompts.db"}, "logging": {"colors": False}})

        config = get_config(app_path)

        assert config["store"] == {"driver": "sqlite", "path": "prompts.db", "timeout": 30}
        assert config["logging"] == {"level": "INFO", "colors": False}
        assert config["import"] == DEFAULT_CONFIG["import"]

    def test_explicit_missing_path_raises(self, tmp_path):
        """
        Test that an explicit path without a config file is an error.

        Args:
            tmp_path: PyTest fixture providing a temporary directory.
        """
        with pytest.raises(ValueError, match="Cannot find a refinery config file"):
            get_config(str(tmp_path / "nowhere"))

    def test_load_returns_config_object(self, write_yaml: FixtureCallable):
        """
        Test that `load` exposes every section as a namespace.

        Args:
            write_yaml: Writes a YAML file in the temporary directory.
        """
        config = load(write_yaml("app.yaml", {"import": {"max_parallel_files": 2}}))

        assert config.store.driver == "sqlite"
        assert config.import_.max_parallel_files == 2
        assert config.import_.max_reported_errors == 10
        assert config.logging.level == "INFO"


class TestCreateDefaultConfig:
    """Tests for writing the default configuration."""

    def test_create(self, tmp_path):
        """
        Test that the defaults are written to `app.yaml` in a new directory.

        Args:
            tmp_path: PyTest fixture providing a temporary directory.
        """
        config_file = create_default_config(str(tmp_path / "new"))

        assert config_file == str(tmp_path / "new" / "app.yaml")
        with open(config_file) as app_file:
            assert yaml.safe_load(app_file) == DEFAULT_CONFIG

    def test_existing_file_needs_force(self, tmp_path):
        """
        Test that an existing file is only overwritten with `force`.

        Args:
            tmp_path: PyTest fixture providing a temporary directory.
        """
        app_file = tmp_path / "app.yaml"
        app_file.write_text("logging: {level: DEBUG}\n")

        with pytest.raises(FileExistsError, match="Use --force"):
            create_default_config(str(tmp_path))
        assert "DEBUG" in app_file.read_text()

        create_default_config(str(tmp_path), force=True)
        assert "DEBUG" not in app_file.read_text()


def test_default_config_info(workdir: FixtureStr, refinery_home: FixtureStr):
    """
    Test the reported default locations.

    Args:
        workdir: An empty working directory.
        refinery_home: The temporary refinery home directory.
    """
    assert default_config_info() == {
        "config_file": None,
        "refinery_home": refinery_home,
        "refinery_home_exists": False,
    }
