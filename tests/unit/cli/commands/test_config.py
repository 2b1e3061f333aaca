##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Tests for the `config.py` file of the `cli/` folder.
"""

import os
from argparse import _SubParsersAction

import pytest
from _pytest.capture import CaptureFixture

from refinery.cli.commands.config import ConfigCommand, save_config_path
from refinery.config.configfile import DEFAULT_CONFIG
from refinery.utils import load_yaml
from tests.fixture_types import FixtureCallable, FixtureStr


def test_add_parser_includes_all_subcommands(create_parser: FixtureCallable):
    """
    Verify that the `config` command parser includes the `create`, `use` and `show` subcommands.

    Args:
        create_parser: A fixture to help create a parser.
    """
    config_subparser = None
    parser = create_parser(ConfigCommand())
    for action in parser._subparsers._actions:
        if isinstance(action, _SubParsersAction):
            config_subparser = action.choices.get("config")
            break

    assert config_subparser is not None, "Config subparser not found"

    help_text = config_subparser.format_help()
    for subcommand in ("create", "use", "show"):
        assert subcommand in help_text


def test_config_create(run_cli: FixtureCallable, tmp_path, capsys: CaptureFixture):
    """
    Test that `config create` writes the default configuration.

    Args:
        run_cli: Runs a `refinery` command in-process.
        tmp_path: PyTest fixture providing a temporary directory.
        capsys: PyTest capsys fixture.
    """
    target = str(tmp_path / "settings")

    run_cli(["config", "create", "--path", target])

    assert load_yaml(os.path.join(target, "app.yaml")) == DEFAULT_CONFIG
    assert "Configuration file written to" in capsys.readouterr().out
    with pytest.raises(FileExistsError):
        run_cli(["config", "create", "--path", target])
    run_cli(["config", "create", "--path", target, "--force"])


def test_config_create_defaults_to_refinery_home(run_cli: FixtureCallable, refinery_home: FixtureStr):
    """
    Test that `config create` writes to the refinery home by default.

    Args:
        run_cli: Runs a `refinery` command in-process.
        refinery_home: The temporary refinery home directory.
    """
    run_cli(["config", "create"])
    assert os.path.isfile(os.path.join(refinery_home, "app.yaml"))


def test_config_use(run_cli: FixtureCallable, refinery_home: FixtureStr, write_yaml: FixtureCallable):
    """
    Test that `config use` records the chosen file.

    Args:
        run_cli: Runs a `refinery` command in-process.
        refinery_home: The temporary refinery home directory.
        write_yaml: Writes a YAML file in the temporary directory.
    """
    chosen = write_yaml("chosen/app.yaml", {"logging": {"level": "DEBUG"}})

    run_cli(["config", "use", chosen])

    with open(os.path.join(refinery_home, "config_path.txt")) as path_file:
        assert path_file.read() == chosen


def test_save_config_path_missing_file(refinery_home: FixtureStr, tmp_path):
    """
    Test that a missing file cannot be chosen.

    Args:
        refinery_home: The temporary refinery home directory.
        tmp_path: PyTest fixture providing a temporary directory.
    """
    with pytest.raises(FileNotFoundError, match="File does not exist"):
        save_config_path(str(tmp_path / "missing.yaml"))
    assert not os.path.exists(os.path.join(refinery_home, "config_path.txt"))


def test_config_show(run_cli: FixtureCallable, write_yaml: FixtureCallable, capsys: CaptureFixture):
    """
    Test that `config show` prints the locations and the loaded settings.

    Args:
        run_cli: Runs a `refinery` command in-process.
        write_yaml: Writes a YAML file in the temporary directory.
        capsys: PyTest capsys fixture.
    """
    app_path = write_yaml("shown/app.yaml", {"store": {"path": "shown.db"}})

    run_cli(["--config", app_path, "config", "show"])

    output = capsys.readouterr().out
    assert "Refinery Configuration" in output
    assert "refinery_home" in output
    assert "path: 'shown.db'" in output
