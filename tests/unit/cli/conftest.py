##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Fixtures for files in this `cli/` test directory.
"""

from argparse import ArgumentParser
from typing import Any, List

import pytest

from refinery.cli.argparse_main import build_main_parser
from refinery.cli.commands.command_entry_point import CommandEntryPoint
from tests.fixture_types import FixtureCallable, FixtureStr


# pylint: disable=redefined-outer-name


@pytest.fixture
def create_parser() -> FixtureCallable:
    """
    A fixture to help create a parser for any command.

    Returns:
        A function that creates a parser.
    """

    def _create_parser(cmd: CommandEntryPoint) -> ArgumentParser:
        """
        Returns an `ArgumentParser` configured with the `cmd` command and its subcommands.

        Returns:
            Parser with the `cmd` command and its subcommands registered.
        """
        parser = ArgumentParser()
        subparsers = parser.add_subparsers(dest="main_command")
        cmd.add_parser(subparsers)
        return parser

    return _create_parser


@pytest.fixture
def cli_workdir(tmp_path, monkeypatch, refinery_home: FixtureStr) -> FixtureStr:
    """
    Run the CLI from an empty directory with an empty refinery home, so that only
    the built-in default configuration applies.

    Args:
        tmp_path: PyTest fixture providing a temporary directory.
        monkeypatch: PyTest fixture used to change directories.
        refinery_home: The temporary refinery home directory.

    Returns:
        The working directory.
    """
    workdir = tmp_path / "cli"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return str(workdir)


@pytest.fixture
def run_cli(cli_workdir: FixtureStr) -> FixtureCallable:
    """
    Parse command-line arguments with the real `refinery` parser and run the
    selected command in-process. Logging is left as pytest configured it.

    Args:
        cli_workdir: The working directory the commands run in.

    Returns:
        A function taking the argument list and returning the command's result.
    """

    def _run_cli(argv: List[str]) -> Any:
        args = build_main_parser().parse_args(argv)
        return args.func(args)

    return _run_cli
