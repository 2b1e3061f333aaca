##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Main CLI parser setup for the Refinery command-line interface.

This module defines the primary argument parser for the `refinery` CLI tool,
including custom error handling and integration of all available subcommands.
"""

import sys
from argparse import ArgumentParser, RawDescriptionHelpFormatter

from refinery import VERSION
from refinery.cli.commands import ALL_COMMANDS


DESCRIPTION = """refinery: list, import and export the records of a relational content catalog.

Filters, sorters and pagination are translated into store queries; many-to-many
filters are resolved through junction tables; CSV and Excel imports keep junction tables in sync."""


class HelpParser(ArgumentParser):
    """
    This class overrides the error message of the argument parser to
    print the help message when an error happens.

    Methods:
        error: Override the error message of the `ArgumentParser` class.
    """

    def error(self, message: str):
        """
        Override the error message of the `ArgumentParser` class.

        Args:
            message: The error message to log.
        """
        sys.stderr.write(f"error: {message}\n")
        self.print_help()
        sys.exit(2)


def build_main_parser() -> ArgumentParser:
    """
    Set up the command-line argument parser for the Refinery package.

    Returns:
        An `ArgumentParser` object with every command defined in Refinery's codebase.
    """
    parser = HelpParser(
        prog="refinery",
        description=DESCRIPTION,
        formatter_class=RawDescriptionHelpFormatter,
        epilog="See refinery <command> --help for more info",
    )
    parser.add_argument("-v", "--version", action="version", version=VERSION)
    parser.add_argument(
        "-lvl",
        "--level",
        type=str,
        default=None,
        help="Set log level: DEBUG, INFO, WARNING, ERROR [Default: logging.level from app.yaml, else INFO]",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to an app.yaml file (or the directory holding it) to use instead of the default search.",
    )
    subparsers = parser.add_subparsers(dest="subparsers", required=True)

    for command in ALL_COMMANDS:
        command.add_parser(subparsers)

    return parser
