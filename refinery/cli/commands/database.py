##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
This module defines the `DatabaseCommand` class, which provides CLI subcommands
for setting up and inspecting the store behind Refinery.
"""

import logging
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser, Namespace
from typing import Any, Dict

from refinery.catalog.schema import TABLES, apply_schema
from refinery.cli.commands.command_entry_point import CommandEntryPoint
from refinery.data_provider import DataProvider
from refinery.display import display_info


LOG = logging.getLogger(__name__)


async def database_info(provider: DataProvider) -> Dict[str, Any]:
    """
    Collect the driver name, store version, location and catalog tables present.
    """
    driver = provider.driver
    info = {
        "driver": driver.get_name(),
        "version": await driver.get_version(),
    }
    path = getattr(driver, "path", None)
    if path is not None:
        info["path"] = path
    list_tables = getattr(driver, "list_tables", None)
    if list_tables is not None:
        present = set(await list_tables())
        info["catalog tables"] = ", ".join(table for table in TABLES if table in present) or "none"
    return info


class DatabaseCommand(CommandEntryPoint):
    """
    Handles `database` CLI commands.

    Methods:
        add_parser: Adds the `database` command and its subcommands to the CLI parser.
        process_command: Processes the CLI input and dispatches the appropriate action.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `database` command parser to the CLI argument parser.

        Parameters:
            subparsers: The subparsers object to which the `database` command parser will be added.
        """
        database: ArgumentParser = subparsers.add_parser(
            "database",
            help="Set up or inspect the store.",
            formatter_class=ArgumentDefaultsHelpFormatter,
        )
        database.set_defaults(func=self.process_command)
        database.add_argument("--database", type=str, default=None, help="Database path overriding the configured one.")
        database_commands = database.add_subparsers(dest="commands", required=True)

        database_commands.add_parser(
            "init",
            help="Create the catalog tables that do not exist yet.",
            formatter_class=ArgumentDefaultsHelpFormatter,
        )
        database_commands.add_parser(
            "info",
            help="Print information about the store.",
            formatter_class=ArgumentDefaultsHelpFormatter,
        )

    def process_command(self, args: Namespace):
        """
        Process `database` commands.

        Args:
            args: Parsed command-line arguments.
        """
        if args.commands == "init":
            self.run_with_provider(args, lambda provider: apply_schema(provider.driver))
            print("Catalog schema is up to date.")
        elif args.commands == "info":
            display_info("Refinery Store", self.run_with_provider(args, database_info))
