##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Refinery CLI Commands Package.

Each module holds one top-level command built on the `CommandEntryPoint` interface.

Modules:
    command_entry_point: Defines the abstract base class `CommandEntryPoint` for all CLI commands.
    config: Implements the `config` command for managing configuration files.
    database: Implements the `database` command for creating and inspecting the store.
    export: Implements the `export` command for CSV and Excel exports and import templates.
    import_data: Implements the `import` command for CSV and Excel imports.
    query: Implements the `query` command for listing records.
"""

from refinery.cli.commands.config import ConfigCommand
from refinery.cli.commands.database import DatabaseCommand
from refinery.cli.commands.export import ExportCommand
from refinery.cli.commands.import_data import ImportCommand
from refinery.cli.commands.query import QueryCommand


# Keep these in alphabetical order
ALL_COMMANDS = [
    ConfigCommand(),
    DatabaseCommand(),
    ExportCommand(),
    ImportCommand(),
    QueryCommand(),
]
