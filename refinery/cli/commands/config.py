##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
CLI command for managing Refinery configuration files.
"""

import logging
import os
from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser, Namespace

from refinery.cli.commands.command_entry_point import CommandEntryPoint
from refinery.config.config_filepaths import CONFIG_PATH_FILE, REFINERY_HOME
from refinery.config.configfile import create_default_config, default_config_info, load
from refinery.display import display_info
from refinery.utils import load_yaml


LOG = logging.getLogger(__name__)


def save_config_path(config_file: str):
    """
    Remember `config_file` as the active configuration in `config_path.txt`.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    config_file = os.path.abspath(os.path.expanduser(config_file))
    if not os.path.isfile(config_file):
        raise FileNotFoundError(f"Cannot set config path. File does not exist: '{config_file}'")
    load_yaml(config_file)
    os.makedirs(os.path.dirname(CONFIG_PATH_FILE), exist_ok=True)
    with open(CONFIG_PATH_FILE, "w") as f:
        f.write(config_file)
    LOG.info(f"Configuration path saved to '{CONFIG_PATH_FILE}'.")


class ConfigCommand(CommandEntryPoint):
    """
    CLI command group for managing Refinery configuration files.

    Methods:
        add_parser: Adds the `config` command and its subcommands to the CLI parser.
        process_command: Processes the CLI input and dispatches the appropriate action.
    """

    def add_parser(self, subparsers: ArgumentParser):
        """
        Add the `config` command parser to the CLI argument parser.

        Parameters:
            subparsers: The subparsers object to which the `config` command parser will be added.
        """
        rconfig: ArgumentParser = subparsers.add_parser(
            "config",
            help="Create, select or show the refinery configuration.",
            formatter_class=ArgumentDefaultsHelpFormatter,
        )
        rconfig.set_defaults(func=self.process_command)
        rconfig_subparsers = rconfig.add_subparsers(dest="commands", required=True)

        create = rconfig_subparsers.add_parser("create", help="Write the default configuration file.")
        create.add_argument(
            "--path",
            type=str,
            default=REFINERY_HOME,
            help="The directory to write app.yaml to. Default: %(default)s",
        )
        create.add_argument("--force", action="store_true", help="Overwrite an existing configuration file.")

        use = rconfig_subparsers.add_parser("use", help="Use a different configuration file.")
        use.add_argument("config_file", type=str, help="The path to the configuration file to use.")

        rconfig_subparsers.add_parser("show", help="Show where the configuration comes from and its values.")

    def process_command(self, args: Namespace):
        """
        Process `config` commands.

        Args:
            args: Parsed command-line arguments.
        """
        if args.commands == "create":
            config_file = create_default_config(args.path, force=args.force)
            print(f"Configuration file written to {config_file}.")
        elif args.commands == "use":
            save_config_path(args.config_file)
        elif args.commands == "show":
            display_info("Refinery Configuration", default_config_info())
            print("")
            print(load(getattr(args, "config", None)))
