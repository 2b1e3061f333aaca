##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Main entry point into Refinery's codebase.
"""

import logging
import sys
import traceback

from refinery.cli.argparse_main import build_main_parser
from refinery.config.configfile import load
from refinery.log_formatter import setup_logging


LOG = logging.getLogger("refinery")


def main():
    """
    Entry point for the Refinery command-line interface (CLI) operations.

    This function sets up the argument parser, reads the configuration for the
    logging defaults, initializes logging and runs the selected command. Any
    exception raised by the command is logged and turns into exit code 1.
    """
    parser = build_main_parser()
    if len(sys.argv) == 1:
        parser.print_help(sys.stdout)
        return 1
    args = parser.parse_args()

    try:
        logging_config = load(args.config).logging
    except Exception as excpt:  # pylint: disable=broad-except
        setup_logging(logger=LOG, log_level=(args.level or "INFO").upper(), colors=True)
        LOG.error(f"Could not load the configuration: {excpt}")
        sys.exit(1)

    setup_logging(logger=LOG, log_level=(args.level or logging_config.level).upper(), colors=logging_config.colors)

    try:
        args.func(args)
        # pylint complains that this exception is too broad - being at the literal top of the program stack, it's ok.
    except Exception as excpt:  # pylint: disable=broad-except
        LOG.debug(traceback.format_exc())
        LOG.error(str(excpt))
        sys.exit(1)

    sys.exit()


if __name__ == "__main__":
    main()
