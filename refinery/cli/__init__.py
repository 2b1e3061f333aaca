##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
The Refinery command-line interface.

Modules:
    argparse_main: Builds the main argument parser from every command.
    utils: Parsing of filter and sorter arguments and construction of the data provider.
    commands: One module per top-level command.
"""
