##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Refinery: a generic resource data-access layer for relational content catalogs.

This package turns backend-agnostic list/create/update/delete descriptors into
primitive store operations, resolves many-to-many filters through junction tables,
executes bulk mutations with per-record outcomes and imports tabular data while
keeping junction tables in sync.
"""

import os


__version__ = "0.4.0"
VERSION = __version__
PATH_TO_PROJ = os.path.join(os.path.dirname(__file__), "")
