##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
The `abstracts` package provides ABC classes that can be used throughout
Refinery's codebase.

Modules:
    factory: Contains `RefineryBaseFactory`, used to manage pluggable components in Refinery.
"""

from refinery.abstracts.factory import RefineryBaseFactory


__all__ = ["RefineryBaseFactory"]
