##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
The prompt catalog: its tables and the resources built on them.
"""
from refinery.catalog.resources import RESOURCES, Resource, get_resource
from refinery.catalog.schema import SCHEMA_SQL, TABLES, apply_schema


__all__ = ["RESOURCES", "Resource", "get_resource", "SCHEMA_SQL", "TABLES", "apply_schema"]
