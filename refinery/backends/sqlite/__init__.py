##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
SQLite-based store driver for the Refinery application.

Modules:
    sqlite_connection: Provides a context-managed SQLite connection with safe configuration.
    sqlite_driver: Implements the `StoreDriver` interface using SQLite.
    sqlite_schema: Table and foreign key introspection used to resolve embedded relations.
"""
