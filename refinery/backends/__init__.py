##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Store driver infrastructure for the Refinery application.

The `backends` package holds the narrow primitive interface the data layer drives
(`StoreDriver`: select, insert, update and delete by table name and column
predicates), the primitive value types passed across it, and the concrete drivers.

Subpackages:
    sqlite: SQLite-based driver, including connection handling and schema introspection.

Modules:
    backend_factory: Contains `DriverFactory`, used to dynamically select and instantiate a driver.
    primitives: Primitive operation values (`PrimitiveSelect`, `ColumnPredicate`, ...).
    store_base: Defines the abstract `StoreDriver` base class.
    utils: Serialization helpers shared by drivers.
"""
