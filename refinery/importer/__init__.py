##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Tabular import and export of resources.

Submodules:
    models: Descriptors, parsed rows and import reports.
    pipeline: The row-by-row import state machine.
    error_classifier: Human readable messages for failed rows.
    tabular: CSV and Excel reading and writing.
    exporter: Page-through export of a resource to CSV or Excel.
"""
