##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
This module stores constants representing file paths that will be needed for
Refinery's configuration.
"""

import os


APP_FILENAME: str = "app.yaml"
USER_HOME: str = os.path.expanduser("~")
REFINERY_HOME: str = os.path.join(USER_HOME, ".refinery")
CONFIG_PATH_FILE: str = os.path.join(REFINERY_HOME, "config_path.txt")
