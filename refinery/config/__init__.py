##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
Used to store the application configuration.

Modules:
    config_filepaths.py: Constants for the locations Refinery reads its configuration from.
    configfile.py: Locates, loads and defaults the `app.yaml` configuration file.
"""
from copy import copy
from types import SimpleNamespace
from typing import Dict, List, Optional

from refinery.utils import nested_dict_to_namespaces


CONFIG_SECTIONS: List[str] = ["store", "import", "logging"]


class Config:  # pylint: disable=R0903
    """
    Stores every Refinery setting in one place, whichever way it was loaded.

    `import` is a keyword, so that section is exposed as `import_`.

    Attributes:
        store (Optional[SimpleNamespace]): Store driver settings (`driver`, `path`, `timeout`).
        import_ (Optional[SimpleNamespace]): Import settings (`max_parallel_files`,
            `max_reported_errors`, `max_reported_missing_ids`).
        logging (Optional[SimpleNamespace]): Logging settings (`level`, `colors`).

    Methods:
        load_app_into_namespaces: Converts the configuration dictionary into namespaces.
    """

    def __init__(self, app_dict: Dict):
        self.store: Optional[SimpleNamespace] = None
        self.import_: Optional[SimpleNamespace] = None
        self.logging: Optional[SimpleNamespace] = None
        self.load_app_into_namespaces(app_dict)

    def __copy__(self) -> "Config":
        cls = self.__class__
        result = cls.__new__(cls)
        result.__dict__.update({name: copy(value) for name, value in self.__dict__.items()})
        return result

    def __str__(self) -> str:
        formatted_str = "config:"
        for name in CONFIG_SECTIONS:
            attr = getattr(self, self._attribute_name(name))
            if attr is not None:
                items = (f"    {k}: {v!r}" for k, v in attr.__dict__.items())
                joined_items = "\n".join(items)
                formatted_str += f"\n  {name}:\n{joined_items}"
            else:
                formatted_str += f"\n  {name}:\n    None"
        return formatted_str

    @staticmethod
    def _attribute_name(section: str) -> str:
        return "import_" if section == "import" else section

    def load_app_into_namespaces(self, app_dict: Dict):
        """
        Converts the provided application dictionary into namespaces and assigns them
        to the Config instance's attributes.

        Args:
            app_dict: A dictionary containing configuration data for the application.
        """
        for section in CONFIG_SECTIONS:
            try:
                setattr(self, self._attribute_name(section), nested_dict_to_namespaces(app_dict[section]))
            except KeyError:
                # The sections are optional
                pass
