##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
This module locates, reads and defaults Refinery's application configuration
file (`app.yaml`).
"""
import logging
import os
from typing import Dict, Optional

import yaml

from refinery.config import Config
from refinery.config.config_filepaths import APP_FILENAME, CONFIG_PATH_FILE, REFINERY_HOME
from refinery.utils import fill_defaults, load_yaml


LOG: logging.Logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict = {
    "store": {
        "driver": "sqlite",
        "path": os.path.join(REFINERY_HOME, "catalog.db"),
        "timeout": 30,
    },
    "import": {
        "max_parallel_files": 5,
        "max_reported_errors": 10,
        "max_reported_missing_ids": 5,
    },
    "logging": {
        "level": "INFO",
        "colors": True,
    },
}


def load_config(filepath: str) -> Optional[Dict]:
    """
    Reads a Refinery YAML configuration file and returns its contents as a dictionary.

    Args:
        filepath: The path to the YAML configuration file.

    Returns:
        A dictionary containing the contents of the YAML file or None if file doesn't exist.
    """
    if not os.path.isfile(filepath):
        LOG.info(f"No app config file at {filepath}")
        return None
    LOG.debug(f"Reading app config from file {filepath}")
    return load_yaml(filepath) or {}


def find_config_file(path: Optional[str] = None) -> Optional[str]:
    """
    Locate the Refinery application configuration file (`app.yaml`).

    If `path` is given it may name the file itself or the directory holding it, and
    nothing else is searched. Otherwise the fallback sequence is:
      1. `app.yaml` in the current working directory.
      2. The file named in `CONFIG_PATH_FILE`, if it exists.
      3. `app.yaml` in the `REFINERY_HOME` directory.

    Args:
        path: A specific file or directory to look for `app.yaml` in.

    Returns:
        The full path to the `app.yaml` file if found, otherwise `None`.
    """
    if path is None:
        local_app = os.path.join(os.getcwd(), APP_FILENAME)
        if os.path.isfile(local_app):
            return local_app

        if os.path.isfile(CONFIG_PATH_FILE):
            with open(CONFIG_PATH_FILE, "r") as f:
                config_path = f.read().strip()
            if os.path.isfile(config_path):
                return config_path

        path_app = os.path.join(REFINERY_HOME, APP_FILENAME)
        if os.path.isfile(path_app):
            return path_app

        return None

    if os.path.isfile(path):
        return path

    app_path = os.path.join(path, APP_FILENAME)
    if os.path.exists(app_path):
        return app_path

    return None


def get_config(path: Optional[str] = None) -> Dict:
    """
    Loads the Refinery configuration and fills in every missing setting with its default.

    A missing configuration file is not an error: the built-in defaults are used.

    Args:
        path: A file or directory to read the configuration from. If `None`, the
            default search locations are used.

    Returns:
        A dictionary containing all the configuration data.

    Raises:
        ValueError: If `path` was given explicitly and holds no configuration file.
    """
    filepath = find_config_file(path)
    if filepath is None:
        if path is not None:
            raise ValueError(f"Cannot find a refinery config file at '{path}'.")
        LOG.debug("No app config file found; using the default configuration.")
        return fill_defaults({}, DEFAULT_CONFIG)
    return fill_defaults(load_config(filepath) or {}, DEFAULT_CONFIG)


def load(path: Optional[str] = None) -> Config:
    """Return the configuration as a `Config` object."""
    return Config(get_config(path))


def create_default_config(directory: str = REFINERY_HOME, force: bool = False) -> str:
    """
    Write the default configuration to `<directory>/app.yaml`.

    Args:
        directory: The directory to write to. Created if needed.
        force: Overwrite an existing file.

    Returns:
        The path of the configuration file.

    Raises:
        FileExistsError: If the file exists and `force` is not set.
    """
    config_file = os.path.abspath(os.path.join(os.path.expanduser(directory), APP_FILENAME))
    if os.path.isfile(config_file) and not force:
        raise FileExistsError(f"A config file already exists at '{config_file}'. Use --force to overwrite it.")
    os.makedirs(os.path.dirname(config_file), exist_ok=True)
    with open(config_file, "w") as f:
        yaml.safe_dump(DEFAULT_CONFIG, f, sort_keys=False)
    LOG.info(f"Configuration file created at '{config_file}'.")
    return config_file


def default_config_info() -> Dict:
    """
    Returns information about Refinery's default configurations.

    Returns:
        A dictionary with the `config_file` in use (or None), the `refinery_home`
            directory and whether it exists (`refinery_home_exists`).
    """
    return {
        "config_file": find_config_file(),
        "refinery_home": REFINERY_HOME,
        "refinery_home_exists": os.path.exists(REFINERY_HOME),
    }
