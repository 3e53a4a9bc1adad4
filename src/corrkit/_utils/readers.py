"""
Configuration and file reading utilities.

This module provides utilities for reading JSON configuration files
shipped with the package (error messages, option aliases). All functions
include caching to avoid repeated file I/O.

Methods
-------
read_config
    Read and cache JSON configuration files from the package's config directory.

Examples
--------
>>> from corrkit._utils import read_config

>>> read_config("messages")["errors"]["unsupported_method_f"]
"Unsupported method '{}'. Choose from: {}."
"""

import json
import pathlib
from functools import lru_cache


@lru_cache(maxsize=2)
def read_config(name) -> dict:
    """
    Read and cache JSON configuration files.

    Parameters
    ----------
    name : str
        The name of the configuration file (without .json extension).
        File is located at `config/{name}.json` relative to the package root.

    Returns
    -------
    dict
        The parsed JSON content of the configuration file.

    Raises
    ------
    FileNotFoundError
        If the requested configuration file does not exist.

    Notes
    -----
    - The cache size is set to 2 because corrkit ships 2 configuration
      files (``messages`` and ``aliases``).
    """
    path = pathlib.Path(__file__).resolve().parent.parent / f"config/{name}.json"
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
