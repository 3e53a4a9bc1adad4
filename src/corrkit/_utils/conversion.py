"""
Conversion utilities for data transformation and standardization.

This module provides low-level conversion functions used to normalise
user input before a correlation analysis: heterogeneous tabular inputs are
turned into pandas DataFrames, and string options are mapped from their
aliases onto canonical names.

Methods
-------
convert_dataframe(data)
    Convert an input data to a pandas DataFrame (column-based).
convert_dict(dataset, data_name)
    Convert various sequence types to a dictionary of columns.
convert_from_alias(arg, default_values, path)
    Convert a string alias into its canonical configuration value.

Notes
-----
- Nested sequences are interpreted as columns, not rows.
- Functions return new objects rather than modifying their input in place.

Examples
--------
>>> from corrkit._utils import convert_dataframe

>>> convert_dataframe([[1, 2, 3], [0.1, 2.2, 1.2]])
   0    1
0  1  0.1
1  2  2.2
2  3  1.2
"""

from collections import deque
from typing import Iterable, Mapping, Sequence, Union

import numpy as np
import pandas as pd

from .readers import read_config


def convert_dataframe(data: Union[Sequence[Sequence], Mapping]) -> pd.DataFrame:
    """
    Convert an input data to a pandas DataFrame.

    DataFrames are copied, mappings are converted column by column and any
    other sequence of sequences is interpreted column-wise (each nested
    sequence becomes one column).

    Parameters
    ----------
    data : Sequence[Sequence] or Mapping or pandas.DataFrame
        The data to convert.

    Returns
    -------
    pandas.DataFrame
        Converted data.

    Notes
    -----
    **Column-based Processing:**

    Input: [[1, 0, 1], [9, 1, 2]]
    Becomes DataFrame:
        0  1
    0  1  9
    1  0  1
    2  1  2
    """
    if isinstance(data, pd.DataFrame):
        return data.copy()
    dictionary = convert_dict(data)
    return pd.DataFrame(dictionary)


def convert_dict(
    dataset: Union[Sequence[Sequence], Mapping], data_name: str = "data"
) -> dict:
    """
    Convert various sequence types to a dictionary of columns.

    Parameters
    ----------
    dataset : numpy.ndarray, list, tuple, collections.deque, dict,
              pandas.Series or pandas.DataFrame
        Input data to convert.
        - None: returns empty dictionary
        - 1D sequences: converted to {name: sequence}
        - 2D sequences: converted to {index: column} for each nested sequence
        - Dict-like objects and DataFrames: {key: column}
    data_name : str, default='data'
        Name of the input used in error messages.

    Returns
    -------
    dict
        Dictionary representation of the input data.

    Raises
    ------
    ValueError
        If a DataFrame input has duplicate column names.

    Examples
    --------
    >>> convert_dict(None)
    {}
    >>> convert_dict([1, 2, 3])
    {0: [1, 2, 3]}
    >>> convert_dict([[1, 2], [3, 4]])
    {0: [1, 2], 1: [3, 4]}
    """
    if dataset is None:
        return {}
    try:
        seq_type = _extract_array_type(dataset)
    except IndexError:
        return {}

    if seq_type == "1dimensional":
        name = 0
        if isinstance(dataset, pd.Series) and dataset.name is not None:
            name = dataset.name
        return {name: list(dataset)}

    if isinstance(dataset, Mapping):
        return dict(dataset)

    dictionary = {}
    if seq_type == "iterable":
        for key, column in enumerate(dataset):
            dictionary[key] = column
    elif seq_type == "iterable_by_key":
        if len(set(dataset)) != len(list(dataset)):
            raise ValueError(
                read_config("messages")["errors"]["duplicate_keys_f"].format(
                    data_name, data_name
                )
            )
        for key in dataset:
            dictionary[key] = dataset[key]
    return dictionary


def convert_from_alias(arg: str, default_values: Iterable = None, path: str = "method"):
    """
    Convert a string alias into its canonical (default) configuration value.

    Parameters
    ----------
    arg : str
        Input string to convert. The lookup is case-insensitive.
    default_values : Iterable, optional
        Subset of canonical values to restrict the search domain.
        If ``None`` (default), lookup is performed across the entire
        alias set for the specified path.
    path : str, default='method'
        Section name in the alias configuration, e.g. ``"method"``,
        ``"alternative"`` or ``"p_adjust"``.

    Returns
    -------
    str
        Canonical name corresponding to the alias.
        If no matching alias is found, returns the input argument unchanged.

    Raises
    ------
    KeyError
        If the specified alias section ``path`` does not exist.

    Examples
    --------
    >>> convert_from_alias("percbend")
    'percentage_bend'
    >>> convert_from_alias("BH", path="p_adjust")
    'fdr_bh'
    """
    alias_dict = read_config("aliases")

    if path not in alias_dict:
        raise KeyError(f"Aliases path '{path}' not found in configuration.")

    arg_lower = str(arg).lower()
    candidates = alias_dict[path] if default_values is None else default_values
    for default_value in candidates:
        if arg_lower in alias_dict[path].get(default_value, ()):
            return default_value
    return arg


def _extract_array_type(array):
    supported_inputs = {
        "iterable": (list, tuple, np.ndarray, deque, pd.Series),
        "iterable_by_key": (pd.DataFrame, Mapping),
    }

    def is_dim1(x):
        return not isinstance(
            x, supported_inputs["iterable"] + supported_inputs["iterable_by_key"]
        )

    if isinstance(array, supported_inputs["iterable_by_key"]):
        first_obj = array[list(array)[0]]
        return "1dimensional" if is_dim1(first_obj) else "iterable_by_key"
    if isinstance(array, pd.Series):
        return "1dimensional"
    if isinstance(array, supported_inputs["iterable"]):
        return "1dimensional" if is_dim1(array[0]) else "iterable"
    return "1dimensional"
