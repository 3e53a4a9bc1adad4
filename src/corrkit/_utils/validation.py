"""
Data validation and option checking utilities.

This module provides functions for validating user-supplied options and
the structure of input datasets. Every check raises ``ValueError`` with a
caller-provided message, so that error texts stay centralised in the
``messages`` configuration file.

Methods
-------
validate_string_flag(arg, supported_values, err_msg)
    Validate that a string flag is among a set of supported values.
validate_unique_column_names(dataset, err_msg)
    Ensure that a ``pandas.DataFrame`` has unique column labels.
validate_columns_exist(dataset, columns, data_name)
    Ensure that every requested column is present in a DataFrame.
validate_open_interval(value, bounds, err_msg)
    Ensure that a number lies strictly inside ``bounds``.
validate_natural_number(value, arg_name)
    Ensure that a value is a positive integer.

Examples
--------
>>> from corrkit._utils import validate_string_flag
>>> validate_string_flag("kendal", {"pearson", "kendall"}, "Unsupported method")
Traceback (most recent call last):
    ...
ValueError: Unsupported method
"""

from numbers import Number
from typing import Iterable, Sequence

import pandas as pd

from corrkit.types import NaturalNumber

from .readers import read_config


def validate_string_flag(
    arg: str, supported_values: Iterable[str], err_msg: str
) -> None:
    """
    Validate a string flag against a set of supported values.

    Parameters
    ----------
    arg : str
        The string flag to validate.
    supported_values : Iterable[str]
        An iterable containing all supported flag values.
    err_msg : str
        The error message used in the raised ``ValueError`` if validation fails.

    Raises
    ------
    ValueError
        If `arg` is not found in `supported_values`.

    Examples
    --------
    >>> validate_string_flag("A", {"A", "B", "C"}, "Method 'A' not supported")
    >>> validate_string_flag("D", {"A", "B", "C"}, "Method 'D' not supported")
    Traceback (most recent call last):
        ...
    ValueError: Method 'D' not supported
    """
    if arg not in supported_values:
        raise ValueError(err_msg)


def validate_unique_column_names(dataset: pd.DataFrame, err_msg: str) -> None:
    """
    Validate that a DataFrame has unique column names.

    Parameters
    ----------
    dataset : pandas.DataFrame
        Input DataFrame whose column labels are to be validated.
    err_msg : str
        Error message used in the raised ``ValueError`` if validation fails.

    Raises
    ------
    ValueError
        If the DataFrame contains duplicate column names.
    """
    columns = dataset.columns
    if len(columns) != len(set(list(columns))):
        raise ValueError(err_msg)


def validate_columns_exist(
    dataset: pd.DataFrame, columns: Sequence, data_name: str = "data"
) -> None:
    """
    Validate that all ``columns`` are present in ``dataset``.

    Parameters
    ----------
    dataset : pandas.DataFrame
        DataFrame to look the columns up in.
    columns : Sequence
        Requested column labels. ``None`` is accepted and means "nothing
        requested".
    data_name : str, default='data'
        Name of the dataset used in the error message.

    Raises
    ------
    ValueError
        If at least one requested column is missing.

    Examples
    --------
    >>> df = pd.DataFrame({"a": [1, 2], "b": [3, 4]})
    >>> validate_columns_exist(df, ["a", "c"])
    Traceback (most recent call last):
        ...
    ValueError: Column(s) ['c'] not found in 'data'.
    """
    if columns is None:
        return
    missing = [col for col in columns if col not in dataset.columns]
    if missing:
        raise ValueError(
            read_config("messages")["errors"]["missing_columns_f"].format(
                missing, data_name
            )
        )


def validate_open_interval(
    value: Number, bounds: tuple[Number, Number], err_msg: str
) -> None:
    """
    Validate that ``value`` is a number strictly inside ``bounds``.

    Parameters
    ----------
    value : Number
        Value to check.
    bounds : tuple of Number
        ``(lower, upper)``, both excluded.
    err_msg : str
        Error message used in the raised ``ValueError``.

    Raises
    ------
    ValueError
        If ``value`` is not a number or lies outside the open interval.
    """
    if isinstance(value, bool) or not isinstance(value, Number):
        raise ValueError(err_msg)
    if not bounds[0] < value < bounds[1]:
        raise ValueError(err_msg)


def validate_natural_number(value, arg_name: str) -> None:
    """
    Validate that ``value`` is a natural number (positive integer).

    Raises
    ------
    ValueError
        If ``value`` is not a :class:`corrkit.types.NaturalNumber`.
    """
    if isinstance(value, bool) or not isinstance(value, NaturalNumber):
        raise ValueError(
            read_config("messages")["errors"]["is_not_positive_integer_f"].format(
                arg_name, value
            )
        )
