"""
Internal utilities for corrkit.

This module provides low-level utilities for data conversion, validation,
configuration access and small context managers. These are internal APIs
and may change without notice.

Methods
-------
convert_dataframe(data)
    Convert an input dataset to a pandas DataFrame.
convert_dict(dataset, data_name)
    Convert various sequence types to a dictionary representation.
convert_from_alias(arg, default_values, path)
    Convert a string alias into its canonical configuration value.
validate_string_flag(arg, supported_values, err_msg)
    Validate a string flag against a set of supported values.
validate_unique_column_names(dataset, err_msg)
    Validate that a DataFrame has unique column names.
validate_columns_exist(dataset, columns, data_name)
    Validate that requested columns are present.
validate_open_interval(value, bounds, err_msg)
    Validate that a number lies strictly inside an interval.
validate_natural_number(value, arg_name)
    Validate that a value is a positive integer.
temp_log_level(logger, level)
    Temporarily sets the logging level of a logger within a context.
temp_random_state(seed)
    Temporarily seeds NumPy's global random generator within a context.
read_config(name)
    Read and cache JSON configuration files.

Notes
-----
- These utilities are for internal use only
- Use the public API of :mod:`corrkit` for stable functionality
"""

from .conversion import convert_dataframe, convert_dict, convert_from_alias
from .helpers import temp_log_level, temp_random_state
from .readers import read_config
from .validation import (
    validate_columns_exist,
    validate_natural_number,
    validate_open_interval,
    validate_string_flag,
    validate_unique_column_names,
)

__all__ = [
    "convert_dataframe",
    "convert_dict",
    "convert_from_alias",
    "validate_string_flag",
    "validate_unique_column_names",
    "validate_columns_exist",
    "validate_open_interval",
    "validate_natural_number",
    "temp_log_level",
    "temp_random_state",
    "read_config",
]
