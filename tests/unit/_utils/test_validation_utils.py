import pytest
import pandas as pd
import numpy as np

from corrkit._utils import (
    validate_string_flag, validate_unique_column_names,
    validate_columns_exist, validate_open_interval,
    validate_natural_number)


# tests for validate_string_flag

def test_validate_string_flag_positive_case():
    validate_string_flag(arg="A", supported_values=["A", "B", "C"],
                         err_msg="my_error_message")

def test_validate_string_flag_negative_case():
    with pytest.raises(ValueError, match="my_error_message"):
        validate_string_flag(arg="D", supported_values=["A", "B", "C"],
                             err_msg="my_error_message")

# tests for validate_unique_column_names

def test_validate_unique_column_names_positive_case():
    df = pd.DataFrame([[1, 2, 3], [1, 2, 3]], columns=["col1", "col2", "col3"])
    validate_unique_column_names(df, err_msg="my_error_message")

def test_validate_unique_column_names_negative_case():
    df = pd.DataFrame([[1, 2, 3], [1, 2, 3]], columns=["col1", "col2", "col2"])
    with pytest.raises(ValueError, match="my_error_message"):
        validate_unique_column_names(df, err_msg="my_error_message")

# tests for validate_columns_exist

def test_validate_columns_exist_positive_case():
    df = pd.DataFrame({"a": [1, 2], "b": [3, 4]})
    validate_columns_exist(df, ["a", "b"])
    validate_columns_exist(df, None)

def test_validate_columns_exist_negative_case():
    df = pd.DataFrame({"a": [1, 2], "b": [3, 4]})
    with pytest.raises(ValueError, match=r"\['c'\] not found in 'frame'"):
        validate_columns_exist(df, ["a", "c"], data_name="frame")

# tests for validate_open_interval

@pytest.mark.parametrize("value", [0.5, 0.01, 0.99])
def test_validate_open_interval_positive_case(value):
    validate_open_interval(value, (0, 1), err_msg="my_error_message")

@pytest.mark.parametrize("value", [0, 1, 1.5, -3, "0.5", None, True])
def test_validate_open_interval_negative_case(value):
    with pytest.raises(ValueError, match="my_error_message"):
        validate_open_interval(value, (0, 1), err_msg="my_error_message")

# tests for validate_natural_number

@pytest.mark.parametrize("value", [1, 10, 1000.0, np.int64(5)])
def test_validate_natural_number_positive_case(value):
    validate_natural_number(value, "n_boot")

@pytest.mark.parametrize("value", [0, -1, 2.5, True, "10"])
def test_validate_natural_number_negative_case(value):
    with pytest.raises(ValueError, match="'n_boot' must be a positive integer"):
        validate_natural_number(value, "n_boot")
