import numpy as np
import pandas as pd
import pytest

from corrkit.dataset import build_dataset, infer_kind
from corrkit.types import VariableKind

# tests for infer_kind

@pytest.mark.parametrize(
    "series, expected",
    [
        (pd.Series([1.5, 2.0, 3.1]), VariableKind.CONTINUOUS),
        (pd.Series([1, 2, 3, 4]), VariableKind.CONTINUOUS),
        (pd.Series([0, 1, 1, 0]), VariableKind.BINARY),
        (pd.Series([True, False, True]), VariableKind.BINARY),
        (pd.Series(["yes", "no", np.nan, "yes"]), VariableKind.BINARY),
        (pd.Series(["a", "b", "c"]), VariableKind.CATEGORICAL),
        (pd.Series(pd.Categorical(["lo", "hi", "mid"], categories=["lo", "mid", "hi"],
                                  ordered=True)), VariableKind.ORDINAL),
        (pd.Series(pd.Categorical(["x", "y", "z"])), VariableKind.CATEGORICAL),
    ]
)
def test_infer_kind(series, expected):
    assert infer_kind(series) is expected

# tests for build_dataset

def test_build_dataset_ignores_factors_by_default(mixed_types):
    ds = build_dataset(mixed_types)
    assert ds.variables == ["score", "passed"]
    assert ds.kinds["passed"] is VariableKind.BINARY
    assert ds.frame.dtypes.eq(float).all()

def test_build_dataset_expands_nominal_factors(mixed_types):
    ds = build_dataset(mixed_types, include_factors=True)
    assert ds.variables == ["score", "level", "passed",
                            "colour.blue", "colour.green", "colour.red"]
    assert ds.kinds["level"] is VariableKind.ORDINAL
    assert ds.kinds["colour.red"] is VariableKind.BINARY
    assert set(ds.frame["colour.red"].unique()) == {0.0, 1.0}
    assert ds.dummies == {"colour": ["colour.blue", "colour.green", "colour.red"]}

def test_build_dataset_codes_factors_without_expansion(mixed_types):
    ds = build_dataset(mixed_types, include_factors=True, expand_factors=False)
    assert ds.kinds["colour"] is VariableKind.CATEGORICAL
    assert set(ds.frame["colour"].unique()) == {0.0, 1.0, 2.0}
    # ordinal codes follow the category order
    expected = mixed_types["level"].cat.codes.astype(float)
    assert ds.frame["level"].equals(expected.rename("level"))

def test_build_dataset_keeps_factor_columns_aside():
    df = pd.DataFrame({"x": [1.0, 2.0, 3.5], "y": [2.0, 1.0, 0.0], "g": ["a", "b", "a"]})
    ds = build_dataset(df, keep=["g"])
    assert ds.variables == ["x", "y"]
    assert list(ds.factors.columns) == ["g"]
    sub = ds.take(pd.Index([0, 2]))
    assert sub.frame.shape[0] == 2
    assert list(sub.factors["g"]) == ["a", "a"]

def test_build_dataset_select_restricts_columns():
    df = pd.DataFrame({"x": [1, 2, 3], "y": [3, 1, 2], "z": [0, 5, 1]})
    assert build_dataset(df, select=["z", "x"]).variables == ["z", "x"]

def test_build_dataset_missing_values_are_kept_as_nan():
    df = pd.DataFrame({"x": [1.0, np.nan, 3.0], "c": ["a", None, "b"]})
    ds = build_dataset(df, include_factors=True, expand_factors=False)
    assert np.isnan(ds.frame.loc[1, "x"])
    assert np.isnan(ds.frame.loc[1, "c"])

def test_build_dataset_constant_columns():
    df = pd.DataFrame({"x": [1.0, 2.0, 3.0], "k": [4.0, 4.0, np.nan]})
    assert build_dataset(df).constant_columns() == {"k"}

@pytest.mark.parametrize(
    "kwargs, match",
    [
        ({"keep": ["missing"]}, r"\['missing'\] not found"),
        ({"select": ["x", "nope"]}, r"\['nope'\] not found"),
    ]
)
def test_build_dataset_missing_columns(kwargs, match):
    df = pd.DataFrame({"x": [1, 2, 3], "y": [3, 1, 2]})
    with pytest.raises(ValueError, match=match):
        build_dataset(df, **kwargs)

def test_build_dataset_duplicate_columns():
    df = pd.DataFrame([[1, 2], [3, 4]], columns=["a", "a"])
    with pytest.raises(ValueError, match="Duplicate column names"):
        build_dataset(df)
