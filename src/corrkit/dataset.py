"""
Typed, read-only view of the data handed to a correlation analysis.

The semantic type of every column (continuous, binary, ordinal or
categorical) is decided once, when the :class:`Dataset` is built, and is
then used unchanged by every component that consumes the column. Factor
columns are stored as numeric level codes so that all analysis columns can
be handed to numeric delegates; grouping and random-effect columns are kept
aside untouched.

Functions
---------
infer_kind(series)
    Decide the :class:`~corrkit.types.VariableKind` of a column.
build_dataset(data, include_factors=False, expand_factors=True, keep=())
    Build a :class:`Dataset` from any tabular input.

Examples
--------
>>> import pandas as pd
>>> from corrkit.dataset import build_dataset
>>> df = pd.DataFrame({"x": [1.0, 2.0, 3.5], "y": [0, 1, 1], "g": ["a", "b", "a"]})
>>> ds = build_dataset(df, keep=["g"])
>>> ds.variables
['x', 'y']
>>> ds.kinds["y"]
<VariableKind.BINARY: 'binary'>
"""

import logging
from dataclasses import dataclass, field
from typing import Mapping, Sequence

import numpy as np
import pandas as pd
from pandas.api.types import (
    CategoricalDtype,
    is_bool_dtype,
    is_numeric_dtype,
)

from corrkit._utils import (
    convert_dataframe,
    read_config,
    validate_columns_exist,
    validate_unique_column_names,
)
from corrkit.types import VariableKind

logger = logging.getLogger(__name__)

_errors = read_config("messages")["errors"]


@dataclass(frozen=True)
class Dataset:
    """
    Analysis columns with their semantic kinds.

    Parameters
    ----------
    frame : pandas.DataFrame
        Numeric (float) analysis columns, missing values as NaN.
    kinds : Mapping[str, VariableKind]
        Semantic kind of every column of ``frame``.
    factors : pandas.DataFrame
        Grouping / random-effect columns, aligned with ``frame``.
    dummies : Mapping[str, list], optional
        Dummy columns of every expanded factor, keyed by the input column.
    """

    frame: pd.DataFrame
    kinds: Mapping[str, VariableKind]
    factors: pd.DataFrame
    dummies: Mapping[str, list] = field(default_factory=dict)

    @property
    def variables(self) -> list:
        """Analysis column names in input order."""
        return list(self.frame.columns)

    def take(self, index: pd.Index) -> "Dataset":
        """Rows ``index`` of the dataset, kinds unchanged."""
        return Dataset(
            frame=self.frame.loc[index],
            kinds=self.kinds,
            factors=self.factors.loc[index],
            dummies=self.dummies,
        )

    def constant_columns(self) -> set:
        """Columns with at most one distinct non-missing value."""
        counts = self.frame.nunique(dropna=True)
        return set(counts[counts <= 1].index)


def infer_kind(series: pd.Series) -> VariableKind:
    """
    Decide the semantic kind of a column from its dtype and values.

    Parameters
    ----------
    series : pandas.Series
        Column to inspect.

    Returns
    -------
    VariableKind
        - ``BINARY`` for booleans and any column with exactly two distinct
          non-missing values;
        - ``ORDINAL`` for ordered ``pandas.Categorical`` columns;
        - ``CONTINUOUS`` for other numeric columns;
        - ``CATEGORICAL`` for everything else.

    Examples
    --------
    >>> infer_kind(pd.Series([1.5, 2.0, 3.1]))
    <VariableKind.CONTINUOUS: 'continuous'>
    >>> infer_kind(pd.Series(["a", "b", "c"]))
    <VariableKind.CATEGORICAL: 'categorical'>
    """
    n_levels = series.nunique(dropna=True)
    if is_bool_dtype(series.dtype) or n_levels == 2:
        return VariableKind.BINARY
    if isinstance(series.dtype, CategoricalDtype):
        if series.dtype.ordered:
            return VariableKind.ORDINAL
        return VariableKind.CATEGORICAL
    if is_numeric_dtype(series.dtype):
        return VariableKind.CONTINUOUS
    return VariableKind.CATEGORICAL


def is_factor_dtype(series: pd.Series) -> bool:
    return not is_numeric_dtype(series.dtype) or isinstance(
        series.dtype, CategoricalDtype
    )


def _level_codes(series: pd.Series) -> pd.Series:
    codes = pd.Categorical(series).codes.astype(float)
    codes[codes < 0] = np.nan
    return pd.Series(codes, index=series.index, name=series.name)


def build_dataset(
    data,
    include_factors: bool = False,
    expand_factors: bool = True,
    keep: Sequence = (),
    select: Sequence = None,
) -> Dataset:
    """
    Build a :class:`Dataset` from tabular input.

    Parameters
    ----------
    data : pandas.DataFrame, Mapping or Sequence[Sequence]
        Input table. Nested sequences are interpreted as columns.
    include_factors : bool, default=False
        If False, non-numeric columns are left out of the analysis.
        Numeric columns with two values (e.g. 0/1) are always analysed.
    expand_factors : bool, default=True
        When factors are included, replace nominal columns with more than
        two levels by one binary dummy column per level, named
        ``'<column>.<level>'``. Binary and ordinal factors are coded as
        level codes. If False, every factor is coded as level codes.
    keep : Sequence, default=()
        Grouping / random-effect columns kept aside in ``factors``; they
        are never analysed.
    select : Sequence, optional
        Restrict the analysis columns to these names (in this order).

    Returns
    -------
    Dataset

    Raises
    ------
    ValueError
        If column names are duplicated or requested columns are missing.
    """
    df = convert_dataframe(data)
    validate_unique_column_names(
        df, _errors["duplicate_column_names_f"].format("data")
    )
    keep = list(keep or ())
    validate_columns_exist(df, keep)
    validate_columns_exist(df, select)

    candidates = [col for col in (select or df.columns) if col not in keep]
    columns, kinds, expanded = {}, {}, {}
    for col in candidates:
        series = df[col]
        kind = infer_kind(series)
        if not is_factor_dtype(series):
            columns[col] = series.astype(float)
            kinds[col] = kind
            continue
        if not include_factors:
            logger.debug("Factor column '%s' is ignored (include_factors=False).", col)
            continue
        if expand_factors and kind is VariableKind.CATEGORICAL:
            dummies = pd.get_dummies(series, prefix=str(col), prefix_sep=".", dtype=float)
            dummies.loc[series.isna()] = np.nan
            for dummy in dummies.columns:
                columns[dummy] = dummies[dummy]
                kinds[dummy] = VariableKind.BINARY
            expanded[col] = list(dummies.columns)
        else:
            columns[col] = _level_codes(series)
            kinds[col] = kind

    frame = pd.DataFrame(columns, index=df.index)
    return Dataset(frame=frame, kinds=kinds, factors=df[keep], dummies=expanded)
