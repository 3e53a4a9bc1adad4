"""
Public entry points of corrkit.

Functions
---------
correlation(data, select=None, select2=None, groups=None, random=None,
            options=None, **kwargs)
    Correlations between all pairs of analysis columns.
cor_test(data, x, y, groups=None, random=None, options=None, **kwargs)
    Correlation test of a single pair.

Notes
-----
Requests are validated completely before any computation: unsupported
option values raise ``ValueError`` and invalid method / variable type /
flag combinations raise
:class:`~corrkit.exceptions.UnsupportedCombinationError`. Errors confined
to one pair (a constant column, too few observations, a mixed model that
does not converge) are logged and reported as NA rows, so the rest of the
table is still computed.
"""

import dataclasses
import logging
from contextlib import nullcontext
from itertools import combinations
from typing import Sequence, Union

import pandas as pd

from corrkit._utils import convert_dataframe, read_config, temp_log_level
from corrkit.adjust import residualize, residualize_multilevel
from corrkit.dataset import Dataset, build_dataset, is_factor_dtype
from corrkit.exceptions import (
    DegenerateVarianceError,
    PairError,
    UnsupportedCombinationError,
)
from corrkit.grouping import split_groups
from corrkit.methods import (
    diagonal_result,
    na_result,
    normalize_options,
    resolve_method,
    run_pair,
)
from corrkit.results import CorrelationTable, ResultAssembler, adjust_pvalues
from corrkit.types import CorrelationOptions, Method, TestResult, TestSpec

logger = logging.getLogger(__name__)

_messages = read_config("messages")
_errors = _messages["errors"]
_combination = _errors["combination"]
_warns = _messages["warns"]


def _as_list(columns) -> list:
    if columns is None:
        return []
    if isinstance(columns, str):
        return [columns]
    return list(columns)


def _merge_options(options: CorrelationOptions, kwargs: dict) -> CorrelationOptions:
    if options is None:
        options = CorrelationOptions(**kwargs)
    elif kwargs:
        options = dataclasses.replace(options, **kwargs)
    return normalize_options(options)


def _check_not_empty(df: pd.DataFrame) -> None:
    if df.shape[0] == 0 or df.shape[1] == 0:
        raise ValueError(_errors["empty_data_f"].format("data"))


def _verbosity(verbose: bool):
    if verbose:
        return temp_log_level(logging.getLogger("corrkit"), logging.INFO)
    return nullcontext()


def _factor_roles(df, options, groups, random, exclude) -> tuple:
    """Split grouping columns into strata (partitions) and random factors."""
    if random and not options.multilevel:
        raise UnsupportedCombinationError(_combination["random_without_multilevel"])
    if not options.multilevel:
        return groups, []
    if groups and random:
        raise UnsupportedCombinationError(_combination["groups_and_random"])
    random = groups or random
    if not random:
        random = [
            col for col in df.columns if col not in exclude and is_factor_dtype(df[col])
        ]
        logger.info("Random factors for the multilevel model: %s.", random)
    if not random:
        raise UnsupportedCombinationError(_combination["multilevel_without_factors"])
    return [], random


def _expand_names(names, dataset: Dataset) -> list:
    """Map requested columns to analysis columns (factor dummies included)."""
    expanded = []
    for name in names:
        if name in dataset.dummies:
            expanded.extend(dataset.dummies[name])
        elif name in dataset.variables:
            expanded.append(name)
    return expanded


def _build(df, options, select, keep) -> Dataset:
    return build_dataset(
        df,
        include_factors=options.include_factors,
        expand_factors=options.method not in (Method.AUTO.value, Method.POLYCHORIC.value),
        keep=keep,
        select=select or None,
    )


def _resolve_all(options, dataset: Dataset, pairs) -> dict:
    return {
        pair: resolve_method(
            options, dataset.kinds[pair[0]], dataset.kinds[pair[1]], names=pair
        )
        for pair in pairs
    }


def _test_pair(sub: Dataset, pair, spec: TestSpec, pool, random, label) -> TestResult:
    a, b = pair
    adjusted = spec.partial or spec.multilevel
    covariates = [v for v in pool if v not in pair] if adjusted else []
    n_covariates = len(covariates)
    try:
        for name in pair:
            if sub.frame[name].nunique(dropna=True) <= 1:
                raise DegenerateVarianceError(
                    _errors["pair"]["degenerate_variance_f"].format(name)
                )
        if spec.multilevel:
            factors = sub.factors[random]
            x = residualize_multilevel(sub.frame, a, covariates, factors)
            y = residualize_multilevel(sub.frame, b, covariates, factors)
            # one degree of freedom per random intercept beyond the first
            n_covariates += len(factors.dropna().drop_duplicates()) - 1
        elif spec.partial:
            x = residualize(sub.frame, a, covariates)
            y = residualize(sub.frame, b, covariates)
        else:
            x, y = sub.frame[a], sub.frame[b]
        return run_pair(
            x,
            y,
            spec,
            pair,
            group=label,
            n_covariates=n_covariates,
            kinds=(sub.kinds[a], sub.kinds[b]),
        )
    except PairError as error:
        where = f" in group '{label}'" if label is not None else ""
        logger.warning(
            _warns["na_row_f"].format(type(error).__name__, a, b, where, error)
        )
        n_obs = int(sub.frame[[a, b]].notna().all(axis=1).sum())
        return na_result(pair, spec, error, group=label, n_obs=n_obs)


def _correlate(dataset: Dataset, pairs, strata, random, options, variables, variables2=None):
    """
    Run every requested pair in every group and assemble the table.

    With ``multilevel=True`` and ``partial=False`` all pairs of the dataset
    are estimated as partial correlations first, converted back to
    zero-order correlations per group, and only then restricted to the
    requested pairs.
    """
    convert_back = options.multilevel and not options.partial
    run_pairs = list(combinations(dataset.variables, 2)) if convert_back else pairs
    specs = _resolve_all(options, dataset, run_pairs)

    groups = split_groups(dataset, strata)
    assembler = ResultAssembler(
        dataset.variables if convert_back else variables,
        None if convert_back else variables2,
        groups=[label for label, _ in groups],
        options=options,
        constant={label: frozenset(sub.constant_columns()) for label, sub in groups},
    )
    for group_index, (label, sub) in enumerate(groups):
        for pair_index, pair in enumerate(run_pairs):
            result = _test_pair(sub, pair, specs[pair], dataset.variables, random, label)
            assembler.add(group_index, pair_index, result)

    if not convert_back:
        return assembler.finalize()

    full = assembler.finalize(p_adjust="none").partial_to_full(p_adjust="none")
    lookup = {
        (result.group, frozenset((result.parameter1, result.parameter2))): result
        for result in full
    }
    rows = [
        dataclasses.replace(
            lookup[(label, frozenset(pair))], parameter1=pair[0], parameter2=pair[1]
        )
        for label in full.groups
        for pair in pairs
    ]
    return CorrelationTable(
        results=adjust_pvalues(rows, options.p_adjust),
        variables=tuple(variables),
        variables2=tuple(variables2) if variables2 is not None else None,
        groups=full.groups,
        options=full.options,
        constant=full.constant,
    )


def correlation(
    data,
    select: Union[str, Sequence[str]] = None,
    select2: Union[str, Sequence[str]] = None,
    groups: Union[str, Sequence[str]] = None,
    random: Union[str, Sequence[str]] = None,
    options: CorrelationOptions = None,
    verbose: bool = False,
    **kwargs,
) -> CorrelationTable:
    """
    Compute correlations between all pairs of analysis columns.

    Parameters
    ----------
    data : pandas.DataFrame, Mapping or Sequence[Sequence]
        Input table. Numeric columns are analysed; non-numeric columns only
        with ``include_factors=True``.
    select : str or Sequence[str], optional
        Restrict the analysis to these columns.
    select2 : str or Sequence[str], optional
        Correlate every column of ``select`` (or every other column) with
        every column of ``select2`` instead of all pairs. The matrix view is
        then rectangular.
    groups : str or Sequence[str], optional
        Grouping columns. The data is split by the distinct combinations of
        their values (first-appearance order) and the analysis repeated in
        each group. With ``multilevel=True`` the columns are entered as
        random effects instead.
    random : str or Sequence[str], optional
        Random-effect factors of a multilevel analysis. Defaults to
        ``groups`` or, when neither is given, to every non-numeric column.
    options : CorrelationOptions, optional
        Analysis options.
    verbose : bool, default=False
        If True, INFO messages of the ``corrkit`` loggers are shown for
        this call.
    **kwargs
        Individual :class:`~corrkit.types.CorrelationOptions` fields, e.g.
        ``method='spearman'``; they override ``options``.

    Returns
    -------
    CorrelationTable
        One row per unique pair (and group), p-values adjusted with
        ``p_adjust``.

    Raises
    ------
    ValueError
        If an option value is not supported, columns are missing or
        duplicated, or fewer than two analysis columns remain.
    UnsupportedCombinationError
        If the method cannot be applied to some pair with the given flags,
        or the grouping arguments contradict each other.

    Examples
    --------
    >>> import pandas as pd
    >>> from corrkit import correlation
    >>> df = pd.DataFrame({
    ...     "x": [1.0, 2.0, 3.0, 4.0, 5.0],
    ...     "y": [2.1, 3.9, 6.2, 8.1, 9.8],
    ...     "z": [5.0, 3.0, 4.0, 1.0, 2.0],
    ... })
    >>> table = correlation(df, method="spearman")
    >>> table.to_frame()[["parameter1", "parameter2", "estimate"]]
      parameter1 parameter2  estimate
    0          x          y       1.0
    1          x          z      -0.8
    2          y          z      -0.8
    """
    with _verbosity(verbose):
        options = _merge_options(options, kwargs)
        df = convert_dataframe(data)
        _check_not_empty(df)
        select, select2 = _as_list(select), _as_list(select2)
        groups, random = _as_list(groups), _as_list(random)
        strata, random = _factor_roles(df, options, groups, random, exclude=select + select2)
        requested = list(dict.fromkeys(select + select2)) if select else None
        logger.info("Computing %s correlations.", options.method)

        dataset = _build(df, options, requested, strata + random)
        if select2:
            variables2 = _expand_names(select2, dataset)
            variables = (
                _expand_names(select, dataset)
                if select
                else [v for v in dataset.variables if v not in variables2]
            )
            if not variables or not variables2:
                raise ValueError(
                    _errors["not_enough_columns_f"].format(
                        len(dataset.variables), dataset.variables
                    )
                )
            pairs = [(a, b) for a in variables for b in variables2 if a != b]
        else:
            variables, variables2 = dataset.variables, None
            if len(variables) < 2:
                raise ValueError(
                    _errors["not_enough_columns_f"].format(len(variables), variables)
                )
            pairs = list(combinations(variables, 2))
        _resolve_all(options, dataset, pairs)

        table = _correlate(dataset, pairs, strata, random, options, variables, variables2)
        n_na = sum(result.is_na for result in table)
        logger.info("Computed %d correlation(s), %d NA.", len(table), n_na)
        return table


def cor_test(
    data,
    x: str,
    y: str,
    groups: Union[str, Sequence[str]] = None,
    random: Union[str, Sequence[str]] = None,
    options: CorrelationOptions = None,
    verbose: bool = False,
    **kwargs,
) -> TestResult:
    """
    Correlation test of a single pair of columns.

    Parameters
    ----------
    data : pandas.DataFrame, Mapping or Sequence[Sequence]
        Input table.
    x, y : str
        Columns to correlate. A column tested with itself returns an
        estimate of 1 (or NaN when it is constant) without running a test.
    groups, random : str or Sequence[str], optional
        Random-effect factors of a multilevel test (``multilevel=True``).
    options : CorrelationOptions, optional
        Analysis options.
    verbose : bool, default=False
        Log progress at INFO level for the duration of the call.
    **kwargs
        Individual :class:`~corrkit.types.CorrelationOptions` fields.

    Returns
    -------
    TestResult
        NA (with ``error`` and ``note`` set) when the pair cannot be
        estimated.

    Raises
    ------
    ValueError
        If an option is invalid or a column is missing.
    UnsupportedCombinationError
        If the method does not apply to the two columns, or ``groups`` is
        passed without ``multilevel=True``.

    Notes
    -----
    With ``partial=True`` or ``multilevel=True`` the pair is adjusted for
    every other analysis column of ``data``.

    Examples
    --------
    >>> from corrkit import cor_test
    >>> result = cor_test({"a": [1, 2, 3, 4, 5], "b": [1, 3, 2, 5, 4]}, "a", "b")
    >>> round(result.estimate, 2)
    0.8
    """
    with _verbosity(verbose):
        options = _merge_options(options, kwargs)
        df = convert_dataframe(data)
        _check_not_empty(df)
        groups, random = _as_list(groups), _as_list(random)
        if groups and not options.multilevel:
            raise UnsupportedCombinationError(_combination["groups_in_cor_test"])
        _, random = _factor_roles(df, options, groups, random, exclude=[x, y])

        adjusted = options.partial or options.multilevel
        dataset = _build(df, options, None if adjusted else list(dict.fromkeys([x, y])), random)
        missing = [name for name in dict.fromkeys([x, y]) if name not in dataset.variables]
        if missing:
            raise ValueError(_errors["missing_columns_f"].format(missing, "analysed columns"))

        if x == y:
            spec = resolve_method(options, dataset.kinds[x], dataset.kinds[x], names=(x, x))
            return diagonal_result(
                x,
                spec,
                constant=x in dataset.constant_columns(),
                n_obs=int(dataset.frame[x].notna().sum()),
            )
        _resolve_all(options, dataset, [(x, y)])
        table = _correlate(dataset, [(x, y)], [], random, options, (x,), (y,))
        return table.results[0]
