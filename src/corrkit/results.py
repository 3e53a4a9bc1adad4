"""
Assembly and rendering of correlation results.

Rows are produced per (group, pair) and handed to a
:class:`ResultAssembler`, which orders them deterministically (group
outer, pair inner), applies the multiple testing correction and returns an
immutable :class:`CorrelationTable`. The table renders as a tidy
``pandas.DataFrame`` or as a matrix.

Classes
-------
CorrelationTable
    Ordered, immutable collection of :class:`~corrkit.types.TestResult`.
ResultAssembler
    Buffer of results indexed by (group, pair).

Functions
---------
adjust_pvalues(results, method)
    Multiple testing correction over all non-missing p-values.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

import numpy as np
import pandas as pd
from statsmodels.stats.multitest import multipletests

from corrkit._utils import read_config
from corrkit.adjust import partial_to_full
from corrkit.types import CorrelationOptions, TestResult

logger = logging.getLogger(__name__)

_messages = read_config("messages")
_pair_errors = _messages["errors"]["pair"]

RESULT_COLUMNS = [f.name for f in dataclasses.fields(TestResult)]


def adjust_pvalues(results, method: str = "holm") -> tuple:
    """
    Correct p-values for multiple testing.

    Parameters
    ----------
    results : Sequence[TestResult]
        Rows to correct; rows with a missing p-value are left untouched and
        do not count as tests.
    method : str, default='holm'
        ``'none'`` or a method name of
        :func:`statsmodels.stats.multitest.multipletests` (``'bonferroni'``,
        ``'holm'``, ``'simes-hochberg'``, ``'hommel'``, ``'sidak'``,
        ``'fdr_bh'``, ``'fdr_by'``).

    Returns
    -------
    tuple of TestResult

    Examples
    --------
    >>> rows = [TestResult("a", "b", p=0.01), TestResult("a", "c", p=0.04)]
    >>> [round(r.p, 2) for r in adjust_pvalues(rows, "bonferroni")]
    [0.02, 0.08]
    """
    results = tuple(results)
    p = np.array([result.p for result in results], dtype=float)
    tested = ~np.isnan(p)
    if method == "none" or not tested.any():
        return results
    adjusted = p.copy()
    adjusted[tested] = multipletests(p[tested], method=method)[1]
    return tuple(
        dataclasses.replace(result, p=float(value)) if is_tested else result
        for result, value, is_tested in zip(results, adjusted, tested)
    )


@dataclass(frozen=True)
class CorrelationTable:
    """
    Result of a correlation analysis.

    Parameters
    ----------
    results : tuple of TestResult
        Rows, groups outer and pairs inner. Every pair appears at most once
        per group; self pairs are not stored.
    variables : tuple of str
        Analysis columns in order (row variables of the matrix view).
    variables2 : tuple of str, optional
        Column variables of a rectangular ``select2`` analysis.
    groups : tuple
        Group labels in order; ``(None,)`` when the analysis is not
        stratified.
    options : CorrelationOptions
        Options the table was computed with.
    constant : Mapping
        Constant columns per group label, shown as NaN on the diagonal.

    Examples
    --------
    >>> import pandas as pd
    >>> from corrkit import correlation
    >>> df = pd.DataFrame({"x": [1, 2, 3, 4], "y": [2, 4, 5, 9], "z": [4, 3, 2, 2]})
    >>> table = correlation(df)
    >>> len(table)
    3
    >>> table.as_matrix(redundant=True).shape
    (3, 3)
    """

    results: tuple
    variables: tuple
    variables2: Optional[tuple] = None
    groups: tuple = (None,)
    options: CorrelationOptions = field(default_factory=CorrelationOptions)
    constant: Mapping = field(default_factory=dict)

    def __len__(self):
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    def __getitem__(self, index):
        return self.results[index]

    def __repr__(self):
        return f"CorrelationTable(\n{self.to_frame().to_string()}\n)"

    @property
    def is_grouped(self) -> bool:
        return self.groups != (None,)

    def to_frame(self) -> pd.DataFrame:
        """
        Tidy view, one row per (pair, group).

        The ``group`` column is left out for tables that are not
        stratified.
        """
        frame = pd.DataFrame(
            [dataclasses.asdict(result) for result in self.results],
            columns=RESULT_COLUMNS,
        )
        if not self.is_grouped:
            frame = frame.drop(columns="group")
        return frame

    def _group_results(self, group) -> tuple:
        if group is None and self.is_grouped:
            if len(self.groups) > 1:
                raise ValueError(
                    f"The table has {len(self.groups)} groups, choose one of "
                    f"{list(self.groups)}."
                )
            group = self.groups[0]
        if group not in self.groups:
            raise ValueError(f"Unknown group '{group}', choose one of {list(self.groups)}.")
        return group, [result for result in self.results if result.group == group]

    def as_matrix(self, column: str = "estimate", group=None, redundant: bool = None) -> pd.DataFrame:
        """
        Matrix view of one group.

        Parameters
        ----------
        column : str, default='estimate'
            :class:`~corrkit.types.TestResult` field to show (e.g. ``'p'``,
            ``'ci_low'``, ``'n_obs'``).
        group : str, optional
            Group to render; required when the table has several groups.
        redundant : bool, optional
            Full square matrix (True) or upper triangle without the
            diagonal (False). Defaults to ``options.redundant``. Ignored for
            rectangular ``select2`` tables.

        Returns
        -------
        pandas.DataFrame
            Square matrices are symmetric; the ``estimate`` diagonal is 1, or
            NaN for a column that is constant in the group.

        Raises
        ------
        ValueError
            If ``column`` is not a result field or ``group`` is ambiguous or
            unknown.
        """
        if column not in RESULT_COLUMNS:
            raise ValueError(f"Unknown column '{column}', choose one of {RESULT_COLUMNS}.")
        group, rows = self._group_results(group)
        cells = {}
        for result in rows:
            value = getattr(result, column)
            cells[(result.parameter1, result.parameter2)] = value
            cells[(result.parameter2, result.parameter1)] = value
        constant = self.constant.get(group, frozenset())

        def diagonal(name):
            if column != "estimate":
                return np.nan
            return np.nan if name in constant else 1.0

        if self.variables2 is not None:
            index, columns = list(self.variables), list(self.variables2)
        else:
            if redundant is None:
                redundant = self.options.redundant
            index, columns = list(self.variables), list(self.variables)
            if not redundant:
                index, columns = index[:-1], columns[1:]

        matrix = pd.DataFrame(np.nan, index=index, columns=columns, dtype=object)
        for i, row in enumerate(index):
            for j, col in enumerate(columns):
                if self.variables2 is None and not redundant and (
                    self.variables.index(col) <= self.variables.index(row)
                ):
                    continue
                if row == col:
                    matrix.iat[i, j] = diagonal(row)
                else:
                    matrix.iat[i, j] = cells.get((row, col), np.nan)
        return matrix.infer_objects()

    def partial_to_full(self, p_adjust: str = None) -> "CorrelationTable":
        """
        Convert partial correlations back to zero-order correlations.

        Each group's partial estimates are assembled into a square matrix,
        converted with :func:`corrkit.adjust.pcor_to_cor`, and the tests are
        recomputed with zero covariates. Groups whose matrix has missing
        estimates become NA rows.

        Parameters
        ----------
        p_adjust : str, optional
            Correction applied to the recomputed p-values; defaults to
            ``options.p_adjust``.

        Returns
        -------
        CorrelationTable

        Raises
        ------
        ValueError
            For rectangular ``select2`` tables.
        """
        if self.variables2 is not None:
            raise ValueError("partial_to_full requires a square correlation table.")
        converted = []
        for group in self.groups:
            _, rows = self._group_results(group)
            pcor = self.as_matrix("estimate", group=group, redundant=True)
            n = self.as_matrix("n_obs", group=group, redundant=True)
            if pcor.isna().to_numpy().any():
                note = _pair_errors["not_convertible_f"].format(
                    group, pcor.columns[pcor.isna().any()].tolist()
                )
                logger.warning(note)
                converted.extend(
                    dataclasses.replace(
                        result,
                        estimate=np.nan,
                        statistic=np.nan,
                        p=np.nan,
                        ci_low=np.nan,
                        ci_high=np.nan,
                        note=note,
                    )
                    for result in rows
                )
                continue
            full = partial_to_full(
                pcor, n.to_numpy(dtype=float), ci=self.options.ci,
                alternative=self.options.alternative,
            ).set_index(["parameter1", "parameter2"])
            for result in rows:
                key = (result.parameter1, result.parameter2)
                if key not in full.index:
                    key = key[::-1]
                values = full.loc[key]
                converted.append(
                    dataclasses.replace(
                        result,
                        estimate=float(values["estimate"]),
                        statistic_name="t",
                        statistic=float(values["statistic"]),
                        df_error=float(values["df_error"]),
                        p=float(values["p"]),
                        ci_low=float(values["ci_low"]),
                        ci_high=float(values["ci_high"]),
                        bf10=np.nan,
                        pd=np.nan,
                    )
                )
        return dataclasses.replace(
            self,
            results=adjust_pvalues(
                converted, p_adjust if p_adjust is not None else self.options.p_adjust
            ),
            options=dataclasses.replace(self.options, partial=False),
        )


class ResultAssembler:
    """
    Buffer of test results indexed by (group, pair).

    Producers may add rows in any order; :meth:`finalize` sorts them by
    group index, then pair index.

    Parameters
    ----------
    variables : Sequence of str
        Row variables of the analysis.
    variables2 : Sequence of str, optional
        Column variables of a rectangular analysis.
    groups : Sequence, default=(None,)
        Group labels in output order.
    options : CorrelationOptions, optional
    constant : Mapping, optional
        Constant columns per group label.
    """

    def __init__(self, variables, variables2=None, groups=(None,), options=None, constant=None):
        self.variables = tuple(variables)
        self.variables2 = tuple(variables2) if variables2 is not None else None
        self.groups = tuple(groups)
        self.options = options if options is not None else CorrelationOptions()
        self.constant = dict(constant or {})
        self._buffer = {}

    def __len__(self):
        return len(self._buffer)

    def add(self, group_index: int, pair_index: int, result: TestResult) -> None:
        """
        Buffer one row.

        Raises
        ------
        ValueError
            If a row was already added for this (group, pair).
        """
        key = (group_index, pair_index)
        if key in self._buffer:
            raise ValueError(f"A result for group {group_index}, pair {pair_index} already exists.")
        self._buffer[key] = result

    def finalize(self, p_adjust: str = None) -> CorrelationTable:
        """
        Order the buffered rows and adjust their p-values.

        Parameters
        ----------
        p_adjust : str, optional
            Correction method; defaults to ``options.p_adjust``.

        Returns
        -------
        CorrelationTable
        """
        ordered = [self._buffer[key] for key in sorted(self._buffer)]
        method = p_adjust if p_adjust is not None else self.options.p_adjust
        logger.debug("Assembled %d row(s), p-values adjusted with '%s'.", len(ordered), method)
        return CorrelationTable(
            results=adjust_pvalues(ordered, method),
            variables=self.variables,
            variables2=self.variables2,
            groups=self.groups,
            options=self.options,
            constant=self.constant,
        )
