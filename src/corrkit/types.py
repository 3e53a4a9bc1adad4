"""
Shared types used throughout corrkit.

This module defines the enumerations, configuration objects and result
containers that flow between the components of a correlation analysis.
They carry no analytical logic.

Classes
-------
NaturalNumber
    Type descriptor enabling `isinstance(x, NaturalNumber)` checks for
    positive integers. Used to validate resampling and sampling sizes.
VariableKind
    Semantic type of a column (continuous, binary, ordinal, categorical).
Method
    Closed enumeration of the supported correlation methods.
CorrelationOptions
    Immutable user configuration of one analysis.
TestSpec
    Immutable, resolved configuration of one statistical test.
TestResult
    One row of output: the test of one pair within one group.

Examples
--------
>>> from corrkit.types import CorrelationOptions, NaturalNumber
>>> CorrelationOptions(method="spearman").ci
0.95
>>> isinstance(5, NaturalNumber)
True
>>> isinstance(0, NaturalNumber)
False
"""

import enum
from dataclasses import dataclass
from numbers import Number
from typing import Optional, Union


class _NaturalNumberMeta(type):
    """Metaclass to enable isinstance checks for natural numbers."""

    def __instancecheck__(cls, instance):
        """Return True if instance is a positive integer."""
        return (
            isinstance(instance, Number) and instance > 0 and instance == int(instance)
        )

    def __repr__(cls):
        return "NaturalNumber"


# pylint: disable=R0903
class NaturalNumber(metaclass=_NaturalNumberMeta):
    """
    Type descriptor for natural numbers (positive integers).

    `isinstance(value, NaturalNumber)` returns True if and only if `value`
    is numeric, strictly greater than zero and integer-valued. Floats are
    accepted only if they are exact integers, e.g. `1.0`.
    """


class VariableKind(str, enum.Enum):
    """Semantic type of a column, fixed once when the dataset is built."""

    CONTINUOUS = "continuous"
    BINARY = "binary"
    ORDINAL = "ordinal"
    CATEGORICAL = "categorical"

    @property
    def is_factor(self) -> bool:
        """Whether the column takes values on a finite set of levels."""
        return self is not VariableKind.CONTINUOUS


class Method(str, enum.Enum):
    """Supported correlation methods."""

    AUTO = "auto"
    PEARSON = "pearson"
    SPEARMAN = "spearman"
    KENDALL = "kendall"
    BIWEIGHT = "biweight"
    DISTANCE = "distance"
    PERCENTAGE_BEND = "percentage_bend"
    SHEPHERD = "shepherd"
    BLOMQVIST = "blomqvist"
    HOEFFDING = "hoeffding"
    GAMMA = "gamma"
    GAUSSIAN = "gaussian"
    BISERIAL = "biserial"
    POINT_BISERIAL = "point_biserial"
    WINSORIZED = "winsorized"
    POLYCHORIC = "polychoric"
    TETRACHORIC = "tetrachoric"


@dataclass(frozen=True)
class CorrelationOptions:
    """
    Immutable configuration of a correlation analysis.

    Parameters
    ----------
    method : str, default='pearson'
        Correlation method, one of :class:`Method` or one of its aliases
        (e.g. ``'percbend'``, ``'bicor'``, ``'dcor'``).
    alternative : {'two-sided', 'greater', 'less'}, default='two-sided'
        Alternative hypothesis (tail) of the tests.
    ci : float, default=0.95
        Confidence (or credible) level of the intervals.
    p_adjust : str, default='holm'
        Multiple testing correction applied to the whole table:
        ``'none'``, ``'bonferroni'``, ``'holm'``, ``'hochberg'``,
        ``'hommel'``, ``'sidak'``, ``'fdr'`` (Benjamini-Hochberg) or
        ``'BY'`` (Benjamini-Yekutieli).
    bayesian : bool, default=False
        Estimate correlations from a posterior distribution.
    bayesian_prior : str or float, default='medium'
        Scale of the stretched beta prior on rho: ``'medium.narrow'``,
        ``'medium'``, ``'wide'``, ``'ultrawide'`` or a positive number.
    partial : bool, default=False
        Adjust each pair for all other analysed variables.
    multilevel : bool, default=False
        Adjust for grouping factors entered as random effects.
    include_factors : bool, default=False
        Analyse non-numeric columns as well.
    redundant : bool, default=False
        Default rendering of the matrix view (full square when True).
    ranktransform : bool, default=False
        Rank-transform variables before estimating the correlation.
    tuning : float, optional
        Method-specific tuning value (bend for ``percentage_bend``,
        winsorization fraction for ``winsorized``, constant for
        ``biweight``). Method defaults are used when None.
    n_boot : int, default=1000
        Resamples of permutation / bootstrap based delegates.
    n_draws : int, default=4000
        Posterior draws of Bayesian estimates.
    seed : int, optional, default=42
        Seed of every stochastic delegate.
    """

    method: str = "pearson"
    alternative: str = "two-sided"
    ci: float = 0.95
    p_adjust: str = "holm"
    bayesian: bool = False
    bayesian_prior: Union[str, float] = "medium"
    partial: bool = False
    multilevel: bool = False
    include_factors: bool = False
    redundant: bool = False
    ranktransform: bool = False
    tuning: Optional[float] = None
    n_boot: int = 1000
    n_draws: int = 4000
    seed: Optional[int] = 42


@dataclass(frozen=True)
class TestSpec:
    """
    Resolved configuration of one statistical test.

    Built once per pair by :func:`corrkit.methods.resolve_method` and never
    modified afterwards.
    """

    __test__ = False  # not a pytest test class

    method: Method
    alternative: str = "two-sided"
    ci: float = 0.95
    bayesian: bool = False
    partial: bool = False
    multilevel: bool = False
    ranktransform: bool = False
    tuning: Optional[float] = None
    prior_scale: float = 1 / 3
    n_boot: int = 1000
    n_draws: int = 4000
    seed: Optional[int] = 42


@dataclass(frozen=True)
class TestResult:
    """
    One row of a correlation table.

    The schema is the same for every method; fields a method does not
    produce are NaN (numbers) or None (labels).

    Parameters
    ----------
    parameter1, parameter2 : str
        Names of the correlated variables.
    group : str, optional
        Group label when the analysis is stratified.
    estimate_name : str
        Name of the coefficient (``'r'``, ``'rho'``, ``'tau'``, ``'Dcor'``,
        ``'D'``, ``'beta'``, ``'gamma'``).
    estimate : float
        Point estimate (posterior median for Bayesian tests).
    ci : float
        Level of the interval.
    ci_low, ci_high : float
        Confidence interval, or highest density interval for Bayesian tests.
    statistic_name : str, optional
        Name of the test statistic (``'t'``, ``'z'``).
    statistic : float
        Value of the test statistic.
    df_error : float
        Degrees of freedom of the t statistic.
    p : float
        p-value (adjusted once the table is assembled).
    n_obs : int
        Number of complete observations used.
    method : str
        Human readable method label.
    bf10 : float
        Bayes factor in favour of a non-zero correlation.
    pd : float
        Probability of direction of the posterior.
    n_outliers : float
        Observations discarded by outlier-removing methods.
    error : str, optional
        Class name of the per-pair error when the row is NA.
    note : str, optional
        Diagnostic message attached to the row.
    """

    __test__ = False  # not a pytest test class

    parameter1: str
    parameter2: str
    group: Optional[str] = None
    estimate_name: str = "r"
    estimate: float = float("nan")
    ci: float = 0.95
    ci_low: float = float("nan")
    ci_high: float = float("nan")
    statistic_name: Optional[str] = None
    statistic: float = float("nan")
    df_error: float = float("nan")
    p: float = float("nan")
    n_obs: int = 0
    method: str = ""
    bf10: float = float("nan")
    pd: float = float("nan")
    n_outliers: float = float("nan")
    error: Optional[str] = None
    note: Optional[str] = None

    @property
    def is_na(self) -> bool:
        """Whether the row carries no estimate."""
        return self.estimate != self.estimate
