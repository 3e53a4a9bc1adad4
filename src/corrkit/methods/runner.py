"""
Execution of one correlation test.

:func:`run_pair` is the only place where the per-method estimators are
called. It performs pairwise deletion, rejects pairs that cannot be
estimated (too few observations, a constant column), applies the optional
rank transform and assembles the uniform :class:`~corrkit.types.TestResult`.
Errors confined to a pair are raised as
:class:`~corrkit.exceptions.PairError` subclasses; :func:`na_result`
builds the corresponding NA row.

Functions
---------
run_pair(x, y, spec, names, group=None, n_covariates=0, kinds=None)
    Run one test and return its result.
diagonal_result(name, spec, group=None, constant=False, n_obs=0)
    Result of a variable with itself.
na_result(names, spec, error, group=None, n_obs=0)
    NA row carrying the error of a failed pair.
"""

import functools
import logging

import numpy as np
from scipy import stats

from corrkit._utils import read_config
from corrkit.exceptions import DegenerateVarianceError, InsufficientDataError
from corrkit.types import Method, TestResult, TestSpec, VariableKind

from .bayesian import bayesian_correlation
from .estimators import ESTIMATORS
from .resolver import METHODS

logger = logging.getLogger(__name__)

_pair_errors = read_config("messages")["errors"]["pair"]

MIN_OBSERVATIONS = 3


def _label(spec: TestSpec) -> str:
    label = METHODS[spec.method].label
    return f"Bayesian {label}" if spec.bayesian else label


def _estimate_name(spec: TestSpec) -> str:
    return "rho" if spec.bayesian else METHODS[spec.method].estimate_name


def run_pair(
    x,
    y,
    spec: TestSpec,
    names: tuple,
    group=None,
    n_covariates: int = 0,
    kinds: tuple = None,
) -> TestResult:
    """
    Run one correlation test.

    Parameters
    ----------
    x, y : array-like
        Values of the two variables, aligned, missing values as NaN.
    spec : TestSpec
        Resolved test.
    names : tuple of str
        ``(parameter1, parameter2)``.
    group : str, optional
        Label of the group the values come from.
    n_covariates : int, default=0
        Number of variables partialled out of ``x`` and ``y`` beforehand.
        Reduces the degrees of freedom of closed-form tests.
    kinds : tuple of VariableKind, optional
        Kinds of ``x`` and ``y``; needed by the polychoric estimator to
        detect a continuous partner.

    Returns
    -------
    TestResult

    Raises
    ------
    InsufficientDataError
        If fewer than 3 complete paired observations remain.
    DegenerateVarianceError
        If one of the columns is constant over the complete observations.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    complete = ~(np.isnan(x) | np.isnan(y))
    x, y = x[complete], y[complete]
    n_obs = int(x.size)
    if n_obs < MIN_OBSERVATIONS:
        raise InsufficientDataError(
            _pair_errors["insufficient_data_f"].format(n_obs, *names)
        )
    for name, values in zip(names, (x, y)):
        if np.ptp(values) == 0:
            raise DegenerateVarianceError(
                _pair_errors["degenerate_variance_f"].format(name)
            )

    if spec.ranktransform:
        x, y = stats.rankdata(x), stats.rankdata(y)

    estimator = ESTIMATORS[spec.method]
    if spec.method is Method.POLYCHORIC and kinds is not None:
        estimator = functools.partial(
            estimator,
            continuous=tuple(kind is VariableKind.CONTINUOUS for kind in kinds),
        )
    logger.debug(
        "Running %s for '%s' and '%s' (n=%d).", spec.method.value, *names, n_obs
    )
    values = estimator(x, y, spec, n_covariates)
    label = values.pop("method", _label(spec))

    if spec.bayesian:
        values = bayesian_correlation(values["estimate"], n_obs, spec, n_covariates)

    return TestResult(
        parameter1=names[0],
        parameter2=names[1],
        group=group,
        estimate_name=_estimate_name(spec),
        ci=spec.ci,
        n_obs=n_obs,
        method=label,
        **values,
    )


def diagonal_result(
    name, spec: TestSpec, group=None, constant: bool = False, n_obs: int = 0
) -> TestResult:
    """
    Result of a variable with itself: estimate 1, or NaN for a constant column.
    """
    return TestResult(
        parameter1=name,
        parameter2=name,
        group=group,
        estimate_name=_estimate_name(spec),
        estimate=np.nan if constant else 1.0,
        ci=spec.ci,
        n_obs=n_obs,
        method=_label(spec),
    )


def na_result(names, spec: TestSpec, error: Exception, group=None, n_obs: int = 0) -> TestResult:
    """NA row for a pair whose test failed with ``error``."""
    return TestResult(
        parameter1=names[0],
        parameter2=names[1],
        group=group,
        estimate_name=_estimate_name(spec),
        ci=spec.ci,
        n_obs=n_obs,
        method=_label(spec),
        error=type(error).__name__,
        note=str(error),
    )
