"""
Adjustment of variables for covariates and random effects.

Partial correlations are computed as correlations of residuals: each
variable of a pair is regressed on the covariates (ordinary least squares)
or on the covariates plus random intercepts (mixed linear model), and the
residuals are handed to the pairwise runner. The module also provides the
matrix identities linking zero-order and partial correlation matrices.

Functions
---------
residualize(frame, target, covariates)
    OLS residuals of one column on covariates plus an intercept.
residualize_multilevel(frame, target, covariates, random)
    Residuals of a random-intercept mixed model.
cor_to_pcor(matrix)
    Partial correlation matrix from a correlation matrix.
pcor_to_cor(matrix)
    Correlation matrix from a partial correlation matrix.
partial_to_full(pcor, n, ci=0.95, alternative="two-sided")
    Zero-order correlations and their tests from a partial matrix.

Examples
--------
>>> import numpy as np
>>> from corrkit.adjust import cor_to_pcor, pcor_to_cor
>>> r = np.array([[1.0, 0.3, 0.6], [0.3, 1.0, 0.0], [0.6, 0.0, 1.0]])
>>> np.allclose(pcor_to_cor(cor_to_pcor(r)), r)
True
"""

import logging
import warnings
from typing import Sequence

import numpy as np
import pandas as pd
from statsmodels.api import OLS, add_constant
from statsmodels.regression.mixed_linear_model import MixedLM
from statsmodels.stats.moment_helpers import cov2corr
from statsmodels.tools.sm_exceptions import ConvergenceWarning

from corrkit._utils import read_config
from corrkit.exceptions import InsufficientDataError, ModelConvergenceError
from corrkit.methods.inference import cor_to_ci, cor_to_p

logger = logging.getLogger(__name__)

_messages = read_config("messages")
_pair_errors = _messages["errors"]["pair"]
_warns = _messages["warns"]


def residualize(frame: pd.DataFrame, target: str, covariates: Sequence) -> pd.Series:
    """
    OLS residuals of ``target`` on ``covariates`` plus an intercept.

    Parameters
    ----------
    frame : pandas.DataFrame
        Numeric data containing ``target`` and ``covariates``.
    target : str
        Column to adjust.
    covariates : Sequence of str
        Columns partialled out. With no covariates the centred column is
        returned.

    Returns
    -------
    pandas.Series
        Residuals aligned with ``frame.index``; NaN for rows where the
        target or any covariate is missing.

    Raises
    ------
    InsufficientDataError
        If fewer than 3 rows are complete.
    """
    covariates = list(covariates)
    data = frame[[target] + covariates].dropna()
    _check_complete_rows(data, target, covariates)
    if not covariates:
        residuals = data[target] - data[target].mean()
    else:
        model = OLS(data[target], add_constant(data[covariates], has_constant="add"))
        residuals = model.fit().resid
    return residuals.reindex(frame.index)


def _check_complete_rows(data: pd.DataFrame, target: str, covariates: list) -> None:
    if data.shape[0] < 3:
        raise InsufficientDataError(
            _pair_errors["insufficient_data_f"].format(
                data.shape[0], target, ", ".join(map(str, covariates)) or "no covariates"
            )
        )


def _random_key(random) -> pd.Series:
    if isinstance(random, pd.Series):
        return random.astype(str)
    if random.shape[1] == 1:
        return random.iloc[:, 0].astype(str)
    return random.astype(str).agg(" - ".join, axis=1)


def _standardize(data: pd.DataFrame) -> pd.DataFrame:
    scale = data.std(ddof=1).replace(0, 1)
    return (data - data.mean()) / scale


def residualize_multilevel(
    frame: pd.DataFrame, target: str, covariates: Sequence, random
) -> pd.Series:
    """
    Residuals of a random-intercept mixed model.

    The standardised ``target`` is modelled with fixed effects for the
    standardised ``covariates`` and a random intercept per level of
    ``random``. Several random factors are combined into one interaction
    key. Residuals are taken with respect to the fitted values, which
    include the predicted random intercepts. When the estimated intercept
    variance is zero (the grouping explains nothing) the predicted
    intercepts are zero and the fixed-effect fit is used.

    Parameters
    ----------
    frame : pandas.DataFrame
        Numeric data containing ``target`` and ``covariates``.
    target : str
        Column to adjust.
    covariates : Sequence of str
        Columns entered as fixed effects.
    random : pandas.Series or pandas.DataFrame
        Random factor(s), aligned with ``frame``.

    Returns
    -------
    pandas.Series
        Residuals aligned with ``frame.index``; NaN where inputs are missing.

    Raises
    ------
    InsufficientDataError
        If fewer than 3 rows are complete.
    ModelConvergenceError
        If the fit fails or does not converge.

    Notes
    -----
    Convergence warnings issued by ``statsmodels`` while the fit still
    converges are logged at WARNING level.
    """
    covariates = list(covariates)
    random = random.reindex(frame.index)
    complete = frame[[target] + covariates].notna().all(axis=1)
    complete &= (
        random.notna() if isinstance(random, pd.Series) else random.notna().all(axis=1)
    )
    _check_complete_rows(frame.loc[complete], target, covariates)
    data = _standardize(frame.loc[complete, [target] + covariates])
    key = _random_key(random.loc[complete])

    model = MixedLM(
        data[target],
        add_constant(data[covariates], has_constant="add"),
        groups=key,
    )
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", ConvergenceWarning)
        try:
            result = model.fit(method=["lbfgs", "powell"])
        except (ValueError, np.linalg.LinAlgError) as error:
            raise ModelConvergenceError(
                _pair_errors["convergence_f"].format(target, error)
            ) from error
    if not result.converged:
        raise ModelConvergenceError(
            _pair_errors["convergence_f"].format(target, "optimizer did not converge")
        )
    for warning in caught:
        if issubclass(warning.category, ConvergenceWarning):
            logger.warning(_warns["mixed_model_f"].format(target, warning.message))

    try:
        fitted = result.fittedvalues
    except ValueError:
        # singular random-effect covariance, predicted intercepts are zero
        logger.debug(
            "Random intercept variance of '%s' is zero, using the fixed-effect fit.", target
        )
        fitted = pd.Series(
            model.exog @ np.asarray(result.fe_params), index=data.index
        )
    residuals = data[target] - fitted
    return residuals.reindex(frame.index)


def _as_matrix(matrix):
    values = np.asarray(matrix, dtype=float)
    if values.ndim != 2 or values.shape[0] != values.shape[1]:
        raise ValueError(f"A square matrix is required, got shape {values.shape}.")
    return values


def _like(values, matrix):
    if isinstance(matrix, pd.DataFrame):
        return pd.DataFrame(values, index=matrix.index, columns=matrix.columns)
    return values


def cor_to_pcor(matrix):
    """
    Partial correlation matrix from a correlation matrix.

    Each off-diagonal entry is the correlation of the two variables given
    all others, ``-P_ij / sqrt(P_ii * P_jj)`` where ``P`` is the inverse of
    ``matrix``.

    Parameters
    ----------
    matrix : numpy.ndarray or pandas.DataFrame
        Square correlation matrix.

    Returns
    -------
    numpy.ndarray or pandas.DataFrame
        Same type (and labels) as ``matrix``.
    """
    values = _as_matrix(matrix)
    if np.min(np.linalg.eigvalsh(values)) <= 0:
        logger.warning(_warns["not_positive_definite"])
    precision = np.linalg.pinv(values)
    pcor = -cov2corr(precision)
    np.fill_diagonal(pcor, 1.0)
    return _like(pcor, matrix)


def pcor_to_cor(matrix):
    """
    Correlation matrix from a partial correlation matrix.

    Inverse of :func:`cor_to_pcor`: the scaled precision matrix has unit
    diagonal and ``-pcor`` off the diagonal; its inverse rescaled to unit
    diagonal is the correlation matrix.

    Parameters
    ----------
    matrix : numpy.ndarray or pandas.DataFrame
        Square partial correlation matrix.

    Returns
    -------
    numpy.ndarray or pandas.DataFrame
    """
    values = _as_matrix(matrix)
    scaled_precision = -values.copy()
    np.fill_diagonal(scaled_precision, 1.0)
    cor = cov2corr(np.linalg.pinv(scaled_precision))
    np.fill_diagonal(cor, 1.0)
    return _like(cor, matrix)


def partial_to_full(pcor, n, ci: float = 0.95, alternative: str = "two-sided") -> pd.DataFrame:
    """
    Zero-order correlations and their tests from a partial correlation matrix.

    Parameters
    ----------
    pcor : pandas.DataFrame or numpy.ndarray
        Square partial correlation matrix without missing values.
    n : int or array-like
        Number of observations, a scalar or one value per cell.
    ci : float, default=0.95
        Confidence level of the recomputed intervals.
    alternative : {'two-sided', 'greater', 'less'}, default='two-sided'
        Alternative hypothesis of the recomputed tests.

    Returns
    -------
    pandas.DataFrame
        One row per pair of the upper triangle with columns
        ``parameter1``, ``parameter2``, ``estimate``, ``statistic``,
        ``df_error``, ``p``, ``ci_low`` and ``ci_high``. Tests use zero
        covariates.

    Raises
    ------
    ValueError
        If ``pcor`` contains missing values.
    """
    values = _as_matrix(pcor)
    if np.isnan(values).any():
        raise ValueError("Partial correlation matrix contains missing values.")
    names = (
        list(pcor.columns) if isinstance(pcor, pd.DataFrame) else list(range(len(values)))
    )
    sizes = np.broadcast_to(np.asarray(n), values.shape)
    cor = pcor_to_cor(values)

    rows = []
    for i, j in zip(*np.triu_indices(len(values), k=1)):
        r, n_ij = float(cor[i, j]), int(sizes[i, j])
        _, statistic, df_error, p = cor_to_p(r, n_ij, alternative=alternative)
        ci_low, ci_high = cor_to_ci(r, n_ij, ci, alternative=alternative)
        rows.append(
            {
                "parameter1": names[i],
                "parameter2": names[j],
                "estimate": r,
                "statistic": statistic,
                "df_error": df_error,
                "p": p,
                "ci_low": ci_low,
                "ci_high": ci_high,
            }
        )
    return pd.DataFrame(rows)
