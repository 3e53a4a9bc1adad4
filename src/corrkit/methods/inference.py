"""
Frequentist inference derived from a correlation coefficient.

Most correlation delegates return only a coefficient (or a coefficient and
a p-value). The functions below turn a coefficient and a sample size into
a test statistic, degrees of freedom, a p-value and a confidence interval,
so that all methods report the same fields.

Functions
---------
fisher_z(r)
    Fisher's variance-stabilising transform ``atanh(r)``.
fisher_z_inverse(z)
    Back-transform ``tanh(z)``.
cor_to_p(r, n, n_covariates=0, method="pearson", alternative="two-sided")
    Test statistic, degrees of freedom and p-value of a coefficient.
cor_to_ci(r, n, ci=0.95, n_covariates=0, method="pearson",
          alternative="two-sided")
    Fisher-z confidence interval of a coefficient.

Notes
-----
For Kendall's tau and Blomqvist's beta the statistic is a z score,
otherwise it is a t score with ``n - 2 - n_covariates`` degrees of freedom.
Standard errors of the Fisher-z interval are ``1 / sqrt(n - 3 - k)``
(Pearson and most methods), ``sqrt(1.06 / (n - 3 - k))`` (Spearman,
Fieller et al., 1957) and ``sqrt(0.437 / (n - 4 - k))`` (Kendall).
"""

import numpy as np
from scipy import stats

_Z_METHODS = {"kendall", "blomqvist"}


def fisher_z(r):
    """Fisher's z transform of a correlation coefficient."""
    return np.arctanh(np.clip(r, -1.0, 1.0))


def fisher_z_inverse(z):
    """Inverse of :func:`fisher_z`."""
    return np.tanh(z)


def _tail_p(statistic, distribution, alternative):
    if alternative == "greater":
        return float(distribution.sf(statistic))
    if alternative == "less":
        return float(distribution.cdf(statistic))
    return float(2 * distribution.sf(abs(statistic)))


def cor_to_p(
    r: float,
    n: int,
    n_covariates: int = 0,
    method: str = "pearson",
    alternative: str = "two-sided",
) -> tuple:
    """
    Compute the test statistic and p-value of a correlation coefficient.

    Parameters
    ----------
    r : float
        Correlation coefficient.
    n : int
        Number of observations.
    n_covariates : int, default=0
        Number of variables partialled out.
    method : str, default='pearson'
        Method the coefficient comes from; ``'kendall'`` and ``'blomqvist'``
        use a z test, all others a t test.
    alternative : {'two-sided', 'greater', 'less'}, default='two-sided'
        Alternative hypothesis.

    Returns
    -------
    tuple of (str, float, float, float)
        ``(statistic_name, statistic, df_error, p)``. ``df_error`` is NaN for
        z tests. All numbers are NaN when ``r`` is NaN or the degrees of
        freedom are not positive.

    Examples
    --------
    >>> cor_to_p(0.5, 30)
    ('t', 3.0550504633038935, 28, 0.004895...)
    """
    if method in _Z_METHODS:
        if np.isnan(r) or n < 2:
            return "z", np.nan, np.nan, np.nan
        if method == "kendall":
            statistic = 3 * r * np.sqrt(n * (n - 1)) / np.sqrt(2 * (2 * n + 5))
        else:
            statistic = r * np.sqrt(n)
        return "z", float(statistic), np.nan, _tail_p(statistic, stats.norm, alternative)

    df_error = n - 2 - n_covariates
    if np.isnan(r) or df_error <= 0:
        return "t", np.nan, np.nan, np.nan
    with np.errstate(divide="ignore"):
        statistic = r * np.sqrt(df_error / (1 - r**2)) if abs(r) < 1 else np.sign(r) * np.inf
    return (
        "t",
        float(statistic),
        df_error,
        _tail_p(statistic, stats.t(df_error), alternative),
    )


def cor_to_ci(
    r: float,
    n: int,
    ci: float = 0.95,
    n_covariates: int = 0,
    method: str = "pearson",
    alternative: str = "two-sided",
) -> tuple:
    """
    Fisher-z confidence interval of a correlation coefficient.

    Parameters
    ----------
    r : float
        Correlation coefficient.
    n : int
        Number of observations.
    ci : float, default=0.95
        Confidence level.
    n_covariates : int, default=0
        Number of variables partialled out.
    method : str, default='pearson'
        Method the coefficient comes from (selects the standard error).
    alternative : {'two-sided', 'greater', 'less'}, default='two-sided'
        One-sided alternatives give intervals open towards 1 (``'greater'``)
        or -1 (``'less'``).

    Returns
    -------
    tuple of (float, float)
        ``(ci_low, ci_high)``; NaN when the interval is undefined (too few
        observations or NaN coefficient).

    Examples
    --------
    >>> low, high = cor_to_ci(0.5, 30)
    >>> round(low, 3), round(high, 3)
    (0.17, 0.729)
    """
    if method == "kendall":
        dof, variance = n - 4 - n_covariates, 0.437
    elif method == "spearman":
        dof, variance = n - 3 - n_covariates, 1.06
    else:
        dof, variance = n - 3 - n_covariates, 1.0
    if np.isnan(r) or dof <= 0:
        return np.nan, np.nan
    if abs(r) >= 1:
        return float(r), float(r)

    z = fisher_z(r)
    se = np.sqrt(variance / dof)
    if alternative == "two-sided":
        critical = stats.norm.ppf(1 - (1 - ci) / 2)
        return (
            float(fisher_z_inverse(z - critical * se)),
            float(fisher_z_inverse(z + critical * se)),
        )
    critical = stats.norm.ppf(ci)
    if alternative == "greater":
        return float(fisher_z_inverse(z - critical * se)), 1.0
    return -1.0, float(fisher_z_inverse(z + critical * se))
