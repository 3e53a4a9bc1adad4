"""
Bayesian estimation of a correlation coefficient.

The posterior of rho combines Jeffreys' (1961) approximate likelihood of a
sample correlation ``r`` observed on ``n`` pairs,

    ``L(rho) ~ (1 - rho^2)^((n - 1) / 2) * (1 - rho * r)^(-(n - 3/2))``,

with a stretched symmetric beta prior on (-1, 1) of scale ``kappa``,
``p(rho) ~ (1 - rho^2)^(1 / kappa - 1)``. Draws are produced with SciPy's
UNU.RAN inversion sampler; the Bayes factor is the analytic one of
``pingouin.bayesfactor_pearson``.

Robust and rank methods enter through the coefficient they produce
(Spearman's rho, the Gaussian rank or winsorized ``r``), which is then
treated as a Pearson coefficient.

Functions
---------
log_posterior(rho, r, n, kappa)
    Unnormalised log posterior density of rho.
hdi(draws, ci)
    Highest density interval of a sample.
bayesian_correlation(r, n, spec, n_covariates=0)
    Posterior summary of a coefficient.
"""

import logging

import numpy as np
import pingouin as pg
from scipy.stats.sampling import NumericalInversePolynomial

from corrkit.types import TestSpec

logger = logging.getLogger(__name__)

_EDGE = 1e-9


def log_posterior(rho, r: float, n: int, kappa: float):
    """
    Unnormalised log posterior density of rho.

    Parameters
    ----------
    rho : float or numpy.ndarray
        Values in (-1, 1) where the density is evaluated.
    r : float
        Observed correlation.
    n : int
        Number of observations.
    kappa : float
        Prior scale; ``kappa=1`` is the uniform prior.

    Returns
    -------
    float or numpy.ndarray
    """
    rho = np.asarray(rho, dtype=float)
    loglik = (n - 1) / 2 * np.log1p(-(rho**2)) - (n - 1.5) * np.log1p(-rho * r)
    logprior = (1 / kappa - 1) * np.log1p(-(rho**2))
    return loglik + logprior


class _Posterior:
    """Posterior density in the form UNU.RAN expects (``pdf`` + ``support``)."""

    def __init__(self, r, n, kappa):
        self.r, self.n, self.kappa = r, n, kappa
        self._offset = float(log_posterior(r, r, n, kappa))

    def pdf(self, rho):
        return np.exp(log_posterior(rho, self.r, self.n, self.kappa) - self._offset)

    def support(self):
        return -1 + _EDGE, 1 - _EDGE


def hdi(draws, ci: float = 0.95) -> tuple:
    """
    Highest density interval: the narrowest interval holding ``ci`` of draws.

    Examples
    --------
    >>> hdi(np.arange(101) / 100, ci=0.5)
    (0.0, 0.5)
    """
    ordered = np.sort(np.asarray(draws))
    n_inside = int(np.ceil(ci * ordered.size))
    n_inside = min(max(n_inside, 1), ordered.size)
    widths = ordered[n_inside - 1 :] - ordered[: ordered.size - n_inside + 1]
    start = int(np.argmin(widths))
    return float(ordered[start]), float(ordered[start + n_inside - 1])


def bayesian_correlation(r: float, n: int, spec: TestSpec, n_covariates: int = 0) -> dict:
    """
    Posterior summary of a correlation coefficient.

    Parameters
    ----------
    r : float
        Frequentist coefficient of the (transformed) pair.
    n : int
        Number of complete observations.
    spec : TestSpec
        Resolved test; ``prior_scale``, ``n_draws``, ``ci``, ``alternative``
        and ``seed`` are used.
    n_covariates : int, default=0
        Number of variables partialled out; reduces the effective ``n``.

    Returns
    -------
    dict
        ``estimate`` (posterior median), ``ci_low`` / ``ci_high`` (highest
        density interval), ``pd`` (probability of direction) and ``bf10``.

    Notes
    -----
    A coefficient of exactly +/-1 gives a degenerate posterior: the
    estimate and both interval bounds equal ``r``, ``pd`` is 1 and ``bf10``
    is infinite.
    """
    n_effective = n - n_covariates
    if abs(r) >= 1 - _EDGE:
        logger.debug("Perfect correlation (r=%s), posterior is degenerate.", r)
        return {
            "estimate": float(np.sign(r)),
            "ci_low": float(np.sign(r)),
            "ci_high": float(np.sign(r)),
            "pd": 1.0,
            "bf10": np.inf,
        }

    sampler = NumericalInversePolynomial(
        _Posterior(r, n_effective, spec.prior_scale),
        center=float(r),
        domain=(-1 + _EDGE, 1 - _EDGE),
        random_state=np.random.default_rng(spec.seed),
    )
    draws = np.asarray(sampler.rvs(spec.n_draws))
    ci_low, ci_high = hdi(draws, spec.ci)
    bf10 = pg.bayesfactor_pearson(
        r,
        n_effective,
        alternative=spec.alternative,
        method="ly",
        kappa=spec.prior_scale,
    )
    return {
        "estimate": float(np.median(draws)),
        "ci_low": ci_low,
        "ci_high": ci_high,
        "pd": float(max(np.mean(draws > 0), np.mean(draws < 0))),
        "bf10": float(bf10),
    }
