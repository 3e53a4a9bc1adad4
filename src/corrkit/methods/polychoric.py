"""
Latent-variable correlations for ordered factors.

Polychoric and tetrachoric correlations assume that each factor is a
discretised standard normal variable and estimate the correlation of the
two latent normals. Estimation follows the two-step approach: thresholds
are fixed from the marginal proportions, then rho maximises the
likelihood of the observed contingency table under the bivariate normal
model.

When one of the columns is continuous the polyserial correlation is
returned instead, using the ad hoc estimator of Olsson, Drasgow and
Dorans (1982).

Functions
---------
thresholds(codes)
    Normal thresholds of an ordered factor.
polychoric(x, y, continuous=(False, False))
    Polychoric (or polyserial) correlation.
tetrachoric(x, y)
    Tetrachoric correlation of two binary columns.
"""

import numpy as np
from scipy import optimize, stats

# stand-in for +/- infinity in the bivariate normal cdf
_BOUND = 10.0
_RHO_BOUNDS = (-0.999, 0.999)


def _codes(values) -> np.ndarray:
    return np.unique(values, return_inverse=True)[1]


def thresholds(codes) -> np.ndarray:
    """
    Normal thresholds separating the levels of an ordered factor.

    Parameters
    ----------
    codes : array-like of int
        Level codes ``0 .. L-1``.

    Returns
    -------
    numpy.ndarray
        ``L - 1`` increasing thresholds ``Phi^-1(P(code <= j))``.

    Examples
    --------
    >>> thresholds([0, 0, 1, 1])
    array([0.])
    """
    counts = np.bincount(np.asarray(codes))
    cumulative = np.cumsum(counts)[:-1] / counts.sum()
    return np.clip(stats.norm.ppf(cumulative), -_BOUND, _BOUND)


def _cell_probabilities(tau_x, tau_y, rho) -> np.ndarray:
    edges_x = np.concatenate(([-_BOUND], tau_x, [_BOUND]))
    edges_y = np.concatenate(([-_BOUND], tau_y, [_BOUND]))
    grid = np.array([[a, b] for a in edges_x for b in edges_y])
    cdf = stats.multivariate_normal(
        mean=[0.0, 0.0], cov=[[1.0, rho], [rho, 1.0]]
    ).cdf(grid)
    cdf = np.asarray(cdf).reshape(edges_x.size, edges_y.size)
    return cdf[1:, 1:] - cdf[:-1, 1:] - cdf[1:, :-1] + cdf[:-1, :-1]


def _latent_correlation(codes_x, codes_y) -> float:
    table = np.zeros((codes_x.max() + 1, codes_y.max() + 1))
    np.add.at(table, (codes_x, codes_y), 1)
    tau_x, tau_y = thresholds(codes_x), thresholds(codes_y)

    def negative_loglik(rho):
        probabilities = np.clip(_cell_probabilities(tau_x, tau_y, rho), 1e-300, None)
        return -np.sum(table * np.log(probabilities))

    fit = optimize.minimize_scalar(
        negative_loglik, bounds=_RHO_BOUNDS, method="bounded"
    )
    return float(fit.x)


def _polyserial(continuous, codes) -> float:
    r = stats.pearsonr(continuous, codes)[0]
    density = stats.norm.pdf(thresholds(codes)).sum()
    rho = r * np.std(codes, ddof=1) / density
    return float(np.clip(rho, *_RHO_BOUNDS))


def polychoric(x, y, continuous=(False, False)) -> tuple:
    """
    Polychoric correlation of two ordered factors.

    Parameters
    ----------
    x, y : numpy.ndarray
        Complete observations; factor columns hold level codes (any
        numbers whose order matches the level order).
    continuous : tuple of bool, default=(False, False)
        Whether ``x`` / ``y`` is continuous. With exactly one continuous
        column the polyserial correlation is computed.

    Returns
    -------
    tuple of (float, str)
        The estimate and the method label (``'Polychoric correlation'`` or
        ``'Polyserial correlation'``).
    """
    continuous_x, continuous_y = continuous
    if continuous_x and not continuous_y:
        return _polyserial(x, _codes(y)), "Polyserial correlation"
    if continuous_y and not continuous_x:
        return _polyserial(y, _codes(x)), "Polyserial correlation"
    return _latent_correlation(_codes(x), _codes(y)), "Polychoric correlation"


def tetrachoric(x, y) -> float:
    """Tetrachoric correlation: the polychoric correlation of two 2x2 factors."""
    return _latent_correlation(_codes(x), _codes(y))
