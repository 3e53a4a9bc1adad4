"""
Frequentist correlation estimators.

Every function takes two complete, non-constant float arrays of equal
length, the resolved :class:`~corrkit.types.TestSpec` and the number of
variables partialled out, and returns a dictionary with the fields of a
:class:`~corrkit.types.TestResult` it can fill (``estimate``, ``statistic``,
``p``, ``ci_low`` ...). Numerics are delegated to ``scipy`` and
``pingouin``; coefficient-only delegates get their inference from
:mod:`corrkit.methods.inference`.

Functions
---------
pearson, spearman, kendall, biweight, distance, percentage_bend, shepherd,
blomqvist, hoeffding, gamma, gaussian, biserial, point_biserial, winsorized
    One estimator per method.
hoeffding_d(x, y)
    Hoeffding's D statistic (scaled to [-0.5, 1]).
ESTIMATORS
    Mapping from :class:`~corrkit.types.Method` to estimator.
"""

import numpy as np
import pingouin as pg
from scipy import stats
from scipy.stats import mstats

from corrkit._utils import temp_random_state
from corrkit.exceptions import InsufficientDataError
from corrkit.types import Method, TestSpec

from .inference import cor_to_ci, cor_to_p
from .polychoric import polychoric, tetrachoric


def _closed_form(r, n, spec: TestSpec, n_covariates=0, method="pearson", p=None):
    statistic_name, statistic, df_error, p_closed = cor_to_p(
        r, n, n_covariates, method=method, alternative=spec.alternative
    )
    ci_low, ci_high = cor_to_ci(
        r, n, spec.ci, n_covariates, method=method, alternative=spec.alternative
    )
    # delegate p-values assume no partialled covariates
    if p is None or n_covariates > 0:
        p = p_closed
    return {
        "estimate": float(r),
        "statistic_name": statistic_name,
        "statistic": statistic,
        "df_error": df_error,
        "p": float(p),
        "ci_low": ci_low,
        "ci_high": ci_high,
    }


def _pingouin(x, y, spec: TestSpec, method: str, **kwargs):
    table = pg.corr(x, y, alternative=spec.alternative, method=method, **kwargs)
    # 'p_val' since pingouin 0.7
    p_column = "p_val" if "p_val" in table else "p-val"
    return table["r"].iloc[0], table[p_column].iloc[0], table


def _binary_split(x, y):
    """Return ``(codes, continuous)`` where ``codes`` is the 0/1 column."""
    if np.unique(y).size == 2:
        binary, continuous = y, x
    else:
        binary, continuous = x, y
    codes = (binary == np.max(binary)).astype(float)
    return codes, continuous


def pearson(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    r = stats.pearsonr(x, y)[0]
    return _closed_form(r, x.size, spec, n_covariates)


def spearman(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    rho = stats.spearmanr(x, y)[0]
    return _closed_form(rho, x.size, spec, n_covariates, method="spearman")


def kendall(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    tau, p = stats.kendalltau(x, y, alternative=spec.alternative)
    return _closed_form(tau, x.size, spec, n_covariates, method="kendall", p=p)


def biweight(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    """Biweight midcorrelation (``pingouin`` ``bicor``)."""
    r, p, _ = _pingouin(x, y, spec, "bicor", c=spec.tuning)
    return _closed_form(r, x.size, spec, n_covariates, p=p)


def percentage_bend(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    """Percentage bend correlation (Wilcox, 1994)."""
    r, p, _ = _pingouin(x, y, spec, "percbend", beta=spec.tuning)
    return _closed_form(r, x.size, spec, n_covariates, p=p)


def shepherd(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    """
    Shepherd's Pi: Spearman correlation after removing bivariate outliers.

    Outliers are detected by ``pingouin`` with a bootstrapped Mahalanobis
    distance; the bootstrap draws from NumPy's global generator, which is
    seeded with ``spec.seed`` for the duration of the call.
    """
    with temp_random_state(spec.seed):
        r, p, table = _pingouin(x, y, spec, "shepherd", n_boot=spec.n_boot)
    n_outliers = int(table["outliers"].iloc[0]) if "outliers" in table else 0
    result = _closed_form(
        r, x.size - n_outliers, spec, n_covariates, method="spearman", p=p
    )
    result["n_outliers"] = n_outliers
    return result


def distance(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    """Distance correlation with a permutation test (``pingouin``)."""
    dcor, p = pg.distance_corr(
        x, y, alternative="greater", n_boot=spec.n_boot, seed=spec.seed
    )
    return {"estimate": float(dcor), "p": float(p)}


def blomqvist(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    """
    Blomqvist's beta (medial correlation).

    Observations lying on a median line carry no sign and are ignored.
    """
    signs = np.sign(x - np.median(x)) * np.sign(y - np.median(y))
    signs = signs[signs != 0]
    if signs.size == 0:
        return {"estimate": np.nan}
    beta = signs.mean()
    statistic_name, statistic, _, p = cor_to_p(
        beta, signs.size, method="blomqvist", alternative=spec.alternative
    )
    return {
        "estimate": float(beta),
        "statistic_name": statistic_name,
        "statistic": statistic,
        "p": p,
    }


def hoeffding_d(x, y) -> float:
    """
    Hoeffding's D statistic, scaled by 30 so that it lies in [-0.5, 1].

    Ties are handled with the usual half / quarter weights in the bivariate
    ranks.
    """
    n = x.size
    r_x = stats.rankdata(x)
    r_y = stats.rankdata(y)
    dx = x[:, None] - x[None, :]
    dy = y[:, None] - y[None, :]
    q = (
        1
        + ((dx > 0) & (dy > 0)).sum(axis=1)
        + 0.5 * ((dx == 0) & (dy > 0)).sum(axis=1)
        + 0.5 * ((dx > 0) & (dy == 0)).sum(axis=1)
        + 0.25 * (((dx == 0) & (dy == 0)).sum(axis=1) - 1)
    )
    d1 = ((q - 1) * (q - 2)).sum()
    d2 = ((r_x - 1) * (r_x - 2) * (r_y - 1) * (r_y - 2)).sum()
    d3 = ((r_x - 2) * (r_y - 2) * (q - 1)).sum()
    numerator = (n - 2) * (n - 3) * d1 + d2 - 2 * (n - 2) * d3
    return float(30 * numerator / (n * (n - 1) * (n - 2) * (n - 3) * (n - 4)))


def hoeffding(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    """Hoeffding's D with a permutation p-value (``spec.n_boot`` resamples)."""
    if x.size < 5:
        raise InsufficientDataError(
            f"Hoeffding's D requires at least 5 observations, got {x.size}."
        )
    test = stats.permutation_test(
        (x,),
        lambda permuted: hoeffding_d(permuted, y),
        permutation_type="pairings",
        vectorized=False,
        n_resamples=spec.n_boot,
        alternative="greater",
        random_state=spec.seed,
    )
    return {"estimate": float(test.statistic), "p": float(test.pvalue)}


def gamma(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    """Goodman-Kruskal's gamma: (concordant - discordant) / untied pairs."""
    upper = np.triu_indices(x.size, k=1)
    products = (
        np.sign(x[:, None] - x[None, :]) * np.sign(y[:, None] - y[None, :])
    )[upper]
    concordant = np.sum(products > 0)
    discordant = np.sum(products < 0)
    if concordant + discordant == 0:
        return {"estimate": np.nan}
    value = (concordant - discordant) / (concordant + discordant)
    return _closed_form(value, x.size, spec, n_covariates)


def gaussian(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    """Pearson correlation of normal scores ``Phi^-1(rank / (n + 1))``."""
    return pearson(normal_scores(x), normal_scores(y), spec, n_covariates)


def normal_scores(values) -> np.ndarray:
    """Gaussian rank transform of a sample."""
    return stats.norm.ppf(stats.rankdata(values) / (values.size + 1))


def point_biserial(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    codes, continuous = _binary_split(x, y)
    r = stats.pearsonr(codes, continuous)[0]
    return _closed_form(r, x.size, spec, n_covariates)


def biserial(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    """
    Biserial correlation: latent normal variable behind the binary column.

    The estimate is not bounded by 1 in small samples and is reported as is.
    """
    codes, continuous = _binary_split(x, y)
    ones = codes == 1
    q = ones.mean()
    density = stats.norm.pdf(stats.norm.ppf(q))
    r = (
        (continuous[ones].mean() - continuous[~ones].mean())
        * ((1 - q) * q / density)
        / continuous.std(ddof=1)
    )
    return _closed_form(r, x.size, spec, n_covariates)


def winsorize(values, fraction: float) -> np.ndarray:
    """Symmetric winsorization of both tails by ``fraction``."""
    return np.asarray(mstats.winsorize(values, limits=(fraction, fraction)), dtype=float)


def winsorized(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    return pearson(
        winsorize(x, spec.tuning), winsorize(y, spec.tuning), spec, n_covariates
    )


def _polychoric(x, y, spec: TestSpec, n_covariates: int = 0, continuous=(False, False)) -> dict:
    rho, label = polychoric(x, y, continuous=continuous)
    result = _closed_form(rho, x.size, spec, n_covariates)
    result["method"] = label
    return result


def _tetrachoric(x, y, spec: TestSpec, n_covariates: int = 0) -> dict:
    return _closed_form(tetrachoric(x, y), x.size, spec, n_covariates)


ESTIMATORS = {
    Method.PEARSON: pearson,
    Method.SPEARMAN: spearman,
    Method.KENDALL: kendall,
    Method.BIWEIGHT: biweight,
    Method.DISTANCE: distance,
    Method.PERCENTAGE_BEND: percentage_bend,
    Method.SHEPHERD: shepherd,
    Method.BLOMQVIST: blomqvist,
    Method.HOEFFDING: hoeffding,
    Method.GAMMA: gamma,
    Method.GAUSSIAN: gaussian,
    Method.BISERIAL: biserial,
    Method.POINT_BISERIAL: point_biserial,
    Method.WINSORIZED: winsorized,
    Method.POLYCHORIC: _polychoric,
    Method.TETRACHORIC: _tetrachoric,
}
