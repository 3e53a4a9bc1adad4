import numpy as np
import pingouin as pg
import pytest

from corrkit.methods.bayesian import bayesian_correlation, hdi, log_posterior
from corrkit.types import Method, TestSpec

SPEC = TestSpec(method=Method.PEARSON, bayesian=True, n_draws=2000, seed=5)


def test_log_posterior_peaks_near_observed_correlation():
    grid = np.linspace(-0.99, 0.99, 1999)
    density = log_posterior(grid, r=0.4, n=200, kappa=1.0)
    assert grid[np.argmax(density)] == pytest.approx(0.4, abs=0.02)

def test_hdi_is_narrowest_interval():
    draws = np.concatenate([np.zeros(90), np.linspace(5, 10, 10)])
    assert hdi(draws, ci=0.85) == (0.0, 0.0)

def test_bayesian_correlation_summary():
    result = bayesian_correlation(0.5, 100, SPEC)
    assert set(result) == {"estimate", "ci_low", "ci_high", "pd", "bf10"}
    assert result["estimate"] == pytest.approx(0.5, abs=0.05)
    assert result["ci_low"] < result["estimate"] < result["ci_high"]
    assert result["pd"] == pytest.approx(1.0)
    assert result["bf10"] == pytest.approx(
        pg.bayesfactor_pearson(0.5, 100, kappa=SPEC.prior_scale))

@pytest.mark.parametrize("alternative", ["greater", "less"])
def test_bayes_factor_follows_alternative_and_prior(alternative):
    spec = TestSpec(method=Method.PEARSON, bayesian=True, alternative=alternative,
                    prior_scale=0.5, n_draws=500, seed=5)
    result = bayesian_correlation(0.3, 50, spec)
    expected = pg.bayesfactor_pearson(0.3, 50, alternative=alternative, method="ly", kappa=0.5)
    assert result["bf10"] == pytest.approx(expected)
    assert np.isfinite(result["bf10"])

def test_bayesian_correlation_is_reproducible():
    assert bayesian_correlation(0.2, 30, SPEC) == bayesian_correlation(0.2, 30, SPEC)

def test_narrow_prior_shrinks_towards_zero():
    narrow = TestSpec(method=Method.PEARSON, bayesian=True, prior_scale=1 / np.sqrt(27),
                      n_draws=2000, seed=5)
    wide = TestSpec(method=Method.PEARSON, bayesian=True, prior_scale=1.0,
                    n_draws=2000, seed=5)
    assert (bayesian_correlation(0.6, 20, narrow)["estimate"]
            < bayesian_correlation(0.6, 20, wide)["estimate"])

def test_bayesian_correlation_degenerate_posterior():
    result = bayesian_correlation(-1.0, 20, SPEC)
    assert result["estimate"] == -1.0
    assert result["ci_low"] == result["ci_high"] == -1.0
    assert np.isinf(result["bf10"])
