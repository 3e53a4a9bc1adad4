import logging

import numpy as np
import pandas as pd
import pytest
from scipy import stats

from corrkit.adjust import (
    cor_to_pcor, partial_to_full, pcor_to_cor, residualize, residualize_multilevel)
from corrkit.exceptions import InsufficientDataError, ModelConvergenceError


def test_cor_to_pcor_known_values(target):
    pcor = cor_to_pcor(target)
    # r(V2, V3 | V1) = (0 - 0.3 * 0.6) / sqrt((1 - 0.09) * (1 - 0.36))
    expected = -0.18 / np.sqrt(0.91 * 0.64)
    assert pcor[1, 2] == pytest.approx(expected)
    assert pcor[2, 1] == pytest.approx(expected)
    np.testing.assert_allclose(np.diag(pcor), 1.0)

def test_pcor_to_cor_inverts_cor_to_pcor(target):
    np.testing.assert_allclose(pcor_to_cor(cor_to_pcor(target)), target, atol=1e-12)

def test_two_variables_are_unchanged():
    matrix = np.array([[1.0, -0.4], [-0.4, 1.0]])
    np.testing.assert_allclose(cor_to_pcor(matrix), matrix)
    np.testing.assert_allclose(pcor_to_cor(matrix), matrix)

def test_matrix_conversion_keeps_labels(target):
    frame = pd.DataFrame(target, index=["a", "b", "c"], columns=["a", "b", "c"])
    pcor = cor_to_pcor(frame)
    assert isinstance(pcor, pd.DataFrame)
    assert list(pcor.columns) == ["a", "b", "c"]

def test_cor_to_pcor_warns_on_indefinite_matrix(caplog):
    indefinite = np.array([[1.0, 0.9, 0.9], [0.9, 1.0, -0.9], [0.9, -0.9, 1.0]])
    with caplog.at_level(logging.WARNING, logger="corrkit"):
        cor_to_pcor(indefinite)
    assert "not positive definite" in caplog.text

def test_cor_to_pcor_requires_square_matrix():
    with pytest.raises(ValueError, match="square matrix"):
        cor_to_pcor(np.ones((2, 3)))

# tests for partial_to_full

def test_partial_to_full_recomputes_tests(target):
    pcor = pd.DataFrame(cor_to_pcor(target), index=["a", "b", "c"], columns=["a", "b", "c"])
    full = partial_to_full(pcor, n=100)
    assert list(full["parameter1"]) == ["a", "a", "b"]
    assert list(full["parameter2"]) == ["b", "c", "c"]
    np.testing.assert_allclose(full["estimate"], [0.3, 0.6, 0.0], atol=1e-12)
    assert (full["df_error"] == 98).all()
    assert full.loc[2, "p"] == pytest.approx(1.0)
    assert (full["ci_low"] < full["estimate"]).all()

def test_partial_to_full_rejects_missing_values():
    pcor = np.array([[1.0, np.nan], [np.nan, 1.0]])
    with pytest.raises(ValueError, match="missing values"):
        partial_to_full(pcor, n=10)

# tests for residualize

def test_residualize_removes_linear_effect():
    rng = np.random.default_rng(0)
    z = rng.normal(size=100)
    frame = pd.DataFrame({"y": 2 * z + rng.normal(size=100), "z": z})
    residuals = residualize(frame, "y", ["z"])
    assert residuals.mean() == pytest.approx(0.0, abs=1e-10)
    assert stats.pearsonr(residuals, z)[0] == pytest.approx(0.0, abs=1e-10)

def test_residualize_keeps_index_and_missing_rows():
    frame = pd.DataFrame({"y": [1.0, 2.0, 4.0, np.nan, 3.0], "z": [1.0, np.nan, 2.0, 3.0, 5.0]},
                         index=list("abcde"))
    residuals = residualize(frame, "y", ["z"])
    assert list(residuals.index) == list("abcde")
    assert residuals[["b", "d"]].isna().all()
    assert residuals[["a", "c", "e"]].notna().all()

def test_residualize_requires_three_complete_rows():
    frame = pd.DataFrame({"y": [1.0, 2.0, 3.0, 4.0], "z": [np.nan, np.nan, np.nan, 1.0]})
    with pytest.raises(InsufficientDataError, match="Only 1 complete observations"):
        residualize(frame, "y", ["z"])

def test_residualize_without_covariates_centres():
    frame = pd.DataFrame({"y": [1.0, 2.0, 6.0]})
    np.testing.assert_allclose(residualize(frame, "y", []), [-2.0, -1.0, 3.0])

# tests for residualize_multilevel

def test_residualize_multilevel_removes_group_means():
    rng = np.random.default_rng(1)
    groups = np.repeat(["a", "b", "c", "d", "e", "f"], 40)
    offsets = dict(zip("abcdef", [-3.0, -1.5, 0.0, 1.0, 2.0, 4.0]))
    frame = pd.DataFrame({
        "y": [offsets[g] for g in groups] + rng.normal(size=240),
        "z": rng.normal(size=240),
    })
    residuals = residualize_multilevel(frame, "y", ["z"], pd.Series(groups))
    group_means = residuals.groupby(groups).mean()
    assert group_means.abs().max() < 0.1
    assert len(residuals) == 240

def test_residualize_multilevel_with_unrelated_groups():
    rng = np.random.default_rng(5)
    z = rng.normal(size=300)
    frame = pd.DataFrame({"y": z + rng.normal(size=300), "z": z})
    groups = pd.Series(rng.choice(["a", "b", "c"], size=300))
    residuals = residualize_multilevel(frame, "y", ["z"], groups)
    assert residuals.notna().all()
    # without group effects the residuals are those of the standardised OLS fit
    expected = residualize(frame, "y", ["z"]) / frame["y"].std()
    np.testing.assert_allclose(residuals, expected, atol=0.1)

def test_residualize_multilevel_singular_random_effects(mocker):
    rng = np.random.default_rng(6)
    z = rng.normal(size=60)
    frame = pd.DataFrame({"y": z + rng.normal(size=60), "z": z})
    mocker.patch(
        "statsmodels.regression.mixed_linear_model.MixedLMResults.fittedvalues",
        new_callable=mocker.PropertyMock,
        side_effect=ValueError(
            "Cannot predict random effects from singular covariance structure."),
    )
    residuals = residualize_multilevel(frame, "y", ["z"], pd.Series(np.repeat(["a", "b"], 30)))
    expected = residualize(frame, "y", ["z"]) / frame["y"].std()
    np.testing.assert_allclose(residuals, expected, atol=0.05)

def test_residualize_multilevel_requires_three_complete_rows():
    frame = pd.DataFrame({"y": [1.0, 2.0, np.nan, 4.0], "z": [1.0, 0.0, 1.0, 0.0]})
    groups = pd.Series(["a", "a", "b", None])
    with pytest.raises(InsufficientDataError):
        residualize_multilevel(frame, "y", ["z"], groups)

def test_residualize_multilevel_convergence_failure(mocker):
    mocker.patch(
        "statsmodels.regression.mixed_linear_model.MixedLM.fit",
        side_effect=np.linalg.LinAlgError("Singular matrix"),
    )
    frame = pd.DataFrame({"y": [1.0, 2.0, 3.0, 4.0], "z": [1.0, 0.0, 1.0, 0.0]})
    with pytest.raises(ModelConvergenceError, match="Mixed model for 'y' did not converge"):
        residualize_multilevel(frame, "y", ["z"], pd.Series(["a", "a", "b", "b"]))
