import numpy as np
import pandas as pd
import pytest

from corrkit import UnsupportedCombinationError, cor_test, cor_to_pcor, correlation, pcor_to_cor

OFFSETS = {
    "A": (-2.0, 1.0, 1.5),
    "B": (0.5, -1.5, 0.0),
    "C": (1.5, 0.5, -1.5),
}


@pytest.fixture
def clustered(exact_data):
    """Exact data shifted by a group-specific intercept per variable."""
    shift = np.array([OFFSETS[g] for g in exact_data["Group"]])
    data = exact_data.copy()
    data[["V1", "V2", "V3"]] += shift
    return data


def _within_group_matrix(data):
    values = data[["V1", "V2", "V3"]]
    centred = values - values.groupby(data["Group"]).transform("mean")
    return centred.corr().to_numpy()


def test_multilevel_with_unrelated_groups_recovers_target(exact_data, target):
    table = correlation(exact_data, groups="Group", multilevel=True)
    matrix = table.as_matrix(redundant=True).to_numpy()
    assert np.abs(matrix - target).max() < 0.01

@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_multilevel_with_random_labels(exact_data, target, seed):
    labels = np.random.default_rng(seed).choice(["A", "B", "C"], size=len(exact_data))
    data = exact_data.assign(Group=labels)
    table = correlation(data, multilevel=True)
    assert not any(result.is_na for result in table)
    matrix = table.as_matrix(redundant=True).to_numpy()
    assert np.abs(matrix - target).max() < 0.01

    partial = correlation(data, multilevel=True, partial=True)
    full = pcor_to_cor(partial.as_matrix(redundant=True)).to_numpy()
    assert np.abs(full - target).max() < 0.01

def test_multilevel_removes_group_intercepts(clustered, target):
    pooled = correlation(clustered)
    assert not np.allclose(pooled.as_matrix(redundant=True).to_numpy(), target, atol=0.05)

    table = correlation(clustered, groups="Group", multilevel=True)
    assert not table.is_grouped
    assert len(table) == 3
    assert not table.options.partial
    matrix = table.as_matrix(redundant=True).to_numpy()
    np.testing.assert_allclose(matrix, _within_group_matrix(clustered), atol=0.01)
    np.testing.assert_allclose(matrix, target, atol=0.03)

def test_multilevel_partial_matrix(clustered, target):
    table = correlation(clustered, groups="Group", multilevel=True, partial=True)
    pcor = table.as_matrix(redundant=True)
    np.testing.assert_allclose(pcor.to_numpy(), cor_to_pcor(target), atol=0.03)
    np.testing.assert_allclose(pcor_to_cor(pcor).to_numpy(), target, atol=0.03)
    # 500 - 2 - 1 covariate - 2 extra random intercepts
    assert (table.to_frame()["df_error"] == 495).all()

def test_multilevel_uses_factor_columns_by_default(clustered):
    explicit = correlation(clustered, groups="Group", multilevel=True)
    implicit = correlation(clustered, multilevel=True)
    np.testing.assert_allclose(
        [r.estimate for r in implicit], [r.estimate for r in explicit])

def test_multilevel_subset_of_pairs(clustered):
    subset = correlation(clustered, select="V1", select2="V3", random="Group", multilevel=True)
    assert len(subset) == 1
    # selected columns are the only ones adjusted for
    reduced = correlation(clustered[["V1", "V3", "Group"]], random="Group", multilevel=True)
    assert subset[0].estimate == pytest.approx(reduced[0].estimate)

def test_multilevel_cor_test(clustered):
    table = correlation(clustered, groups="Group", multilevel=True)
    result = cor_test(clustered, "V1", "V2", groups="Group", multilevel=True)
    assert result.estimate == pytest.approx(table[0].estimate)

@pytest.mark.parametrize(
    "kwargs, match",
    [
        ({"random": "Group"}, "only be used with multilevel"),
        ({"groups": "Group", "random": "Group", "multilevel": True}, "do not pass 'random'"),
        ({"multilevel": True, "method": "point_biserial", "select": ["V1", "flag"]},
         "cannot be combined with multilevel"),
    ]
)
def test_multilevel_rejected_requests(clustered, kwargs, match):
    data = clustered.assign(flag=(clustered["V1"] > 0).astype(int))
    with pytest.raises(UnsupportedCombinationError, match=match):
        correlation(data, **kwargs)

def test_multilevel_failed_fit_gives_na_rows(clustered, mocker):
    mocker.patch(
        "statsmodels.regression.mixed_linear_model.MixedLM.fit",
        side_effect=ValueError("boom"),
    )
    table = correlation(clustered, groups="Group", multilevel=True, partial=True)
    assert all(result.is_na for result in table)
    assert {result.error for result in table} == {"ModelConvergenceError"}

def test_multilevel_without_convergence_converts_to_na(clustered, mocker):
    mocker.patch(
        "statsmodels.regression.mixed_linear_model.MixedLM.fit",
        side_effect=ValueError("boom"),
    )
    table = correlation(clustered, groups="Group", multilevel=True)
    assert all(result.is_na for result in table)
    assert "cannot be converted back" in table[0].note

def test_multilevel_with_missing_values(clustered):
    data = clustered.copy()
    data.loc[data.index[:10], "V2"] = np.nan
    data.loc[data.index[-5:], "Group"] = None
    table = correlation(data, groups="Group", multilevel=True, partial=True)
    assert not any(result.is_na for result in table)
    assert isinstance(table.to_frame(), pd.DataFrame)

def test_multilevel_partial_degrees_of_freedom_match_repeated_measures(clustered):
    # N - k - 1 with k subjects, as in a repeated-measures correlation
    result = cor_test(clustered[["V1", "V2", "Group"]], "V1", "V2",
                      groups="Group", multilevel=True, partial=True)
    assert result.df_error == 496
