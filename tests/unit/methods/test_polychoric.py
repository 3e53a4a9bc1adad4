import numpy as np
import pytest

from corrkit.methods.polychoric import polychoric, tetrachoric, thresholds


@pytest.fixture
def latent():
    rng = np.random.default_rng(2024)
    cov = [[1.0, 0.5], [0.5, 1.0]]
    return rng.multivariate_normal([0.0, 0.0], cov, size=3000)


def test_thresholds_from_marginals():
    np.testing.assert_allclose(thresholds([0, 0, 1, 1]), [0.0])
    np.testing.assert_allclose(
        thresholds([0, 1, 1, 2]), [-0.6744897501960817, 0.6744897501960817])

def test_polychoric_recovers_latent_correlation(latent):
    x = np.digitize(latent[:, 0], [-0.8, 0.3]).astype(float)
    y = np.digitize(latent[:, 1], [-0.2, 0.9]).astype(float)
    rho, label = polychoric(x, y)
    assert label == "Polychoric correlation"
    assert rho == pytest.approx(0.5, abs=0.06)

def test_polychoric_is_invariant_to_level_values(latent):
    x = np.digitize(latent[:, 0], [-0.8, 0.3]).astype(float)
    y = np.digitize(latent[:, 1], [-0.2, 0.9]).astype(float)
    assert polychoric(x, y)[0] == pytest.approx(polychoric(x * 10 + 3, y)[0])

def test_tetrachoric_recovers_latent_correlation(latent):
    x = (latent[:, 0] > 0).astype(float)
    y = (latent[:, 1] > 0.4).astype(float)
    assert tetrachoric(x, y) == pytest.approx(0.5, abs=0.08)

def test_polyserial_with_continuous_partner(latent):
    y = np.digitize(latent[:, 1], [-0.5, 0.5]).astype(float)
    rho, label = polychoric(latent[:, 0], y, continuous=(True, False))
    assert label == "Polyserial correlation"
    assert rho == pytest.approx(0.5, abs=0.06)
    swapped, _ = polychoric(y, latent[:, 0], continuous=(False, True))
    assert swapped == pytest.approx(rho)

def test_polychoric_negative_association(latent):
    x = np.digitize(latent[:, 0], [0.0]).astype(float)
    y = np.digitize(-latent[:, 1], [-0.5, 0.5]).astype(float)
    rho, _ = polychoric(x, y)
    assert rho == pytest.approx(-0.5, abs=0.08)
