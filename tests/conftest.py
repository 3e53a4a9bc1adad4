import numpy as np
import pandas as pd
import pytest

TARGET = np.array([[1.0, 0.3, 0.6],
                   [0.3, 1.0, 0.0],
                   [0.6, 0.0, 1.0]])


def simulate_exact(n, target, seed=0):
    """Sample whose empirical correlation matrix equals ``target`` exactly."""
    rng = np.random.default_rng(seed)
    values = rng.standard_normal((n, target.shape[0]))
    values -= values.mean(axis=0)
    whitening = np.linalg.inv(np.linalg.cholesky(np.cov(values, rowvar=False)))
    values = values @ whitening.T
    return values @ np.linalg.cholesky(target).T


@pytest.fixture
def exact_data():
    values = simulate_exact(500, TARGET, seed=123)
    df = pd.DataFrame(values, columns=["V1", "V2", "V3"])
    rng = np.random.default_rng(7)
    df["Group"] = rng.choice(["A", "B", "C"], size=len(df))
    return df


@pytest.fixture
def linear_data():
    rng = np.random.default_rng(42)
    x = rng.normal(size=60)
    return pd.DataFrame({
        "x": x,
        "y": 0.8 * x + rng.normal(scale=0.6, size=60),
        "z": rng.normal(size=60),
    })


@pytest.fixture
def mixed_types():
    rng = np.random.default_rng(3)
    n = 90
    latent = rng.normal(size=n)
    return pd.DataFrame({
        "score": latent + rng.normal(scale=0.5, size=n),
        "level": pd.Categorical(
            np.digitize(latent, [-0.5, 0.5]).astype(str),
            categories=["0", "1", "2"], ordered=True),
        "passed": (latent > 0).astype(int),
        "colour": rng.choice(["red", "green", "blue"], size=n),
    })


@pytest.fixture
def target():
    return TARGET.copy()
