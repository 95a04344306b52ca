"""Shared fixtures for specindex tests."""

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def rng():
    """Seeded random number generator for reproducibility."""
    return np.random.RandomState(42)


@pytest.fixture
def toy_matrix():
    """2 genes x 4 samples: gene1 only in A, gene2 flat."""
    return np.array([[10.0, 10.0, 0.0, 0.0],
                     [5.0, 5.0, 5.0, 5.0]])


@pytest.fixture
def toy_groups():
    return ['A', 'A', 'B', 'B']


@pytest.fixture
def expr_frame(rng):
    """40 genes x 12 samples in three groups of four.

    Genes g1-g5 are expressed only in 'granule', g6-g10 are ten times higher
    in 'purkinje' as elsewhere; the rest are Gamma noise.
    """
    values = rng.gamma(shape=4.0, scale=5.0, size=(40, 12))
    values[:5, 4:] = 0
    values[5:10, 4:8] *= 10
    genes = [f"g{i+1}" for i in range(40)]
    samples = [f"s{j+1}" for j in range(12)]
    return pd.DataFrame(values, index=genes, columns=samples)


@pytest.fixture
def cell_types():
    """Group of each sample of expr_frame, keyed by sample id."""
    labels = ['granule'] * 4 + ['purkinje'] * 4 + ['glia'] * 4
    return pd.Series(labels, index=[f"s{j+1}" for j in range(12)])
