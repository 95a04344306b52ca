"""Smoke tests for plotting functions."""

import matplotlib
matplotlib.use('Agg')

import pytest

import specindex as si


class TestVisualizationSmoke:
    """Plotting returns a figure and axes."""

    @pytest.fixture(scope="class")
    def result(self):
        import numpy as np
        import pandas as pd
        rng = np.random.RandomState(3)
        y = pd.DataFrame(rng.gamma(3.0, 2.0, size=(30, 9)),
                         index=[f"gene{i}" for i in range(30)],
                         columns=[f"s{j}" for j in range(9)])
        groups = ['basket'] * 3 + ['granule'] * 3 + ['Purkinje'] * 3
        return si.specificity(y, groups, iterations=10, rng=0)

    def test_heatmap(self, result):
        import matplotlib.pyplot as plt
        fig, ax = si.plot_top_genes_heatmap(result, n=5, main='Top genes')
        assert ax.get_title() == 'Top genes'
        assert len(ax.get_xticklabels()) == 3
        assert 5 <= len(ax.get_yticklabels()) <= 15
        plt.close(fig)

    def test_distribution(self, result):
        import matplotlib.pyplot as plt
        fig, ax = si.plot_si_distribution(result['table'], bins=20)
        assert ax.get_xlabel() == 'Specificity index'
        plt.close(fig)
