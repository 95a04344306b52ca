"""Tests for bootstrap resampling of the specificity index."""

import warnings

import numpy as np
import pandas as pd
import pytest

import specindex as si


@pytest.fixture
def grouping(cell_types):
    return si.make_grouping(cell_types)


# ── spawn_generators / resample_columns ──────────────────────────────

class TestRandomStreams:
    """Per-replicate generators and column draws."""

    def test_int_seed_reproducible(self):
        a = [g.random() for g in si.spawn_generators(7, 3)]
        b = [g.random() for g in si.spawn_generators(7, 3)]
        assert a == b
        assert len(set(a)) == 3

    def test_generator_input(self):
        gens = si.spawn_generators(np.random.default_rng(3), 4)
        assert len(gens) == 4
        assert all(isinstance(g, np.random.Generator) for g in gens)

    def test_random_state_input(self, rng):
        gens = si.spawn_generators(rng, 2)
        assert gens[0].random() != gens[1].random()

    def test_draws_stay_within_group(self, grouping):
        members = si.resample_columns(grouping, np.random.default_rng(0))
        for drawn, own in zip(members, grouping.member_indices()):
            assert len(drawn) == len(own)
            assert set(drawn) <= set(own)

    def test_permutation_keeps_sizes(self, grouping):
        members = si.permute_columns(grouping, np.random.default_rng(0))
        assert [len(m) for m in members] == list(grouping.sizes)
        assert sorted(np.concatenate(members)) == list(range(12))


# ── specificity_index_resampled ──────────────────────────────────────

class TestResampledIndex:
    """Bootstrap-averaged specificity index."""

    def test_single_iteration_is_one_replicate(self, expr_frame, grouping):
        seed = 123
        gen = si.spawn_generators(seed, 1)[0]
        cols = np.concatenate(si.resample_columns(grouping, gen))
        values = expr_frame.to_numpy()
        means = si.compute_group_means(values[:, cols], grouping.labels[cols],
                                       levels=grouping.levels)
        expected = si.specificity_index(means)

        got = si.specificity_index_resampled(expr_frame, grouping,
                                             iterations=1, rng=seed)
        assert np.allclose(got.values, expected.values, rtol=0, atol=1e-15)

    def test_same_seed_same_table(self, expr_frame, cell_types):
        a = si.specificity_index_resampled(expr_frame, cell_types, iterations=50, rng=99)
        b = si.specificity_index_resampled(expr_frame, cell_types, iterations=50, rng=99)
        assert np.array_equal(a.values, b.values)

    def test_different_seed_differs(self, expr_frame, cell_types):
        a = si.specificity_index_resampled(expr_frame, cell_types, iterations=20, rng=1)
        b = si.specificity_index_resampled(expr_frame, cell_types, iterations=20, rng=2)
        assert not np.array_equal(a.values, b.values)

    def test_parallel_matches_serial(self, expr_frame, cell_types):
        serial = si.specificity_index_resampled(expr_frame, cell_types,
                                                iterations=40, rng=5, n_jobs=1)
        threaded = si.specificity_index_resampled(expr_frame, cell_types,
                                                  iterations=40, rng=5, n_jobs=4)
        assert np.array_equal(serial.values, threaded.values)

    def test_bounds_and_shape(self, expr_frame, cell_types):
        out = si.specificity_index_resampled(expr_frame, cell_types, iterations=30, rng=0)
        assert out.shape == (40, 3)
        assert list(out.index) == list(expr_frame.index)
        assert list(out.columns) == ['granule', 'purkinje', 'glia']
        assert out.values.min() >= 0.0
        assert out.values.max() <= 1.0

    def test_toy_scenario(self, toy_matrix, toy_groups):
        out = si.specificity_index_resampled(toy_matrix, toy_groups, iterations=25, rng=0)
        assert np.allclose(out.values, [[1.0, 0.0], [0.0, 0.0]])

    def test_close_to_direct(self, expr_frame, cell_types):
        boot = si.specificity_index_resampled(expr_frame, cell_types,
                                              iterations=200, rng=11)
        assert np.allclose(boot.loc['g1':'g5', 'granule'], 1.0)
        assert (boot.loc['g6':'g10', 'purkinje'] > 0.5).all()

    def test_zero_iterations(self, toy_matrix, toy_groups):
        with pytest.raises(si.InvalidParameterError):
            si.specificity_index_resampled(toy_matrix, toy_groups, iterations=0)

    def test_negative_floor(self, toy_matrix, toy_groups):
        with pytest.raises(si.InvalidParameterError):
            si.specificity_index_resampled(toy_matrix, toy_groups, floor=-0.5,
                                           iterations=5)

    def test_exprset_input(self, expr_frame, cell_types):
        es = si.make_exprset(expr_frame, group=cell_types)
        a = si.specificity_index_resampled(es, iterations=10, rng=3)
        b = si.specificity_index_resampled(expr_frame, cell_types, iterations=10, rng=3)
        assert np.array_equal(a.values, b.values)


class TestDegenerateGroups:
    """Groups with a single sample."""

    def test_all_singletons_match_direct(self):
        y = np.array([[7.0, 1.0, 0.0],
                      [2.0, 2.0, 2.0],
                      [0.0, 3.0, 9.0]])
        groups = ['A', 'B', 'C']
        direct = si.specificity_index(si.compute_group_means(y, groups))
        with pytest.warns(si.DegenerateGroupWarning):
            boot = si.specificity_index_resampled(y, groups, iterations=100, rng=4)
        assert np.array_equal(boot.values, direct.values)

    def test_singleton_with_constant_groups(self):
        # group C has one sample with value 7; the other groups are constant
        y = np.array([[3.0, 3.0, 1.0, 1.0, 7.0]])
        groups = ['A', 'A', 'B', 'B', 'C']
        direct = si.specificity_index(si.compute_group_means(y, groups))
        with pytest.warns(si.DegenerateGroupWarning, match="'C'"):
            boot = si.specificity_index_resampled(y, groups, iterations=100, rng=8)
        assert np.allclose(boot.values, direct.values)
        assert np.isclose(boot.loc['1', 'C'], ((1 - 3 / 7) + (1 - 1 / 7)) / 2)

    def test_no_warning_without_singletons(self, toy_matrix, toy_groups):
        with warnings.catch_warnings():
            warnings.simplefilter('error', si.DegenerateGroupWarning)
            si.specificity_index_resampled(toy_matrix, toy_groups, iterations=3, rng=0)

    def test_direct_mode_does_not_warn(self):
        with warnings.catch_warnings():
            warnings.simplefilter('error', si.DegenerateGroupWarning)
            si.specificity(np.array([[1.0, 2.0]]), ['A', 'B'])
