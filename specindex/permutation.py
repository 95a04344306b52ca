"""
Permutation p-values for specificity scores.

The null distribution of each gene's specificity index is built by
shuffling sample labels across all columns, keeping the group sizes, and
recomputing the index. P-values are adjusted within each group.
"""

import numpy as np
import pandas as pd
from statsmodels.stats.multitest import multipletests

from .classes import SpecificityResult
from .errors import InvalidParameterError
from .expression import _group_means
from .exprset import as_expression
from .resampling import permute_columns, run_replicates, spawn_generators
from .specificity import _check_floor, _si_matrix

DEFAULT_PERMUTATIONS = 1000

_METHOD_MAP = {
    'BH': 'fdr_bh', 'fdr': 'fdr_bh', 'BY': 'fdr_by',
    'holm': 'holm', 'hochberg': 'simes-hochberg', 'bonferroni': 'bonferroni',
}

# scores within this distance of the observed value count as ties
_TIE_TOL = 1e-12


def adjust_pvalues(pvalues, method='BH'):
    """Multiple-testing adjustment of a vector of p-values.

    NaN p-values are left as NaN and excluded from the adjustment.
    """
    if method == 'none':
        return np.asarray(pvalues, dtype=np.float64).copy()
    if method not in _METHOD_MAP:
        raise ValueError(f"adjust_method must be one of {list(_METHOD_MAP) + ['none']}")
    p = np.asarray(pvalues, dtype=np.float64)
    out = np.full_like(p, np.nan)
    valid = ~np.isnan(p)
    if valid.any():
        _, adj, _, _ = multipletests(p[valid], method=_METHOD_MAP[method])
        out[valid] = adj
    return out


def permutation_test(y, groups=None, floor=0, n_perm=DEFAULT_PERMUTATIONS,
                     rng=None, adjust_method='BH', n_jobs=1, verbose=False):
    """Empirical p-values for the specificity index.

    Parameters
    ----------
    y : array-like, DataFrame or ExpressionSet
        Expression matrix (genes x samples).
    groups : sequence, dict, Series or SampleGrouping, optional
        Group of each sample.
    floor : float
        Floor applied to group means.
    n_perm : int
        Number of label permutations.
    rng : None, int, SeedSequence or Generator
        Source of randomness; see spawn_generators().
    adjust_method : str
        'BH', 'BY', 'holm', 'hochberg', 'bonferroni' or 'none'. Applied
        separately to each group.
    n_jobs : int
        Worker threads.
    verbose : bool
        Print a one-line summary.

    Returns
    -------
    SpecificityResult with ``table`` (observed SI), ``pvalues`` and ``fdr``.
    """
    floor = _check_floor(floor)
    if n_perm is None or int(n_perm) != n_perm or n_perm < 1:
        raise InvalidParameterError(f"n_perm must be a positive integer, got {n_perm}")
    n_perm = int(n_perm)
    if adjust_method != 'none' and adjust_method not in _METHOD_MAP:
        raise ValueError(f"adjust_method must be one of {list(_METHOD_MAP) + ['none']}")

    values, gene_ids, grouping = as_expression(y, groups)
    observed = _si_matrix(_group_means(values, grouping.member_indices()), floor)

    def replicate(gen):
        members = permute_columns(grouping, gen)
        null = _si_matrix(_group_means(values, members), floor)
        return null >= observed - _TIE_TOL

    exceed = np.zeros(observed.shape, dtype=np.int64)
    for hit in run_replicates(replicate, spawn_generators(rng, n_perm), n_jobs=n_jobs):
        exceed += hit
    pvalues = (exceed + 1.0) / (n_perm + 1.0)

    fdr = np.column_stack([adjust_pvalues(pvalues[:, k], adjust_method)
                           for k in range(pvalues.shape[1])])

    index = pd.Index(gene_ids, name='gene')
    res = SpecificityResult()
    res['table'] = pd.DataFrame(observed, index=index, columns=grouping.levels)
    res['sd'] = None
    res['pvalues'] = pd.DataFrame(pvalues, index=index, columns=grouping.levels)
    res['fdr'] = pd.DataFrame(fdr, index=index, columns=grouping.levels)
    res['groups'] = grouping.levels
    res['floor'] = floor
    res['iterations'] = n_perm
    res['adjust_method'] = adjust_method
    res['method'] = 'permutation'
    if verbose:
        nsig = int(np.sum(fdr < 0.05))
        print(f"{n_perm} permutations: {nsig} gene-group pairs with "
              f"adjusted p < 0.05 ({adjust_method})")
    return res
