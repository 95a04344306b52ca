"""
Gene filtering for specindex.

Removes genes too weakly expressed to be specific to any group.
"""

import numpy as np
import pandas as pd

from .errors import InvalidParameterError
from .exprset import as_expression


def filter_by_expression(y, groups=None, min_expr=1.0, min_prop=0.5,
                         min_total=0.0):
    """Filter low-expressed genes.

    A gene is kept if, in at least one group, a proportion ``min_prop`` of
    that group's samples have expression of at least ``min_expr``, and its
    total expression across samples is at least ``min_total``.

    Parameters
    ----------
    y : array-like, DataFrame or ExpressionSet
        Normalized expression matrix (genes x samples).
    groups : sequence, dict, Series or SampleGrouping, optional
        Group of each sample.
    min_expr : float
        Minimum expression value (e.g. RPKM or TPM).
    min_prop : float
        Minimum proportion of a group's samples, in (0, 1].
    min_total : float
        Minimum summed expression across all samples.

    Returns
    -------
    ndarray of bool, or Series of bool indexed by gene for DataFrame and
    ExpressionSet input. True for genes to keep.
    """
    if not 0 < min_prop <= 1:
        raise InvalidParameterError(f"min_prop must be in (0, 1], got {min_prop}")
    if min_expr < 0:
        raise InvalidParameterError(f"min_expr must be non-negative, got {min_expr}")

    values, gene_ids, grouping = as_expression(y, groups)

    tol = 1e-14
    above = values >= min_expr
    keep = np.zeros(values.shape[0], dtype=bool)
    for idx in grouping.member_indices():
        need = min_prop * len(idx)
        keep |= above[:, idx].sum(axis=1) >= (need - tol)
    keep &= values.sum(axis=1) >= (min_total - tol)

    if isinstance(y, pd.DataFrame) or (isinstance(y, dict) and 'expr' in y):
        return pd.Series(keep, index=pd.Index(gene_ids, name='gene'), name='keep')
    return keep
