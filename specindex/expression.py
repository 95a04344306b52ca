"""
Expression measures for specindex.

Depth and length normalisation (cpm, rpkm, tpm) applied to raw counts
before specificity scoring, and per-group mean expression.
"""

import numpy as np
import pandas as pd

from .errors import InvalidGroupingError
from .exprset import as_expression
from .grouping import SampleGrouping


def _as_counts(y):
    y = np.asarray(y, dtype=np.float64)
    if np.isnan(y).any():
        raise ValueError("NA counts not allowed")
    if y.size and np.min(y) < 0:
        raise ValueError("Negative counts not allowed")
    if y.ndim == 1:
        y = y.reshape(-1, 1)
    return y


def cpm(y, lib_size=None, log=False, prior_count=2):
    """Counts per million.

    Parameters
    ----------
    y : array-like or DataFrame
        Count matrix (genes x samples).
    lib_size : array-like, optional
        Library sizes. Defaults to column sums.
    log : bool
        Return log2-CPM?
    prior_count : float
        Average count added to each observation before taking logs, scaled
        by relative library size.

    Returns
    -------
    ndarray, or DataFrame if ``y`` is a DataFrame.
    """
    frame = y if isinstance(y, pd.DataFrame) else None
    y = _as_counts(y)
    if y.size == 0:
        return y.copy()

    if lib_size is None:
        lib_size = y.sum(axis=0)
    lib_size = np.asarray(lib_size, dtype=np.float64)
    if len(lib_size) != y.shape[1]:
        raise ValueError("Length of lib_size differs from number of libraries")
    if np.any(lib_size <= 0):
        raise ValueError("library sizes should be greater than zero")

    if log:
        # prior scaled to library size, library augmented by twice the prior
        prior = prior_count * lib_size / np.mean(lib_size)
        out = np.log2((y + prior[np.newaxis, :])
                      / (lib_size + 2 * prior)[np.newaxis, :] * 1e6)
    else:
        out = y / lib_size[np.newaxis, :] * 1e6

    if frame is not None:
        return pd.DataFrame(out, index=frame.index, columns=frame.columns)
    return out


def rpkm(y, gene_length, lib_size=None, log=False, prior_count=2):
    """Reads per kilobase per million.

    Parameters
    ----------
    y : array-like or DataFrame
        Count matrix.
    gene_length : array-like
        Gene lengths in bp, one per row.
    lib_size, log, prior_count :
        As for cpm().
    """
    gene_length = np.asarray(gene_length, dtype=np.float64)
    if np.any(gene_length <= 0):
        raise ValueError("gene lengths should be greater than zero")
    gene_length_kb = gene_length / 1000

    result = cpm(y, lib_size=lib_size, log=log, prior_count=prior_count)
    if len(gene_length_kb) != result.shape[0]:
        raise ValueError("Length of gene_length differs from number of genes")

    if log:
        return result - np.log2(gene_length_kb[:, np.newaxis])
    return result / gene_length_kb[:, np.newaxis]


def tpm(y, gene_length):
    """Transcripts per million.

    Counts are divided by gene length, then scaled so that every sample
    sums to one million.
    """
    frame = y if isinstance(y, pd.DataFrame) else None
    y = _as_counts(y)
    A = np.asarray(gene_length, dtype=np.float64)
    if len(A) != y.shape[0]:
        raise ValueError("Length of gene_length differs from number of genes")
    if np.any(A <= 0):
        raise ValueError("gene lengths should be greater than zero")
    t = y / A[:, np.newaxis]
    col_sums = t.sum(axis=0)
    if np.any(col_sums <= 0):
        raise ValueError("library sizes should be greater than zero")
    out = t / col_sums[np.newaxis, :] * 1e6
    if frame is not None:
        return pd.DataFrame(out, index=frame.index, columns=frame.columns)
    return out


def _group_means(values, members):
    """Mean of ``values`` over each index array in ``members``."""
    out = np.empty((values.shape[0], len(members)), dtype=np.float64)
    for k, idx in enumerate(members):
        if len(idx) == 0:
            raise InvalidGroupingError("every group needs at least one sample")
        out[:, k] = values[:, idx].mean(axis=1)
    return out


def compute_group_means(y, groups=None, levels=None):
    """Mean expression of every gene in every group.

    Parameters
    ----------
    y : array-like, DataFrame or ExpressionSet
        Expression matrix (genes x samples).
    groups : sequence, dict, Series or SampleGrouping
        Group of each sample. Optional for ExpressionSet input.
    levels : sequence, optional
        Output column order. Defaults to first appearance in ``groups``.

    Returns
    -------
    DataFrame (genes x groups).
    """
    values, gene_ids, grouping = as_expression(y, groups)
    if levels is not None:
        grouping = SampleGrouping(grouping.samples, grouping.labels, levels=levels)
        if grouping.n_groups != len(list(levels)):
            raise InvalidGroupingError("every group needs at least one sample")

    means = _group_means(values, grouping.member_indices())
    return pd.DataFrame(means, index=pd.Index(gene_ids, name='gene'),
                        columns=grouping.levels)
