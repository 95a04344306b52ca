"""
ExpressionSet construction and input coercion.

Every public entry point accepts an ndarray, a DataFrame, a scipy sparse
matrix or an ExpressionSet; ``as_expression`` turns any of them into a
dense float matrix, gene ids and an aligned ``SampleGrouping``.
"""

import numpy as np
import pandas as pd
import warnings
import scipy.sparse as sp

from .classes import ExpressionSet
from .errors import InvalidGroupingError
from .grouping import SampleGrouping, make_grouping


def _densify(values):
    """Convert sparse input to a dense float64 array, with a warning."""
    if sp.issparse(values):
        shape = values.shape
        density = values.nnz / (shape[0] * shape[1]) if shape[0] * shape[1] > 0 else 0
        warnings.warn(
            f"Densifying sparse matrix ({shape[0]} x {shape[1]}, "
            f"{100*density:.1f}% non-zero, "
            f"{shape[0] * shape[1] * 8 / 1e6:.0f} MB dense). "
            f"specindex stores expression as dense arrays.",
            stacklevel=3,
        )
        return np.asarray(values.toarray(), dtype=np.float64)
    return np.asarray(values, dtype=np.float64)


def _validate_values(values):
    if values.size == 0:
        raise ValueError("expression matrix must contain at least one value")
    if np.isnan(values).any():
        raise ValueError("NA expression values not allowed")
    if np.min(values) < 0:
        raise ValueError("Negative expression values not allowed")
    if not np.isfinite(np.max(values)):
        raise ValueError("Infinite expression values not allowed")


def make_exprset(values, group=None, samples=None, genes=None):
    """Construct an ExpressionSet from components.

    Parameters
    ----------
    values : array-like, sparse matrix or DataFrame
        Expression matrix (genes x samples). A DataFrame supplies gene ids
        (index) and sample ids (columns).
    group : array-like, dict, Series or SampleGrouping, optional
        Group of each sample. Defaults to a single group.
    samples : sequence of str, optional
        Sample ids. Taken from DataFrame columns if not given.
    genes : sequence of str or DataFrame, optional
        Gene ids or gene annotation. Taken from DataFrame index if not given.

    Returns
    -------
    ExpressionSet
    """
    if isinstance(values, pd.DataFrame):
        numeric_mask = values.dtypes.apply(lambda dt: np.issubdtype(dt, np.number))
        if not numeric_mask.all():
            raise ValueError(
                f"non-numeric expression columns: {list(values.columns[~numeric_mask])}")
        if samples is None:
            samples = [str(c) for c in values.columns]
        if genes is None:
            genes = [str(g) for g in values.index]
        values = values.to_numpy(dtype=np.float64)

    values = _densify(values)
    if values.ndim == 1:
        values = values.reshape(1, -1)
    _validate_values(values)

    ngenes, nsamples = values.shape

    if samples is None:
        samples = [f"Sample{i+1}" for i in range(nsamples)]
    samples = [str(s) for s in samples]
    if len(samples) != nsamples:
        raise ValueError("Number of sample ids must equal number of columns")

    if group is None:
        grouping = SampleGrouping(samples, [1] * nsamples)
    else:
        grouping = make_grouping(group, samples=samples)

    if genes is None:
        genes = pd.DataFrame(index=[str(i+1) for i in range(ngenes)])
    elif isinstance(genes, pd.DataFrame):
        genes = genes.copy()
        if len(genes) != ngenes:
            raise ValueError("Expression matrix and genes have different numbers of rows")
    else:
        genes = pd.DataFrame(index=[str(g) for g in genes])
        if len(genes) != ngenes:
            raise ValueError("Expression matrix and genes have different numbers of rows")
    if genes.index.has_duplicates:
        raise ValueError("Repeated gene ids. Gene ids must be unique.")
    genes.index.name = 'gene'

    x = ExpressionSet()
    x['expr'] = values
    x['samples'] = pd.DataFrame({'group': grouping.to_series().values},
                                index=pd.Index(samples, name='sample'))
    x['genes'] = genes
    return x


def as_expression(y, groups=None):
    """Coerce input to ``(values, gene_ids, grouping)``.

    ``groups`` may be omitted only for ExpressionSet input, whose sample
    sheet carries the grouping. A grouping keyed by sample id is aligned to
    the matrix columns; a mismatch raises ``InvalidGroupingError``.
    """
    if isinstance(y, dict) and 'expr' in y:
        values = np.asarray(y['expr'], dtype=np.float64)
        gene_ids = list(y['genes'].index)
        if groups is None:
            grouping = y.grouping()
        else:
            grouping = make_grouping(groups, samples=list(y['samples'].index))
        return values, gene_ids, grouping

    if groups is None:
        raise InvalidGroupingError("a sample grouping is required")

    if isinstance(y, pd.DataFrame):
        if y.index.has_duplicates:
            raise ValueError("Repeated gene ids. Gene ids must be unique.")
        columns = [str(c) for c in y.columns]
        gene_ids = [str(g) for g in y.index]
        values = y.to_numpy(dtype=np.float64)
        grouping = make_grouping(groups, samples=columns)
    else:
        values = _densify(y)
        if values.ndim == 1:
            values = values.reshape(1, -1)
        gene_ids = [str(i+1) for i in range(values.shape[0])]
        if _is_keyed(groups):
            grouping = make_grouping(groups)
        else:
            labels = list(np.asarray(groups, dtype=object).ravel())
            grouping = make_grouping(labels)
        if grouping.n_samples != values.shape[1]:
            raise InvalidGroupingError(
                f"matrix has {values.shape[1]} columns but grouping has "
                f"{grouping.n_samples} samples")

    _validate_values(values)
    return values, gene_ids, grouping


def _is_keyed(groups):
    return isinstance(groups, (SampleGrouping, pd.Series, dict))
