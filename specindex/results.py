"""
Ranking of specificity results.

Top genes per group, and a per-group summary table in the manner of a
top-tags listing.
"""

import numpy as np
import pandas as pd

from .errors import InvalidParameterError


def _table_of(obj):
    if isinstance(obj, dict) and 'table' in obj:
        return obj['table']
    if isinstance(obj, pd.DataFrame):
        return obj
    raise ValueError("expected a specificity table or SpecificityResult")


def _check_n(n):
    if n is None or int(n) != n or n <= 0:
        raise InvalidParameterError(f"n must be a positive integer, got {n}")
    return int(n)


def _ranked(scores):
    """Positions of ``scores`` by descending value, ties in input order."""
    return np.argsort(-np.asarray(scores, dtype=np.float64), kind='stable')


def top_genes_per_group(obj, n=20):
    """The ``n`` most specific genes of every group.

    Parameters
    ----------
    obj : DataFrame or SpecificityResult
        Specificity table (genes x groups).
    n : int
        Genes per group. Fewer are returned if the table is shorter.

    Returns
    -------
    dict mapping group -> list of gene ids, in group column order.
    """
    n = _check_n(n)
    table = _table_of(obj)
    genes = np.asarray(table.index, dtype=object)
    out = {}
    for col in table.columns:
        order = _ranked(table[col].to_numpy())[:n]
        out[col] = list(genes[order])
    return out


def top_table(obj, group, n=10):
    """Summary table of the most specific genes for one group.

    Parameters
    ----------
    obj : DataFrame or SpecificityResult
        Specificity results.
    group : label
        Group column to rank by.
    n : int
        Number of rows.

    Returns
    -------
    DataFrame indexed by gene id with column ``SI`` and, where available,
    ``SD`` (bootstrap), ``PValue`` and ``FDR`` (permutation), plus ``Rank``.
    """
    n = _check_n(n)
    table = _table_of(obj)
    if group not in table.columns:
        raise KeyError(f"Group '{group}' not found; groups are {list(table.columns)}")

    order = _ranked(table[group].to_numpy())[:n]
    tab = pd.DataFrame({'SI': table[group].to_numpy()[order]},
                       index=table.index[order])
    if isinstance(obj, dict):
        for key, col in (('sd', 'SD'), ('pvalues', 'PValue'), ('fdr', 'FDR')):
            x = obj.get(key)
            if x is not None:
                tab[col] = x[group].to_numpy()[order]
    tab['Rank'] = np.arange(1, len(tab) + 1)
    return tab
