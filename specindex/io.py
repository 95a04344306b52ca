"""
I/O functions for specindex.

Tab-separated expression tables and sample sheets in, specificity tables
out. Expression tables have gene ids in the first column and one numeric
column per sample; specificity tables have gene ids in the first column
and one numeric column per group.
"""

import os

import numpy as np
import pandas as pd

from .exprset import make_exprset
from .grouping import SampleGrouping


def _sep_for(path, sep):
    if sep is None:
        return ',' if str(path).endswith('.csv') else '\t'
    return sep


def read_expression(path, sep=None, verbose=False):
    """Read a genes x samples expression table.

    Parameters
    ----------
    path : str
        Table file. The header row holds sample ids; the first column holds
        gene ids.
    sep : str, optional
        Field separator. Defaults to tab, or comma for ``.csv`` files.
    verbose : bool
        Print a one-line summary.

    Returns
    -------
    DataFrame indexed by gene id.
    """
    df = pd.read_csv(path, sep=_sep_for(path, sep), index_col=0)
    df.index = df.index.astype(str)
    df.index.name = 'gene'
    df.columns = [str(c) for c in df.columns]

    numeric_cols = df.select_dtypes(include=[np.number]).columns
    if len(numeric_cols) != len(df.columns):
        bad = [c for c in df.columns if c not in set(numeric_cols)]
        raise ValueError(f"non-numeric columns in {os.path.basename(path)}: {bad}")
    if df.index.has_duplicates:
        raise ValueError(f"Repeated gene ids in {os.path.basename(path)}. "
                         f"Gene ids must be unique.")
    if verbose:
        print(f"Read {df.shape[0]} genes x {df.shape[1]} samples "
              f"from {os.path.basename(path)}")
    return df.astype(np.float64)


def read_sample_sheet(path, sample_col='sample', group_col='group', sep=None):
    """Read a sample sheet into a ``SampleGrouping``.

    Rows keep their file order, which fixes the group column order of
    every table computed from the grouping.
    """
    df = pd.read_csv(path, sep=_sep_for(path, sep), dtype=str)
    for col in (sample_col, group_col):
        if col not in df.columns:
            raise ValueError(f"column '{col}' not found in {os.path.basename(path)}")
    return SampleGrouping(df[sample_col].tolist(), df[group_col].tolist())


def read_exprset(path, sample_sheet, sample_col='sample', group_col='group',
                 sep=None, verbose=False):
    """Read an expression table and sample sheet into an ExpressionSet."""
    df = read_expression(path, sep=sep, verbose=verbose)
    grouping = read_sample_sheet(sample_sheet, sample_col=sample_col,
                                 group_col=group_col)
    return make_exprset(df, group=grouping)


def write_specificity_table(obj, path, sep='\t', float_format=None):
    """Write a specificity table.

    Parameters
    ----------
    obj : DataFrame or SpecificityResult
        Table (genes x groups) to write. For a SpecificityResult the mean
        scores are written.
    path : str
        Output file.
    float_format : str, optional
        Format string for scores, e.g. '%.6g'. By default scores are
        written at full precision.
    """
    table = obj['table'] if isinstance(obj, dict) else obj
    out = table.copy()
    out.index = out.index.astype(str)
    out.index.name = out.index.name or 'gene'
    out.to_csv(path, sep=sep, float_format=float_format)


def read_specificity_table(path, sep='\t'):
    """Read a table written by write_specificity_table()."""
    df = pd.read_csv(path, sep=sep, index_col=0, float_precision='round_trip')
    df.index = df.index.astype(str)
    return df
