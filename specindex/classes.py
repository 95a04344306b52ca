"""
Core data classes for specindex.

Dict-based containers with attribute access, subsetting and display:
``ExpressionSet`` holds a genes x samples matrix with its sample sheet,
``SpecificityResult`` holds the output of a specificity run.
"""

import numpy as np
import pandas as pd
from copy import deepcopy

from .grouping import SampleGrouping


class _SpecBase(dict):
    """Base class providing dict-like access, subsetting, and display."""

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")

    def __setattr__(self, name, value):
        self[name] = value

    def __delattr__(self, name):
        try:
            del self[name]
        except KeyError:
            raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")

    @property
    def shape(self):
        if 'expr' in self:
            return self['expr'].shape
        if 'table' in self:
            return self['table'].shape
        return None

    def __repr__(self):
        cls = type(self).__name__
        components = list(self.keys())
        s = self.shape
        if s is not None:
            return f"{cls} with {s[0]} rows and {s[1]} columns\nComponents: {', '.join(components)}"
        return f"{cls}\nComponents: {', '.join(components)}"

    def _copy(self):
        """Deep copy of the object."""
        return deepcopy(self)

    def head(self, n=5):
        """Show first n rows."""
        if 'table' in self:
            return self['table'].head(n)
        if 'expr' in self:
            return self.to_frame().head(n)
        return None

    def tail(self, n=5):
        """Show last n rows."""
        if 'table' in self:
            return self['table'].tail(n)
        if 'expr' in self:
            return self.to_frame().tail(n)
        return None


def _resolve_index(idx, names):
    """Resolve index to integer array. Supports bool, int, str, slice."""
    if idx is None:
        return None
    if isinstance(idx, slice):
        return idx
    idx = np.atleast_1d(idx)
    if idx.dtype == bool:
        return np.where(idx)[0]
    if idx.dtype.kind in ('U', 'S', 'O') and names is not None:
        names_arr = np.asarray(names, dtype=object)
        result = []
        for name in idx:
            matches = np.where(names_arr == name)[0]
            if len(matches) == 0:
                raise KeyError(f"Name '{name}' not found")
            result.append(matches[0])
        return np.array(result, dtype=np.intp)
    return idx.astype(int)


class ExpressionSet(_SpecBase):
    """Normalized expression values with sample and gene annotation.

    Attributes
    ----------
    expr : ndarray
        Expression matrix (genes x samples), non-negative.
    samples : DataFrame
        Indexed by sample id, with a categorical ``group`` column.
    genes : DataFrame
        Indexed by gene id.
    """

    def __getitem__(self, key):
        if isinstance(key, str):
            return super().__getitem__(key)
        if isinstance(key, tuple) and len(key) == 2:
            i, j = key
        else:
            raise IndexError("Two subscripts required")

        i_idx = _resolve_index(i, list(self['genes'].index))
        j_idx = _resolve_index(j, list(self['samples'].index))

        out = self._copy()
        values = out['expr']
        if i_idx is not None:
            values = values[i_idx]
            out['genes'] = out['genes'].iloc[i_idx]
        if j_idx is not None:
            values = values[:, j_idx]
            sam = out['samples'].iloc[j_idx].copy()
            sam['group'] = sam['group'].cat.remove_unused_categories()
            out['samples'] = sam
        out['expr'] = values
        return out

    @property
    def gene_ids(self):
        return list(self['genes'].index)

    @property
    def sample_ids(self):
        return list(self['samples'].index)

    def grouping(self):
        """``SampleGrouping`` built from the sample sheet."""
        group = self['samples']['group']
        levels = list(group.cat.categories) if hasattr(group, 'cat') else None
        return SampleGrouping(self.sample_ids, list(group.values), levels=levels)

    def to_frame(self):
        return pd.DataFrame(self['expr'], index=self['genes'].index,
                            columns=self['samples'].index)


class SpecificityResult(_SpecBase):
    """Specificity scores per gene and group.

    Attributes
    ----------
    table : DataFrame
        Specificity index (genes x groups), values in [0, 1]. For
        bootstrap runs this is the mean over replicates.
    sd : DataFrame or None
        Bootstrap standard deviation of the scores.
    pvalues, fdr : DataFrame or None
        Permutation p-values and adjusted p-values.
    groups : list
        Group levels, in column order.
    floor : float
    iterations : int or None
    method : str
        'direct', 'bootstrap' or 'permutation'.
    """

    def __getitem__(self, key):
        if isinstance(key, str):
            return super().__getitem__(key)
        if isinstance(key, tuple) and len(key) == 2:
            i, j = key
        else:
            raise IndexError("Two subscripts required")

        out = self._copy()
        table = out['table']
        i_idx = _resolve_index(i, list(table.index))
        j_idx = _resolve_index(j, list(table.columns))
        for k in ('table', 'sd', 'pvalues', 'fdr'):
            x = out.get(k)
            if x is None:
                continue
            if i_idx is not None:
                x = x.iloc[i_idx]
            if j_idx is not None:
                x = x.iloc[:, j_idx]
            out[k] = x
        out['groups'] = list(out['table'].columns)
        return out

    def __repr__(self):
        out = f"Specificity index ({self.get('method', 'direct')}"
        if self.get('iterations'):
            out += f", {self['iterations']} iterations"
        out += ")\n"
        if 'table' in self:
            out += str(self['table'])
        return out
