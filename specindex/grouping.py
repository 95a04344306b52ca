"""
Sample grouping for specindex.

A ``SampleGrouping`` fixes the set of group labels once, in order of first
appearance, so every table computed from it has the same column order.
"""

import numpy as np
import pandas as pd

from .errors import InvalidGroupingError


class SampleGrouping:
    """Ordered assignment of samples to groups.

    Parameters
    ----------
    samples : sequence of str
        Sample identifiers, one per matrix column.
    labels : sequence
        Group label of each sample, aligned with ``samples``.
    levels : sequence, optional
        Level order to use instead of first appearance in ``labels``.
        Levels with no samples are dropped.

    Attributes
    ----------
    samples : ndarray of str
    labels : ndarray
    levels : list
        Distinct labels in first-appearance order.
    codes : ndarray of int
        Index into ``levels`` for each sample.
    """

    def __init__(self, samples, labels, levels=None):
        samples = [str(s) for s in samples]
        labels = list(labels)
        if len(samples) != len(labels):
            raise InvalidGroupingError(
                f"{len(labels)} group labels given for {len(samples)} samples")
        if len(samples) == 0:
            raise InvalidGroupingError("grouping must contain at least one sample")
        if len(set(samples)) != len(samples):
            dup = pd.Index(samples)[pd.Index(samples).duplicated()].unique()
            raise InvalidGroupingError(f"Repeated sample ids: {list(dup)}")
        if any(pd.isna(lab) for lab in labels):
            raise InvalidGroupingError("NA group labels not allowed")

        codes, uniques = pd.factorize(pd.Series(labels, dtype=object), sort=False)
        uniques = list(uniques)
        if levels is not None:
            present = set(uniques)
            allowed = set(levels)
            unknown = [lab for lab in uniques if lab not in allowed]
            if unknown:
                raise InvalidGroupingError(f"labels not among levels: {unknown}")
            order = [lev for lev in levels if lev in present]
            remap = np.array([order.index(lab) for lab in uniques], dtype=np.intp)
            codes = remap[codes]
            uniques = order
        self._samples = np.array(samples, dtype=object)
        self._labels = np.array(labels, dtype=object)
        self._levels = uniques
        self._codes = np.asarray(codes, dtype=np.intp)
        self._members = [np.flatnonzero(self._codes == k)
                         for k in range(len(self._levels))]
        for arr in (self._samples, self._labels, self._codes):
            arr.flags.writeable = False

    @property
    def samples(self):
        return self._samples

    @property
    def labels(self):
        return self._labels

    @property
    def levels(self):
        return list(self._levels)

    @property
    def codes(self):
        return self._codes

    @property
    def n_samples(self):
        return len(self._samples)

    @property
    def n_groups(self):
        return len(self._levels)

    @property
    def sizes(self):
        """Number of samples per level, in level order."""
        return np.array([len(m) for m in self._members], dtype=np.intp)

    @property
    def singletons(self):
        """Levels with exactly one member sample."""
        return [lev for lev, m in zip(self._levels, self._members) if len(m) == 1]

    def members(self, level):
        """Column indices of the samples in ``level``."""
        try:
            k = self._levels.index(level)
        except ValueError:
            raise KeyError(f"Group '{level}' not found")
        return self._members[k].copy()

    def member_indices(self):
        """Column indices per level, in level order."""
        return [m.copy() for m in self._members]

    def to_series(self):
        return pd.Series(pd.Categorical(self._labels, categories=self._levels),
                         index=pd.Index(self._samples, name='sample'),
                         name='group')

    def __len__(self):
        return self.n_samples

    def __eq__(self, other):
        if not isinstance(other, SampleGrouping):
            return NotImplemented
        return (list(self._samples) == list(other._samples)
                and list(self._labels) == list(other._labels)
                and self._levels == other._levels)

    def __hash__(self):
        return hash((tuple(self._samples), tuple(self._labels), tuple(self._levels)))

    def __repr__(self):
        parts = ", ".join(f"{lev}: {n}" for lev, n in zip(self._levels, self.sizes))
        return f"SampleGrouping with {self.n_samples} samples in {self.n_groups} groups ({parts})"


def make_grouping(groups, samples=None):
    """Build a ``SampleGrouping``.

    Parameters
    ----------
    groups : SampleGrouping, Series, dict or sequence
        Group labels. A Series or dict is keyed by sample id; a plain
        sequence is aligned with ``samples`` (or with positional sample ids
        ``Sample1..SampleN`` when ``samples`` is None).
    samples : sequence of str, optional
        Sample ids, typically the matrix column names.

    Returns
    -------
    SampleGrouping
    """
    if isinstance(groups, SampleGrouping):
        if samples is None:
            return groups
        return align_grouping(groups, samples)

    if isinstance(groups, pd.Series):
        grouping = SampleGrouping(groups.index, groups.values)
        if samples is None:
            return grouping
        return align_grouping(grouping, samples)

    if isinstance(groups, dict):
        grouping = SampleGrouping(list(groups.keys()), list(groups.values()))
        if samples is None:
            return grouping
        return align_grouping(grouping, samples)

    labels = list(np.asarray(groups, dtype=object).ravel())
    if samples is None:
        samples = [f"Sample{i+1}" for i in range(len(labels))]
    return SampleGrouping(samples, labels)


def align_grouping(grouping, columns):
    """Reorder ``grouping`` to follow ``columns``.

    Raises ``InvalidGroupingError`` if a sample is in the grouping but not
    in ``columns``, or the other way round.
    """
    columns = [str(c) for c in columns]
    have = set(grouping.samples)
    want = set(columns)
    missing = [c for c in columns if c not in have]
    extra = [s for s in grouping.samples if s not in want]
    if missing or extra:
        msg = []
        if missing:
            msg.append(f"columns without a group: {missing[:5]}")
        if extra:
            msg.append(f"grouped samples absent from matrix: {extra[:5]}")
        raise InvalidGroupingError("; ".join(msg))
    if len(columns) != len(want):
        raise InvalidGroupingError("Repeated column names in expression matrix")
    if list(grouping.samples) == columns:
        return grouping
    lookup = dict(zip(grouping.samples, grouping.labels))
    # level order comes from the metadata, not from the matrix columns
    return SampleGrouping(columns, [lookup[c] for c in columns],
                          levels=grouping.levels)


def split_into_groups(y, grouping):
    """Split an expression matrix into one sub-matrix per group level."""
    y = np.asarray(y, dtype=np.float64)
    if y.ndim == 1:
        y = y.reshape(1, -1)
    if y.shape[1] != grouping.n_samples:
        raise InvalidGroupingError(
            f"matrix has {y.shape[1]} columns but grouping has {grouping.n_samples} samples")
    return [y[:, idx] for idx in grouping.member_indices()]
