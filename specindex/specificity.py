"""
Specificity index computation for specindex.

For a gene with mean expression e_1..e_n across n groups, the specificity
index for group g is

    SI(g) = sum_{o != g} (1 - e_o / e_g) / (n - 1)

clipped into [0, 1], and 0 when e_g is 0. A gene expressed only in g
scores 1 for g; a gene expressed evenly scores 0 everywhere.
"""

import warnings

import numpy as np
import pandas as pd
from numba import njit

from .classes import SpecificityResult
from .errors import DegenerateGroupWarning, InvalidParameterError
from .expression import _group_means
from .exprset import as_expression
from .resampling import resample_columns, run_replicates, spawn_generators

DEFAULT_ITERATIONS = 1000


@njit(cache=True, nogil=True)
def _si_kernel(means, out):
    """Per-gene specificity index. ``means`` must already be floored."""
    ngenes, ngroups = means.shape
    for i in range(ngenes):
        for g in range(ngroups):
            eg = means[i, g]
            if ngroups < 2 or eg <= 0.0:
                out[i, g] = 0.0
                continue
            s = 0.0
            for o in range(ngroups):
                if o != g:
                    s += 1.0 - means[i, o] / eg
            v = s / (ngroups - 1)
            if v < 0.0:
                v = 0.0
            elif v > 1.0:
                v = 1.0
            out[i, g] = v


def _check_floor(floor):
    floor = float(floor)
    if not np.isfinite(floor) or floor < 0:
        raise InvalidParameterError(f"floor must be finite and non-negative, got {floor}")
    return floor


def _si_matrix(means, floor):
    means = np.maximum(np.asarray(means, dtype=np.float64), floor)
    out = np.empty_like(means)
    _si_kernel(np.ascontiguousarray(means), out)
    return out


def specificity_index(group_means, floor=0):
    """Specificity index of every gene for every group.

    Parameters
    ----------
    group_means : DataFrame or array-like
        Mean expression (genes x groups), e.g. from compute_group_means().
    floor : float
        Values below ``floor`` are raised to ``floor`` before scoring.

    Returns
    -------
    Scores in [0, 1], same shape and type as ``group_means``.
    """
    floor = _check_floor(floor)
    frame = group_means if isinstance(group_means, pd.DataFrame) else None
    means = np.asarray(group_means, dtype=np.float64)
    if means.ndim == 1:
        means = means.reshape(1, -1)
    if np.any(np.isnan(means)):
        raise ValueError("NA group means not allowed")
    if np.isinf(means).any():
        raise ValueError("Infinite group means not allowed")

    out = _si_matrix(means, floor)
    if frame is not None:
        return pd.DataFrame(out, index=frame.index, columns=frame.columns)
    return out


def _bootstrap(values, grouping, floor, iterations, rng, n_jobs):
    """Mean and standard deviation of SI over bootstrap replicates."""
    generators = spawn_generators(rng, iterations)

    def replicate(gen):
        members = resample_columns(grouping, gen)
        return _si_matrix(_group_means(values, members), floor)

    # Welford update, in replicate order
    mean = np.zeros((values.shape[0], grouping.n_groups), dtype=np.float64)
    m2 = np.zeros_like(mean)
    for k, si in enumerate(run_replicates(replicate, generators, n_jobs=n_jobs), 1):
        delta = si - mean
        mean += delta / k
        m2 += delta * (si - mean)
    sd = np.sqrt(m2 / (iterations - 1)) if iterations > 1 else np.zeros_like(mean)
    return mean, sd


def _check_iterations(iterations):
    if iterations is None or int(iterations) != iterations or iterations < 1:
        raise InvalidParameterError(
            f"iterations must be a positive integer, got {iterations}")
    return int(iterations)


def _warn_singletons(grouping):
    single = grouping.singletons
    if single:
        warnings.warn(
            f"Groups with a single sample: {single}. Resampling cannot vary "
            f"these groups.", DegenerateGroupWarning, stacklevel=3)


def specificity_index_resampled(y, groups=None, floor=0,
                                iterations=DEFAULT_ITERATIONS, rng=None,
                                n_jobs=1):
    """Bootstrap-averaged specificity index.

    Each replicate resamples, with replacement, the samples of every group
    from that group's own samples, computes group means and then the
    specificity index. The element-wise mean over replicates is returned.

    Parameters
    ----------
    y : array-like, DataFrame or ExpressionSet
        Expression matrix (genes x samples).
    groups : sequence, dict, Series or SampleGrouping
        Group of each sample. Optional for ExpressionSet input.
    floor : float
        Floor applied to group means.
    iterations : int
        Number of bootstrap replicates.
    rng : None, int, SeedSequence or Generator
        Source of randomness; see spawn_generators().
    n_jobs : int
        Worker threads for the replicate loop.

    Returns
    -------
    DataFrame (genes x groups).
    """
    floor = _check_floor(floor)
    iterations = _check_iterations(iterations)
    values, gene_ids, grouping = as_expression(y, groups)
    _warn_singletons(grouping)
    mean, _ = _bootstrap(values, grouping, floor, iterations, rng, n_jobs)
    return pd.DataFrame(mean, index=pd.Index(gene_ids, name='gene'),
                        columns=grouping.levels)


def specificity(y, groups=None, floor=0, iterations=None, rng=None,
                n_jobs=1, verbose=False):
    """Specificity index with optional bootstrap.

    Parameters
    ----------
    y : array-like, DataFrame or ExpressionSet
        Expression matrix (genes x samples).
    groups : sequence, dict, Series or SampleGrouping, optional
        Group of each sample.
    floor : float
        Floor applied to group means.
    iterations : int, optional
        Bootstrap replicates. None computes the index directly from the
        observed group means.
    rng : None, int, SeedSequence or Generator
        Source of randomness for the bootstrap.
    n_jobs : int
        Worker threads for the bootstrap.
    verbose : bool
        Print a one-line summary.

    Returns
    -------
    SpecificityResult
    """
    floor = _check_floor(floor)
    values, gene_ids, grouping = as_expression(y, groups)
    index = pd.Index(gene_ids, name='gene')

    res = SpecificityResult()
    res['groups'] = grouping.levels
    res['floor'] = floor
    if iterations is None:
        si = _si_matrix(_group_means(values, grouping.member_indices()), floor)
        res['table'] = pd.DataFrame(si, index=index, columns=grouping.levels)
        res['sd'] = None
        res['iterations'] = None
        res['method'] = 'direct'
    else:
        iterations = _check_iterations(iterations)
        _warn_singletons(grouping)
        mean, sd = _bootstrap(values, grouping, floor, iterations, rng, n_jobs)
        res['table'] = pd.DataFrame(mean, index=index, columns=grouping.levels)
        res['sd'] = pd.DataFrame(sd, index=index, columns=grouping.levels)
        res['iterations'] = iterations
        res['method'] = 'bootstrap'

    unexpressed = int(np.sum(np.all(values <= floor, axis=1)))
    if unexpressed:
        warnings.warn(f"{unexpressed} genes have no expression above floor; "
                      f"their specificity is 0 in every group")
    if verbose:
        print(f"Scored {len(gene_ids)} genes across {grouping.n_groups} groups "
              f"({res['method']}"
              + (f", {iterations} iterations" if iterations else "") + ")")
    return res
