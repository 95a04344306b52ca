"""
Random streams and within-group resampling.

Each bootstrap or permutation replicate gets its own generator, spawned
from one seed sequence, so replicates can run in any order or on any
thread and still reproduce the same result.
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np


def spawn_generators(rng, n):
    """Spawn ``n`` independent generators from ``rng``.

    Parameters
    ----------
    rng : None, int, SeedSequence, Generator or RandomState
        Source of randomness. An int gives the same streams on every call.
        A SeedSequence or Generator is advanced by the call, so repeated
        calls with the same object give fresh streams. None draws fresh
        entropy from the OS.
    n : int
        Number of generators.

    Returns
    -------
    list of numpy.random.Generator
    """
    if isinstance(rng, np.random.Generator):
        return rng.spawn(n)
    if isinstance(rng, np.random.RandomState):
        rng = np.random.SeedSequence(rng.randint(0, 2**32, size=4, dtype=np.uint32))
    if not isinstance(rng, np.random.SeedSequence):
        rng = np.random.SeedSequence(rng)
    return [np.random.default_rng(s) for s in rng.spawn(n)]


def resample_columns(grouping, rng):
    """Draw one bootstrap replicate of column indices.

    For every group, draws as many columns as the group has, with
    replacement, from that group's own columns only.

    Parameters
    ----------
    grouping : SampleGrouping
    rng : numpy.random.Generator

    Returns
    -------
    list of ndarray
        Resampled column indices per group, in level order.
    """
    return [rng.choice(idx, size=len(idx), replace=True)
            for idx in grouping.member_indices()]


def permute_columns(grouping, rng):
    """Shuffle sample labels across all columns, keeping group sizes.

    Returns
    -------
    list of ndarray
        Column indices assigned to each group, in level order.
    """
    perm = rng.permutation(grouping.n_samples)
    return [perm[idx] for idx in grouping.member_indices()]


def run_replicates(func, generators, n_jobs=1):
    """Yield ``func(gen)`` for each generator, in generator order.

    With ``n_jobs > 1`` replicates are computed on a thread pool; results
    are still yielded in input order.
    """
    jobs = max(1, int(n_jobs))
    if jobs == 1 or len(generators) <= 1:
        for gen in generators:
            yield func(gen)
        return
    # bounded batches keep at most a few replicate tables in memory
    batch = jobs * 4
    with ThreadPoolExecutor(max_workers=jobs) as pool:
        for start in range(0, len(generators), batch):
            yield from pool.map(func, generators[start:start + batch])
