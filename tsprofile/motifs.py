# tsprofile
# Portions copyright 2019 TD Ameritrade, derived from STUMPY.
# Released under the terms of the 3-Clause BSD license.

import collections
import logging

import numpy as np

from . import core
from .errors import InvalidK, InvalidRadius, LengthMismatch

logger = logging.getLogger(__name__)

MotifGroup = collections.namedtuple("MotifGroup", ["idx", "min_dist"])
MotifGroup.__doc__ = """
A group of similar subsequences

Attributes
----------
idx : numpy.ndarray
    The sorted start indices of all members of the group

min_dist : float
    The matrix profile value of the seed pair that started the group
"""


def _motifs(T, P, I, m, M_T, Σ_T, T_subseq_isconstant, excl_zone, k, r):
    """
    Find the top-k motif groups from a working copy of the matrix profile

    Parameters
    ----------
    T : numpy.ndarray
        The preprocessed time series or sequence

    P : numpy.ndarray
        A working copy of the matrix profile that is modified in place

    I : numpy.ndarray
        Matrix profile indices

    m : int
        Window size

    M_T : numpy.ndarray
        Sliding mean of `T`

    Σ_T : numpy.ndarray
        Sliding standard deviation of `T`

    T_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T` is constant (True)

    excl_zone : int
        The half width of the exclusion zone

    k : int
        The maximum number of motif groups

    r : float
        Every member of a group is less than `r` times the seed distance away from
        one of the two seed subsequences

    Returns
    -------
    groups : list
        A list of `MotifGroup`
    """
    groups = []
    members = []

    for _ in range(k):
        seed_idx = np.argmin(P)
        min_dist = P[seed_idx]
        if not np.isfinite(min_dist):
            break

        seeds = [int(seed_idx), int(I[seed_idx])]
        group_idx = set(seeds)

        for idx in seeds:
            D = core._mass(
                T[idx : idx + m],
                T,
                M_T,
                Σ_T,
                T_subseq_isconstant,
                M_T[idx],
                Σ_T[idx],
                T_subseq_isconstant[idx],
            )
            # Trivial matches of this seed and members of earlier groups are excluded
            core._apply_exclusion_zone(D, idx, excl_zone, np.inf)
            for member in members:
                core._apply_exclusion_zone(D, member, excl_zone, np.inf)

            group_idx.update(np.flatnonzero(D < r * min_dist).tolist())

        group_idx = np.array(sorted(group_idx), dtype=np.int64)
        groups.append(MotifGroup(group_idx, float(min_dist)))

        for idx in group_idx:
            core._apply_exclusion_zone(P, int(idx), excl_zone, np.inf)
            members.append(int(idx))

    return groups


def motifs(T, P, I, m, k=3, r=2.0):
    """
    Discover the top-k motif groups of a time series from its self-join matrix
    profile

    Each group is seeded with the subsequence that has the smallest remaining matrix
    profile value along with its nearest neighbor. All other subsequences that are
    closer than `r` times the seed distance to either seed subsequence join the
    group, except for trivial matches of that seed and subsequences within the
    exclusion zone of a member of an earlier group. Members of a group may be closer
    to each other than the exclusion zone. The exclusion zones of all group members
    are then removed from consideration before the next group is seeded.

    Parameters
    ----------
    T : numpy.ndarray
        The time series or sequence

    P : numpy.ndarray
        The self-join matrix profile of `T`

    I : numpy.ndarray
        The self-join matrix profile indices of `T`

    m : int
        Window size

    k : int, default 3
        The maximum number of motif groups to return

    r : float, default 2.0
        The radius, relative to the seed distance, within which subsequences join
        a group

    Returns
    -------
    groups : list
        A list of at most `k` `MotifGroup`s. Fewer groups are returned when no
        finite matrix profile value remains.

    Raises
    ------
    InvalidK
        If `k < 1`

    InvalidRadius
        If `r <= 0`

    LengthMismatch
        If `P` and `I` do not match the number of subsequences in `T`
    """
    if k < 1:
        raise InvalidK(f"The number of motifs, `k`, must be at least 1 but found {k}")

    if not r > 0.0:
        raise InvalidRadius(f"The motif radius, `r`, must be positive but found {r}")

    T, M_T, Σ_T, T_subseq_isconstant = core.preprocess(T, m)
    P = np.array(P, dtype=np.float64, copy=True)
    I = np.asarray(I, dtype=np.int64)

    l = T.shape[0] - m + 1
    if P.shape[0] != l or I.shape[0] != l:
        raise LengthMismatch(
            f"The matrix profile and its indices must have length {l} but found "
            f"{P.shape[0]} and {I.shape[0]}"
        )

    excl_zone = core.get_excl_zone(m)
    groups = _motifs(T, P, I, m, M_T, Σ_T, T_subseq_isconstant, excl_zone, k, r)

    if len(groups) < k:
        logger.warning(f"Only {len(groups)} of {k} motif groups could be found")

    return groups
