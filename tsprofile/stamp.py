# tsprofile
# Portions copyright 2019 TD Ameritrade, derived from STUMPY.
# Released under the terms of the 3-Clause BSD license.

import logging
import math

import numpy as np

from . import config, core
from .mparray import _to_mparray

logger = logging.getLogger(__name__)


def _sample_indices(l, sample_pct, seed=None):
    """
    Randomly choose `ceil(sample_pct * l)` distinct subsequence indices

    Parameters
    ----------
    l : int
        The total number of subsequences

    sample_pct : float
        Fraction of the subsequences to sample, in `(0, 1]`

    seed : int, default None
        NumPy random seed

    Returns
    -------
    indices : numpy.ndarray
        Sampled indices (without replacement) in random order
    """
    if seed is not None:
        np.random.seed(seed)
    n_samples = min(l, max(1, int(math.ceil(sample_pct * l))))

    return np.random.permutation(l)[:n_samples].astype(np.int64)


def stamp(T_A, m, T_B=None, sample_pct=config.TSPROFILE_SAMPLE_PCT, seed=None):
    """
    Compute an approximate z-normalized matrix profile from a random sample of
    query subsequences

    For a self-join, each sampled distance profile also refines the matrix profile
    of every other subsequence (the distance between `i` and `j` is the same as the
    distance between `j` and `i`) so that subsequences that were never sampled hold
    the best distance found so far. For an AB-join, only the sampled rows are filled
    and all other rows remain `np.inf` with an index of `-1`.

    Parameters
    ----------
    T_A : numpy.ndarray
        The time series or sequence for which to compute the matrix profile

    m : int
        Window size

    T_B : numpy.ndarray, default None
        The time series or sequence that will be used to annotate `T_A`. For every
        subsequence in `T_A`, its nearest neighbor in `T_B` will be recorded.
        Default is `None` which corresponds to a self-join.

    sample_pct : float, default 0.1
        The fraction of query subsequences to evaluate, in `(0, 1]`. Each query is
        evaluated at most once. This is a best-effort completeness knob and
        `sample_pct=1.0` produces the exact matrix profile.

    seed : int, default None
        NumPy random seed used for sampling the query subsequences

    Returns
    -------
    out : mparray
        Four column array with the matrix profile, the matrix profile indices,
        the right matrix profile, and the right matrix profile indices

    Notes
    -----
    `DOI: 10.1109/ICDM.2016.0179 \
    <https://www.cs.ucr.edu/~eamonn/PID4481997_extend_Matrix%20Profile_I.pdf>`__

    See Table III
    """
    if not 0.0 < sample_pct <= 1.0:
        raise ValueError(
            f"`sample_pct` must be greater than 0 and less than or equal to 1 "
            f"but found {sample_pct}"
        )

    ignore_trivial = core.check_ignore_trivial(T_A, T_B)
    T_A, M_A, Σ_A, T_A_subseq_isconstant = core.preprocess(T_A, m)
    if ignore_trivial:
        T_B, M_T, Σ_T, T_B_subseq_isconstant = T_A, M_A, Σ_A, T_A_subseq_isconstant
        core.check_window_size(m, max_size=T_A.shape[0], n=T_A.shape[0])
    else:
        T_B, M_T, Σ_T, T_B_subseq_isconstant = core.preprocess(T_B, m)
        core.check_window_size(m, max_size=min(T_A.shape[0], T_B.shape[0]))

    l = T_A.shape[0] - m + 1
    excl_zone = core.get_excl_zone(m)

    P = np.full(l, np.inf, dtype=np.float64)
    I = np.full(l, -1, dtype=np.int64)
    PR = np.full(l, np.inf, dtype=np.float64)
    IR = np.full(l, -1, dtype=np.int64)

    indices = _sample_indices(l, sample_pct, seed)
    logger.debug(f"Sampling {indices.shape[0]} of {l} query subsequences")

    for i in indices:
        D = core._mass(
            T_A[i : i + m],
            T_B,
            M_T,
            Σ_T,
            T_B_subseq_isconstant,
            M_A[i],
            Σ_A[i],
            T_A_subseq_isconstant[i],
        )

        if ignore_trivial:
            core._apply_exclusion_zone(D, i, excl_zone, np.inf)

            # Every D[j] is also the distance from subsequence j to subsequence i
            mask = D < P
            P[mask] = D[mask]
            I[mask] = i

            mask = D[:i] < PR[:i]
            PR[:i][mask] = D[:i][mask]
            IR[:i][mask] = i

            if D[i + 1 :].size:
                j = i + 1 + np.argmin(D[i + 1 :])
                if np.isfinite(D[j]):
                    PR[i] = D[j]
                    IR[i] = j

        # The full row is exact and replaces any transitive estimate
        j = np.argmin(D)
        if np.isfinite(D[j]):
            P[i] = D[j]
            I[i] = j

    return _to_mparray(P, I, PR, IR, m, config.TSPROFILE_EXCL_ZONE_DENOM)
