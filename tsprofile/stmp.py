# tsprofile
# Portions copyright 2019 TD Ameritrade, derived from STUMPY.
# Released under the terms of the 3-Clause BSD license.

import numpy as np

from . import config, core
from .mparray import _to_mparray


def _mass_PI(
    Q,
    T,
    M_T,
    Σ_T,
    T_subseq_isconstant,
    μ_Q,
    σ_Q,
    Q_subseq_isconstant,
    trivial_idx=None,
    excl_zone=0,
):
    """
    Compute "Mueen's Algorithm for Similarity Search" (MASS) and reduce the distance
    profile to the nearest neighbor (and, for a self-join, the right nearest neighbor)

    Parameters
    ----------
    Q : numpy.ndarray
        Query array or subsequence

    T : numpy.ndarray
        Time series array or sequence

    M_T : numpy.ndarray
        Sliding mean for `T`

    Σ_T : numpy.ndarray
        Sliding standard deviation for `T`

    T_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T` is constant (True)

    μ_Q : float
        Mean of `Q`

    σ_Q : float
        Standard deviation of `Q`

    Q_subseq_isconstant : bool
        A boolean value that indicates whether `Q` is constant (True)

    trivial_idx : int, default None
        Index for the start of the trivial self-join

    excl_zone : int, default 0
        The half width for the exclusion zone relative to the `trivial_idx`.
        If the `trivial_idx` is `None` then this parameter is ignored.

    Returns
    -------
    P : float
        Matrix profile value

    I : int
        Matrix profile index

    PR : float
        Right matrix profile value

    IR : int
        Right matrix profile index
    """
    D = core._mass(Q, T, M_T, Σ_T, T_subseq_isconstant, μ_Q, σ_Q, Q_subseq_isconstant)

    IR = -1
    PR = np.inf
    if trivial_idx is not None:
        core._apply_exclusion_zone(D, trivial_idx, excl_zone, np.inf)

        if D[trivial_idx + 1 :].size:
            IR = trivial_idx + 1 + np.argmin(D[trivial_idx + 1 :])
            PR = D[IR]
        if PR == np.inf:
            IR = -1

    # Element-wise Min
    I = np.argmin(D)
    P = D[I]
    if P == np.inf:
        I = -1

    return P, I, PR, IR


def stmp(T_A, m, T_B=None):
    """
    Compute the z-normalized matrix profile by brute force

    Every subsequence of `T_A` is used as a query and its full distance profile
    against `T_B` is computed with MASS.

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

    Returns
    -------
    out : mparray
        Four column array with the matrix profile, the matrix profile indices,
        the right matrix profile, and the right matrix profile indices

    Notes
    -----
    `DOI: 10.1109/ICDM.2016.0179 \
    <https://www.cs.ucr.edu/~eamonn/PID4481997_extend_Matrix%20Profile_I.pdf>`__

    See Table I

    Timeseries, T_A, will be annotated with the distance location
    (or index) of all its subsequences in another times series, T_B.

    For every subsequence, Q, in T_A, you will get a distance and index for
    the closest subsequence in T_B. Thus, the array returned will have length
    T_A.shape[0]-m+1
    """
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
    trivial_idx = None

    P = np.full(l, np.inf, dtype=np.float64)
    I = np.full(l, -1, dtype=np.int64)
    PR = np.full(l, np.inf, dtype=np.float64)
    IR = np.full(l, -1, dtype=np.int64)

    for i, subseq in enumerate(core.rolling_window(T_A, m)):
        if ignore_trivial:
            trivial_idx = i
        P[i], I[i], PR[i], IR[i] = _mass_PI(
            subseq,
            T_B,
            M_T,
            Σ_T,
            T_B_subseq_isconstant,
            M_A[i],
            Σ_A[i],
            T_A_subseq_isconstant[i],
            trivial_idx,
            excl_zone,
        )

    return _to_mparray(P, I, PR, IR, m, config.TSPROFILE_EXCL_ZONE_DENOM)
