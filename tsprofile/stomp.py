# tsprofile
# Portions copyright 2019 TD Ameritrade, derived from STUMPY.
# Released under the terms of the 3-Clause BSD license.

import numpy as np
from numba import njit, prange

from . import config, core
from .mparray import _to_mparray


@njit(fastmath=config.TSPROFILE_FASTMATH_FLAGS)
def _compute_diagonal(
    T_A,
    T_B,
    m,
    μ_Q,
    σ_Q,
    M_T,
    Σ_T,
    T_A_subseq_isconstant,
    T_B_subseq_isconstant,
    diags,
    diags_start_idx,
    diags_stop_idx,
    thread_idx,
    P,
    I,
    PR,
    IR,
    ignore_trivial,
):
    """
    Compute (Numba JIT-compiled) and update P, I, PR, and IR sequentially along
    individual diagonals using a single thread and avoiding race conditions.

    Along each diagonal, `g`, the sliding dot product of the next cell follows from
    the previous one as `QT[i + 1, j + 1] = QT[i, j] - T_A[i] * T_B[j] +
    T_A[i + m] * T_B[j + m]` where `j = i + g`. Only the first cell of each diagonal
    is computed directly.

    Parameters
    ----------
    T_A : numpy.ndarray
        The time series or sequence for which to compute the matrix profile

    T_B : numpy.ndarray
        The time series or sequence that will be used to annotate `T_A`. For every
        subsequence in `T_A`, its nearest neighbor in `T_B` will be recorded.

    m : int
        Window size

    μ_Q : numpy.ndarray
        Sliding mean of `T_A`

    σ_Q : numpy.ndarray
        Sliding standard deviation of `T_A`

    M_T : numpy.ndarray
        Sliding mean of `T_B`

    Σ_T : numpy.ndarray
        Sliding standard deviation of `T_B`

    T_A_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T_A` is constant (True)

    T_B_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T_B` is constant (True)

    diags : numpy.ndarray
        The diagonal indices

    diags_start_idx : int
        The starting (inclusive) diagonal index

    diags_stop_idx : int
        The stopping (exclusive) diagonal index

    thread_idx : int
        The thread index

    P : numpy.ndarray
        The matrix profile buffers, one row per thread

    I : numpy.ndarray
        The matrix profile indices buffers, one row per thread

    PR : numpy.ndarray
        The right matrix profile buffers, one row per thread

    IR : numpy.ndarray
        The right matrix profile indices buffers, one row per thread

    ignore_trivial : bool
        Set to `True` if this is a self-join. Otherwise, for AB-join, set this to
        `False`.

    Returns
    -------
    None
    """
    n_A = T_A.shape[0]
    n_B = T_B.shape[0]

    for diag_idx in range(diags_start_idx, diags_stop_idx):
        g = diags[diag_idx]

        if g >= 0:
            iter_range = range(0, min(n_A - m + 1, n_B - m + 1 - g))
        else:
            iter_range = range(-g, min(n_A - m + 1, n_B - m + 1 - g))

        for i in iter_range:
            j = i + g
            if i == 0 or j == 0:
                QT = np.dot(T_A[i : i + m], T_B[j : j + m])
            else:
                QT = QT - T_A[i - 1] * T_B[j - 1] + T_A[i + m - 1] * T_B[j + m - 1]

            D = np.sqrt(
                core._calculate_squared_distance(
                    m,
                    QT,
                    μ_Q[i],
                    σ_Q[i],
                    M_T[j],
                    Σ_T[j],
                    T_A_subseq_isconstant[i],
                    T_B_subseq_isconstant[j],
                )
            )

            if D < P[thread_idx, i]:
                P[thread_idx, i] = D
                I[thread_idx, i] = j

            if ignore_trivial:  # self-joins only
                if D < P[thread_idx, j]:
                    P[thread_idx, j] = D
                    I[thread_idx, j] = i

                # `j > i` along every diagonal that lies above the exclusion zone
                if D < PR[thread_idx, i]:
                    PR[thread_idx, i] = D
                    IR[thread_idx, i] = j


@njit(parallel=True, fastmath=config.TSPROFILE_FASTMATH_FLAGS)
def _stomp(
    T_A,
    T_B,
    m,
    μ_Q,
    σ_Q,
    M_T,
    Σ_T,
    T_A_subseq_isconstant,
    T_B_subseq_isconstant,
    diags,
    ignore_trivial,
    n_jobs,
):
    """
    A Numba JIT-compiled version of STOMP for parallel computation of the matrix
    profile, matrix profile indices, right matrix profile, and right matrix profile
    indices.

    The diagonals are split into `n_jobs` batches with roughly the same number of
    distances. Each batch writes into its own row of private buffers and the rows
    are merged in batch order once all batches have completed.

    Parameters
    ----------
    T_A : numpy.ndarray
        The time series or sequence for which to compute the matrix profile

    T_B : numpy.ndarray
        The time series or sequence that will be used to annotate `T_A`

    m : int
        Window size

    μ_Q : numpy.ndarray
        Sliding mean of `T_A`

    σ_Q : numpy.ndarray
        Sliding standard deviation of `T_A`

    M_T : numpy.ndarray
        Sliding mean of `T_B`

    Σ_T : numpy.ndarray
        Sliding standard deviation of `T_B`

    T_A_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T_A` is constant (True)

    T_B_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T_B` is constant (True)

    diags : numpy.ndarray
        The diagonal indices

    ignore_trivial : bool
        Set to `True` if this is a self-join. Otherwise, for AB-join, set this to
        `False`.

    n_jobs : int
        The number of batches

    Returns
    -------
    P : numpy.ndarray
        Matrix profile

    I : numpy.ndarray
        Matrix profile indices

    PR : numpy.ndarray
        Right matrix profile

    IR : numpy.ndarray
        Right matrix profile indices

    Notes
    -----
    `DOI: 10.1109/ICDM.2016.0085 \
    <https://www.cs.ucr.edu/~eamonn/STOMP_GPU_final_submission_camera_ready.pdf>`__

    See Table II

    `DOI: 10.1007/s10115-017-1138-x \
    <https://www.cs.ucr.edu/~eamonn/ten_quadrillion.pdf>`__

    See Section 4.5
    """
    n_A = T_A.shape[0]
    n_B = T_B.shape[0]
    l = n_A - m + 1

    P = np.full((n_jobs, l), np.inf, dtype=np.float64)
    I = np.full((n_jobs, l), -1, dtype=np.int64)
    PR = np.full((n_jobs, l), np.inf, dtype=np.float64)
    IR = np.full((n_jobs, l), -1, dtype=np.int64)

    ndist_counts = core._count_diagonal_ndist(diags, m, n_A, n_B)
    diags_ranges = core._get_array_ranges(ndist_counts, n_jobs, False)

    for thread_idx in prange(n_jobs):
        _compute_diagonal(
            T_A,
            T_B,
            m,
            μ_Q,
            σ_Q,
            M_T,
            Σ_T,
            T_A_subseq_isconstant,
            T_B_subseq_isconstant,
            diags,
            diags_ranges[thread_idx, 0],
            diags_ranges[thread_idx, 1],
            thread_idx,
            P,
            I,
            PR,
            IR,
            ignore_trivial,
        )

    # Reduction of results from all batches
    for thread_idx in range(1, n_jobs):
        core._merge_partial_PI(P[0], P[thread_idx], I[0], I[thread_idx])
        core._merge_partial_PI(PR[0], PR[thread_idx], IR[0], IR[thread_idx])

    return P[0], I[0], PR[0], IR[0]


def stomp(T_A, m, T_B=None, n_jobs=None, client=None):
    """
    Compute the z-normalized matrix profile by traversing the diagonals of the
    distance matrix with the sliding dot product recurrence

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

    n_jobs : int, default None
        The number of parallel batches. Defaults to one batch per logical CPU
        (see `config.TSPROFILE_N_JOBS`).

    client : client, default None
        A `dask.distributed` client. When provided, each worker receives one batch
        of diagonals instead of running the batches in this process.

    Returns
    -------
    out : mparray
        Four column array with the matrix profile, the matrix profile indices,
        the right matrix profile, and the right matrix profile indices

    Notes
    -----
    `DOI: 10.1109/ICDM.2016.0085 \
    <https://www.cs.ucr.edu/~eamonn/STOMP_GPU_final_submission_camera_ready.pdf>`__

    See Table II

    Timeseries, T_A, will be annotated with the distance location
    (or index) of all its subsequences in another times series, T_B.

    For every subsequence, Q, in T_A, you will get a distance
    and index for the closest subsequence in T_B. Thus, the array
    returned will have length T_A.shape[0]-m+1.

    Note: Unlike in the Table II where T_A.shape is expected to be equal
    to T_B.shape, this implementation is generalized so that the shapes of
    T_A and T_B can be different. In the case where T_A.shape == T_B.shape,
    then our algorithm reduces down to the same algorithm found in Table II.

    The right matrix profile is only available for self-joins.
    """
    n_jobs = core.check_n_jobs(n_jobs)
    ignore_trivial = core.check_ignore_trivial(T_A, T_B)

    T_A, μ_Q, σ_Q, T_A_subseq_isconstant = core.preprocess(T_A, m)
    if ignore_trivial:
        T_B, M_T, Σ_T, T_B_subseq_isconstant = T_A, μ_Q, σ_Q, T_A_subseq_isconstant
    else:
        T_B, M_T, Σ_T, T_B_subseq_isconstant = core.preprocess(T_B, m)

    n_A = T_A.shape[0]
    n_B = T_B.shape[0]

    if ignore_trivial:
        core.check_window_size(m, max_size=n_A, n=n_A)
        diags = core.get_diags(n_A, m)
    else:
        core.check_window_size(m, max_size=min(n_A, n_B))
        diags = core.get_diags(n_A, m, n_B)

    args = [
        T_A,
        T_B,
        m,
        μ_Q,
        σ_Q,
        M_T,
        Σ_T,
        T_A_subseq_isconstant,
        T_B_subseq_isconstant,
    ]
    if client is not None:
        P, I, PR, IR = core._dask_diagonals(
            client, _stomp, args, m, n_A, n_B, ignore_trivial, n_jobs
        )
    else:
        P, I, PR, IR = _stomp(*args, diags, ignore_trivial, n_jobs)

    return _to_mparray(P, I, PR, IR, m, config.TSPROFILE_EXCL_ZONE_DENOM)
