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
    M_T,
    σ_Q_inverse,
    Σ_T_inverse,
    cov_a,
    cov_b,
    cov_c,
    cov_d,
    T_A_subseq_isconstant,
    T_B_subseq_isconstant,
    diags,
    diags_start_idx,
    diags_stop_idx,
    thread_idx,
    ρ,
    I,
    ρR,
    IR,
    ignore_trivial,
):
    """
    Compute (Numba JIT-compiled) and update the Pearson correlation (ρ), I, ρR,
    and IR sequentially along individual diagonals using a single thread and
    avoiding race conditions.

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

    M_T : numpy.ndarray
        Sliding mean of `T_B`

    σ_Q_inverse : numpy.ndarray
        Inverse sliding norm of the mean-centered subsequences of `T_A`

    Σ_T_inverse : numpy.ndarray
        Inverse sliding norm of the mean-centered subsequences of `T_B`

    cov_a : numpy.ndarray
        The first covariance term relating T_B[i + g + m - 1] and M_T_m_1[i + g]

    cov_b : numpy.ndarray
        The second covariance term relating T_A[i + m - 1] and μ_Q_m_1[i]

    cov_c : numpy.ndarray
        The third covariance term relating T_B[i + g - 1] and M_T_m_1[i + g]

    cov_d : numpy.ndarray
        The fourth covariance term relating T_A[i - 1] and μ_Q_m_1[i]

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

    ρ : numpy.ndarray
        The Pearson correlations, one row per thread

    I : numpy.ndarray
        The matrix profile indices, one row per thread

    ρR : numpy.ndarray
        The right Pearson correlations, one row per thread

    IR : numpy.ndarray
        The right matrix profile indices, one row per thread

    ignore_trivial : bool
        Set to `True` if this is a self-join. Otherwise, for AB-join, set this to
        `False`.

    Returns
    -------
    None

    Notes
    -----
    `DOI: 10.1145/3357223.3362721 \
    <https://www.cs.ucr.edu/~eamonn/public/GPU_Matrix_profile_VLDB_30DraftOnly.pdf>`__

    See Section 3.1 and Section 3.3

    The above reference outlines the use of the Pearson correlation via Welford's
    centered sum-of-products along each diagonal of the distance matrix in place of the
    sliding window dot product found in the original STOMP method.
    """
    n_A = T_A.shape[0]
    n_B = T_B.shape[0]
    constant = (m - 1) / m

    for diag_idx in range(diags_start_idx, diags_stop_idx):
        g = diags[diag_idx]

        if g >= 0:
            iter_range = range(0, min(n_A - m + 1, n_B - m + 1 - g))
        else:
            iter_range = range(-g, min(n_A - m + 1, n_B - m + 1 - g))

        for i in iter_range:
            j = i + g
            if i == 0 or j == 0:
                cov = np.dot((T_B[j : j + m] - M_T[j]), (T_A[i : i + m] - μ_Q[i]))
            else:
                # Equivalent to
                # cov = cov + constant * (
                #     (T_B[j + m - 1] - M_T_m_1[j]) * (T_A[i + m - 1] - μ_Q_m_1[i])
                #     - (T_B[j - 1] - M_T_m_1[j]) * (T_A[i - 1] - μ_Q_m_1[i])
                # )
                cov = cov + constant * (cov_a[j] * cov_b[i] - cov_c[j] * cov_d[i])

            if T_B_subseq_isconstant[j] and T_A_subseq_isconstant[i]:
                pearson = 1.0
            elif T_B_subseq_isconstant[j] or T_A_subseq_isconstant[i]:
                pearson = 0.5
            else:
                pearson = cov * Σ_T_inverse[j] * σ_Q_inverse[i]
                pearson = min(1.0, pearson)

            # A higher pearson value corresponds to a lower distance
            if pearson > ρ[thread_idx, i]:
                ρ[thread_idx, i] = pearson
                I[thread_idx, i] = j

            if ignore_trivial:  # self-joins only
                if pearson > ρ[thread_idx, j]:
                    ρ[thread_idx, j] = pearson
                    I[thread_idx, j] = i

                if pearson > ρR[thread_idx, i]:
                    ρR[thread_idx, i] = pearson
                    IR[thread_idx, i] = j


@njit(parallel=True, fastmath=config.TSPROFILE_FASTMATH_FLAGS)
def _mpx(
    T_A,
    T_B,
    m,
    μ_Q,
    M_T,
    σ_Q_inverse,
    Σ_T_inverse,
    μ_Q_m_1,
    M_T_m_1,
    T_A_subseq_isconstant,
    T_B_subseq_isconstant,
    diags,
    ignore_trivial,
    n_jobs,
):
    """
    A Numba JIT-compiled version of MPX, i.e., STOMPopt with Pearson correlations,
    for parallel computation of the Pearson correlations and matrix profile indices
    along with the right Pearson correlations and right matrix profile indices.

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

    M_T : numpy.ndarray
        Sliding mean of `T_B`

    σ_Q_inverse : numpy.ndarray
        Inverse sliding norm of the mean-centered subsequences of `T_A`

    Σ_T_inverse : numpy.ndarray
        Inverse sliding norm of the mean-centered subsequences of `T_B`

    μ_Q_m_1 : numpy.ndarray
        Sliding mean of `T_A` using a window size of `m-1`

    M_T_m_1 : numpy.ndarray
        Sliding mean of `T_B` using a window size of `m-1`

    T_A_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T_A` is constant (True)

    T_B_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T_B` is constant (True)

    diags : numpy.ndarray
        The diagonal indices

    ignore_trivial : bool
        Set to `True` if this is a self-join

    n_jobs : int
        The number of batches

    Returns
    -------
    ρ : numpy.ndarray
        Pearson correlations of the nearest neighbors

    I : numpy.ndarray
        Matrix profile indices

    ρR : numpy.ndarray
        Pearson correlations of the right nearest neighbors

    IR : numpy.ndarray
        Right matrix profile indices
    """
    n_A = T_A.shape[0]
    n_B = T_B.shape[0]
    l = n_A - m + 1

    ρ = np.full((n_jobs, l), -np.inf, dtype=np.float64)
    I = np.full((n_jobs, l), -1, dtype=np.int64)
    ρR = np.full((n_jobs, l), -np.inf, dtype=np.float64)
    IR = np.full((n_jobs, l), -1, dtype=np.int64)

    ndist_counts = core._count_diagonal_ndist(diags, m, n_A, n_B)
    diags_ranges = core._get_array_ranges(ndist_counts, n_jobs, False)

    cov_a = T_B[m - 1 :] - M_T_m_1[:-1]
    cov_b = T_A[m - 1 :] - μ_Q_m_1[:-1]
    # cov_c and cov_d are rolled by one so that index `j` refers to `T[j - 1]`
    cov_c = np.empty(M_T_m_1.shape[0], dtype=np.float64)
    cov_c[1:] = T_B[: M_T_m_1.shape[0] - 1]
    cov_c[0] = T_B[-1]
    cov_c[:] = cov_c - M_T_m_1
    cov_d = np.empty(μ_Q_m_1.shape[0], dtype=np.float64)
    cov_d[1:] = T_A[: μ_Q_m_1.shape[0] - 1]
    cov_d[0] = T_A[-1]
    cov_d[:] = cov_d - μ_Q_m_1

    for thread_idx in prange(n_jobs):
        _compute_diagonal(
            T_A,
            T_B,
            m,
            μ_Q,
            M_T,
            σ_Q_inverse,
            Σ_T_inverse,
            cov_a,
            cov_b,
            cov_c,
            cov_d,
            T_A_subseq_isconstant,
            T_B_subseq_isconstant,
            diags,
            diags_ranges[thread_idx, 0],
            diags_ranges[thread_idx, 1],
            thread_idx,
            ρ,
            I,
            ρR,
            IR,
            ignore_trivial,
        )

    # Reduction of results from all batches, ties keep the earlier batch
    for thread_idx in range(1, n_jobs):
        for i in range(l):
            if ρ[thread_idx, i] > ρ[0, i]:
                ρ[0, i] = ρ[thread_idx, i]
                I[0, i] = I[thread_idx, i]
            if ρR[thread_idx, i] > ρR[0, i]:
                ρR[0, i] = ρR[thread_idx, i]
                IR[0, i] = IR[thread_idx, i]

    return ρ[0], I[0], ρR[0], IR[0]


def _mpx_distances(*args):
    """
    Call `_mpx` and convert its Pearson correlations into z-normalized Euclidean
    distances with `core.p2e`
    """
    m = args[2]
    ρ, I, ρR, IR = _mpx(*args)

    return core.p2e(ρ, m), I, core.p2e(ρR, m), IR


def mpx(T_A, m, T_B=None, n_jobs=None, client=None):
    """
    Compute the z-normalized matrix profile with MPX

    This is a convenience wrapper around the Numba JIT-compiled parallelized
    `_mpx` function which computes the matrix profile according to STOMPopt with
    Pearson correlations. Every diagonal keeps a running mean-centered covariance
    that is updated with precomputed difference terms and the largest Pearson
    correlation is only converted into a distance once at the end.

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
    `DOI: 10.1145/3357223.3362721 \
    <https://www.cs.ucr.edu/~eamonn/public/GPU_Matrix_profile_VLDB_30DraftOnly.pdf>`__

    See Section 3.1 and Section 3.3

    `DOI: 10.1007/s10115-017-1138-x \
    <https://www.cs.ucr.edu/~eamonn/ten_quadrillion.pdf>`__

    See Section 4.5

    Examples
    --------
    >>> import tsprofile
    >>> import numpy as np
    >>> mp = tsprofile.mpx(np.array([584., -11., 23., 79., 1001., 0., -19.]), m=3)
    >>> mp.P_
    array([0.11633857, 2.69407392, 3.00009263, 2.69407392, 0.11633857])
    >>> mp.I_
    array([4, 3, 0, 1, 0])
    """
    n_jobs = core.check_n_jobs(n_jobs)
    ignore_trivial = core.check_ignore_trivial(T_A, T_B)

    T_A, μ_Q, σ_Q_inverse, μ_Q_m_1, T_A_subseq_isconstant = core.preprocess_diagonal(
        T_A, m
    )
    if ignore_trivial:
        T_B, M_T, Σ_T_inverse, M_T_m_1, T_B_subseq_isconstant = (
            T_A,
            μ_Q,
            σ_Q_inverse,
            μ_Q_m_1,
            T_A_subseq_isconstant,
        )
    else:
        (
            T_B,
            M_T,
            Σ_T_inverse,
            M_T_m_1,
            T_B_subseq_isconstant,
        ) = core.preprocess_diagonal(T_B, m)

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
        M_T,
        σ_Q_inverse,
        Σ_T_inverse,
        μ_Q_m_1,
        M_T_m_1,
        T_A_subseq_isconstant,
        T_B_subseq_isconstant,
    ]
    if client is not None:
        P, I, PR, IR = core._dask_diagonals(
            client, _mpx_distances, args, m, n_A, n_B, ignore_trivial, n_jobs
        )
    else:
        P, I, PR, IR = _mpx_distances(*args, diags, ignore_trivial, n_jobs)

    return _to_mparray(P, I, PR, IR, m, config.TSPROFILE_EXCL_ZONE_DENOM)
