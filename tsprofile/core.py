# tsprofile
# Portions copyright 2019 TD Ameritrade, derived from STUMPY.
# Released under the terms of the 3-Clause BSD license.

import logging
import math
import warnings

import numpy as np
from numba import njit, prange
from scipy.signal import convolve

from . import config
from .errors import DegenerateSeries, InvalidLength, InvalidWindow

logger = logging.getLogger(__name__)

# Veltkamp splitting constant for IEEE-754 doubles, 2**27 + 1
_SPLITTER = 134217729.0


def rolling_window(a, window):
    """
    Use strides to generate rolling/sliding windows for a numpy array.

    Parameters
    ----------
    a : numpy.ndarray
        numpy array

    window : int
        Size of the rolling window

    Returns
    -------
    output : numpy.ndarray
        This will be a new view of the original input array.
    """
    a = np.asarray(a)
    shape = a.shape[:-1] + (a.shape[-1] - window + 1, window)
    strides = a.strides + (a.strides[-1],)

    return np.lib.stride_tricks.as_strided(a, shape=shape, strides=strides)


def check_dtype(a, dtype=np.float64):
    """
    Check if the array type of `a` is of type specified by `dtype` parameter.

    Parameters
    ----------
    a : numpy.ndarray
        NumPy array

    dtype : dtype, default np.float64
        NumPy `dtype`

    Returns
    -------
    None

    Raises
    ------
    TypeError
        If the array type does not match `dtype`
    """
    if dtype is int:
        dtype = np.int64
    if dtype is float:
        dtype = np.float64
    if dtype is bool:
        dtype = np.bool_
    if not np.issubdtype(a.dtype, dtype):
        msg = f"{dtype} dtype expected but found {a.dtype} in input array\n"
        msg += "Please change your input `dtype` with `.astype(dtype)`"
        raise TypeError(msg)

    return True


def are_arrays_equal(a, b):
    """
    Check if two arrays are equal; first by comparing memory addresses,
    and secondly by their values.

    Parameters
    ----------
    a : numpy.ndarray
        NumPy array

    b : numpy.ndarray
        NumPy array

    Returns
    -------
    output : bool
        This is `True` if the arrays are equal and `False` otherwise.
    """
    if id(a) == id(b):
        return True

    if a.shape != b.shape:
        return False

    return bool(np.array_equal(a, b))


def _preprocess(T, copy=True):
    """
    Creates a copy of the time series when `copy` is True, converts `pandas.Series`
    inputs to `numpy.ndarray`, and checks the `dtype`, dimensionality, and values

    Parameters
    ----------
    T : numpy.ndarray
        Time series or sequence

    copy : bool, default True
        A boolean value that indicates whether the process should be done on
        input `T` (False) or its copy (True).

    Returns
    -------
    T : numpy.ndarray
        Modified time series

    Raises
    ------
    InvalidLength
        If `T` is empty or contains a `np.nan`/`np.inf` value
    """
    if copy:
        T = T.copy()

    T = np.asarray(T)
    check_dtype(T)

    if T.ndim != 1:
        raise InvalidLength(f"T is {T.ndim}-dimensional and must be 1-dimensional.")

    if T.shape[0] == 0:
        raise InvalidLength("The time series does not contain any data")

    if not np.all(np.isfinite(T)):
        raise InvalidLength("The time series contains one or more np.nan/np.inf")

    return T


def get_excl_zone(m):
    """
    Get the half width of the exclusion zone for a window size, `m`

    All subsequences that start strictly less than `m / config.TSPROFILE_EXCL_ZONE_DENOM`
    positions away from a query (including the query itself) are trivial matches.

    Parameters
    ----------
    m : int
        Window size

    Returns
    -------
    excl_zone : int
        The (inclusive) half width of the exclusion zone
    """
    return int(math.ceil(m / config.TSPROFILE_EXCL_ZONE_DENOM)) - 1


def check_window_size(m, max_size=None, n=None):
    """
    Check the window size and ensure that it is greater than or equal to 2 and, if
    ``max_size`` is provided, ensure that the window size is less than or equal to
    the ``max_size``. Furthermore, if ``n`` is provided, then a self-join is assumed
    and it checks that the time series is at least twice as long as the window so
    that every subsequence has at least one non-trivial neighbor.

    Parameters
    ----------
    m : int
        Window size

    max_size : int, default None
        The maximum window size allowed

    n : int, default None
        The length of the time series in the case of a self-join.
        ``n`` should not be supplied (or set to ``None``) in the case of an AB-join.

    Returns
    -------
    None

    Raises
    ------
    InvalidWindow
        If any of the above conditions is violated
    """
    if int(m) != m:
        raise InvalidWindow(f"The window size must be an integer but found {m}")

    if m <= 1:
        raise InvalidWindow(
            "All window sizes must be greater than or equal to two. A window size of "
            "one produces a standard deviation of zero for every subsequence."
        )

    if max_size is not None and m > max_size:
        raise InvalidWindow(f"The window size must be less than or equal to {max_size}")

    if n is not None and n < 2 * m:
        raise InvalidWindow(
            f"The window size, 'm = {m}', is too large for a self-join of a time "
            f"series with length {n}. The time series must contain at least "
            f"{2 * m} data points."
        )


def check_ignore_trivial(T_A, T_B):
    """
    Check whether the inputs correspond to a self-join or an AB-join

    Parameters
    ----------
    T_A : numpy.ndarray
        The time series or sequence for which to compute the matrix profile

    T_B : numpy.ndarray
        The time series or sequence that will be used to annotate `T_A`. This is
        `None` for a self-join.

    Returns
    -------
    ignore_trivial : bool
        `True` for a self-join and `False` for an AB-join
    """
    if T_B is None:
        return True

    if are_arrays_equal(np.asarray(T_A), np.asarray(T_B)):
        msg = "Arrays T_A, T_B are equal, which implies a self-join. "
        msg += "Pass `T_B=None` to exclude trivial matches."
        warnings.warn(msg)

    return False


def z_norm(a):
    """
    Calculate the z-normalized input array `a` by subtracting the mean and
    dividing by the standard deviation.

    Parameters
    ----------
    a : numpy.ndarray
        NumPy array

    Returns
    -------
    output : numpy.ndarray
        The z-normalized array

    Raises
    ------
    InvalidLength
        If `a` is empty

    DegenerateSeries
        If the standard deviation of `a` is zero
    """
    a = np.asarray(a, dtype=np.float64)
    if a.shape[0] == 0:
        raise InvalidLength("The array does not contain any data")

    out = a - np.mean(a)
    std = np.sqrt(np.mean(np.square(out)))
    if std == 0.0 or np.ptp(a) == 0.0:
        raise DegenerateSeries("The standard deviation of the array is zero")

    return out / std


@njit(fastmath=False)
def _two_sum(a, b):
    """
    Error-free transformation of the sum `a + b`

    Returns
    -------
    x : float
        The rounded sum

    e : float
        The rounding error so that `a + b == x + e` exactly
    """
    x = a + b
    z = x - a
    e = (a - (x - z)) + (b - z)

    return x, e


@njit(fastmath=False)
def _two_square(a):
    """
    Error-free transformation of the square `a * a` via Dekker's split

    Returns
    -------
    h : float
        The rounded square

    r : float
        The rounding error so that `a * a == h + r` exactly
    """
    h = a * a
    c = _SPLITTER * a
    a1 = c - (c - a)
    a2 = a - a1
    a3 = a1 * a2
    r = a2 * a2 - (((h - a1 * a1) - a3) - a3)

    return h, r


@njit(fastmath=False)
def _compensated_sum_of_squares(a, μ):
    """
    Compute `sum((a - μ)**2)` with compensated summation
    """
    p = 0.0
    s = 0.0
    for i in range(a.shape[0]):
        h, r = _two_square(a[i] - μ)
        p, e = _two_sum(p, h)
        s += e + r

    return p + s


@njit(fastmath=False)
def _rolling_mean(a, w):
    """
    Compute the rolling mean of `a` in a single pass while tracking the running sum
    along with a running correction term for the rounding error of every addition
    and removal.

    Parameters
    ----------
    a : numpy.ndarray
        The input array

    w : int
        The rolling window size

    Returns
    -------
    out : numpy.ndarray
        Rolling window mean
    """
    l = a.shape[0] - w + 1
    out = np.empty(l, dtype=np.float64)

    p = a[0]
    s = 0.0
    for i in range(1, w):
        p, e = _two_sum(p, a[i])
        s += e
    out[0] = (p + s) / w

    for i in range(w, a.shape[0]):
        p, e = _two_sum(p, -a[i - w])
        s += e
        p, e = _two_sum(p, a[i])
        s += e
        out[i - w + 1] = (p + s) / w

    return out


@njit(fastmath=False)
def _rolling_sum_of_squares(a, w, μ):
    """
    Compute the rolling sum of squared deviations from the window mean,
    `sum((a[i : i + w] - μ[i])**2)`, in a single pass.

    Consecutive windows are related by Welford's update and every update is
    accumulated with a compensation term. The running value is re-anchored against
    a direct compensated evaluation once every `w` windows so that rounding
    errors cannot drift across the whole series while the total cost stays linear.

    Parameters
    ----------
    a : numpy.ndarray
        The input array

    w : int
        The rolling window size

    μ : numpy.ndarray
        Rolling window mean of `a`

    Returns
    -------
    out : numpy.ndarray
        Rolling window sum of squared deviations
    """
    l = a.shape[0] - w + 1
    out = np.empty(l, dtype=np.float64)

    p = _compensated_sum_of_squares(a[:w], μ[0])
    s = 0.0
    out[0] = p

    for i in range(1, l):
        if i % w == 0:
            p = _compensated_sum_of_squares(a[i : i + w], μ[i])
            s = 0.0
        else:
            x_in = a[i + w - 1]
            x_out = a[i - 1]
            delta = (x_in - x_out) * ((x_in - μ[i]) + (x_out - μ[i - 1]))
            p, e = _two_sum(p, delta)
            s += e
        out[i] = max(p + s, 0.0)

    return out


@njit(fastmath=config.TSPROFILE_FASTMATH_FLAGS)
def _rolling_isconstant(a, w):
    """
    Compute the rolling isconstant for 1-D array.

    This is accomplished by comparing the min and max within each window and
    assigning `True` when the min and max are equal and `False` otherwise.

    Parameters
    ----------
    a : numpy.ndarray
        The input array

    w : numpy.ndarray
        The rolling window size

    Returns
    -------
    output : numpy.ndarray
        Rolling window isconstant.
    """
    l = a.shape[0] - w + 1
    out = np.empty(l, dtype=np.bool_)
    for i in range(l):
        out[i] = np.ptp(a[i : i + w]) == 0.0

    return out


def rolling_isconstant(a, w):
    """
    Compute a boolean array that indicates whether a subsequence of `a` with length
    `w` is constant (True)

    Parameters
    ----------
    a : numpy.ndarray
        The input array

    w : int
        The rolling window size

    Returns
    -------
    a_subseq_isconstant : numpy.ndarray
        Rolling window isconstant
    """
    return _rolling_isconstant(a, w)


def compute_mean_std(T, m):
    """
    Compute the sliding mean and standard deviation for the array `T` with
    a window size of `m`

    Both statistics are computed in one linear pass with compensated summation so
    that precision is not lost over long time series (see `_rolling_mean` and
    `_rolling_sum_of_squares`).

    Parameters
    ----------
    T : numpy.ndarray
        Time series or sequence

    m : int
        Window size

    Returns
    -------
    M_T : numpy.ndarray
        Sliding mean

    Σ_T : numpy.ndarray
        Sliding standard deviation

    Raises
    ------
    InvalidWindow
        If `m <= 1` or `m > len(T)`

    Notes
    -----
    `DOI: 10.1109/ICDM.2016.0179 \
    <https://www.cs.ucr.edu/~eamonn/PID4481997_extend_Matrix%20Profile_I.pdf>`__

    See Table II

    `DOI: 10.1137/030601818 <https://doi.org/10.1137/030601818>`__

    Accurate sum and dot product (TwoSum and TwoProduct error-free transformations)
    """
    T = np.asarray(T, dtype=np.float64)
    check_window_size(m, max_size=T.shape[0])

    M_T = _rolling_mean(T, m)
    Σ_T = np.sqrt(_rolling_sum_of_squares(T, m, M_T) / m)

    return M_T, Σ_T


def compute_mean_inverse_norm(T, m):
    """
    Compute the sliding mean and the inverse sliding norm of the mean-centered
    subsequences, `1 / ||T[i : i + m] - M_T[i]||`, for the array `T` with a window
    size of `m`. Constant subsequences have an inverse norm of `0.0` since their
    correlations are resolved separately (see `T_subseq_isconstant`).

    Parameters
    ----------
    T : numpy.ndarray
        Time series or sequence

    m : int
        Window size

    Returns
    -------
    M_T : numpy.ndarray
        Sliding mean

    Σ_T_inverse : numpy.ndarray
        Inverse sliding norm

    T_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T` is constant (True)
    """
    T = np.asarray(T, dtype=np.float64)
    check_window_size(m, max_size=T.shape[0])

    M_T = _rolling_mean(T, m)
    norm = np.sqrt(_rolling_sum_of_squares(T, m, M_T))
    T_subseq_isconstant = rolling_isconstant(T, m) | (norm == 0.0)

    Σ_T_inverse = np.zeros(norm.shape[0], dtype=np.float64)
    Σ_T_inverse[~T_subseq_isconstant] = 1.0 / norm[~T_subseq_isconstant]

    return M_T, Σ_T_inverse, T_subseq_isconstant


def preprocess(T, m, copy=True):
    """
    Validate the time series, compute the mean and standard deviation for every
    subsequence, and compute the rolling isconstant, a boolean array that indicates
    if a subsequence is constant (True) or not (False).

    Parameters
    ----------
    T : numpy.ndarray
        Time series or sequence

    m : int
        Window size

    copy : bool, default True
        A boolean value that indicates whether the process should be done on
        input `T` (False) or its copy (True).

    Returns
    -------
    T : numpy.ndarray
        Modified time series

    M_T : numpy.ndarray
        Rolling mean

    Σ_T : numpy.ndarray
        Rolling standard deviation

    T_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T`
        is constant (True)
    """
    T = _preprocess(T, copy)
    check_window_size(m, max_size=T.shape[0])

    M_T, Σ_T = compute_mean_std(T, m)
    T_subseq_isconstant = rolling_isconstant(T, m) | (Σ_T == 0.0)

    return T, M_T, Σ_T, T_subseq_isconstant


def preprocess_diagonal(T, m, copy=True):
    """
    Preprocess a time series that is to be used when traversing the diagonals of a
    distance matrix.

    Computes the means, `M_T` and `M_T_m_1`, for every subsequence using a window
    size of `m` and `m-1`, respectively, the inverse norm, `Σ_T_inverse`, and the
    `T_subseq_isconstant` array for constant subsequences (i.e., subsequences with a
    standard deviation of zero).

    Parameters
    ----------
    T : numpy.ndarray
        Time series or sequence

    m : int
        Window size

    copy : bool, default True
        A boolean value that indicates whether the process should be done on
        input `T` (False) or its copy (True).

    Returns
    -------
    T : numpy.ndarray
        Modified time series

    M_T : numpy.ndarray
        Rolling mean with a subsequence length of `m`

    Σ_T_inverse : numpy.ndarray
        Inverted rolling norm of the mean-centered subsequences

    M_T_m_1 : numpy.ndarray
        Rolling mean with a subsequence length of `m-1`

    T_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T` is constant (True)
    """
    T = _preprocess(T, copy)
    check_window_size(m, max_size=T.shape[0])

    M_T, Σ_T_inverse, T_subseq_isconstant = compute_mean_inverse_norm(T, m)
    M_T_m_1 = _rolling_mean(T, m - 1)

    return T, M_T, Σ_T_inverse, M_T_m_1, T_subseq_isconstant


def sliding_dot_product(Q, T):
    """
    Use FFT convolution to calculate the sliding window dot product.

    Parameters
    ----------
    Q : numpy.ndarray
        Query array or subsequence

    T : numpy.ndarray
        Time series or sequence

    Returns
    -------
    output : numpy.ndarray
        Sliding dot product between `Q` and `T`.

    Notes
    -----
    Calculate the sliding dot product

    `DOI: 10.1109/ICDM.2016.0179 \
    <https://www.cs.ucr.edu/~eamonn/PID4481997_extend_Matrix%20Profile_I.pdf>`__

    See Table I, Figure 4

    Following the inverse FFT, Fig. 4 states that only cells [m-1:n]
    contain valid dot products

    Padding is done automatically in fftconvolve step
    """
    n = T.shape[0]
    m = Q.shape[0]
    Qr = np.flipud(Q)  # Reverse/flip Q
    QT = convolve(Qr, T, method="fft")

    return QT.real[m - 1 : n]


@njit(fastmath=config.TSPROFILE_FASTMATH_FLAGS)
def _calculate_squared_distance(
    m, QT, μ_Q, σ_Q, M_T, Σ_T, Q_subseq_isconstant, T_subseq_isconstant
):
    """
    Compute a single squared distance given all scalar inputs.

    Parameters
    ----------
    m : int
        Window size

    QT : float
        Pre-computed dot product between `Q` and the ith subsequence in `T`, each with
        length `m`

    μ_Q : float
        Mean of `Q`

    σ_Q : float
        Standard deviation of `Q`

    M_T : float
        Mean of the ith subsequence in `T`

    Σ_T : float
        Standard deviation of the ith subsequence in `T`

    Q_subseq_isconstant : bool
        A boolean value that indicates whether the subsequence `Q` is constant (True)

    T_subseq_isconstant : bool
        A boolean value that indicates whether the ith subsequence in `T` is
        constant (True)

    Returns
    -------
    D_squared : float
        Squared distance

    Notes
    -----
    `DOI: 10.1109/ICDM.2016.0179 \
    <https://www.cs.ucr.edu/~eamonn/PID4481997_extend_Matrix%20Profile_I.pdf>`__

    See Equation on Page 4
    """
    if Q_subseq_isconstant and T_subseq_isconstant:
        D_squared = 0.0
    elif Q_subseq_isconstant or T_subseq_isconstant:
        D_squared = float(m)
    else:
        denom = (σ_Q * Σ_T) * m
        denom = max(denom, config.TSPROFILE_DENOM_THRESHOLD)

        ρ = (QT - (μ_Q * M_T) * m) / denom
        ρ = min(ρ, 1.0)

        # Round-off may still leave a tiny negative value
        D_squared = max(2 * m * (1.0 - ρ), 0.0)

    return D_squared


@njit(fastmath=config.TSPROFILE_FASTMATH_FLAGS)
def _calculate_squared_distance_profile(
    m, QT, μ_Q, σ_Q, M_T, Σ_T, Q_subseq_isconstant, T_subseq_isconstant
):
    """
    Compute the squared distance profile

    Parameters
    ----------
    m : int
        Window size

    QT : numpy.ndarray
        Dot product between `Q` and `T`

    μ_Q : float
        Mean of `Q`

    σ_Q : float
        Standard deviation of `Q`

    M_T : numpy.ndarray
        Sliding mean of `T`

    Σ_T : numpy.ndarray
        Sliding standard deviation of `T`

    Q_subseq_isconstant : bool
        A boolean value that indicates whether the subsequence `Q` is constant (True)

    T_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T` is constant (True)

    Returns
    -------
    D_squared : numpy.ndarray
        Squared distance profile
    """
    k = M_T.shape[0]
    D_squared = np.empty(k, dtype=np.float64)

    for i in range(k):
        D_squared[i] = _calculate_squared_distance(
            m,
            QT[i],
            μ_Q,
            σ_Q,
            M_T[i],
            Σ_T[i],
            Q_subseq_isconstant,
            T_subseq_isconstant[i],
        )

    return D_squared


@njit(fastmath=config.TSPROFILE_FASTMATH_FLAGS)
def calculate_distance_profile(
    m, QT, μ_Q, σ_Q, M_T, Σ_T, Q_subseq_isconstant, T_subseq_isconstant
):
    """
    Compute the distance profile

    Parameters
    ----------
    m : int
        Window size

    QT : numpy.ndarray
        Dot product between `Q` and `T`

    μ_Q : float
        Mean of `Q`

    σ_Q : float
        Standard deviation of `Q`

    M_T : numpy.ndarray
        Sliding mean of `T`

    Σ_T : numpy.ndarray
        Sliding standard deviation of `T`

    Q_subseq_isconstant : bool
        A boolean value that indicates whether the subsequence `Q` is constant (True)

    T_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T` is constant (True)

    Returns
    -------
    output : numpy.ndarray
        Distance profile
    """
    D_squared = _calculate_squared_distance_profile(
        m, QT, μ_Q, σ_Q, M_T, Σ_T, Q_subseq_isconstant, T_subseq_isconstant
    )

    return np.sqrt(D_squared)


def _mass(Q, T, M_T, Σ_T, T_subseq_isconstant, μ_Q, σ_Q, Q_subseq_isconstant):
    """
    Compute the distance profile of `Q` against all subsequences of `T` with
    precomputed statistics. `Q` and `T` are assumed to be preprocessed.

    Parameters
    ----------
    Q : numpy.ndarray
        Query array or subsequence

    T : numpy.ndarray
        Time series or sequence

    M_T : numpy.ndarray
        Sliding mean of `T`

    Σ_T : numpy.ndarray
        Sliding standard deviation of `T`

    T_subseq_isconstant : numpy.ndarray
        A boolean array that indicates whether a subsequence in `T` is constant (True)

    μ_Q : float
        The scalar mean of Q

    σ_Q : float
        The scalar standard deviation of Q

    Q_subseq_isconstant : bool
        A boolean value that indicates whether the subsequence `Q` is constant (True)

    Returns
    -------
    output : numpy.ndarray
        Distance profile

    Notes
    -----
    Note: Unlike the Matrix Profile I paper, here, M_T, Σ_T can be calculated
    once for all subsequences of T and passed in so the redundancy is removed
    """
    QT = sliding_dot_product(Q, T)

    return calculate_distance_profile(
        Q.shape[0], QT, μ_Q, σ_Q, M_T, Σ_T, Q_subseq_isconstant, T_subseq_isconstant
    )


def mass(Q, T, M_T=None, Σ_T=None, T_subseq_isconstant=None, query_idx=None):
    """
    Compute the distance profile using the MASS algorithm

    Parameters
    ----------
    Q : numpy.ndarray
        Query array or subsequence.

    T : numpy.ndarray
        Time series or sequence.

    M_T : numpy.ndarray, default None
        Sliding mean of ``T``.

    Σ_T : numpy.ndarray, default None
        Sliding standard deviation of ``T``.

    T_subseq_isconstant : numpy.ndarray, default None
        A boolean array that indicates whether a subsequence in ``T`` is constant
        (``True``).

    query_idx : int, default None
        This is the index position along the time series, ``T``, where the query
        subsequence, ``Q``, is located. When provided, the distance between ``Q``
        and ``T[query_idx : query_idx + m]`` is set to zero.

    Returns
    -------
    distance_profile : numpy.ndarray
        Distance profile.

    Notes
    -----
    `DOI: 10.1109/ICDM.2016.0179 \
    <https://www.cs.ucr.edu/~eamonn/PID4481997_extend_Matrix%20Profile_I.pdf>`__

    See Table II

    Examples
    --------
    >>> import tsprofile
    >>> import numpy as np
    >>> tsprofile.mass(
    ...     np.array([-11.1, 23.4, 79.5, 1001.0]),
    ...     np.array([584., -11., 23., 79., 1001., 0., -19.]))
    array([3.18792463e+00, 1.11297393e-03, 3.23874018e+00, 3.34470195e+00])
    """
    Q = _preprocess(Q)
    m = Q.shape[0]
    check_window_size(m)

    if M_T is None or Σ_T is None or T_subseq_isconstant is None:
        T, M_T, Σ_T, T_subseq_isconstant = preprocess(T, m)
    else:
        T = _preprocess(T)

    if m > T.shape[0]:
        raise InvalidWindow(
            f"The length of `Q` ({m}) must be less than or equal to "
            f"the length of `T` ({T.shape[0]}). "
        )

    μ_Q, σ_Q = compute_mean_std(Q, m)
    Q_subseq_isconstant = bool(rolling_isconstant(Q, m)[0] or σ_Q[0] == 0.0)

    distance_profile = _mass(
        Q, T, M_T, Σ_T, T_subseq_isconstant, μ_Q[0], σ_Q[0], Q_subseq_isconstant
    )

    if query_idx is not None:
        distance_profile[int(query_idx)] = 0.0

    return distance_profile


@njit(fastmath=config.TSPROFILE_FASTMATH_FLAGS)
def _apply_exclusion_zone(a, idx, excl_zone, val):
    """
    Apply an exclusion zone to an array (inplace), i.e. set all values
    to `val` in a window around a given index.

    All values in a in [idx - excl_zone, idx + excl_zone] (endpoints included)
    will be set to `val`. Only call this on a buffer that is exclusively owned
    by the caller.

    Parameters
    ----------
    a : numpy.ndarray
        The array you want to apply the exclusion zone to

    idx : int
        The index around which the window should be centered

    excl_zone : int
        Size of the exclusion zone.

    val : float or bool
        The elements within the exclusion zone will be set to this value

    Returns
    -------
    None
    """
    zone_start = max(0, idx - excl_zone)
    zone_stop = min(a.shape[-1], idx + excl_zone + 1)
    a[zone_start:zone_stop] = val


def apply_exclusion_zone(a, idx, excl_zone, val=np.inf):
    """
    Return a copy of `a` where all values in a window around a given index are
    set to `val`.

    All values in a in [idx - excl_zone, idx + excl_zone] (endpoints included)
    will be set to `val`. The input array is never modified.

    Parameters
    ----------
    a : numpy.ndarray
        The array you want to apply the exclusion zone to

    idx : int
        The index around which the window should be centered

    excl_zone : int
        Size of the exclusion zone.

    val : float, default np.inf
        The elements within the exclusion zone will be set to this value

    Returns
    -------
    out : numpy.ndarray
        The masked copy of `a`
    """
    out = np.array(a, dtype=np.float64, copy=True)
    _apply_exclusion_zone(out, int(idx), int(excl_zone), float(val))

    return out


@njit(fastmath=config.TSPROFILE_FASTMATH_TRUE)
def _count_diagonal_ndist(diags, m, n_A, n_B):
    """
    Count the number of distances that would be computed for each diagonal index
    referenced in `diags`

    Parameters
    ----------
    diags : numpy.ndarray
        The diagonal indices of interest

    m : int
        Window size

    n_A : int
        The length of time series `T_A`

    n_B : int
        The length of time series `T_B`

    Returns
    -------
    diag_ndist_counts : numpy.ndarray
        Counts of distances computed along each diagonal of interest
    """
    diag_ndist_counts = np.zeros(diags.shape[0], dtype=np.int64)
    for diag_idx in range(diags.shape[0]):
        k = diags[diag_idx]
        if k >= 0:
            diag_ndist_counts[diag_idx] = min(n_B - m + 1 - k, n_A - m + 1)
        else:
            diag_ndist_counts[diag_idx] = min(n_B - m + 1, n_A - m + 1 + k)

    return diag_ndist_counts


@njit(fastmath=config.TSPROFILE_FASTMATH_TRUE)
def _get_array_ranges(a, n_chunks, truncate):
    """
    Given an input array, split it into `n_chunks`.

    Parameters
    ----------
    a : numpy.ndarray
        An array to be split

    n_chunks : int
        Number of chunks to split the array into

    truncate : bool
        If `truncate=True`, truncate the rows of `array_ranges` if there are not enough
        elements in `a` to be chunked up into `n_chunks`.  Otherwise, if
        `truncate=False`, all extra chunks will have their start and stop indices set
        to `a.shape[0]`.

    Returns
    -------
    array_ranges : numpy.ndarray
        A two column array where each row consists of a start and (exclusive) stop index
        pair. The first column contains the start indices and the second column
        contains the stop indices.
    """
    array_ranges = np.zeros((n_chunks, 2), dtype=np.int64)
    if a.shape[0] > 0 and n_chunks > 0:
        cumsum = a.cumsum() / a.sum()
        insert = np.linspace(0, 1, n_chunks + 1)[1:-1]
        idx = 1 + np.searchsorted(cumsum, insert)
        array_ranges[1:, 0] = idx  # Fill the first column with start indices
        array_ranges[:-1, 1] = idx  # Fill the second column with exclusive stop indices
        array_ranges[-1, 1] = a.shape[0]  # Handle the stop index for the final chunk

        diff_idx = np.diff(idx)
        if np.any(diff_idx == 0):
            row_truncation_idx = np.argmin(diff_idx) + 2
            array_ranges[row_truncation_idx:, 0] = a.shape[0]
            array_ranges[row_truncation_idx - 1 :, 1] = a.shape[0]
            if truncate:
                array_ranges = array_ranges[:row_truncation_idx]

    return array_ranges


def get_diags(n_A, m, n_B=None):
    """
    Get the diagonal indices of the distance matrix that need to be traversed

    Parameters
    ----------
    n_A : int
        The length of time series `T_A`

    m : int
        Window size

    n_B : int, default None
        The length of time series `T_B`. This is `None` for a self-join.

    Returns
    -------
    diags : numpy.ndarray
        For a self-join, the diagonals `[excl_zone + 1, n_A - m]` above the main
        diagonal. For an AB-join, all diagonals `[-(n_A - m), n_B - m]`.
    """
    if n_B is None:
        excl_zone = get_excl_zone(m)
        return np.arange(excl_zone + 1, n_A - m + 1, dtype=np.int64)

    return np.arange(-(n_A - m + 1) + 1, n_B - m + 1, dtype=np.int64)


def diagonal_batches(n_A, m, n_workers, n_B=None):
    """
    Split the diagonals of the distance matrix into `n_workers` contiguous batches
    that contain (roughly) the same number of distance computations.

    Along a self-join distance matrix, each successive diagonal contains one fewer
    cell than the previous one and so later batches receive more diagonals than
    earlier batches.

    Parameters
    ----------
    n_A : int
        The length of time series `T_A`

    m : int
        Window size

    n_workers : int
        The number of batches (i.e., one per worker)

    n_B : int, default None
        The length of time series `T_B`. This is `None` for a self-join.

    Returns
    -------
    batches : numpy.ndarray
        A two column array with exactly `n_workers` rows where each row consists of
        a start and (exclusive) stop diagonal. The rows are contiguous, do not overlap,
        and their sizes sum to the total number of diagonals. Trailing batches may be
        empty when there are fewer diagonals than workers.
    """
    n_workers = int(n_workers)
    if n_workers < 1:
        raise ValueError(f"`n_workers` must be a positive integer but found {n_workers}")

    if n_B is None:
        diags = get_diags(n_A, m)
        ndist_counts = _count_diagonal_ndist(diags, m, n_A, n_A)
    else:
        diags = get_diags(n_A, m, n_B)
        ndist_counts = _count_diagonal_ndist(diags, m, n_A, n_B)

    if diags.shape[0] == 0:
        return np.zeros((n_workers, 2), dtype=np.int64)

    batches = _get_array_ranges(ndist_counts, n_workers, False)
    batches += diags[0]

    return batches


@njit(fastmath=config.TSPROFILE_FASTMATH_FLAGS)
def _merge_partial_PI(PA, PB, IA, IB):
    """
    Merge the partial matrix profile `PB` into `PA` (in place). `PA[i]` and `IA[i]`
    are only replaced when `PB[i]` is strictly smaller so that ties keep the result
    from the earlier batch.

    Parameters
    ----------
    PA : numpy.ndarray
        A 1D matrix profile (or Pearson correlations negated)

    PB : numpy.ndarray
        A 1D matrix profile with the same shape as `PA`

    IA : numpy.ndarray
        Matrix profile indices corresponding to `PA`

    IB : numpy.ndarray
        Matrix profile indices corresponding to `PB`

    Returns
    -------
    None
    """
    for i in range(PA.shape[0]):
        if PB[i] < PA[i]:
            PA[i] = PB[i]
            IA[i] = IB[i]


def p2e(ρ, m):
    """
    Convert Pearson correlations to z-normalized Euclidean distances

    Parameters
    ----------
    ρ : numpy.ndarray
        Pearson correlations

    m : int
        Window size

    Returns
    -------
    D : numpy.ndarray
        A new array of z-normalized Euclidean distances. Correlations greater than one
        (due to accumulated floating point errors) are capped at one.
    """
    ρ = np.minimum(np.asarray(ρ, dtype=np.float64), 1.0)
    p_norm = 2 * m * (1.0 - ρ)
    p_norm[p_norm < config.TSPROFILE_P_NORM_THRESHOLD] = 0.0

    return np.sqrt(p_norm)


def e2p(D, m):
    """
    Convert z-normalized Euclidean distances to Pearson correlations

    Parameters
    ----------
    D : numpy.ndarray
        z-normalized Euclidean distances

    m : int
        Window size

    Returns
    -------
    ρ : numpy.ndarray
        A new array of Pearson correlations, clipped to `[0, 1]`. Negative
        correlations cannot be recovered.
    """
    D = np.asarray(D, dtype=np.float64)
    ρ = 1.0 - np.square(D) / (2 * m)

    return np.clip(ρ, 0.0, 1.0)


def check_n_jobs(n_jobs):
    """
    Resolve and validate the number of parallel batches

    Parameters
    ----------
    n_jobs : int
        The number of batches. `None` resolves to `config.TSPROFILE_N_JOBS`, i.e.,
        one batch per logical CPU.

    Returns
    -------
    n_jobs : int
        The number of batches
    """
    if n_jobs is None:
        n_jobs = config.TSPROFILE_N_JOBS

    if int(n_jobs) != n_jobs or n_jobs < 1:
        raise ValueError(f"`n_jobs` must be a positive integer but found {n_jobs}")

    return int(n_jobs)


def _dask_diagonals(dask_client, func, args, m, n_A, n_B, ignore_trivial, n_jobs):
    """
    Traverse the diagonals of the distance matrix with a `dask` cluster

    Each worker receives exactly one batch of contiguous diagonals (see
    `diagonal_batches`) and calls `func(*args, diags, ignore_trivial, n_jobs)`, which
    must return the partial matrix profile, matrix profile indices, right matrix
    profile, and right matrix profile indices for its batch. The partial results are
    merged in batch order.

    Parameters
    ----------
    dask_client : client
        A `dask` client. Setting up a cluster is beyond the scope of this library.
        Please refer to the `dask` documentation.

    func : function
        The (Numba JIT-compiled) function that traverses a set of diagonals

    args : list
        The leading arguments for `func`. Arrays are broadcast to every worker.

    m : int
        Window size

    n_A : int
        The length of time series `T_A`

    n_B : int
        The length of time series `T_B`

    ignore_trivial : bool
        Set to `True` if this is a self-join

    n_jobs : int
        The number of threads used by `func` on each worker

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
    """
    hosts = list(dask_client.ncores().keys())
    nworkers = len(hosts)

    if ignore_trivial:
        batches = diagonal_batches(n_A, m, nworkers)
    else:
        batches = diagonal_batches(n_A, m, nworkers, n_B)
    logger.debug(f"Dispatching {batches.shape[0]} diagonal batches to dask workers")

    # Scatter data to Dask cluster
    args_futures = []
    for arg in args:
        if isinstance(arg, np.ndarray):
            arg = dask_client.scatter(arg, broadcast=True, hash=False)
        args_futures.append(arg)

    futures = []
    for i, host in enumerate(hosts):
        diags_future = dask_client.scatter(
            np.arange(batches[i, 0], batches[i, 1], dtype=np.int64),
            workers=[host],
            hash=False,
        )
        futures.append(
            dask_client.submit(func, *args_futures, diags_future, ignore_trivial, n_jobs)
        )

    results = dask_client.gather(futures)
    P, I, PR, IR = results[0]
    for i in range(1, nworkers):
        _merge_partial_PI(P, results[i][0], I, results[i][1])
        _merge_partial_PI(PR, results[i][2], IR, results[i][3])

    return P, I, PR, IR
