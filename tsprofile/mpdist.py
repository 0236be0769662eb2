# tsprofile
# Portions copyright 2019 TD Ameritrade, derived from STUMPY.
# Released under the terms of the 3-Clause BSD license.

import functools
import math

import numpy as np

from . import config, core
from .matrixprofile import _get_mp_func


def _compute_P_ABBA(T_A, T_B, m, P_ABBA, partial_mp_func):
    """
    A convenience function for computing the (unsorted) concatenated matrix profiles
    from an AB-join and BA-join for the two time series, `T_A` and `T_B`. This result
    can then be used to compute the matrix profile distance (MPdist) measure.

    Parameters
    ----------
    T_A : numpy.ndarray
        The first time series or sequence for which to compute the matrix profile

    T_B : numpy.ndarray
        The second time series or sequence for which to compute the matrix profile

    m : int
        Window size

    P_ABBA : numpy.ndarray
        The output array to write the concatenated AB-join and BA-join results to

    partial_mp_func : functools.partial
        A generic matrix profile function that wraps extra parameters into
        `functools.partial` function

    Returns
    -------
    None

    Notes
    -----
    `DOI: 10.1109/ICDM.2018.00119 \
    <https://www.cs.ucr.edu/~eamonn/MPdist_Expanded.pdf>`__

    See Section III
    """
    n_A = T_A.shape[0]
    P_ABBA[: n_A - m + 1] = partial_mp_func(T_A, m, T_B).P_
    P_ABBA[n_A - m + 1 :] = partial_mp_func(T_B, m, T_A).P_


def _select_P_ABBA_value(P_ABBA, k):
    """
    A convenience function for returning the `k`th smallest value from the `P_ABBA`
    array

    Parameters
    ----------
    P_ABBA : numpy.ndarray
        An unsorted array resulting from the concatenation of the outputs from an
        AB-join and BA-join for two time series, `T_A` and `T_B`

    k : int
        Specify the `k`th value in the concatenated matrix profiles to return

    Returns
    -------
    MPdist : float
        The matrix profile distance
    """
    k = min(int(k), P_ABBA.shape[0] - 1)
    partition = np.partition(P_ABBA, k)

    return float(partition[k])


def mpdist(
    T_A,
    T_B,
    m,
    percentage=config.TSPROFILE_MPDIST_PERCENTAGE,
    k=None,
    algorithm="stomp",
    n_jobs=None,
    client=None,
):
    """
    Compute the z-normalized matrix profile distance (MPdist) measure between any two
    time series

    The MPdist distance measure considers two time series to be similar if they share
    many subsequences, regardless of the order of matching subsequences. MPdist
    concatenates the output of an AB-join and a BA-join and returns the `k`th smallest
    value as the reported distance. Note that MPdist is a measure and not a metric.
    Therefore, it does not obey the triangular inequality but the method is highly
    scalable.

    Parameters
    ----------
    T_A : numpy.ndarray
        The first time series or sequence for which to compute the matrix profile

    T_B : numpy.ndarray
        The second time series or sequence for which to compute the matrix profile

    m : int
        Window size

    percentage : float, default 0.05
        The percentage of distances that will be used to report `mpdist`. The value
        is between 0.0 and 1.0. This parameter is ignored when `k` is not `None`.

    k : int, default None
        Specify the `k`th value in the concatenated matrix profiles to return. When `k`
        is not `None`, then the `percentage` parameter is ignored.

    algorithm : str, default "stomp"
        The matrix profile algorithm used for both joins. One of `"stmp"`,
        `"stamp"`, `"stomp"`, or `"mpx"`.

    n_jobs : int, default None
        The number of parallel batches used by `"stomp"` and `"mpx"`

    client : client, default None
        A `dask.distributed` client used by `"stomp"` and `"mpx"`

    Returns
    -------
    MPdist : float
        The matrix profile distance

    Notes
    -----
    `DOI: 10.1109/ICDM.2018.00119 \
    <https://www.cs.ucr.edu/~eamonn/MPdist_Expanded.pdf>`__

    See Section III

    Examples
    --------
    >>> import tsprofile
    >>> import numpy as np
    >>> tsprofile.mpdist(
    ...     np.array([-11.1, 23.4, 79.5, 1001.0]),
    ...     np.array([584., -11., 23., 79., 1001., 0., -19.]),
    ...     m=3)
    0.00019935236191097894
    """
    T_A = core._preprocess(T_A)
    T_B = core._preprocess(T_B)
    n_A = T_A.shape[0]
    n_B = T_B.shape[0]
    core.check_window_size(m, max_size=min(n_A, n_B))

    mp_func = _get_mp_func(algorithm)
    if algorithm == "stamp":
        partial_mp_func = functools.partial(mp_func, sample_pct=1.0)
    elif algorithm in ("stomp", "mpx"):
        partial_mp_func = functools.partial(mp_func, n_jobs=n_jobs, client=client)
    else:
        partial_mp_func = mp_func

    P_ABBA = np.empty(n_A - m + 1 + n_B - m + 1, dtype=np.float64)
    _compute_P_ABBA(T_A, T_B, m, P_ABBA, partial_mp_func)

    if k is not None:
        k = min(int(k), P_ABBA.shape[0] - 1)
    else:
        percentage = np.clip(percentage, 0.0, 1.0)
        k = min(math.ceil(percentage * (n_A + n_B)), n_A - m + 1 + n_B - m + 1 - 1)

    return _select_P_ABBA_value(P_ABBA, k)
