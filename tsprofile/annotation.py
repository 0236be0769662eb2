# tsprofile
# Portions copyright 2019 TD Ameritrade, derived from STUMPY.
# Released under the terms of the 3-Clause BSD license.

import numpy as np

from . import core
from .errors import LengthMismatch


def _rescale(a):
    """
    Linearly rescale `a` to `[0, 1]`. An array without any spread is mapped to ones.
    """
    a_min = np.min(a)
    a_ptp = np.max(a) - a_min
    if a_ptp == 0.0:
        return np.ones(a.shape[0], dtype=np.float64)

    return (a - a_min) / a_ptp


def default_av(T, m):
    """
    The default annotation vector where every subsequence is equally relevant

    Parameters
    ----------
    T : numpy.ndarray
        Time series or sequence

    m : int
        Window size

    Returns
    -------
    av : numpy.ndarray
        An array of ones with length `len(T) - m + 1`
    """
    T = core._preprocess(T)
    core.check_window_size(m, max_size=T.shape[0])

    return np.ones(T.shape[0] - m + 1, dtype=np.float64)


def complexity_av(T, m):
    """
    An annotation vector that favors subsequences with a high complexity estimate

    The complexity of a subsequence is the length of the line obtained by
    stretching it, `sqrt(sum(diff(T[i : i + m]) ** 2))`, rescaled to `[0, 1]`.

    Parameters
    ----------
    T : numpy.ndarray
        Time series or sequence

    m : int
        Window size

    Returns
    -------
    av : numpy.ndarray
        Complexity annotation vector

    Notes
    -----
    `DOI: 10.1137/1.9781611972818.16 \
    <https://www.cs.ucr.edu/~eamonn/Complexity-Invariant%20Distance%20Measure.pdf>`__
    """
    T = core._preprocess(T)
    core.check_window_size(m, max_size=T.shape[0])

    ce = np.sqrt(np.sum(np.square(np.diff(core.rolling_window(T, m), axis=1)), axis=1))

    return _rescale(ce)


def meanstd_av(T, m):
    """
    An annotation vector that favors subsequences with a below average standard
    deviation (i.e., ones) over all other subsequences (i.e., zeros)

    Parameters
    ----------
    T : numpy.ndarray
        Time series or sequence

    m : int
        Window size

    Returns
    -------
    av : numpy.ndarray
        Mean/standard deviation annotation vector
    """
    T = core._preprocess(T)
    core.check_window_size(m, max_size=T.shape[0])

    _, Σ_T = core.compute_mean_std(T, m)
    av = np.zeros(Σ_T.shape[0], dtype=np.float64)
    av[Σ_T < np.mean(Σ_T)] = 1.0

    return av


def clipping_av(T, m):
    """
    An annotation vector that penalizes subsequences that contain clipped values,
    i.e., values equal to the global minimum or maximum of `T`

    Parameters
    ----------
    T : numpy.ndarray
        Time series or sequence

    m : int
        Window size

    Returns
    -------
    av : numpy.ndarray
        Clipping annotation vector. Subsequences with the most clipped values are
        zero and subsequences without any clipped values are one.
    """
    T = core._preprocess(T)
    core.check_window_size(m, max_size=T.shape[0])

    clipped = ((T == np.min(T)) | (T == np.max(T))).astype(np.float64)
    counts = np.sum(core.rolling_window(clipped, m), axis=1)
    if np.max(counts) == np.min(counts):
        return np.ones(counts.shape[0], dtype=np.float64)

    return 1.0 - _rescale(counts)


def apply_av(P, av):
    """
    Apply an annotation vector to a matrix profile

    Subsequences with an annotation value of one keep their distance while
    subsequences with an annotation value of zero are pushed up by the largest
    distance in the matrix profile, `P + (1 - av) * max(P)`.

    Parameters
    ----------
    P : numpy.ndarray
        Matrix profile

    av : numpy.ndarray
        Annotation vector with values in `[0, 1]`

    Returns
    -------
    out : numpy.ndarray
        A new, corrected matrix profile. `P` is never modified.

    Raises
    ------
    LengthMismatch
        If `av` and `P` do not have the same length

    ValueError
        If `av` contains a value outside of `[0, 1]`
    """
    P = np.asarray(P, dtype=np.float64)
    av = np.asarray(av, dtype=np.float64)

    if av.shape != P.shape:
        raise LengthMismatch(
            f"The annotation vector has length {av.shape[0]} but the matrix profile "
            f"has length {P.shape[0]}"
        )

    if np.any(av < 0.0) or np.any(av > 1.0) or not np.all(np.isfinite(av)):
        raise ValueError("The annotation vector must only contain values in [0, 1]")

    finite = np.isfinite(P)
    if not np.any(finite):
        return P.copy()

    return P + (1.0 - av) * np.max(P[finite])
