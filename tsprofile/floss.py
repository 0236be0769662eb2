# tsprofile
# Portions copyright 2019 TD Ameritrade, derived from STUMPY.
# Released under the terms of the 3-Clause BSD license.

import numpy as np

from .errors import LengthMismatch


def _nnmark(I):
    """
    Count the number of nearest neighbor overhead crossings or arcs.

    Parameters
    ----------
    I : numpy.ndarray
        Matrix profile indices

    Returns
    -------
    nnmark : numpy.ndarray
        Counts of nearest neighbor overheard crossings or arcs.

    Notes
    -----
    `DOI: 10.1109/ICDM.2017.21 <https://www.cs.ucr.edu/~eamonn/Segmentation_ICDM.pdf>`__

    See Table I

    This is a fast and vectorized implementation of the nnmark algorithm.
    """
    I = np.array(I, dtype=np.int64, copy=True)

    # Replace index values that are less than zero with its own positional index
    idx = np.argwhere(I < 0).flatten()
    I[idx] = idx

    k = I.shape[0]
    i = np.arange(k, dtype=np.int64)

    nnmark = np.bincount(np.minimum(i, I), minlength=k)
    nnmark -= np.bincount(np.maximum(i, I), minlength=k)

    return nnmark.cumsum()


def _iac(width):
    """
    Compute the idealized arc curve (IAC), i.e., the largest number of arcs that
    can cross each position, `min(i, width - i)`. This is a triangle that peaks at
    the midpoint.

    Parameters
    ----------
    width : int
        The width of the IAC (i.e., the number of subsequences)

    Returns
    -------
    IAC : numpy.ndarray
        Idealized arc curve (IAC)
    """
    i = np.arange(width, dtype=np.float64)

    return np.minimum(i, width - i)


def _cac(I, L=None, excl_factor=0):
    """
    Compute the corrected arc curve (CAC)

    Parameters
    ----------
    I : numpy.ndarray
        The matrix profile indices for the time series of interest

    L : int, default None
        The subsequence length that is set roughly to be one period length. This is
        only used to manage edge effects together with `excl_factor`.

    excl_factor : int, default 0
        The multiplying factor for the first and last regime exclusion zones

    Returns
    -------
    output : numpy.ndarray
        A corrected arc curve (CAC) with values in `[0, 1]`

    Notes
    -----
    `DOI: 10.1109/ICDM.2017.21 <https://www.cs.ucr.edu/~eamonn/Segmentation_ICDM.pdf>`__

    See Table I

    This is the implementation for the corrected arc curve (CAC).
    """
    k = I.shape[0]
    AC = _nnmark(I)
    CAC = np.ones(k, dtype=np.float64)

    IAC = _iac(k)
    IAC[IAC == 0.0] = 10**-10  # Avoid divide by zero
    CAC[:] = AC / IAC
    CAC[CAC > 1.0] = 1.0  # Equivalent to min
    CAC[CAC < 0.0] = 0.0

    CAC[0] = 1.0
    CAC[-1] = 1.0

    if L is not None and excl_factor > 0:
        CAC[: L * excl_factor] = 1.0
        CAC[-L * excl_factor :] = 1.0

    return CAC


def _rea(cac, n_regimes, L, excl_factor=5):
    """
    Find the location of the regimes using the regime extracting
    algorithm (REA)

    Parameters
    ----------
    cac : numpy.ndarray
        The corrected arc curve

    n_regimes : int
        The number of regimes to search for. This is one more than the
        number of regime changes as denoted in the original paper.

    L : int
        The subsequence length that is set roughly to be one period length.

    excl_factor : int, default 5
        The multiplying factor for the regime exclusion zone

    Returns
    -------
    regime_locs : numpy.ndarray
        The locations of the regimes

    Notes
    -----
    `DOI: 10.1109/ICDM.2017.21 <https://www.cs.ucr.edu/~eamonn/Segmentation_ICDM.pdf>`__

    See Table II

    This is the implementation for the regime extracting algorithm (REA).
    """
    regime_locs = np.empty(n_regimes - 1, dtype=np.int64)
    tmp_cac = cac.copy()
    for i in range(n_regimes - 1):
        regime_locs[i] = np.argmin(tmp_cac)
        excl_start = max(regime_locs[i] - excl_factor * L, 0)
        excl_stop = min(regime_locs[i] + excl_factor * L, cac.shape[0])
        tmp_cac[excl_start:excl_stop] = 1.0

    return regime_locs


def segment(I):
    """
    Find the single most likely regime change from the matrix profile indices

    Parameters
    ----------
    I : numpy.ndarray
        The self-join matrix profile indices

    Returns
    -------
    change_point : int
        The position of the minimum of the corrected arc curve

    cac_value : float
        The value of the corrected arc curve at `change_point`

    cac : numpy.ndarray
        The corrected arc curve
    """
    I = np.asarray(I, dtype=np.int64)
    if I.shape[0] < 1:
        raise LengthMismatch("The matrix profile indices do not contain any data")

    cac = _cac(I)
    change_point = int(np.argmin(cac))

    return change_point, float(cac[change_point]), cac


def fluss(I, L, n_regimes, excl_factor=5):
    """
    Compute the Fast Low-cost Unipotent Semantic Segmentation (FLUSS)
    for static data (i.e., batch processing)

    Essentially, this is a wrapper to compute the corrected arc curve and
    regime locations. Note that since the matrix profile indices, `I`, are
    pre-computed, this function is agnostic to subsequence normalization.

    Parameters
    ----------
    I : numpy.ndarray
        The matrix profile indices for the time series of interest

    L : int
        The subsequence length that is set roughly to be one period length.
        This is likely to be the same value as the window size, `m`, used
        to compute the matrix profile and matrix profile index but it can
        be different since this is only used to manage edge effects
        and has no bearing on any of the IAC or CAC core calculations.

    n_regimes : int
        The number of regimes to search for. This is one more than the
        number of regime changes as denoted in the original paper.

    excl_factor : int, default 5
        The multiplying factor for the regime exclusion zone

    Returns
    -------
    cac : numpy.ndarray
        A corrected arc curve (CAC)

    regime_locs : numpy.ndarray
        The locations of the regimes

    Notes
    -----
    `DOI: 10.1109/ICDM.2017.21 <https://www.cs.ucr.edu/~eamonn/Segmentation_ICDM.pdf>`__

    See Section A

    This is the implementation for Fast Low-cost Unipotent Semantic
    Segmentation (FLUSS).
    """
    if n_regimes < 1:
        raise ValueError(f"`n_regimes` must be at least 1 but found {n_regimes}")

    I = np.asarray(I, dtype=np.int64)
    cac = _cac(I, L, excl_factor=excl_factor)
    regime_locs = _rea(cac, n_regimes, L, excl_factor=excl_factor)

    return cac, regime_locs
