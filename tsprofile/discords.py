# tsprofile
# Portions copyright 2019 TD Ameritrade, derived from STUMPY.
# Released under the terms of the 3-Clause BSD license.

import numpy as np

from . import core
from .errors import InvalidK


def discords(P, k, excl_zone):
    """
    Find the top-k discords, i.e., the subsequences that are farthest away from
    their nearest neighbors

    The subsequence with the largest finite matrix profile value is selected and its
    exclusion zone is removed from consideration before the next one is selected.

    Parameters
    ----------
    P : numpy.ndarray
        Matrix profile

    k : int
        The number of discords to return. This is capped at the length of `P`.

    excl_zone : int
        The half width of the exclusion zone applied around every discord

    Returns
    -------
    out : numpy.ndarray
        The start indices of the discords ordered from the largest to the smallest
        matrix profile value. Fewer than `k` indices are returned when no finite
        value remains.

    Raises
    ------
    InvalidK
        If `k < 1`
    """
    if k < 1:
        raise InvalidK(f"The number of discords, `k`, must be at least 1 but found {k}")

    if excl_zone < 0:
        raise ValueError(f"`excl_zone` must be non-negative but found {excl_zone}")

    P = np.array(P, dtype=np.float64, copy=True)
    P[~np.isfinite(P)] = -np.inf
    k = min(int(k), P.shape[0])

    out = []
    for _ in range(k):
        idx = np.argmax(P)
        if P[idx] == -np.inf:
            break
        out.append(idx)
        core._apply_exclusion_zone(P, idx, int(excl_zone), -np.inf)

    return np.array(out, dtype=np.int64)
