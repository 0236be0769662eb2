# tsprofile
# Portions copyright 2019 TD Ameritrade, derived from STUMPY.
# Released under the terms of the 3-Clause BSD license.

import logging

import numpy as np

from . import core
from .errors import InvalidInput
from .stomp import stomp

logger = logging.getLogger(__name__)


class stompi:
    """
    A class to compute an incremental z-normalized matrix profile for streaming data

    This is based on the on-line STOMPI algorithm.

    Parameters
    ----------
    T : numpy.ndarray
        The time series or sequence for which the matrix profile and matrix profile
        indices will be returned

    m : int
        Window size

    mp : numpy.ndarray, default None
        A pre-computed self-join matrix profile. This is a 2D array of shape
        `(len(T) - m + 1, 4)` where the columns are the matrix profile, the matrix
        profile indices, the right matrix profile, and the right matrix profile
        indices. When None (default), this array is computed internally using
        `tsprofile.stomp`.

    Attributes
    ----------
    P_ : numpy.ndarray
        The updated matrix profile for `T`

    I_ : numpy.ndarray
        The updated matrix profile indices for `T`

    right_P_ : numpy.ndarray
        The updated right matrix profile for `T`

    right_I_ : numpy.ndarray
        The updated right matrix profile indices for `T`

    T_ : numpy.ndarray
        The updated time series or sequence for which the matrix profile and matrix
        profile indices are computed

    Methods
    -------
    update(t)
        Append one or more new data points, `t`, to the time series, `T`, and update
        the matrix profile.

    Notes
    -----
    `DOI: 10.1007/s10618-017-0519-9 \
    <https://www.cs.ucr.edu/~eamonn/MP_journal.pdf>`__

    See Table V

    Note that line 11 is missing an important `sqrt` operation!
    """

    def __init__(self, T, m, mp=None):
        """
        Initialize the `stompi` object

        Parameters
        ----------
        T : numpy.ndarray
            The time series or sequence for which the matrix profile and matrix profile
            indices will be returned

        m : int
            Window size

        mp : numpy.ndarray, default None
            A pre-computed self-join matrix profile with exactly four columns
        """
        self._T = core._preprocess(T)
        core.check_window_size(m, max_size=self._T.shape[0], n=self._T.shape[0])
        self._m = m
        self._excl_zone = core.get_excl_zone(m)

        if mp is None:
            mp = stomp(self._T, self._m)
        else:
            mp = np.asarray(mp).copy()

        l = self._T.shape[0] - self._m + 1
        if mp.shape != (l, 4):
            raise ValueError(
                f"The shape of `mp` must match ({l}, 4) but found {mp.shape} instead."
            )

        self._P = mp[:, 0].astype(np.float64)
        self._I = mp[:, 1].astype(np.int64)
        self._right_P = mp[:, 2].astype(np.float64)
        self._right_I = mp[:, 3].astype(np.int64)

        self._T, self._M_T, self._Σ_T, self._T_subseq_isconstant = core.preprocess(
            self._T, self._m
        )

        Q = self._T[-self._m :]
        self._QT = core.sliding_dot_product(Q, self._T)

    def update(self, t):
        """
        Append one or more new data points, `t`, to the existing time series `T` and
        update the matrix profile, matrix profile indices, right matrix profile, and
        right matrix profile indices.

        All of the new data points are validated before any of them is appended.

        Parameters
        ----------
        t : float or numpy.ndarray
            A single new data point or an array of new data points to be appended
            to `T`

        Raises
        ------
        InvalidInput
            If `t` is empty or contains a `np.nan`/`np.inf` value
        """
        samples = np.atleast_1d(np.asarray(t, dtype=np.float64))
        if samples.ndim != 1 or samples.shape[0] == 0:
            raise InvalidInput("At least one new data point is required")
        if not np.all(np.isfinite(samples)):
            raise InvalidInput("New data points must not contain np.nan/np.inf")

        for sample in samples:
            self._update(sample)
        logger.debug(f"Appended {samples.shape[0]} data point(s) to the time series")

    def _update(self, t):
        """
        Ingress a new data point and update the matrix profile, matrix profile
        indices, right matrix profile, and right matrix profile indices

        Only the statistics of the new subsequence are computed and the sliding dot
        product of the new subsequence is derived from the previous one. Every prior
        subsequence is compared against the new subsequence, which is to the right of
        all of them.

        Parameters
        ----------
        t : float
            A single new data point to be appended to `T`
        """
        n = self._T.shape[0]
        l = n - self._m + 1
        T_new = np.append(self._T, t)
        QT_new = np.empty(self._QT.shape[0] + 1, dtype=np.float64)
        S = T_new[l:]
        t_drop = T_new[l - 1]

        Q_subseq_isconstant = bool(core.rolling_isconstant(S, self._m)[0])
        μ_Q, σ_Q = [arr[0] for arr in core.compute_mean_std(S, self._m)]
        Q_subseq_isconstant = Q_subseq_isconstant or σ_Q == 0.0

        M_T_new = np.append(self._M_T, μ_Q)
        Σ_T_new = np.append(self._Σ_T, σ_Q)
        T_subseq_isconstant_new = np.append(
            self._T_subseq_isconstant, Q_subseq_isconstant
        )

        QT_new[1:] = self._QT[:l] - T_new[:l] * t_drop + T_new[self._m :] * t
        QT_new[0] = np.sum(T_new[: self._m] * S[: self._m])

        D = core.calculate_distance_profile(
            self._m,
            QT_new,
            μ_Q,
            σ_Q,
            M_T_new,
            Σ_T_new,
            Q_subseq_isconstant,
            T_subseq_isconstant_new,
        )
        core._apply_exclusion_zone(D, l, self._excl_zone, np.inf)

        # The new subsequence lies to the right of every prior subsequence
        mask = D[:l] < self._P
        self._P[mask] = D[:l][mask]
        self._I[mask] = l

        mask = D[:l] < self._right_P
        self._right_P[mask] = D[:l][mask]
        self._right_I[mask] = l

        I_new = np.argmin(D)
        P_new = D[I_new]
        if P_new == np.inf:  # pragma: no cover
            I_new = -1

        self._P = np.append(self._P, P_new)
        self._I = np.append(self._I, I_new)
        self._right_P = np.append(self._right_P, np.inf)
        self._right_I = np.append(self._right_I, -1)

        self._T = T_new
        self._QT = QT_new
        self._M_T = M_T_new
        self._Σ_T = Σ_T_new
        self._T_subseq_isconstant = T_subseq_isconstant_new

    @property
    def P_(self):
        """
        Get the matrix profile
        """
        return self._P.astype(np.float64)

    @property
    def I_(self):
        """
        Get the matrix profile indices
        """
        return self._I.astype(np.int64)

    @property
    def right_P_(self):
        """
        Get the right matrix profile
        """
        return self._right_P.astype(np.float64)

    @property
    def right_I_(self):
        """
        Get the right matrix profile indices
        """
        return self._right_I.astype(np.int64)

    @property
    def T_(self):
        """
        Get the time series
        """
        return self._T
