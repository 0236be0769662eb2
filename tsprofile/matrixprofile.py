# tsprofile
# Portions copyright 2019 TD Ameritrade, derived from STUMPY.
# Released under the terms of the 3-Clause BSD license.

import json
import logging
from pathlib import Path

import numpy as np

from . import core
from .annotation import apply_av
from .discords import discords
from .errors import InvalidInput, InvalidLength, InvalidWindow, IOFailure
from .floss import segment
from .motifs import motifs
from .mpx import mpx
from .stamp import stamp
from .stmp import stmp
from .stomp import stomp
from .stompi import stompi

logger = logging.getLogger(__name__)

_MP_FUNCS = {
    "stmp": stmp,
    "stamp": stamp,
    "stomp": stomp,
    "mpx": mpx,
}

_JSON_FIELDS = ("A", "B", "m", "P", "I", "right_P", "right_I", "av")


def _get_mp_func(algorithm):
    """
    Return the matrix profile function that corresponds to `algorithm`

    Parameters
    ----------
    algorithm : str
        One of `"stmp"`, `"stamp"`, `"stomp"`, or `"mpx"`

    Returns
    -------
    mp_func : function
        The matrix profile function
    """
    if algorithm not in _MP_FUNCS:
        raise ValueError(
            f"Unknown algorithm {algorithm!r}. "
            f"Valid algorithms are {', '.join(sorted(_MP_FUNCS))}"
        )

    return _MP_FUNCS[algorithm]


def _to_json_list(a):
    """
    Convert an array into a list where non-finite values become `None`
    """
    if a is None:
        return None

    a = np.asarray(a)
    if np.issubdtype(a.dtype, np.integer):
        return a.tolist()

    return [float(x) if np.isfinite(x) else None for x in a]


def _from_json_list(a, dtype=np.float64):
    """
    Convert a list written by `_to_json_list` back into an array
    """
    if a is None:
        return None

    if dtype is np.float64:
        return np.array([np.inf if x is None else x for x in a], dtype=np.float64)

    return np.array(a, dtype=dtype)


class MatrixProfile:
    """
    A matrix profile of a time series, `A`, either joined with itself (self-join) or
    with another time series, `B` (AB-join)

    Parameters
    ----------
    A : numpy.ndarray
        The time series or sequence for which to compute the matrix profile

    B : numpy.ndarray, default None
        The time series or sequence that will be used to annotate `A`. For every
        subsequence in `A`, its nearest neighbor in `B` will be recorded. Default is
        `None` which corresponds to a self-join.

    m : int
        Window size

    Attributes
    ----------
    A : numpy.ndarray
        The time series

    B : numpy.ndarray
        The annotating time series or `None` for a self-join

    m : int
        Window size

    excl_zone : int
        The half width of the exclusion zone

    P_ : numpy.ndarray
        The matrix profile. This is `None` until `compute` is called.

    I_ : numpy.ndarray
        The matrix profile indices. Indices refer to `B` for an AB-join.

    right_P_ : numpy.ndarray
        The right matrix profile of a self-join. This is `None` for an AB-join.

    right_I_ : numpy.ndarray
        The right matrix profile indices of a self-join. This is `None` for an
        AB-join.

    av : numpy.ndarray
        The annotation vector, which defaults to all ones

    Raises
    ------
    InvalidLength
        If `A` is empty, if `B` is provided but empty, or if either contains a
        `np.nan`/`np.inf` value

    InvalidWindow
        If `m` is less than two, longer than `A` or `B`, or, for a self-join, more
        than half of the length of `A`

    Examples
    --------
    >>> import tsprofile
    >>> import numpy as np
    >>> mp = tsprofile.MatrixProfile(np.array([584., -11., 23., 79., 1001., 0., -19.]),
    ...     m=3)
    >>> mp.compute().P_
    array([0.11633857, 2.69407392, 3.00009263, 2.69407392, 0.11633857])
    """

    def __init__(self, A, B=None, m=None):
        if m is None:
            raise InvalidWindow("A window size, `m`, is required")

        A = core._preprocess(A)
        if B is not None:
            B = core._preprocess(B)
            core.check_window_size(m, max_size=min(A.shape[0], B.shape[0]))
        else:
            core.check_window_size(m, max_size=A.shape[0], n=A.shape[0])

        self.A = A
        self.B = B
        self.m = int(m)
        self.excl_zone = core.get_excl_zone(self.m)

        self.P_ = None
        self.I_ = None
        self.right_P_ = None
        self.right_I_ = None
        self.av = np.ones(self.A.shape[0] - self.m + 1, dtype=np.float64)

        self._stream = None

    @property
    def is_self_join(self):
        """
        `True` when the matrix profile is a self-join of `A`
        """
        return self.B is None

    def _check_computed(self):
        if self.P_ is None:
            raise InvalidInput(
                "The matrix profile has not been computed. Please call `compute` first."
            )

    def _check_self_join(self):
        if not self.is_self_join:
            raise InvalidInput("This operation is only available for self-joins")

    def compute(
        self, algorithm="mpx", sample_pct=1.0, n_jobs=None, client=None, seed=None
    ):
        """
        Compute the matrix profile

        Parameters
        ----------
        algorithm : str, default "mpx"
            One of `"stmp"` (brute force), `"stamp"` (sampled), `"stomp"` (diagonal
            dot product recurrence), or `"mpx"` (diagonal covariance recurrence)

        sample_pct : float, default 1.0
            The fraction of query subsequences evaluated by `"stamp"`. For a
            self-join, every distance profile also updates the other subsequences so
            that all of `P_` is finite. For an AB-join only the sampled rows are
            filled, so with `sample_pct < 1.0` the remaining rows of `P_` are
            `np.inf` and the corresponding `I_` are `-1`.

        n_jobs : int, default None
            The number of parallel batches used by `"stomp"` and `"mpx"`. Defaults
            to one batch per logical CPU.

        client : client, default None
            A `dask.distributed` client used by `"stomp"` and `"mpx"`

        seed : int, default None
            NumPy random seed used by `"stamp"`

        Returns
        -------
        self : MatrixProfile
            The computed matrix profile
        """
        mp_func = _get_mp_func(algorithm)
        if algorithm == "stamp":
            out = mp_func(self.A, self.m, self.B, sample_pct=sample_pct, seed=seed)
        elif algorithm in ("stomp", "mpx"):
            out = mp_func(self.A, self.m, self.B, n_jobs=n_jobs, client=client)
        else:
            out = mp_func(self.A, self.m, self.B)

        self.P_ = out.P_
        self.I_ = out.I_
        if self.is_self_join:
            self.right_P_ = out.right_P_
            self.right_I_ = out.right_I_
        self._stream = None
        logger.debug(f"Computed a matrix profile of length {self.P_.shape[0]}")

        return self

    def apply_av(self):
        """
        Apply the annotation vector, `av`, to the matrix profile

        Returns
        -------
        out : numpy.ndarray
            A new, corrected matrix profile. `P_` is not modified.
        """
        self._check_computed()

        return apply_av(self.P_, self.av)

    def update(self, samples):
        """
        Append new data points to `A` and incrementally update the matrix profile,
        the matrix profile indices, and the right matrix profile

        Parameters
        ----------
        samples : float or numpy.ndarray
            One or more new data points

        Raises
        ------
        InvalidInput
            If `samples` is empty or not finite, if this is an AB-join, or if the
            matrix profile has not been computed. Nothing is modified in this case.
        """
        self._check_computed()
        self._check_self_join()

        samples = np.atleast_1d(np.asarray(samples, dtype=np.float64))
        if samples.ndim != 1 or samples.shape[0] == 0:
            raise InvalidInput("At least one new data point is required")
        if not np.all(np.isfinite(samples)):
            raise InvalidInput("New data points must not contain np.nan/np.inf")

        if self._stream is None:
            mp = np.column_stack((self.P_, self.I_, self.right_P_, self.right_I_))
            self._stream = stompi(self.A, self.m, mp=mp)

        self._stream.update(samples)

        self.A = self._stream.T_
        self.P_ = self._stream.P_
        self.I_ = self._stream.I_
        self.right_P_ = self._stream.right_P_
        self.right_I_ = self._stream.right_I_
        # New subsequences are fully relevant until a new annotation vector is set
        self.av = np.append(self.av, np.ones(samples.shape[0], dtype=np.float64))

    def segment(self):
        """
        Find the most likely regime change with the corrected arc curve

        Returns
        -------
        change_point : int
            The position of the minimum of the corrected arc curve

        cac_value : float
            The value of the corrected arc curve at `change_point`

        cac : numpy.ndarray
            The corrected arc curve
        """
        self._check_computed()
        self._check_self_join()

        return segment(self.I_)

    def top_k_motifs(self, k=3, r=2.0):
        """
        Find the top-k motif groups of a self-join

        Parameters
        ----------
        k : int, default 3
            The maximum number of motif groups

        r : float, default 2.0
            The radius, relative to the seed distance, within which subsequences
            join a group

        Returns
        -------
        groups : list
            A list of `MotifGroup`
        """
        self._check_computed()
        self._check_self_join()

        return motifs(self.A, self.apply_av(), self.I_, self.m, k=k, r=r)

    def top_k_discords(self, k=3, excl_zone=None):
        """
        Find the top-k discords

        Parameters
        ----------
        k : int, default 3
            The number of discords

        excl_zone : int, default None
            The half width of the exclusion zone around each discord. Defaults to
            `self.excl_zone`.

        Returns
        -------
        out : numpy.ndarray
            The start indices of the discords
        """
        self._check_computed()
        if excl_zone is None:
            excl_zone = self.excl_zone

        return discords(self.apply_av(), k, excl_zone)

    def to_dict(self):
        """
        Return a JSON serializable dictionary with the fields `A`, `B`, `m`, `P`, `I`,
        `right_P`, `right_I`, and `av`. Non-finite values are stored as `None`.
        """
        return {
            "A": _to_json_list(self.A),
            "B": _to_json_list(self.B),
            "m": self.m,
            "P": _to_json_list(self.P_),
            "I": _to_json_list(self.I_),
            "right_P": _to_json_list(self.right_P_),
            "right_I": _to_json_list(self.right_I_),
            "av": _to_json_list(self.av),
        }

    @classmethod
    def from_dict(cls, data):
        """
        Create a `MatrixProfile` from a dictionary written by `to_dict`
        """
        missing = [field for field in _JSON_FIELDS if field not in data]
        if missing:
            raise KeyError(f"Missing field(s): {', '.join(missing)}")

        mp = cls(
            _from_json_list(data["A"]), _from_json_list(data["B"]), m=int(data["m"])
        )
        mp.P_ = _from_json_list(data["P"])
        mp.I_ = _from_json_list(data["I"], dtype=np.int64)
        mp.right_P_ = _from_json_list(data["right_P"])
        mp.right_I_ = _from_json_list(data["right_I"], dtype=np.int64)
        mp.av = _from_json_list(data["av"])

        l = mp.A.shape[0] - mp.m + 1
        for name in ("P_", "I_", "right_P_", "right_I_", "av"):
            a = getattr(mp, name)
            if a is not None and a.shape[0] != l:
                raise InvalidLength(f"`{name}` must have length {l}")

        return mp

    def save(self, path, fmt="json"):
        """
        Save the matrix profile to a file

        Parameters
        ----------
        path : str or pathlib.Path
            The output file

        fmt : str, default "json"
            The file format. Only `"json"` is supported.

        Raises
        ------
        IOFailure
            If the file cannot be written
        """
        if fmt != "json":
            raise ValueError(f"Unsupported format {fmt!r}. Only 'json' is supported.")

        path = Path(path)
        try:
            path.write_text(json.dumps(self.to_dict()), encoding="utf-8")
        except OSError as exc:
            raise IOFailure(f"Unable to write the matrix profile to {path}") from exc
        logger.debug(f"Saved matrix profile to {path}")

    @classmethod
    def load(cls, path, fmt="json"):
        """
        Load a matrix profile from a file written by `save`

        Parameters
        ----------
        path : str or pathlib.Path
            The input file

        fmt : str, default "json"
            The file format. Only `"json"` is supported.

        Returns
        -------
        mp : MatrixProfile
            The loaded matrix profile

        Raises
        ------
        IOFailure
            If the file cannot be read or does not contain a valid matrix profile
        """
        if fmt != "json":
            raise ValueError(f"Unsupported format {fmt!r}. Only 'json' is supported.")

        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return cls.from_dict(data)
        except OSError as exc:
            raise IOFailure(f"Unable to read a matrix profile from {path}") from exc
        except (ValueError, KeyError, TypeError) as exc:
            raise IOFailure(f"{path} does not contain a valid matrix profile") from exc
