import numpy as np


class mparray(np.ndarray):
    """
    A matrix profile convenience class that subclasses the numpy ndarray

    Parameters
    ----------
    cls : class
        The base class

    input_array : ndarray
        The input `numpy` array to be subclassed. It has exactly four columns,
        the matrix profile, the matrix profile indices, the right matrix profile,
        and the right matrix profile indices.

    m : int
        Window size

    excl_zone_denom : int
        The denominator used in computing the exclusion zone

    Attributes
    ----------
    P_ : numpy.ndarray
        The matrix profile for `T`

    I_ : numpy.ndarray
        The matrix profile indices for `T`

    right_P_ : numpy.ndarray
        The right matrix profile for `T`. This is `np.inf` for every subsequence
        of an AB-join and for every subsequence of a self-join without a
        non-trivial neighbor to its right.

    right_I_ : numpy.ndarray
        The right matrix profile indices for `T`
    """

    def __new__(cls, input_array, m, excl_zone_denom):
        """
        Create the ndarray instance of our type, given the usual
        ndarray input arguments.  This will call the standard
        ndarray constructor, but return an object of our type.
        It also triggers a call mparray.__array_finalize__

        Parameters
        ----------
        cls : class
            The base class

        input_array : ndarray
            The input `numpy` array to be subclassed

        m : int
            Window size

        excl_zone_denom : int
            The denominator used in computing the exclusion zone
        """
        obj = np.asarray(input_array, dtype=np.float64).view(cls)
        obj._m = m
        obj._excl_zone_denom = excl_zone_denom
        # New attributes must also be added to `__array_finalize__` so that
        # "new-from-template" objects (e.g., an array slice) carry them too
        return obj

    def __array_finalize__(self, obj):
        """
        Finalize the array

        Parameters
        ----------
        obj : object
            This is the class object
        """
        if obj is None:  # pragma: no cover
            return
        self._m = getattr(obj, "_m", None)
        self._excl_zone_denom = getattr(obj, "_excl_zone_denom", None)

    @property
    def m(self):
        """
        Window size
        """
        return self._m

    @property
    def P_(self):
        """
        Matrix profile values
        """
        return np.asarray(self[:, 0], dtype=np.float64).copy()

    @property
    def I_(self):
        """
        Nearest neighbor indices
        """
        return np.asarray(self[:, 1]).astype(np.int64)

    @property
    def right_P_(self):
        """
        Right matrix profile values
        """
        return np.asarray(self[:, 2], dtype=np.float64).copy()

    @property
    def right_I_(self):
        """
        Right nearest neighbor indices
        """
        return np.asarray(self[:, 3]).astype(np.int64)


def _to_mparray(P, I, right_P, right_I, m, excl_zone_denom):
    """
    Stack the matrix profile columns into a single `mparray`
    """
    out = np.empty((P.shape[0], 4), dtype=np.float64)
    out[:, 0] = P
    out[:, 1] = I
    out[:, 2] = right_P
    out[:, 3] = right_I

    return mparray(out, m, excl_zone_denom)
