# tsprofile
# Portions copyright 2019 TD Ameritrade, derived from STUMPY.
# Released under the terms of the 3-Clause BSD license.


class InvalidLength(ValueError):
    """Raised when a time series is empty, non-finite, or of a mismatched length."""


class InvalidWindow(ValueError):
    """
    Raised when the window size is less than two, larger than a time series, or too
    large to leave any non-trivial neighbor outside of the self-join exclusion zone.
    """


class DegenerateSeries(ValueError):
    """Raised when a sequence with a standard deviation of zero is z-normalized."""


class LengthMismatch(ValueError):
    """Raised when an array does not match the length of the matrix profile."""


class InvalidK(ValueError):
    """Raised when a non-positive number of motifs or discords is requested."""


class InvalidRadius(ValueError):
    """Raised when a non-positive motif radius is requested."""


class InvalidInput(ValueError):
    """
    Raised when an operation is not available for the current state of a matrix
    profile (e.g., it has not been computed yet or it is an AB-join) or when the
    samples passed to an online update cannot be appended.
    """


class IOFailure(OSError):
    """Raised when a matrix profile cannot be written to or read from a file."""
