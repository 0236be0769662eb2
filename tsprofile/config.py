# tsprofile
# Portions copyright 2019 TD Ameritrade, derived from STUMPY.
# Released under the terms of the 3-Clause BSD license.

import warnings

import numba

_TSPROFILE_DEFAULTS = {
    "TSPROFILE_EXCL_ZONE_DENOM": 2,
    "TSPROFILE_DENOM_THRESHOLD": 1e-14,
    "TSPROFILE_P_NORM_THRESHOLD": 1e-14,
    "TSPROFILE_MPDIST_PERCENTAGE": 0.05,
    "TSPROFILE_SAMPLE_PCT": 0.1,
    "TSPROFILE_N_JOBS": numba.config.NUMBA_NUM_THREADS,
    "TSPROFILE_TEST_PRECISION": 4,
    "TSPROFILE_FASTMATH_TRUE": True,
    "TSPROFILE_FASTMATH_FLAGS": {"nsz", "arcp", "contract", "afn", "reassoc"},
}

# Compensated summation kernels in `core` are compiled with `fastmath=False`
# since reassociation and contraction cancel out their correction terms.

TSPROFILE_EXCL_ZONE_DENOM = _TSPROFILE_DEFAULTS["TSPROFILE_EXCL_ZONE_DENOM"]
TSPROFILE_DENOM_THRESHOLD = _TSPROFILE_DEFAULTS["TSPROFILE_DENOM_THRESHOLD"]
TSPROFILE_P_NORM_THRESHOLD = _TSPROFILE_DEFAULTS["TSPROFILE_P_NORM_THRESHOLD"]
TSPROFILE_MPDIST_PERCENTAGE = _TSPROFILE_DEFAULTS["TSPROFILE_MPDIST_PERCENTAGE"]
TSPROFILE_SAMPLE_PCT = _TSPROFILE_DEFAULTS["TSPROFILE_SAMPLE_PCT"]
TSPROFILE_N_JOBS = _TSPROFILE_DEFAULTS["TSPROFILE_N_JOBS"]
TSPROFILE_TEST_PRECISION = _TSPROFILE_DEFAULTS["TSPROFILE_TEST_PRECISION"]
TSPROFILE_FASTMATH_TRUE = _TSPROFILE_DEFAULTS["TSPROFILE_FASTMATH_TRUE"]
TSPROFILE_FASTMATH_FLAGS = _TSPROFILE_DEFAULTS["TSPROFILE_FASTMATH_FLAGS"]


def _reset(var=None):
    """
    Reset the value of a configuration variable(s) to their default value(s)

    Parameters
    ----------
    var : str, default None
        The name of the configuration variable. If None, then all
        configuration variables are reset to their default values.

    Returns
    -------
    None
    """
    config_vars = [
        k for k, _ in globals().items() if k.isupper() and k.startswith("TSPROFILE")
    ]

    if var is None:
        for config_var in config_vars:
            globals()[config_var] = _TSPROFILE_DEFAULTS[config_var]
    elif var in config_vars:
        globals()[var] = _TSPROFILE_DEFAULTS[var]
    else:  # pragma: no cover
        msg = (
            "Configuration reset was skipped for unrecognized "
            + f"'_TSPROFILE_DEFAULTS[{var}]'"
        )
        warnings.warn(msg)

    return
