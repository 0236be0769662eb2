import naive
import numpy as np
import numpy.testing as npt
import pytest

from tsprofile import LengthMismatch, fluss, segment, stomp
from tsprofile.floss import _cac, _iac, _nnmark, _rea


def naive_nnmark(I):
    nnmark = np.zeros(I.shape[0], dtype=np.int64)
    for i in range(nnmark.shape[0]):
        j = I[i]
        nnmark[min(i, j)] = nnmark[min(i, j)] + 1
        nnmark[max(i, j)] = nnmark[max(i, j)] - 1

    return np.cumsum(nnmark)


def naive_iac(width):
    return np.array([min(i, width - i) for i in range(width)], dtype=np.float64)


def naive_cac(I, L=None, excl_factor=0):
    n = I.shape[0]
    AC = naive_nnmark(I)
    IAC = naive_iac(n)
    IAC[IAC == 0.0] = 10**-10
    CAC = np.minimum(AC / IAC, 1.0)
    CAC[0] = 1.0
    CAC[-1] = 1.0
    if L is not None and excl_factor > 0:
        CAC[: L * excl_factor] = 1.0
        CAC[-L * excl_factor :] = 1.0

    return CAC


def naive_rea(cac, n_regimes, L, excl_factor):
    cac_list = cac.tolist()
    loc_regimes = [None] * (n_regimes - 1)
    for i in range(n_regimes - 1):
        loc_regimes[i] = cac_list.index(min(cac_list))
        excl_start = max(loc_regimes[i] - L * excl_factor, 0)
        excl_stop = min(loc_regimes[i] + L * excl_factor, len(cac_list))
        for excl in range(excl_start, excl_stop):
            cac_list[excl] = 1.0

    return np.array(loc_regimes, dtype=np.int64)


test_data = [np.random.randint(0, 50, size=50, dtype=np.int64)]


@pytest.mark.parametrize("I", test_data)
def test_nnmark(I):
    ref = naive_nnmark(I)
    comp = _nnmark(I)
    npt.assert_almost_equal(ref, comp)


def test_nnmark_negative_indices():
    I = np.array([3, -1, 0, 0, -1], dtype=np.int64)
    ref = naive_nnmark(np.array([3, 1, 0, 0, 4], dtype=np.int64))
    comp = _nnmark(I)
    npt.assert_almost_equal(ref, comp)


def test_iac():
    npt.assert_almost_equal(_iac(6), [0, 1, 2, 3, 2, 1])
    npt.assert_almost_equal(_iac(7), naive_iac(7))


@pytest.mark.parametrize("I", test_data)
def test_cac(I):
    ref = naive_cac(I)
    comp = _cac(I)
    npt.assert_almost_equal(ref, comp)
    assert np.all((comp >= 0.0) & (comp <= 1.0))
    assert comp[0] == 1.0
    assert comp[-1] == 1.0


@pytest.mark.parametrize("I", test_data)
def test_cac_excl_factor(I):
    L = 5
    excl_factor = 1
    ref = naive_cac(I, L, excl_factor)
    comp = _cac(I, L, excl_factor)
    npt.assert_almost_equal(ref, comp)


@pytest.mark.parametrize("I", test_data)
def test_rea(I):
    L = 5
    excl_factor = 1
    cac = naive_cac(I, L, excl_factor)
    n_regimes = 3
    ref = naive_rea(cac, n_regimes, L, excl_factor)
    comp = _rea(cac, n_regimes, L, excl_factor)
    npt.assert_almost_equal(ref, comp)


@pytest.mark.parametrize("I", test_data)
def test_fluss(I):
    L = 5
    excl_factor = 1
    ref_cac = naive_cac(I, L, excl_factor)
    n_regimes = 3
    ref_rea = naive_rea(ref_cac, n_regimes, L, excl_factor)
    comp_cac, comp_rea = fluss(I, L, n_regimes, excl_factor)
    npt.assert_almost_equal(ref_cac, comp_cac)
    npt.assert_almost_equal(ref_rea, comp_rea)


def test_fluss_invalid_n_regimes():
    with pytest.raises(ValueError):
        fluss(np.arange(10), 2, 0)


@pytest.mark.parametrize("I", test_data)
def test_segment(I):
    ref_cac = naive_cac(I)
    change_point, value, comp_cac = segment(I)
    npt.assert_almost_equal(ref_cac, comp_cac)
    assert change_point == np.argmin(ref_cac)
    npt.assert_almost_equal(value, np.min(ref_cac))


def test_segment_two_regimes():
    m = 32
    T = naive.two_regimes()
    mp = stomp(T, m)

    change_point, value, cac = segment(mp.I_)

    # The corrected arc curve drops to zero just before the second regime starts
    assert abs(change_point - 194) <= 3
    assert value < 1e-3
    assert cac.shape[0] == T.shape[0] - m + 1


def test_fluss_two_regimes():
    m = 32
    T = naive.two_regimes()
    mp = stomp(T, m)

    _, regime_locs = fluss(mp.I_, L=m, n_regimes=2, excl_factor=1)

    assert abs(regime_locs[0] - 194) <= 3


def test_segment_empty():
    with pytest.raises(LengthMismatch):
        segment(np.array([], dtype=np.int64))
