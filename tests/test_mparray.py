import naive
import numpy as np
import numpy.testing as npt
import pytest

from tsprofile import config, mparray, stomp

test_data = [
    (
        np.array([9, 8100, -60, 7], dtype=np.float64),
        np.array([584, -11, 23, 79, 1001, 0, -19], dtype=np.float64),
    ),
    (
        np.random.uniform(-1000, 1000, [8]).astype(np.float64),
        np.random.uniform(-1000, 1000, [64]).astype(np.float64),
    ),
]


@pytest.mark.parametrize("T_A, T_B", test_data)
def test_mparray_init(T_A, T_B):
    # Test different `mparray` initialization approaches
    m = 3
    arr = np.asarray(stomp(T_B, m))
    mp = mparray(arr, m, config.TSPROFILE_EXCL_ZONE_DENOM)
    assert mp._m == m
    assert mp.m == m
    assert mp._excl_zone_denom == config.TSPROFILE_EXCL_ZONE_DENOM

    slice_mp = mp[1:, :]  # Initialize "new-from-template"
    assert slice_mp._m == m
    assert slice_mp._excl_zone_denom == config.TSPROFILE_EXCL_ZONE_DENOM


@pytest.mark.parametrize("T_A, T_B", test_data)
def test_mparray_self_join(T_A, T_B):
    m = 3
    ref_mp = naive.stmp(T_B, m).astype(np.float64)
    comp_mp = stomp(T_B, m)
    naive.replace_inf(ref_mp)

    right_P = comp_mp.right_P_
    naive.replace_inf(right_P)
    npt.assert_almost_equal(ref_mp[:, 0], comp_mp.P_)
    npt.assert_almost_equal(ref_mp[:, 1], comp_mp.I_)
    npt.assert_almost_equal(ref_mp[:, 2], right_P)
    npt.assert_almost_equal(ref_mp[:, 3], comp_mp.right_I_)

    assert comp_mp.I_.dtype == np.int64
    assert comp_mp.right_I_.dtype == np.int64


@pytest.mark.parametrize("T_A, T_B", test_data)
def test_mparray_A_B_join(T_A, T_B):
    m = 3
    ref_mp = naive.stmp(T_A, m, T_B=T_B).astype(np.float64)
    comp_mp = stomp(T_A, m, T_B)

    npt.assert_almost_equal(ref_mp[:, 0], comp_mp.P_)
    npt.assert_almost_equal(ref_mp[:, 1], comp_mp.I_)
    npt.assert_array_equal(comp_mp.right_P_, np.inf)
    npt.assert_array_equal(comp_mp.right_I_, -1)


def test_mparray_properties_are_copies():
    comp_mp = stomp(np.random.rand(20), 4)
    P = comp_mp.P_
    P[:] = -1.0
    assert np.all(comp_mp.P_ >= 0.0)
