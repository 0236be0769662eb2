import naive
import numpy as np
import numpy.testing as npt
import pandas as pd
import pytest
from dask.distributed import Client, LocalCluster

from tsprofile import InvalidWindow, config, mpx


@pytest.fixture(scope="module")
def dask_cluster():
    cluster = LocalCluster(
        n_workers=2,
        threads_per_worker=2,
        dashboard_address=None,
        worker_dashboard_address=None,
    )
    yield cluster
    cluster.close()


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

window_size = [3, 5, 10]


def test_mpx_int_input():
    with pytest.raises(TypeError):
        mpx(np.arange(10), 5)


@pytest.mark.parametrize("T_A, T_B", test_data)
def test_mpx_self_join(T_A, T_B):
    m = 3
    ref_mp = naive.stmp(T_B, m).astype(np.float64)
    comp_mp = mpx(T_B, m)
    naive.replace_inf(ref_mp)
    naive.replace_inf(comp_mp)
    npt.assert_almost_equal(ref_mp, comp_mp)

    comp_mp = mpx(pd.Series(T_B), m)
    naive.replace_inf(comp_mp)
    npt.assert_almost_equal(ref_mp, comp_mp)


@pytest.mark.parametrize("T_A, T_B", test_data)
def test_mpx_A_B_join(T_A, T_B):
    m = 3
    ref_mp = naive.stmp(T_A, m, T_B=T_B).astype(np.float64)
    comp_mp = mpx(T_A, m, T_B)
    naive.replace_inf(ref_mp)
    naive.replace_inf(comp_mp)
    npt.assert_almost_equal(ref_mp, comp_mp)


@pytest.mark.parametrize("m", window_size)
def test_mpx_self_join_window_size(m):
    T = np.random.uniform(-1000, 1000, [128])
    ref_mp = naive.stmp(T, m).astype(np.float64)
    comp_mp = mpx(T, m)
    naive.replace_inf(ref_mp)
    naive.replace_inf(comp_mp)
    npt.assert_almost_equal(ref_mp, comp_mp, decimal=config.TSPROFILE_TEST_PRECISION)


@pytest.mark.parametrize("n_jobs", [1, 2, 5])
def test_mpx_n_jobs(n_jobs):
    T = np.random.uniform(-1000, 1000, [256])
    m = 10
    ref_mp = naive.stmp(T, m).astype(np.float64)
    comp_mp = mpx(T, m, n_jobs=n_jobs)
    naive.replace_inf(ref_mp)
    naive.replace_inf(comp_mp)
    npt.assert_almost_equal(ref_mp, comp_mp, decimal=config.TSPROFILE_TEST_PRECISION)


def test_mpx_docstring_example():
    T = np.array([584.0, -11.0, 23.0, 79.0, 1001.0, 0.0, -19.0])
    m = 3
    ref_mp = naive.stmp(T, m).astype(np.float64)
    comp_mp = mpx(T, m)
    npt.assert_almost_equal(ref_mp[:, 0], comp_mp.P_)
    npt.assert_array_equal(ref_mp[:, 1], comp_mp.I_)


def test_mpx_constant_subsequence_self_join():
    T_A = np.concatenate((np.zeros(20, dtype=np.float64), np.ones(5, dtype=np.float64)))
    m = 3
    ref_mp = naive.stmp(T_A, m).astype(np.float64)
    comp_mp = mpx(T_A, m)
    naive.replace_inf(ref_mp)
    naive.replace_inf(comp_mp)
    npt.assert_almost_equal(ref_mp[:, 0], comp_mp[:, 0])  # ignore indices


def test_mpx_one_constant_subsequence_self_join():
    T_A = np.concatenate((np.random.rand(15), np.full(6, 2.0), np.random.rand(15)))
    m = 5
    ref_mp = naive.stmp(T_A, m).astype(np.float64)
    comp_mp = mpx(T_A, m)
    naive.replace_inf(ref_mp)
    naive.replace_inf(comp_mp)
    npt.assert_almost_equal(
        ref_mp[:, 0], comp_mp[:, 0], decimal=config.TSPROFILE_TEST_PRECISION
    )


def test_mpx_window_too_large_for_self_join():
    with pytest.raises(InvalidWindow):
        mpx(np.random.rand(9), 5)


@pytest.mark.filterwarnings("ignore:numpy.dtype size changed")
@pytest.mark.filterwarnings("ignore:numpy.ufunc size changed")
@pytest.mark.filterwarnings("ignore:numpy.ndarray size changed")
@pytest.mark.filterwarnings("ignore:\\s+Port 8787 is already in use:UserWarning")
@pytest.mark.parametrize("T_A, T_B", test_data)
def test_mpx_dask_self_join(T_A, T_B, dask_cluster):
    with Client(dask_cluster) as dask_client:
        m = 3
        ref_mp = naive.stmp(T_B, m).astype(np.float64)
        comp_mp = mpx(T_B, m, client=dask_client)
        naive.replace_inf(ref_mp)
        naive.replace_inf(comp_mp)
        npt.assert_almost_equal(ref_mp, comp_mp)


@pytest.mark.filterwarnings("ignore:numpy.dtype size changed")
@pytest.mark.filterwarnings("ignore:numpy.ufunc size changed")
@pytest.mark.filterwarnings("ignore:numpy.ndarray size changed")
@pytest.mark.filterwarnings("ignore:\\s+Port 8787 is already in use:UserWarning")
@pytest.mark.parametrize("T_A, T_B", test_data)
def test_mpx_dask_A_B_join(T_A, T_B, dask_cluster):
    with Client(dask_cluster) as dask_client:
        m = 3
        ref_mp = naive.stmp(T_A, m, T_B=T_B).astype(np.float64)
        comp_mp = mpx(T_A, m, T_B, client=dask_client)
        naive.replace_inf(ref_mp)
        naive.replace_inf(comp_mp)
        npt.assert_almost_equal(ref_mp, comp_mp)
