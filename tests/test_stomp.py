import naive
import numpy as np
import numpy.testing as npt
import pandas as pd
import pytest
from dask.distributed import Client, LocalCluster

from tsprofile import InvalidWindow, config, stomp


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

n_jobs = [1, 2, 4, 7]


def test_stomp_int_input():
    with pytest.raises(TypeError):
        stomp(np.arange(10), 5)


@pytest.mark.parametrize("T_A, T_B", test_data)
def test_stomp_self_join(T_A, T_B):
    m = 3
    ref_mp = naive.stmp(T_B, m).astype(np.float64)
    comp_mp = stomp(T_B, m)
    naive.replace_inf(ref_mp)
    naive.replace_inf(comp_mp)
    npt.assert_almost_equal(ref_mp, comp_mp)

    comp_mp = stomp(pd.Series(T_B), m)
    naive.replace_inf(comp_mp)
    npt.assert_almost_equal(ref_mp, comp_mp)


@pytest.mark.parametrize("T_A, T_B", test_data)
def test_stomp_A_B_join(T_A, T_B):
    m = 3
    ref_mp = naive.stmp(T_A, m, T_B=T_B).astype(np.float64)
    comp_mp = stomp(T_A, m, T_B)
    naive.replace_inf(ref_mp)
    naive.replace_inf(comp_mp)
    npt.assert_almost_equal(ref_mp, comp_mp)


@pytest.mark.parametrize("T_A, T_B", test_data)
def test_stomp_B_A_join(T_A, T_B):
    m = 3
    ref_mp = naive.stmp(T_B, m, T_B=T_A).astype(np.float64)
    comp_mp = stomp(T_B, m, T_A)
    naive.replace_inf(ref_mp)
    naive.replace_inf(comp_mp)
    npt.assert_almost_equal(ref_mp, comp_mp)


@pytest.mark.parametrize("n_jobs", n_jobs)
def test_stomp_n_jobs(n_jobs):
    T = np.random.uniform(-1000, 1000, [256])
    m = 10
    ref_mp = naive.stmp(T, m).astype(np.float64)
    comp_mp = stomp(T, m, n_jobs=n_jobs)
    naive.replace_inf(ref_mp)
    naive.replace_inf(comp_mp)
    npt.assert_almost_equal(ref_mp, comp_mp)


def test_stomp_n_jobs_identical_results():
    T = np.random.uniform(-1000, 1000, [256])
    m = 10
    ref_mp = stomp(T, m, n_jobs=1)
    for n_jobs in (2, 3, 8):
        comp_mp = stomp(T, m, n_jobs=n_jobs)
        npt.assert_almost_equal(ref_mp.P_, comp_mp.P_)
        npt.assert_array_equal(ref_mp.I_, comp_mp.I_)


def test_stomp_constant_subsequence_self_join():
    T_A = np.concatenate((np.zeros(20, dtype=np.float64), np.ones(5, dtype=np.float64)))
    m = 3
    ref_mp = naive.stmp(T_A, m).astype(np.float64)
    comp_mp = stomp(T_A, m)
    naive.replace_inf(ref_mp)
    naive.replace_inf(comp_mp)
    npt.assert_almost_equal(ref_mp[:, 0], comp_mp[:, 0])  # ignore indices


def test_stomp_two_constant_subsequences_A_B_join():
    T_A = np.concatenate(
        (np.zeros(10, dtype=np.float64), np.ones(10, dtype=np.float64))
    )
    T_B = np.concatenate((np.zeros(5), np.random.rand(20), np.full(5, 3.0)))
    m = 3
    ref_mp = naive.stmp(T_A, m, T_B=T_B).astype(np.float64)
    comp_mp = stomp(T_A, m, T_B)
    naive.replace_inf(ref_mp)
    naive.replace_inf(comp_mp)
    npt.assert_almost_equal(ref_mp[:, 0], comp_mp[:, 0])  # ignore indices


def test_stomp_window_too_large_for_self_join():
    with pytest.raises(InvalidWindow):
        stomp(np.random.rand(9), 5)


def test_stomp_invalid_n_jobs():
    with pytest.raises(ValueError):
        stomp(np.random.rand(20), 3, n_jobs=0)


@pytest.mark.filterwarnings("ignore:numpy.dtype size changed")
@pytest.mark.filterwarnings("ignore:numpy.ufunc size changed")
@pytest.mark.filterwarnings("ignore:numpy.ndarray size changed")
@pytest.mark.filterwarnings("ignore:\\s+Port 8787 is already in use:UserWarning")
@pytest.mark.parametrize("T_A, T_B", test_data)
def test_stomp_dask_self_join(T_A, T_B, dask_cluster):
    with Client(dask_cluster) as dask_client:
        m = 3
        ref_mp = naive.stmp(T_B, m).astype(np.float64)
        comp_mp = stomp(T_B, m, client=dask_client)
        naive.replace_inf(ref_mp)
        naive.replace_inf(comp_mp)
        npt.assert_almost_equal(ref_mp, comp_mp)


@pytest.mark.filterwarnings("ignore:numpy.dtype size changed")
@pytest.mark.filterwarnings("ignore:numpy.ufunc size changed")
@pytest.mark.filterwarnings("ignore:numpy.ndarray size changed")
@pytest.mark.filterwarnings("ignore:\\s+Port 8787 is already in use:UserWarning")
@pytest.mark.parametrize("T_A, T_B", test_data)
def test_stomp_dask_A_B_join(T_A, T_B, dask_cluster):
    with Client(dask_cluster) as dask_client:
        m = 3
        ref_mp = naive.stmp(T_A, m, T_B=T_B).astype(np.float64)
        comp_mp = stomp(T_A, m, T_B, client=dask_client)
        naive.replace_inf(ref_mp)
        naive.replace_inf(comp_mp)
        npt.assert_almost_equal(ref_mp, comp_mp)


def test_stomp_precision():
    # Consecutive windows share all but one point and so rounding errors in the
    # sliding dot product must not accumulate along a diagonal
    T = np.random.uniform(-1000, 1000, [600]) + 1e4
    m = 50
    ref_mp = naive.stmp(T, m).astype(np.float64)
    comp_mp = stomp(T, m)
    npt.assert_almost_equal(
        ref_mp[:, 0], comp_mp[:, 0], decimal=config.TSPROFILE_TEST_PRECISION
    )
