import naive
import numpy as np
import numpy.testing as npt
import pytest

from tsprofile import (
    InvalidWindow,
    LengthMismatch,
    apply_av,
    clipping_av,
    complexity_av,
    default_av,
    meanstd_av,
)

av_funcs = [default_av, complexity_av, meanstd_av, clipping_av]


@pytest.mark.parametrize("av_func", av_funcs)
def test_av_shape_and_range(av_func):
    T = np.random.uniform(-1000, 1000, [64])
    m = 8
    av = av_func(T, m)

    assert av.shape == (T.shape[0] - m + 1,)
    assert np.all((av >= 0.0) & (av <= 1.0))


@pytest.mark.parametrize("av_func", av_funcs)
def test_av_invalid_window(av_func):
    with pytest.raises(InvalidWindow):
        av_func(np.random.rand(10), 11)


def test_default_av():
    npt.assert_array_equal(default_av(np.random.rand(20), 5), np.ones(16))


def test_complexity_av():
    T = np.random.uniform(-1000, 1000, [64])
    m = 8
    ce = np.array(
        [np.sqrt(np.sum(np.diff(Q) ** 2)) for Q in naive.rolling_window(T, m)]
    )
    ref = (ce - ce.min()) / (ce.max() - ce.min())
    comp = complexity_av(T, m)
    npt.assert_almost_equal(ref, comp)


def test_complexity_av_flat():
    # Every window of a line has the same complexity
    T = np.arange(20, dtype=np.float64)
    npt.assert_array_equal(complexity_av(T, 4), np.ones(17))


def test_meanstd_av():
    T = np.random.uniform(-1000, 1000, [64])
    m = 8
    _, Σ_T = naive.compute_mean_std(T, m)
    ref = (Σ_T < np.mean(Σ_T)).astype(np.float64)
    comp = meanstd_av(T, m)
    npt.assert_almost_equal(ref, comp)


def test_clipping_av():
    T = np.array([0.0, 1.0, 2.0, 5.0, 5.0, 2.0, 1.0, 0.5, 1.0, 2.0])
    m = 3
    comp = clipping_av(T, m)
    # Windows 2 and 3 contain both clipped values at 5.0
    assert comp[2] == 0.0
    assert comp[3] == 0.0
    # Windows 6 and 7 do not contain any clipped values
    assert comp[6] == 1.0
    assert comp[7] == 1.0


def test_apply_av():
    P = np.array([1.0, 2.0, 4.0, 3.0])
    av = np.array([1.0, 0.0, 0.5, 1.0])
    comp = apply_av(P, av)
    npt.assert_almost_equal(comp, [1.0, 6.0, 6.0, 3.0])
    # The input is never modified
    npt.assert_almost_equal(P, [1.0, 2.0, 4.0, 3.0])


def test_apply_av_default_is_identity():
    P = np.random.rand(20)
    npt.assert_almost_equal(apply_av(P, np.ones(20)), P)


def test_apply_av_ignores_non_finite_maximum():
    P = np.array([1.0, np.inf, 2.0])
    comp = apply_av(P, np.array([0.0, 1.0, 1.0]))
    npt.assert_almost_equal(comp, [3.0, np.inf, 2.0])


def test_apply_av_length_mismatch():
    with pytest.raises(LengthMismatch):
        apply_av(np.random.rand(10), np.ones(9))


@pytest.mark.parametrize("value", [-0.1, 1.1, np.nan])
def test_apply_av_invalid_values(value):
    av = np.ones(10)
    av[3] = value
    with pytest.raises(ValueError):
        apply_av(np.random.rand(10), av)
