import naive
import numpy as np
import numpy.testing as npt
import pytest

from tsprofile import InvalidK, core, discords, stomp

test_data = [
    np.array([0.5, 3.0, 1.0, 0.2, 4.0, 0.1, 0.3, 2.5], dtype=np.float64),
    np.random.uniform(0, 10, [64]).astype(np.float64),
]


@pytest.mark.parametrize("P", test_data)
def test_discords(P):
    for k in (1, 2, 3, 5):
        for excl_zone in (0, 1, 2):
            ref = naive.discords(P, k, excl_zone)
            comp = discords(P, k, excl_zone)
            npt.assert_array_equal(ref, comp)


def test_discords_exact():
    P = np.array([0.5, 3.0, 1.0, 0.2, 4.0, 0.1, 0.3, 2.5], dtype=np.float64)
    npt.assert_array_equal(discords(P, 3, 0), [4, 1, 7])
    npt.assert_array_equal(discords(P, 3, 1), [4, 1, 7])
    # The zone around 4 removes 3 through 5 and the zone around 1 removes 0 through 2
    npt.assert_array_equal(discords(P, 4, 1), [4, 1, 7])


def test_discords_ignores_non_finite():
    P = np.array([np.inf, 1.0, 2.0, np.inf, 0.5, np.nan], dtype=np.float64)
    npt.assert_array_equal(discords(P, 2, 0), [2, 1])


def test_discords_k_larger_than_profile():
    P = np.random.rand(10)
    comp = discords(P, 100, 0)
    assert comp.shape[0] == 10
    npt.assert_array_equal(comp, np.argsort(-P, kind="stable"))


def test_discords_exhausted():
    P = np.full(10, np.inf)
    comp = discords(P, 3, 1)
    assert comp.shape[0] == 0
    assert comp.dtype == np.int64


def test_discords_input_not_modified():
    P = np.random.rand(20)
    ref_P = P.copy()
    discords(P, 3, 2)
    npt.assert_array_equal(ref_P, P)


def test_discords_planted_anomaly():
    m = 10
    T = np.sin(np.linspace(0, 40 * np.pi, 400))
    T[200:205] += np.linspace(0, 3, 5)
    mp = stomp(T, m)

    comp = discords(mp.P_, 1, core.get_excl_zone(m))
    assert abs(comp[0] - 200) < m


def test_discords_invalid_k():
    with pytest.raises(InvalidK):
        discords(np.random.rand(10), 0, 1)


def test_discords_invalid_excl_zone():
    with pytest.raises(ValueError):
        discords(np.random.rand(10), 1, -1)
