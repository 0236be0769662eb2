import math

import numpy as np

from tsprofile import core


def rolling_window(a, w):
    return np.array([a[i : i + w] for i in range(a.shape[0] - w + 1)])


def is_ptp_zero_1d(a, w):
    n = len(a) - w + 1
    out = np.empty(n)
    for i in range(n):
        out[i] = np.max(a[i : i + w]) - np.min(a[i : i + w])
    return out == 0


def z_norm(a, axis=0):
    std = np.std(a, axis, keepdims=True)
    std = np.where(std > 0, std, 1.0)

    return (a - np.mean(a, axis, keepdims=True)) / std


def compute_mean_std(T, m):
    n = T.shape[0]

    M_T = np.zeros(n - m + 1, dtype=float)
    Σ_T = np.zeros(n - m + 1, dtype=float)

    for i in range(n - m + 1):
        Q = T[i : i + m].copy()
        M_T[i] = np.mean(Q)
        Σ_T[i] = np.std(Q)

    return M_T, Σ_T


def get_excl_zone(m):
    return int(math.ceil(m / 2)) - 1


def apply_exclusion_zone(a, trivial_idx, excl_zone, val):
    start = max(0, trivial_idx - excl_zone)
    stop = min(a.shape[-1], trivial_idx + excl_zone + 1)
    for i in range(start, stop):
        a[..., i] = val


def distance_profile(Q, T, m):
    T_subseq_isconstant = is_ptp_zero_1d(T, m)
    Q_isconstant = is_ptp_zero_1d(Q, m)[0]

    D = np.linalg.norm(z_norm(rolling_window(T, m), 1) - z_norm(Q), axis=1)
    # Constant subsequences z-normalize to all zeros
    if Q_isconstant:
        D[T_subseq_isconstant] = 0.0
        D[~T_subseq_isconstant] = np.sqrt(m)
    else:
        D[T_subseq_isconstant] = np.sqrt(m)

    return D


def distance_matrix(T_A, T_B, m):
    return np.array([distance_profile(Q, T_B, m) for Q in rolling_window(T_A, m)])


def stmp(T_A, m, T_B=None):
    """
    Brute force matrix profile with columns `P`, `I`, `right_P`, and `right_I`
    """
    if T_B is None:
        ignore_trivial = True
        T_B = T_A
    else:
        ignore_trivial = False

    excl_zone = get_excl_zone(m)
    D = distance_matrix(T_A, T_B, m)
    l = D.shape[0]

    out = np.empty((l, 4), dtype=object)
    for i in range(l):
        D_i = D[i].copy()
        if ignore_trivial:
            apply_exclusion_zone(D_i, i, excl_zone, np.inf)

        j = np.argmin(D_i)
        if np.isinf(D_i[j]):
            out[i, 0], out[i, 1] = np.inf, -1
        else:
            out[i, 0], out[i, 1] = D_i[j], j

        out[i, 2], out[i, 3] = np.inf, -1
        if ignore_trivial and D_i[i + 1 :].size:
            j = i + 1 + np.argmin(D_i[i + 1 :])
            if np.isfinite(D_i[j]):
                out[i, 2], out[i, 3] = D_i[j], j

    return out


def replace_inf(x, value=0):
    x[x == np.inf] = value
    x[x == -np.inf] = value
    return


def mpdist(T_A, T_B, m, percentage=0.05, k=None):
    n_A = T_A.shape[0]
    n_B = T_B.shape[0]
    P_ABBA = np.concatenate(
        (
            stmp(T_A, m, T_B)[:, 0].astype(np.float64),
            stmp(T_B, m, T_A)[:, 0].astype(np.float64),
        )
    )
    P_ABBA.sort()

    if k is None:
        percentage = min(percentage, 1.0)
        percentage = max(percentage, 0.0)
        k = math.ceil(percentage * (n_A + n_B))

    k = min(int(k), P_ABBA.shape[0] - 1)

    return P_ABBA[k]


def discords(P, k, excl_zone):
    P = P.astype(np.float64).copy()
    out = []
    for _ in range(min(k, P.shape[0])):
        candidates = [(P[i], -i) for i in range(P.shape[0]) if np.isfinite(P[i])]
        if not candidates:
            break
        _, idx = max(candidates)
        idx = -idx
        out.append(idx)
        apply_exclusion_zone(P, idx, excl_zone, -np.inf)

    return np.array(out, dtype=np.int64)


def diagonal_ndists(n_A, m, n_B=None):
    l_A = n_A - m + 1
    if n_B is None:
        diags = core.get_diags(n_A, m)
        l_B = l_A
    else:
        diags = core.get_diags(n_A, m, n_B)
        l_B = n_B - m + 1

    counts = []
    for g in diags:
        counts.append(sum(1 for i in range(l_A) if 0 <= i + g < l_B))

    return diags, np.array(counts, dtype=np.int64)


def two_regimes(noise=0.01):
    # 200 samples of a 5 Hz sine followed by 100 samples of a 10 Hz sine with a
    # smaller amplitude and an offset, both sampled at 100 Hz. `noise` is the
    # peak-to-peak amplitude of the uniform noise that is added.
    t = np.arange(200) / 100
    sin = np.sin(2 * np.pi * 5 * t)
    t = np.arange(100) / 100
    sin2 = 0.25 * np.sin(2 * np.pi * 10 * t) + 0.75
    T = np.concatenate((sin, sin2))

    np.random.seed(0)
    return T + noise * np.random.uniform(-0.5, 0.5, T.shape[0])
