from typing import Iterable, Union

import numpy as np
import numba as nb
import scipy.sparse as sps

EPS = 1e-10
MEMO_DIGITS = 6


def _memo_key(i: int, k: int, t: float) -> tuple[int, int, float]:
    return (i, k, round(float(t), MEMO_DIGITS))


def basis_function(
    i: int,
    k: int,
    t: float,
    knots: Iterable[float],
    memo: Union[dict, None] = None,
) -> float:
    """
    Evaluate the basis function N_i^k(t) with the Cox-de Boor recursion.

    Parameters
    ----------
    i : int
        Index of the basis function.
    k : int
        Degree of the basis function.
    t : float
        Value in the parametric space at which the basis function is evaluated.
    knots : Iterable[float]
        Knot vector. Must be non-decreasing and hold at least `i + k + 2` values,
        nothing is checked here.
    memo : Union[dict, None], optional
        Cache of already computed values, keyed by `(i, k, t)` with `t` rounded to
        `MEMO_DIGITS` decimals. It is only valid for one knot vector and must be
        cleared by the caller when the knots change. By default, None (no caching).

    Returns
    -------
    N_i : float
        Value of N_i^k(t).

    Notes
    -----
    The degree 0 functions use half-open intervals `[knots[i], knots[i + 1])`,
    so the last knot of a clamped vector belongs to no interval: callers have to
    handle the upper end of the domain themselves (see `sample_point`).
    A term whose denominator is smaller than `EPS` in magnitude is dropped, which
    is how repeated knots are handled.

    Examples
    --------
    >>> knots = [0., 0., 0., 0.5, 1., 1., 1.]
    >>> basis_function(1, 2, 0.25, knots)
    0.625
    """
    if memo is not None:
        key = _memo_key(i, k, t)
        if key in memo:
            return memo[key]
    if k == 0:
        N_i = 1.0 if knots[i] <= t < knots[i + 1] else 0.0
    else:
        denom_left = knots[i + k] - knots[i]
        denom_right = knots[i + k + 1] - knots[i + 1]
        if abs(denom_left) < EPS:
            rec_k = 0.0
        else:
            rec_k = (t - knots[i]) / denom_left
            rec_k *= basis_function(i, k - 1, t, knots, memo)
        if abs(denom_right) < EPS:
            rec_i = 0.0
        else:
            rec_i = (knots[i + k + 1] - t) / denom_right
            rec_i *= basis_function(i + 1, k - 1, t, knots, memo)
        N_i = rec_k + rec_i
    if memo is not None:
        memo[key] = N_i
    return N_i


def find_span(degree: int, knots: Iterable[float], t: float) -> int:
    """
    Find the knot span `i` in `[degree, n]` such that `knots[i] <= t < knots[i + 1]`.

    Values at or above `knots[n + 1]` give `n` and values below `knots[degree]`
    give `degree`, `n` being the last index of the basis functions.
    """
    knot = np.asarray(knots, dtype=np.float64)
    n = knot.size - degree - 2
    return _findSpan(degree, n, knot, float(t))


def basis_functions(degree: int, knots: Iterable[float], t: float) -> np.ndarray[np.floating]:
    """
    Evaluate every basis function of degree `degree` at `t`.

    Uses a fixed size triangular table instead of the memoized recursion, so that
    the memory used does not depend on the number of evaluated parameters.
    Outside of `[knots[degree], knots[n + 1])` the weights are clamped to the first
    or to the last basis function, consistently with `sample_point`.

    Parameters
    ----------
    degree : int
        Degree of the basis.
    knots : Iterable[float]
        Knot vector of size `n + degree + 2`.
    t : float
        Parameter.

    Returns
    -------
    N : np.ndarray[np.floating]
        Array of size `n + 1` of the basis functions values.

    Examples
    --------
    >>> basis_functions(2, [0., 0., 0., 1., 1., 1.], 0.5)
    array([0.25, 0.5 , 0.25])
    """
    knot = np.asarray(knots, dtype=np.float64)
    n = knot.size - degree - 2
    N = np.zeros(n + 1, dtype="float")
    if t < knot[degree]:
        N[0] = 1.0
    elif t >= knot[n + 1]:
        N[n] = 1.0
    else:
        span = _findSpan(degree, n, knot, float(t))
        N[span - degree : span + 1] = _nonZeroBasis(degree, knot, float(t), span)
    return N


def basis_matrix(degree: int, knots: Iterable[float], XI: Iterable[float]) -> sps.coo_matrix:
    """
    Compute the basis functions for a set of parameters.

    Parameters
    ----------
    degree : int
        Degree of the basis.
    knots : Iterable[float]
        Knot vector of size `n + degree + 2`.
    XI : Iterable[float]
        Parameters at which the basis is evaluated.

    Returns
    -------
    N : sps.coo_matrix
        Sparse matrix of shape (`XI.size`, `n + 1`). Row `j` holds the weights of
        the control points for the parameter `XI[j]`, so that the curve points
        are `N @ ctrl_pts.T`.

    Examples
    --------
    >>> basis_matrix(2, [0., 0., 0., 1., 1., 1.], [0., 0.5, 1.]).toarray()
    array([[1.  , 0.  , 0.  ],
           [0.25, 0.5 , 0.25],
           [0.  , 0.  , 1.  ]])
    """
    knot = np.asarray(knots, dtype=np.float64)
    XI = np.ascontiguousarray(XI, dtype=np.float64).ravel()
    n = knot.size - degree - 2
    vals, row, col = _N(degree, n, knot, XI)
    N = sps.coo_matrix((vals, (row, col)), shape=(XI.size, n + 1))
    return N


# %% fast functions for evaluation


@nb.njit(nb.int64(nb.int64, nb.int64, nb.float64[:], nb.float64), cache=True)
def _findSpan(p, n, knot, xi):
    """
    Find `i` so that `xi` belongs to [ `knot`[`i`], `knot`[`i` + 1] [.

    Parameters
    ----------
    p : int
        Degree of the polynomials composing the basis.
    n : int
        Last index of the basis.
    knot : numpy.array of float
        Knot vector of the BSpline basis.
    xi : float
        Value in the parametric space.

    Returns
    -------
    i : int
        Index of the first knot of the interval in which `xi` is bounded,
        clamped to [`p`, `n`].

    """
    if xi >= knot[n + 1]:
        return n
    i = p
    while i < n and knot[i + 1] <= xi:
        i += 1
    return i


@nb.njit(nb.float64[:](nb.int64, nb.float64[:], nb.float64, nb.int64), cache=True)
def _nonZeroBasis(p, knot, xi, span):
    """
    Evaluate the `p` + 1 basis functions N_{span-p}^p .. N_{span}^p at `xi`.

    The values are built degree by degree in a triangular table where
    `table[k, j]` holds N_{span-p+j}^k(xi). Terms with a zero length support
    are dropped as in `basis_function`.

    Parameters
    ----------
    p : int
        Degree of the BSpline evaluated.
    knot : numpy.array of float
        Knot vector of the BSpline basis.
    xi : float
        Value in the parametric space, must lie in [ `knot`[`span`], `knot`[`span` + 1] [.
    span : int
        Knot span containing `xi`.

    Returns
    -------
    N : numpy.array of float
        Values of the non zero basis functions.

    """
    table = np.zeros((p + 1, p + 1), dtype=np.float64)
    table[0, p] = 1.0
    for k in range(1, p + 1):
        for j in range(p - k, p + 1):
            i = span - p + j
            denom_left = knot[i + k] - knot[i]
            if abs(denom_left) < EPS:
                rec_k = 0.0
            else:
                rec_k = (xi - knot[i]) / denom_left * table[k - 1, j]
            denom_right = knot[i + k + 1] - knot[i + 1]
            if j == p or abs(denom_right) < EPS:
                rec_i = 0.0
            else:
                rec_i = (knot[i + k + 1] - xi) / denom_right * table[k - 1, j + 1]
            table[k, j] = rec_k + rec_i
    return table[p].copy()


@nb.njit(
    nb.types.UniTuple.from_types((nb.float64[:], nb.int64[:], nb.int64[:]))(
        nb.int64, nb.int64, nb.float64[:], nb.float64[:]
    ),
    cache=True,
)
def _N(p, n, knot, XI):
    """
    Compute the BSpline basis functions for a set of values in the parametric space.

    Parameters
    ----------
    p : int
        Degree of the polynomials composing the basis.
    n : int
        Last index of the basis.
    knot : numpy.array of float
        Knot vector of the BSpline basis.
    XI : numpy.array of float
        Values in the parametric space at which the BSpline is evaluated.

    Returns
    -------
    (vals, row, col) : (numpy.array of float, numpy.array of int, numpy.array of int)
        Values and indices of the basis functions matrix, with the basis functions
        in the columns for each value of `XI` in the rows.

    """
    nb_val_max = XI.size * (p + 1)
    vals = np.empty(nb_val_max, dtype=np.float64)
    row = np.empty(nb_val_max, dtype=np.int64)
    col = np.empty(nb_val_max, dtype=np.int64)
    nb_put = 0
    for ind in range(XI.size):
        xi = XI[ind]
        if xi < knot[p]:
            vals[nb_put] = 1.0
            row[nb_put] = ind
            col[nb_put] = 0
            nb_put += 1
        elif xi >= knot[n + 1]:
            vals[nb_put] = 1.0
            row[nb_put] = ind
            col[nb_put] = n
            nb_put += 1
        else:
            span = _findSpan(p, n, knot, xi)
            N_elem = _nonZeroBasis(p, knot, xi, span)
            for j in range(p + 1):
                vals[nb_put] = N_elem[j]
                row[nb_put] = ind
                col[nb_put] = span - p + j
                nb_put += 1
    return (vals[:nb_put], row[:nb_put], col[:nb_put])
