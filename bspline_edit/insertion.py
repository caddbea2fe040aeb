from typing import Iterable, Union

import numpy as np
import scipy.sparse as sps

from bspline_edit.basis import EPS
from bspline_edit.exceptions import InvalidCurveError, KnotDomainError


def check_curve(n_ctrl: int, degree: int, knots: Iterable[float]):
    """
    Raise `InvalidCurveError` unless `knots` has `n_ctrl + degree + 1` values and
    `degree` is lower than `n_ctrl`.
    """
    size = len(knots)
    if n_ctrl == 0 or size != n_ctrl + degree + 1:
        raise InvalidCurveError(
            f"{size} knots can't define a curve of degree {degree} "
            f"with {n_ctrl} control points."
        )
    if degree >= n_ctrl:
        raise InvalidCurveError(
            f"Degree {degree} needs more than {n_ctrl} control points."
        )


def check_insertion_domain(degree: int, knots: Iterable[float], new_knot: float):
    """
    Raise `KnotDomainError` unless `knots[degree] <= new_knot <= knots[-degree - 1]`.
    """
    lower, upper = knots[degree], knots[len(knots) - degree - 1]
    if not (lower <= new_knot <= upper):
        raise KnotDomainError(
            f"Knot {new_knot} is outside of the curve domain [{lower}, {upper}]."
        )


def _insertion_index(degree: int, knots: np.ndarray[np.floating], new_knot: float) -> int:
    # first i with knots[i] >= new_knot, kept in [degree + 1, n + 1]
    n = knots.size - degree - 2
    i = int(np.searchsorted(knots, new_knot, side="left"))
    return min(max(i, degree + 1), n + 1)


def insertion_matrix(degree: int, knots: Iterable[float], new_knot: float) -> sps.coo_matrix:
    """
    Compute the matrix `D` mapping the control points before the insertion of
    `new_knot` to the control points after it (Boehm's algorithm).

    Parameters
    ----------
    degree : int
        Degree of the curve.
    knots : Iterable[float]
        Knot vector before the insertion, of size `n + degree + 2`.
    new_knot : float
        Knot to insert, inside the curve domain.

    Returns
    -------
    D : sps.coo_matrix
        Matrix of shape (`n + 2`, `n + 1`) such that
        newCtrlPtsCoordinate = `D` @ ancientCtrlPtsCoordinate.

    Notes
    -----
    With `i` the insertion index, the rows `i - degree` to `i - 1` blend two
    consecutive control points with
    `alpha = (new_knot - knots[idx]) / (knots[idx + degree] - knots[idx])`;
    rows before are copied and rows after are shifted by one.

    Examples
    --------
    >>> insertion_matrix(2, [0., 0., 0., 1., 1., 1.], 0.5).toarray()
    array([[1. , 0. , 0. ],
           [0.5, 0.5, 0. ],
           [0. , 0.5, 0.5],
           [0. , 0. , 1. ]])
    """
    knot = np.asarray(knots, dtype="float")
    n = knot.size - degree - 2
    i = _insertion_index(degree, knot, new_knot)
    vals, row, col = [], [], []
    for r in range(n + 2):
        if r < i - degree:
            vals.append(1.0)
            row.append(r)
            col.append(r)
        elif r < i:
            denom = knot[r + degree] - knot[r]
            alpha = 1.0 if abs(denom) < EPS else (new_knot - knot[r]) / denom
            vals.extend([1.0 - alpha, alpha])
            row.extend([r, r])
            col.extend([r - 1, r])
        else:
            vals.append(1.0)
            row.append(r)
            col.append(r - 1)
    D = sps.coo_matrix(
        (np.array(vals, dtype="float"), (np.array(row, dtype="int"), np.array(col, dtype="int"))),
        shape=(n + 2, n + 1),
    )
    return D


def insert_knot(
    ctrl_pts: np.ndarray[np.floating],
    degree: int,
    knots: Iterable[float],
    new_knot: float,
) -> tuple[np.ndarray[np.floating], np.ndarray[np.floating]]:
    """
    Insert one knot without changing the shape of the curve.

    The inputs are left untouched.

    Parameters
    ----------
    ctrl_pts : np.ndarray[np.floating]
        Control points of shape (`NPh`, `n + 1`).
    degree : int
        Degree of the curve.
    knots : Iterable[float]
        Knot vector of size `n + degree + 2`.
    new_knot : float
        Knot to insert. Must lie in `[knots[degree], knots[-degree - 1]]`.

    Returns
    -------
    new_ctrl_pts : np.ndarray[np.floating]
        Control points of shape (`NPh`, `n + 2`).
    new_knots : np.ndarray[np.floating]
        Knot vector with `new_knot` inserted at its sorted position.

    Raises
    ------
    InvalidCurveError
        If the knot vector size doesn't match the control points and the degree,
        or if the degree is not lower than the number of control points.
    KnotDomainError
        If `new_knot` is outside of the curve domain.

    Examples
    --------
    >>> ctrl_pts = np.array([[0, 1, 2], [0, 1, 0]], dtype='float')
    >>> new_ctrl_pts, new_knots = insert_knot(ctrl_pts, 2, [0., 0., 0., 1., 1., 1.], 0.5)
    >>> new_ctrl_pts
    array([[0. , 0.5, 1.5, 2. ],
           [0. , 0.5, 0.5, 0. ]])
    >>> new_knots
    array([0. , 0. , 0. , 0.5, 1. , 1. , 1. ])
    """
    ctrl_pts = np.asarray(ctrl_pts, dtype="float")
    knot = np.asarray(knots, dtype="float")
    check_curve(ctrl_pts.shape[1], degree, knot)
    check_insertion_domain(degree, knot, new_knot)
    D = insertion_matrix(degree, knot, new_knot)
    new_ctrl_pts = (D @ ctrl_pts.T).T
    i = _insertion_index(degree, knot, new_knot)
    new_knots = np.insert(knot, i, new_knot)
    return new_ctrl_pts, new_knots


def insert_knots(
    ctrl_pts: np.ndarray[np.floating],
    degree: int,
    knots: Iterable[float],
    knots_to_add: Union[Iterable[float], int],
) -> tuple[np.ndarray[np.floating], np.ndarray[np.floating]]:
    """
    Insert several knots one after the other.

    Parameters
    ----------
    ctrl_pts : np.ndarray[np.floating]
        Control points of shape (`NPh`, `n + 1`).
    degree : int
        Degree of the curve.
    knots : Iterable[float]
        Knot vector of size `n + degree + 2`.
    knots_to_add : Union[Iterable[float], int]
        Two formats are accepted:
        1. Iterable of knots to insert, all inside the curve domain.
        2. `int`: number of evenly spaced knots to insert in each non empty span.

    Returns
    -------
    new_ctrl_pts : np.ndarray[np.floating]
        Refined control points.
    new_knots : np.ndarray[np.floating]
        Refined knot vector.

    Examples
    --------
    >>> ctrl_pts = np.array([[0, 1, 2], [0, 1, 0]], dtype='float')
    >>> new_ctrl_pts, new_knots = insert_knots(ctrl_pts, 2, [0., 0., 0., 1., 1., 1.], 1)
    >>> new_knots
    array([0. , 0. , 0. , 0.5, 1. , 1. , 1. ])
    """
    knot = np.asarray(knots, dtype="float")
    if isinstance(knots_to_add, (int, np.integer)):
        lower, upper = knot[degree], knot[knot.size - degree - 1]
        u_knot = np.unique(knot[np.logical_and(knot >= lower, knot <= upper)])
        a, b = u_knot[:-1, None], u_knot[1:, None]
        mu = np.linspace(0, 1, knots_to_add + 1, endpoint=False)[None, 1:]
        knots_to_add = (a + (b - a) * mu).ravel()
    new_ctrl_pts = np.asarray(ctrl_pts, dtype="float")
    new_knots = knot
    for new_knot in knots_to_add:
        new_ctrl_pts, new_knots = insert_knot(new_ctrl_pts, degree, new_knots, float(new_knot))
    return new_ctrl_pts, new_knots
