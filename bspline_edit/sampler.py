from typing import Iterable, Union

import numpy as np

from bspline_edit.basis import basis_function, basis_matrix


def sample_point(
    ctrl_pts: np.ndarray[np.floating],
    degree: int,
    knots: Iterable[float],
    t: float,
    memo: Union[dict, None] = None,
) -> np.ndarray[np.floating]:
    """
    Evaluate the B-spline curve at the parameter `t`.

    Parameters
    ----------
    ctrl_pts : np.ndarray[np.floating]
        Control points of shape (`NPh`, `n + 1`), `NPh` being the dimension of the
        physical space.
    degree : int
        Degree of the curve.
    knots : Iterable[float]
        Knot vector of size `n + degree + 2`.
    t : float
        Parameter.
    memo : Union[dict, None], optional
        Basis functions cache forwarded to `basis_function`. By default, None.

    Returns
    -------
    point : np.ndarray[np.floating]
        Point of shape (`NPh`,).

    Notes
    -----
    Below `knots[degree]` the first control point is returned, and at or above
    `knots[n + 1]` the last one. Between them the weights sum to one, so the point
    is a convex combination of the control points.

    Examples
    --------
    >>> ctrl_pts = np.array([[0, 1, 3, 4], [0, 2, 2, 0]], dtype='float')
    >>> knots = [0., 0., 0., 0.5, 1., 1., 1.]
    >>> sample_point(ctrl_pts, 2, knots, 0.5)
    array([2. , 2. ])
    """
    ctrl_pts = np.asarray(ctrl_pts, dtype="float")
    n = ctrl_pts.shape[1] - 1
    if t < knots[degree]:
        return ctrl_pts[:, 0].copy()
    if t >= knots[n + 1]:
        return ctrl_pts[:, n].copy()
    point = np.zeros(ctrl_pts.shape[0], dtype="float")
    for i in range(n + 1):
        point += basis_function(i, degree, t, knots, memo) * ctrl_pts[:, i]
    return point


def sample_points(
    ctrl_pts: np.ndarray[np.floating],
    degree: int,
    knots: Iterable[float],
    XI: Iterable[float],
) -> np.ndarray[np.floating]:
    """
    Evaluate the curve at every parameter of `XI` at once.

    Same boundary policy as `sample_point`, but the basis is computed by
    `basis_matrix`, without any cache.

    Returns
    -------
    values : np.ndarray[np.floating]
        Points of shape (`NPh`, `XI.size`).
    """
    ctrl_pts = np.asarray(ctrl_pts, dtype="float")
    N = basis_matrix(degree, knots, XI)
    return (N @ ctrl_pts.T).T


def span_parameters(
    degree: int, knots: Iterable[float], n_ctrl: int, n_eval_per_span: int = 20
) -> list[np.ndarray[np.floating]]:
    """
    Evenly spaced parameters over each non empty knot span of the curve domain.

    Parameters
    ----------
    degree : int
        Degree of the curve.
    knots : Iterable[float]
        Knot vector.
    n_ctrl : int
        Number of control points.
    n_eval_per_span : int, optional
        Number of sub-intervals per span, by default 20.

    Returns
    -------
    XI : list[np.ndarray[np.floating]]
        For each span `[knots[i], knots[i + 1]]`, `i` going from `degree` to
        `n_ctrl - 1`, an array of `n_eval_per_span + 1` parameters including both
        ends. Zero length spans are skipped.
    """
    knot = np.asarray(knots, dtype="float")
    XI = []
    for i in range(degree, n_ctrl):
        a, b = knot[i], knot[i + 1]
        if b > a:
            XI.append(np.linspace(a, b, n_eval_per_span + 1))
    return XI


def sample_pieces(
    ctrl_pts: np.ndarray[np.floating],
    degree: int,
    knots: Iterable[float],
    n_eval_per_span: int = 20,
    memo: Union[dict, None] = None,
) -> list[np.ndarray[np.floating]]:
    """
    Sample the curve span by span.

    Returns
    -------
    pieces : list[np.ndarray[np.floating]]
        One polyline of shape (`NPh`, `n_eval_per_span + 1`) per non empty knot
        span, see `span_parameters`.
    """
    ctrl_pts = np.asarray(ctrl_pts, dtype="float")
    pieces = []
    for xi in span_parameters(degree, knots, ctrl_pts.shape[1], n_eval_per_span):
        piece = np.array([sample_point(ctrl_pts, degree, knots, t, memo) for t in xi]).T
        pieces.append(piece)
    return pieces
