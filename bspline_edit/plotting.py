from typing import Iterable, Union

import numpy as np
from matplotlib.axes import Axes

from bspline_edit.basis import basis_matrix
from bspline_edit.curve import Curve


def plot_curve(
    curve: Curve,
    ax: Union[Axes, None] = None,
    n_eval_per_span: int = 20,
    ctrl_color: str = "green",
    curve_color: str = "black",
    elem_color: str = "#666666",
    show: bool = False,
) -> Axes:
    """
    Plot a curve using Matplotlib.

    Draws the control polygon with dashes, the curve span by span and the points
    of the curve at the distinct knots.

    Parameters
    ----------
    curve : Curve
        Valid curve to plot.
    ax : Union[Axes, None], optional
        Matplotlib axes for plotting. If None, creates a new figure and axes.
    n_eval_per_span : int, optional
        Number of sub-intervals sampled per knot span. By default, 20.
    ctrl_color, curve_color, elem_color : str, optional
        Colors of the control polygon, of the curve and of the knot markers.
    show : bool, optional
        Whether to display the plot immediately. By default, False.

    Returns
    -------
    ax : Axes
        The axes the curve was drawn on.

    Examples
    --------
    >>> curve = Curve(2, [0, 0, 0, 0.5, 1, 1, 1], [[0, 1, 3, 4], [0, 2, 2, 0]])
    >>> ax = plot_curve(curve)
    """
    import matplotlib.pyplot as plt
    from matplotlib.collections import LineCollection

    curve.check()
    if ax is None:
        _, ax = plt.subplots()
    x, y = curve.ctrl_pts[:2]
    ax.plot(x, y, marker="o", c=ctrl_color, linestyle=(0, (3, 5)), lw=1, label="Control polygon", zorder=0)
    pieces = curve.pieces(n_eval_per_span)
    ax.add_collection(LineCollection([piece[:2].T for piece in pieces], colors=curve_color, linewidths=1.5, label="B-spline", zorder=1))  # type: ignore
    lower, upper = curve.span
    knot_uniq = np.unique(curve.knots[np.logical_and(curve.knots >= lower, curve.knots <= upper)])
    x_elem, y_elem = curve(knot_uniq)[:2]
    ax.scatter(x_elem, y_elem, marker="*", c=elem_color, label="Knots", zorder=2)  # type: ignore
    ax.legend()
    ax.set_aspect(1)
    ax.autoscale_view()
    if show:
        plt.show()
    return ax


def plot_basis(
    degree: int,
    knots: Iterable[float],
    ax: Union[Axes, None] = None,
    n_eval: int = 200,
    show: bool = False,
) -> Axes:
    """
    Plot every basis function of degree `degree` over the domain of `knots`.

    The distinct knots are shown as vertical dotted lines and a legend is added
    if there are 10 or fewer basis functions.

    Returns
    -------
    ax : Axes
        The axes the basis was drawn on.
    """
    import matplotlib.pyplot as plt

    knot = np.asarray(knots, dtype="float")
    n = knot.size - degree - 2
    if ax is None:
        _, ax = plt.subplots()
    XI = np.linspace(knot[degree], knot[n + 1], n_eval)
    N = basis_matrix(degree, knot, XI).toarray()
    for idx in range(n + 1):
        ax.plot(XI, N[:, idx], label="$N_{" + str(idx) + "}(t)$")
    for t in np.unique(knot):
        ax.axvline(t, color="gray", linestyle=":", linewidth=0.8)
    ax.set_xlabel("$t$")
    if n + 1 <= 10:
        ax.legend(loc="best")
    if show:
        plt.show()
    return ax
