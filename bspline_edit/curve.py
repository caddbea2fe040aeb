import json
import os
import pickle
from typing import Iterable, Union

import numpy as np

from bspline_edit.exceptions import DocumentError, InvalidCurveError
from bspline_edit.insertion import check_curve, insert_knot, insert_knots
from bspline_edit.knot_vector import KnotVector
from bspline_edit.sampler import sample_pieces, sample_point, sample_points

DOCUMENT_FORMATS = ("json", "pkl")


class Curve:
    """
    B-spline curve made of a degree, a knot vector and control points.

    Attributes
    ----------
    degree : int
        Degree of the polynomials composing the curve.
    knots : np.ndarray[np.floating]
        Knot vector, of size `n + degree + 2` when the curve is valid.
    ctrl_pts : np.ndarray[np.floating]
        Control points of shape (`NPh`, `n + 1`).

    Notes
    -----
    The validity of the curve is recomputed on each access of `is_valid`: the knot
    vector and the control points must not be empty, the degree must be at least 1
    and lower than the number of control points, and the knot vector must hold
    `n + degree + 2` values.

    Examples
    --------
    >>> curve = Curve(2, [0, 0, 0, 0.5, 1, 1, 1], [[0, 1, 3, 4], [0, 2, 2, 0]])
    >>> curve.is_valid
    True
    >>> curve.point(1.)
    array([4., 0.])
    """

    degree: int
    knots: np.ndarray[np.floating]
    ctrl_pts: np.ndarray[np.floating]

    def __init__(
        self,
        degree: int,
        knots: Iterable[float],
        ctrl_pts: Union[np.ndarray[np.floating], Iterable[Iterable[float]]],
    ):
        self.degree = int(degree)
        self.knots = np.array(knots, dtype="float")
        ctrl_pts = np.array(ctrl_pts, dtype="float")
        if ctrl_pts.size == 0:
            ctrl_pts = np.empty((2, 0), dtype="float")
        self.ctrl_pts = ctrl_pts

    @classmethod
    def empty(cls) -> "Curve":
        """
        Curve with degree 0, no knot and no control point.
        """
        return cls(0, [], np.empty((2, 0), dtype="float"))

    @property
    def n_ctrl(self) -> int:
        return self.ctrl_pts.shape[1]

    @property
    def is_valid(self) -> bool:
        if self.knots.size == 0 or self.n_ctrl == 0 or self.degree == 0:
            return False
        return self.degree < self.n_ctrl and self.knots.size == self.n_ctrl + self.degree + 1

    def check(self):
        """
        Raise `InvalidCurveError` if the curve is not valid.
        """
        if not self.is_valid:
            check_curve(self.n_ctrl, self.degree, self.knots)
            raise InvalidCurveError(f"Degree {self.degree} curve is not valid.")

    @property
    def span(self) -> tuple[float, float]:
        return KnotVector(self.knots).span(self.degree)

    def knot_vector(self) -> KnotVector:
        return KnotVector(self.knots)

    def point(self, t: float, memo: Union[dict, None] = None) -> np.ndarray[np.floating]:
        """
        Point of the curve at the parameter `t`, see `sample_point`.
        """
        self.check()
        return sample_point(self.ctrl_pts, self.degree, self.knots, t, memo)

    def __call__(self, XI: Iterable[float]) -> np.ndarray[np.floating]:
        """
        Points of the curve at the parameters `XI`, of shape (`NPh`, `XI.size`).
        """
        self.check()
        return sample_points(self.ctrl_pts, self.degree, self.knots, XI)

    def pieces(
        self, n_eval_per_span: int = 20, memo: Union[dict, None] = None
    ) -> list[np.ndarray[np.floating]]:
        """
        Polylines sampling each knot span of the curve, see `sample_pieces`.
        """
        self.check()
        return sample_pieces(self.ctrl_pts, self.degree, self.knots, n_eval_per_span, memo)

    def control_polygon(self) -> np.ndarray[np.floating]:
        return self.ctrl_pts.copy()

    def insert_knot(self, new_knot: float) -> "Curve":
        """
        New curve with the same shape and `new_knot` added to its knot vector.
        """
        self.check()
        ctrl_pts, knots = insert_knot(self.ctrl_pts, self.degree, self.knots, new_knot)
        return Curve(self.degree, knots, ctrl_pts)

    def insert_knots(self, knots_to_add: Union[Iterable[float], int]) -> "Curve":
        """
        New curve with the same shape and a refined knot vector, see `insert_knots`.
        """
        self.check()
        ctrl_pts, knots = insert_knots(self.ctrl_pts, self.degree, self.knots, knots_to_add)
        return Curve(self.degree, knots, ctrl_pts)

    def to_dict(self) -> dict:
        """
        Returns the exchange document of the curve:
        `{"degree": int, "knots": [...], "controlPoints": [{"x": ..., "y": ...}, ...]}`.
        """
        self.check()
        return {
            "degree": self.degree,
            "knots": self.knots.tolist(),
            "controlPoints": [{"x": float(x), "y": float(y)} for x, y in self.ctrl_pts[:2].T],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Curve":
        """
        Creates a Curve from its exchange document.

        Raises
        ------
        DocumentError
            If a field is missing or malformed, or if
            `degree + len(controlPoints) + 1 != len(knots)`.
        """
        try:
            degree = data["degree"]
            knots = [float(k) for k in data["knots"]]
            points = [(float(pt["x"]), float(pt["y"])) for pt in data["controlPoints"]]
        except (KeyError, TypeError, ValueError) as err:
            raise DocumentError(f"Malformed curve document: {err!r}.") from err
        if isinstance(degree, bool) or not isinstance(degree, (int, np.integer)) or degree < 0:
            raise DocumentError(f"Invalid degree {degree!r}.")
        if degree + len(points) + 1 != len(knots):
            raise DocumentError(
                f"Knot count mismatch: {len(knots)} knots for degree {degree} "
                f"and {len(points)} control points."
            )
        ctrl_pts = np.array(points, dtype="float").reshape((-1, 2)).T
        return cls(degree, knots, ctrl_pts)

    def save(self, filepath: str) -> None:
        """
        Write the exchange document of the curve to `filepath`.

        The format follows the extension: `.json` gives the indented text document
        that `Session.import_document` accepts, `.pkl` the pickled dictionary.

        Raises
        ------
        InvalidCurveError
            If the curve is not valid, nothing is written then.
        ValueError
            If the extension is neither json nor pkl.
        """
        ext = _document_format(filepath)
        data = self.to_dict()
        if ext == "json":
            with open(filepath, "w") as f:
                json.dump(data, f, indent=2)
        else:
            with open(filepath, "wb") as f:
                pickle.dump(data, f)

    @classmethod
    def load(cls, filepath: str) -> "Curve":
        """
        Read a curve written by `save`. The document goes through `from_dict`, so a
        tampered file raises `DocumentError`.
        """
        ext = _document_format(filepath)
        if ext == "json":
            with open(filepath, "r") as f:
                data = json.load(f)
        else:
            with open(filepath, "rb") as f:
                data = pickle.load(f)
        return cls.from_dict(data)


def _document_format(filepath: str) -> str:
    ext = os.path.splitext(filepath)[1].lstrip(".").lower()
    if ext not in DOCUMENT_FORMATS:
        raise ValueError(
            f"Unknown extension {ext!r} for a curve document, use one of {DOCUMENT_FORMATS}."
        )
    return ext
