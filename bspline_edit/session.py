import itertools
import json
import logging
import os
from typing import Iterable, Union

import numpy as np

from bspline_edit.curve import Curve
from bspline_edit.exceptions import (
    DocumentError,
    InvalidCurveError,
    KnotDomainError,
    SessionError,
)
from bspline_edit.insertion import check_insertion_domain
from bspline_edit.knot_factory import knots_or_uniform

log = logging.getLogger(__name__)

DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")


class ControlPoint:
    """
    Movable point of the editor. `pid` never changes once assigned.
    """

    __slots__ = ("x", "y", "pid")

    def __init__(self, x: float, y: float, pid: int):
        self.x = float(x)
        self.y = float(y)
        self.pid = pid

    def __repr__(self):
        return f"ControlPoint(x={self.x}, y={self.y}, pid={self.pid})"


class Session:
    """
    Editing state of one B-spline curve.

    The session owns the active curve (degree, knots and control points), the
    counter giving their identifiers to the control points, the basis functions
    cache and the temporary points of the creation mode.

    Parameters
    ----------
    new_curve_degree : int, optional
        Degree requested for the curves created with `finish_creating`. It is
        lowered to the number of points minus one when needed. By default, 3.
    n_eval_per_span : int, optional
        Number of sub-intervals sampled on each knot span. By default, 20.

    Examples
    --------
    >>> session = Session(new_curve_degree=2)
    >>> session.start_creating()
    >>> for x, y in [(0, 0), (1, 2), (3, 2), (4, 0)]:
    ...     session.add_temp_control_point(x, y)
    >>> session.finish_creating("0 0 0 0.5 1 1 1")
    >>> session.is_valid
    True
    >>> session.knots
    array([0. , 0. , 0. , 0.5, 1. , 1. , 1. ])
    """

    def __init__(self, new_curve_degree: int = 3, n_eval_per_span: int = 20):
        self.new_curve_degree = new_curve_degree
        self.n_eval_per_span = n_eval_per_span
        self._pid_counter = itertools.count()
        self.degree = 0
        self.knots = np.empty(0, dtype="float")
        self.control_points: list[ControlPoint] = []
        self.basis_cache: dict = {}
        self.spline_pieces: list[np.ndarray] = []
        self.create_mode = False
        self.temp_control_points: list[ControlPoint] = []

    # %% state

    def new_control_point(self, x: float, y: float) -> ControlPoint:
        return ControlPoint(x, y, next(self._pid_counter))

    @property
    def ctrl_pts(self) -> np.ndarray[np.floating]:
        if not self.control_points:
            return np.empty((2, 0), dtype="float")
        return np.array([[pt.x, pt.y] for pt in self.control_points], dtype="float").T

    @property
    def curve(self) -> Curve:
        return Curve(self.degree, self.knots, self.ctrl_pts)

    @property
    def is_valid(self) -> bool:
        return self.curve.is_valid

    def _set_curve(self, degree: int, knots: Iterable[float], points: Iterable[tuple[float, float]]):
        self.degree = int(degree)
        self.knots = np.array(knots, dtype="float")
        self.control_points = [self.new_control_point(x, y) for x, y in points]
        self.clear_basis_cache()
        self.update_spline_pieces()

    def reset(self):
        """
        Forget the active curve: degree 0, no knot and no control point.
        """
        self.degree = 0
        self.knots = np.empty(0, dtype="float")
        self.control_points = []
        self.clear_basis_cache()
        self.spline_pieces = []

    def clear_basis_cache(self):
        self.basis_cache.clear()

    def update_spline_pieces(self):
        """
        Resample the curve. Nothing is sampled for an invalid curve.

        The basis functions cache is reused, it must have been cleared if the
        knots, the degree or the set of control points changed since last time.
        """
        if not self.is_valid:
            self.spline_pieces = []
            return
        self.spline_pieces = self.curve.pieces(self.n_eval_per_span, self.basis_cache)

    @property
    def control_point_line(self) -> np.ndarray[np.floating]:
        return self.ctrl_pts

    @property
    def temp_control_point_line(self) -> np.ndarray[np.floating]:
        if not self.temp_control_points:
            return np.empty((2, 0), dtype="float")
        return np.array([[pt.x, pt.y] for pt in self.temp_control_points], dtype="float").T

    def knot_positions(self, left: float = 20, right: float = 580) -> np.ndarray[np.floating]:
        """
        Display positions of the distinct knots of the active curve.
        """
        return self.curve.knot_vector().unique_knot_positions(left, right)

    # %% creation mode

    def start_creating(self):
        self.create_mode = True
        self.temp_control_points = []
        log.info("Creation started, add control points then finish.")

    def add_temp_control_point(self, x: float, y: float) -> Union[ControlPoint, None]:
        """
        Add a point to the curve being created. Ignored outside of the creation mode.
        """
        if not self.create_mode:
            return None
        point = self.new_control_point(x, y)
        self.temp_control_points.append(point)
        return point

    def finish_creating(self, manual_knots: Union[str, Iterable[float], None] = None):
        """
        Turn the temporary points into the active curve.

        Parameters
        ----------
        manual_knots : Union[str, Iterable[float], None], optional
            Hand written knot vector. When it is missing or invalid a uniform knot
            vector is used, an invalid one also emits a `KnotVectorWarning`.
            By default, None.

        Raises
        ------
        SessionError
            If the creation mode is off or if less than two points were added.
        """
        if not self.create_mode:
            log.error("Finish requested while not creating a curve.")
            raise SessionError("Start creating a curve before finishing it.")
        if len(self.temp_control_points) < 2:
            log.error("At least two control points are needed to create a curve.")
            raise SessionError("At least two control points are needed to create a curve.")
        n_points = len(self.temp_control_points)
        degree = min(self.new_curve_degree, n_points - 1)
        knots = knots_or_uniform(manual_knots, n_points, degree)
        self.degree = degree
        self.knots = knots
        self.control_points = list(self.temp_control_points)
        self.create_mode = False
        self.temp_control_points = []
        self.clear_basis_cache()
        self.update_spline_pieces()
        log.info("Curve of degree %d created with %d control points.", degree, n_points)

    def cancel_creating(self):
        self.create_mode = False
        self.temp_control_points = []
        log.info("Creation cancelled.")

    # %% edition

    def move_control_point(self, pid: int, x: float, y: float) -> bool:
        """
        Move the control point identified by `pid` and resample the curve.

        Returns
        -------
        moved : bool
            False if no control point has this identifier.
        """
        for point in self.control_points:
            if point.pid == pid:
                point.x = float(x)
                point.y = float(y)
                self.update_spline_pieces()
                return True
        return False

    def insert_knot(self, value: Union[float, str]):
        """
        Insert a knot in the active curve without changing its shape.

        The control points are replaced by new ones, with new identifiers.

        Parameters
        ----------
        value : Union[float, str]
            Knot to insert, possibly as typed by the user.

        Raises
        ------
        InvalidCurveError
            If there is no valid curve.
        SessionError
            If `value` is empty or not a number.
        KnotDomainError
            If `value` is outside of `[knots[degree], knots[-degree - 1]]`.
        """
        if not self.is_valid:
            log.error("Knot insertion needs a valid curve.")
            raise InvalidCurveError("Create a valid B-spline before inserting knots.")
        if isinstance(value, str):
            if not value.strip():
                log.error("Knot insertion needs a value.")
                raise SessionError("Enter a knot value.")
            try:
                value = float(value)
            except ValueError:
                log.error("Knot value %r is not a number.", value)
                raise SessionError(f"Knot value {value!r} is not a number.")
        if np.isnan(value):
            log.error("Knot value is not a number.")
            raise SessionError("Knot value is not a number.")
        try:
            check_insertion_domain(self.degree, self.knots, value)
        except KnotDomainError as err:
            log.error("%s", err)
            raise
        refined = self.curve.insert_knot(value)
        self._set_curve(refined.degree, refined.knots, refined.ctrl_pts.T)
        log.info("Knot %g inserted.", value)

    # %% exchange

    def import_document(self, data: Union[dict, str]):
        """
        Replace the active curve by the one described in `data`.

        Parameters
        ----------
        data : Union[dict, str]
            Curve document, or its JSON text.

        Raises
        ------
        DocumentError
            If the document is invalid. The session is then reset to an empty
            curve.
        """
        try:
            if isinstance(data, str):
                try:
                    data = json.loads(data)
                except json.JSONDecodeError as err:
                    raise DocumentError(f"Invalid JSON: {err}.") from err
            curve = Curve.from_dict(data)
        except DocumentError as err:
            log.error("Import failed: %s", err)
            self.reset()
            raise
        self._set_curve(curve.degree, curve.knots, curve.ctrl_pts.T)
        log.info("Curve imported.")

    def export_document(self) -> dict:
        """
        Exchange document of the active curve.

        Raises
        ------
        InvalidCurveError
            If there is no valid curve to export.
        """
        if not self.is_valid:
            log.error("No valid B-spline to export.")
            raise InvalidCurveError("No valid B-spline to export.")
        return self.curve.to_dict()

    def export_json(self) -> str:
        return json.dumps(self.export_document(), separators=(",", ":"))

    def load_example(self, degree: int, num_points: int):
        """
        Import the example curve `data/d{degree}p{num_points}.json` shipped with
        the package.

        Raises
        ------
        DocumentError
            If there is no such example. The active curve is kept.
        """
        filepath = os.path.join(DATA_DIR, f"d{degree}p{num_points}.json")
        if not os.path.isfile(filepath):
            log.error("No example of degree %d with %d points.", degree, num_points)
            raise DocumentError(f"No example of degree {degree} with {num_points} points.")
        with open(filepath, "r") as f:
            data = json.load(f)
        self.import_document(data)
