import logging
import re
import warnings
from typing import Iterable, Union

import numpy as np

from bspline_edit.exceptions import KnotVectorError, KnotVectorWarning

log = logging.getLogger(__name__)

# ASCII and full-width comma / semicolon, plus any whitespace
_SEPARATORS = re.compile(r"[,;，；\s]+")


def uniform_knot_vector(num_points: int, degree: int) -> np.ndarray[np.floating]:
    """
    Create an open (clamped) uniform knot vector on [0, 1].

    Parameters
    ----------
    num_points : int
        Number of control points of the curve.
    degree : int
        Degree of the curve.

    Returns
    -------
    knots : np.ndarray[np.floating]
        Knot vector of size `num_points + degree + 1`: `degree + 1` zeros, the
        `num_points - degree - 1` evenly spaced interior knots and `degree + 1` ones.

    Examples
    --------
    >>> uniform_knot_vector(5, 2)
    array([0.        , 0.        , 0.        , 0.33333333, 0.66666667,
           1.        , 1.        , 1.        ])
    """
    internal = num_points - degree - 1
    if internal > 0:
        interior = np.arange(1, internal + 1, dtype="float") / (internal + 1)
    else:
        interior = np.empty(0, dtype="float")
    return np.concatenate((np.zeros(degree + 1), interior, np.ones(degree + 1)))


def parse_knots(raw: Union[str, Iterable[float]]) -> np.ndarray[np.floating]:
    """
    Read a knot sequence typed by hand, e.g. ``"0, 0, 0; 0.5 1 1 1"``.

    Raises
    ------
    KnotVectorError
        If a token is not a number or if the sequence is decreasing somewhere.
    """
    if isinstance(raw, str):
        tokens = [tok for tok in _SEPARATORS.split(raw.strip()) if tok]
    else:
        tokens = list(raw)
    values = []
    for tok in tokens:
        try:
            value = float(tok)
        except (TypeError, ValueError):
            raise KnotVectorError(f"Knot vector contains an invalid value: {tok!r}.")
        if np.isnan(value):
            raise KnotVectorError(f"Knot vector contains an invalid value: {tok!r}.")
        values.append(value)
    knots = np.array(values, dtype="float")
    if np.any(np.diff(knots) < 0):
        raise KnotVectorError("Knot vector must be a non-decreasing sequence.")
    return knots


def validate_manual_knots(
    raw: Union[str, Iterable[float]], num_points: int, degree: int
) -> np.ndarray[np.floating]:
    """
    Check that a hand written knot vector is a clamped knot vector for a curve of
    `num_points` control points and degree `degree`.

    Parameters
    ----------
    raw : Union[str, Iterable[float]]
        Separated numbers (see `parse_knots`) or a sequence of numbers.
    num_points : int
        Number of control points.
    degree : int
        Degree of the curve.

    Returns
    -------
    knots : np.ndarray[np.floating]
        The parsed knot vector.

    Raises
    ------
    KnotVectorError
        If the knots can't be parsed, are not non-decreasing, don't hold
        `num_points + degree + 1` values, or if the first or the last value is not
        repeated exactly `degree + 1` times.

    Examples
    --------
    >>> validate_manual_knots("0 0 0 0.5 1 1 1", 4, 2)
    array([0. , 0. , 0. , 0.5, 1. , 1. , 1. ])
    """
    knots = parse_knots(raw)
    required = num_points + degree + 1
    if knots.size != required:
        raise KnotVectorError(
            f"Knot vector has {knots.size} values, {required} expected "
            f"for {num_points} control points of degree {degree}."
        )
    first_count = np.count_nonzero(knots == knots[0])
    last_count = np.count_nonzero(knots == knots[-1])
    if first_count != degree + 1 or last_count != degree + 1:
        raise KnotVectorError(
            f"First and last knots must be repeated {degree + 1} times, "
            f"got {first_count} and {last_count}."
        )
    return knots


def knots_or_uniform(
    raw: Union[str, Iterable[float], None], num_points: int, degree: int
) -> np.ndarray[np.floating]:
    """
    Use the hand written knots when they are valid, the uniform knot vector otherwise.

    A blank or empty input silently selects the uniform knot vector. An invalid
    input emits a `KnotVectorWarning` before falling back to it.
    """
    if raw is None:
        return uniform_knot_vector(num_points, degree)
    try:
        knots = parse_knots(raw)
        if knots.size == 0:
            return uniform_knot_vector(num_points, degree)
        return validate_manual_knots(knots, num_points, degree)
    except KnotVectorError as err:
        log.warning("Manual knot vector rejected (%s), using a uniform one.", err)
        warnings.warn(
            f"{err} A uniform knot vector is used instead.",
            category=KnotVectorWarning,
            stacklevel=2,
        )
        return uniform_knot_vector(num_points, degree)
