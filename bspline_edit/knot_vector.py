from typing import Iterable

import numpy as np


class KnotVector:
    """
    Sorted knot sequence with the helpers used to display it.

    Attributes
    ----------
    knots : np.ndarray[np.floating]
        Sorted copy of the knot sequence given at construction.

    Examples
    --------
    >>> kv = KnotVector([0., 1., 0.5, 0., 1.])
    >>> kv.knots
    array([0. , 0. , 0.5, 1. , 1. ])
    >>> kv.unique_knots
    array([0. , 0.5, 1. ])
    >>> kv.duplicate_knots
    array([0., 1.])
    """

    knots: np.ndarray[np.floating]

    def __init__(self, knots: Iterable[float]):
        self.set_knots(knots)

    def set_knots(self, knots: Iterable[float]):
        """
        Replace the knot sequence by a sorted copy of `knots`.
        """
        self.knots = np.sort(np.array(knots, dtype="float"))

    def __len__(self) -> int:
        return self.knots.size

    @property
    def unique_knots(self) -> np.ndarray[np.floating]:
        return np.unique(self.knots)

    @property
    def duplicate_knots(self) -> np.ndarray[np.floating]:
        """
        Every occurrence of a knot value beyond its first one.
        """
        if self.knots.size == 0:
            return self.knots.copy()
        repeated = np.concatenate(([False], self.knots[1:] == self.knots[:-1]))
        return self.knots[repeated]

    def multiplicities(self) -> tuple[np.ndarray[np.floating], np.ndarray[np.integer]]:
        """
        Distinct knot values and the number of times each one appears.
        """
        return np.unique(self.knots, return_counts=True)

    def span(self, degree: int) -> tuple[float, float]:
        """
        Interval of definition `(knots[degree], knots[m - degree])` of a basis of
        degree `degree` built on these knots, `m` being the last index.
        """
        m = self.knots.size - 1
        return (float(self.knots[degree]), float(self.knots[m - degree]))

    def is_clamped(self, degree: int) -> bool:
        """
        Whether the first and last knot values both appear exactly `degree + 1` times.
        """
        if self.knots.size < 2 * (degree + 1):
            return False
        first = np.count_nonzero(self.knots == self.knots[0])
        last = np.count_nonzero(self.knots == self.knots[-1])
        return first == degree + 1 and last == degree + 1

    @staticmethod
    def normalize_positions(
        values: Iterable[float],
        lower: float,
        upper: float,
        left: float = 20,
        right: float = 580,
    ) -> np.ndarray[np.floating]:
        """
        Map linearly `[lower, upper]` onto `[left, right]`.

        Parameters
        ----------
        values : Iterable[float]
            Values to map.
        lower, upper : float
            Bounds of the source interval. When they are equal every value is
            sent to `left`.
        left, right : float, optional
            Bounds of the target interval, by default 20 and 580.

        Returns
        -------
        positions : np.ndarray[np.floating]
            Mapped values.
        """
        values = np.asarray(values, dtype="float")
        if upper == lower:
            return np.full(values.shape, float(left))
        return (values - lower) / (upper - lower) * (right - left) + left

    def unique_knot_positions(self, left: float = 20, right: float = 580) -> np.ndarray[np.floating]:
        """
        Display positions of the distinct knots, their range being stretched over
        `[left, right]`.
        """
        unique = self.unique_knots
        if unique.size == 0:
            return unique
        return self.normalize_positions(unique, unique[0], unique[-1], left, right)
