import numpy as np
import pytest
from bspline_edit.knot_vector import KnotVector


@pytest.fixture
def quadratic_knots():
    return KnotVector([1, 0, 0.5, 0, 1, 0, 1])


def test_sorted_copy():
    knots = [1., 0., 0.5]
    kv = KnotVector(knots)
    knots[0] = 12.
    assert np.array_equal(kv.knots, [0., 0.5, 1.])
    kv.set_knots([3, 2])
    assert np.array_equal(kv.knots, [2., 3.])
    assert len(kv) == 2


def test_unique_and_duplicates(quadratic_knots):
    assert np.array_equal(quadratic_knots.unique_knots, [0., 0.5, 1.])
    assert np.array_equal(quadratic_knots.duplicate_knots, [0., 0., 1., 1.])
    values, counts = quadratic_knots.multiplicities()
    assert np.array_equal(values, [0., 0.5, 1.])
    assert np.array_equal(counts, [3, 1, 3])
    assert KnotVector([]).duplicate_knots.size == 0


def test_positions(quadratic_knots):
    assert np.allclose(quadratic_knots.unique_knot_positions(), [20, 300, 580])
    assert np.allclose(quadratic_knots.unique_knot_positions(left=0, right=10), [0, 5, 10])
    assert np.allclose(KnotVector.normalize_positions([2, 3, 4], 2, 4, 0, 1), [0, 0.5, 1])
    assert np.allclose(KnotVector([0.3, 0.3]).unique_knot_positions(), [20])
    assert KnotVector([]).unique_knot_positions().size == 0


def test_span_and_clamping(quadratic_knots):
    assert quadratic_knots.span(2) == (0., 1.)
    assert quadratic_knots.is_clamped(2)
    assert not quadratic_knots.is_clamped(1)
    assert not KnotVector([0, 0, 0.5, 1, 1, 1]).is_clamped(2)
