import warnings

import numpy as np
import pytest
from bspline_edit.exceptions import KnotVectorError, KnotVectorWarning
from bspline_edit.knot_factory import (uniform_knot_vector,
                                       parse_knots,
                                       validate_manual_knots,
                                       knots_or_uniform)


@pytest.mark.parametrize("num_points, degree", [(2, 1), (3, 2), (4, 2), (5, 2), (7, 3), (10, 4), (4, 3)])
def test_uniform_knot_vector(num_points, degree):
    knots = uniform_knot_vector(num_points, degree)
    assert knots.size == num_points + degree + 1
    assert np.all(np.diff(knots) >= 0)
    assert np.all(knots[:degree + 1] == 0)
    assert np.all(knots[-(degree + 1):] == 1)
    interior = knots[degree + 1:-(degree + 1)]
    assert np.all((interior > 0) & (interior < 1))


def test_uniform_interior_spacing():
    assert np.allclose(uniform_knot_vector(5, 2), [0, 0, 0, 1/3, 2/3, 1, 1, 1])
    assert np.array_equal(uniform_knot_vector(3, 2), [0, 0, 0, 1, 1, 1])


def test_parse_knots_separators():
    knots = parse_knots("0,0;0，0.5；1  1\t1")
    assert np.allclose(knots, [0, 0, 0, 0.5, 1, 1, 1])
    assert parse_knots("   ").size == 0
    assert np.allclose(parse_knots([0, 0.5, 1]), [0, 0.5, 1])


@pytest.mark.parametrize("raw", ["0 a 1", "0, 1, 0.5", "0 nan 1", [0, "x", 1]])
def test_parse_knots_rejects(raw):
    with pytest.raises(KnotVectorError):
        parse_knots(raw)


def test_manual_knots_accepted():
    expected = [0, 0, 0, 0.5, 1, 1, 1]
    assert np.allclose(validate_manual_knots("0, 0, 0, 0.5, 1, 1, 1", 4, 2), expected)
    assert np.allclose(validate_manual_knots(expected, 4, 2), expected)


@pytest.mark.parametrize("raw", [
    [0, 0, 1, 1],                 # wrong length
    [0, 0, 0, 0, 1, 1, 1],        # first knot repeated 4 times
    [0, 0, 0.2, 0.5, 1, 1, 1],    # first knot repeated 2 times
    [0, 0, 0, 0.5, 0.8, 1, 1],    # last knot repeated 2 times
    [0, 0, 0, 1, 0.5, 1, 1],      # decreasing
])
def test_manual_knots_rejected(raw):
    with pytest.raises(KnotVectorError):
        validate_manual_knots(raw, 4, 2)


def test_fallback_to_uniform():
    with pytest.warns(KnotVectorWarning):
        knots = knots_or_uniform([0, 0, 1, 1], 4, 2)
    assert knots.size == 7
    assert np.allclose(knots, uniform_knot_vector(4, 2))


def test_valid_and_blank_inputs_do_not_warn():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert np.allclose(knots_or_uniform("0 0 0 0.5 1 1 1", 4, 2), [0, 0, 0, 0.5, 1, 1, 1])
        assert np.allclose(knots_or_uniform("", 4, 2), uniform_knot_vector(4, 2))
        assert np.allclose(knots_or_uniform(None, 4, 2), uniform_knot_vector(4, 2))
