import numpy as np
import pytest
from bspline_edit.basis import basis_function, basis_functions, basis_matrix, find_span

QUADRATIC = [0., 0., 0., 0.5, 1., 1., 1.]
CUBIC_REPEATED = [0., 0., 0., 0., 0.3, 0.3, 0.7, 1., 1., 1., 1.]


def _domain(degree, knots, size=50):
    knots = np.asarray(knots)
    n = knots.size - degree - 2
    return np.linspace(knots[degree], knots[n + 1], size, endpoint=False)


def test_basis_function_values():
    """Compare the recursion with the closed form of a quadratic basis."""
    XI = np.linspace(0, 1, 11)[:-1]
    N = np.array([(XI<=0.5)*( 4*XI**2 - 4*XI + 1)                                 ,
                  (XI<=0.5)*(-6*XI**2 + 4*XI + 0) + (XI>0.5)*( 2*XI**2 - 4*XI + 2),
                  (XI<=0.5)*( 2*XI**2 + 0*XI + 0) + (XI>0.5)*(-6*XI**2 + 8*XI - 2),
                                                    (XI>0.5)*( 4*XI**2 - 4*XI + 1)], dtype='float')
    values = np.array([[basis_function(i, 2, xi, QUADRATIC) for xi in XI] for i in range(4)])
    assert np.allclose(N, values)


@pytest.mark.parametrize("degree, knots", [
    (1, [0., 0., 1., 2., 3., 3.]),
    (2, QUADRATIC),
    (3, CUBIC_REPEATED),
    (2, [0., 0., 0., 0.5, 0.5, 1., 1., 1.]),
])
def test_partition_of_unity(degree, knots):
    n = len(knots) - degree - 2
    for t in _domain(degree, knots):
        total = sum(basis_function(i, degree, t, knots) for i in range(n + 1))
        assert abs(total - 1) < 1e-9
    N = basis_matrix(degree, knots, _domain(degree, knots)).toarray()
    np.testing.assert_allclose(N.sum(axis=1), 1, atol=1e-9)


def test_table_matches_recursion():
    n = len(CUBIC_REPEATED) - 3 - 2
    for t in _domain(3, CUBIC_REPEATED, 37):
        expected = [basis_function(i, 3, t, CUBIC_REPEATED) for i in range(n + 1)]
        assert np.allclose(basis_functions(3, CUBIC_REPEATED, t), expected)


def test_upper_end_of_domain():
    """The last knot belongs to no half-open interval, the table clamps it."""
    assert all(basis_function(i, 2, 1., QUADRATIC) == 0 for i in range(4))
    assert np.array_equal(basis_functions(2, QUADRATIC, 1.), [0., 0., 0., 1.])
    assert np.array_equal(basis_functions(2, QUADRATIC, -1.), [1., 0., 0., 0.])


def test_basis_matrix_shape():
    XI = np.array([0., 0.25, 0.5, 1.])
    N = basis_matrix(2, QUADRATIC, XI)
    assert N.shape == (4, 4)
    assert np.allclose(N.toarray()[-1], [0., 0., 0., 1.])
    assert np.allclose(N.toarray()[1], [basis_function(i, 2, 0.25, QUADRATIC) for i in range(4)])


def test_find_span():
    assert find_span(2, QUADRATIC, 0.) == 2
    assert find_span(2, QUADRATIC, 0.25) == 2
    assert find_span(2, QUADRATIC, 0.5) == 3
    assert find_span(2, QUADRATIC, 1.) == 3


def test_repeated_interior_knot_is_finite():
    knots = [0., 0., 0., 0.5, 0.5, 1., 1., 1.]
    values = [basis_function(i, 2, 0.5, knots) for i in range(5)]
    assert np.all(np.isfinite(values))
    assert np.isclose(sum(values), 1.)
    assert np.isclose(values[2], 1.)


def test_memo_returns_identical_values():
    memo = {}
    first = basis_function(2, 3, 0.41, CUBIC_REPEATED, memo)
    assert len(memo) > 0
    assert (2, 3, 0.41) in memo
    second = basis_function(2, 3, 0.41, CUBIC_REPEATED, memo)
    assert first == second
    # parameters equal up to the rounding share the same entry
    assert basis_function(2, 3, 0.41 + 1e-9, CUBIC_REPEATED, memo) == first


def test_memo_must_be_cleared_between_knot_vectors():
    knots_a = QUADRATIC
    knots_b = [0., 0., 0., 0.25, 1., 1., 1.]
    memo = {}
    value_a = basis_function(1, 2, 0.5, knots_a, memo)
    assert np.isclose(value_a, 0.5)
    # the cache doesn't know about the knots
    assert basis_function(1, 2, 0.5, knots_b, memo) == value_a
    memo.clear()
    value_b = basis_function(1, 2, 0.5, knots_b, memo)
    assert np.isclose(value_b, 1 / 3)
    assert value_b == basis_function(1, 2, 0.5, knots_b)


def test_tiny_span_is_dropped():
    """A span shorter than EPS is handled like a repeated knot."""
    knots = [0., 0., 0., 0.5, 0.5 + 1e-12, 1., 1., 1.]
    t = 0.5 + 5e-13
    # only N_3^0 is non zero, and both degree 1 terms using it are gated
    assert basis_function(3, 0, t, knots) == 1.
    assert basis_function(2, 1, t, knots) == 0.
    assert basis_function(3, 1, t, knots) == 0.
    values = np.array([basis_function(i, 2, t, knots) for i in range(5)])
    assert np.all(np.isfinite(values))
    assert np.array_equal(values, np.zeros(5))
    table = basis_functions(2, knots, t)
    assert np.all(np.isfinite(table))
    assert np.array_equal(table, np.zeros(5))
    # away from the tiny span the basis is a regular partition of unity
    assert np.isclose(basis_functions(2, knots, 0.75).sum(), 1.)
