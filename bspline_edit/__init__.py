"""
.. include:: ../README.md
"""
from bspline_edit.basis import basis_function, basis_functions, basis_matrix, find_span
from bspline_edit.sampler import sample_point, sample_points, sample_pieces, span_parameters
from bspline_edit.insertion import insert_knot, insert_knots, insertion_matrix
from bspline_edit.knot_factory import (uniform_knot_vector,
                                       parse_knots,
                                       validate_manual_knots,
                                       knots_or_uniform)
from bspline_edit.knot_vector import KnotVector
from bspline_edit.curve import Curve
from bspline_edit.session import Session, ControlPoint
from bspline_edit.exceptions import (BSplineEditError,
                                     KnotVectorError,
                                     KnotVectorWarning,
                                     DocumentError,
                                     KnotDomainError,
                                     InvalidCurveError,
                                     SessionError)
