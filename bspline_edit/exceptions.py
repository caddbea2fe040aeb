def make_warning(cls):
    """
    Takes 'class_name' of an error class and creates new type 'class_nameWarning'
    as a descendant of the UserWarning class.
    Used for reporting recoverable errors as warnings.
    """
    name = cls.__name__
    if name.endswith("Error"):
        name = name[: -len("Error")]
    return type(name + "Warning", (UserWarning,), {})


class BSplineEditError(Exception):
    pass


class KnotVectorError(BSplineEditError, ValueError):
    pass


class DocumentError(BSplineEditError, ValueError):
    pass


class KnotDomainError(BSplineEditError, ValueError):
    pass


class InvalidCurveError(BSplineEditError):
    pass


class SessionError(BSplineEditError):
    pass


KnotVectorWarning = make_warning(KnotVectorError)
