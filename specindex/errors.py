"""
Exceptions and warnings raised by specindex.
"""


class InvalidGroupingError(ValueError):
    """Sample/group assignment does not cover exactly the matrix columns."""


class InvalidParameterError(ValueError):
    """A tuning parameter is outside its valid range."""


class DegenerateGroupWarning(UserWarning):
    """A group has a single member sample.

    Resampling still proceeds; every draw for that group returns the same
    sample, so the group contributes no bootstrap variance.
    """
