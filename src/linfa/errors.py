from __future__ import annotations


class LinfaError(Exception):
    """Base class for every error raised by the fit/predict/transform contract."""


class ShapeMismatchError(LinfaError, ValueError):
    """Dimensional incompatibility.

    - records vs targets sample count
    - model input width vs provided records
    - transform preconditions (e.g. projecting to more dimensions than available)
    """


class InvalidStateError(LinfaError, ValueError):
    """A hyperparameter is outside its documented domain.

    Raised at the start of fit/transform, before any numeric work.
    """


class EmptyInputError(LinfaError, ValueError):
    """Fitting was requested on a dataset without samples."""
