"""
Exception types raised by the fitting routines.
"""


class FittingError(Exception):
    """Base class for all fitting errors."""


class EmptyInputError(FittingError, ValueError):
    """Raised when a sample has no points to evaluate."""


class InvalidRangeError(FittingError, ValueError):
    """Raised when a grid specification has an inverted range or no points."""


class NumericDivergenceError(FittingError, ArithmeticError):
    """Non-finite loss encountered during refinement.

    The refiner does not raise this; it attaches it to the returned
    FitResult together with the best finite point seen.
    """

    def __init__(self, message: str, iteration: int = 0, params=None) -> None:
        super().__init__(message)
        self.iteration = iteration
        self.params = params

    def __reduce__(self):
        return (self.__class__, (str(self), self.iteration, self.params))
