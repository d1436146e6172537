"""
Errors that can be raised by demdecomp.
"""


class Error(Exception):
    """Base error class. All errors raised by demdecomp should inherit this."""


class LengthMismatch(Error, ValueError):
    """Two parameter vectors that must be aligned differ in length."""


class DivisionSingularity(Error, ZeroDivisionError):
    """
    A lifetable ratio divides by zero survivorship.

    Only raised in strict mode. Otherwise the offending position is set to 0.
    """


class InvalidResolution(Error, ValueError):
    """
    A method option was rejected before any evaluation of the function.

    Covers a resolution below 1, an unknown stepwise direction or order and a
    non-positive derivative step.
    """


class EvaluationBudgetExceeded(Error):
    """The decomposition needs more function evaluations than allowed."""


class EvaluationFailure(Error):
    """
    The scalar function raised or returned a value that is not a finite number.

    The method name, the position in the algorithm and the parameter vector
    that was evaluated are kept on the instance.
    """

    def __init__(self, message, method=None, step=None, index=None, pars=None):
        super().__init__(message)
        self.method = method
        self.step = step
        self.index = index
        self.pars = pars

    def __str__(self):
        msg = super().__str__()
        where = [
            f"{name}={value}"
            for name, value in (("method", self.method),
                                ("step", self.step),
                                ("index", self.index))
            if value is not None
        ]
        if where:
            msg += f" ({', '.join(where)})"
        if self.pars is not None:
            msg += f"\n  pars: {list(self.pars)!r}"
        return msg
