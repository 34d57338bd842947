class SocNetError(Exception):
    """Base class for every error raised by the engine."""


class NotFoundError(SocNetError, KeyError):
    """A vertex, edge or relation reference does not exist."""

    def __str__(self):
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class InvalidParameterError(SocNetError, ValueError):
    """Out-of-range size, degree, probability, index or similar argument."""


class SingularMatrixError(SocNetError, ArithmeticError):
    """The matrix is not invertible (numerically zero determinant)."""


class UnsupportedError(SocNetError, ValueError):
    """The analysis does not support the requested configuration."""
