"""Shared error types for varifoldlib."""


class VarifoldError(Exception):
    """Base error type for varifoldlib."""


class ConfigurationError(VarifoldError, ValueError):
    """Raised for an invalid radius, an unknown token or missing inputs."""


class UpstreamDataError(VarifoldError, RuntimeError):
    """Raised when the surface or an externally produced array is unusable."""


class DegenerateNeighborhoodError(VarifoldError, ArithmeticError):
    """Raised when no neighbour carries kernel weight around an element.

    Parameters
    ----------
    index : int
        Element (face or vertex) index.
    radius : float
        Kernel radius used for the query.
    method : str or None
        Method tag of the normal source, if known.
    """

    def __init__(self, index: int, radius: float, method=None):
        self.index = index
        self.radius = radius
        self.method = method
        msg = (f"No neighbour with positive kernel weight around element "
               f"{index} (radius={radius}")
        if method is not None:
            msg += f", method={method}"
        super().__init__(msg + ")")


class UnimplementedMethodError(VarifoldError, NotImplementedError):
    """Raised when a declared method has no estimator."""

    def __init__(self, method):
        self.method = method
        super().__init__(
            f"Method {method} is declared but has no estimator implemented"
        )
