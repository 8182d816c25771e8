"""Error types raised at the analytics boundary."""


class ValidationError(ValueError):
    """Raised when a required input series is empty or malformed.

    Insufficient history is not a validation error: windows without enough
    data are simply omitted from the results.
    """
