"""
Error classes shared across the engine and its callers.

**Conceptual**: The numerical engine itself never raises for degenerate inputs;
it returns defined fallbacks (zeroed metrics, inf/NaN ratios) instead. Contract
violations such as a short window that is not shorter than the long window are
rejected one layer up, by the caller, before the engine is invoked. This module
holds the exception that caller layer raises.
"""


class InvalidParameters(ValueError):
    """
    Raised when scenario or strategy parameters violate an engine precondition.

    Subclasses ValueError so callers that already catch ValueError (e.g. the
    settings loaders) keep working unchanged.

    Attributes:
        parameter: Name of the offending parameter (e.g. "short_period").
        value: The rejected value.
    """

    def __init__(self, parameter: str, value, message: str):
        self.parameter = parameter
        self.value = value
        super().__init__(f"Invalid {parameter}={value!r}: {message}")
