"""
Exceptions raised by the GLRM building blocks.

All errors are deterministic functions of their inputs and are never retried.
They subclass ValueError so code that guards parameter validation with
``except ValueError`` keeps working.

Infinite penalties and infinite imputations are NOT errors: they are ordinary
float values meaning "constraint violated" or "minimizer at infinity".
"""


class GLRMError(Exception):
    """Base class for GLRM errors."""


class ConfigurationError(GLRMError, ValueError):
    """Unknown loss / multi-loss / regularizer / transform, or a bad loss parameter."""


class InvalidArgument(GLRMError, ValueError):
    """Argument outside the domain of a loss function (e.g. target level out of range)."""


class ShapeMismatch(GLRMError, ValueError):
    """Dimensions of X, Y, the categorical layout or the observed data disagree."""
