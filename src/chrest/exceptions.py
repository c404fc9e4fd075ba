"""Errors raised by the chrest package."""


class ChrestError(Exception):
    """Base class for every error raised by the model."""


class ConfigurationError(ChrestError, ValueError):
    """A model parameter is out of range."""


class IllegalMoveError(ChrestError):
    """A batch of moves is malformed or cannot be applied at the requested time."""


class DuplicateIdentifierError(ChrestError):
    """Two live concrete objects in a visual-spatial field share an identifier."""


class DimensionMismatchError(ChrestError, ValueError):
    """Two scenes of differing width or height were compared."""


class ReinforcementError(ChrestError, ValueError):
    """Variables passed to a reinforcement theory do not fit that theory."""
