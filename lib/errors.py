"""Exceptions raised by the RBM training kernel."""


class RBMError(Exception):
    """Base class of all errors raised by rbm_cd."""


class DimensionMismatch(RBMError, ValueError):
    """An array does not match the layer sizes of the parameter set."""


class InvalidArgument(RBMError, ValueError):
    """A training argument or configuration value is out of range."""


class MissingInput(RBMError, RuntimeError):
    """Training was called without input and no batch is cached."""


class NumericInstability(RBMError, FloatingPointError):
    """A parameter update produced NaN or infinite values."""
