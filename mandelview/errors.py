"""Exceptions raised by the mandelview core."""


class MandelviewError(Exception):
    """Base class for all mandelview errors."""


class InvalidGeometry(MandelviewError, ValueError):
    """The canvas cannot be mapped onto the complex plane."""


class InvalidSettings(MandelviewError, ValueError):
    """Iteration limit or palette is malformed."""
