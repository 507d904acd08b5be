# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module provides custom exceptions and warnings.
"""

from astropy.utils.exceptions import AstropyUserWarning

__all__ = [
    'BadKronIntegralError',
    'KronConfigurationError',
    'KronEdgeError',
    'KronError',
    'KronFailureWarning',
    'KronRadiusUnderflowError',
]


class KronError(Exception):
    """
    Base class for errors raised while measuring a Kron flux.

    Context lines may be added with `add_context` as the error
    propagates; they are included in the error message.
    """

    def __init__(self, message=''):
        super().__init__(message)
        self.context = []

    def __str__(self):
        message = super().__str__()
        return '\n'.join([message, *self.context])

    def add_context(self, message):
        """
        Append a line of context to the error message.

        Parameters
        ----------
        message : str
            The context message.

        Returns
        -------
        self : `KronError`
            The same exception, so that it can be re-raised directly.
        """
        self.context.append(message)
        return self


class KronEdgeError(KronError):
    """
    An aperture or footprint extends beyond the edge of the image.
    """


class BadKronIntegralError(KronError):
    """
    The radial moment sums are not both positive.
    """


class KronConfigurationError(KronError):
    """
    The source and configuration do not allow a Kron radius to be
    defined (e.g., a bad shape and no PSF).
    """


class KronRadiusUnderflowError(KronError):
    """
    The Kron radius is too small to define an aperture.
    """


class KronFailureWarning(AstropyUserWarning):
    """
    A warning class to indicate that the Kron measurement failed for
    one or more sources.
    """
