# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
Descriptors that validate and normalize the geometric attributes of
ellipses, apertures, and sources.
"""

import astropy.units as u
import numpy as np

__all__ = ['NonNegativeScalar', 'PixelPosition', 'ScalarAngleOrValue']


def _reject_quantity(name, value):
    if isinstance(value, u.Quantity):
        raise TypeError(f'{name!r} must be given in pixels, not as a '
                        'Quantity')


class _ValidatedAttribute:
    """
    Base descriptor storing a validated value in the instance
    ``__dict__``.

    Subclasses implement ``convert``, which returns the stored form of
    a value or raises an exception.
    """

    def __init__(self, doc=''):
        self.__doc__ = doc
        self.name = None

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return instance.__dict__[self.name]

    def __set__(self, instance, value):
        instance.__dict__[self.name] = self.convert(value)

    def convert(self, value):
        raise NotImplementedError


class PixelPosition(_ValidatedAttribute):
    """
    A finite ``(x, y)`` pixel position, stored as a read-only float
    array of shape ``(2,)``.
    """

    def convert(self, value):
        _reject_quantity(self.name, value)
        try:
            position = np.array(value, dtype=float)
        except (TypeError, ValueError) as exc:
            raise TypeError(f'{self.name!r} must be an (x, y) pixel '
                            'position') from exc

        if position.shape != (2,):
            raise ValueError(f'{self.name!r} must be a single (x, y) pixel '
                             f'position, got shape {position.shape}')
        if not np.all(np.isfinite(position)):
            raise ValueError(f'{self.name!r} must be finite')

        position.flags.writeable = False
        return position


class NonNegativeScalar(_ValidatedAttribute):
    """
    A finite scalar >= 0, stored as a float.
    """

    def convert(self, value):
        _reject_quantity(self.name, value)
        if not np.isscalar(value) or not np.isfinite(value) or value < 0:
            raise ValueError(f'{self.name!r} must be a finite non-negative '
                             f'scalar, got {value!r}')
        return float(value)


class ScalarAngleOrValue(_ValidatedAttribute):
    """
    A finite scalar angle, stored as a float in radians.

    Angular `~astropy.units.Quantity` values are converted to radians;
    plain numbers are taken to be in radians already.
    """

    def convert(self, value):
        if isinstance(value, u.Quantity):
            if not value.isscalar or value.unit.physical_type != 'angle':
                raise ValueError(f'{self.name!r} must be a scalar angle')
            value = value.to_value(u.radian)
        elif not np.isscalar(value):
            raise ValueError(f'{self.name!r} must be a scalar angle in '
                             'radians')

        if not np.isfinite(value):
            raise ValueError(f'{self.name!r} must be finite')

        return float(value)
