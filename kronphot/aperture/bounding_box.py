# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module defines integer pixel bounding boxes in absolute image
coordinates.
"""

import math

import numpy as np

__all__ = ['BoundingBox']


class BoundingBox:
    """
    An integer pixel bounding box in absolute image coordinates.

    Pixel ``i`` covers the coordinates ``i - 0.5`` to ``i + 0.5``. The
    upper limits are exclusive, so the box covers the pixels
    ``ixmin <= x < ixmax`` and ``iymin <= y < iymax``. A box with
    ``ixmin == ixmax`` or ``iymin == iymax`` is empty.

    Parameters
    ----------
    ixmin, ixmax, iymin, iymax : int
        The pixel limits, with ``ixmin <= ixmax`` and ``iymin <=
        iymax``.

    Examples
    --------
    >>> from kronphot.aperture import BoundingBox
    >>> bbox = BoundingBox(ixmin=1, ixmax=10, iymin=2, iymax=20)
    >>> bbox.shape
    (18, 9)
    >>> bbox.grow(2)
    BoundingBox(ixmin=-1, ixmax=12, iymin=0, iymax=22)
    """

    def __init__(self, ixmin, ixmax, iymin, iymax):
        limits = (ixmin, ixmax, iymin, iymax)
        if not all(isinstance(value, (int, np.integer)) for value in limits):
            raise TypeError('BoundingBox limits must be integers')
        if ixmin > ixmax or iymin > iymax:
            msg = (f'Invalid BoundingBox limits ({ixmin}, {ixmax}, {iymin}, '
                   f'{iymax}): the lower limits must not exceed the upper '
                   'limits')
            raise ValueError(msg)

        self.ixmin, self.ixmax, self.iymin, self.iymax = map(int, limits)

    @classmethod
    def from_float(cls, xmin, xmax, ymin, ymax):
        """
        Return the smallest bounding box covering a rectangle given in
        float pixel coordinates.

        Parameters
        ----------
        xmin, xmax, ymin, ymax : float
            The rectangle limits.

        Returns
        -------
        bbox : `BoundingBox`
            The bounding box of all pixels that overlap the rectangle.

        Examples
        --------
        >>> from kronphot.aperture import BoundingBox
        >>> BoundingBox.from_float(xmin=1.4, xmax=10.4, ymin=1.6, ymax=10.6)
        BoundingBox(ixmin=1, ixmax=11, iymin=2, iymax=12)
        """
        return cls(math.floor(xmin + 0.5), math.ceil(xmax + 0.5),
                   math.floor(ymin + 0.5), math.ceil(ymax + 0.5))

    def _limits(self):
        return self.ixmin, self.ixmax, self.iymin, self.iymax

    def __eq__(self, other):
        if not isinstance(other, BoundingBox):
            return NotImplemented
        return self._limits() == other._limits()

    def __hash__(self):
        return hash(self._limits())

    def __repr__(self):
        return (f'{self.__class__.__name__}(ixmin={self.ixmin}, '
                f'ixmax={self.ixmax}, iymin={self.iymin}, '
                f'iymax={self.iymax})')

    @property
    def shape(self):
        """
        The ``(ny, nx)`` shape of the bounding box.
        """
        return self.iymax - self.iymin, self.ixmax - self.ixmin

    @property
    def is_empty(self):
        """
        Whether the bounding box contains no pixels.
        """
        return 0 in self.shape

    def contains(self, other):
        """
        Return whether another bounding box lies entirely within this
        one.
        """
        if not isinstance(other, BoundingBox):
            raise TypeError('other must be a BoundingBox')

        return (self.ixmin <= other.ixmin and other.ixmax <= self.ixmax
                and self.iymin <= other.iymin and other.iymax <= self.iymax)

    def grow(self, npixels):
        """
        Return a copy extended by ``npixels`` (>= 0) on every side.
        """
        if npixels < 0:
            raise ValueError('npixels must be >= 0')

        return BoundingBox(self.ixmin - npixels, self.ixmax + npixels,
                           self.iymin - npixels, self.iymax + npixels)

    def intersection(self, other):
        """
        Return the intersection with another bounding box.

        Parameters
        ----------
        other : `BoundingBox`
            The other bounding box (e.g., the bounding box of an image).

        Returns
        -------
        result : `BoundingBox` or `None`
            The intersection. It is empty if the boxes only touch and
            `None` if they are disjoint.
        """
        if not isinstance(other, BoundingBox):
            raise TypeError('other must be a BoundingBox')

        ixmin = max(self.ixmin, other.ixmin)
        ixmax = min(self.ixmax, other.ixmax)
        iymin = max(self.iymin, other.iymin)
        iymax = min(self.iymax, other.iymax)
        if ixmax < ixmin or iymax < iymin:
            return None

        return BoundingBox(ixmin, ixmax, iymin, iymax)

    def get_overlap_slices(self, shape, origin=(0, 0)):
        """
        Get the slices of the overlap of the bounding box with a 2D
        array.

        Parameters
        ----------
        shape : 2-tuple of int
            The shape of the 2D array.

        origin : 2-tuple of int, optional
            The ``(x, y)`` absolute pixel coordinates of the first
            element of the array.

        Returns
        -------
        slices_large : tuple of slices or `None`
            The slices selecting the overlap region in the array.

        slices_small : tuple of slices or `None`
            The slices selecting the overlap region in an array
            covering the bounding box.

        Both values are `None` if there is no overlap.
        """
        if len(shape) != 2:
            raise ValueError('input shape must have 2 elements.')

        ny, nx = shape
        x0 = self.ixmin - origin[0]
        y0 = self.iymin - origin[1]
        x1 = x0 + self.shape[1]
        y1 = y0 + self.shape[0]
        if x0 >= nx or y0 >= ny or x1 <= 0 or y1 <= 0:
            return None, None

        xlo, xhi = max(x0, 0), min(x1, nx)
        ylo, yhi = max(y0, 0), min(y1, ny)
        slices_large = (slice(ylo, yhi), slice(xlo, xhi))
        slices_small = (slice(ylo - y0, yhi - y0), slice(xlo - x0, xhi - x0))

        return slices_large, slices_small
