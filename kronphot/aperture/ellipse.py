# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module defines the ellipse core (semi-axes and orientation) and
the elliptical aperture used for Kron photometry.
"""

import math

import numpy as np

from kronphot.aperture.attributes import (NonNegativeScalar, PixelPosition,
                                          ScalarAngleOrValue)
from kronphot.aperture.bounding_box import BoundingBox
from kronphot.aperture.mask import ApertureMask
from kronphot.geometry import elliptical_overlap_grid

__all__ = ['EllipseAxes', 'EllipticalAperture']


def _canonical_theta(theta):
    """
    Wrap an orientation angle (radians) into the range (-pi/2, pi/2].
    """
    theta = math.remainder(theta, math.pi)
    if theta <= -math.pi / 2.0:
        theta += math.pi
    return theta


class EllipseAxes:
    """
    The core of an ellipse: semimajor axis, semiminor axis, and
    orientation.

    The axes are stored such that ``a >= b``. If the input ``b`` is
    larger than ``a`` the axes are swapped and the orientation is
    rotated by 90 degrees. The orientation is always stored in radians
    in the range (-pi/2, pi/2].

    Instances are not modified in place; `scale`, `scale_to`, and
    `transform` return new objects.

    Parameters
    ----------
    a : float
        The semimajor axis in pixels.

    b : float
        The semiminor axis in pixels.

    theta : float or `~astropy.units.Quantity`, optional
        The rotation angle as an angular quantity
        (`~astropy.units.Quantity` or `~astropy.coordinates.Angle`) or
        value in radians (as a float) from the positive ``x`` axis. The
        rotation angle increases counterclockwise.

    Raises
    ------
    ValueError : `ValueError`
        If either axis is negative or not finite.

    Examples
    --------
    >>> from kronphot.aperture import EllipseAxes
    >>> axes = EllipseAxes(4.0, 1.0)
    >>> axes.determinant_radius
    2.0
    >>> axes.scale(2.0)
    EllipseAxes(a=8.0, b=2.0, theta=0.0)
    """

    a = NonNegativeScalar('The semimajor axis in pixels.')
    b = NonNegativeScalar('The semiminor axis in pixels.')
    theta = ScalarAngleOrValue('The counterclockwise rotation angle as an '
                               'angular Quantity or value in radians from '
                               'the positive x axis.')

    def __init__(self, a, b, theta=0.0):
        self.a = a
        self.b = b
        self.theta = theta

        if self.b > self.a:
            self.a, self.b = self.b, self.a
            self.theta = self.theta + math.pi / 2.0
        self.theta = _canonical_theta(self.theta)

    def __repr__(self):
        return (f'{self.__class__.__name__}(a={self.a}, b={self.b}, '
                f'theta={self.theta})')

    def __eq__(self, other):
        if not isinstance(other, EllipseAxes):
            return NotImplemented
        return ((self.a, self.b, self.theta)
                == (other.a, other.b, other.theta))

    def __hash__(self):
        return hash((self.a, self.b, self.theta))

    @property
    def determinant_radius(self):
        """
        The determinant radius, ``sqrt(a * b)``.
        """
        return math.sqrt(self.a * self.b)

    @property
    def axis_ratio(self):
        """
        The ``b / a`` axis ratio.

        `~numpy.nan` is returned for a zero-sized ellipse.
        """
        if self.a == 0:
            return np.nan
        return self.b / self.a

    @property
    def is_degenerate(self):
        """
        Whether the ellipse has a zero semiminor axis.
        """
        return self.b == 0

    def scale(self, factor):
        """
        Return a copy uniformly scaled by ``factor``.

        The orientation and axis ratio are unchanged.
        """
        return self.__class__(self.a * factor, self.b * factor, self.theta)

    def scale_to(self, radius):
        """
        Return a copy scaled to a given determinant radius.

        Parameters
        ----------
        radius : float
            The new determinant radius.

        Returns
        -------
        result : `EllipseAxes`
            The scaled ellipse.
        """
        current = self.determinant_radius
        if current == 0:
            raise ValueError('A zero-sized ellipse cannot be scaled to a '
                             'new radius')
        return self.scale(radius / current)

    def to_quadrupole(self):
        """
        Return the ``(ixx, iyy, ixy)`` second moments of the ellipse.
        """
        cos_theta = math.cos(self.theta)
        sin_theta = math.sin(self.theta)
        a2 = self.a**2
        b2 = self.b**2
        ixx = a2 * cos_theta**2 + b2 * sin_theta**2
        iyy = a2 * sin_theta**2 + b2 * cos_theta**2
        ixy = (a2 - b2) * cos_theta * sin_theta

        return ixx, iyy, ixy

    @classmethod
    def from_quadrupole(cls, ixx, iyy, ixy):
        """
        Create an `EllipseAxes` from second moments.

        Parameters
        ----------
        ixx, iyy, ixy : float
            The second moments.

        Returns
        -------
        result : `EllipseAxes`
            The ellipse whose semi-axes are the square roots of the
            eigenvalues of the moment matrix.
        """
        xx_p_yy = ixx + iyy
        xx_m_yy = ixx - iyy
        t = math.hypot(xx_m_yy, 2.0 * ixy)
        a = math.sqrt(max(0.5 * (xx_p_yy + t), 0.0))
        b = math.sqrt(max(0.5 * (xx_p_yy - t), 0.0))
        theta = 0.5 * math.atan2(2.0 * ixy, xx_m_yy)

        return cls(a, b, theta)

    def transform(self, matrix):
        """
        Return the ellipse mapped through a 2x2 linear transformation.

        Parameters
        ----------
        matrix : (2, 2) array_like
            The linear transformation matrix, acting on ``(x, y)``
            column vectors.

        Returns
        -------
        result : `EllipseAxes`
            The transformed ellipse.
        """
        matrix = np.asarray(matrix, dtype=float)
        if matrix.shape != (2, 2):
            raise ValueError('matrix must be a 2x2 array')

        ixx, iyy, ixy = self.to_quadrupole()
        quad = np.array([[ixx, ixy], [ixy, iyy]])
        quad = matrix @ quad @ matrix.T

        return self.from_quadrupole(quad[0, 0], quad[1, 1], quad[0, 1])

    @property
    def extents(self):
        """
        Half of the bounding box extents ``(x_extent, y_extent)`` of
        the ellipse.
        """
        cos_theta = math.cos(self.theta)
        sin_theta = math.sin(self.theta)
        semimajor_x = self.a * cos_theta
        semimajor_y = self.a * sin_theta
        semiminor_x = self.b * -sin_theta
        semiminor_y = self.b * cos_theta
        x_extent = math.sqrt(semimajor_x**2 + semiminor_x**2)
        y_extent = math.sqrt(semimajor_y**2 + semiminor_y**2)

        return x_extent, y_extent


class EllipticalAperture:
    """
    An elliptical aperture defined in pixel coordinates.

    The aperture is a single ``(x, y)`` position and an `EllipseAxes`
    core. Pixel coordinates are absolute (i.e., they include the
    origin of the image on which the aperture is used).

    Parameters
    ----------
    position : array_like
        The ``(x, y)`` pixel coordinates of the aperture center.

    a : float
        The semimajor axis of the ellipse in pixels.

    b : float
        The semiminor axis of the ellipse in pixels.

    theta : float or `~astropy.units.Quantity`, optional
        The rotation angle as an angular quantity or value in radians
        (as a float) from the positive ``x`` axis. The rotation angle
        increases counterclockwise.

    Examples
    --------
    >>> from astropy.coordinates import Angle
    >>> from kronphot.aperture import EllipticalAperture
    >>> aper = EllipticalAperture((10.0, 20.0), 5.0, 3.0)
    >>> aper = EllipticalAperture((10.0, 20.0), 5.0, 3.0,
    ...                           theta=Angle(80, 'deg'))
    """

    _params = ('position', 'a', 'b', 'theta')
    position = PixelPosition('The center pixel position.')

    def __init__(self, position, a, b, theta=0.0):
        self.position = position
        self.axes = EllipseAxes(a, b, theta=theta)

    @classmethod
    def from_axes(cls, position, axes):
        """
        Create an aperture from a position and an `EllipseAxes`.
        """
        return cls(position, axes.a, axes.b, theta=axes.theta)

    def __repr__(self):
        prefix = f'{self.__class__.__name__}'
        cls_info = []
        for param in self._params:
            value = getattr(self, param)
            if param == 'position':
                value = np.array2string(value, separator=', ')
            cls_info.append(f'{param}={value}')
        cls_info = ', '.join(cls_info)
        return f'<{prefix}({cls_info})>'

    def __eq__(self, other):
        if not isinstance(other, EllipticalAperture):
            return NotImplemented
        return (np.array_equal(self.position, other.position)
                and self.axes == other.axes)

    def __hash__(self):
        return hash((tuple(self.position), self.axes))

    @property
    def a(self):
        """
        The semimajor axis in pixels.
        """
        return self.axes.a

    @property
    def b(self):
        """
        The semiminor axis in pixels.
        """
        return self.axes.b

    @property
    def theta(self):
        """
        The rotation angle in radians.
        """
        return self.axes.theta

    @property
    def determinant_radius(self):
        """
        The determinant radius ``sqrt(a * b)`` of the aperture.
        """
        return self.axes.determinant_radius

    @property
    def area(self):
        """
        The exact geometric area of the aperture shape.
        """
        return math.pi * self.a * self.b

    @property
    def bbox(self):
        """
        The minimal bounding box for the aperture.
        """
        x_delta, y_delta = self.axes.extents
        xpos, ypos = self.position

        return BoundingBox.from_float(xpos - x_delta, xpos + x_delta,
                                      ypos - y_delta, ypos + y_delta)

    @property
    def _centered_edges(self):
        """
        The ``(xmin, xmax, ymin, ymax)`` pixel edges of the bounding box
        after recentering the aperture at the origin.
        """
        bbox = self.bbox
        xpos, ypos = self.position
        xmin = bbox.ixmin - 0.5 - xpos
        xmax = bbox.ixmax - 0.5 - xpos
        ymin = bbox.iymin - 0.5 - ypos
        ymax = bbox.iymax - 0.5 - ypos

        return xmin, xmax, ymin, ymax

    def scale(self, factor):
        """
        Return a copy with the axes scaled by ``factor``.
        """
        return self.from_axes(self.position, self.axes.scale(factor))

    def scale_to(self, radius):
        """
        Return a copy with the axes scaled to the given determinant
        radius.
        """
        return self.from_axes(self.position, self.axes.scale_to(radius))

    def transform(self, affine):
        """
        Return the aperture mapped to another pixel frame.

        Parameters
        ----------
        affine : `~astropy.modeling.models.AffineTransformation2D`
            The affine transformation from this aperture's frame to the
            output frame.

        Returns
        -------
        result : `EllipticalAperture`
            The transformed aperture.
        """
        xpos, ypos = affine(*self.position)
        axes = self.axes.transform(affine.matrix.value)
        return self.from_axes((float(xpos), float(ypos)), axes)

    def to_footprint(self, clip_bbox=None):
        """
        Return the `~kronphot.aperture.Footprint` of pixels whose
        centers lie inside the aperture.

        Parameters
        ----------
        clip_bbox : `~kronphot.aperture.BoundingBox`, optional
            If input, the footprint is clipped to this bounding box
            (e.g., the bounding box of an image).

        Returns
        -------
        footprint : `~kronphot.aperture.Footprint`
            The aperture footprint.
        """
        from kronphot.aperture.footprint import Footprint

        return Footprint.from_aperture(self, clip_bbox=clip_bbox)

    def to_mask(self, subpixels=16):
        """
        Return a mask of the fractional overlap of the aperture with
        the pixel grid.

        Each pixel is divided into ``subpixels**2`` subpixels, each of
        which is considered to be entirely in or out of the aperture
        depending on whether its center is in or out of the aperture.

        Parameters
        ----------
        subpixels : int, optional
            The resampling factor in each dimension.

        Returns
        -------
        mask : `~kronphot.aperture.ApertureMask`
            A mask for the aperture.
        """
        if not isinstance(subpixels, int) or subpixels <= 0:
            raise ValueError('subpixels must be a strictly positive integer')

        bbox = self.bbox
        edges = self._centered_edges
        ny, nx = bbox.shape
        mask = elliptical_overlap_grid(edges[0], edges[1], edges[2],
                                       edges[3], nx, ny, self.a, self.b,
                                       self.theta, subpixels)

        return ApertureMask(mask, bbox)
