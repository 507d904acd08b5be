# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module provides the first elliptical radial moment used to
estimate the Kron radius.
"""

import math
from dataclasses import dataclass

import numpy as np

from kronphot.utils.exceptions import KronEdgeError

__all__ = ['EllipticalMoment', 'estimate_mean_radius']

# the mean radius of a uniformly illuminated square pixel about its center
CENTER_PIXEL_MEAN_RADIUS = 0.38259771140356325


@dataclass(frozen=True)
class EllipticalMoment:
    """
    The flux-weighted sums of the elliptical radius over a footprint.

    Attributes
    ----------
    sum_flux : float
        The sum of the pixel values.

    sum_radius_flux : float
        The sum of the pixel values weighted by their elliptical
        radius.
    """

    sum_flux: float
    sum_radius_flux: float

    @property
    def mean_radius(self):
        """
        The flux-weighted mean elliptical radius.

        `~numpy.nan` is returned if the flux sum is zero.
        """
        if self.sum_flux == 0:
            return np.nan
        return self.sum_radius_flux / self.sum_flux

    @property
    def is_valid(self):
        """
        Whether both sums are strictly positive.

        NaN sums are not valid.
        """
        return bool(self.sum_flux > 0 and self.sum_radius_flux > 0)


def estimate_mean_radius(image, footprint, center, axis_ratio, theta):
    r"""
    Compute the flux-weighted mean elliptical radius of the pixels in a
    footprint.

    For each pixel, the offset from ``center`` is rotated by
    ``-theta`` into ``(u, v)`` and the elliptical radius is :math:`r =
    \sqrt{u^2 + (v \cdot q)^2}` where :math:`q` is ``axis_ratio``
    (major over minor axis). The radius is therefore measured along
    the major axis.

    Pixels within half a pixel of ``center`` have their radius
    combined in quadrature with the mean radius of a square pixel about
    its center, interpolated linearly between a centered position and
    a corner position.

    Parameters
    ----------
    image : `~kronphot.utils.PixelImage`
        The image.

    footprint : `~kronphot.aperture.Footprint`
        The pixels over which the moment is computed.

    center : tuple of float
        The ``(x, y)`` center of the ellipse.

    axis_ratio : float
        The ratio of the semimajor to the semiminor axis (``a / b``).

    theta : float
        The orientation of the major axis in radians.

    Returns
    -------
    moment : `EllipticalMoment`
        The moment sums.

    Raises
    ------
    KronEdgeError
        If the footprint bounding box is not contained in the image.
    """
    if not image.bbox.contains(footprint.bbox):
        msg = (f'Footprint {footprint.bbox!r} does not fit in image '
               f'{image.bbox!r}')
        raise KronEdgeError(msg)

    data, _, xidx, yidx = footprint.get_values(image)

    dx = xidx - center[0]
    dy = yidx - center[1]
    cos_theta = math.cos(theta)
    sin_theta = math.sin(theta)
    u = dx * cos_theta + dy * sin_theta
    v = -dx * sin_theta + dy * cos_theta
    radius = np.hypot(u, v * axis_ratio)

    offset = np.hypot(dx, dy)
    near = offset < 0.5
    radius[near] = np.hypot(radius[near],
                            CENTER_PIXEL_MEAN_RADIUS
                            * (1.0 + offset[near] / math.sqrt(2.0)))

    return EllipticalMoment(float(np.sum(data)),
                            float(np.sum(radius * data)))
