# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module provides the iterative determination of the Kron aperture.
"""

import math

from astropy import log

from kronphot.aperture.ellipse import EllipticalAperture
from kronphot.kron.moments import estimate_mean_radius
from kronphot.utils._convolution import grow_bbox_for_kernel, smooth_gaussian
from kronphot.utils.exceptions import (BadKronIntegralError, KronEdgeError,
                                       KronError)

__all__ = ['determine_kron_aperture']


def _measurement_image(image, footprint, smoothing_sigma):
    """
    Return the (optionally smoothed) part of the image needed to
    compute the radial moment over a footprint.
    """
    smooth = smoothing_sigma > 0
    bbox = footprint.bbox
    if smooth:
        bbox = grow_bbox_for_kernel(bbox, smoothing_sigma)

    bbox = bbox.intersection(image.bbox)
    if bbox is None:
        msg = (f'Footprint {footprint.bbox!r} does not overlap image '
               f'{image.bbox!r}')
        raise KronEdgeError(msg)

    subimage = image.subimage(bbox, copy=smooth)
    if smooth:
        subimage = smooth_gaussian(subimage, smoothing_sigma)

    return subimage


def determine_kron_aperture(image, axes, center, config):
    """
    Iteratively determine the Kron aperture of a source.

    At each iteration the current ellipse is grown by
    ``config.n_sigma_for_radius`` and the flux-weighted mean elliptical
    radius of the (optionally smoothed) image within the grown ellipse
    is computed. The new radius estimate is that mean radius scaled by
    ``sqrt(b / a)``. The iteration stops when the estimate no longer
    increases, when ``config.n_iter_for_radius`` iterations have been
    done, or when the grown ellipse leaves the image after the first
    iteration.

    Parameters
    ----------
    image : `~kronphot.utils.PixelImage`
        The image.

    axes : `~kronphot.aperture.EllipseAxes`
        The starting ellipse. Its determinant radius is the initial
        radius estimate; its axis ratio and orientation are kept.

    center : tuple of float
        The ``(x, y)`` center of the source.

    config : `~kronphot.kron.KronConfig`
        The measurement configuration.

    Returns
    -------
    aperture : `~kronphot.aperture.EllipticalAperture`
        The Kron aperture, whose determinant radius is the Kron radius.

    radius_for_radius : float
        The determinant radius of the last grown ellipse used to
        compute the Kron radius (`~numpy.nan` if no iteration was
        done).

    Raises
    ------
    KronEdgeError
        If the grown ellipse does not fit in the image at the first
        iteration.

    BadKronIntegralError
        If the radial moment sums are not positive.

    KronError
        If the starting ellipse is degenerate.
    """
    if axes.is_degenerate:
        msg = f'Degenerate ellipse {axes!r} cannot define a Kron aperture'
        raise KronError(msg)

    radius0 = axes.determinant_radius
    radius_for_radius = math.nan
    position = f'({center[0]:.2f}, {center[1]:.2f})'

    for i in range(config.n_iter_for_radius):
        grown = axes.scale(config.n_sigma_for_radius)
        radius_for_radius = grown.determinant_radius

        footprint = EllipticalAperture.from_axes(center, grown).to_footprint()
        try:
            subimage = _measurement_image(image, footprint,
                                          config.smoothing_sigma)
            moment = estimate_mean_radius(subimage, footprint, center,
                                          grown.a / grown.b, grown.theta)
        except KronEdgeError as exc:
            if i == 0:
                exc.add_context('Determining Kron aperture')
                raise
            log.debug(f'Kron radius iteration {i} at {position}: '
                      'footprint off the image edge; keeping radius '
                      f'{radius0:.4f}')
            break

        if not moment.is_valid:
            msg = (f'Bad integral defining Kron radius (sum={moment.sum_flux}'
                   f', sum_radius={moment.sum_radius_flux})')
            raise BadKronIntegralError(msg)

        radius = moment.mean_radius * math.sqrt(grown.b / grown.a)
        log.debug(f'Kron radius iteration {i} at {position}: '
                  f'radius_for_radius={radius_for_radius:.4f}, '
                  f'radius={radius:.4f}')
        if radius <= radius0:
            break

        radius0 = radius
        axes = axes.scale_to(radius0)

    return EllipticalAperture.from_axes(center, axes), radius_for_radius
