# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module defines tools to integrate the flux and variance of an
image within an elliptical aperture.
"""

import math

import numpy as np

from kronphot.utils.exceptions import KronEdgeError

__all__ = ['integrate_aperture', 'subpixel_aperture_flux']


def subpixel_aperture_flux(image, aperture, subpixels=16):
    """
    Measure the flux and variance within an aperture using fractional
    pixel weights.

    The fractional overlap of each pixel with the aperture is estimated
    by subsampling each pixel into ``subpixels**2`` subpixels. The flux
    is the weighted sum of the data and the variance is the sum of the
    variance weighted by the squared overlap.

    Parameters
    ----------
    image : `~kronphot.utils.PixelImage`
        The image.

    aperture : `~kronphot.aperture.EllipticalAperture`
        The aperture.

    subpixels : int, optional
        The resampling factor in each dimension.

    Returns
    -------
    flux, variance : float
        The aperture flux and its variance.

    Raises
    ------
    KronEdgeError
        If the aperture bounding box is not fully contained in the
        image.
    """
    mask = aperture.to_mask(subpixels=subpixels)
    if not image.bbox.contains(mask.bbox):
        msg = (f'Aperture bounding box {mask.bbox!r} is not contained in '
               f'the image {image.bbox!r}')
        raise KronEdgeError(msg)

    flux = mask.weighted_sum(image.data, origin=image.origin)
    flux_var = mask.weighted_sum(image.variance, origin=image.origin,
                                 power=2)

    return flux, flux_var


def integrate_aperture(image, aperture, max_sinc_radius, subpixels=16):
    """
    Integrate the flux of an image within an elliptical aperture.

    Large apertures (semiminor axis larger than ``max_sinc_radius``)
    are measured by a direct sum over the whole pixels whose centers
    lie inside the aperture, clipped to the image. Smaller apertures
    use fractional pixel weights (`subpixel_aperture_flux`), which
    require the aperture to be contained in the image.

    Parameters
    ----------
    image : `~kronphot.utils.PixelImage`
        The image.

    aperture : `~kronphot.aperture.EllipticalAperture`
        The aperture.

    max_sinc_radius : float
        The largest semiminor axis for which the fractional pixel
        integrator is used.

    subpixels : int, optional
        The resampling factor of the fractional pixel integrator.

    Returns
    -------
    flux, flux_err : float
        The aperture flux and its 1-sigma uncertainty.

    Raises
    ------
    KronEdgeError
        If a small aperture extends beyond the edge of the image.
    """
    if aperture.b > max_sinc_radius:
        footprint = aperture.to_footprint(clip_bbox=image.bbox)
        data, variance, _, _ = footprint.get_values(image)
        return float(np.sum(data)), float(np.sqrt(np.sum(variance)))

    try:
        flux, flux_var = subpixel_aperture_flux(image, aperture,
                                                subpixels=subpixels)
    except KronEdgeError as exc:
        xpos, ypos = aperture.position
        exc.add_context(
            f'Measuring Kron flux for object at ({xpos:.3f}, {ypos:.3f}); '
            f'aperture radius {aperture.a:.3f},{aperture.b:.3f} theta '
            f'{math.degrees(aperture.theta):.3f} deg')
        raise

    return flux, float(np.sqrt(flux_var))
