# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module provides tools to compute the Kron radius and the Kron
aperture flux of the PSF.
"""

import math

import numpy as np

from kronphot.aperture.ellipse import EllipticalAperture
from kronphot.aperture.photometry import integrate_aperture
from kronphot.utils.image import PixelImage

__all__ = ['psf_flux_factor', 'psf_kron_radius']

PSF_IMAGE_PADDING = 5


def psf_kron_radius(psf, center, smoothing_sigma=0.0):
    r"""
    Compute the Kron radius of the PSF.

    For a Gaussian :math:`N(0, \sigma^2)` the Kron radius is
    :math:`\sqrt{\pi / 2} \sigma`. The PSF width is taken to be the
    determinant radius of the PSF shape, combined in quadrature with the
    smoothing applied to the image.

    Parameters
    ----------
    psf : PSF model
        The PSF. Must not be `None`.

    center : tuple of float
        The ``(x, y)`` position at which to evaluate the PSF.

    smoothing_sigma : float, optional
        The standard deviation of the Gaussian smoothing applied to the
        image. Negative values are treated as zero.

    Returns
    -------
    radius : float
        The Kron radius of the PSF.
    """
    radius = psf.compute_shape(center).determinant_radius
    return math.sqrt(math.pi / 2.0) * math.hypot(radius,
                                                 max(0.0, smoothing_sigma))


def psf_flux_factor(psf, center, kron_radius, max_sinc_radius=10.0,
                    subpixels=16):
    """
    Compute the fraction of the PSF flux within a circular Kron
    aperture.

    The PSF image is padded by 5 pixels on each side and the flux is
    measured in a circular aperture of radius ``kron_radius`` centered
    on the central pixel of the padded image.

    Parameters
    ----------
    psf : PSF model or `None`
        The PSF. If `None`, 1.0 is returned.

    center : tuple of float
        The ``(x, y)`` position at which to evaluate the PSF.

    kron_radius : float
        The radius of the circular aperture.

    max_sinc_radius : float, optional
        The largest radius for which fractional pixel weights are used.

    subpixels : int, optional
        The resampling factor of the fractional pixel weights.

    Returns
    -------
    factor : float
        The PSF flux within the aperture.
    """
    if psf is None:
        return 1.0

    psf_image = np.pad(psf.compute_image(center), PSF_IMAGE_PADDING,
                       mode='constant', constant_values=0.0)
    ny, nx = psf_image.shape
    position = (int(0.5 * (nx - 1)), int(0.5 * (ny - 1)))
    aperture = EllipticalAperture(position, kron_radius, kron_radius)

    flux, _ = integrate_aperture(PixelImage(psf_image), aperture,
                                 max_sinc_radius, subpixels=subpixels)
    return flux
