# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module provides tools for smoothing images with a Gaussian kernel.
"""

import numpy as np
from astropy.convolution import Gaussian1DKernel

__all__ = ['gaussian_kernel_halfwidth', 'grow_bbox_for_kernel',
           'smooth_gaussian']


def gaussian_kernel_halfwidth(sigma):
    """
    Return the half-width in pixels of the smoothing kernel for a
    Gaussian of the given standard deviation.

    The full kernel size is ``2 * halfwidth + 1`` with ``halfwidth =
    int(2 * sigma)``.
    """
    return int(2.0 * sigma)


def _gaussian_kernel_1d(sigma):
    """
    Return the normalized 1D Gaussian kernel array.
    """
    size = 2 * gaussian_kernel_halfwidth(sigma) + 1
    kernel = Gaussian1DKernel(sigma, x_size=size)
    kernel.normalize()
    return kernel.array


def grow_bbox_for_kernel(bbox, sigma):
    """
    Grow a bounding box by the half-width of the Gaussian smoothing
    kernel.

    Parameters
    ----------
    bbox : `~kronphot.aperture.BoundingBox`
        The bounding box.

    sigma : float
        The standard deviation of the Gaussian kernel in pixels.

    Returns
    -------
    result : `~kronphot.aperture.BoundingBox`
        The grown bounding box.
    """
    return bbox.grow(gaussian_kernel_halfwidth(sigma))


def smooth_gaussian(image, sigma):
    """
    Smooth an image with a normalized, separable Gaussian kernel.

    The kernel size is ``2 * int(2 * sigma) + 1`` pixels. Pixels closer
    to the image edge than the kernel half-width cannot be fully
    convolved and are set to NaN. Only the image data are smoothed;
    the variance is copied unchanged.

    Parameters
    ----------
    image : `~kronphot.utils.PixelImage`
        The image to smooth. It is not modified.

    sigma : float
        The standard deviation of the Gaussian kernel in pixels. Must
        be positive.

    Returns
    -------
    result : `~kronphot.utils.PixelImage`
        A new image holding the smoothed data.
    """
    from scipy import ndimage

    if not np.isfinite(sigma) or sigma <= 0:
        raise ValueError('sigma must be a positive finite number')

    kernel = _gaussian_kernel_1d(sigma)
    data = ndimage.convolve1d(image.data, kernel, axis=1, mode='constant',
                              cval=0.0)
    data = ndimage.convolve1d(data, kernel, axis=0, mode='constant',
                              cval=0.0)

    halfwidth = gaussian_kernel_halfwidth(sigma)
    if halfwidth > 0:
        data[:halfwidth, :] = np.nan
        data[-halfwidth:, :] = np.nan
        data[:, :halfwidth] = np.nan
        data[:, -halfwidth:] = np.nan

    return image.__class__(data, variance=image.variance.copy(),
                           origin=image.origin, psf=image.psf)
