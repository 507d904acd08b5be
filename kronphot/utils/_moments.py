# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module provides tools for calculating flux-weighted image moments.
"""

import numpy as np

__all__ = ['_moments_central', '_second_moments']


def _moments_central(data, center, order=2):
    """
    Calculate the central image moments up to the specified order.

    Parameters
    ----------
    data : 2D array_like
        The input 2D array.

    center : tuple of two floats
        The ``(x, y)`` position about which the moments are computed.

    order : int, optional
        The maximum order of the moments to calculate.

    Returns
    -------
    moments : 2D `~numpy.ndarray`
        The moments, where ``moments[q, p]`` is the sum of ``data * (x -
        xc)**p * (y - yc)**q``.
    """
    data = np.asarray(data, dtype=float)
    if data.ndim != 2:
        raise ValueError('data must be a 2D array.')

    powers = np.arange(order + 1)
    dy = np.arange(data.shape[0]) - center[1]
    dx = np.arange(data.shape[1]) - center[0]
    ypowers = dy[:, np.newaxis] ** powers
    xpowers = dx[:, np.newaxis] ** powers

    return ypowers.T @ data @ xpowers


def _second_moments(data):
    """
    Calculate the flux-normalized second central moments of an image.

    Parameters
    ----------
    data : 2D array_like
        The input 2D array.

    Returns
    -------
    centroid : tuple of float
        The ``(x, y)`` center of mass of the image.

    moments : tuple of float
        The ``(ixx, iyy, ixy)`` normalized second central moments.
    """
    raw = _moments_central(data, center=(0.0, 0.0), order=1)
    total = raw[0, 0]
    if not total > 0:
        raise ValueError('The image must have a positive total flux to '
                         'compute its moments.')

    centroid = (raw[0, 1] / total, raw[1, 0] / total)
    mu = _moments_central(data, center=centroid, order=2) / total

    return centroid, (mu[0, 2], mu[2, 0], mu[1, 1])
