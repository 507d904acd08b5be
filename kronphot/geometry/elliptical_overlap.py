# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module provides tools to calculate the area of overlap between an
ellipse and a pixel grid.
"""

import numpy as np

__all__ = ['elliptical_overlap_grid']


def _subpixel_centers(vmin, vmax, npix, subpixels):
    """
    Return the centers of the subpixels along one axis of the grid.
    """
    step = (vmax - vmin) / npix
    offsets = (np.arange(subpixels) + 0.5) / subpixels
    edges = vmin + np.arange(npix) * step
    return (edges[:, np.newaxis] + offsets * step).ravel()


def elliptical_overlap_grid(xmin, xmax, ymin, ymax, nx, ny, rx, ry, theta,
                            subpixels=1):
    """
    Area of overlap between an ellipse and a pixel grid.

    The ellipse is centered on the origin. Each pixel is divided into
    ``subpixels**2`` subpixels, each of which is considered to be
    entirely in or out of the ellipse depending on whether its center
    is in or out of the ellipse.

    Parameters
    ----------
    xmin, xmax, ymin, ymax : float
        Extent of the grid in the x and y direction.

    nx, ny : int
        Grid dimensions.

    rx : float
        The semimajor axis of the ellipse.

    ry : float
        The semiminor axis of the ellipse.

    theta : float
        The position angle of the semimajor axis in radians
        (counterclockwise).

    subpixels : int, optional
        The resampling factor in each dimension. If ``subpixels=1``,
        the mask is 1 for pixels whose centers lie inside the ellipse
        and 0 otherwise.

    Returns
    -------
    frac : `~numpy.ndarray`
        2D array of shape ``(ny, nx)`` giving the fraction of each
        pixel covered by the ellipse.
    """
    if subpixels < 1:
        raise ValueError('subpixels must be a strictly positive integer')

    nx = int(nx)
    ny = int(ny)
    if nx == 0 or ny == 0 or rx == 0 or ry == 0:
        return np.zeros((ny, nx))

    x = _subpixel_centers(xmin, xmax, nx, subpixels)
    y = _subpixel_centers(ymin, ymax, ny, subpixels)
    xx, yy = np.meshgrid(x, y)

    cos_theta = np.cos(theta)
    sin_theta = np.sin(theta)
    u = xx * cos_theta + yy * sin_theta
    v = -xx * sin_theta + yy * cos_theta
    inside = (u / rx)**2 + (v / ry)**2 <= 1.0

    inside = inside.reshape(ny, subpixels, nx, subpixels)
    return inside.mean(axis=(1, 3))
