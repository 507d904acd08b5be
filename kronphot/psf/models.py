# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module defines PSF models that can be attached to a
`~kronphot.utils.PixelImage`.

A PSF model provides two methods:

* ``compute_shape(position)``: the `~kronphot.aperture.EllipseAxes`
  defined by the second moments of the PSF at the given position.
* ``compute_image(position)``: a 2D image of the PSF, normalized to a
  unit sum and centered on its central pixel.
"""

import math

import numpy as np
from astropy.modeling.models import Gaussian2D
from astropy.utils import lazyproperty

from kronphot.aperture.ellipse import EllipseAxes
from kronphot.utils._moments import _second_moments

__all__ = ['GaussianPsf', 'ImagePsf']

GAUSSIAN_FWHM_TO_SIGMA = 1.0 / (2.0 * math.sqrt(2.0 * math.log(2.0)))


class GaussianPsf:
    r"""
    A spatially constant 2D Gaussian PSF.

    The PSF image is evaluated by sampling an
    `~astropy.modeling.models.Gaussian2D` model at the pixel centers.

    Parameters
    ----------
    x_stddev : float
        The standard deviation of the Gaussian along the x axis (before
        rotation) in pixels.

    y_stddev : float, optional
        The standard deviation of the Gaussian along the y axis (before
        rotation) in pixels. If `None`, a circular Gaussian with
        ``y_stddev = x_stddev`` is used.

    theta : float, optional
        The counterclockwise rotation angle in radians.

    size : int, optional
        The size (in pixels) along each axis of the rendered PSF image.
        Must be odd. If `None`, the size is ``2 * ceil(5 * sigma) + 1``
        where ``sigma`` is the larger standard deviation.

    Notes
    -----
    The second moments of a Gaussian are its variances, so
    `compute_shape` returns ``EllipseAxes(x_stddev, y_stddev, theta)``
    and the determinant radius of the shape is :math:`\sqrt{\sigma_{x}
    \sigma_{y}}`.
    """

    def __init__(self, x_stddev, y_stddev=None, theta=0.0, size=None):
        if y_stddev is None:
            y_stddev = x_stddev

        for value in (x_stddev, y_stddev):
            if not np.isfinite(value) or value <= 0:
                raise ValueError('The PSF standard deviations must be '
                                 'positive and finite')

        if size is None:
            size = 2 * math.ceil(5.0 * max(x_stddev, y_stddev)) + 1
        if size <= 0 or size % 2 == 0:
            raise ValueError('size must be a positive odd integer')

        self.x_stddev = float(x_stddev)
        self.y_stddev = float(y_stddev)
        self.theta = float(theta)
        self.size = int(size)

    def __repr__(self):
        return (f'{self.__class__.__name__}(x_stddev={self.x_stddev}, '
                f'y_stddev={self.y_stddev}, theta={self.theta}, '
                f'size={self.size})')

    @classmethod
    def from_fwhm(cls, fwhm, **kwargs):
        """
        Create a circular Gaussian PSF from its full width at half
        maximum (FWHM) in pixels.
        """
        return cls(fwhm * GAUSSIAN_FWHM_TO_SIGMA, **kwargs)

    @lazyproperty
    def model(self):
        """
        The `~astropy.modeling.models.Gaussian2D` model of the PSF,
        centered at the origin with a unit integral.
        """
        amplitude = 1.0 / (2.0 * np.pi * self.x_stddev * self.y_stddev)
        return Gaussian2D(amplitude=amplitude, x_mean=0.0, y_mean=0.0,
                          x_stddev=self.x_stddev, y_stddev=self.y_stddev,
                          theta=self.theta)

    def compute_shape(self, position):
        """
        Return the shape of the PSF.

        Parameters
        ----------
        position : tuple of float
            The ``(x, y)`` position. The PSF is spatially constant, so
            the position is not used.

        Returns
        -------
        shape : `~kronphot.aperture.EllipseAxes`
            The PSF shape.
        """
        return EllipseAxes(self.x_stddev, self.y_stddev, theta=self.theta)

    def compute_image(self, position):
        """
        Return an image of the PSF normalized to a unit sum.

        Parameters
        ----------
        position : tuple of float
            The ``(x, y)`` position. The PSF is spatially constant, so
            the position is not used.

        Returns
        -------
        image : 2D `~numpy.ndarray`
            The PSF image, of shape ``(size, size)``, centered on the
            central pixel.
        """
        half = self.size // 2
        yy, xx = np.mgrid[-half:half + 1, -half:half + 1]
        image = self.model(xx, yy)
        return image / np.sum(image)


class ImagePsf:
    """
    A spatially constant PSF defined by a sampled image.

    Parameters
    ----------
    data : 2D array_like
        The PSF image. It is normalized to a unit sum. The PSF center
        is assumed to be at the central pixel.
    """

    def __init__(self, data):
        data = np.array(data, dtype=float)
        if data.ndim != 2:
            raise ValueError('The PSF image must be a 2D array')

        total = np.sum(data)
        if not np.isfinite(total) or total <= 0:
            raise ValueError('The PSF image must have a positive finite '
                             'sum')

        self.data = data / total

    def __repr__(self):
        return f'{self.__class__.__name__}(shape={self.data.shape})'

    @lazyproperty
    def _shape(self):
        _, moments = _second_moments(self.data)
        return EllipseAxes.from_quadrupole(*moments)

    def compute_shape(self, position):
        """
        Return the shape of the PSF, defined by the second moments of
        the PSF image.

        Parameters
        ----------
        position : tuple of float
            The ``(x, y)`` position. The PSF is spatially constant, so
            the position is not used.

        Returns
        -------
        shape : `~kronphot.aperture.EllipseAxes`
            The PSF shape.
        """
        return self._shape

    def compute_image(self, position):
        """
        Return a copy of the normalized PSF image.
        """
        return self.data.copy()
