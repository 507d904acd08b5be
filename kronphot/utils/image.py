# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module defines a container for an image, its variance, and its
PSF in absolute pixel coordinates.
"""

import numpy as np
from astropy.nddata import NDData, StdDevUncertainty, VarianceUncertainty

from kronphot.aperture.bounding_box import BoundingBox

__all__ = ['PixelImage']


class PixelImage:
    """
    A 2D image with a per-pixel variance, an absolute pixel origin, and
    an optional PSF model.

    Pixel coordinates used throughout `kronphot` are absolute, i.e.,
    the pixel ``data[j, i]`` has the absolute ``(x, y)`` coordinates
    ``(origin[0] + i, origin[1] + j)``. Integer coordinates are pixel
    centers.

    Parameters
    ----------
    data : 2D array_like
        The image data. It should be background-subtracted.

    variance : 2D array_like, optional
        The per-pixel variance of ``data``. If `None`, a zero variance
        is used.

    origin : 2-tuple of int, optional
        The ``(x, y)`` absolute pixel coordinates of ``data[0, 0]``.

    psf : PSF model, optional
        A PSF model with ``compute_shape(position)`` and
        ``compute_image(position)`` methods (e.g.,
        `~kronphot.psf.GaussianPsf`).
    """

    def __init__(self, data, variance=None, origin=(0, 0), psf=None):
        data = np.asanyarray(data, dtype=float)
        if data.ndim != 2:
            raise ValueError('data must be a 2D array.')

        if variance is None:
            variance = np.zeros(data.shape)
        else:
            variance = np.asanyarray(variance, dtype=float)
            if variance.shape != data.shape:
                raise ValueError('data and variance must have the same '
                                 'shape.')

        if len(origin) != 2:
            raise ValueError('origin must have 2 elements.')
        for value in origin:
            if not isinstance(value, (int, np.integer)):
                raise TypeError('origin values must be integers')

        self.data = data
        self.variance = variance
        self.origin = (int(origin[0]), int(origin[1]))
        self.psf = psf

    def __repr__(self):
        return (f'<{self.__class__.__name__}(shape={self.shape}, '
                f'origin={self.origin}, psf={self.psf!r})>')

    @classmethod
    def from_nddata(cls, nddata, origin=(0, 0), psf=None):
        """
        Create a `PixelImage` from an `~astropy.nddata.NDData` object.

        The variance is taken from the ``uncertainty`` attribute, which
        must be a `~astropy.nddata.VarianceUncertainty` or
        `~astropy.nddata.StdDevUncertainty` (or `None`). Masked pixels
        are set to zero in both the data and the variance.

        Parameters
        ----------
        nddata : `~astropy.nddata.NDData`
            The input data.

        origin : 2-tuple of int, optional
            The ``(x, y)`` absolute pixel coordinates of the first
            pixel.

        psf : PSF model, optional
            The PSF model. If `None` and ``nddata.psf`` is set, an
            `~kronphot.psf.ImagePsf` is created from it.

        Returns
        -------
        image : `PixelImage`
            The image.
        """
        if not isinstance(nddata, NDData):
            raise TypeError('nddata must be an astropy NDData object')

        data = np.array(nddata.data, dtype=float)

        uncertainty = nddata.uncertainty
        if uncertainty is None:
            variance = np.zeros(data.shape)
        elif isinstance(uncertainty, VarianceUncertainty):
            variance = np.array(uncertainty.array, dtype=float)
        elif isinstance(uncertainty, StdDevUncertainty):
            variance = np.array(uncertainty.array, dtype=float)**2
        else:
            msg = ('nddata uncertainty must be a VarianceUncertainty or '
                   f'StdDevUncertainty, got {type(uncertainty).__name__}')
            raise TypeError(msg)

        if nddata.mask is not None:
            mask = np.asanyarray(nddata.mask, dtype=bool)
            data[mask] = 0.0
            variance[mask] = 0.0

        if psf is None and nddata.psf is not None:
            from kronphot.psf import ImagePsf

            psf = ImagePsf(nddata.psf)

        return cls(data, variance=variance, origin=origin, psf=psf)

    @property
    def shape(self):
        """
        The ``(ny, nx)`` shape of the image.
        """
        return self.data.shape

    @property
    def width(self):
        """
        The number of pixels along the x axis.
        """
        return self.data.shape[1]

    @property
    def height(self):
        """
        The number of pixels along the y axis.
        """
        return self.data.shape[0]

    @property
    def bbox(self):
        """
        The `~kronphot.aperture.BoundingBox` of the image in absolute
        pixel coordinates.
        """
        x0, y0 = self.origin
        return BoundingBox(x0, x0 + self.width, y0, y0 + self.height)

    def subimage(self, bbox, copy=False):
        """
        Return the part of the image within a bounding box.

        Parameters
        ----------
        bbox : `~kronphot.aperture.BoundingBox`
            The bounding box in absolute pixel coordinates. It must be
            contained in the image bounding box.

        copy : bool, optional
            If `True`, the returned image holds copies of the data and
            variance arrays. Otherwise it holds views.

        Returns
        -------
        result : `PixelImage`
            The sub-image, with its origin at the bounding box corner
            and the same PSF.
        """
        if not self.bbox.contains(bbox):
            msg = (f'{bbox!r} is not contained in the image bounding box '
                   f'{self.bbox!r}')
            raise ValueError(msg)

        slices_large, _ = bbox.get_overlap_slices(self.shape,
                                                  origin=self.origin)
        if slices_large is None:
            # empty bounding box
            data = np.zeros(bbox.shape)
            variance = np.zeros(bbox.shape)
        else:
            data = self.data[slices_large]
            variance = self.variance[slices_large]
            if copy:
                data = data.copy()
                variance = variance.copy()

        return self.__class__(data, variance=variance,
                              origin=(bbox.ixmin, bbox.iymin), psf=self.psf)
