# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module defines fractional pixel weights of an aperture on the
pixel grid.
"""

import numpy as np

__all__ = ['ApertureMask']


class ApertureMask:
    """
    Fractional pixel weights of an aperture over its bounding box.

    Parameters
    ----------
    data : array_like
        The 2D array of weights, i.e., the fraction of each pixel
        within the aperture. Its shape must match ``bbox``.

    bbox : `~kronphot.aperture.BoundingBox`
        The bounding box of the weights in absolute pixel coordinates.
    """

    def __init__(self, data, bbox):
        data = np.asarray(data, dtype=float)
        if data.shape != bbox.shape:
            raise ValueError(f'mask data shape {data.shape} does not match '
                             f'the bounding box shape {bbox.shape}')
        self.data = data
        self.bbox = bbox

    def __repr__(self):
        return f'{self.__class__.__name__}(bbox={self.bbox!r})'

    def __array__(self, dtype=None, copy=None):
        return np.asarray(self.data, dtype=dtype)

    @property
    def shape(self):
        """
        The ``(ny, nx)`` shape of the weights.
        """
        return self.data.shape

    @property
    def area(self):
        """
        The sum of the weights.
        """
        return float(np.sum(self.data))

    def cutout(self, data, origin=(0, 0), fill_value=0.0):
        """
        Extract the region of an image covered by the mask bounding box.

        Parameters
        ----------
        data : array_like
            The 2D image.

        origin : 2-tuple of int, optional
            The ``(x, y)`` absolute pixel coordinates of the first
            element of ``data``.

        fill_value : float, optional
            The value of the cutout pixels that lie outside of ``data``.

        Returns
        -------
        cutout : `~numpy.ndarray` or `None`
            A new array of the same shape as the mask, or `None` if the
            mask and the image do not overlap.
        """
        data = np.asarray(data)
        if data.ndim != 2:
            raise ValueError('data must be a 2D array.')

        slices_large, slices_small = self.bbox.get_overlap_slices(
            data.shape, origin=origin)
        if slices_large is None:
            return None

        cutout = np.full(self.shape, fill_value, dtype=float)
        cutout[slices_small] = data[slices_large]

        return cutout

    def weighted_sum(self, data, origin=(0, 0), power=1):
        """
        Sum an image weighted by the mask.

        Pixels outside of the image and pixels with zero weight do not
        contribute, even if their value is not finite.

        Parameters
        ----------
        data : array_like
            The 2D image.

        origin : 2-tuple of int, optional
            The ``(x, y)`` absolute pixel coordinates of the first
            element of ``data``.

        power : int, optional
            The power applied to the weights. Use 2 to propagate a
            variance image.

        Returns
        -------
        total : float
            The weighted sum, which is 0 if there is no overlap.
        """
        cutout = self.cutout(data, origin=origin)
        if cutout is None:
            return 0.0

        use = self.data > 0
        return float(np.sum(self.data[use] ** power * cutout[use]))
