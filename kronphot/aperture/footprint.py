# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module defines a class for pixel footprints: the set of whole
pixels belonging to an aperture or a detected source.
"""

import math

import numpy as np
from astropy.utils import lazyproperty

from kronphot.aperture.bounding_box import BoundingBox
from kronphot.aperture.ellipse import EllipseAxes

__all__ = ['Footprint']


class Footprint:
    """
    A set of whole pixels defined by a boolean mask within a bounding
    box.

    Parameters
    ----------
    mask : array_like (bool)
        A 2D boolean array where `True` values indicate pixels that
        belong to the footprint.

    bbox : `~kronphot.aperture.BoundingBox`
        The bounding box of the mask in absolute pixel coordinates.
        For an empty footprint this may be an empty bounding box.
    """

    def __init__(self, mask, bbox):
        mask = np.asanyarray(mask, dtype=bool)
        if mask.shape != bbox.shape:
            raise ValueError('mask and bounding box must have the same '
                             'shape')
        self.mask = mask
        self.bbox = bbox

    def __repr__(self):
        return (f'<{self.__class__.__name__}(npixels={self.npixels}, '
                f'bbox={self.bbox!r})>')

    @classmethod
    def from_aperture(cls, aperture, clip_bbox=None):
        """
        Create the footprint of the pixels whose centers lie inside an
        elliptical aperture.

        The returned bounding box is the tight bounding box of the
        included pixels.

        Parameters
        ----------
        aperture : `~kronphot.aperture.EllipticalAperture`
            The aperture.

        clip_bbox : `~kronphot.aperture.BoundingBox`, optional
            If input, only pixels within this bounding box are
            included.

        Returns
        -------
        footprint : `Footprint`
            The aperture footprint.
        """
        bbox = aperture.bbox
        if clip_bbox is not None:
            bbox = bbox.intersection(clip_bbox)

        if bbox is None or bbox.is_empty or aperture.b == 0:
            return cls._empty(aperture.position)

        xpos, ypos = aperture.position
        yidx, xidx = np.mgrid[bbox.iymin:bbox.iymax, bbox.ixmin:bbox.ixmax]
        dx = xidx - xpos
        dy = yidx - ypos
        cos_theta = math.cos(aperture.theta)
        sin_theta = math.sin(aperture.theta)
        u = dx * cos_theta + dy * sin_theta
        v = -dx * sin_theta + dy * cos_theta
        inside = (u / aperture.a)**2 + (v / aperture.b)**2 <= 1.0

        return cls._from_full_mask(inside, bbox, aperture.position)

    @classmethod
    def _empty(cls, position):
        ix = int(round(float(position[0])))
        iy = int(round(float(position[1])))
        return cls(np.zeros((0, 0), dtype=bool), BoundingBox(ix, ix, iy, iy))

    @classmethod
    def _from_full_mask(cls, mask, bbox, position):
        """
        Trim a mask to the tight bounding box of its `True` values.
        """
        rows = np.nonzero(np.any(mask, axis=1))[0]
        if rows.size == 0:
            return cls._empty(position)
        cols = np.nonzero(np.any(mask, axis=0))[0]

        y0, y1 = rows[0], rows[-1] + 1
        x0, x1 = cols[0], cols[-1] + 1
        tight = BoundingBox(bbox.ixmin + x0, bbox.ixmin + x1,
                            bbox.iymin + y0, bbox.iymin + y1)

        return cls(mask[y0:y1, x0:x1], tight)

    @property
    def npixels(self):
        """
        The number of pixels in the footprint.
        """
        return int(np.count_nonzero(self.mask))

    @property
    def is_empty(self):
        """
        Whether the footprint contains no pixels.
        """
        return self.npixels == 0

    @lazyproperty
    def _pixel_coords(self):
        """
        The absolute ``(x, y)`` pixel coordinates of the footprint
        pixels.
        """
        yidx, xidx = np.nonzero(self.mask)
        return xidx + self.bbox.ixmin, yidx + self.bbox.iymin

    def get_values(self, image):
        """
        Get the pixel values of the footprint from an image.

        Parameters
        ----------
        image : `~kronphot.utils.PixelImage`
            The image from which to extract the values.

        Returns
        -------
        data, variance : 1D `~numpy.ndarray`
            The data and variance values of the footprint pixels.

        x, y : 1D `~numpy.ndarray`
            The absolute pixel coordinates of the footprint pixels.

        Raises
        ------
        ValueError
            If the footprint is not contained in the image.
        """
        if self.is_empty:
            empty = np.array([], dtype=float)
            return empty, empty, empty.astype(int), empty.astype(int)

        if not image.bbox.contains(self.bbox):
            msg = (f'Footprint {self.bbox!r} is not contained in the image '
                   f'{image.bbox!r}')
            raise ValueError(msg)

        xidx, yidx = self._pixel_coords
        iy = yidx - image.origin[1]
        ix = xidx - image.origin[0]
        return image.data[iy, ix], image.variance[iy, ix], xidx, yidx

    @lazyproperty
    def centroid(self):
        """
        The unweighted ``(x, y)`` centroid of the footprint pixels.
        """
        if self.is_empty:
            return np.array([np.nan, np.nan])

        xidx, yidx = self._pixel_coords
        return np.array([np.mean(xidx), np.mean(yidx)])

    @lazyproperty
    def shape(self):
        """
        The `~kronphot.aperture.EllipseAxes` defined by the unweighted
        second moments of the footprint pixel centers.
        """
        if self.is_empty:
            return EllipseAxes(0.0, 0.0)

        xidx, yidx = self._pixel_coords
        xcen, ycen = self.centroid
        dx = xidx - xcen
        dy = yidx - ycen
        ixx = np.mean(dx * dx)
        iyy = np.mean(dy * dy)
        ixy = np.mean(dx * dy)

        return EllipseAxes.from_quadrupole(float(ixx), float(iyy),
                                           float(ixy))
