# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module defines the source and result records used by the Kron
photometry measurement.
"""

from dataclasses import dataclass

import numpy as np

from kronphot.aperture.attributes import PixelPosition
from kronphot.aperture.ellipse import EllipseAxes, EllipticalAperture
from kronphot.kron.flags import KRON_FLAGS, decode_kron_flags

__all__ = ['KronResult', 'KronSource']


def _flag_bit(flag):
    """
    Return the bit value of a flag given by name or bit value.
    """
    return KRON_FLAGS.get_definition(flag).bit_value


@dataclass
class KronResult:
    """
    The Kron measurement of a single source.

    A new result has all values set to `~numpy.nan` and the
    ``failure`` flag set.

    Attributes
    ----------
    flux : float
        The Kron flux.

    flux_err : float
        The 1-sigma uncertainty of the Kron flux.

    radius : float
        The Kron radius (the determinant radius of the Kron aperture).

    radius_for_radius : float
        The determinant radius of the ellipse used to measure the Kron
        radius.

    psf_radius : float
        The Kron radius of the PSF (`~numpy.nan` if the image has no
        PSF).

    flags : int
        The bit flags (see `~kronphot.kron.decode_kron_flags`).
    """

    flux: float = np.nan
    flux_err: float = np.nan
    radius: float = np.nan
    radius_for_radius: float = np.nan
    psf_radius: float = np.nan
    flags: int = KRON_FLAGS.FAILURE

    def set_flag(self, flag, value=True):
        """
        Set or clear a flag.

        Parameters
        ----------
        flag : str or int
            The flag name or bit value.

        value : bool, optional
            Whether to set (`True`) or clear (`False`) the flag.
        """
        bit = _flag_bit(flag)
        if value:
            self.flags |= bit
        else:
            self.flags &= ~bit

    def get_flag(self, flag):
        """
        Return whether a flag (name or bit value) is set.
        """
        return bool(self.flags & _flag_bit(flag))

    @property
    def failure(self):
        """
        Whether the ``failure`` flag is set.
        """
        return self.get_flag(KRON_FLAGS.FAILURE)

    @property
    def flag_names(self):
        """
        The names of the flags that are set.
        """
        return decode_kron_flags(self.flags)


class KronSource:
    """
    A source to be measured.

    The measurement writes its `KronResult` to the `kron` attribute.

    Parameters
    ----------
    centroid : tuple of float
        The ``(x, y)`` centroid of the source in absolute pixel
        coordinates.

    shape : `~kronphot.aperture.EllipseAxes`, optional
        The shape of the source (e.g., from its second moments). If
        `None`, the shape is considered bad.

    shape_flag : bool, optional
        Whether the shape measurement is flagged as bad.

    footprint : `~kronphot.aperture.Footprint`, optional
        The detection footprint of the source.

    id : int, optional
        The source identifier.
    """

    centroid = PixelPosition('The (x, y) centroid of the source.')

    def __init__(self, centroid, shape=None, shape_flag=False,
                 footprint=None, id=None):  # noqa: A002
        if shape is not None and not isinstance(shape, EllipseAxes):
            raise TypeError('shape must be an EllipseAxes instance')

        self.centroid = centroid
        self.shape = shape
        self.shape_flag = bool(shape_flag) or shape is None
        self.footprint = footprint
        self.id = id
        self.kron = None

    def __repr__(self):
        centroid = np.array2string(self.centroid, separator=', ')
        return (f'<{self.__class__.__name__}(id={self.id}, '
                f'centroid={centroid}, shape={self.shape!r}, '
                f'shape_flag={self.shape_flag})>')

    @classmethod
    def from_footprint(cls, image, footprint, id=None):  # noqa: A002
        """
        Create a source from the pixel values within a detection
        footprint.

        The centroid and shape are the flux-weighted first and second
        moments of the footprint pixels. The shape is flagged as bad if
        the total flux is not positive or the second moments are not
        positive definite.

        Parameters
        ----------
        image : `~kronphot.utils.PixelImage`
            The image.

        footprint : `~kronphot.aperture.Footprint`
            The detection footprint. It must be contained in the image.

        id : int, optional
            The source identifier.

        Returns
        -------
        source : `KronSource`
            The source.
        """
        if footprint.is_empty:
            raise ValueError('Cannot create a source from an empty footprint')

        data, _, xidx, yidx = footprint.get_values(image)
        total = np.sum(data)
        if not total > 0:
            return cls(footprint.centroid, shape=None, footprint=footprint,
                       id=id)

        xcen = np.sum(data * xidx) / total
        ycen = np.sum(data * yidx) / total
        dx = xidx - xcen
        dy = yidx - ycen
        ixx = np.sum(data * dx * dx) / total
        iyy = np.sum(data * dy * dy) / total
        ixy = np.sum(data * dx * dy) / total

        shape = None
        if ixx > 0 and iyy > 0 and ixx * iyy - ixy**2 > 0:
            shape = EllipseAxes.from_quadrupole(float(ixx), float(iyy),
                                                float(ixy))

        return cls((xcen, ycen), shape=shape, footprint=footprint, id=id)

    @property
    def aperture(self):
        """
        The `~kronphot.aperture.EllipticalAperture` defined by the
        source centroid and shape, or `None` if the source has no
        shape.
        """
        if self.shape is None:
            return None
        return EllipticalAperture.from_axes(self.centroid, self.shape)
