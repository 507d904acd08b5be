# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
This module defines the configuration of the Kron photometry
measurement.
"""

import dataclasses
import math
from dataclasses import dataclass

import numpy as np

__all__ = ['KronConfig']


@dataclass(frozen=True)
class KronConfig:
    """
    Control parameters for the Kron photometry measurement.

    Instances are immutable. Use `replace` to create a modified copy.

    Parameters
    ----------
    smoothing_sigma : float, optional
        The standard deviation (in pixels) of the Gaussian used to
        smooth the image before measuring the Kron radius. Smoothing is
        disabled if ``smoothing_sigma <= 0``.

    n_iter_for_radius : int, optional
        The number of iterations used to refine the Kron radius.

    n_sigma_for_radius : float, optional
        The multiple of the current radius used to define the region
        over which the Kron radius is measured.

    minimum_radius : float, optional
        The minimum Kron radius. Disabled if zero.

    enforce_minimum_radius : bool, optional
        Whether to increase the Kron radius to ``minimum_radius`` (or to
        the PSF Kron radius if ``minimum_radius`` is zero) if it is
        smaller.

    fixed : bool, optional
        Whether to use the source's own shape as the Kron aperture
        instead of measuring the Kron radius.

    use_footprint_radius : bool, optional
        Whether to use the source footprint to set the initial radius
        if it is larger than the source shape.

    n_radius_for_flux : float, optional
        The multiple of the Kron radius used for the flux aperture.

    max_sinc_radius : float, optional
        The largest aperture semiminor axis (in pixels) for which the
        flux is measured with fractional pixel weights. Larger
        apertures are measured by summing whole pixels.

    subpixels : int, optional
        The resampling factor in each dimension used to compute the
        fractional pixel weights.
    """

    smoothing_sigma: float = -1.0
    n_iter_for_radius: int = 1
    n_sigma_for_radius: float = 6.0
    minimum_radius: float = 0.0
    enforce_minimum_radius: bool = True
    fixed: bool = False
    use_footprint_radius: bool = False
    n_radius_for_flux: float = 2.5
    max_sinc_radius: float = 10.0
    subpixels: int = 16

    def __post_init__(self):
        for name in ('smoothing_sigma', 'n_sigma_for_radius',
                     'minimum_radius', 'n_radius_for_flux',
                     'max_sinc_radius'):
            value = getattr(self, name)
            if (isinstance(value, bool)
                    or not isinstance(value, (int, float, np.number))
                    or not math.isfinite(value)):
                msg = f'{name!r} must be a finite scalar'
                raise ValueError(msg)

        for name in ('n_iter_for_radius', 'subpixels'):
            value = getattr(self, name)
            if (isinstance(value, bool)
                    or not isinstance(value, (int, np.integer))):
                msg = f'{name!r} must be an integer'
                raise TypeError(msg)

        if self.n_iter_for_radius < 0:
            raise ValueError("'n_iter_for_radius' must be >= 0")
        if self.subpixels <= 0:
            raise ValueError("'subpixels' must be a strictly positive "
                             'integer')
        if self.n_sigma_for_radius <= 0:
            raise ValueError("'n_sigma_for_radius' must be > 0")
        if self.n_radius_for_flux <= 0:
            raise ValueError("'n_radius_for_flux' must be > 0")
        if self.minimum_radius < 0:
            raise ValueError("'minimum_radius' must be >= 0")
        if self.max_sinc_radius < 0:
            raise ValueError("'max_sinc_radius' must be >= 0")

    def replace(self, **kwargs):
        """
        Return a copy of the configuration with the given values
        replaced.

        Parameters
        ----------
        **kwargs : dict
            The parameters to replace.

        Returns
        -------
        config : `KronConfig`
            The new configuration.
        """
        return dataclasses.replace(self, **kwargs)
