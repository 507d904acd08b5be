# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
kronphot is a package to measure the Kron radii and Kron fluxes of
astronomical sources in elliptical apertures.

It also has tools for forced Kron photometry with apertures transformed
from a reference image, and for the Kron radius of the PSF.
"""

try:
    from .version import version as __version__
except ImportError:
    __version__ = ''
