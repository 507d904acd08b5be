# Licensed under a 3-clause BSD style license - see LICENSE.rst
"""
Subpackage providing low-level geometry functions used by aperture
photometry to calculate the overlap of elliptical apertures with a
pixel grid.

These functions are not intended to be used directly by users, but
are used by the higher-level `kronphot.aperture` tools.
"""

from .elliptical_overlap import *  # noqa: F401, F403
